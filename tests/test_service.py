"""End-to-end tests for BenchmarkService."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from roi_benchmark.analytics import TimeBasis
from roi_benchmark.exceptions import DataValidationError
from roi_benchmark.ingestion import ComparisonFilters
from roi_benchmark.policy import DEFAULT_REGISTRY_PATH
from roi_benchmark.services import BenchmarkOutput, BenchmarkService

AS_OF = datetime(2024, 6, 1)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture(scope="module")
def service() -> BenchmarkService:
    return BenchmarkService()


@pytest.fixture
def records() -> list[dict]:
    """Five campaigns across four businesses, as the API sends them."""

    def campaign(cid, business_id, name, business_type, method, spent, earned,
                 start, end, latitude):
        return {
            "id": cid,
            "businessId": business_id,
            "businessName": name,
            "businessType": business_type,
            "adMethodId": method,
            "amountSpent": spent,
            "amountEarned": earned,
            "startDate": start,
            "endDate": end,
            "latitude": latitude,
            "longitude": -74.0060 if latitude is not None else None,
        }

    return [
        campaign(11, 1, "Alpha Cafe", "restaurant", 1, "1000.00", "2000.00",
                 "2024-01-01", "2024-01-31", 40.7128),
        campaign(21, 2, "Beta Salon", "salon", 1, "500.00", "1000.00",
                 "2024-02-01", "2024-02-11", 40.7228),
        campaign(22, 2, "Beta Salon", "salon", 2, "500.00", "500.00",
                 "2024-02-05", "2024-02-15", 40.7228),
        campaign(31, 3, "Gamma Gym", "fitness", 2, "0.00", "500.00",
                 "2024-03-01", None, 40.8128),
        campaign(41, 4, "Delta Deli", "restaurant", 1, "800.00", None,
                 "2024-04-01", "2024-04-08", None),
    ]


def ranked_ids(summary: dict) -> list[int]:
    return [r["businessId"] for r in summary["rankings"]]


# =============================================================================
# RANKING
# =============================================================================


class TestRankBusinesses:
    """Tests for rank_businesses() and generate_summary_dict()."""

    def test_returns_output(self, service: BenchmarkService, records: list[dict]) -> None:
        output = service.rank_businesses(records, target_business_id=2, as_of=AS_OF)
        assert isinstance(output, BenchmarkOutput)
        assert output.time_basis == TimeBasis.MONTHLY
        assert output.normalize is True
        assert output.target_rank == 2
        assert output.top_performer.business_id == 1
        assert output.pack is not None and output.pack.target_rank == 2

    def test_summary_contract(self, service: BenchmarkService, records: list[dict]) -> None:
        output = service.rank_businesses(records, target_business_id=2, as_of=AS_OF)
        summary = service.generate_summary_dict(output)

        assert ranked_ids(summary) == [1, 2, 3, 4]
        assert summary["targetRank"] == 2
        assert summary["topPerformer"]["businessId"] == 1

        beta = summary["rankings"][1]
        assert beta["rank"] == 2
        assert beta["normalizedROI"] == pytest.approx(75.0)
        assert beta["normalizedROAS"] == pytest.approx(2.25)
        assert beta["totalRevenue"] == pytest.approx(1500.0)
        assert beta["totalCost"] == pytest.approx(1000.0)
        assert beta["campaignCount"] == 2

    def test_summary_insights(self, service: BenchmarkService, records: list[dict]) -> None:
        output = service.rank_businesses(records, target_business_id=2, as_of=AS_OF)
        insights = service.generate_summary_dict(output)["insights"]

        assert [i["metric"] for i in insights] == ["roi", "spend", "revenue"]
        for insight in insights:
            assert {"percentDifference", "isFavorable", "recommendation"} <= set(insight)
        assert insights[0]["percentDifference"] == pytest.approx(-25.0)
        assert insights[0]["isFavorable"] is False
        assert insights[1]["isFavorable"] is True

    def test_summary_is_json_serializable(
        self, service: BenchmarkService, records: list[dict]
    ) -> None:
        output = service.rank_businesses(records, target_business_id=3, as_of=AS_OF)
        summary = json.loads(json.dumps(service.generate_summary_dict(output)))
        assert summary["asOf"] == "2024-06-01T00:00:00"
        assert summary["timeBasis"] == "monthly"

    def test_daily_basis(self, service: BenchmarkService, records: list[dict]) -> None:
        output = service.rank_businesses(
            records, target_business_id=1, time_basis="daily", as_of=AS_OF
        )
        summary = service.generate_summary_dict(output)
        assert summary["timeBasis"] == "daily"
        assert summary["rankings"][0]["normalizedROI"] == pytest.approx(100.0 / 30)

    def test_without_normalization(self, service: BenchmarkService, records: list[dict]) -> None:
        output = service.rank_businesses(
            records, target_business_id=1, normalize=False, as_of=AS_OF
        )
        values = [r.normalized_roi for r in output.ranking]
        assert values == pytest.approx([100.0, 50.0, 0.0, -100.0])

    def test_idempotent(self, service: BenchmarkService, records: list[dict]) -> None:
        first = service.rank_businesses(records, target_business_id=4, as_of=AS_OF)
        second = service.rank_businesses(records, target_business_id=4, as_of=AS_OF)
        assert service.generate_summary_dict(first) == service.generate_summary_dict(second)

    def test_empty_payload(self, service: BenchmarkService) -> None:
        output = service.rank_businesses([], target_business_id=1, as_of=AS_OF)
        summary = service.generate_summary_dict(output)
        assert summary["rankings"] == []
        assert summary["targetRank"] is None
        assert summary["topPerformer"] is None
        assert summary["insights"] == []

    def test_malformed_payload_rejected(
        self, service: BenchmarkService, records: list[dict]
    ) -> None:
        records[0]["amountSpent"] = "-10.00"
        with pytest.raises(DataValidationError):
            service.rank_businesses(records, target_business_id=1, as_of=AS_OF)

    def test_unvalidated_payload_passes_through(
        self, service: BenchmarkService, records: list[dict]
    ) -> None:
        records[4]["endDate"] = "2024-03-01"
        output = service.rank_businesses(
            records, target_business_id=4, as_of=AS_OF, validate=False
        )
        delta = next(r for r in output.ranking if r.business_id == 4)
        # Inverted flight counts as a single day
        assert delta.normalized_roi == pytest.approx(-100.0 * 30)

    def test_aware_as_of(self, service: BenchmarkService, records: list[dict]) -> None:
        """A tz-aware as-of time should rank running campaigns like its local equivalent."""
        aware = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        local = aware.astimezone().replace(tzinfo=None)

        output = service.rank_businesses(records, target_business_id=3, as_of=aware)
        expected = service.rank_businesses(records, target_business_id=3, as_of=local)

        assert output.as_of == local
        assert output.ranking == expected.ranking
        assert service.generate_summary_dict(output)["asOf"] == local.isoformat()


class TestComparisonSet:
    """Tests for filtered rankings."""

    def test_ad_method_filter(self, service: BenchmarkService, records: list[dict]) -> None:
        output = service.rank_businesses(
            records,
            target_business_id=3,
            filters=ComparisonFilters(ad_method_id=1),
            as_of=AS_OF,
        )
        summary = service.generate_summary_dict(output)
        assert ranked_ids(summary) == [2, 1, 4]
        assert summary["targetRank"] is None
        assert summary["insights"] == []

    def test_business_type_filter(self, service: BenchmarkService, records: list[dict]) -> None:
        output = service.rank_businesses(
            records,
            target_business_id=4,
            filters=ComparisonFilters(business_type="restaurant"),
            as_of=AS_OF,
        )
        assert [r.business_id for r in output.ranking] == [1, 4]
        assert output.target_rank == 2

    def test_radius_centered_on_target(
        self, service: BenchmarkService, records: list[dict]
    ) -> None:
        output = service.rank_businesses(
            records,
            target_business_id=1,
            filters=ComparisonFilters(radius_miles=3),
            as_of=AS_OF,
        )
        assert [r.business_id for r in output.ranking] == [1, 2]
        assert output.pack.filters["origin"] == (40.7128, -74.0060)

    def test_radius_skipped_without_target_coordinates(
        self, service: BenchmarkService, records: list[dict]
    ) -> None:
        output = service.rank_businesses(
            records,
            target_business_id=4,
            filters=ComparisonFilters(radius_miles=3),
            as_of=AS_OF,
        )
        assert len(output.ranking) == 4


class TestFileAndCampaigns:
    """Tests for file input and campaign comparison."""

    def test_rank_from_file(self, service: BenchmarkService, tmp_path: Path) -> None:
        path = tmp_path / "campaigns.csv"
        path.write_text(
            "businessId,adMethodId,amountSpent,amountEarned,startDate,endDate\n"
            "1,1,100.00,300.00,2024-01-01,2024-01-31\n"
            "2,1,100.00,150.00,2024-01-01,2024-01-31\n"
        )
        output = service.rank_from_file(path, target_business_id=2, as_of=AS_OF)
        assert output.target_rank == 2
        assert output.top_performer.normalized_roi == pytest.approx(200.0)

    def test_compare_campaigns(self, service: BenchmarkService, records: list[dict]) -> None:
        df = service.pipeline.ingest_records(records)
        insights = service.compare_campaigns(df, 21, 41, as_of=AS_OF)
        assert [i.rule_id for i in insights] == [
            "roi_gap",
            "spending_efficiency",
            "campaign_duration",
            "campaign_timing",
        ]
        assert insights[0].metrics["roi_gap"] == pytest.approx(200.0)

    def test_compare_running_campaign_with_aware_as_of(
        self, service: BenchmarkService, records: list[dict]
    ) -> None:
        df = service.pipeline.ingest_records(records)
        aware = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        local = aware.astimezone().replace(tzinfo=None)
        duration = service.compare_campaigns(df, 31, 41, as_of=aware)[2]
        assert duration.metrics == service.compare_campaigns(df, 31, 41, as_of=local)[2].metrics
        assert duration.metrics["reference_days"] == 7

    def test_compare_uses_policy_minimum_duration(
        self, tmp_path: Path, records: list[dict]
    ) -> None:
        registry = tmp_path / "registry.yaml"
        registry.write_text(
            DEFAULT_REGISTRY_PATH.read_text()
            .replace("min_duration_days: 1", "min_duration_days: 14")
        )
        service = BenchmarkService(registry)
        df = service.pipeline.ingest_records(records)
        duration = service.compare_campaigns(df, 21, 41, as_of=AS_OF)[2]
        assert duration.metrics == {"subject_days": 14, "reference_days": 14}

    def test_compare_unknown_campaign(
        self, service: BenchmarkService, records: list[dict]
    ) -> None:
        df = service.pipeline.ingest_records(records)
        with pytest.raises(ValueError, match="not found"):
            service.compare_campaigns(df, 21, 999)

    def test_available_businesses(self, service: BenchmarkService, records: list[dict]) -> None:
        df = service.pipeline.ingest_records(records)
        businesses = service.get_available_businesses(df)
        assert [b["business_id"] for b in businesses] == [1, 2, 3, 4]
        assert businesses[1] == {
            "business_id": 2,
            "business_name": "Beta Salon",
            "business_type": "salon",
        }
