"""Tests for benchmark and campaign-comparison insights."""

from datetime import date, datetime

import pytest

from roi_benchmark.analytics import (
    ComparisonInsight,
    Insight,
    InsightDeriver,
    InsightThresholds,
    MetricFamily,
    RecommendationBand,
    Severity,
    is_favorable,
    percent_difference,
)
from roi_benchmark.policy import load_policy

AS_OF = datetime(2024, 6, 1)


@pytest.fixture
def deriver() -> InsightDeriver:
    return InsightDeriver(InsightThresholds())


# =============================================================================
# FORMULAS
# =============================================================================


class TestPercentDifference:
    """Tests for percent_difference() and metric polarity."""

    def test_basic(self) -> None:
        assert percent_difference(125.0, 100.0) == pytest.approx(25.0)
        assert percent_difference(75.0, 100.0) == pytest.approx(-25.0)

    def test_zero_reference(self) -> None:
        assert percent_difference(50.0, 0.0) == 0.0

    @pytest.mark.parametrize(
        "subject,reference",
        [(800.0, 1000.0), (1000.0, 1000.0), (1200.0, 1000.0), (0.0, 10.0)],
    )
    def test_polarity(self, subject: float, reference: float) -> None:
        """Lower spend is favorable; higher ROI and revenue are favorable."""
        assert is_favorable(MetricFamily.SPEND, subject, reference) == (subject <= reference)
        assert is_favorable(MetricFamily.ROI, subject, reference) == (subject >= reference)
        assert is_favorable(MetricFamily.REVENUE, subject, reference) == (subject >= reference)


# =============================================================================
# BENCHMARK INSIGHTS
# =============================================================================


class TestDeriveMetric:
    """Tests for InsightDeriver.derive_metric()."""

    def test_spending_less_than_top(self, deriver: InsightDeriver) -> None:
        """$800 vs $1000 should be 25% and favorable."""
        result = deriver.derive_metric(MetricFamily.SPEND, 800.0, 1000.0)
        assert isinstance(result, ComparisonInsight)
        assert result.percent_difference == pytest.approx(25.0)
        assert result.is_favorable is True
        assert result.severity == Severity.AMBER

    def test_spending_far_more_than_top(self, deriver: InsightDeriver) -> None:
        result = deriver.derive_metric(MetricFamily.SPEND, 1500.0, 1000.0)
        assert result.percent_difference == pytest.approx(-33.333, rel=1e-4)
        assert result.is_favorable is False
        assert result.severity == Severity.RED

    def test_spend_in_line(self, deriver: InsightDeriver) -> None:
        result = deriver.derive_metric(MetricFamily.SPEND, 1100.0, 1000.0)
        assert result.severity == Severity.GREEN

    @pytest.mark.parametrize(
        "subject,severity",
        [(70.0, Severity.RED), (80.0, Severity.AMBER), (95.0, Severity.AMBER), (100.0, Severity.GREEN)],
    )
    def test_roi_bands(self, deriver: InsightDeriver, subject: float, severity: Severity) -> None:
        """-20% exactly is not 'below -20', so it falls to the amber band."""
        assert deriver.derive_metric(MetricFamily.ROI, subject, 100.0).severity == severity

    @pytest.mark.parametrize(
        "subject,severity",
        [(60.0, Severity.RED), (70.0, Severity.AMBER), (120.0, Severity.GREEN)],
    )
    def test_revenue_bands(
        self, deriver: InsightDeriver, subject: float, severity: Severity
    ) -> None:
        assert deriver.derive_metric(MetricFamily.REVENUE, subject, 100.0).severity == severity

    @pytest.mark.parametrize("difference,severity", [(20.0, Severity.GREEN), (50.0, Severity.AMBER)])
    def test_spend_band_bounds_are_strict(
        self, deriver: InsightDeriver, difference: float, severity: Severity
    ) -> None:
        assert deriver.recommendation_band(MetricFamily.SPEND, difference).severity == severity

    def test_zero_reference_is_same_as_top(self, deriver: InsightDeriver) -> None:
        result = deriver.derive_metric(MetricFamily.REVENUE, 250.0, 0.0)
        assert result.percent_difference == 0.0
        assert result.label == "Same as top"

    def test_negative_reference_keeps_formula_sign(self, deriver: InsightDeriver) -> None:
        """-10% vs a -5% top is +100% by formula, while polarity still says unfavorable."""
        result = deriver.derive_metric(MetricFamily.ROI, -10.0, -5.0)
        assert result.percent_difference == pytest.approx(100.0)
        assert result.is_favorable is False
        assert result.severity == Severity.GREEN
        assert result.label == "100.0% lower"

    def test_labels(self, deriver: InsightDeriver) -> None:
        assert deriver.derive_metric(MetricFamily.SPEND, 800.0, 1000.0).label == "25.0% better"
        assert deriver.derive_metric(MetricFamily.ROI, 87.66, 100.0).label == "12.3% lower"

    def test_to_dict(self, deriver: InsightDeriver) -> None:
        insight = deriver.derive_metric(MetricFamily.REVENUE, 1500.0, 2000.0, 900.0)
        (row,) = deriver.to_dict([insight])
        assert row == {
            "metric": "revenue",
            "metricName": "Revenue Generated",
            "label": "25.0% lower",
            "yourValue": 1500.0,
            "topValue": 2000.0,
            "averageValue": 900.0,
            "percentDifference": pytest.approx(-25.0),
            "isFavorable": False,
            "severity": "amber",
            "recommendation": insight.recommendation,
        }


class TestThresholds:
    """Tests for InsightThresholds and RecommendationBand."""

    def test_open_band_matches_everything(self) -> None:
        band = RecommendationBand(Severity.GREEN, "ok")
        assert band.matches(-1e9)
        assert band.matches(1e9)

    def test_bounded_band(self) -> None:
        band = RecommendationBand(Severity.AMBER, "mid", above=-10, below=10)
        assert band.matches(0)
        assert not band.matches(10)
        assert not band.matches(-10)

    def test_from_dict_overrides_one_metric(self) -> None:
        thresholds = InsightThresholds.from_dict(
            {
                "roi": [
                    {"below": 0, "severity": "red", "text": "Fix it"},
                    {"severity": "green", "text": "  Looks\n  fine  "},
                ]
            }
        )
        assert [b.severity for b in thresholds.roi] == [Severity.RED, Severity.GREEN]
        assert thresholds.roi[1].text == "Looks fine"
        assert thresholds.spend == InsightThresholds().spend

    def test_registry_matches_defaults(self) -> None:
        """Bundled registry bands should mirror the code defaults."""
        policy = load_policy()
        defaults = InsightThresholds()
        for metric in MetricFamily:
            loaded = policy.thresholds.bands_for(metric)
            expected = defaults.bands_for(metric)
            assert [(b.severity, b.above, b.below) for b in loaded] == [
                (b.severity, b.above, b.below) for b in expected
            ]

    def test_no_matching_band_raises(self) -> None:
        deriver = InsightDeriver(
            InsightThresholds(roi=(RecommendationBand(Severity.RED, "low", below=0),))
        )
        with pytest.raises(ValueError, match="No recommendation band"):
            deriver.derive_metric(MetricFamily.ROI, 120.0, 100.0)


# =============================================================================
# CAMPAIGN VS CAMPAIGN
# =============================================================================


@pytest.fixture
def subject_campaign() -> dict:
    """$500 -> $1000 over 10 days in February (ROI 100%)."""
    return {
        "campaign_id": 21,
        "amount_spent": 500.0,
        "amount_earned": 1000.0,
        "start_date": date(2024, 2, 1),
        "end_date": date(2024, 2, 11),
    }


@pytest.fixture
def reference_campaign() -> dict:
    """$1000 -> $1500 over 30 days in April (ROI 50%)."""
    return {
        "campaign_id": 41,
        "amount_spent": 1000.0,
        "amount_earned": 1500.0,
        "start_date": date(2024, 4, 10),
        "end_date": date(2024, 5, 10),
    }


class TestCompareCampaigns:
    """Tests for InsightDeriver.compare_campaigns()."""

    def test_rule_order(
        self, deriver: InsightDeriver, subject_campaign: dict, reference_campaign: dict
    ) -> None:
        result = deriver.compare_campaigns(subject_campaign, reference_campaign, AS_OF)
        assert all(isinstance(i, Insight) for i in result)
        assert [i.rule_id for i in result] == [
            "roi_gap",
            "spending_efficiency",
            "campaign_duration",
            "campaign_timing",
        ]

    def test_subject_ahead(
        self, deriver: InsightDeriver, subject_campaign: dict, reference_campaign: dict
    ) -> None:
        roi_gap, spending, duration, timing = deriver.compare_campaigns(
            subject_campaign, reference_campaign, AS_OF
        )
        assert roi_gap.severity == Severity.GREEN
        assert roi_gap.metrics["roi_gap"] == pytest.approx(50.0)
        assert "increasing budget" in roi_gap.recommendation

        assert spending.severity == Severity.GREEN
        assert spending.metrics["savings_pct"] == pytest.approx(50.0)

        assert duration.metrics == {"subject_days": 10, "reference_days": 30}
        assert duration.severity == Severity.GREEN

        assert timing.severity == Severity.AMBER
        assert timing.metrics["month_difference"] == 2
        assert "2 months apart" in timing.description

    def test_subject_behind(
        self, deriver: InsightDeriver, subject_campaign: dict, reference_campaign: dict
    ) -> None:
        roi_gap, spending, _, _ = deriver.compare_campaigns(
            reference_campaign, subject_campaign, AS_OF
        )
        assert roi_gap.severity == Severity.AMBER
        assert roi_gap.metrics["roi_gap"] == pytest.approx(-50.0)
        assert spending.severity == Severity.RED

    def test_same_month_and_running_campaign(
        self, deriver: InsightDeriver, subject_campaign: dict
    ) -> None:
        running = {**subject_campaign, "start_date": date(2024, 2, 20), "end_date": None}
        _, _, duration, timing = deriver.compare_campaigns(subject_campaign, running, AS_OF)
        assert duration.metrics["reference_days"] == (AS_OF.date() - date(2024, 2, 20)).days
        assert timing.severity == Severity.GREEN
        assert timing.metrics["month_difference"] == 0

    def test_minimum_duration_applied(
        self, deriver: InsightDeriver, subject_campaign: dict, reference_campaign: dict
    ) -> None:
        _, _, duration, _ = deriver.compare_campaigns(
            subject_campaign, reference_campaign, AS_OF, min_days=45
        )
        assert duration.metrics == {"subject_days": 45, "reference_days": 45}
        assert "same duration of 45 days" in duration.description

    def test_missing_revenue(self, deriver: InsightDeriver, subject_campaign: dict) -> None:
        no_revenue = {**subject_campaign, "amount_earned": None}
        roi_gap = deriver.compare_campaigns(no_revenue, subject_campaign, AS_OF)[0]
        assert roi_gap.metrics["subject_roi"] == pytest.approx(-100.0)
