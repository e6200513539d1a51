"""Benchmark service - orchestrates ingestion, filtering and ranking."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any

import polars as pl

from ..analytics import (
    BenchmarkEngine,
    ComparisonInsight,
    Insight,
    InsightDeriver,
    NormalizedAggregate,
    RankedBusiness,
    TimeBasis,
)
from ..analytics.metrics import as_naive_datetime
from ..ingestion import CampaignIngestionPipeline, ComparisonFilters, apply_filters
from ..logging_config import get_logger
from ..models.benchmark_pack import BenchmarkPack
from ..policy import BenchmarkPolicy, load_policy

logger = get_logger(__name__)


@dataclass
class BenchmarkOutput:
    """Consolidated output from one ranking request."""

    target_business_id: int
    time_basis: TimeBasis
    normalize: bool
    as_of: datetime
    ranking: list[RankedBusiness]
    target_rank: int | None
    top_performer: NormalizedAggregate | None
    insights: list[ComparisonInsight] = field(default_factory=list)
    pack: BenchmarkPack | None = None


class BenchmarkService:
    """Service for ranking a business against its comparison set.

    Orchestrates:
    1. Ingestion of campaign records (API payload or file)
    2. Comparison-set filters (business type, ad method, radius)
    3. Aggregate -> normalize -> rank -> insights
    4. Returning consolidated output

    Usage:
        service = BenchmarkService()
        output = service.rank_businesses(
            records=payload,
            target_business_id=7,
            time_basis="weekly",
        )
        summary = service.generate_summary_dict(output)
    """

    def __init__(self, registry_path: Path | None = None):
        """Initialize service with registry configuration.

        Args:
            registry_path: Path to benchmark_registry.yaml. Defaults to bundled config.
        """
        self.pipeline = CampaignIngestionPipeline(registry_path)
        self.policy: BenchmarkPolicy = load_policy(registry_path)

    # =========================================================================
    # RANKING
    # =========================================================================

    def rank_businesses(
        self,
        records: list[dict[str, Any]],
        target_business_id: int,
        time_basis: TimeBasis | str | None = None,
        normalize: bool | None = None,
        filters: ComparisonFilters | None = None,
        as_of: datetime | None = None,
        validate: bool = True,
    ) -> BenchmarkOutput:
        """Rank businesses from API payload records.

        Args:
            records: Campaign dicts with camelCase keys
            target_business_id: Business the ranking card is built for
            time_basis: daily/weekly/monthly/all (default from policy)
            normalize: Time-normalize ROI/ROAS (default from policy)
            filters: Comparison-set filters (default: all campaigns)
            as_of: Reference time for running campaigns (default: now)
            validate: Whether to run Pydantic validation (default: True)

        Returns:
            BenchmarkOutput for the target business

        Raises:
            DataValidationError: If validation is on and any record is malformed
        """
        df = self.pipeline.ingest_records(records, validate=validate)
        return self.rank_frame(df, target_business_id, time_basis, normalize, filters, as_of)

    def rank_from_file(
        self,
        file_path: Path,
        target_business_id: int,
        time_basis: TimeBasis | str | None = None,
        normalize: bool | None = None,
        filters: ComparisonFilters | None = None,
        as_of: datetime | None = None,
        validate: bool = True,
    ) -> BenchmarkOutput:
        """Same as rank_businesses, reading campaigns from a CSV/Excel/JSON file."""
        df = self.pipeline.ingest(file_path, validate=validate)
        return self.rank_frame(df, target_business_id, time_basis, normalize, filters, as_of)

    def rank_frame(
        self,
        df: pl.DataFrame,
        target_business_id: int,
        time_basis: TimeBasis | str | None = None,
        normalize: bool | None = None,
        filters: ComparisonFilters | None = None,
        as_of: datetime | None = None,
    ) -> BenchmarkOutput:
        """Rank businesses from an already ingested campaign frame."""
        as_of = as_naive_datetime(as_of or datetime.now())
        time_basis = TimeBasis(time_basis or self.policy.default_time_basis)
        normalize = self.policy.normalize if normalize is None else normalize

        filters = self._resolve_origin(df, filters, target_business_id)
        comparison_set = apply_filters(df, filters)

        engine = BenchmarkEngine(
            df=comparison_set,
            as_of=as_of,
            time_basis=time_basis,
            normalize=normalize,
            min_duration_days=self.policy.min_duration_days,
            tie_break=self.policy.tie_break,
            thresholds=self.policy.thresholds,
        )

        ranking = engine.get_ranking()
        target_rank = engine.get_rank(target_business_id)
        pack = engine.get_benchmark_pack(
            target_business_id, filters=filters.to_dict() if filters else None
        )

        logger.info(
            "businesses_ranked",
            target_business_id=target_business_id,
            target_rank=target_rank,
            businesses=len(ranking),
            campaigns=len(comparison_set),
            filtered_out=len(df) - len(comparison_set),
            time_basis=time_basis.value,
            normalize=normalize,
        )

        return BenchmarkOutput(
            target_business_id=target_business_id,
            time_basis=time_basis,
            normalize=normalize,
            as_of=engine.as_of,
            ranking=ranking,
            target_rank=target_rank,
            top_performer=engine.get_top_performer(),
            insights=engine.get_comparison_insights(target_business_id),
            pack=pack,
        )

    def _resolve_origin(
        self,
        df: pl.DataFrame,
        filters: ComparisonFilters | None,
        target_business_id: int,
    ) -> ComparisonFilters | None:
        """Center a radius filter on the target business when no origin is given."""
        if filters is None or filters.radius_miles is None or filters.origin is not None:
            return filters

        located = df.filter(
            (pl.col("business_id") == target_business_id)
            & pl.col("latitude").is_not_null()
            & pl.col("longitude").is_not_null()
        )
        if located.is_empty():
            logger.warning(
                "radius_filter_skipped",
                target_business_id=target_business_id,
                reason="target business has no coordinates",
            )
            return replace(filters, radius_miles=None)

        row = located.row(0, named=True)
        return replace(filters, origin=(row["latitude"], row["longitude"]))

    # =========================================================================
    # CAMPAIGN VS CAMPAIGN
    # =========================================================================

    def compare_campaigns(
        self,
        df: pl.DataFrame,
        subject_campaign_id: int,
        reference_campaign_id: int,
        as_of: datetime | None = None,
    ) -> list[Insight]:
        """Explain what differentiates two individual campaigns.

        Raises:
            ValueError: If either campaign id is not in the data
        """
        available = df["campaign_id"].drop_nulls().to_list()
        missing = [
            cid for cid in (subject_campaign_id, reference_campaign_id) if cid not in available
        ]
        if missing:
            raise ValueError(f"Campaign ID(s) {missing} not found. Available: {sorted(available)}")

        subject = df.filter(pl.col("campaign_id") == subject_campaign_id).row(0, named=True)
        reference = df.filter(pl.col("campaign_id") == reference_campaign_id).row(0, named=True)

        deriver = InsightDeriver(self.policy.thresholds)
        return deriver.compare_campaigns(
            subject,
            reference,
            as_naive_datetime(as_of or datetime.now()),
            min_days=self.policy.min_duration_days,
        )

    def get_available_businesses(self, df: pl.DataFrame) -> list[dict[str, Any]]:
        """Businesses present in an ingested frame, by id.

        Returns:
            List of {business_id, business_name, business_type}
        """
        if df.is_empty():
            return []
        return (
            df.group_by("business_id")
            .agg(
                pl.col("business_name").drop_nulls().first(),
                pl.col("business_type").drop_nulls().first(),
            )
            .sort("business_id")
            .to_dicts()
        )

    # =========================================================================
    # OUTPUT CONTRACT
    # =========================================================================

    def generate_summary_dict(self, output: BenchmarkOutput) -> dict[str, Any]:
        """Convert BenchmarkOutput to the JSON-serializable output contract.

        Args:
            output: BenchmarkOutput from rank_businesses()

        Returns:
            Dictionary with rankings, targetRank, topPerformer and insights
        """
        top = output.top_performer
        return {
            "targetBusinessId": output.target_business_id,
            "timeBasis": output.time_basis.value,
            "normalize": output.normalize,
            "asOf": output.as_of.isoformat(),
            "rankings": [
                {
                    "businessId": r.business_id,
                    "businessName": r.business_name,
                    "rank": r.rank,
                    "normalizedROI": r.normalized_roi,
                    "normalizedROAS": r.normalized_roas,
                    "totalRevenue": r.total_revenue,
                    "totalCost": r.total_cost,
                    "campaignCount": r.campaign_count,
                }
                for r in output.ranking
            ],
            "targetRank": output.target_rank,
            "topPerformer": (
                {
                    "businessId": top.business_id,
                    "businessName": top.business_name,
                    "normalizedROI": top.normalized_roi,
                    "normalizedROAS": top.normalized_roas,
                    "totalRevenue": top.total_revenue,
                    "totalCost": top.total_spent,
                    "campaignCount": top.campaign_count,
                }
                if top
                else None
            ),
            "insights": InsightDeriver().to_dict(output.insights),
        }
