"""Benchmark Engine - runs the aggregate, normalize, rank, compare pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from functools import cached_property

import polars as pl

from ..logging_config import get_logger
from ..models.benchmark_pack import BenchmarkPack
from .aggregator import REQUIRED_COLUMNS, aggregate_by_business
from .insights import InsightDeriver, InsightThresholds
from .metrics import as_naive_datetime
from .models import (
    BusinessAggregate,
    ComparisonInsight,
    NormalizedAggregate,
    RankedBusiness,
    TieBreak,
    TimeBasis,
)
from .normalizer import normalize_all
from .ranker import Ranker

logger = get_logger(__name__)


@dataclass
class BenchmarkEngine:
    """Benchmark calculator for one comparison set and one time basis.

    Every result is derived from `df` and the settings below; the input
    DataFrame is never mutated. Results are cached per engine instance, so
    build a new engine when filters or the time basis change.

    Attributes:
        df: Cleaned campaign records for the comparison set
        as_of: Reference "now" for campaigns without an end date
        time_basis: Cadence for normalized ROI/ROAS (default monthly)
        normalize: Whether to time-normalize at all (default True)
        min_duration_days: Minimum days credited per campaign (default 1)
        tie_break: Ordering among equal normalized ROI
        thresholds: Recommendation threshold tables
    """

    df: pl.DataFrame
    as_of: datetime
    time_basis: TimeBasis = TimeBasis.MONTHLY
    normalize: bool = True
    min_duration_days: int = 1
    tie_break: TieBreak = TieBreak.INPUT_ORDER
    thresholds: InsightThresholds = field(default_factory=InsightThresholds)

    def __post_init__(self) -> None:
        """Validate input DataFrame has required columns."""
        missing = REQUIRED_COLUMNS - set(self.df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        self.as_of = as_naive_datetime(self.as_of)
        self.time_basis = TimeBasis(self.time_basis)
        self.tie_break = TieBreak(self.tie_break)

    # =========================================================================
    # PIPELINE STAGES
    # =========================================================================

    @cached_property
    def business_aggregates(self) -> list[BusinessAggregate]:
        """Per-business totals, in order of first appearance."""
        return aggregate_by_business(self.df, self.as_of, self.min_duration_days)

    @cached_property
    def normalized_aggregates(self) -> list[NormalizedAggregate]:
        return normalize_all(self.business_aggregates, self.time_basis, self.normalize)

    @cached_property
    def ranker(self) -> Ranker:
        ranker = Ranker(self.normalized_aggregates, tie_break=self.tie_break)
        logger.debug(
            "ranking_computed",
            businesses=len(ranker),
            campaigns=len(self.df),
            time_basis=self.time_basis.value,
            normalize=self.normalize,
        )
        return ranker

    # =========================================================================
    # RANKING
    # =========================================================================

    def get_ranking(self) -> list[RankedBusiness]:
        """Full ranking, best normalized ROI first."""
        return self.ranker.ranked_businesses()

    def get_rank(self, business_id: int) -> int | None:
        return self.ranker.rank(business_id)

    def get_top_performer(self) -> NormalizedAggregate | None:
        return self.ranker.top_performer()

    # =========================================================================
    # INSIGHTS
    # =========================================================================

    def get_comparison_insights(
        self,
        subject_id: int,
        reference_id: int | None = None,
    ) -> list[ComparisonInsight]:
        """Benchmark a business against the top performer or a chosen peer.

        Args:
            subject_id: Business being benchmarked
            reference_id: Comparison business (default: top performer)

        Returns:
            ROI, spend and revenue insights, or an empty list when either
            business is missing from the comparison set.
        """
        subject = self.ranker.get(subject_id)
        reference = (
            self.ranker.top_performer()
            if reference_id is None
            else self.ranker.get(reference_id)
        )
        if subject is None or reference is None:
            return []

        peers = [a for a in self.ranker if a.business_id != subject_id]
        deriver = InsightDeriver(self.thresholds)
        return deriver.derive(subject, reference, peers)

    # =========================================================================
    # BENCHMARK PACK (CONSOLIDATED OUTPUT)
    # =========================================================================

    def get_benchmark_pack(
        self,
        target_business_id: int,
        filters: dict | None = None,
    ) -> BenchmarkPack:
        """Package ranking and insights for one target business."""
        ranking = self.get_ranking()
        top = self.get_top_performer()
        insights = self.get_comparison_insights(target_business_id)

        target = self.ranker.get(target_business_id)
        campaign_dates = self.df["start_date"].drop_nulls()

        return BenchmarkPack(
            generated_at=datetime.now(),
            as_of=self.as_of,
            target_business_id=target_business_id,
            time_basis=self.time_basis.value,
            normalize=self.normalize,
            filters=filters or {},
            date_range=(
                (campaign_dates.min(), campaign_dates.max())
                if len(campaign_dates) > 0
                else None
            ),
            total_businesses=len(ranking),
            total_campaigns=len(self.df),
            rankings=[
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
                for r in ranking
            ],
            target_rank=self.get_rank(target_business_id),
            target_percentile=self.ranker.percentile(target_business_id),
            target_roi=target.aggregate.roi if target else None,
            target_normalized_roi=target.normalized_roi if target else None,
            top_performer=(
                {
                    "businessId": top.business_id,
                    "businessName": top.business_name,
                    "normalizedROI": top.normalized_roi,
                    "normalizedROAS": top.normalized_roas,
                }
                if top
                else None
            ),
            insights=InsightDeriver(self.thresholds).to_dict(insights),
        )
