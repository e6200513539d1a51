"""Output models for benchmark calculations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TimeBasis(str, Enum):
    """Cadence that normalized ROI/ROAS is expressed in."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL = "all"  # Raw accumulated values

    @property
    def days(self) -> int | None:
        """Number of days in one period, or None for raw values."""
        return _BASIS_DAYS[self]


_BASIS_DAYS: dict[TimeBasis, int | None] = {
    TimeBasis.DAILY: 1,
    TimeBasis.WEEKLY: 7,
    TimeBasis.MONTHLY: 30,
    TimeBasis.ALL: None,
}


class MetricFamily(str, Enum):
    """Metrics a subject business is benchmarked on."""

    ROI = "roi"
    SPEND = "spend"
    REVENUE = "revenue"

    @property
    def display_name(self) -> str:
        return {
            MetricFamily.ROI: "ROI",
            MetricFamily.SPEND: "Ad Spend",
            MetricFamily.REVENUE: "Revenue Generated",
        }[self]


class Severity(str, Enum):
    """Insight severity levels."""

    GREEN = "green"  # Good / On track
    AMBER = "amber"  # Warning / Needs attention
    RED = "red"  # Critical / Action required


class TieBreak(str, Enum):
    """Ordering among businesses with equal normalized ROI."""

    INPUT_ORDER = "input_order"  # Stable sort, upstream order wins
    BUSINESS_ID = "business_id"  # Lower business_id first


@dataclass(frozen=True)
class BusinessAggregate:
    """Spend, revenue and duration totals for one business."""

    business_id: int
    business_name: str | None
    business_type: str | None
    total_spent: float
    total_revenue: float
    total_duration_days: int  # Sum of campaign durations, overlaps counted twice
    campaign_count: int
    roi: float  # Percentage
    roas: float  # Multiplier
    campaigns: tuple[dict[str, Any], ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class NormalizedAggregate:
    """BusinessAggregate rescaled to a common time basis."""

    aggregate: BusinessAggregate
    time_basis: TimeBasis
    normalized: bool
    normalized_roi: float
    normalized_roas: float

    @property
    def business_id(self) -> int:
        return self.aggregate.business_id

    @property
    def business_name(self) -> str | None:
        return self.aggregate.business_name

    @property
    def total_spent(self) -> float:
        return self.aggregate.total_spent

    @property
    def total_revenue(self) -> float:
        return self.aggregate.total_revenue

    @property
    def campaign_count(self) -> int:
        return self.aggregate.campaign_count


@dataclass(frozen=True)
class RankedBusiness:
    """Single row of the output ranking."""

    rank: int  # 1-based
    business_id: int
    business_name: str | None
    normalized_roi: float
    normalized_roas: float
    total_revenue: float
    total_cost: float
    campaign_count: int


@dataclass(frozen=True)
class ComparisonInsight:
    """Subject vs. reference comparison for one metric family."""

    metric: MetricFamily
    subject_value: float
    reference_value: float
    average_value: float | None  # Peer average, None without peers
    percent_difference: float
    is_favorable: bool
    severity: Severity
    recommendation: str

    @property
    def label(self) -> str:
        """Short badge text, e.g. '25.0% better'."""
        if self.percent_difference == 0:
            return "Same as top"
        direction = "better" if self.is_favorable else "lower"
        return f"{abs(self.percent_difference):.1f}% {direction}"
