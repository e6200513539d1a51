"""Rule-based comparative insights for benchmark results."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from . import metrics
from .models import ComparisonInsight, MetricFamily, NormalizedAggregate, Severity
from .stats import peer_average


@dataclass(frozen=True)
class Insight:
    """Single insight with description, severity, and recommendation."""

    rule_id: str
    description: str
    severity: Severity
    recommendation: str
    metrics: dict[str, Any] | None = None


@dataclass(frozen=True)
class RecommendationBand:
    """One row of a metric's threshold table.

    Matches values strictly above `above` and strictly below `below`.
    A None bound is open.
    """

    severity: Severity
    text: str
    above: float | None = None
    below: float | None = None

    def matches(self, value: float) -> bool:
        if self.above is not None and not value > self.above:
            return False
        if self.below is not None and not value < self.below:
            return False
        return True


def _default_roi_bands() -> tuple[RecommendationBand, ...]:
    return (
        RecommendationBand(
            Severity.RED,
            "Your ROI is significantly lower than top competitors. Consider reviewing "
            "your advertising strategy and focus on higher-converting channels.",
            below=-20,
        ),
        RecommendationBand(
            Severity.AMBER,
            "Your ROI is slightly below top performers. Look for opportunities to "
            "optimize campaigns and reduce underperforming ad spend.",
            below=0,
        ),
        RecommendationBand(
            Severity.GREEN,
            "Your ROI is competitive. Keep monitoring performance and consider sharing "
            "your successful strategies across all campaigns.",
        ),
    )


def _default_spend_bands() -> tuple[RecommendationBand, ...]:
    return (
        RecommendationBand(
            Severity.AMBER,
            "Top competitors are spending significantly more on advertising. Consider "
            "increasing ad budget or focusing on more efficient channels for better "
            "market presence.",
            above=50,
        ),
        RecommendationBand(
            Severity.AMBER,
            "Your ad spend is moderately lower than top performers. Evaluate if "
            "increasing budget in targeted channels could improve results.",
            above=20,
        ),
        RecommendationBand(
            Severity.RED,
            "You're spending more than competitors with potentially lower returns. "
            "Focus on improving campaign efficiency rather than increasing spend.",
            below=-20,
        ),
        RecommendationBand(
            Severity.GREEN,
            "Your ad spend is in line with top performers. Keep monitoring spend "
            "efficiency as budgets change.",
        ),
    )


def _default_revenue_bands() -> tuple[RecommendationBand, ...]:
    return (
        RecommendationBand(
            Severity.RED,
            "Your revenue generation is significantly behind competitors. Consider "
            "adopting strategies that focus on higher-value customers or sales "
            "conversion optimization.",
            below=-30,
        ),
        RecommendationBand(
            Severity.AMBER,
            "You have potential to increase revenue based on competitor benchmarks. "
            "Analyze which ad methods drive the most revenue for your competitors.",
            below=0,
        ),
        RecommendationBand(
            Severity.GREEN,
            "Your revenue is competitive with top performers. Keep investing in the "
            "ad methods that drive it.",
        ),
    )


@dataclass
class InsightThresholds:
    """Threshold tables for benchmark recommendations.

    Values are percent differences (25.0 = 25%). For spend the difference is
    how much more the reference spent than the subject.
    """

    roi: tuple[RecommendationBand, ...] = field(default_factory=_default_roi_bands)
    spend: tuple[RecommendationBand, ...] = field(default_factory=_default_spend_bands)
    revenue: tuple[RecommendationBand, ...] = field(default_factory=_default_revenue_bands)

    def bands_for(self, metric: MetricFamily) -> tuple[RecommendationBand, ...]:
        return getattr(self, MetricFamily(metric).value)

    @classmethod
    def from_dict(cls, data: dict[str, list[dict[str, Any]]]) -> "InsightThresholds":
        """Build thresholds from the registry's `recommendations` mapping.

        Metrics missing from data keep their defaults.
        """
        overrides: dict[str, tuple[RecommendationBand, ...]] = {}
        for metric in MetricFamily:
            rows = data.get(metric.value)
            if not rows:
                continue
            overrides[metric.value] = tuple(
                RecommendationBand(
                    severity=Severity(row["severity"]),
                    text=" ".join(str(row["text"]).split()),
                    above=row.get("above"),
                    below=row.get("below"),
                )
                for row in rows
            )
        return cls(**overrides)


def percent_difference(subject_value: float, reference_value: float) -> float:
    """(subject - reference) / reference * 100, 0 when reference is 0."""
    if reference_value == 0:
        return 0.0
    return ((subject_value - reference_value) / reference_value) * 100


def is_favorable(metric: MetricFamily, subject_value: float, reference_value: float) -> bool:
    """Higher ROI/revenue is favorable; lower spend is favorable."""
    if MetricFamily(metric) == MetricFamily.SPEND:
        return subject_value <= reference_value
    return subject_value >= reference_value


def metric_difference(
    metric: MetricFamily, subject_value: float, reference_value: float
) -> float:
    """Percent difference with the polarity used for each metric.

    Spend is expressed relative to the subject: how much more (positive) or
    less (negative) the reference spent.
    """
    if MetricFamily(metric) == MetricFamily.SPEND:
        return percent_difference(reference_value, subject_value)
    return percent_difference(subject_value, reference_value)


class InsightDeriver:
    """Derives comparison insights between a subject and a reference.

    Usage:
        deriver = InsightDeriver(thresholds=InsightThresholds())
        insights = deriver.derive(subject, top_performer, peers)
    """

    def __init__(self, thresholds: InsightThresholds | None = None):
        self.thresholds = thresholds or InsightThresholds()

    # =========================================================================
    # BUSINESS BENCHMARKS
    # =========================================================================

    def derive(
        self,
        subject: NormalizedAggregate,
        reference: NormalizedAggregate,
        peers: list[NormalizedAggregate] | None = None,
    ) -> list[ComparisonInsight]:
        """Compare subject to reference on ROI, spend and revenue.

        Args:
            subject: Business being benchmarked
            reference: Top performer or an explicitly chosen comparison
            peers: Other businesses in the comparison set, for averages

        Returns:
            One ComparisonInsight per MetricFamily, in ROI/spend/revenue order.
        """
        peers = peers or []
        return [
            self.derive_metric(
                metric,
                _metric_value(subject, metric),
                _metric_value(reference, metric),
                peer_average([_metric_value(p, metric) for p in peers]),
            )
            for metric in MetricFamily
        ]

    def derive_metric(
        self,
        metric: MetricFamily,
        subject_value: float,
        reference_value: float,
        average_value: float | None = None,
    ) -> ComparisonInsight:
        """Build a single metric comparison."""
        metric = MetricFamily(metric)
        difference = metric_difference(metric, subject_value, reference_value)
        band = self.recommendation_band(metric, difference)

        return ComparisonInsight(
            metric=metric,
            subject_value=subject_value,
            reference_value=reference_value,
            average_value=average_value,
            percent_difference=difference,
            is_favorable=is_favorable(metric, subject_value, reference_value),
            severity=band.severity,
            recommendation=band.text,
        )

    def recommendation_band(
        self, metric: MetricFamily, difference: float
    ) -> RecommendationBand:
        """First band in the metric's table matching the difference."""
        for band in self.thresholds.bands_for(metric):
            if band.matches(difference):
                return band
        raise ValueError(
            f"No recommendation band for {metric.value} difference {difference:.2f}; "
            "threshold tables must end with an open band"
        )

    # =========================================================================
    # CAMPAIGN VS CAMPAIGN
    # =========================================================================

    def compare_campaigns(
        self,
        subject: dict[str, Any],
        reference: dict[str, Any],
        as_of: datetime,
        min_days: int = 1,
    ) -> list[Insight]:
        """Explain what differentiates two individual campaigns.

        Args:
            subject: Your campaign (cleaned record dict)
            reference: Comparison campaign (cleaned record dict)
            as_of: Reference time for campaigns without an end date
            min_days: Minimum duration credited to each campaign

        Returns:
            Insights for ROI gap, spending efficiency, duration and timing.
        """
        subject_roi = _campaign_roi(subject)
        reference_roi = _campaign_roi(reference)

        return [
            self._check_roi_gap(subject_roi, reference_roi),
            self._check_spending_efficiency(subject, reference, subject_roi, reference_roi),
            self._check_duration(
                subject, reference, subject_roi, reference_roi, as_of, min_days
            ),
            self._check_timing(subject["start_date"], reference["start_date"]),
        ]

    def _check_roi_gap(self, subject_roi: float, reference_roi: float) -> Insight:
        gap = subject_roi - reference_roi
        if gap > 0:
            description = f"Your campaign has a {gap:.1f}% higher ROI than the comparison."
            severity = Severity.GREEN
            recommendation = (
                "Your campaign is performing well. Consider increasing budget "
                "allocation to maximize returns."
            )
        elif gap < 0:
            description = (
                f"Your campaign has a {abs(gap):.1f}% lower ROI than the comparison."
            )
            severity = Severity.AMBER
            recommendation = (
                "The comparison campaign is showing better ROI. Analyze what makes "
                "it more effective and adjust your strategy."
            )
        else:
            description = f"Both campaigns have the same ROI of {subject_roi:.1f}%."
            severity = Severity.GREEN
            recommendation = (
                "Performance is even. Test one change at a time to find what moves ROI."
            )

        return Insight(
            rule_id="roi_gap",
            description=description,
            severity=severity,
            recommendation=recommendation,
            metrics={
                "subject_roi": round(subject_roi, 2),
                "reference_roi": round(reference_roi, 2),
                "roi_gap": round(gap, 2),
            },
        )

    def _check_spending_efficiency(
        self,
        subject: dict[str, Any],
        reference: dict[str, Any],
        subject_roi: float,
        reference_roi: float,
    ) -> Insight:
        subject_spent = float(subject["amount_spent"] or 0)
        reference_spent = float(reference["amount_spent"] or 0)

        if subject_spent < reference_spent and subject_roi >= reference_roi:
            savings = (reference_spent - subject_spent) / reference_spent * 100
            description = (
                f"Your campaign achieved similar or better results while spending "
                f"{savings:.1f}% less."
            )
            severity = Severity.GREEN
        elif subject_spent > reference_spent and subject_roi <= reference_roi:
            savings = (subject_spent - reference_spent) / subject_spent * 100
            description = (
                f"The comparison campaign achieved similar or better results while "
                f"spending {savings:.1f}% less."
            )
            severity = Severity.RED
        else:
            savings = None
            description = (
                "Both campaigns have different spending patterns that warrant "
                "further analysis."
            )
            severity = Severity.AMBER

        if subject_roi >= reference_roi:
            recommendation = (
                "Your campaign is performing well. Consider extending its duration "
                "or applying similar strategies to other campaigns."
            )
        else:
            recommendation = (
                "Analyze the specific elements that make the comparison campaign more "
                "effective and implement those insights in your future campaigns."
            )

        return Insight(
            rule_id="spending_efficiency",
            description=description,
            severity=severity,
            recommendation=recommendation,
            metrics={
                "subject_spent": round(subject_spent, 2),
                "reference_spent": round(reference_spent, 2),
                "savings_pct": round(savings, 1) if savings is not None else None,
            },
        )

    def _check_duration(
        self,
        subject: dict[str, Any],
        reference: dict[str, Any],
        subject_roi: float,
        reference_roi: float,
        as_of: datetime,
        min_days: int = 1,
    ) -> Insight:
        subject_days = metrics.duration_days(
            subject["start_date"], subject["end_date"], as_of, min_days
        )
        reference_days = metrics.duration_days(
            reference["start_date"], reference["end_date"], as_of, min_days
        )

        if subject_days == reference_days:
            description = f"Both campaigns ran for the same duration of {subject_days} days."
            severity = Severity.GREEN
            recommendation = "Duration is not a differentiator between these campaigns."
        else:
            description = (
                f"Your campaign ran for {subject_days} days compared to "
                f"{reference_days} days for the comparison."
            )
            if subject_days < reference_days and subject_roi >= reference_roi:
                severity = Severity.GREEN
                recommendation = "Your campaign achieved results more quickly."
            elif subject_days > reference_days and subject_roi >= reference_roi:
                severity = Severity.GREEN
                recommendation = "Your campaign took longer but achieved better results."
            else:
                severity = Severity.AMBER
                recommendation = (
                    "The relationship between duration and performance is mixed."
                )

        return Insight(
            rule_id="campaign_duration",
            description=description,
            severity=severity,
            recommendation=recommendation,
            metrics={"subject_days": subject_days, "reference_days": reference_days},
        )

    def _check_timing(self, subject_start: date, reference_start: date) -> Insight:
        month_diff = (reference_start.year - subject_start.year) * 12 + (
            reference_start.month - subject_start.month
        )

        if month_diff != 0:
            months = abs(month_diff)
            description = (
                f"The campaigns started {months} month{'s' if months > 1 else ''} apart."
            )
            severity = Severity.AMBER
            recommendation = (
                "Consider seasonal factors that might be affecting performance."
            )
        else:
            description = "Both campaigns started in the same month."
            severity = Severity.GREEN
            recommendation = (
                "Timing is likely not a significant factor in performance differences."
            )

        return Insight(
            rule_id="campaign_timing",
            description=description,
            severity=severity,
            recommendation=recommendation,
            metrics={"month_difference": month_diff},
        )

    def to_dict(self, insights: list[ComparisonInsight]) -> list[dict[str, Any]]:
        """Convert comparison insights to the JSON output contract."""
        return [
            {
                "metric": i.metric.value,
                "metricName": i.metric.display_name,
                "label": i.label,
                "yourValue": i.subject_value,
                "topValue": i.reference_value,
                "averageValue": i.average_value,
                "percentDifference": i.percent_difference,
                "isFavorable": i.is_favorable,
                "severity": i.severity.value,
                "recommendation": i.recommendation,
            }
            for i in insights
        ]


def _metric_value(aggregate: NormalizedAggregate, metric: MetricFamily) -> float:
    if metric == MetricFamily.ROI:
        return aggregate.normalized_roi
    if metric == MetricFamily.SPEND:
        return aggregate.total_spent
    return aggregate.total_revenue


def _campaign_roi(campaign: dict[str, Any]) -> float:
    return metrics.roi(
        float(campaign.get("amount_earned") or 0),
        float(campaign.get("amount_spent") or 0),
    )
