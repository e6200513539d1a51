"""Analytics module for campaign ROI benchmarking."""

from .aggregator import aggregate_by_business
from .calculator import BenchmarkEngine
from .insights import (
    Insight,
    InsightDeriver,
    InsightThresholds,
    RecommendationBand,
    is_favorable,
    percent_difference,
)
from .metrics import duration_days, roas, roi
from .models import (
    BusinessAggregate,
    ComparisonInsight,
    MetricFamily,
    NormalizedAggregate,
    RankedBusiness,
    Severity,
    TieBreak,
    TimeBasis,
)
from .normalizer import normalize_aggregate, normalize_all
from .ranker import Ranker

__all__ = [
    "BenchmarkEngine",
    "BusinessAggregate",
    "ComparisonInsight",
    "Insight",
    "InsightDeriver",
    "InsightThresholds",
    "MetricFamily",
    "NormalizedAggregate",
    "RankedBusiness",
    "Ranker",
    "RecommendationBand",
    "Severity",
    "TieBreak",
    "TimeBasis",
    "aggregate_by_business",
    "duration_days",
    "is_favorable",
    "normalize_aggregate",
    "normalize_all",
    "percent_difference",
    "roas",
    "roi",
]
