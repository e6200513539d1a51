from .cleaner import apply_cleaning
from .enricher import enrich
from .filters import ComparisonFilters, apply_filters
from .loader import CampaignIngestionPipeline

__all__ = [
    "CampaignIngestionPipeline",
    "ComparisonFilters",
    "apply_cleaning",
    "apply_filters",
    "enrich",
]
