"""BenchmarkPack - consolidated ranking output for display and export."""

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


@dataclass
class BenchmarkPack:
    """Consolidated benchmark output for one target business.

    All data is pre-computed and JSON-serializable. Ranking rows and insights
    use the camelCase keys of the dashboard's data contract.
    """

    # Metadata
    generated_at: datetime
    as_of: datetime
    target_business_id: int
    time_basis: str
    normalize: bool
    filters: dict[str, Any]
    date_range: tuple[date, date] | None
    total_businesses: int
    total_campaigns: int

    # Ranking
    rankings: list[dict[str, Any]]
    target_rank: int | None
    target_percentile: float | None
    target_roi: float | None
    target_normalized_roi: float | None
    top_performer: dict[str, Any] | None

    # Benchmark insights (ROI, spend, revenue)
    insights: list[dict[str, Any]] = field(default_factory=list)

    @property
    def has_ranking(self) -> bool:
        """False when the target has no qualifying campaigns."""
        return self.target_rank is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "meta": {
                "generated_at": self.generated_at.isoformat(),
                "as_of": self.as_of.isoformat(),
                "target_business_id": self.target_business_id,
                "time_basis": self.time_basis,
                "normalize": self.normalize,
                "filters": self.filters,
                "date_range": (
                    {
                        "start": self.date_range[0].isoformat(),
                        "end": self.date_range[1].isoformat(),
                    }
                    if self.date_range
                    else None
                ),
                "total_businesses": self.total_businesses,
                "total_campaigns": self.total_campaigns,
            },
            "ranking": {
                "target_rank": self.target_rank,
                "target_percentile": (
                    round(self.target_percentile, 1)
                    if self.target_percentile is not None
                    else None
                ),
                "top_performer": self.top_performer,
                "businesses": self.rankings,
            },
            "insights": self.insights,
            "recommendations": self.get_recommendations(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def get_executive_summary(self) -> dict[str, Any]:
        """Get condensed summary for the ranking card header."""
        return {
            "target_business_id": self.target_business_id,
            "rank": self.target_rank,
            "out_of": self.total_businesses,
            "normalized_roi": (
                round(self.target_normalized_roi, 2)
                if self.target_normalized_roi is not None
                else None
            ),
            "top_normalized_roi": (
                round(self.top_performer["normalizedROI"], 2)
                if self.top_performer
                else None
            ),
            "gap_to_top": (
                round(self.target_normalized_roi - self.top_performer["normalizedROI"], 2)
                if self.top_performer and self.target_normalized_roi is not None
                else None
            ),
            "time_basis": self.time_basis,
        }

    def get_recommendations(self) -> list[str]:
        """Recommendation text from each benchmark insight, in metric order."""
        return [i["recommendation"] for i in self.insights]
