"""Competitive ranking of businesses by normalized ROI."""

from .models import NormalizedAggregate, RankedBusiness, TieBreak
from .stats import percentile_rank


class Ranker:
    """Sorts a comparison set descending by normalized ROI.

    Python's sort is stable, so with TieBreak.INPUT_ORDER businesses with equal
    normalized ROI keep their upstream order. TieBreak.BUSINESS_ID orders ties
    by ascending business_id instead.

    Usage:
        ranker = Ranker(normalized_aggregates)
        ranker.rank(business_id)   # 1-based, or None
        ranker.top_performer()     # NormalizedAggregate, or None
    """

    def __init__(
        self,
        aggregates: list[NormalizedAggregate],
        tie_break: TieBreak = TieBreak.INPUT_ORDER,
    ):
        self.tie_break = TieBreak(tie_break)

        ordered = list(aggregates)
        if self.tie_break == TieBreak.BUSINESS_ID:
            ordered.sort(key=lambda a: a.business_id)
        ordered.sort(key=lambda a: a.normalized_roi, reverse=True)

        self.entries: tuple[NormalizedAggregate, ...] = tuple(ordered)
        self._positions = {a.business_id: i for i, a in enumerate(self.entries)}

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def rank(self, business_id: int) -> int | None:
        """1-based position of the business, None if not in the comparison set."""
        position = self._positions.get(business_id)
        return position + 1 if position is not None else None

    def top_performer(self) -> NormalizedAggregate | None:
        """Highest normalized ROI, None for an empty comparison set."""
        return self.entries[0] if self.entries else None

    def get(self, business_id: int) -> NormalizedAggregate | None:
        position = self._positions.get(business_id)
        return self.entries[position] if position is not None else None

    def top(self, n: int = 5) -> list[NormalizedAggregate]:
        return list(self.entries[:n])

    def percentile(self, business_id: int) -> float | None:
        """Percent of the comparison set at or below this business's score."""
        entry = self.get(business_id)
        if entry is None:
            return None
        return percentile_rank([a.normalized_roi for a in self.entries], entry.normalized_roi)

    def ranked_businesses(self) -> list[RankedBusiness]:
        """Flatten the ranking into output rows."""
        return [
            RankedBusiness(
                rank=i + 1,
                business_id=a.business_id,
                business_name=a.business_name,
                normalized_roi=a.normalized_roi,
                normalized_roas=a.normalized_roas,
                total_revenue=a.total_revenue,
                total_cost=a.total_spent,
                campaign_count=a.campaign_count,
            )
            for i, a in enumerate(self.entries)
        ]
