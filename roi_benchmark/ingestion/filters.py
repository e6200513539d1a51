"""Comparison-set filters applied before aggregation."""

from dataclasses import asdict, dataclass
from typing import Any

import polars as pl

from ..analytics.expressions import haversine_miles_expr


@dataclass(frozen=True)
class ComparisonFilters:
    """Which campaigns form the comparison set.

    Attributes:
        business_type: Keep only businesses of this type (None = all)
        ad_method_id: Keep only campaigns run on this ad method (None = all)
        radius_miles: Keep only businesses within this distance of origin
        origin: (latitude, longitude) the radius is measured from
    """

    business_type: str | None = None
    ad_method_id: int | None = None
    radius_miles: float | None = None
    origin: tuple[float, float] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def apply_filters(df: pl.DataFrame, filters: ComparisonFilters | None) -> pl.DataFrame:
    """Narrow campaign records to the comparison set.

    The ad method filter drops individual campaigns, so a business with no
    campaign on that method drops out of the set entirely. The radius filter
    drops businesses without coordinates.

    Returns:
        New DataFrame (input unchanged).
    """
    if filters is None:
        return df

    if filters.business_type:
        df = df.filter(pl.col("business_type") == filters.business_type)

    if filters.ad_method_id is not None:
        df = df.filter(pl.col("ad_method_id") == filters.ad_method_id)

    if filters.radius_miles is not None and filters.origin is not None:
        latitude, longitude = filters.origin
        df = (
            df.filter(pl.col("latitude").is_not_null() & pl.col("longitude").is_not_null())
            .with_columns(haversine_miles_expr(latitude, longitude))
            .filter(pl.col("distance_miles") <= filters.radius_miles)
            .drop("distance_miles")
        )

    return df
