"""Reusable Polars expressions for benchmark calculations."""

from datetime import datetime

import polars as pl

from .metrics import SECONDS_PER_DAY

EARTH_RADIUS_MILES = 3959


# =============================================================================
# CAMPAIGN DURATION
# =============================================================================


def campaign_duration_expr(as_of: datetime, min_days: int = 1) -> pl.Expr:
    """Campaign duration in days: ceil((end - start) / 1 day).

    Running campaigns (null end_date) are measured up to as_of.
    Durations are clipped to min_days.
    """
    start = pl.col("start_date").cast(pl.Datetime("us"))
    end = pl.col("end_date").cast(pl.Datetime("us")).fill_null(pl.lit(as_of))
    return (
        ((end - start).dt.total_seconds() / SECONDS_PER_DAY)
        .ceil()
        .cast(pl.Int64)
        .clip(lower_bound=min_days)
        .alias("duration_days")
    )


# =============================================================================
# BUSINESS AGGREGATES
# =============================================================================


def business_aggregates_expr() -> list[pl.Expr]:
    """Per-business totals. Missing revenue counts as 0."""
    return [
        pl.col("amount_spent").fill_null(0).sum().alias("total_spent"),
        pl.col("amount_earned").fill_null(0).sum().alias("total_revenue"),
        pl.col("duration_days").sum().alias("total_duration_days"),
        pl.len().alias("campaign_count"),
        pl.col("business_name").drop_nulls().first().alias("business_name"),
        pl.col("business_type").drop_nulls().first().alias("business_type"),
    ]


# =============================================================================
# COMPARISON SET FILTERS
# =============================================================================


def haversine_miles_expr(latitude: float, longitude: float) -> pl.Expr:
    """Great-circle distance in miles from a fixed origin to each row."""
    lat1 = pl.lit(latitude).radians()
    lat2 = pl.col("latitude").radians()
    d_lat = (pl.col("latitude") - latitude).radians()
    d_lon = (pl.col("longitude") - longitude).radians()

    a = (d_lat / 2).sin().pow(2) + lat1.cos() * lat2.cos() * (d_lon / 2).sin().pow(2)
    return (2 * a.sqrt().arcsin() * EARTH_RADIUS_MILES).alias("distance_miles")
