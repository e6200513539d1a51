"""Group campaign records into per-business aggregates."""

from datetime import datetime

import polars as pl

from . import metrics
from .expressions import business_aggregates_expr, campaign_duration_expr
from .models import BusinessAggregate

REQUIRED_COLUMNS = {"business_id", "amount_spent", "amount_earned", "start_date", "end_date"}


def with_durations(df: pl.DataFrame, as_of: datetime, min_days: int = 1) -> pl.DataFrame:
    """Add a duration_days column measured up to as_of."""
    return df.with_columns(campaign_duration_expr(as_of, min_days))


def aggregate_by_business(
    df: pl.DataFrame,
    as_of: datetime,
    min_days: int = 1,
) -> list[BusinessAggregate]:
    """Sum spend, revenue and duration for each business in the frame.

    Businesses come out in order of first appearance. A business with no rows
    in df is not emitted.

    Args:
        df: Filtered campaign records (one row per campaign)
        as_of: Reference time for campaigns without an end date
        min_days: Minimum duration credited to a single campaign

    Returns:
        One BusinessAggregate per distinct business_id.
    """
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    df = _with_optional_columns(df)
    campaigns = with_durations(df, metrics.as_naive_datetime(as_of), min_days)

    totals = campaigns.group_by("business_id", maintain_order=True).agg(
        business_aggregates_expr()
    )
    rows_by_business = campaigns.partition_by("business_id", as_dict=True)

    aggregates: list[BusinessAggregate] = []
    for row in totals.to_dicts():
        total_spent = float(row["total_spent"])
        total_revenue = float(row["total_revenue"])
        group = rows_by_business[(row["business_id"],)]
        aggregates.append(
            BusinessAggregate(
                business_id=row["business_id"],
                business_name=row["business_name"],
                business_type=row["business_type"],
                total_spent=total_spent,
                total_revenue=total_revenue,
                total_duration_days=int(row["total_duration_days"]),
                campaign_count=row["campaign_count"],
                roi=metrics.roi(total_revenue, total_spent),
                roas=metrics.roas(total_revenue, total_spent),
                campaigns=tuple(group.to_dicts()),
            )
        )

    return aggregates


def _with_optional_columns(df: pl.DataFrame) -> pl.DataFrame:
    """Ensure display columns exist so aggregation expressions resolve."""
    exprs = [
        pl.lit(None, dtype=pl.String).alias(col)
        for col in ("business_name", "business_type")
        if col not in df.columns
    ]
    return df.with_columns(exprs) if exprs else df
