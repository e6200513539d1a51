"""Rescale aggregate ROI/ROAS to a common time basis."""

from .models import BusinessAggregate, NormalizedAggregate, TimeBasis


def daily_rate(value: float, total_days: int) -> float:
    """Spread an accumulated value evenly over total_days (0 if no days)."""
    return value / total_days if total_days > 0 else 0.0


def normalize_aggregate(
    aggregate: BusinessAggregate,
    time_basis: TimeBasis = TimeBasis.MONTHLY,
    normalize: bool = True,
) -> NormalizedAggregate:
    """Express a business's ROI/ROAS per day, week or month.

    A 90-day run and a 7-day run are made comparable by dividing by total
    campaign days and scaling back up to the chosen cadence. This is a linear
    model (uniform daily return), not a compounding one.

    Args:
        aggregate: Business totals from the aggregator
        time_basis: Target cadence; ALL keeps the raw values
        normalize: When False the raw values are passed through

    Returns:
        NormalizedAggregate wrapping the input aggregate.
    """
    time_basis = TimeBasis(time_basis)
    period_days = time_basis.days

    if not normalize or period_days is None:
        normalized_roi = aggregate.roi
        normalized_roas = aggregate.roas
    else:
        normalized_roi = daily_rate(aggregate.roi, aggregate.total_duration_days) * period_days
        normalized_roas = daily_rate(aggregate.roas, aggregate.total_duration_days) * period_days

    return NormalizedAggregate(
        aggregate=aggregate,
        time_basis=time_basis,
        normalized=normalize and period_days is not None,
        normalized_roi=normalized_roi,
        normalized_roas=normalized_roas,
    )


def normalize_all(
    aggregates: list[BusinessAggregate],
    time_basis: TimeBasis = TimeBasis.MONTHLY,
    normalize: bool = True,
) -> list[NormalizedAggregate]:
    """Normalize every aggregate with the same settings, preserving order."""
    return [normalize_aggregate(a, time_basis, normalize) for a in aggregates]
