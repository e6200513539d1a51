"""Statistical helpers using scipy/numpy for peer comparisons."""

import numpy as np
from scipy import stats


def percentile_rank(values: list[float] | np.ndarray, score: float) -> float | None:
    """Percent of values less than or equal to score.

    Args:
        values: Scores of the whole comparison set (including score itself)
        score: Score to locate

    Returns:
        Percentile in [0, 100] or None if values is empty.
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return None
    return float(stats.percentileofscore(arr, score, kind="weak"))


def peer_average(values: list[float] | np.ndarray) -> float | None:
    """Mean of peer values, None if there are no peers."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return None
    return float(np.mean(arr))
