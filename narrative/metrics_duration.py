from __future__ import annotations

from typing import Any, Dict, Iterable, List

import numpy as np
import pandas as pd

from narrative.config import HISTOGRAM_BIN_COUNT, HISTOGRAM_MAX_MINUTES, HISTOGRAM_MIN_MINUTES, MS_PER_MINUTE
from narrative.filters import track_years
from narrative.year_range import in_year_bounds


def duration_minutes(view: pd.DataFrame) -> pd.Series:
    return pd.to_numeric(view["track_duration_ms"], errors="coerce") / MS_PER_MINUTE


def histogram_bins(
    values: Iterable[float],
    min_value: float = HISTOGRAM_MIN_MINUTES,
    max_value: float = HISTOGRAM_MAX_MINUTES,
    bin_count: int = HISTOGRAM_BIN_COUNT,
) -> List[Dict[str, Any]]:
    """Fixed-domain histogram; only non-empty bins are returned.

    Bins are half-open ``[x0, x1)`` except the last, which also takes
    ``max_value``. Values outside the domain are discarded, not clamped.
    """
    span = max_value - min_value
    if span <= 0 or bin_count <= 0:
        return []
    arr = np.asarray(list(values), dtype=float)
    arr = arr[~np.isnan(arr)]
    arr = arr[(arr >= min_value) & (arr <= max_value)]
    if arr.size == 0:
        return []
    bin_size = span / bin_count
    idx = np.clip(np.floor((arr - min_value) / bin_size).astype(int), 0, bin_count - 1)
    counts = np.bincount(idx, minlength=bin_count)
    return [
        {"x0": min_value + i * bin_size, "x1": min_value + (i + 1) * bin_size, "count": int(c)}
        for i, c in enumerate(counts)
        if c > 0
    ]


def duration_histogram(view: pd.DataFrame) -> List[Dict[str, Any]]:
    if view.empty:
        return []
    return histogram_bins(duration_minutes(view).dropna())


def yearly_average_duration(view: pd.DataFrame) -> List[Dict[str, Any]]:
    """Mean track length (minutes) per release year; years without tracks are left out."""
    if view.empty:
        return []
    minutes = duration_minutes(view)
    frame = pd.DataFrame({"year": track_years(view), "minutes": minutes})
    valid = in_year_bounds(frame["year"]) & np.isfinite(frame["minutes"]) & (frame["minutes"] > 0)
    frame = frame[valid.to_numpy()]
    if frame.empty:
        return []
    means = frame.groupby("year")["minutes"].mean().sort_index()
    return [{"year": int(y), "avg_duration_minutes": float(m)} for y, m in means.items()]
