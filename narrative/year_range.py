"""Year handling: release-year extraction and the dual-ended year range state.

The range is only ever changed through `range_transition`, which keeps
``start <= end`` by pushing the other handle along instead of letting the
two handles cross.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Dict, Literal

import pandas as pd

from narrative.config import YEAR_MAX, YEAR_MIN
from narrative.rounding import round_half_up

Endpoint = Literal["start", "end"]
ENDPOINTS = ("start", "end")

_DIGITS_ONLY = re.compile(r"^\d*$")


def release_years(dates: pd.Series) -> pd.Series:
    """Resolve release years from date strings (``2015``, ``2015-03``, ``2015-03-01``...)."""
    text = dates.astype(str).str.strip()
    parsed = pd.to_datetime(text, errors="coerce", format="mixed", utc=True)
    return parsed.dt.year.astype("Int64")


def in_year_bounds(years: pd.Series, start: int = YEAR_MIN, end: int = YEAR_MAX) -> pd.Series:
    mask = years.notna() & (years >= start) & (years <= end)
    return mask.fillna(False).astype(bool)


def clamp_year(value: float) -> int:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return YEAR_MIN
    return int(max(YEAR_MIN, min(YEAR_MAX, value)))


@dataclass(frozen=True)
class YearRange:
    start: int = YEAR_MIN
    end: int = YEAR_MAX

    def __post_init__(self) -> None:
        if not (YEAR_MIN <= self.start <= self.end <= YEAR_MAX):
            raise ValueError(f"invalid year range {self.start}-{self.end} (bounds {YEAR_MIN}-{YEAR_MAX})")

    @classmethod
    def full(cls) -> "YearRange":
        return cls(YEAR_MIN, YEAR_MAX)

    def contains(self, year: int) -> bool:
        return self.start <= year <= self.end

    def as_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}


def range_transition(current: YearRange, endpoint: Endpoint, raw_value: float) -> YearRange:
    """Move one handle of the range to `raw_value`.

    The value is rounded and clamped into the year bounds. Dragging a handle
    past the other one drags the other along so both end up equal.
    """
    if endpoint not in ENDPOINTS:
        raise ValueError(f"unknown range endpoint: {endpoint!r}")
    if isinstance(raw_value, int):
        value = clamp_year(raw_value)
    else:
        # Bounds are whole years, so clamping before rounding gives the same year.
        value = clamp_year(round_half_up(min(max(float(raw_value), YEAR_MIN), YEAR_MAX)))
    if endpoint == "start":
        return YearRange(value, max(current.end, value))
    return YearRange(min(current.start, value), value)


def range_highlight(year_range: YearRange) -> Dict[str, float]:
    """Left offset and width (percent of the track) of the filled slider segment."""
    span = YEAR_MAX - YEAR_MIN
    start_pct = (year_range.start - YEAR_MIN) / span * 100
    end_pct = (year_range.end - YEAR_MIN) / span * 100
    left = min(max(start_pct, 0.0), 100.0)
    available = max(100.0 - left, 0.0)
    if available == 0:
        width = 0.0
    else:
        width = end_pct - start_pct
        if width <= 0:
            width = min(available, 1.0)
        width = min(max(width, 1.0), available)
    return {"left": left, "width": width}


@dataclass
class RangeSelection:
    """Single-owner year range state plus the free-text mirrors of both handles."""

    committed: YearRange = field(default_factory=YearRange.full)
    text: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._sync_text()

    def _sync_text(self) -> None:
        self.text = {"start": str(self.committed.start), "end": str(self.committed.end)}

    def set_from_slider(self, endpoint: Endpoint, value: float) -> YearRange:
        self.committed = range_transition(self.committed, endpoint, value)
        self._sync_text()
        return self.committed

    def type_text(self, endpoint: Endpoint, text: str) -> bool:
        """Update the text mirror while typing; non-digit input is rejected."""
        if endpoint not in ENDPOINTS:
            raise ValueError(f"unknown range endpoint: {endpoint!r}")
        if not _DIGITS_ONLY.match(text):
            return False
        self.text[endpoint] = text
        return True

    def commit_text(self, endpoint: Endpoint) -> YearRange:
        """Apply the typed value, or revert the mirror if it does not parse."""
        try:
            raw = int(self.text[endpoint])
        except (KeyError, ValueError):
            self._sync_text()
            return self.committed
        return self.set_from_slider(endpoint, raw)
