from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from narrative.config import ALL_GENRES, YEAR_MAX, YEAR_MIN
from narrative.year_range import YearRange, in_year_bounds, range_transition, release_years


@dataclass(frozen=True)
class NarrativeFilters:
    genre: str = ALL_GENRES
    year_range: YearRange = field(default_factory=YearRange.full)

    def as_dict(self) -> Dict[str, Any]:
        return {"genre": self.genre, "year_range": self.year_range.as_dict()}


def _as_float(value: object, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except Exception:
        return default


def normalize_filters(raw: Optional[dict]) -> NarrativeFilters:
    raw = raw or {}
    genre = str(raw.get("genre") or ALL_GENRES).strip() or ALL_GENRES

    year_range = raw.get("year_range")
    if isinstance(year_range, YearRange):
        return NarrativeFilters(genre=genre, year_range=year_range)
    if isinstance(year_range, dict):
        start, end = year_range.get("start"), year_range.get("end")
    else:
        start, end = raw.get("year_start"), raw.get("year_end")

    # Apply both handles through the transition rule so start <= end holds.
    rng = range_transition(YearRange.full(), "start", _as_float(start, YEAR_MIN))
    rng = range_transition(rng, "end", _as_float(end, YEAR_MAX))
    return NarrativeFilters(genre=genre, year_range=rng)


def track_years(df: pd.DataFrame) -> pd.Series:
    if "release_year" in df.columns:
        return df["release_year"].astype("Int64")
    return release_years(df.get("album_release_date", pd.Series("", index=df.index, dtype=object)))


def genre_mask(df: pd.DataFrame, genre: str) -> pd.Series:
    if genre == ALL_GENRES:
        return pd.Series(True, index=df.index)
    wanted = genre.lower()
    return df["artist_genres"].map(
        lambda genres: isinstance(genres, (list, tuple)) and any(g.lower() == wanted for g in genres)
    ).astype(bool)


def filtered_view(dataset: pd.DataFrame, genre: str = ALL_GENRES, year_range: Optional[YearRange] = None) -> pd.DataFrame:
    """Records passing the genre and year-range predicates, in dataset order."""
    year_range = year_range or YearRange.full()
    if dataset.empty:
        return dataset.copy()
    years = track_years(dataset)
    mask = genre_mask(dataset, genre) & in_year_bounds(years) & in_year_bounds(years, year_range.start, year_range.end)
    return dataset[mask.to_numpy()].copy()


def filtered_view_for(dataset: pd.DataFrame, filters: NarrativeFilters) -> pd.DataFrame:
    return filtered_view(dataset, filters.genre, filters.year_range)


def distinct_sorted_genres(dataset: pd.DataFrame) -> List[str]:
    if dataset.empty or "artist_genres" not in dataset.columns:
        return [ALL_GENRES]
    genres = dataset["artist_genres"].explode().dropna()
    return [ALL_GENRES] + sorted(set(genres.astype(str)))
