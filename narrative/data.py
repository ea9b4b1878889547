from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from narrative.config import ALL_GENRES, MS_PER_MINUTE, get_sources, is_url
from narrative.filters import distinct_sorted_genres
from narrative.genres import parse_genres
from narrative.year_range import in_year_bounds, release_years

logger = logging.getLogger(__name__)

HISTORICAL = "historical"
MODERN = "modern"
PROVENANCES = (HISTORICAL, MODERN)

# Case-sensitive truthy encodings of the `explicit` column, per source.
EXPLICIT_TRUE = {HISTORICAL: "True", MODERN: "TRUE"}

TEXT_COLUMNS = ["track_id", "track_name", "artist_name", "album_name", "album_release_date", "album_type"]
TRACK_COLUMNS = [
    "track_id",
    "track_name",
    "track_popularity",
    "track_duration_ms",
    "explicit",
    "artist_name",
    "artist_popularity",
    "artist_followers",
    "artist_genres",
    "album_name",
    "album_release_date",
    "album_type",
    "release_year",
    "provenance",
]

Rows = Union[pd.DataFrame, Iterable[Mapping[str, object]]]


def read_source_csv(path_or_buffer) -> pd.DataFrame:
    """Read a catalog CSV keeping every cell as a raw string."""
    return pd.read_csv(path_or_buffer, dtype=str, keep_default_na=False)


def _as_frame(rows: Rows) -> pd.DataFrame:
    if isinstance(rows, pd.DataFrame):
        return rows.reset_index(drop=True)
    return pd.DataFrame(list(rows))


def column_as_series(df: pd.DataFrame, col: str) -> pd.Series:
    if col not in df.columns:
        return pd.Series([""] * len(df), index=df.index, dtype=object)
    return df[col]


def coerce_numeric(series: pd.Series) -> pd.Series:
    """Numeric coercion with a 0 fallback for blanks, junk and non-finite values."""
    if series.dtype == object:
        series = series.map(lambda v: v.strip() if isinstance(v, str) else v)
    out = pd.to_numeric(series, errors="coerce").astype(float)
    return out.replace([np.inf, -np.inf], np.nan).fillna(0.0)


def coerce_int(series: pd.Series) -> pd.Series:
    return coerce_numeric(series).round().astype("int64")


def coerce_text(series: pd.Series) -> pd.Series:
    return series.fillna("").astype(str)


def _is_explicit(value: object, truthy: str) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    return value == truthy


def normalize_source(rows: Rows, provenance: str) -> pd.DataFrame:
    """Normalize one raw catalog into canonical track records.

    Rows whose release date does not resolve to a year inside the supported
    window are dropped. The modern catalog reports durations in minutes,
    the historical one in milliseconds.
    """
    if provenance not in PROVENANCES:
        raise ValueError(f"unknown provenance: {provenance!r}")
    raw = _as_frame(rows)
    years = release_years(column_as_series(raw, "album_release_date"))
    keep = in_year_bounds(years)
    dropped = int((~keep).sum())
    df = raw[keep.to_numpy()].reset_index(drop=True)
    years = years[keep].reset_index(drop=True)

    if provenance == MODERN:
        duration_ms = coerce_numeric(column_as_series(df, "track_duration_min")) * MS_PER_MINUTE
    else:
        duration_ms = coerce_numeric(column_as_series(df, "track_duration_ms"))

    truthy = EXPLICIT_TRUE[provenance]
    out = pd.DataFrame(
        {
            "track_id": coerce_text(column_as_series(df, "track_id")),
            "track_name": coerce_text(column_as_series(df, "track_name")),
            "track_popularity": coerce_int(column_as_series(df, "track_popularity")),
            "track_duration_ms": duration_ms.round().astype("int64"),
            "explicit": column_as_series(df, "explicit").map(lambda v: _is_explicit(v, truthy)).astype(bool),
            "artist_name": coerce_text(column_as_series(df, "artist_name")),
            "artist_popularity": coerce_int(column_as_series(df, "artist_popularity")),
            "artist_followers": coerce_int(column_as_series(df, "artist_followers")),
            "artist_genres": column_as_series(df, "artist_genres").map(lambda c: tuple(parse_genres(c))),
            "album_name": coerce_text(column_as_series(df, "album_name")),
            "album_release_date": coerce_text(column_as_series(df, "album_release_date")),
            "album_type": coerce_text(column_as_series(df, "album_type")),
            "release_year": years.astype("int64"),
            "provenance": pd.Series([provenance] * len(df), dtype=object),
        },
        columns=TRACK_COLUMNS,
    )
    logger.debug("normalized %s rows: kept=%d dropped_invalid_date=%d", provenance, len(out), dropped)
    return out


def build_catalog(historical: Rows, modern: Rows) -> pd.DataFrame:
    """Merge both catalogs into the base dataset, historical rows first."""
    frames = [normalize_source(historical, HISTORICAL), normalize_source(modern, MODERN)]
    tracks = pd.concat(frames, ignore_index=True)
    logger.info("catalog built: historical=%d modern=%d total=%d", len(frames[0]), len(frames[1]), len(tracks))
    return tracks


def empty_catalog() -> pd.DataFrame:
    return normalize_source(pd.DataFrame(), HISTORICAL)


def catalog_context(tracks: pd.DataFrame, files: Optional[List[str]] = None) -> Dict[str, object]:
    years = sorted(int(y) for y in tracks["release_year"].unique()) if not tracks.empty else []
    return {
        "files": list(files or []),
        "tracks": tracks,
        "genres": distinct_sorted_genres(tracks) if not tracks.empty else [ALL_GENRES],
        "years": years,
    }


def get_source_files() -> List[Path]:
    """Local (historical, modern) catalog files; empty when either source is a URL."""
    sources = get_sources()
    if any(is_url(s) for s in sources):
        return []
    return [Path(s) for s in sources]


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(f), f.stat().st_mtime) for f in files)


@lru_cache(maxsize=4)
def _load_catalog_data_cached(files_sig: Tuple[Tuple[str, float], ...]) -> Dict[str, object]:
    (historical, _), (modern, _) = files_sig
    tracks = build_catalog(read_source_csv(historical), read_source_csv(modern))
    return catalog_context(tracks, files=[Path(path).name for path, _ in files_sig])


def load_catalog_data() -> Dict[str, object]:
    """Synchronously load both local catalogs, cached until either file changes."""
    files = get_source_files()
    missing = [str(f) for f in files if not f.is_file()]
    if not files or missing:
        logger.warning("catalog files unavailable: %s", ", ".join(missing) or "remote sources")
        return catalog_context(empty_catalog())
    return _load_catalog_data_cached(file_signature(files))
