from __future__ import annotations

import os
from pathlib import Path
from typing import Tuple

YEAR_MIN = 2009
YEAR_MAX = 2025
ALL_GENRES = "All"

GENRE_COUNT_LIMIT = 12
GENRE_TREND_LIMIT = 5
TOP_ARTISTS_LIMIT = 10
TOP_TRACKS_LIMIT = 10
ARTIST_LABEL_GENRES = 2

HISTOGRAM_MIN_MINUTES = 0.0
HISTOGRAM_MAX_MINUTES = 10.0
HISTOGRAM_BIN_COUNT = 20

TRACK_NAME_MAX_LEN = 25
TRACK_NAME_TRUNCATE_AT = 23

MS_PER_MINUTE = 60000

DATA_DIR = Path(os.getenv("NARRATIVE_DATA_DIR", Path(__file__).resolve().parents[1] / "data"))
HISTORICAL_FILE = "track_data_final.csv"
MODERN_FILE = "spotify_data clean.csv"


def get_sources() -> Tuple[str, str]:
    """Return (historical, modern) source locations; either may be a path or an http(s) URL."""
    historical = os.getenv("NARRATIVE_HISTORICAL_SOURCE") or str(DATA_DIR / HISTORICAL_FILE)
    modern = os.getenv("NARRATIVE_MODERN_SOURCE") or str(DATA_DIR / MODERN_FILE)
    return historical, modern


def is_url(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))
