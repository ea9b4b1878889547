from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from narrative.config import GENRE_COUNT_LIMIT, GENRE_TREND_LIMIT
from narrative.filters import track_years
from narrative.ranking import count_by


def _genre_rows(view: pd.DataFrame) -> pd.DataFrame:
    """One row per (track, genre) pair, in filtered-view order."""
    exploded = view[["artist_genres"]].explode("artist_genres").dropna(subset=["artist_genres"])
    exploded = exploded[exploded["artist_genres"].astype(str) != ""]
    return exploded.rename(columns={"artist_genres": "genre"})


def _ranked_genres(view: pd.DataFrame, limit: int) -> pd.DataFrame:
    return count_by(_genre_rows(view)["genre"], name="genre", limit=limit)


def genre_counts(view: pd.DataFrame, limit: int = GENRE_COUNT_LIMIT) -> List[Dict[str, Any]]:
    """Tracks per genre; a multi-genre track counts toward each of its genres."""
    if view.empty:
        return []
    ranked = _ranked_genres(view, limit)
    return [{"genre": str(r["genre"]), "count": int(r["count"])} for r in ranked.to_dict(orient="records")]


def genre_popularity_trend(view: pd.DataFrame, limit: int = GENRE_TREND_LIMIT) -> List[Dict[str, Any]]:
    """Mean track popularity per year for the `limit` busiest genres of the view."""
    if view.empty:
        return []
    top = _ranked_genres(view, limit)
    if top.empty:
        return []
    top_genres = top["genre"].tolist()

    scored = view.assign(
        _year=track_years(view),
        _popularity=pd.to_numeric(view["track_popularity"], errors="coerce"),
    ).dropna(subset=["_year", "_popularity"])
    pairs = _genre_rows(scored).join(scored[["_year", "_popularity"]])
    pairs = pairs[pairs["genre"].isin(top_genres)]
    if pairs.empty:
        return []

    means = pairs.groupby(["genre", "_year"])["_popularity"].mean()
    series: List[Dict[str, Any]] = []
    # Series appear in the order each genre is first met in the view.
    for genre in pd.unique(pairs["genre"]):
        by_year = means.loc[genre].sort_index()
        series.append(
            {
                "genre": str(genre),
                "values": [{"year": int(y), "value": float(v)} for y, v in by_year.items()],
            }
        )
    return series
