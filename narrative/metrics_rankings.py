from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from narrative.config import TOP_ARTISTS_LIMIT, TOP_TRACKS_LIMIT, TRACK_NAME_MAX_LEN, TRACK_NAME_TRUNCATE_AT
from narrative.genres import format_genre_suffix, unique_in_order
from narrative.ranking import rank_and_truncate


def _non_blank(series: pd.Series) -> pd.Series:
    return series.fillna("").astype(str).str.len() > 0


def top_artists(view: pd.DataFrame, limit: int = TOP_ARTISTS_LIMIT) -> List[Dict[str, Any]]:
    """Most followed artists; repeated artists keep their highest follower count."""
    if view.empty:
        return []
    followers = pd.to_numeric(view["artist_followers"], errors="coerce").fillna(0)
    eligible = view.assign(artist_followers=followers)
    eligible = eligible[(_non_blank(eligible["artist_name"]) & (followers != 0)).to_numpy()]
    if eligible.empty:
        return []

    ranked = rank_and_truncate(
        eligible,
        key="artist_name",
        rank_by="followers",
        limit=limit,
        aggregations={"followers": ("artist_followers", "max")},
    )
    genres_by_artist = (
        eligible.groupby("artist_name", sort=False)["artist_genres"]
        .apply(lambda s: unique_in_order(g for genres in s for g in genres))
        .to_dict()
    )

    rows: List[Dict[str, Any]] = []
    for r in ranked.to_dict(orient="records"):
        name = str(r["artist_name"])
        genres = genres_by_artist.get(name, [])
        rows.append(
            {
                "name": name,
                "followers": int(r["followers"]),
                "genres": genres,
                "label": f"{name}{format_genre_suffix(genres)}",
            }
        )
    return rows


def display_track_name(full_name: str) -> str:
    if len(full_name) > TRACK_NAME_MAX_LEN:
        return f"{full_name[:TRACK_NAME_TRUNCATE_AT]}..."
    return full_name


def top_tracks(view: pd.DataFrame, limit: int = TOP_TRACKS_LIMIT) -> List[Dict[str, Any]]:
    """Most popular tracks, one entry per track id (or name+artist when the id is blank)."""
    if view.empty:
        return []
    popularity = pd.to_numeric(view["track_popularity"], errors="coerce")
    scored = view.assign(track_popularity=popularity)
    scored = scored[(_non_blank(scored["track_name"]) & popularity.notna()).to_numpy()]
    if scored.empty:
        return []

    track_ids = scored["track_id"].fillna("").astype(str)
    composite = scored["track_name"].astype(str) + "-" + scored["artist_name"].fillna("").astype(str)
    scored = scored.assign(_dedup_key=track_ids.where(track_ids != "", composite))
    ranked = rank_and_truncate(scored, key="_dedup_key", rank_by="track_popularity", limit=limit)

    rows: List[Dict[str, Any]] = []
    for i, r in enumerate(ranked.to_dict(orient="records")):
        full_name = str(r["track_name"])
        artist = str(r["artist_name"] or "")
        track_id = str(r["track_id"] or "")
        rows.append(
            {
                "rank": i + 1,
                "id": track_id or f"{full_name}-{artist or 'unknown'}-{i}",
                "name": display_track_name(full_name),
                "full_name": full_name,
                "artist": artist,
                "popularity": int(r["track_popularity"]),
                "genres": list(r["artist_genres"] or ()),
            }
        )
    return rows
