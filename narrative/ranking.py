"""Ordered grouping and ranking shared by the genre, artist and track views.

Groups are formed in first-seen order (``groupby(sort=False)``) and ranked
with a stable sort, so rows with equal scores keep the order in which they
were first encountered in the filtered view. Ties are never broken
alphabetically.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

import pandas as pd

Key = Union[str, Sequence[str]]


def rank_and_truncate(
    frame: pd.DataFrame,
    *,
    key: Key,
    rank_by: str,
    limit: Optional[int],
    aggregations: Optional[Mapping[str, Any]] = None,
    ascending: bool = False,
) -> pd.DataFrame:
    """Group `frame` by `key`, rank groups by `rank_by` and keep the first `limit`.

    With `aggregations` (pandas named aggregations, ``name=(column, func)``)
    each group collapses to one aggregated row. Without them the frame is
    ranked first and the first row of each key is kept, which is the
    best-ranked row for that key.
    """
    if frame.empty:
        return frame.iloc[0:0].reset_index(drop=True)
    if aggregations:
        grouped = frame.groupby(key, sort=False).agg(**aggregations).reset_index()
        ranked = grouped.sort_values(rank_by, ascending=ascending, kind="stable")
    else:
        ranked = frame.sort_values(rank_by, ascending=ascending, kind="stable")
        ranked = ranked.drop_duplicates(subset=key, keep="first")
    if limit is not None:
        ranked = ranked.head(limit)
    return ranked.reset_index(drop=True)


def count_by(values: pd.Series, *, name: str, count_name: str = "count", limit: Optional[int] = None) -> pd.DataFrame:
    """Occurrence counts of `values`, descending, ties in first-seen order."""
    frame = pd.DataFrame({name: values.dropna().to_numpy()})
    frame["_one"] = 1
    return rank_and_truncate(frame, key=name, rank_by=count_name, limit=limit, aggregations={count_name: ("_one", "size")})
