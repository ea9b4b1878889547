from __future__ import annotations

import pandas as pd

from narrative.ranking import count_by, rank_and_truncate


def test_count_by_ties_keep_first_seen_order():
    counts = count_by(pd.Series(["b", "a", "c", "a", "b", "d"]), name="genre")
    assert counts["genre"].tolist() == ["b", "a", "c", "d"]
    assert counts["count"].tolist() == [2, 2, 1, 1]


def test_count_by_limit_and_empty():
    assert len(count_by(pd.Series(list("abcdef")), name="g", limit=3)) == 3
    assert count_by(pd.Series([], dtype=object), name="g").empty


def test_rank_and_truncate_aggregated_max():
    frame = pd.DataFrame({"artist": ["x", "y", "x", "z"], "followers": [5, 7, 9, 7]})
    ranked = rank_and_truncate(frame, key="artist", rank_by="best", limit=2, aggregations={"best": ("followers", "max")})
    assert ranked.to_dict(orient="records") == [{"artist": "x", "best": 9}, {"artist": "y", "best": 7}]


def test_rank_and_truncate_keeps_best_row_per_key():
    frame = pd.DataFrame({"key": ["k1", "k2", "k1", "k3"], "score": [10, 50, 80, 50], "tag": ["a", "b", "c", "d"]})
    ranked = rank_and_truncate(frame, key="key", rank_by="score", limit=None)
    assert ranked["tag"].tolist() == ["c", "b", "d"]
