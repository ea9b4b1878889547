from __future__ import annotations

import re
from typing import Iterable, List, Sequence

from narrative.config import ARTIST_LABEL_GENRES

_BRACKETS = re.compile(r"[\[\]]")
_EDGE_QUOTES = re.compile(r"^['\"]+|['\"]+$")


def _keep_tag(tag: object) -> bool:
    return isinstance(tag, str) and bool(tag) and tag.lower() != "n/a"


def parse_genres(cell: object) -> List[str]:
    """Turn a raw genre cell into an ordered list of tags.

    Accepts a bracketed/quoted comma string like ``"['pop', 'dance pop']"``
    or an already parsed list. Empty and "n/a" tags are dropped; duplicates
    are kept. Never raises: anything unparseable yields ``[]``.
    """
    if isinstance(cell, (list, tuple)):
        return [g for g in cell if _keep_tag(g)]
    if not isinstance(cell, str) or not cell:
        return []
    try:
        tokens = (_EDGE_QUOTES.sub("", t.strip()) for t in _BRACKETS.sub("", cell).split(","))
        return [t for t in tokens if _keep_tag(t)]
    except Exception:
        return []


def format_genre_suffix(genres: Sequence[str], limit: int = ARTIST_LABEL_GENRES) -> str:
    """Label suffix like `` (pop, dance pop…)`` showing at most `limit` genres."""
    if not genres:
        return ""
    shown = [g.strip() for g in list(genres)[:limit] if g and g.strip()]
    if not shown:
        return ""
    ellipsis = "…" if len(genres) > limit else ""
    return f" ({', '.join(shown)}{ellipsis})"


def unique_in_order(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))
