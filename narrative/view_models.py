from __future__ import annotations

from typing import Any, Callable, Dict, List

import pandas as pd

from narrative.filters import NarrativeFilters, filtered_view_for, normalize_filters
from narrative.metrics_duration import duration_histogram, yearly_average_duration
from narrative.metrics_genres import genre_counts, genre_popularity_trend
from narrative.metrics_rankings import top_artists, top_tracks
from narrative.metrics_summary import summary_statistics
from narrative.year_range import range_highlight

AGGREGATORS: Dict[str, Callable[[pd.DataFrame], List[Dict[str, Any]]]] = {
    "genre_counts": genre_counts,
    "duration_histogram": duration_histogram,
    "yearly_duration": yearly_average_duration,
    "top_artists": top_artists,
    "top_tracks": top_tracks,
    "genre_trend": genre_popularity_trend,
}


def recompute_view_models(dataset: pd.DataFrame, filters: dict | NarrativeFilters) -> Dict[str, Any]:
    """Re-derive every view-model from the full dataset for the given filters.

    Called on every filter change; nothing is carried over between calls.
    """
    filt = filters if isinstance(filters, NarrativeFilters) else normalize_filters(filters)
    view = filtered_view_for(dataset, filt)
    payload: Dict[str, Any] = {
        "filters": filt.as_dict(),
        "range_highlight": range_highlight(filt.year_range),
        "summary": summary_statistics(view),
    }
    for name, aggregate in AGGREGATORS.items():
        payload[name] = aggregate(view)
    return payload
