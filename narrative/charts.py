from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from narrative.config import HISTOGRAM_MAX_MINUTES, HISTOGRAM_MIN_MINUTES

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _genre_counts_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    return (
        alt.Chart(pd.DataFrame(rows))
        .mark_bar(opacity=0.8)
        .encode(
            x=alt.X("genre:N", sort=None, title=None, axis=alt.Axis(labelAngle=-45)),
            y=alt.Y("count:Q", title="Tracks"),
            tooltip=["genre", alt.Tooltip("count:Q", format=",")],
        )
    )


def _duration_histogram_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    # Sparse bins: gaps in the domain are empty bins.
    return (
        alt.Chart(pd.DataFrame(rows))
        .mark_bar()
        .encode(
            x=alt.X("x0:Q", title="Duration (minutes)", scale=alt.Scale(domain=[HISTOGRAM_MIN_MINUTES, HISTOGRAM_MAX_MINUTES])),
            x2="x1",
            y=alt.Y("count:Q", title="Tracks"),
            tooltip=[alt.Tooltip("x0:Q", title="From"), alt.Tooltip("x1:Q", title="To"), "count"],
        )
    )


def _yearly_duration_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    return (
        alt.Chart(pd.DataFrame(rows))
        .mark_line(point=True)
        .encode(
            x=alt.X("year:Q", title="Release Year", axis=alt.Axis(format="d")),
            y=alt.Y("avg_duration_minutes:Q", title="Avg Duration (min)", scale=alt.Scale(zero=False)),
            tooltip=["year", alt.Tooltip("avg_duration_minutes:Q", format=".2f")],
        )
    )


def _top_artists_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    data = pd.DataFrame([{k: v for k, v in r.items() if k != "genres"} for r in rows])
    return (
        alt.Chart(data)
        .mark_bar()
        .encode(
            y=alt.Y("label:N", sort=None, title=None),
            x=alt.X("followers:Q", title="Followers", axis=alt.Axis(format="~s")),
            tooltip=["name", alt.Tooltip("followers:Q", format=",")],
        )
    )


def _top_tracks_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    data = pd.DataFrame([{k: v for k, v in r.items() if k != "genres"} for r in rows])
    return (
        alt.Chart(data)
        .mark_bar()
        .encode(
            y=alt.Y("id:N", sort=None, title=None, axis=None),
            x=alt.X("popularity:Q", title="Popularity", scale=alt.Scale(domain=[0, 100])),
            tooltip=["rank", "full_name", "artist", "popularity"],
        )
    )


def _genre_trend_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    long_df = pd.DataFrame(
        [{"genre": s["genre"], "year": v["year"], "value": v["value"]} for s in rows for v in s["values"]]
    )
    hover = alt.selection_point(fields=["genre"], on="mouseover", empty="all")
    return (
        alt.Chart(long_df)
        .mark_line(point={"filled": True})
        .encode(
            x=alt.X("year:Q", title="Release Year", axis=alt.Axis(format="d")),
            y=alt.Y("value:Q", title="Avg Popularity", scale=alt.Scale(domain=[0, 100])),
            color=alt.Color("genre:N", sort=[s["genre"] for s in rows], title="Genre"),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=["genre", "year", alt.Tooltip("value:Q", format=".1f")],
        )
        .add_params(hover)
    )


CHART_BUILDERS = {
    "genre_counts": _genre_counts_chart,
    "duration_histogram": _duration_histogram_chart,
    "yearly_duration": _yearly_duration_chart,
    "top_artists": _top_artists_chart,
    "top_tracks": _top_tracks_chart,
    "genre_trend": _genre_trend_chart,
}


def build_chart_specs(view_models: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Vega-Lite specs for every non-empty view-model; empty views get no chart."""
    charts: Dict[str, Dict[str, Any]] = {}
    for name, builder in CHART_BUILDERS.items():
        rows = view_models.get(name) or []
        if rows:
            charts[name] = to_vega_spec(builder(rows))
    return charts
