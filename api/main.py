from __future__ import annotations

from contextlib import asynccontextmanager
import logging
import math
from typing import Any, Dict

import numpy as np
import pandas as pd
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import FiltersModel, RangeTransitionModel
from narrative.charts import build_chart_specs
from narrative.config import YEAR_MAX, YEAR_MIN, get_sources
from narrative.data import catalog_context
from narrative.filters import NarrativeFilters, filtered_view_for, normalize_filters
from narrative.ingest import start_ingestion
from narrative.metrics_summary import summary_statistics
from narrative.view_models import AGGREGATORS, recompute_view_models
from narrative.year_range import YearRange, range_highlight, range_transition

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    historical, modern = get_sources()
    app.state.sources = [historical, modern]
    app.state.catalog = None
    app.state.ingestion = start_ingestion(historical, modern)
    try:
        yield
    finally:
        # Discard the result if ingestion is still running at shutdown.
        app.state.ingestion.cancel()


app = FastAPI(title="Spotify Narrative API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _catalog(request: Request) -> Dict[str, Any]:
    state = request.app.state
    if state.catalog is None:
        tracks = await state.ingestion.result()
        state.catalog = catalog_context(tracks, files=state.sources)
    return state.catalog


async def _tracks(request: Request) -> pd.DataFrame:
    ctx = await _catalog(request)
    return ctx["tracks"]


def _filters_from_model(model: FiltersModel) -> NarrativeFilters:
    return normalize_filters(model.model_dump())


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


@app.get("/meta/genres")
async def meta_genres(request: Request):
    try:
        ctx = await _catalog(request)
        return _json({"genres": ctx["genres"]})
    except Exception as exc:
        logger.exception("meta_genres failed")
        return _error(exc)


@app.get("/meta/years")
async def meta_years(request: Request):
    try:
        ctx = await _catalog(request)
        return _json({"min": YEAR_MIN, "max": YEAR_MAX, "years": ctx["years"]})
    except Exception as exc:
        logger.exception("meta_years failed")
        return _error(exc)


@app.post("/view-models")
async def view_models(filters: FiltersModel, request: Request):
    try:
        tracks = await _tracks(request)
        return _json(recompute_view_models(tracks, _filters_from_model(filters)))
    except Exception as exc:
        logger.exception("view_models failed")
        return _error(exc)


@app.post("/summary")
async def summary(filters: FiltersModel, request: Request):
    try:
        tracks = await _tracks(request)
        f = _filters_from_model(filters)
        return _json({"filters": f.as_dict(), "summary": summary_statistics(filtered_view_for(tracks, f))})
    except Exception as exc:
        logger.exception("summary failed")
        return _error(exc)


@app.post("/charts/{name}")
async def chart_rows(name: str, filters: FiltersModel, request: Request):
    aggregate = AGGREGATORS.get(name)
    if aggregate is None:
        return JSONResponse(status_code=404, content={"error": f"unknown chart: {name}", "charts": sorted(AGGREGATORS)})
    try:
        tracks = await _tracks(request)
        f = _filters_from_model(filters)
        return _json({"filters": f.as_dict(), "rows": aggregate(filtered_view_for(tracks, f))})
    except Exception as exc:
        logger.exception("chart_rows failed")
        return _error(exc)


@app.post("/chart-specs")
async def chart_specs(filters: FiltersModel, request: Request):
    try:
        tracks = await _tracks(request)
        payload = recompute_view_models(tracks, _filters_from_model(filters))
        return _json({"filters": payload["filters"], "charts": build_chart_specs(payload)})
    except Exception as exc:
        logger.exception("chart_specs failed")
        return _error(exc)


@app.post("/year-range/transition")
def year_range_transition(body: RangeTransitionModel):
    try:
        current = YearRange(body.start, body.end)
    except ValueError as exc:
        return _error(exc, status_code=422)
    new_range = range_transition(current, body.endpoint, body.value)
    return _json({"year_range": new_range.as_dict(), "highlight": range_highlight(new_range)})


@app.post("/export/filtered")
async def export_filtered(filters: FiltersModel, request: Request):
    tracks = await _tracks(request)
    export_df = filtered_view_for(tracks, _filters_from_model(filters))
    export_df = export_df.assign(artist_genres=export_df["artist_genres"].map(list))
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=filtered_tracks.csv"},
    )
