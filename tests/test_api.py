from __future__ import annotations

import csv
import io

import pytest
from fastapi.testclient import TestClient

from api.main import app
from catalog_rows import sample_historical, sample_modern, write_csv
from narrative.genres import parse_genres


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("NARRATIVE_HISTORICAL_SOURCE", write_csv(tmp_path / "historical.csv", sample_historical()))
    monkeypatch.setenv("NARRATIVE_MODERN_SOURCE", write_csv(tmp_path / "modern.csv", sample_modern()))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def broken_client(tmp_path, monkeypatch):
    monkeypatch.setenv("NARRATIVE_HISTORICAL_SOURCE", str(tmp_path / "nope.csv"))
    monkeypatch.setenv("NARRATIVE_MODERN_SOURCE", str(tmp_path / "nope_either.csv"))
    with TestClient(app) as test_client:
        yield test_client


def test_meta_genres(client):
    resp = client.get("/meta/genres")
    assert resp.status_code == 200
    assert resp.json() == {"genres": ["All", "alt rock", "dance pop", "indie", "pop", "rock"]}


def test_meta_years(client):
    assert client.get("/meta/years").json() == {"min": 2009, "max": 2025, "years": [2012, 2015, 2025]}


def test_view_models(client):
    body = client.post("/view-models", json={"genre": "pop"}).json()
    assert body["summary"] == {"avg_popularity": 55.0, "avg_duration_minutes": 2.75, "track_count": 2}
    assert [t["full_name"] for t in body["top_tracks"]] == ["Alpha", "Gamma"]
    assert body["top_artists"][0]["label"] == "Ann (pop, dance pop…)"


def test_summary_with_year_range(client):
    body = client.post("/summary", json={"year_start": 2013, "year_end": 2024}).json()
    assert body["filters"]["year_range"] == {"start": 2013, "end": 2024}
    assert body["summary"]["track_count"] == 2


def test_single_chart_rows(client):
    body = client.post("/charts/duration_histogram", json={}).json()
    assert sum(b["count"] for b in body["rows"]) == 5


def test_unknown_chart(client):
    resp = client.post("/charts/pie", json={})
    assert resp.status_code == 404
    assert "genre_counts" in resp.json()["charts"]


def test_chart_specs(client):
    body = client.post("/chart-specs", json={}).json()
    assert "top_tracks" in body["charts"]


def test_year_range_transition(client):
    resp = client.post("/year-range/transition", json={"start": 2010, "end": 2015, "endpoint": "start", "value": 2020})
    assert resp.json()["year_range"] == {"start": 2020, "end": 2020}


def test_year_range_transition_rejects_inverted_range(client):
    resp = client.post("/year-range/transition", json={"start": 2020, "end": 2010, "endpoint": "end", "value": 2012})
    assert resp.status_code == 422


def test_export_filtered_csv(client):
    resp = client.post("/export/filtered", json={"genre": "rock"})
    assert resp.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(io.StringIO(resp.text)))
    assert [r["track_id"] for r in rows] == ["h2", "m1", "h2"]
    assert parse_genres(rows[2]["artist_genres"]) == ["rock", "alt rock"]


def test_failed_ingestion_serves_empty_views(broken_client):
    assert broken_client.get("/meta/genres").json() == {"genres": ["All"]}
    body = broken_client.post("/view-models", json={}).json()
    assert body["summary"]["track_count"] == 0
    assert body["genre_counts"] == []
