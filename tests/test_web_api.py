"""Integration tests for the dashboard web API endpoints."""

from __future__ import annotations

import json
from pathlib import Path
from datetime import date, datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from moutai_index.dashboard import DashboardController
from moutai_index.forecast.cache import StalenessCache
from moutai_index.forecast.fetcher import PredictionFetcher
from moutai_index.forecast.generator import Generation
from moutai_index.forecast.models import PredictionState
from moutai_index.web.app import create_app
from moutai_index.web.config import WebConfig

VALID_RESPONSE = json.dumps({
    "market_summary": "Wholesale prices hold steady.",
    "sentiment_score": -5,
    "current_price": 1500,
    "history": [{"date": f"2025-01-0{d}", "price": 1490 + d} for d in range(1, 6)],
    "forecast": [
        {"date": "2025-01-06", "price": 1502, "upper_bound": 1520, "lower_bound": 1485},
    ],
})


@pytest.fixture()
def generator():
    gen = MagicMock()
    gen.generate.return_value = Generation(
        text=VALID_RESPONSE,
        grounding_chunks=[{"web": {"title": "Quotes", "uri": "https://example.com"}}],
    )
    return gen


@pytest.fixture()
def controller(generator):
    fetcher = PredictionFetcher(
        generator,
        StalenessCache(ttl_seconds=300),
        today=lambda: date(2025, 1, 5),
    )
    return DashboardController(fetcher, now=lambda: datetime(2025, 1, 5, 14, 30))


@pytest.fixture()
def client(controller, tmp_path):
    app = create_app(WebConfig(static_dir=str(tmp_path / "missing")), controller)
    return TestClient(app)


class TestPrediction:
    def test_empty_before_first_refresh(self, client):
        resp = client.get("/api/v1/prediction")
        assert resp.status_code == 200
        data = resp.json()
        assert data["current_price"] == 0
        assert data["last_update"] == "--:--"
        assert data["history"] == []
        assert data["error"] is None

    def test_refresh_populates_state(self, client):
        resp = client.post("/api/v1/refresh")
        assert resp.status_code == 200
        data = resp.json()
        assert data["current_price"] == 1500
        assert data["last_update"] == "14:30"
        assert len(data["history"]) == 5
        assert data["prediction"][0] == {
            "date": "2025-01-06",
            "price": 1502,
            "upper_bound": 1520,
            "lower_bound": 1485,
        }
        assert data["sentiment_score"] == -5
        assert data["sources"] == [{"title": "Quotes", "uri": "https://example.com"}]
        assert data["is_updating"] is False

        assert client.get("/api/v1/prediction").json() == data

    def test_refresh_uses_cache_unless_forced(self, client, generator):
        client.post("/api/v1/refresh")
        client.post("/api/v1/refresh")
        assert generator.generate.call_count == 1
        client.post("/api/v1/refresh", params={"force": "true"})
        assert generator.generate.call_count == 2

    def test_upstream_failure_reported_in_body(self, client, generator):
        generator.generate.side_effect = RuntimeError("quota exceeded")
        resp = client.post("/api/v1/refresh")
        assert resp.status_code == 200
        assert resp.json()["error"] == "Calibration failed: quota exceeded"

    def test_parse_failure_keeps_previous_data(self, client, generator):
        client.post("/api/v1/refresh")
        generator.generate.return_value = Generation(text="not json")
        data = client.post("/api/v1/refresh", params={"force": "true"}).json()
        assert data["error"] == "Calibration failed: AI data terminal parse exception."
        assert data["current_price"] == 1500

    def test_refresh_rejected_while_busy(self, client, controller):
        controller._state = PredictionState(is_updating=True)
        resp = client.post("/api/v1/refresh")
        assert resp.status_code == 409


class TestHistoryDraft:
    def test_edit_and_commit(self, client):
        client.post("/api/v1/refresh")
        draft = client.post("/api/v1/history/draft").json()
        assert len(draft["history"]) == 5

        resp = client.put("/api/v1/history/draft/0", json={"price": 1600})
        assert resp.status_code == 200
        assert resp.json()["price"] == 1600

        # not visible until committed
        assert client.get("/api/v1/prediction").json()["history"][0]["price"] == 1491

        data = client.post("/api/v1/history/draft/commit").json()
        assert data["history"][0]["price"] == 1600

    def test_discard(self, client):
        client.post("/api/v1/refresh")
        client.post("/api/v1/history/draft")
        client.put("/api/v1/history/draft/0", json={"price": 1600})
        assert client.delete("/api/v1/history/draft").status_code == 204
        assert client.get("/api/v1/prediction").json()["history"][0]["price"] == 1491

    def test_no_open_draft(self, client):
        assert client.post("/api/v1/history/draft/commit").status_code == 409
        assert client.delete("/api/v1/history/draft").status_code == 409
        assert client.put("/api/v1/history/draft/0", json={"price": 1}).status_code == 409

    def test_index_out_of_range(self, client):
        client.post("/api/v1/refresh")
        client.post("/api/v1/history/draft")
        assert client.put("/api/v1/history/draft/9", json={"price": 1}).status_code == 404

    def test_negative_price_rejected(self, client):
        client.post("/api/v1/refresh")
        client.post("/api/v1/history/draft")
        assert client.put("/api/v1/history/draft/0", json={"price": -1}).status_code == 422


class TestStatic:
    def test_shipped_page_polls_state_instead_of_refreshing(self):
        page = (Path(__file__).resolve().parents[1] / "static" / "index.html").read_text(encoding="utf-8")
        assert "setInterval(load," in page
        assert "setInterval(() => refresh" not in page

    def test_serves_index_when_static_dir_exists(self, controller, tmp_path):
        (tmp_path / "index.html").write_text("<html>dashboard</html>")
        app = create_app(WebConfig(static_dir=str(tmp_path)), controller)
        resp = TestClient(app).get("/")
        assert resp.status_code == 200
        assert "dashboard" in resp.text

    def test_api_routes_take_precedence(self, controller, tmp_path):
        (tmp_path / "index.html").write_text("<html></html>")
        app = create_app(WebConfig(static_dir=str(tmp_path)), controller)
        assert TestClient(app).get("/api/v1/prediction").status_code == 200
