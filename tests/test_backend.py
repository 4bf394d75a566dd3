"""HTTP tests for the FastAPI backend."""
import pytest
from fastapi.testclient import TestClient

from conftest import history_json, opportunity_json
from backend.app import app

NOW_ISO = "2025-06-01T12:00:00Z"


@pytest.fixture
def client():
    return TestClient(app)


class TestMeta:
    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}

    def test_modes(self, client):
        body = client.get("/api/modes").json()
        assert set(body["modes"]) == {"balanced", "irating_push", "safety_recovery"}
        assert body["modes"]["safety_recovery"]["safety"] == pytest.approx(0.30)


class TestScore:
    def test_score(self, client):
        resp = client.post("/api/score", json={
            "opportunity": opportunity_json(),
            "history": history_json(),
            "mode": "safety_recovery",
            "now": NOW_ISO,
        })
        assert resp.status_code == 200
        body = resp.json()
        assert 0 <= body["overall"] <= 100
        assert body["factors"]["safety"] == 91
        assert body["factors"]["familiarity"] == 100
        assert body["safetyRatingRisk"] == "low"
        assert body["priorityScore"] == 50
        assert "breakdown" not in body

    def test_breakdown(self, client):
        resp = client.post("/api/score", json={
            "opportunity": opportunity_json(),
            "history": history_json(),
            "now": NOW_ISO,
            "include_breakdown": True,
        })
        assert len(resp.json()["breakdown"]) == 8

    def test_invalid_mode_is_400(self, client):
        resp = client.post("/api/score", json={
            "opportunity": opportunity_json(),
            "history": history_json(),
            "mode": "drift",
        })
        assert resp.status_code == 400
        assert "drift" in resp.json()["detail"]

    def test_missing_identifier_is_422(self, client):
        opportunity = opportunity_json()
        del opportunity["seriesId"]
        resp = client.post("/api/score", json={"opportunity": opportunity, "history": history_json()})
        assert resp.status_code == 422


    def test_non_integer_identifier_is_422(self, client):
        resp = client.post("/api/score", json={
            "opportunity": opportunity_json(seriesId="abc"),
            "history": history_json(),
        })
        assert resp.status_code == 422
        assert "seriesId" in resp.json()["detail"]


class TestRecommendations:
    def test_ranked_with_metadata(self, client):
        resp = client.post("/api/recommendations", json={
            "opportunities": [
                opportunity_json(trackId=51, raceLength=90),
                opportunity_json(),
                opportunity_json(seriesId=200, category="oval"),
            ],
            "history": history_json(),
            "now": NOW_ISO,
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["mode"] == "balanced"
        # The combination with history ranks first
        assert body["recommendations"][0]["trackId"] == 50
        assert body["recommendations"][0]["seriesId"] == 100
        assert body["metadata"]["total_opportunities"] == 3
        assert body["experience"]["total_races"] == 40

    def test_category_filter(self, client):
        resp = client.post("/api/recommendations", json={
            "opportunities": [opportunity_json(), opportunity_json(seriesId=200, category="oval")],
            "history": history_json(),
            "category": "oval",
        })
        assert [r["seriesId"] for r in resp.json()["recommendations"]] == [200]

    def test_unknown_category_is_400(self, client):
        resp = client.post("/api/recommendations", json={
            "opportunities": [opportunity_json()],
            "history": history_json(),
            "category": "hovercraft",
        })
        assert resp.status_code == 400

    def test_max_results_must_be_positive(self, client):
        resp = client.post("/api/recommendations", json={
            "opportunities": [opportunity_json()],
            "history": history_json(),
            "max_results": 0,
        })
        assert resp.status_code == 422

    def test_ineligible_races_are_skipped(self, client):
        resp = client.post("/api/recommendations", json={
            "opportunities": [opportunity_json(), opportunity_json(seriesId=300, licenseRequired="A")],
            "history": history_json(),
            "now": NOW_ISO,
        })
        body = resp.json()
        assert [r["seriesId"] for r in body["recommendations"]] == [100]
        assert body["metadata"]["eligible_opportunities"] == 1


class TestCompareModes:
    def test_every_mode(self, client):
        resp = client.post("/api/modes/compare", json={
            "opportunities": [
                opportunity_json(),
                opportunity_json(trackId=51, raceLength=90),
                opportunity_json(seriesId=300, licenseRequired="Pro"),
            ],
            "history": history_json(),
            "now": NOW_ISO,
        })
        assert resp.status_code == 200
        modes = resp.json()["modes"]
        assert set(modes) == {"balanced", "irating_push", "safety_recovery"}
        for picks in modes.values():
            assert sorted(p["trackId"] for p in picks) == [50, 51]

    def test_top_n(self, client):
        resp = client.post("/api/modes/compare", json={
            "opportunities": [opportunity_json(trackId=t) for t in range(5)],
            "history": history_json(),
            "top_n": 2,
        })
        assert all(len(picks) == 2 for picks in resp.json()["modes"].values())

    def test_top_n_must_be_positive(self, client):
        resp = client.post("/api/modes/compare", json={
            "opportunities": [opportunity_json()],
            "history": history_json(),
            "top_n": 0,
        })
        assert resp.status_code == 422

    def test_bad_record_is_422(self, client):
        resp = client.post("/api/modes/compare", json={
            "opportunities": [opportunity_json(trackId="somewhere")],
            "history": history_json(),
        })
        assert resp.status_code == 422
