"""Tests for the FastAPI moderation and risk endpoints."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from reportguard.audit import ModerationLog
from reportguard.config import Settings
from web.backend.app.main import app
from web.backend.app.routers.moderation import get_log, get_settings


@pytest.fixture
def client():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        app.dependency_overrides[get_settings] = lambda: Settings()
        app.dependency_overrides[get_log] = lambda: log
        yield TestClient(app)
        app.dependency_overrides.clear()


def _history(description, minutes):
    return [
        {"title": "Report", "description": description, "createdAt": f"2024-05-15T11:{m:02d}:00Z"}
        for m in minutes
    ]


# --- Meta ---


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["name"] == "reportguard API"


# --- Moderation ---


def test_precheck_endpoint(client):
    resp = client.post("/api/moderation/precheck", json={"text": "Buy Now while stocks last"})
    data = resp.json()
    assert resp.status_code == 200
    assert data["allowed"] is False
    assert data["category"] == "keyword"
    assert data["message"].startswith("Your post contains prohibited words or phrases.")

    assert client.post("/api/moderation/precheck", json={"text": "all good"}).json()["allowed"]


def test_analyze_requires_content(client):
    resp = client.post("/api/moderation/analyze", json={"title": "", "description": ""})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Title or description required"


def test_analyze_fallback_allowed(client):
    resp = client.post(
        "/api/moderation/analyze",
        json={"title": "Broken window", "description": "Glass on the floor near the library entrance"},
    )
    data = resp.json()
    assert resp.status_code == 200
    assert data["success"] is True
    assert data["verdict"]["allowed"] is True
    assert data["verdict"]["message"] == ""
    assert data["analysis"]["method"] == "fallback"


def test_analyze_blocked_and_logged(client):
    resp = client.post(
        "/api/moderation/analyze",
        json={"description": "this is spam", "user_id": "u9", "post_id": "p9"},
    )
    verdict = resp.json()["verdict"]
    assert verdict["allowed"] is False
    assert verdict["violation_type"] == "explicit_keyword"
    assert verdict["confidence"] == 0
    assert "community guidelines" in verdict["message"]

    entries = client.get("/api/moderation/logs", params={"action": "blocked"}).json()
    assert len(entries) == 1
    assert entries[0]["user_id"] == "u9"
    assert entries[0]["post_id"] == "p9"


def test_log_export_csv(client):
    client.post("/api/moderation/analyze", json={"description": "Glass on the floor near the gym"})
    resp = client.get("/api/moderation/logs/export", params={"format": "csv"})
    data = resp.json()
    assert data["format"] == "csv"
    assert data["record_count"] == 1
    assert data["content"].startswith("id,timestamp")

    assert client.get("/api/moderation/logs/export", params={"format": "xml"}).status_code == 422


def test_status(client):
    data = client.get("/api/moderation/status").json()
    assert data["level"] == "basic"
    assert data["configured"] is False
    assert data["profile"] == "admin"
    assert data["nsfw_threshold"] == 0.5


# --- Risk ---


def test_risk_analyze_auto_flags(client):
    resp = client.post(
        "/api/risk/analyze",
        json={
            "report": {
                "id": "r4",
                "title": "Report",
                "description": "nothing to report",
                "createdAt": "2024-05-15T12:00:00Z",
            },
            "user_history": _history("nothing to report", (51, 54, 57)),
        },
    )
    data = resp.json()
    assert resp.status_code == 200
    assert data["suspicion_score"] == 85
    assert data["risk_level"] == "HIGH"
    assert data["should_auto_flag"] is True
    assert data["auto_flag_rules"] == ["recommendation_auto_flag", "score_at_least_80"]
    assert data["recommendation"]["auto_flag"] is True
    assert data["report"]["status"] == "flagged_false"
    assert data["report"]["aiAnalysis"]["suspicionScore"] == 85

    entries = client.get("/api/moderation/logs", params={"kind": "risk"}).json()
    assert entries[0]["action"] == "auto_flagged"


def test_risk_analyze_without_auto_flag(client):
    resp = client.post(
        "/api/risk/analyze",
        json={
            "report": {"title": "Report", "description": "nothing to report",
                       "createdAt": "2024-05-15T12:00:00Z"},
            "user_history": _history("nothing to report", (51, 54, 57)),
            "apply_auto_flag": False,
        },
    )
    data = resp.json()
    assert data["should_auto_flag"] is True
    assert data["report"]["status"] == "pending"


def test_risk_summary(client):
    resp = client.post(
        "/api/risk/summary",
        json={"report": {"description": "asdf"}, "now": "2024-05-15T12:00:00Z"},
    )
    data = resp.json()
    assert data["verdict"] == "SUSPICIOUS"
    assert data["confidence"] == "60%"
    assert data["risk_level"] == "MEDIUM"
    assert len(data["main_concerns"]) == 3


def test_risk_invalid_report(client):
    resp = client.post("/api/risk/analyze", json={"report": {"status": "archived"}})
    assert resp.status_code == 400
    assert "Unknown report status" in resp.json()["detail"]


def test_unwritable_log_dir_does_not_block_decisions():
    with tempfile.TemporaryDirectory() as tmp:
        blocker = Path(tmp) / "not-a-dir"
        blocker.write_text("")
        app.dependency_overrides[get_settings] = lambda: Settings()
        app.dependency_overrides[get_log] = lambda: ModerationLog(blocker / "logs")
        try:
            client = TestClient(app)
            resp = client.post(
                "/api/moderation/analyze",
                json={"title": "Broken window", "description": "Glass on the floor near the gym"},
            )
            assert resp.status_code == 200
            assert resp.json()["verdict"]["allowed"] is True

            resp = client.post(
                "/api/risk/analyze",
                json={"report": {"description": "asdf"}, "now": "2024-05-15T12:00:00Z"},
            )
            assert resp.status_code == 200
            assert resp.json()["suspicion_score"] == 60
        finally:
            app.dependency_overrides.clear()


def test_risk_malformed_timestamp_is_client_error(client):
    for created in ({"seconds": "abc"}, 1e20):
        resp = client.post(
            "/api/risk/summary",
            json={"report": {"description": "asdf", "createdAt": created}},
        )
        assert resp.status_code == 400
