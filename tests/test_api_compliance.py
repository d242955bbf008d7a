import pytest
from fastapi.testclient import TestClient

from housingguard.api.server import create_app
from housingguard.config import Settings


@pytest.fixture
def client(tmp_path):
    settings = Settings(log_path=str(tmp_path / "compliance_log.csv"))
    with TestClient(create_app(settings)) as c:
        yield c


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}
    st = client.get("/status").json()
    assert st["ok"] is True
    assert st["rules"]["fair_housing"] == 26
    assert st["rules"]["license_topics"] == 13


def test_check_blocking_message(client):
    r = client.post("/api/compliance/check", json={"text": "No kids allowed, adults only please", "channel": "sms"})
    assert r.status_code == 200
    d = r.json()
    assert d["compliant"] is False
    assert d["risk_score"] == 60
    assert d["recommended_action"] == "blocked"
    assert d["channel"] == "sms"
    assert d["alert"]["title"] == "Fair Housing Compliance Issue"
    assert [s["heading"] for s in d["alert"]["sections"]] == ["Must Fix", "Review Recommended"]


def test_check_clean_message(client):
    d = client.post("/api/compliance/check", json={"text": "Thanks for the quick maintenance fix, see you at checkout"}).json()
    assert d["compliant"] is True
    assert d["classification"] == "operations"
    assert d["alert"] is None
    assert d["recommended_action"] == "sent"


def test_check_requires_text(client):
    assert client.post("/api/compliance/check", json={}).status_code == 422


def test_log_then_stats(client):
    d = client.post("/api/compliance/log", json={"text": "Let's negotiate the monthly rent", "channel": "email"}).json()
    assert d["action_taken"] == "escalated"
    assert d["logged"] is True
    client.post("/api/compliance/log", json={"text": "No section 8", "action_taken": "modified"})

    s = client.get("/api/compliance/stats").json()
    assert s["window_hours"] == 24
    assert s["total"] == 2
    assert s["escalated"] == 1
    assert s["modified"] == 1
    assert s["top_issues"] == [{"phrase": "No section 8", "count": 1, "category": "race_color"}]


def test_log_rejects_bad_action(client):
    r = client.post("/api/compliance/log", json={"text": "hello", "action_taken": "deleted"})
    assert r.status_code == 422


def test_stats_hours_validated(client):
    assert client.get("/api/compliance/stats", params={"hours": 0}).status_code == 422


def test_audit_disabled(tmp_path):
    settings = Settings(log_path=str(tmp_path / "log.csv"), audit_enabled=False)
    with TestClient(create_app(settings)) as c:
        d = c.post("/api/compliance/log", json={"text": "No kids"}).json()
        assert d["logged"] is False
        assert d["action_taken"] == "blocked"
        assert c.get("/api/compliance/stats").json()["total"] == 0
    assert not (tmp_path / "log.csv").exists()


def test_stats_with_audit_disabled_creates_nothing(tmp_path):
    log_path = tmp_path / "nested" / "ops" / "log.csv"
    settings = Settings(log_path=str(log_path), audit_enabled=False)
    with TestClient(create_app(settings)) as c:
        d = c.get("/api/compliance/stats", params={"hours": 48}).json()
    assert d["total"] == 0
    assert d["window_hours"] == 48
    assert d["top_issues"] == []
    assert not (tmp_path / "nested").exists()


def test_debug_rules_hidden_unless_enabled(client, tmp_path):
    assert client.get("/api/debug/rules").status_code == 404

    settings = Settings(log_path=str(tmp_path / "log.csv"), debug=True)
    with TestClient(create_app(settings)) as c:
        d = c.get("/api/debug/rules", params={"q": "Perfect for women"}).json()
        assert list(d["fair_housing"])[0] == "familial_status"
        assert d["probe"]["compliant"] is False
        assert d["probe"]["issues"][0]["category"] == "sex_gender"
