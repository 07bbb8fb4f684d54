from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded
from slowapi import Limiter

from pifa_league import rate_limit


def test_limit_is_relaxed_when_disabled(monkeypatch):
    monkeypatch.setenv("DISABLE_RATE_LIMITS", "true")
    assert rate_limit.score_update_rate_limit() == "1000/second"

    monkeypatch.setenv("DISABLE_RATE_LIMITS", "false")
    assert rate_limit.score_update_rate_limit() == rate_limit.RATE_LIMIT_SCORE_UPDATES


def test_exceeding_limit_returns_problem_json():
    limiter = Limiter(key_func=rate_limit._get_client_ip)
    app = FastAPI()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit.rate_limit_handler)

    @app.get("/ping")
    @limiter.limit("1/minute")
    async def ping(request: Request):
        return {"ok": True}

    client = TestClient(app)
    assert client.get("/ping").status_code == 200

    resp = client.get("/ping")
    assert resp.status_code == 429
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["code"] == "rate_limit_exceeded"


def test_client_ip_prefers_forwarded_header():
    app = FastAPI()

    @app.get("/ip")
    async def ip(request: Request):
        return {"ip": rate_limit._get_client_ip(request)}

    client = TestClient(app)
    resp = client.get("/ip", headers={"X-Forwarded-For": "10.0.0.1, 203.0.113.9"})
    assert resp.json() == {"ip": "203.0.113.9"}
