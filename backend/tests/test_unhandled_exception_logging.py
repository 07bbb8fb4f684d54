import logging

from conftest import make_players, seed
from pifa_league.routers import leaderboards


def test_standings_crash_is_logged(client, session_maker, monkeypatch, caplog):
    seed(session_maker, *make_players("a", "b"))

    def boom(players, matches, **kwargs):
        raise ValueError("standings blew up")

    monkeypatch.setattr(leaderboards, "compute_standings", boom)

    with caplog.at_level(logging.ERROR, logger="pifa_league.main"):
        response = client.get("/leaderboards")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["code"] == "internal_server_error"
    record = next(r for r in caplog.records if r.message == "Unhandled exception")
    assert record.exc_info[0] is ValueError
    assert "standings blew up" in caplog.text
