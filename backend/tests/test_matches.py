from sqlalchemy.exc import OperationalError

from conftest import fail_statements, fetch_match, fetch_player, make_players, seed
from pifa_league.models import Competition, Match


def _create_match(client, **body):
    resp = client.post("/matches", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_one_v_one_match(client, session_maker):
    seed(session_maker, *make_players("a", "b"))

    data = _create_match(client, player1Id="a", player2Id="b", matchNum=1)

    assert data["matchType"] == "1v1"
    assert data["result"] is None
    assert data["player2Ids"] is None
    assert data["version"] == 1

    fetched = client.get(f"/matches/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["player1Id"] == "a"


def test_create_team_match(client, session_maker):
    seed(session_maker, *make_players("a", "b", "c", "d"))

    data = _create_match(client, player1Id="a", player2Ids=["b", "c", "d"])

    assert data["matchType"] == "1v3"
    assert data["player2Ids"] == ["b", "c", "d"]
    assert data["player2Id"] is None


def test_create_match_rejects_bad_away_side(client, session_maker):
    seed(session_maker, *make_players("a", "b"))

    for body in (
        {"player1Id": "a"},
        {"player1Id": "a", "player2Id": "a"},
        {"player1Id": "a", "player2Id": "b", "player2Ids": ["b"]},
        {"player1Id": "a", "player2Ids": ["a", "b"]},
        {"player1Id": "a", "player2Ids": ["b", "b"]},
    ):
        resp = client.post("/matches", json=body)
        assert resp.status_code == 422, body
        assert resp.json()["code"] == "validation_error"


def test_create_match_with_unknown_player(client, session_maker):
    seed(session_maker, *make_players("a"))

    resp = client.post("/matches", json={"player1Id": "a", "player2Id": "ghost"})

    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["code"] == "player_not_found"


def test_create_match_with_unknown_competition(client, session_maker):
    seed(session_maker, *make_players("a", "b"))

    resp = client.post(
        "/matches", json={"player1Id": "a", "player2Id": "b", "competitionId": "nope"}
    )

    assert resp.status_code == 404
    assert resp.json()["code"] == "competition_not_found"


def test_put_result_updates_player_stats(client, session_maker):
    seed(
        session_maker,
        *make_players("a", "b"),
        Match(id="m1", player1_id="a", player2_id="b", votes={}),
    )

    resp = client.put("/matches/m1/result", json={"result": "3-1"})

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["result"] == "3-1"
    assert body["version"] == 2

    player = client.get("/players/a").json()
    assert player["stats"]["points"] == 3
    assert player["stats"]["goalsFor"] == 3
    assert player["stats"]["goalDifference"] == 2

    cleared = client.put("/matches/m1/result", json={"result": None})
    assert cleared.status_code == 200
    assert cleared.json()["result"] is None
    assert fetch_player(session_maker, "a").points == 0
    assert fetch_player(session_maker, "b").losses == 0


def test_put_invalid_result_is_problem_json(client, session_maker):
    seed(
        session_maker,
        *make_players("a", "b"),
        Match(id="m1", player1_id="a", player2_id="b", votes={}),
    )

    resp = client.put("/matches/m1/result", json={"result": "three-one"})

    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith("application/problem+json")
    body = resp.json()
    assert body["code"] == "invalid_score"
    assert body["status"] == 422
    assert fetch_player(session_maker, "a").played == 0


def test_put_result_requires_result_field(client, session_maker):
    seed(
        session_maker,
        *make_players("a", "b"),
        Match(id="m1", player1_id="a", player2_id="b", votes={}),
    )

    resp = client.put("/matches/m1/result", json={})

    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"


def test_put_result_on_unknown_match(client):
    resp = client.put("/matches/missing/result", json={"result": "1-0"})

    assert resp.status_code == 404
    assert resp.json()["code"] == "match_not_found"


def test_list_matches_filters(client, session_maker):
    seed(
        session_maker,
        Competition(id="s1", name="Season 1"),
        *make_players("a", "b"),
        Match(id="m1", player1_id="a", player2_id="b", competition_id="s1", match_num=1, result="1-0", votes={}),
        Match(id="m2", player1_id="b", player2_id="a", competition_id="s1", match_num=2, votes={}),
        Match(id="m3", player1_id="a", player2_id="b", match_num=3, votes={}),
    )

    in_season = client.get("/matches", params={"competitionId": "s1"}).json()
    assert {m["id"] for m in in_season} == {"m1", "m2"}

    played = client.get("/matches", params={"played": "true"}).json()
    assert [m["id"] for m in played] == ["m1"]

    unplayed = client.get("/matches", params={"played": "false"}).json()
    assert {m["id"] for m in unplayed} == {"m2", "m3"}


def test_delete_match_requires_cleared_result(client, session_maker):
    seed(
        session_maker,
        *make_players("a", "b"),
        Match(id="m1", player1_id="a", player2_id="b", result="2-0", votes={}),
        Match(id="m2", player1_id="a", player2_id="b", votes={}),
    )

    blocked = client.delete("/matches/m1")
    assert blocked.status_code == 409
    assert blocked.json()["code"] == "match_has_result"

    assert client.delete("/matches/m2").status_code == 204
    assert client.get("/matches/m2").status_code == 404


def test_vote_endpoint(client, session_maker):
    seed(
        session_maker,
        *make_players("a", "b", "fan"),
        Match(id="m1", player1_id="a", player2_id="b", result="0-0", votes={}),
    )
    body = {"voterId": "fan", "bestPlayerId": "a", "worstPlayerId": "b"}

    first = client.post("/matches/m1/votes", json=body)
    assert first.status_code == 200, first.text
    assert first.json()["votes"] == {"fan": {"best": "a", "worst": "b"}}

    again = client.post("/matches/m1/votes", json=body)
    assert again.status_code == 409
    assert again.json()["code"] == "vote_already_cast"

    invalid = client.post(
        "/matches/m1/votes",
        json={"voterId": "other", "bestPlayerId": "a", "worstPlayerId": "a"},
    )
    assert invalid.status_code == 422
    assert invalid.json()["code"] == "invalid_vote"

    assert client.get("/players/a").json()["bestPlayerVotes"] == 1
    assert client.get("/players/b").json()["worstPlayerVotes"] == 1


def test_put_oversized_score_is_invalid(client, session_maker):
    seed(
        session_maker,
        *make_players("a", "b"),
        Match(id="m1", player1_id="a", player2_id="b", votes={}),
    )

    for score in ("99999999999999999999-1", "1000-0"):
        resp = client.put("/matches/m1/result", json={"result": score})
        assert resp.status_code == 422, score
        assert resp.json()["code"] == "invalid_score"

    assert fetch_match(session_maker, "m1").result is None
    assert fetch_player(session_maker, "a").goals_for == 0


def test_put_result_reports_failed_write_as_503(client, session_maker):
    seed(
        session_maker,
        *make_players("a", "b"),
        Match(id="m1", player1_id="a", player2_id="b", votes={}),
    )
    fail_statements(
        session_maker,
        "UPDATE player",
        OperationalError("UPDATE player", {}, Exception("database is locked")),
    )

    resp = client.put("/matches/m1/result", json={"result": "2-1"})

    assert resp.status_code == 503
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["code"] == "commit_failed"
    match = fetch_match(session_maker, "m1")
    assert (match.result, match.version) == (None, 1)
    assert fetch_player(session_maker, "a").played == 0
    assert fetch_player(session_maker, "b").played == 0


def test_vote_on_unplayed_match_is_invalid(client, session_maker):
    seed(
        session_maker,
        *make_players("a", "b", "fan"),
        Match(id="m1", player1_id="a", player2_id="b", votes={}),
    )

    resp = client.post(
        "/matches/m1/votes",
        json={"voterId": "fan", "bestPlayerId": "a", "worstPlayerId": "b"},
    )

    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_vote"
    assert fetch_match(session_maker, "m1").votes == {}
    assert fetch_player(session_maker, "a").best_player_votes == 0


def test_unknown_route_and_method_are_problem_json(client):
    missing = client.get("/no-such-route")
    assert missing.status_code == 404
    assert missing.headers["content-type"].startswith("application/problem+json")
    assert missing.json()["code"] == "http_404"

    wrong_method = client.patch("/matches")
    assert wrong_method.status_code == 405
    assert wrong_method.json()["code"] == "http_405"
