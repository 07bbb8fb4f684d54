"""League standings computed by replaying completed matches.

Everything in this module is pure: it reads player and match records (ORM rows
or any object exposing the same attributes) and never mutates them. The score
transition engine reuses :func:`result_contributions` so the running aggregate
stored on each player and the replayed standings follow identical rules.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

from ..config import POINTS_FOR_DRAW, POINTS_FOR_WIN
from .validation import parse_result

STAT_FIELDS = (
    "played",
    "wins",
    "draws",
    "losses",
    "goals_for",
    "goals_against",
    "goal_difference",
    "points",
    "assists",
)

Scope = Union[Callable[[Any], bool], Mapping[str, Any], None]


@dataclass
class PlayerStats:
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0
    assists: int = 0

    def __add__(self, other: "PlayerStats") -> "PlayerStats":
        return PlayerStats(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    def __neg__(self) -> "PlayerStats":
        return PlayerStats(**{f.name: -getattr(self, f.name) for f in fields(self)})

    def __sub__(self, other: "PlayerStats") -> "PlayerStats":
        return self + (-other)

    def is_zero(self) -> bool:
        return all(getattr(self, f.name) == 0 for f in fields(self))

    def as_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in STAT_FIELDS}

    @classmethod
    def from_record(cls, record: Any) -> "PlayerStats":
        """Read the stored aggregate columns off a player record."""
        return cls(**{name: int(getattr(record, name, 0) or 0) for name in STAT_FIELDS})


@dataclass
class PlayerStanding:
    player_id: str
    name: str
    stats: PlayerStats
    rank: int = 0


def away_player_ids(match: Any) -> list[str]:
    """Return the away side of a match.

    ``player2_ids`` wins when present (1vN formats); otherwise the single
    ``player2_id`` is used, and a match without either has no away side.
    """

    ids = getattr(match, "player2_ids", None)
    if ids:
        return list(ids)
    single = getattr(match, "player2_id", None)
    return [single] if single else []


def participant_ids(match: Any) -> list[str]:
    return [match.player1_id, *away_player_ids(match)]


def is_team_match(match: Any) -> bool:
    return len(away_player_ids(match)) > 1


def _outcome(goals_for: int, goals_against: int) -> PlayerStats:
    if goals_for > goals_against:
        return PlayerStats(played=1, wins=1, points=POINTS_FOR_WIN)
    if goals_for < goals_against:
        return PlayerStats(played=1, losses=1)
    return PlayerStats(played=1, draws=1, points=POINTS_FOR_DRAW)


def _with_goals(stats: PlayerStats, goals_for: int, goals_against: int) -> PlayerStats:
    stats.goals_for = goals_for
    stats.goals_against = goals_against
    stats.goal_difference = goals_for - goals_against
    return stats


def result_contributions(match: Any, result: Optional[str]) -> dict[str, PlayerStats]:
    """Return what ``result`` adds to each participant's aggregate.

    The home player always receives goal figures. Away players receive them
    only in a 1v1 match; in a team match every away player gets the outcome
    (a full win, draw or loss) but no goals.
    """

    if result is None:
        return {}
    home_score, away_score = parse_result(result)
    contributions: dict[str, PlayerStats] = {}

    home = _with_goals(_outcome(home_score, away_score), home_score, away_score)
    contributions[match.player1_id] = home

    away_ids = away_player_ids(match)
    team = len(away_ids) > 1
    for pid in away_ids:
        stats = _outcome(away_score, home_score)
        if not team:
            _with_goals(stats, away_score, home_score)
        if pid in contributions:
            contributions[pid] = contributions[pid] + stats
        else:
            contributions[pid] = stats
    return contributions


def _scope_predicate(scope: Scope) -> Callable[[Any], bool]:
    if scope is None:
        return lambda match: True
    if callable(scope):
        return scope
    criteria = dict(scope)
    return lambda match: all(getattr(match, key, None) == value for key, value in criteria.items())


def standings_sort_key(standing: PlayerStanding) -> tuple:
    stats = standing.stats
    return (-stats.points, -stats.goal_difference, -stats.goals_for, standing.name)


def accumulate_stats(
    player_ids: Iterable[str], matches: Iterable[Any], scope: Scope = None
) -> dict[str, PlayerStats]:
    """Replay completed matches in scope into a fresh stats table.

    Participants outside ``player_ids`` are ignored.
    """

    table = {pid: PlayerStats() for pid in player_ids}
    in_scope = _scope_predicate(scope)
    for match in matches:
        if not match.result or not in_scope(match):
            continue
        for pid, contribution in result_contributions(match, match.result).items():
            if pid in table:
                table[pid] = table[pid] + contribution
    return table


def compute_standings(
    players: Sequence[Any], matches: Iterable[Any], scope: Scope = None
) -> list[PlayerStanding]:
    """Compute an ordered standings table from scratch.

    ``scope`` is either a predicate over a match or a mapping of match
    attribute to required value (``{"competition_id": "cup"}``). Rows are
    ordered by points, goal difference and goals scored (all descending),
    then by name.
    """

    table = accumulate_stats([p.id for p in players], matches, scope)
    standings = [
        PlayerStanding(player_id=p.id, name=p.name or "", stats=table[p.id])
        for p in players
    ]
    standings.sort(key=standings_sort_key)
    for position, standing in enumerate(standings, start=1):
        standing.rank = position
    return standings


def _max_by(players: Sequence[Any], key: Callable[[Any], float]) -> Any | None:
    best = None
    for player in players:
        if best is None or key(player) >= key(best):
            best = player
    return best


def _min_by(players: Sequence[Any], key: Callable[[Any], float]) -> Any | None:
    best = None
    for player in players:
        if best is None or key(player) <= key(best):
            best = player
    return best


def compute_stat_leaders(players: Sequence[Any], matches: Iterable[Any]) -> dict[str, Any]:
    """Summarise league-wide totals and the leader in each stat category.

    Uses the stored aggregates on the player records. Ties go to whichever
    tied player comes last in ``players``.
    """

    played_matches = [m for m in matches if m.result]
    total_goals = 0
    for match in played_matches:
        home, away = parse_result(match.result)
        total_goals += home + away

    active = [p for p in players if (p.played or 0) > 0]
    return {
        "total_players": len(players),
        "total_matches": len(played_matches),
        "total_goals": total_goals,
        "avg_goals_per_match": (
            round(total_goals / len(played_matches), 1) if played_matches else 0.0
        ),
        "top_scorer": _max_by(players, lambda p: p.goals_for or 0),
        "best_defense": _min_by(active, lambda p: (p.goals_against or 0) / p.played),
        "most_wins": _max_by(players, lambda p: p.wins or 0),
        "fan_favorite": _max_by(players, lambda p: p.best_player_votes or 0),
        "most_scrutinized": _max_by(players, lambda p: p.worst_player_votes or 0),
    }
