from typing import Any, Optional, Sequence

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..db import get_session
from ..models import Match, Player
from ..schemas import (
    LeaderCardOut,
    StandingEntryOut,
    StandingsOut,
    StatLeadersOut,
    stats_out,
)
from ..services import PlayerStanding, compute_standings, compute_stat_leaders

# Resource-only prefix; no /api or /api/v0 here
router = APIRouter(prefix="/leaderboards", tags=["leaderboards"])


async def league_players(session: AsyncSession) -> Sequence[Player]:
    """Players who appear in standings: role ``player`` and not deleted."""

    return (
        await session.execute(
            select(Player)
            .where(Player.role == "player", Player.deleted_at.is_(None))
            .order_by(Player.name)
        )
    ).scalars().all()


def to_standings_out(
    standings: Sequence[PlayerStanding],
    *,
    scope: str,
    competition_id: Optional[str] = None,
) -> StandingsOut:
    return StandingsOut(
        scope=scope,
        competitionId=competition_id,
        standings=[
            StandingEntryOut(
                rank=s.rank,
                playerId=s.player_id,
                playerName=s.name,
                stats=stats_out(s.stats),
            )
            for s in standings
        ],
        total=len(standings),
    )


def _leader_card(player: Any, value: float) -> LeaderCardOut:
    if player is None:
        return LeaderCardOut()
    return LeaderCardOut(playerId=player.id, name=player.name, value=value)


# GET /api/v0/leaderboards
@router.get("", response_model=StandingsOut)
async def leaderboard(session: AsyncSession = Depends(get_session)) -> StandingsOut:
    cache_key = ("global",)
    cached = await standings_cache.get(cache_key)
    if cached is not None:
        return cached

    generation = standings_cache.generation
    players = await league_players(session)
    matches = (
        await session.execute(select(Match).where(Match.result.is_not(None)))
    ).scalars().all()
    out = to_standings_out(compute_standings(players, matches), scope="global")
    await standings_cache.set(cache_key, out, generation=generation)
    return out


# GET /api/v0/leaderboards/leaders
@router.get("/leaders", response_model=StatLeadersOut)
async def stat_leaders(session: AsyncSession = Depends(get_session)) -> StatLeadersOut:
    players = await league_players(session)
    matches = (
        await session.execute(select(Match).where(Match.result.is_not(None)))
    ).scalars().all()
    summary = compute_stat_leaders(players, matches)

    top_scorer = summary["top_scorer"]
    best_defense = summary["best_defense"]
    most_wins = summary["most_wins"]
    fan_favorite = summary["fan_favorite"]
    most_scrutinized = summary["most_scrutinized"]
    return StatLeadersOut(
        totalPlayers=summary["total_players"],
        totalMatches=summary["total_matches"],
        totalGoals=summary["total_goals"],
        avgGoalsPerMatch=summary["avg_goals_per_match"],
        topScorer=_leader_card(top_scorer, top_scorer.goals_for if top_scorer else 0),
        bestDefense=_leader_card(
            best_defense, best_defense.goals_against if best_defense else 0
        ),
        mostWins=_leader_card(most_wins, most_wins.wins if most_wins else 0),
        fanFavorite=_leader_card(
            fan_favorite, fan_favorite.best_player_votes if fan_favorite else 0
        ),
        mostScrutinized=_leader_card(
            most_scrutinized,
            most_scrutinized.worst_player_votes if most_scrutinized else 0,
        ),
    )
