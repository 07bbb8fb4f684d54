"""Helpers for generating the fixtures of a competition stage."""

from __future__ import annotations

import uuid
from itertools import combinations
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import CompetitionNotFound
from ..models import Competition, Match, Player
from .validation import ValidationError

MIN_STAGE_PLAYERS = 4

# stage name -> number of away players per match
STAGE_FORMATS: dict[str, int] = {
    "Stage 1 (1v3)": 3,
    "Stage 2 (1v2)": 2,
    "Stage 3 (1v1)": 1,
}


def stage_pairings(player_ids: Sequence[str], away_size: int) -> list[tuple[str, list[str]]]:
    """Return ``(home, away_ids)`` pairings for one stage.

    In a 1vN stage every player hosts each combination of N other players.
    In 1v1 every unordered pair meets once, with the earlier player at home.
    """

    if away_size == 1:
        return [(a, [b]) for a, b in combinations(player_ids, 2)]

    pairings: list[tuple[str, list[str]]] = []
    for home in player_ids:
        others = [pid for pid in player_ids if pid != home]
        for team in combinations(others, away_size):
            pairings.append((home, list(team)))
    return pairings


async def generate_stage_matches(
    session: AsyncSession, competition_id: str, stage_name: str
) -> list[Match]:
    """Create the unplayed fixtures of ``stage_name`` for a competition.

    Every active league player takes part. Matches are numbered from 1 in
    generation order and committed together.
    """

    away_size = STAGE_FORMATS.get(stage_name)
    if away_size is None:
        raise ValidationError(f"Invalid stage name: {stage_name!r}.")

    competition = await session.get(Competition, competition_id)
    if competition is None:
        raise CompetitionNotFound(competition_id)

    player_ids = (
        await session.execute(
            select(Player.id)
            .where(Player.role == "player", Player.deleted_at.is_(None))
            .order_by(Player.created_at, Player.id)
        )
    ).scalars().all()
    if len(player_ids) < MIN_STAGE_PLAYERS:
        raise ValidationError(
            "Not enough players to generate matches. "
            f"At least {MIN_STAGE_PLAYERS} are required."
        )

    match_type = f"1v{away_size}"
    created: list[Match] = []
    for number, (home, away) in enumerate(stage_pairings(player_ids, away_size), start=1):
        match = Match(
            id=uuid.uuid4().hex,
            match_num=number,
            stage_name=stage_name,
            match_type=match_type,
            competition_id=competition_id,
            player1_id=home,
            player2_id=away[0] if away_size == 1 else None,
            player2_ids=None if away_size == 1 else away,
            result=None,
            votes={},
        )
        session.add(match)
        created.append(match)

    await session.commit()
    return created
