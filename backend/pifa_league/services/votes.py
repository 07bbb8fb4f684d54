from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import match_write
from ..exceptions import MatchNotFound, PlayerNotFound, VoteAlreadyCast
from ..models import Match, Player
from .standings import participant_ids
from .validation import ValidationError, validate_vote

logger = logging.getLogger(__name__)


async def submit_vote(
    session: AsyncSession,
    match_id: str,
    voter_id: str,
    best_player_id: str,
    worst_player_id: str,
) -> Match:
    """Record a best/worst player vote and bump both players' counters.

    Only played matches take votes.
    """

    match = await session.get(Match, match_id)
    if match is None:
        raise MatchNotFound(match_id)
    if match.result is None:
        raise ValidationError("Votes can only be cast once the match has been played.")

    validate_vote(participant_ids(match), best_player_id, worst_player_id)
    votes = dict(match.votes or {})
    if voter_id in votes:
        raise VoteAlreadyCast(match_id, voter_id)

    votes[voter_id] = {"best": best_player_id, "worst": worst_player_id}
    async with match_write(session, match_id):
        match.votes = votes
        await session.flush()
        for player_id, column in (
            (best_player_id, Player.best_player_votes),
            (worst_player_id, Player.worst_player_votes),
        ):
            result = await session.execute(
                update(Player)
                .where(Player.id == player_id)
                .values({column: column + 1})
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise PlayerNotFound(player_id)

    logger.info("Vote by %s recorded on match %s", voter_id, match_id)
    return match
