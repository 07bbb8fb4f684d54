"""Apply a match result and keep every participant's stored aggregate in step.

A match's ``result`` column is the only record of whether its statistics have
been applied. Changing it therefore means reverting whatever the old value
contributed and applying what the new value contributes, all inside the same
transaction as the match write.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import match_write
from ..exceptions import MatchNotFound, PlayerNotFound
from ..models import Match, Player
from .standings import STAT_FIELDS, PlayerStats, result_contributions
from .validation import validate_result

logger = logging.getLogger(__name__)


def transition_deltas(
    match: Any, old_result: Optional[str], new_result: Optional[str]
) -> dict[str, PlayerStats]:
    """Return the per-player change needed to move from ``old_result`` to ``new_result``.

    Players whose contribution is identical under both results are omitted.
    """

    before = result_contributions(match, old_result)
    after = result_contributions(match, new_result)
    deltas: dict[str, PlayerStats] = {}
    for pid in [*before, *(k for k in after if k not in before)]:
        delta = after.get(pid, PlayerStats()) - before.get(pid, PlayerStats())
        if not delta.is_zero():
            deltas[pid] = delta
    return deltas


async def _apply_player_delta(
    session: AsyncSession, player_id: str, delta: PlayerStats
) -> None:
    values = {
        name: getattr(Player, name) + getattr(delta, name)
        for name in STAT_FIELDS
        if getattr(delta, name)
    }
    result = await session.execute(
        update(Player)
        .where(Player.id == player_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise PlayerNotFound(player_id)


async def apply_result(
    session: AsyncSession, match_id: str, new_result: Optional[str]
) -> Match:
    """Set ``match.result`` to ``new_result`` and update participant stats.

    The match write and every player increment share one transaction. The
    match row carries a version counter, so a concurrent update to the same
    match makes this call fail with :class:`TransactionConflictError` instead
    of interleaving two reversal/application sequences. Player counters are
    changed with SQL-side increments, so updates to different matches that
    share players do not lose each other's writes.
    """

    validate_result(new_result)

    match = await session.get(Match, match_id)
    if match is None:
        raise MatchNotFound(match_id)

    old_result = match.result
    if old_result == new_result:
        return match

    deltas = transition_deltas(match, old_result, new_result)
    async with match_write(session, match_id):
        match.result = new_result
        await session.flush()
        for player_id, delta in deltas.items():
            await _apply_player_delta(session, player_id, delta)

    logger.info(
        "Match %s result %r -> %r; updated %d player(s)",
        match_id,
        old_result,
        new_result,
        len(deltas),
    )
    return match
