"""Compare stored player aggregates against a full replay of match results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Match, Player
from .standings import STAT_FIELDS, PlayerStats, accumulate_stats

logger = logging.getLogger(__name__)


@dataclass
class PlayerDrift:
    player_id: str
    name: str
    stored: PlayerStats
    expected: PlayerStats

    @property
    def fields(self) -> list[str]:
        return [
            name
            for name in STAT_FIELDS
            if getattr(self.stored, name) != getattr(self.expected, name)
        ]


@dataclass
class ReconciliationReport:
    checked: int = 0
    drifted: list[PlayerDrift] = field(default_factory=list)
    repaired: bool = False
    skipped: list[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.drifted


async def detect_drift(session: AsyncSession, *, lock: bool = False) -> ReconciliationReport:
    """Replay every result and list the players whose stored totals differ.

    Assists are not derived from match results, so they are carried over from
    the stored record rather than compared. With ``lock`` set the player rows
    are read ``FOR UPDATE`` on databases that support it.
    """

    stmt = select(Player).where(Player.deleted_at.is_(None)).order_by(Player.id)
    if lock:
        stmt = stmt.with_for_update()
    players = (await session.execute(stmt)).scalars().all()
    matches = (
        await session.execute(select(Match).where(Match.result.is_not(None)))
    ).scalars().all()

    expected = accumulate_stats([p.id for p in players], matches)
    report = ReconciliationReport(checked=len(players))
    for player in players:
        stored = PlayerStats.from_record(player)
        recomputed = expected[player.id]
        recomputed.assists = stored.assists
        if stored != recomputed:
            report.drifted.append(
                PlayerDrift(
                    player_id=player.id,
                    name=player.name,
                    stored=stored,
                    expected=recomputed,
                )
            )

    if report.drifted:
        logger.warning(
            "Stats drift detected for %d of %d player(s)",
            len(report.drifted),
            report.checked,
        )
    return report


async def repair_drift(
    session: AsyncSession, report: ReconciliationReport
) -> ReconciliationReport:
    """Write the recomputed totals for every drifted player in one commit.

    Each write only lands if the row still holds the totals that were read,
    so increments committed by a result update in between are never lost.
    Players whose row moved on are listed in ``report.skipped``.
    """

    for drift in report.drifted:
        unchanged = [
            getattr(Player, name) == getattr(drift.stored, name) for name in STAT_FIELDS
        ]
        result = await session.execute(
            update(Player)
            .where(Player.id == drift.player_id, *unchanged)
            .values(**drift.expected.as_dict())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            report.repaired = True
        else:
            report.skipped.append(drift.player_id)
    await session.commit()

    if report.skipped:
        logger.warning(
            "Skipped repair for %d player(s) changed during reconciliation: %s",
            len(report.skipped),
            ", ".join(report.skipped),
        )
    if report.repaired:
        logger.info(
            "Repaired stats for %d player(s)",
            len(report.drifted) - len(report.skipped),
        )
    return report


async def reconcile_player_stats(
    session: AsyncSession, *, repair: bool = False
) -> ReconciliationReport:
    """Recompute every player's totals from match results and report drift.

    With ``repair`` set, drifted players get the recomputed values written
    back; see :func:`repair_drift`.
    """

    report = await detect_drift(session, lock=repair)
    if repair and report.drifted:
        await repair_drift(session, report)
    return report
