from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..db import get_session
from ..schemas import PlayerDriftOut, ReconciliationOut, stats_out
from ..services import reconcile_player_stats

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/reconcile-stats", response_model=ReconciliationOut)
async def reconcile_stats(
    repair: bool = False,
    session: AsyncSession = Depends(get_session),
) -> ReconciliationOut:
    """Check stored player totals against a full replay of match results."""

    report = await reconcile_player_stats(session, repair=repair)
    if report.repaired:
        await standings_cache.clear()
    return ReconciliationOut(
        checked=report.checked,
        consistent=report.consistent,
        repaired=report.repaired,
        skipped=report.skipped,
        drifted=[
            PlayerDriftOut(
                playerId=d.player_id,
                name=d.name,
                fields=d.fields,
                stored=stats_out(d.stored),
                expected=stats_out(d.expected),
            )
            for d in report.drifted
        ],
    )
