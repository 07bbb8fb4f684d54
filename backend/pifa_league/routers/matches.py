# backend/pifa_league/routers/matches.py
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..db import get_session
from ..exceptions import (
    CompetitionNotFound,
    MatchNotFound,
    PlayerNotFound,
    ProblemDetail,
    http_problem,
)
from ..models import Competition, Match, Player
from ..rate_limit import limiter, score_update_rate_limit
from ..schemas import MatchCreate, MatchOut, MatchResultUpdate, VoteCreate
from ..services import ValidationError, apply_result, submit_vote, validate_result

# Resource-only prefix; versioning is added in main.py
router = APIRouter(
    prefix="/matches",
    tags=["matches"],
    responses={404: {"model": ProblemDetail}},
)


def to_match_out(m: Match) -> MatchOut:
    return MatchOut(
        id=m.id,
        matchNum=m.match_num,
        stageName=m.stage_name,
        matchType=m.match_type,
        competitionId=m.competition_id,
        player1Id=m.player1_id,
        player2Id=m.player2_id,
        player2Ids=m.player2_ids,
        result=m.result,
        timestamp=m.timestamp,
        votes=m.votes or {},
        version=m.version,
    )


@router.post("", response_model=MatchOut, status_code=201)
async def create_match(
    body: MatchCreate,
    session: AsyncSession = Depends(get_session),
):
    away = body.away_ids()
    for pid in [body.player1Id, *away]:
        p = await session.get(Player, pid)
        if not p or p.deleted_at is not None:
            raise PlayerNotFound(pid)
    if body.competitionId and await session.get(Competition, body.competitionId) is None:
        raise CompetitionNotFound(body.competitionId)

    match = Match(
        id=uuid.uuid4().hex,
        match_num=body.matchNum,
        stage_name=body.stageName,
        match_type=f"1v{len(away)}",
        competition_id=body.competitionId,
        player1_id=body.player1Id,
        player2_id=body.player2Id,
        player2_ids=body.player2Ids,
        result=None,
        votes={},
    )
    if body.timestamp is not None:
        match.timestamp = body.timestamp
    session.add(match)
    await session.commit()
    await session.refresh(match)
    return to_match_out(match)


@router.get("", response_model=list[MatchOut])
async def list_matches(
    competition_id: Optional[str] = Query(None, alias="competitionId"),
    stage_name: Optional[str] = Query(None, alias="stageName"),
    played: Optional[bool] = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    stmt = select(Match)
    if competition_id:
        stmt = stmt.where(Match.competition_id == competition_id)
    if stage_name:
        stmt = stmt.where(Match.stage_name == stage_name)
    if played is True:
        stmt = stmt.where(Match.result.is_not(None))
    elif played is False:
        stmt = stmt.where(Match.result.is_(None))
    stmt = stmt.order_by(Match.timestamp, Match.match_num, Match.id)
    rows = (await session.execute(stmt.limit(limit).offset(offset))).scalars().all()
    return [to_match_out(m) for m in rows]


@router.get("/{mid}", response_model=MatchOut)
async def get_match(mid: str, session: AsyncSession = Depends(get_session)):
    m = await session.get(Match, mid)
    if not m:
        raise MatchNotFound(mid)
    return to_match_out(m)


@router.delete("/{mid}", status_code=204)
async def delete_match(mid: str, session: AsyncSession = Depends(get_session)):
    m = await session.get(Match, mid)
    if not m:
        raise MatchNotFound(mid)
    if m.result is not None:
        raise http_problem(
            status_code=409,
            detail="clear the match result before deleting it",
            code="match_has_result",
        )
    await session.delete(m)
    await session.commit()
    return Response(status_code=204)


@router.put("/{mid}/result", response_model=MatchOut)
@limiter.limit(score_update_rate_limit)
async def update_match_result(
    request: Request,
    mid: str,
    body: MatchResultUpdate,
    session: AsyncSession = Depends(get_session),
):
    new_result = validate_result(body.result)
    match = await apply_result(session, mid, new_result)
    await standings_cache.invalidate_scopes([match.competition_id])
    return to_match_out(match)


@router.post("/{mid}/votes", response_model=MatchOut)
@limiter.limit(score_update_rate_limit)
async def cast_vote(
    request: Request,
    mid: str,
    body: VoteCreate,
    session: AsyncSession = Depends(get_session),
):
    try:
        match = await submit_vote(
            session, mid, body.voterId, body.bestPlayerId, body.worstPlayerId
        )
    except ValidationError as exc:
        raise http_problem(status_code=422, detail=exc.detail, code="invalid_vote")
    return to_match_out(match)
