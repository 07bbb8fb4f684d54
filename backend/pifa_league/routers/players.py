import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..db import get_session
from ..models import Player, Match
from ..schemas import (
    PlayerCreate,
    PlayerOut,
    PlayerListOut,
    PlayerFormOut,
    stats_out,
)
from ..exceptions import ProblemDetail, PlayerAlreadyExists, PlayerNotFound
from ..services import compute_streaks, player_form, rolling_win_percentage

# Resource-only prefix; versioning is added in main.py
router = APIRouter(
    prefix="/players",
    tags=["players"],
    responses={404: {"model": ProblemDetail}},
)

FORM_WINDOW = 5


def to_player_out(p: Player) -> PlayerOut:
    return PlayerOut(
        id=p.id,
        name=p.name,
        nickname=p.nickname,
        role=p.role or "player",
        isActive=bool(p.is_active),
        stats=stats_out(p),
        bestPlayerVotes=p.best_player_votes or 0,
        worstPlayerVotes=p.worst_player_votes or 0,
    )


@router.post("", response_model=PlayerOut, status_code=201)
async def create_player(
    body: PlayerCreate,
    session: AsyncSession = Depends(get_session),
):
    normalized_name = body.name.lower()
    exists = (
        await session.execute(
            select(Player).where(func.lower(Player.name) == normalized_name)
        )
    ).scalar_one_or_none()
    if exists:
        raise PlayerAlreadyExists(body.name)
    pid = body.id or uuid.uuid4().hex
    if await session.get(Player, pid) is not None:
        raise PlayerAlreadyExists(pid)
    p = Player(
        id=pid,
        name=body.name,
        nickname=body.nickname or body.name,
        role=body.role,
        is_active=True,
    )
    session.add(p)
    await session.commit()
    await session.refresh(p)
    # A new player appears in every standings table.
    await standings_cache.clear()
    return to_player_out(p)


@router.get("", response_model=PlayerListOut)
async def list_players(
    q: str = "",
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    stmt = select(Player).where(Player.deleted_at.is_(None))
    count_stmt = select(func.count()).select_from(Player).where(
        Player.deleted_at.is_(None)
    )
    if q:
        stmt = stmt.where(Player.name.ilike(f"%{q}%"))
        count_stmt = count_stmt.where(Player.name.ilike(f"%{q}%"))
    total = (await session.execute(count_stmt)).scalar()
    stmt = stmt.order_by(Player.name).limit(limit).offset(offset)
    rows = (await session.execute(stmt)).scalars().all()
    return PlayerListOut(
        players=[to_player_out(p) for p in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{player_id}", response_model=PlayerOut)
async def get_player(player_id: str, session: AsyncSession = Depends(get_session)):
    p = await session.get(Player, player_id)
    if not p or p.deleted_at is not None:
        raise PlayerNotFound(player_id)
    return to_player_out(p)


@router.get("/{player_id}/form", response_model=PlayerFormOut)
async def get_player_form(
    player_id: str,
    span: int = Query(FORM_WINDOW, ge=1, le=50),
    session: AsyncSession = Depends(get_session),
):
    p = await session.get(Player, player_id)
    if not p or p.deleted_at is not None:
        raise PlayerNotFound(player_id)

    # player2_ids is JSON, so away appearances in team matches are filtered in Python.
    matches = (
        await session.execute(
            select(Match)
            .where(
                Match.result.is_not(None),
                or_(
                    Match.player1_id == player_id,
                    Match.player2_id == player_id,
                    Match.player2_ids.is_not(None),
                ),
            )
            .order_by(Match.timestamp, Match.match_num, Match.id)
        )
    ).scalars().all()

    results = player_form(player_id, matches)
    streaks = compute_streaks(results)
    return PlayerFormOut(
        playerId=player_id,
        results=results,
        lastFive=results[-FORM_WINDOW:],
        rollingWinPct=rolling_win_percentage(results, span),
        currentStreak=streaks["current"],
        longestWin=streaks["longestWin"],
        longestLoss=streaks["longestLoss"],
        longestUnbeaten=streaks["longestUnbeaten"],
    )
