import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..db import get_session
from ..exceptions import CompetitionNotFound, ProblemDetail, http_problem
from ..models import Competition, Match
from ..schemas import (
    CompetitionCreate,
    CompetitionOut,
    StageGenerateOut,
    StageGenerateRequest,
    StandingsOut,
)
from ..services import ValidationError, compute_standings, generate_stage_matches
from .leaderboards import league_players, to_standings_out

router = APIRouter(
    prefix="/competitions",
    tags=["competitions"],
    responses={404: {"model": ProblemDetail}},
)


def _to_competition_out(competition: Competition) -> CompetitionOut:
    return CompetitionOut(id=competition.id, name=competition.name)


@router.post("", response_model=CompetitionOut, status_code=status.HTTP_201_CREATED)
async def create_competition(
    body: CompetitionCreate,
    session: AsyncSession = Depends(get_session),
) -> CompetitionOut:
    competition = Competition(id=body.id or uuid.uuid4().hex, name=body.name)
    session.add(competition)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise http_problem(
            status_code=409,
            detail="competition already exists",
            code="competition_exists",
        )
    return _to_competition_out(competition)


@router.get("", response_model=list[CompetitionOut])
async def list_competitions(
    session: AsyncSession = Depends(get_session),
) -> list[CompetitionOut]:
    rows = (
        await session.execute(select(Competition).order_by(Competition.name))
    ).scalars().all()
    return [_to_competition_out(c) for c in rows]


@router.get("/{competition_id}", response_model=CompetitionOut)
async def get_competition(
    competition_id: str, session: AsyncSession = Depends(get_session)
) -> CompetitionOut:
    competition = await session.get(Competition, competition_id)
    if competition is None:
        raise CompetitionNotFound(competition_id)
    return _to_competition_out(competition)


@router.get("/{competition_id}/standings", response_model=StandingsOut)
async def competition_standings(
    competition_id: str, session: AsyncSession = Depends(get_session)
) -> StandingsOut:
    if await session.get(Competition, competition_id) is None:
        raise CompetitionNotFound(competition_id)

    cache_key = ("competition", competition_id)
    cached = await standings_cache.get(cache_key)
    if cached is not None:
        return cached

    generation = standings_cache.generation
    players = await league_players(session)
    matches = (
        await session.execute(
            select(Match).where(
                Match.competition_id == competition_id,
                Match.result.is_not(None),
            )
        )
    ).scalars().all()
    standings = compute_standings(
        players, matches, scope={"competition_id": competition_id}
    )
    out = to_standings_out(standings, scope="competition", competition_id=competition_id)
    await standings_cache.set(cache_key, out, generation=generation)
    return out


@router.post(
    "/{competition_id}/stages",
    response_model=StageGenerateOut,
    status_code=status.HTTP_201_CREATED,
)
async def generate_stage(
    competition_id: str,
    body: StageGenerateRequest,
    session: AsyncSession = Depends(get_session),
) -> StageGenerateOut:
    try:
        matches = await generate_stage_matches(session, competition_id, body.stageName)
    except ValidationError as exc:
        raise http_problem(status_code=422, detail=exc.detail, code="invalid_stage")
    return StageGenerateOut(
        competitionId=competition_id,
        stageName=body.stageName,
        matchCount=len(matches),
    )
