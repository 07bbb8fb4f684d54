import os
import sys
import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Keep rate limits out of the way and satisfy the app's startup checks.
os.environ.setdefault("DISABLE_RATE_LIMITS", "true")
os.environ.setdefault("ALLOWED_ORIGINS", "http://testserver")
os.environ.setdefault("ALLOW_CREDENTIALS", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from pifa_league import db, models  # noqa: E402,F401
from pifa_league.cache import standings_cache  # noqa: E402
from pifa_league.main import install_exception_handlers  # noqa: E402
from pifa_league.models import Competition, Match, Player  # noqa: E402
from pifa_league.rate_limit import limiter, rate_limit_handler  # noqa: E402
from pifa_league.routers import (  # noqa: E402
    admin,
    competitions,
    leaderboards,
    matches,
    players,
)


async def _create_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(db.Base.metadata.create_all)


@pytest.fixture()
def session_maker():
    """Fresh in-memory database with every table created."""

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    asyncio.run(_create_schema(engine))
    maker = sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    asyncio.run(standings_cache.clear())
    try:
        yield maker
    finally:
        asyncio.run(standings_cache.clear())
        asyncio.run(engine.dispose())


@pytest.fixture()
def file_session_maker(tmp_path):
    """File-backed database so several sessions hold separate connections."""

    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'league.db'}", poolclass=NullPool
    )
    asyncio.run(_create_schema(engine))
    try:
        yield sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    finally:
        asyncio.run(engine.dispose())


def fail_statements(session_maker, prefix: str, exc: Exception) -> None:
    """Make every statement starting with ``prefix`` raise ``exc``."""

    sync_engine = session_maker.kw["bind"].sync_engine

    def _raise(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith(prefix.upper()):
            raise exc

    event.listen(sync_engine, "before_cursor_execute", _raise)


@pytest.fixture()
def client(session_maker):
    """TestClient over every router, backed by ``session_maker``."""

    async def override_get_session():
        async with session_maker() as session:
            yield session

    app = FastAPI()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    install_exception_handlers(app)
    for module in (players, matches, competitions, leaderboards, admin):
        app.include_router(module.router)
    app.dependency_overrides[db.get_session] = override_get_session

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def seed(session_maker, *rows) -> None:
    """Insert ORM rows and commit."""

    async def _seed():
        async with session_maker() as session:
            session.add_all(list(rows))
            await session.commit()

    asyncio.run(_seed())


def make_players(*ids: str) -> list[Player]:
    return [Player(id=pid, name=pid.upper(), role="player") for pid in ids]


def fetch_player(session_maker, player_id: str) -> Player:
    async def _fetch():
        async with session_maker() as session:
            return await session.get(Player, player_id)

    return asyncio.run(_fetch())


def fetch_match(session_maker, match_id: str) -> Match:
    async def _fetch():
        async with session_maker() as session:
            return await session.get(Match, match_id)

    return asyncio.run(_fetch())


__all__ = [
    "Competition",
    "Match",
    "Player",
    "seed",
    "make_players",
    "fetch_player",
    "fetch_match",
    "fail_statements",
]
