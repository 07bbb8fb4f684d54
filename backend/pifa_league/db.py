import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import NullPool, StaticPool

from .exceptions import CommitFailure, DomainException, TransactionConflictError

logger = logging.getLogger(__name__)

engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[sessionmaker] = None
Base = declarative_base()


def database_url() -> str:
    """Return ``DATABASE_URL`` rewritten for the async drivers."""

    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL environment variable is required")
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def get_engine() -> AsyncEngine:
    """Create the league database engine on first use."""

    global engine, AsyncSessionLocal

    if engine is None:
        url = database_url()
        engine_kwargs = {"echo": False}
        if url.startswith("sqlite+aiosqlite://"):
            # In-memory SQLite must reuse the same connection to persist schema/data.
            engine_kwargs["poolclass"] = StaticPool if ":memory:" in url else NullPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        engine = create_async_engine(url, **engine_kwargs)
        AsyncSessionLocal = sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    return engine


async def get_session() -> AsyncIterator[AsyncSession]:
    """Provide a database session for FastAPI dependencies."""

    if AsyncSessionLocal is None:
        get_engine()

    assert AsyncSessionLocal is not None  # for type checkers
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def match_write(session: AsyncSession, match_id: str) -> AsyncIterator[AsyncSession]:
    """Commit everything written to ``session`` in the block as one unit.

    Any failure rolls the whole block back. A stale match version becomes
    :class:`TransactionConflictError`, domain errors propagate unchanged and
    every other failure is reported as :class:`CommitFailure`.
    """

    try:
        yield session
        await session.commit()
    except StaleDataError:
        await session.rollback()
        logger.warning("Conflicting write to match %s", match_id)
        raise TransactionConflictError(match_id)
    except DomainException:
        await session.rollback()
        raise
    except SQLAlchemyError:
        await session.rollback()
        logger.warning("Commit failed for match %s", match_id, exc_info=True)
        raise CommitFailure(match_id)
    except Exception:
        await session.rollback()
        logger.error("Unexpected write error for match %s", match_id, exc_info=True)
        raise CommitFailure(match_id)
