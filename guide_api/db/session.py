"""
Async SQLAlchemy engine & session factory (asyncpg driver).
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from guide_api.core.config import settings
from guide_api.core.exceptions import Conflict, Internal

logger = logging.getLogger(__name__)

engine_args = {
    "echo": False,
    "pool_pre_ping": True,
}

if "postgresql" in settings.DATABASE_URL:
    engine_args.update(
        {
            "pool_size": 20,
            "max_overflow": 10,
            "pool_recycle": 300,
        }
    )

engine = create_async_engine(
    settings.DATABASE_URL,
    **engine_args,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def commit_or_raise(session: AsyncSession, *, conflict_detail: str) -> None:
    """Commit the unit of work, translating store failures into domain errors.

    A unique-constraint violation means a concurrent request won the race
    for the same username / email / 1:1 slot.
    """
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.warning("Commit rejected by constraint: %s", exc.orig)
        raise Conflict(conflict_detail) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Commit failed: %s", exc, exc_info=True)
        raise Internal("Internal database error") from exc
