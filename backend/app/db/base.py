"""
Database Engine and Sessions

One async engine per process, pooled per the `database` section of
config/default.yaml. Services receive an AsyncSession and own their commits;
scripts wrap a unit of work in session_scope().

Usage:
    from app.db.base import session_scope

    async with session_scope() as session:
        session.add(Vocabulary(word="本", reading="ほん", meaning="book"))
    # committed here, or rolled back if the block raised
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings, yaml_config


def engine_options(db_config: dict[str, Any], echo: bool = False) -> dict[str, Any]:
    """Pool keyword arguments for create_async_engine from a YAML section."""
    return {
        "pool_size": db_config.get("pool_size", 5),
        "max_overflow": db_config.get("max_overflow", 10),
        "pool_timeout": db_config.get("pool_timeout", 30),
        "pool_pre_ping": db_config.get("pool_pre_ping", True),
        "echo": echo,
    }


engine = create_async_engine(
    settings.POSTGRES_URL,
    **engine_options(yaml_config.get("database", {}), echo=settings.DEBUG),
)

# Rows stay readable after commit so services can build responses from them.
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base shared by the content and learning-state tables."""

    pass


# Registers every table on Base.metadata; must follow the Base definition.
from app.db import models, models_learning  # noqa: F401, E402


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """
    Run one unit of work in a fresh session.

    Commits when the block exits normally; rolls back and re-raises if it
    raises.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """
    Create the vocabulary, grammar, quiz and learning-state tables.

    Existing tables are left untouched, so this never migrates a schema.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
