"""
Engine and session plumbing for the helpdesk store.

``build_engine`` turns a database URL into an async engine with options that
suit its dialect: pooled asyncpg connections for PostgreSQL, plain aiosqlite
connections for SQLite. The process-wide engine is built from settings on
first use, so importing the API never opens a connection.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from helpdesk.config.settings import settings
from helpdesk.db.base import Base

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


def engine_options(url: str) -> Dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` given the target URL."""
    options: Dict[str, Any] = {"echo": settings.environment == "dev"}
    if make_url(url).get_backend_name() == "postgresql":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
            connect_args={"ssl": "disable"},
        )
    return options


def build_engine(url: str, **overrides: Any) -> AsyncEngine:
    options = engine_options(url)
    options.update(overrides)
    engine = create_async_engine(url, **options)
    logger.info(f"Built async engine for {make_url(url).render_as_string(hide_password=True)}")
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    # Documents are read after the session closes
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    from helpdesk.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Process-wide engine ───────────────────────────────────────────

def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = build_engine(settings.database_url)
    return _engine


def get_session_factory() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections on shutdown; the next use rebuilds the engine."""
    global _engine, _session_factory
    engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        await engine.dispose()
        logger.info("Async engine disposed")
