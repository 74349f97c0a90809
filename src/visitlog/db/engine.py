"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

init_db() is the startup hook: it creates missing tables and, on a fresh
database, seeds the configured initial admin.
"""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from visitlog.config import Settings, settings
from visitlog.db.models import Base

logger = structlog.get_logger()

# echo=True in dev to see SQL queries.
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

# Session factory — each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(
    bind: Optional[AsyncEngine] = None,
    config: Optional[Settings] = None,
):
    """Create tables and seed the initial admin.

    The admin is only created when VISITLOG_INITIAL_ADMIN_EMAIL is set
    and the users table is empty. Returns the seeded user, if any.
    """
    bind = bind or engine
    config = config or settings

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("db.tables_ready")

    if not config.initial_admin_email:
        return None

    # visitlog.store imports get_db from this module
    from visitlog.services.user_service import UserService
    from visitlog.store.sql import SQLDatastore

    factory = async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        store = SQLDatastore(session)
        if await store.count_users():
            return None
        svc = UserService(store)
        user = await svc.provision(
            email=config.initial_admin_email,
            name=config.initial_admin_name,
            principal=None,
        )
    logger.info("db.initial_admin_created", user_id=user.id, email=user.email)
    return user
