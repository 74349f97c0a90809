"""Relational Datastore backed by an AsyncSession.

Learn: Each request gets its own session (see db.engine.get_db); this
class wraps it and converts ORM rows into the plain Read schemas.
SQLAlchemyError is re-raised as StoreError so callers don't depend on
the driver. Writes commit immediately: every request performs at most
one logical write.
"""

from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from visitlog.db.models import User, VisitedPath
from visitlog.schemas.visit import UserRead, VisitedPathRead
from visitlog.store.base import Datastore, StoreError, check_user_id

logger = structlog.get_logger()


def _visit_read(row: VisitedPath) -> VisitedPathRead:
    return VisitedPathRead(path=row.path, date=row.visit_date, user_id=row.user_id)


class SQLDatastore(Datastore):
    """Datastore over SQLAlchemy (PostgreSQL in production)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _scalars(self, query) -> list:
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error("store.query_failed", error=str(e))
            raise StoreError("database query failed") from e
        return list(result.scalars().all())

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("store.commit_failed", error=str(e))
            raise StoreError("database write failed") from e

    # ─── Users ──────────────────────────────────────────

    async def count_users(self) -> int:
        try:
            return await self.db.scalar(select(func.count()).select_from(User))
        except SQLAlchemyError as e:
            logger.error("store.query_failed", error=str(e))
            raise StoreError("database query failed") from e

    async def get_all_users(self) -> list[UserRead]:
        rows = await self._scalars(select(User).order_by(User.id))
        return [UserRead.model_validate(u) for u in rows]

    async def get_user_by_id(self, user_id: int) -> Optional[UserRead]:
        rows = await self._scalars(select(User).where(User.id == user_id))
        return UserRead.model_validate(rows[0]) if rows else None

    async def get_user_by_email(self, email: str) -> Optional[UserRead]:
        rows = await self._scalars(select(User).where(User.email == email))
        return UserRead.model_validate(rows[0]) if rows else None

    async def add_user(
        self, user_id: int, email: str, name: str, is_admin: bool
    ) -> UserRead:
        check_user_id(user_id)
        user = User(id=user_id, email=email, name=name, is_admin=is_admin)
        self.db.add(user)
        await self._commit()
        return UserRead.model_validate(user)

    # ─── Visited paths ──────────────────────────────────

    async def get_all_visited_paths(self) -> list[VisitedPathRead]:
        rows = await self._scalars(
            select(VisitedPath).order_by(
                VisitedPath.visit_date.desc(), VisitedPath.id.desc()
            )
        )
        return [_visit_read(r) for r in rows]

    async def get_visited_paths_for_user(
        self, user_id: int
    ) -> list[VisitedPathRead]:
        rows = await self._scalars(
            select(VisitedPath)
            .where(VisitedPath.user_id == user_id)
            .order_by(VisitedPath.visit_date.desc(), VisitedPath.id.desc())
        )
        return [_visit_read(r) for r in rows]

    async def add_visited_path(
        self, path: str, date: datetime, user_id: int
    ) -> VisitedPathRead:
        row = VisitedPath(path=path, visit_date=date, user_id=user_id)
        self.db.add(row)
        await self._commit()
        return _visit_read(row)
