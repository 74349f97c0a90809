"""Storage interface for users and visited paths.

Learn: Handlers and services depend on this abstract interface, never on
SQLAlchemy directly. Production wires in SQLDatastore; tests use the
MemoryDatastore double. Every backend failure surfaces as StoreError so
the HTTP layer can turn it into a generic 500.
"""

import abc
from datetime import datetime
from typing import Optional

from visitlog.db.models import MAX_USER_ID
from visitlog.schemas.visit import UserRead, VisitedPathRead


class StoreError(Exception):
    """Raised when the storage backend fails a read or write."""


def check_user_id(user_id: int) -> None:
    """Reject ids outside 1..MAX_USER_ID (0 is the unknown-user marker)."""
    if user_id <= 0:
        raise StoreError(f"User id must be positive; received {user_id}")
    if user_id > MAX_USER_ID:
        raise StoreError(
            f"User id cannot be greater than {MAX_USER_ID}; received {user_id}"
        )


class Datastore(abc.ABC):
    """CRUD operations on users and visited paths."""

    # ─── Users ──────────────────────────────────────────

    @abc.abstractmethod
    async def count_users(self) -> int:
        ...

    @abc.abstractmethod
    async def get_all_users(self) -> list[UserRead]:
        """All users, ordered by id ascending."""

    @abc.abstractmethod
    async def get_user_by_id(self, user_id: int) -> Optional[UserRead]:
        ...

    @abc.abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserRead]:
        """Exact, case-sensitive match."""

    @abc.abstractmethod
    async def add_user(
        self, user_id: int, email: str, name: str, is_admin: bool
    ) -> UserRead:
        ...

    # ─── Visited paths ──────────────────────────────────

    @abc.abstractmethod
    async def get_all_visited_paths(self) -> list[VisitedPathRead]:
        """All visits, newest first."""

    @abc.abstractmethod
    async def get_visited_paths_for_user(
        self, user_id: int
    ) -> list[VisitedPathRead]:
        """One user's visits, newest first."""

    @abc.abstractmethod
    async def add_visited_path(
        self, path: str, date: datetime, user_id: int
    ) -> VisitedPathRead:
        ...
