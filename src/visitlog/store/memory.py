"""In-memory Datastore.

Used by the test suite in place of PostgreSQL. Mirrors the relational
backend's ordering and constraints (unique id, unique email, id range,
user foreign key on visits).
"""

from datetime import datetime
from typing import Iterable, Optional

from visitlog.schemas.visit import UserRead, VisitedPathRead
from visitlog.store.base import Datastore, StoreError, check_user_id


class MemoryDatastore(Datastore):

    def __init__(
        self,
        users: Iterable[UserRead] = (),
        visited_paths: Iterable[VisitedPathRead] = (),
    ):
        self.users: dict[int, UserRead] = {u.id: u for u in users}
        self.visited_paths: list[VisitedPathRead] = list(visited_paths)
        # Set to make every call raise StoreError, to exercise 500 paths
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise StoreError("memory store unavailable")

    # ─── Users ──────────────────────────────────────────

    async def count_users(self) -> int:
        self._check()
        return len(self.users)

    async def get_all_users(self) -> list[UserRead]:
        self._check()
        return [self.users[k] for k in sorted(self.users)]

    async def get_user_by_id(self, user_id: int) -> Optional[UserRead]:
        self._check()
        return self.users.get(user_id)

    async def get_user_by_email(self, email: str) -> Optional[UserRead]:
        self._check()
        return next((u for u in self.users.values() if u.email == email), None)

    async def add_user(
        self, user_id: int, email: str, name: str, is_admin: bool
    ) -> UserRead:
        self._check()
        check_user_id(user_id)
        if user_id in self.users:
            raise StoreError(f"duplicate user id {user_id}")
        if any(u.email == email for u in self.users.values()):
            raise StoreError(f"duplicate user email {email}")
        user = UserRead(id=user_id, email=email, name=name, is_admin=is_admin)
        self.users[user_id] = user
        return user

    # ─── Visited paths ──────────────────────────────────

    async def get_all_visited_paths(self) -> list[VisitedPathRead]:
        self._check()
        # Newest first; equal dates newest insert first
        ordered = sorted(
            enumerate(self.visited_paths),
            key=lambda p: (p[1].date, p[0]),
            reverse=True,
        )
        return [vp for _, vp in ordered]

    async def get_visited_paths_for_user(
        self, user_id: int
    ) -> list[VisitedPathRead]:
        return [
            vp for vp in await self.get_all_visited_paths() if vp.user_id == user_id
        ]

    async def add_visited_path(
        self, path: str, date: datetime, user_id: int
    ) -> VisitedPathRead:
        self._check()
        if user_id not in self.users:
            raise StoreError(f"unknown user id {user_id}")
        vp = VisitedPathRead(path=path, date=date, user_id=user_id)
        self.visited_paths.append(vp)
        return vp
