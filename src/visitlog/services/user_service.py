"""User service — provisioning and listing users.

Learn: Provisioning has two modes:
- Bootstrap: the users table is empty, so nobody can authenticate yet.
  The caller needs no identity and the new user is always an admin.
- Normal: the caller must be a known admin.

New ids are drawn at random from 1..2^31-1 and redrawn on collision.
Drawing an id, checking it, and inserting it is check-then-act, so the
whole sequence, bootstrap detection included, runs under one lock. Across processes
the primary-key constraint is the backstop; losing that race surfaces
as StoreError.
"""

import asyncio
import secrets
from typing import Callable, Optional

import structlog

from visitlog.auth.dependencies import Principal, check_admin
from visitlog.db.models import MAX_USER_ID
from visitlog.schemas.visit import UserRead
from visitlog.store.base import Datastore

logger = structlog.get_logger()

# Single writer for id allocation within this process
_provision_lock = asyncio.Lock()


class DuplicateEmailError(Exception):
    """Raised when provisioning an email that already has a user."""

    def __init__(self, email: str):
        super().__init__(f"user with email {email} already exists")
        self.email = email


def random_user_id() -> int:
    """Uniform random id in 1..MAX_USER_ID (never 0)."""
    return secrets.randbelow(MAX_USER_ID) + 1


class UserService:
    """Business logic for user management."""

    def __init__(
        self,
        store: Datastore,
        lock: Optional[asyncio.Lock] = None,
        id_source: Callable[[], int] = random_user_id,
    ):
        self.store = store
        self.lock = lock or _provision_lock
        self.id_source = id_source

    async def is_bootstrap(self) -> bool:
        return await self.store.count_users() == 0

    async def list_users(self) -> list[UserRead]:
        return await self.store.get_all_users()

    async def provision(
        self, email: str, name: str, principal: Optional[Principal]
    ) -> UserRead:
        """Create a user.

        Raises AuthenticationRequired / AdminRequired outside bootstrap mode
        when principal isn't a known admin, DuplicateEmailError if the
        email is taken, StoreError if the backend fails.
        """
        async with self.lock:
            bootstrap = await self.is_bootstrap()
            if not bootstrap:
                check_admin(principal)

            if await self.store.get_user_by_email(email) is not None:
                raise DuplicateEmailError(email)

            user_id = await self._allocate_id()
            user = await self.store.add_user(
                user_id, email=email, name=name, is_admin=bootstrap
            )

        logger.info(
            "users.created",
            user_id=user.id,
            email=user.email,
            is_admin=user.is_admin,
            bootstrap=bootstrap,
        )
        return user

    async def _allocate_id(self) -> int:
        while True:
            candidate = self.id_source()
            if not 0 < candidate <= MAX_USER_ID:
                continue
            if await self.store.get_user_by_id(candidate) is None:
                return candidate
            logger.debug("users.id_collision", user_id=candidate)
