"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current principal from the request.

Layering:
- get_principal_optional → None when no Authorization header is sent,
  401 when one is sent but is not a valid Bearer token.
- get_principal → same, but a missing header is also a 401.
- require_user → principal must map to a stored user (id != 0).
- require_admin → stored user must have the admin flag (403 otherwise).
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException

from visitlog.auth.jwt import TokenError, verify_token
from visitlog.schemas.visit import UserRead
from visitlog.store import Datastore, get_store

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "
AUTH_REQUIRED = "Authorization header with valid Bearer token required"
ADMIN_REQUIRED = "admin access required"


class Principal:
    """The identity attached to a request after token validation.

    Learn: user_id is 0 when the token is valid but its email has no
    matching user. Authentication succeeded, authorization will not.
    """

    def __init__(
        self,
        user_id: int = 0,
        email: str = "",
        name: str = "",
        is_admin: bool = False,
    ):
        self.user_id = user_id
        self.email = email
        self.name = name
        self.is_admin = is_admin

    @classmethod
    def from_user(cls, user: UserRead) -> "Principal":
        return cls(
            user_id=user.id, email=user.email, name=user.name, is_admin=user.is_admin
        )

    @property
    def is_known(self) -> bool:
        return self.user_id != 0

    def as_user(self) -> UserRead:
        return UserRead(
            id=self.user_id, email=self.email, name=self.name, is_admin=self.is_admin
        )


class AuthenticationRequired(Exception):
    """The request has no usable identity."""


class AdminRequired(Exception):
    """The identity is known but lacks the admin flag."""


def unauthorized(detail: str = AUTH_REQUIRED) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden() -> HTTPException:
    return HTTPException(status_code=403, detail=ADMIN_REQUIRED)


def check_user(principal: Optional[Principal]) -> Principal:
    """Raise AuthenticationRequired unless principal is a stored user."""
    if principal is None:
        raise AuthenticationRequired(AUTH_REQUIRED)
    if not principal.is_known:
        raise AuthenticationRequired(f"unknown user {principal.email}")
    return principal


def check_admin(principal: Optional[Principal]) -> Principal:
    """Raise AuthenticationRequired / AdminRequired unless principal is an admin."""
    principal = check_user(principal)
    if not principal.is_admin:
        raise AdminRequired(ADMIN_REQUIRED)
    return principal


async def get_principal_optional(
    authorization: Optional[str] = Header(None),
    store: Datastore = Depends(get_store),
) -> Optional[Principal]:
    """Resolve the Bearer token to a Principal (optional).

    Learn: This is the "soft" auth dependency. Used by user provisioning,
    which must accept an anonymous caller while the user table is empty.
    """
    if not authorization:
        return None

    if not authorization.startswith(BEARER_PREFIX):
        logger.info("auth.rejected", reason="not_bearer")
        raise unauthorized()

    try:
        email = verify_token(authorization[len(BEARER_PREFIX):])
    except TokenError as e:
        logger.info("auth.rejected", reason=str(e))
        raise unauthorized()

    user = await store.get_user_by_email(email)
    if user is None:
        return Principal(user_id=0, email=email)
    return Principal.from_user(user)


async def get_principal(
    principal: Optional[Principal] = Depends(get_principal_optional),
) -> Principal:
    """Resolve the Bearer token to a Principal (required — 401 if absent)."""
    if principal is None:
        logger.info("auth.rejected", reason="missing_header")
        raise unauthorized()
    return principal


async def require_user(principal: Principal = Depends(get_principal)) -> Principal:
    """Self-only routes: the principal must be a stored user."""
    try:
        return check_user(principal)
    except AuthenticationRequired as e:
        raise unauthorized(str(e))


async def require_admin(principal: Principal = Depends(require_user)) -> Principal:
    """Admin-only routes: 403, not 401, for known non-admin users."""
    if not principal.is_admin:
        raise forbidden()
    return principal
