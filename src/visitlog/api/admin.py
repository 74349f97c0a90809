"""Admin API — visit history and user management.

Learn: Every route here requires an admin principal, except creating a
user while the users table is still empty (bootstrap). That route takes
the optional principal and reads its own body: the caller is checked
first (401/403), then the JSON is parsed (400). UserService repeats the
bootstrap check under its lock before inserting.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from visitlog.auth.dependencies import (
    AdminRequired,
    AuthenticationRequired,
    Principal,
    check_admin,
    forbidden,
    get_principal_optional,
    require_admin,
    unauthorized,
)
from visitlog.schemas.visit import UserCreate, UserRead, VisitedPathRead
from visitlog.services.user_service import DuplicateEmailError, UserService
from visitlog.services.visit_service import VisitService
from visitlog.store import Datastore, StoreError, get_store

logger = structlog.get_logger()

router = APIRouter(prefix="/admin")

SAVE_FAILED = "server error saving new user, please check values and try again"


def _users(store: Datastore = Depends(get_store)) -> UserService:
    return UserService(store)


def _visits(store: Datastore = Depends(get_store)) -> VisitService:
    return VisitService(store)


# ─── History ────────────────────────────────────────────


@router.get(
    "/history",
    response_model=list[VisitedPathRead],
    dependencies=[Depends(require_admin)],
)
async def get_history(svc: VisitService = Depends(_visits)):
    """All visited paths, newest first."""
    return await svc.history()


# ─── Users ──────────────────────────────────────────────


@router.get(
    "/users",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
async def list_users(svc: UserService = Depends(_users)):
    """All users, ordered by id."""
    return await svc.list_users()


async def _read_user_create(request: Request) -> UserCreate:
    try:
        return UserCreate.model_validate_json(await request.body())
    except ValidationError as e:
        errors = e.errors()
        message = errors[0].get("msg", "invalid request") if errors else "invalid request"
        raise HTTPException(status_code=400, detail=f"Invalid request: {message}")


@router.post(
    "/users",
    response_model=UserRead,
    status_code=201,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": UserCreate.model_json_schema()}},
        }
    },
)
async def create_user(
    request: Request,
    principal: Optional[Principal] = Depends(get_principal_optional),
    svc: UserService = Depends(_users),
):
    """Create a user. The first user needs no auth and becomes an admin."""
    if not await svc.is_bootstrap():
        try:
            check_admin(principal)
        except AuthenticationRequired as e:
            raise unauthorized(str(e))
        except AdminRequired:
            raise forbidden()

    body = await _read_user_create(request)

    try:
        user = await svc.provision(email=body.email, name=body.name, principal=principal)
    except AuthenticationRequired as e:
        raise unauthorized(str(e))
    except AdminRequired:
        raise forbidden()
    except DuplicateEmailError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        logger.error("users.create_failed", email=body.email, error=str(e))
        raise HTTPException(status_code=500, detail=SAVE_FAILED)

    try:
        content = UserRead.model_validate(user).model_dump(mode="json")
    except ValueError as e:
        # The user is saved; report success even though we can't echo it.
        logger.warning("users.echo_failed", user_id=user.id, error=str(e))
        return Response(status_code=201, media_type="application/json")
    return JSONResponse(status_code=201, content=content)
