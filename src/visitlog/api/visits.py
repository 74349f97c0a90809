"""Visit API — the catch-all logger, identity echo, and ignored paths.

Learn: The catch-all route must be registered last (see api/__init__.py)
so that /landing, /admin/*, and /oauth/* win the match.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from visitlog.auth.dependencies import Principal, get_principal, require_user
from visitlog.schemas.visit import UserRead, VisitedPathRead
from visitlog.services.visit_service import VisitService
from visitlog.store import Datastore, get_store

router = APIRouter()
catch_all_router = APIRouter()


def _visits(store: Datastore = Depends(get_store)) -> VisitService:
    return VisitService(store)


@router.get("/favicon.ico", include_in_schema=False)
async def ignore_favicon():
    raise HTTPException(status_code=404, detail="Not Found")


@router.get("/landing", response_model=UserRead)
async def landing(principal: Principal = Depends(get_principal)):
    """Echo the resolved identity (id 0 for a valid token with an unknown email)."""
    return principal.as_user()


@catch_all_router.get("/{rest:path}", response_model=VisitedPathRead)
async def log_visit(
    request: Request,
    principal: Principal = Depends(require_user),
    svc: VisitService = Depends(_visits),
):
    """Record this path for the current user and echo the record back."""
    return await svc.record(request.url.path, principal)
