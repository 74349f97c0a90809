"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Unlike a typical API, auth is not applied at the include_router
level. Each route picks its own dependency (get_principal, require_user,
require_admin, or the optional principal for bootstrap provisioning),
because the routes differ in what an unknown user may do. The
catch-all visit logger goes last so it never shadows a named route.
"""

from fastapi import APIRouter

from visitlog.api.admin import router as admin_router
from visitlog.api.oauth import router as oauth_router
from visitlog.api.visits import catch_all_router
from visitlog.api.visits import router as visits_router

api_router = APIRouter()

# Open routes — no auth required
api_router.include_router(oauth_router, tags=["oauth"])

# Per-route auth
api_router.include_router(admin_router, tags=["admin"])
api_router.include_router(visits_router, tags=["visits"])

# Must be last: matches every GET path
api_router.include_router(catch_all_router, tags=["visits"])
