"""Token API — bearer token issuance and GitHub login.

Learn: Routes for getting a bearer token:
- POST /oauth/getToken → form field email → {"token": ...}
- GET /oauth/login → redirect to GitHub (only when OAuth is configured)
- GET /oauth/callback → GitHub code → {"token": ..., "state": ...}

None of these require authentication.
"""

from typing import Optional

import httpx
import structlog
from fastapi import APIRouter, Depends, Form, HTTPException
from fastapi.responses import RedirectResponse

from visitlog.auth.github import (
    ExchangeError,
    GitHubOAuth,
    ProfileError,
    authorize_url,
    get_github_http_client,
)
from visitlog.auth.jwt import TokenError, create_token
from visitlog.config import settings
from visitlog.schemas.visit import OAuthTokenResponse, TokenResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/oauth")


# ─── Token ──────────────────────────────────────────────


@router.post("/getToken", response_model=TokenResponse)
async def create_token_for_email(email: Optional[str] = Form(None)):
    """Issue a signed bearer token for the submitted email."""
    if not email:
        raise HTTPException(
            status_code=400,
            detail="Must supply login email address in token request",
        )
    try:
        token = create_token(email)
    except TokenError as e:
        logger.error("tokens.create_failed", error=str(e))
        raise HTTPException(status_code=400, detail="Couldn't create token")

    logger.info("tokens.issued", email=email)
    return TokenResponse(token=token)


# ─── GitHub login ───────────────────────────────────────


def _oauth_enabled() -> None:
    if not settings.oauth_enabled:
        raise HTTPException(status_code=404, detail="OAuth login is not configured")


def _github(client: httpx.AsyncClient = Depends(get_github_http_client)) -> GitHubOAuth:
    return GitHubOAuth(settings, client)


@router.get("/login", dependencies=[Depends(_oauth_enabled)])
async def github_login(state: Optional[str] = None):
    """Redirect the browser to GitHub's consent page."""
    if not state:
        raise HTTPException(status_code=400, detail="Must send a state query parameter")
    return RedirectResponse(authorize_url(settings.github_client_id, state), status_code=307)


@router.get(
    "/callback",
    response_model=OAuthTokenResponse,
    dependencies=[Depends(_oauth_enabled)],
)
async def github_callback(
    code: str = "",
    state: str = "",
    github: GitHubOAuth = Depends(_github),
):
    """Finish the GitHub flow and issue our own bearer token.

    The state string is handed back untouched; checking it is up to
    the client that chose it.
    """
    try:
        access_token = await github.exchange_code(code)
    except ExchangeError as e:
        logger.warning("oauth.exchange_failed", error=str(e))
        raise HTTPException(
            status_code=400, detail="Couldn't convert auth code to OAuth token"
        )

    try:
        email = await github.primary_email(access_token)
    except ProfileError as e:
        logger.warning("oauth.profile_failed", error=str(e))
        raise HTTPException(
            status_code=502, detail="Couldn't retrieve user from OAuth provider"
        )

    try:
        token = create_token(email)
    except TokenError as e:
        logger.error("tokens.create_failed", error=str(e))
        raise HTTPException(status_code=400, detail="Couldn't create token")

    logger.info("oauth.logged_in", email=email)
    return OAuthTokenResponse(token=token, state=state)
