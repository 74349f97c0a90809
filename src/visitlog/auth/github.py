"""GitHub OAuth login.

Learn: Standard authorization-code flow:
1. /oauth/login redirects the browser to GitHub with our client id
   and a caller-chosen state string.
2. GitHub redirects back to /oauth/callback with a one-time code.
3. We exchange the code for a GitHub access token, ask GitHub for the
   account's primary verified email, and mint our own bearer token
   for that email.

The HTTP client is injected so tests can swap in an httpx.MockTransport.
"""

from typing import Optional
from urllib.parse import urlencode

import httpx
import structlog

from visitlog.config import Settings

logger = structlog.get_logger()

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
USER_EMAILS_URL = "https://api.github.com/user/emails"
SCOPE = "user:email"


class OAuthError(Exception):
    """Raised when a step of the provider round-trip fails."""


class ExchangeError(OAuthError):
    """The authorization code could not be exchanged for a token."""


class ProfileError(OAuthError):
    """The provider would not tell us who the user is."""


def authorize_url(client_id: str, state: str) -> str:
    """GitHub consent page URL. Builds a string only, no request is made."""
    query = urlencode({"client_id": client_id, "state": state, "scope": SCOPE})
    return f"{AUTHORIZE_URL}?{query}"


class GitHubOAuth:
    """Thin client for the GitHub OAuth web flow."""

    def __init__(self, config: Settings, client: httpx.AsyncClient):
        self.client_id = config.github_client_id
        self.client_secret = config.github_client_secret
        self.client = client

    async def exchange_code(self, code: str) -> str:
        """Trade an authorization code for a GitHub access token."""
        if not code:
            raise ExchangeError("missing authorization code")
        try:
            r = await self.client.post(
                ACCESS_TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                },
                headers={"Accept": "application/json"},
            )
            r.raise_for_status()
            body = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ExchangeError(str(e)) from e

        if not isinstance(body, dict):
            raise ExchangeError("unexpected token response")
        if not body.get("access_token"):
            # GitHub answers 200 with {"error": "bad_verification_code", ...}
            raise ExchangeError(body.get("error", "no access_token"))
        return body["access_token"]

    async def primary_email(self, access_token: str) -> str:
        """Return the account's primary, verified email address."""
        try:
            r = await self.client.get(
                USER_EMAILS_URL,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/vnd.github+json",
                },
            )
            r.raise_for_status()
            emails = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProfileError(str(e)) from e

        email: Optional[str] = None
        for entry in emails if isinstance(emails, list) else []:
            if entry.get("primary") and entry.get("verified"):
                email = entry.get("email")
                break
        if not email:
            raise ProfileError("no primary verified email")
        return email


async def get_github_http_client():
    """FastAPI dependency — one short-lived client per callback request."""
    async with httpx.AsyncClient(timeout=10.0) as client:
        yield client
