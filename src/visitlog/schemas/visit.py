"""Pydantic schemas for users, visited paths, and tokens.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.
The Read schemas double as the plain records the Datastore hands back,
so handlers never touch ORM objects.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from visitlog.db.models import MAX_USER_ID


# ─── Users ──────────────────────────────────────────────

class UserCreate(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    name: str


class UserRead(BaseModel):
    id: int = Field(..., ge=0, le=MAX_USER_ID)
    email: str
    name: str
    is_admin: bool

    model_config = {"from_attributes": True}


# ─── Visited paths ──────────────────────────────────────

class VisitedPathRead(BaseModel):
    """One recorded visit. ``date`` serializes as RFC 3339 (UTC, ``Z``)."""

    path: str
    date: datetime
    user_id: int = Field(..., ge=0, le=MAX_USER_ID)

    @field_validator("date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite and some drivers hand back naive timestamps; they are UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# ─── Tokens ─────────────────────────────────────────────

class TokenResponse(BaseModel):
    token: str


class OAuthTokenResponse(TokenResponse):
    state: str = ""
