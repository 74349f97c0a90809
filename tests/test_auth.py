"""Bearer token validation tests.

Learn: The auth dependency walks five states: no header, wrong scheme,
bad token, valid token for an unknown email (principal id 0), valid
token for a stored user. /landing echoes whatever principal was
resolved, so it shows each state directly.
"""

import jwt
import pytest

from visitlog.config import settings

from conftest import JANE, JOHN, bearer

AUTH_FAIL = {"error": "Authorization header with valid Bearer token required"}


def _assert_auth_fail(r):
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"
    assert r.headers["content-type"] == "application/json"
    assert r.json() == AUTH_FAIL


# ═══════════════════════════════════════════════════════════
# Rejected before a principal exists
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_no_authorization_header(client):
    _assert_auth_fail(await client.get("/landing"))


@pytest.mark.asyncio
async def test_empty_authorization_header(client):
    _assert_auth_fail(await client.get("/landing", headers={"Authorization": ""}))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "value",
    ["Basic dXNlcjpwYXNz", "Bearer", "bearer {token}", "Token {token}"],
)
async def test_non_bearer_scheme(client, value):
    token = bearer(JANE.email)["Authorization"].split(" ", 1)[1]
    r = await client.get("/landing", headers={"Authorization": value.format(token=token)})
    _assert_auth_fail(r)


@pytest.mark.asyncio
async def test_garbage_token(client):
    r = await client.get("/landing", headers={"Authorization": "Bearer invalid_token_here"})
    _assert_auth_fail(r)


@pytest.mark.asyncio
async def test_token_signed_with_other_key(client):
    """Claims don't matter if the signature doesn't verify — even for an admin email."""
    token = jwt.encode(
        {"email": JANE.email},
        "someOtherKey-0123456789abcdef0123456789abcdef",
        algorithm="HS256",
    )
    _assert_auth_fail(
        await client.get("/admin/users", headers={"Authorization": f"Bearer {token}"})
    )


@pytest.mark.asyncio
async def test_unsigned_token(client):
    token = jwt.encode({"email": JANE.email}, None, algorithm="none")
    _assert_auth_fail(
        await client.get("/landing", headers={"Authorization": f"Bearer {token}"})
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"sub": "janedoe"}, {"email": 42}, {"email": None}])
async def test_token_without_string_email_claim(client, payload):
    token = jwt.encode(payload, settings.jwt_secret, algorithm="HS256")
    _assert_auth_fail(
        await client.get("/landing", headers={"Authorization": f"Bearer {token}"})
    )


# ═══════════════════════════════════════════════════════════
# Resolved principals
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_known_user_is_attached(client):
    r = await client.get("/landing", headers=bearer(JANE.email))
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/json"
    assert r.json() == {
        "id": JANE.id,
        "email": JANE.email,
        "name": JANE.name,
        "is_admin": True,
    }


@pytest.mark.asyncio
async def test_non_admin_user_is_attached(client):
    r = await client.get("/landing", headers=bearer(JOHN.email))
    assert r.status_code == 200
    assert r.json()["id"] == JOHN.id
    assert r.json()["is_admin"] is False


@pytest.mark.asyncio
async def test_unknown_email_resolves_to_id_zero(client):
    r = await client.get("/landing", headers=bearer("unknown@example.com"))
    assert r.status_code == 200
    assert r.json() == {
        "id": 0,
        "email": "unknown@example.com",
        "name": "",
        "is_admin": False,
    }


@pytest.mark.asyncio
async def test_email_lookup_is_case_sensitive(client):
    r = await client.get("/landing", headers=bearer("JaneDoe@example.com"))
    assert r.status_code == 200
    assert r.json()["id"] == 0


@pytest.mark.asyncio
async def test_post_landing_not_allowed(client):
    r = await client.post("/landing", headers=bearer(JANE.email))
    assert r.status_code == 405
