"""Tests for middleware — security headers, request IDs.

Learn: /favicon.ico needs no auth and never touches the store, so it
makes a cheap probe. Error responses must carry the headers too.
"""

import pytest

from conftest import JANE, bearer


@pytest.mark.asyncio
async def test_security_headers(client):
    r = await client.get("/favicon.ico")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "no-referrer"
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_security_headers_on_success(client):
    r = await client.get("/landing", headers=bearer(JANE.email))
    assert r.status_code == 200
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    r1 = await client.get("/favicon.ico")
    r2 = await client.get("/favicon.ico")
    assert "X-Request-ID" in r1.headers
    assert "X-Request-ID" in r2.headers
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    r = await client.get("/favicon.ico", headers={"X-Request-ID": "test-trace-12345"})
    assert r.headers["X-Request-ID"] == "test-trace-12345"


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    r = await client.get("/favicon.ico")
    assert "Strict-Transport-Security" not in r.headers
