"""Integration tests for /register, /login, /refresh and /logout.

These tests verify:
1. Register and login answer with an access token and set the refresh cookie
2. Refresh rotates the cookie and the old secret stops working
3. Logout revokes the refresh token and clears the cookie
4. Every rejection carries the documented status and body
"""

from datetime import timedelta
from http.cookies import SimpleCookie

import pytest
from sqlalchemy import func, select

from app.controllers import user_controller
from app.models.refresh_token import RefreshToken

REGISTER = {"username": "ash", "email": "ash@example.com", "password": "pikachu123"}


def refresh_cookie(response) -> str | None:
    """Raw refresh secret from the Set-Cookie headers of ``response``."""
    for header in response.headers.get_list("set-cookie"):
        cookie = SimpleCookie()
        cookie.load(header)
        if "refresh_token" in cookie:
            return cookie["refresh_token"].value
    return None


async def post_refresh(client, raw: str | None):
    client.cookies.clear()
    headers = {"Cookie": f"refresh_token={raw}"} if raw else {}
    return await client.post("/refresh", headers=headers)


async def register(client, **overrides):
    return await client.post("/register", json={**REGISTER, **overrides})


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_returns_token_and_sets_cookie(self, client, token_service):
        response = await register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["username"] == "ash"
        assert body["user"]["email"] == "ash@example.com"
        assert "password" not in body["user"]
        assert "hashed_password" not in body["user"]

        claims = token_service.codec.verify(body["access_token"])
        assert claims.sub == body["user"]["id"]
        assert claims.username == "ash"

        headers = response.headers.get_list("set-cookie")
        assert len(headers) == 2
        assert all("HttpOnly" in h and "Secure" in h and "SameSite=strict" in h for h in headers)
        assert refresh_cookie(response)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"username": "ash2", "email": "ash@example.com"},
            {"username": "ash", "email": "other@example.com"},
        ],
    )
    async def test_duplicate_is_conflict(self, client, overrides):
        assert (await register(client)).status_code == 201

        response = await register(client, **overrides)

        assert response.status_code == 409
        assert response.json() == {"message": "User already exists"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload, field",
        [
            ({**REGISTER, "username": "ab"}, "username"),
            ({**REGISTER, "username": "ash ketchum"}, "username"),
            ({**REGISTER, "email": "not-an-email"}, "email"),
            ({**REGISTER, "password": "short"}, "password"),
            ({"username": "ash", "email": "ash@example.com"}, "password"),
        ],
    )
    async def test_invalid_payload(self, client, payload, field):
        response = await client.post("/register", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        assert field in [d["field"] for d in body["details"]]

    @pytest.mark.asyncio
    async def test_unknown_fields_rejected(self, client):
        response = await client.post("/register", json={**REGISTER, "is_admin": True})

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    @pytest.mark.asyncio
    async def test_unexpected_failure(self, client, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError("database on fire")

        monkeypatch.setattr(user_controller, "create_user", boom)

        response = await register(client)

        assert response.status_code == 500
        assert response.json() == {"message": "Registration failed"}


class TestLogin:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier", ["ash", "ash@example.com"])
    async def test_login_by_username_or_email(self, client, identifier):
        await register(client)

        response = await client.post("/login", json={"identifier": identifier, "password": "pikachu123"})

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "ash"
        assert response.json()["access_token"]
        assert refresh_cookie(response)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "identifier, password",
        [("ash", "wrong-password"), ("gary", "pikachu123")],
    )
    async def test_bad_credentials(self, client, identifier, password):
        await register(client)

        response = await client.post("/login", json={"identifier": identifier, "password": password})

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid credentials"}
        assert refresh_cookie(response) is None

    @pytest.mark.asyncio
    async def test_each_login_gets_its_own_refresh_token(self, client, session_factory):
        await register(client)
        await client.post("/login", json={"identifier": "ash", "password": "pikachu123"})

        async with session_factory() as db:
            count = (await db.execute(select(func.count()).select_from(RefreshToken))).scalar_one()
        assert count == 2


class TestRefresh:
    @pytest.mark.asyncio
    async def test_cookie_jar_round_trip(self, client):
        """The browser flow: cookie set by /register is sent back to /refresh."""
        await register(client)

        response = await client.post("/refresh")

        assert response.status_code == 200
        assert response.json()["token_type"] == "Bearer"
        assert response.json()["access_token"]

    @pytest.mark.asyncio
    async def test_refresh_rotates(self, client, token_service):
        old = refresh_cookie(await register(client))

        response = await post_refresh(client, old)

        assert response.status_code == 200
        new = refresh_cookie(response)
        assert new and new != old
        assert token_service.codec.verify(response.json()["access_token"]).username == "ash"

        replay = await post_refresh(client, old)
        assert replay.status_code == 401
        assert replay.json() == {"message": "Invalid refresh token"}

        assert (await post_refresh(client, new)).status_code == 200

    @pytest.mark.asyncio
    async def test_missing_cookie(self, client):
        response = await post_refresh(client, None)

        assert response.status_code == 401
        assert response.json() == {"message": "Missing refresh token"}

    @pytest.mark.asyncio
    async def test_unknown_secret(self, client):
        response = await post_refresh(client, "never-issued")

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid refresh token"}

    @pytest.mark.asyncio
    async def test_expired_secret(self, client, clock):
        raw = refresh_cookie(await register(client))

        clock.advance(timedelta(days=7))

        response = await post_refresh(client, raw)
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid refresh token"}

    @pytest.mark.asyncio
    async def test_storage_failure(self, client, token_service, monkeypatch):
        raw = refresh_cookie(await register(client))

        async def boom(*args, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(token_service, "resolve_owner", boom)

        response = await post_refresh(client, raw)
        assert response.status_code == 401
        assert response.json() == {"message": "Refresh failed"}


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_revokes_and_clears(self, client):
        raw = refresh_cookie(await register(client))

        client.cookies.clear()
        response = await client.post("/logout", headers={"Cookie": f"refresh_token={raw}"})

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out"}
        cleared = response.headers.get_list("set-cookie")
        assert len(cleared) == 2
        assert all("Max-Age=0" in h for h in cleared)

        after = await post_refresh(client, raw)
        assert after.status_code == 401
        assert after.json() == {"message": "Invalid refresh token"}

    @pytest.mark.asyncio
    async def test_logout_via_cookie_jar(self, client):
        await register(client)

        assert (await client.post("/logout")).status_code == 200

        response = await client.post("/refresh")
        assert response.status_code == 401
        assert response.json() == {"message": "Missing refresh token"}

    @pytest.mark.asyncio
    async def test_logout_without_cookie_is_ok(self, client):
        client.cookies.clear()

        response = await client.post("/logout")

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out"}

    @pytest.mark.asyncio
    async def test_logout_twice_is_ok(self, client):
        raw = refresh_cookie(await register(client))
        client.cookies.clear()

        for _ in range(2):
            response = await client.post("/logout", headers={"Cookie": f"refresh_token={raw}"})
            assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_storage_failure(self, client, token_service, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(token_service, "revoke", boom)
        client.cookies.clear()

        response = await client.post("/logout", headers={"Cookie": "refresh_token=anything"})

        assert response.status_code == 500
        assert response.json() == {"message": "Logout failed"}
