"""
Tests for credentials, identity resolution and outbound HTTP calls.

Session and token lookups are patched on the auth service; Google and the
owner webhook are served by httpx.MockTransport.
"""

import json
from datetime import timedelta as td

import httpx
import pytest
from fastapi import status
from httpx import AsyncClient

from network_intel.auth import auth_services
from network_intel.auth.auth_services import auth_service
from network_intel.core import notification
from network_intel.core.environment import env_config
from network_intel.core.notification import notify_owner
from network_intel.core.security import (
    SESSION_COOKIE_NAME,
    create_access_token,
    decode_access_token,
    generate_session_token,
    generate_user_id,
    hash_token,
)
from network_intel.users.user_models import UserRole
from network_intel.users.user_services import user_service

_RealAsyncClient = httpx.AsyncClient


def _mock_http(monkeypatch, module, handler) -> None:
    """Route every httpx.AsyncClient the module opens through handler."""
    def factory(**kwargs):
        return _RealAsyncClient(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(module.httpx, "AsyncClient", factory)


class TestSecurityUtilities:

    def test_user_id_is_six_digits(self):
        user_id = generate_user_id()
        assert len(user_id) == 6
        assert user_id.isdigit()

    def test_session_tokens_are_unique_and_hashed(self):
        first, second = generate_session_token(), generate_session_token()
        assert first != second
        assert hash_token(first) == hash_token(first)
        assert hash_token(first) != first
        assert len(hash_token(first)) == 64

    def test_access_token_round_trip(self):
        token = create_access_token("123456")
        payload = decode_access_token(token)
        assert payload["sub"] == "123456"

    def test_expired_or_garbled_token_is_rejected(self):
        expired = create_access_token("123456", expires_delta=td(seconds=-5))
        assert decode_access_token(expired) is None
        assert decode_access_token("not.a.jwt") is None


class TestIdentityResolution:
    """get_optional_user: session cookie first, then bearer token."""

    @pytest.mark.asyncio
    async def test_session_cookie_resolves_user(self, async_client: AsyncClient, monkeypatch, member_user):
        seen = []

        async def validate_session(token):
            seen.append(token)
            return member_user

        monkeypatch.setattr(auth_service, "validate_session", validate_session)
        response = await async_client.get("/users/me", headers={"Cookie": f"{SESSION_COOKIE_NAME}=cookie-token"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["email"] == "member@example.com"
        assert seen == ["cookie-token"]

    @pytest.mark.asyncio
    async def test_bearer_token_resolves_user(self, async_client: AsyncClient, monkeypatch, member_user):
        async def validate_access_token(token):
            return member_user if token == "api-token" else None

        monkeypatch.setattr(auth_service, "validate_access_token", validate_access_token)

        response = await async_client.get("/users/me", headers={"Authorization": "Bearer api-token"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["user_id"] == member_user["user_id"]

    @pytest.mark.asyncio
    async def test_invalid_session_falls_back_to_bearer(self, async_client: AsyncClient, monkeypatch, member_user):
        async def validate_session(token):
            return None

        async def validate_access_token(token):
            return member_user

        monkeypatch.setattr(auth_service, "validate_session", validate_session)
        monkeypatch.setattr(auth_service, "validate_access_token", validate_access_token)
        response = await async_client.get(
            "/users/me",
            headers={"Cookie": f"{SESSION_COOKIE_NAME}=stale", "Authorization": "Bearer api-token"},
        )

        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_no_credentials(self, async_client: AsyncClient):
        response = await async_client.get("/users/me")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestGoogleLogin:

    @pytest.mark.asyncio
    async def test_verify_google_token(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Authorization"] == "Bearer good-token"
            return httpx.Response(
                200,
                json={"sub": "g-1", "email": "new@x.com", "name": "Newcomer", "picture": "https://img/1.png"},
            )

        _mock_http(monkeypatch, auth_services, handler)

        info = await auth_service.verify_google_token("good-token")

        assert info.id == "g-1"
        assert info.email == "new@x.com"
        assert info.picture == "https://img/1.png"

    @pytest.mark.asyncio
    async def test_rejected_google_token(self, monkeypatch):
        _mock_http(monkeypatch, auth_services, lambda request: httpx.Response(401, json={"error": "invalid_token"}))
        assert await auth_service.verify_google_token("bad-token") is None

    @pytest.mark.asyncio
    async def test_google_unreachable(self, monkeypatch):
        def handler(request):
            raise httpx.ConnectError("no route to host")

        _mock_http(monkeypatch, auth_services, handler)
        assert await auth_service.verify_google_token("any") is None

    @pytest.mark.asyncio
    async def test_login_sets_session_cookie(self, async_client: AsyncClient, monkeypatch, outsider_user):
        """Signing in creates a session but grants no app access by itself."""
        async def authenticate(token):
            return outsider_user if token == "good-token" else None

        async def create_session_from_request(request, user_id):
            return "fresh-session"

        monkeypatch.setattr(auth_service, "authenticate_google_user", authenticate)
        monkeypatch.setattr(auth_service, "create_session_from_request", create_session_from_request)

        response = await async_client.post("/auth/google/login", json={"token": "good-token"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["email"] == "new@x.com"
        assert response.cookies.get(SESSION_COOKIE_NAME) == "fresh-session"

    @pytest.mark.asyncio
    async def test_login_with_bad_token(self, async_client: AsyncClient, monkeypatch):
        async def authenticate(token):
            return None

        monkeypatch.setattr(auth_service, "authenticate_google_user", authenticate)

        response = await async_client.post("/auth/google/login", json={"token": "bad"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_primary_admin_is_mirrored_as_admin(self):
        assert user_service.role_for_email("Chief@Example.com") == UserRole.ADMIN
        assert user_service.role_for_email("member@example.com") == UserRole.USER


class TestNotifyOwner:

    @pytest.mark.asyncio
    async def test_skipped_without_webhook(self, monkeypatch):
        monkeypatch.setitem(env_config._config, "owner_notify_url", None)
        assert await notify_owner("Title", "Body") is False

    @pytest.mark.asyncio
    async def test_posts_title_and_content(self, monkeypatch):
        received = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(request)
            return httpx.Response(204)

        monkeypatch.setitem(env_config._config, "owner_notify_url", "https://hooks.example.com/notify")
        _mock_http(monkeypatch, notification, handler)

        assert await notify_owner("New Access Request", "Ana asked for access") is True
        assert len(received) == 1
        assert str(received[0].url) == "https://hooks.example.com/notify"
        assert json.loads(received[0].content) == {"title": "New Access Request", "content": "Ana asked for access"}

    @pytest.mark.asyncio
    async def test_non_success_status_returns_false(self, monkeypatch):
        monkeypatch.setitem(env_config._config, "owner_notify_url", "https://hooks.example.com/notify")
        _mock_http(monkeypatch, notification, lambda request: httpx.Response(500))

        assert await notify_owner("Title", "Body") is False
