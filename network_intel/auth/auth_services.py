"""
Auth Services - Business logic for authentication and access gating

Identities come from Google OAuth and are mirrored into the users table.
Two credentials resolve to an identity:
1. Session (HTTP-only cookie) - for the web app
2. Access Token (JWT bearer) - for API clients and scripts

Whitelist membership is the only gate to the app; admin endpoints further
require the caller to be the configured primary admin.
"""

from typing import Optional

import httpx
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from network_intel.admins.admin_whitelist_service import admin_whitelist_service
from network_intel.auth.auth_models import (
    SCREEN_PATHS,
    AccessGateResponse,
    AccessScreen,
    AccessTokenData,
    GateTarget,
    GoogleUserInfo,
    SessionData,
    WhitelistStatusResponse,
)
from network_intel.core.db_manager import get_db
from network_intel.core.logger import get_logger
from network_intel.core.security import (
    SESSION_COOKIE_NAME,
    create_access_token,
    decode_access_token,
    generate_session_token,
    get_session_expiry,
    get_token_expiry,
    hash_token,
)
from network_intel.users.user_services import user_service

logger = get_logger(__name__)

GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)


def resolve_access_gate(
    user: Optional[dict],
    whitelisted: bool,
    is_admin: bool,
    target: GateTarget = GateTarget.APP,
) -> AccessGateResponse:
    """
    Decide which screen a caller may see.

    - no identity -> login
    - identity not whitelisted -> request access
    - whitelisted admin asking for admin -> admin
    - any other whitelisted caller -> app (non-admins asking for admin land here)

    redirect is set whenever the granted screen differs from the target.
    """
    if user is None:
        screen = AccessScreen.LOGIN
        whitelisted = is_admin = False
    elif not whitelisted:
        screen = AccessScreen.REQUEST_ACCESS
    elif target == GateTarget.ADMIN and is_admin:
        screen = AccessScreen.ADMIN
    else:
        screen = AccessScreen.APP

    redirect = None if screen.value == target.value else SCREEN_PATHS[screen]
    return AccessGateResponse(screen=screen, redirect=redirect, whitelisted=whitelisted, is_admin=is_admin)


class AuthService:
    """Authentication service handling all auth methods."""

    @property
    def db(self):
        """Get database client from global manager."""
        return get_db()

    # ================== Google OAuth ==================

    async def verify_google_token(self, token: str) -> Optional[GoogleUserInfo]:
        """Verify Google OAuth token and get user info. None if Google rejects it."""
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {token}"})
        except httpx.HTTPError as e:
            logger.warning("Google userinfo request failed: %s", e)
            return None

        if response.status_code != 200:
            return None

        data = response.json()
        if not data.get("email"):
            return None

        return GoogleUserInfo(
            id=data["sub"],
            email=data["email"],
            name=data.get("name", data["email"]),
            picture=data.get("picture"),
        )

    async def authenticate_google_user(self, token: str) -> Optional[dict]:
        """
        Authenticate via Google OAuth.
        Creates the local user if needed and refreshes its sign-in metadata.
        """
        google_info = await self.verify_google_token(token)
        if not google_info:
            return None

        return await user_service.upsert_oauth_user(
            google_id=google_info.id,
            email=google_info.email,
            name=google_info.name,
            photo_url=google_info.picture,
            login_method="google",
        )

    # ================== Session Management ==================

    async def create_session(
        self,
        user_id: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> tuple[str, SessionData]:
        """
        Create a new session for user.

        Returns (raw_token, session_data) tuple.
        """
        token = generate_session_token()
        session_data = SessionData(
            user_id=user_id,
            token_hash=hash_token(token),
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=get_session_expiry(),
        )

        await self.db.insert_one("sessions", session_data.model_dump())
        return token, session_data

    async def create_session_from_request(self, request: Request, user_id: str) -> str:
        """
        Create a session for user from FastAPI Request object.
        Extracts IP address and user agent from request automatically.

        Returns:
            Session token string (to be set in cookie)
        """
        token, _ = await self.create_session(
            user_id=user_id,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
        return token

    async def validate_session(self, token: str) -> Optional[dict]:
        """Validate session token and return user if valid."""
        query = """
            SELECT u.* FROM sessions s
            JOIN users u ON s.user_id = u.user_id
            WHERE s.token_hash = $1
            AND s.expires_at > CURRENT_TIMESTAMP
            AND u.is_active = TRUE
        """
        return await self.db.read_one(query, hash_token(token))

    async def delete_session(self, token: str) -> bool:
        """Delete a session (logout)."""
        result = await self.db.execute("DELETE FROM sessions WHERE token_hash = $1", hash_token(token))
        return result != "DELETE 0"

    # ================== Access Token Management ==================

    async def create_access_token_record(self, user_id: str) -> tuple[str, AccessTokenData]:
        """
        Create a JWT access token and store its hash in database.

        Returns (jwt_token, token_data) tuple.
        """
        jwt_token = create_access_token(user_id)
        token_data = AccessTokenData(
            user_id=user_id,
            token_hash=hash_token(jwt_token),
            expires_at=get_token_expiry(),
        )

        await self.db.insert_one("access_tokens", token_data.model_dump())
        return jwt_token, token_data

    async def validate_access_token(self, token: str) -> Optional[dict]:
        """Validate JWT access token and return user if valid."""
        payload = decode_access_token(token)
        if not payload or not payload.get("sub"):
            return None

        query = """
            SELECT u.* FROM access_tokens t
            JOIN users u ON t.user_id = u.user_id
            WHERE t.token_hash = $1
            AND t.expires_at > CURRENT_TIMESTAMP
            AND u.is_active = TRUE
        """
        return await self.db.read_one(query, hash_token(token))

    # ================== Access Gate ==================

    async def whitelist_status(self, user: dict) -> WhitelistStatusResponse:
        """
        Whitelist and admin status of an identity.

        The primary admin is always reported whitelisted so it can never be
        locked out; everyone else depends on the whitelist lookup.
        """
        email = user.get("email")
        if not email:
            return WhitelistStatusResponse(whitelisted=False, is_admin=False, email=None)

        is_admin = admin_whitelist_service.is_admin(email)
        whitelisted = is_admin or await admin_whitelist_service.is_whitelisted(email)
        return WhitelistStatusResponse(whitelisted=whitelisted, is_admin=is_admin, email=email)

    async def access_gate(self, user: Optional[dict], target: GateTarget) -> AccessGateResponse:
        if user is None:
            return resolve_access_gate(None, False, False, target)
        access = await self.whitelist_status(user)
        return resolve_access_gate(user, access.whitelisted, access.is_admin, target)


# Global auth service instance
auth_service = AuthService()


# ================== FastAPI Dependencies ==================

async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[dict]:
    """
    Dependency: identity from the session cookie, else from a bearer token.
    Returns None when neither resolves.
    """
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        user = await auth_service.validate_session(token)
        if user:
            return user

    if credentials:
        return await auth_service.validate_access_token(credentials.credentials)

    return None


async def get_current_user(user: Optional[dict] = Depends(get_optional_user)) -> dict:
    """Dependency: authenticated identity, 401 otherwise."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_member(user: dict = Depends(get_current_user)) -> dict:
    """Dependency: authenticated and whitelisted, 403 otherwise."""
    access = await auth_service.whitelist_status(user)
    if not access.whitelisted:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Email is not whitelisted for access",
        )
    return user


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency: authenticated primary admin, 403 otherwise."""
    if not admin_whitelist_service.is_admin(user.get("email")):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
