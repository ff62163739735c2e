"""
Auth Routers - Authentication and access-gate endpoints

Provides endpoints for:
1. Google login -> session cookie
2. Access token generation for an authenticated session
3. Logout and current identity
4. Whitelist status and access-gate decision
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from network_intel.auth.auth_models import (
    AccessGateResponse,
    AccessTokenResponse,
    GateTarget,
    GoogleLoginRequest,
    IdentityResponse,
    SessionLoginResponse,
    WhitelistStatusResponse,
)
from network_intel.auth.auth_services import auth_service, get_current_user, get_optional_user
from network_intel.core.environment import env_config
from network_intel.core.rate_limit import LOGIN_RATE_LIMIT, limiter
from network_intel.core.security import ACCESS_TOKEN_EXPIRE_MINUTES, SESSION_COOKIE_NAME, SESSION_EXPIRE_DAYS

router = APIRouter(prefix="/auth", tags=["auth"])


# ================== Helper Functions ==================

def set_session_cookie(response: Response, token: str) -> None:
    """Set HTTP-only session cookie on response."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=env_config.get("secure_cookies", True),
        samesite="lax",
        max_age=SESSION_EXPIRE_DAYS * 24 * 60 * 60,
    )


def build_identity_response(user: dict) -> IdentityResponse:
    return IdentityResponse(
        user_id=user["user_id"],
        email=user.get("email"),
        name=user.get("name"),
        role=user["role"],
        photo_url=user.get("photo_url"),
    )


# ================== Session-Based Authentication ==================

@router.post("/google/login", response_model=SessionLoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def google_login(
    request: Request,
    response: Response,
    body: GoogleLoginRequest,
) -> SessionLoginResponse:
    """
    Google OAuth login endpoint.
    Creates or refreshes the local identity, creates a session, sets HTTP-only cookie.
    Signing in does not grant app access; see /auth/whitelist_status.
    """
    user = await auth_service.authenticate_google_user(body.token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Google authorization",
        )

    token = await auth_service.create_session_from_request(request, user["user_id"])
    set_session_cookie(response, token)
    return SessionLoginResponse(status=1, message="Google login successful", data=build_identity_response(user))


@router.post("/access_token", response_model=AccessTokenResponse)
async def get_access_token(current_user: dict = Depends(get_current_user)) -> AccessTokenResponse:
    """Issue a JWT bearer token for the authenticated identity."""
    jwt_token, _ = await auth_service.create_access_token_record(current_user["user_id"])
    return AccessTokenResponse(
        access_token=jwt_token,
        token_type="bearer",
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        message="Access token generated successfully",
    )


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Deletes session and clears cookie."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        await auth_service.delete_session(token)

    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"status": 1, "message": "Logged out successfully"}


@router.get("/me", response_model=Optional[IdentityResponse])
async def me(user: Optional[dict] = Depends(get_optional_user)) -> Optional[IdentityResponse]:
    """Current identity, or null when not signed in."""
    return build_identity_response(user) if user else None


# ================== Access Gate ==================

@router.get("/whitelist_status", response_model=WhitelistStatusResponse)
async def whitelist_status(current_user: dict = Depends(get_current_user)) -> WhitelistStatusResponse:
    return await auth_service.whitelist_status(current_user)


@router.get("/gate", response_model=AccessGateResponse)
async def access_gate(
    target: GateTarget = Query(GateTarget.APP, description="Screen the client wants to show"),
    user: Optional[dict] = Depends(get_optional_user),
) -> AccessGateResponse:
    """Which screen the caller may see: login, request_access, app or admin."""
    return await auth_service.access_gate(user, target)
