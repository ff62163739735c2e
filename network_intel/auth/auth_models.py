"""
Auth Models - Pydantic schemas for authentication and access gating
"""

from datetime import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class AccessScreen(str, Enum):
    """Screen a caller is allowed to see."""
    LOGIN = "login"
    REQUEST_ACCESS = "request_access"
    APP = "app"
    ADMIN = "admin"


class GateTarget(str, Enum):
    """Screen a caller is asking for."""
    APP = "app"
    ADMIN = "admin"


SCREEN_PATHS = {
    AccessScreen.LOGIN: "/login",
    AccessScreen.REQUEST_ACCESS: "/request-access",
    AccessScreen.APP: "/",
    AccessScreen.ADMIN: "/admin",
}


# ================== Request Models ==================

class GoogleLoginRequest(BaseModel):
    """Google OAuth login request body."""
    token: str


# ================== Response Models ==================

class IdentityResponse(BaseModel):
    """Identity data in auth responses."""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str
    photo_url: Optional[str] = None


class SessionLoginResponse(BaseModel):
    """Response for session-based login."""
    status: int = 1
    message: str
    data: IdentityResponse


class AccessTokenResponse(BaseModel):
    """Response for access token request (API clients)."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    message: str


class WhitelistStatusResponse(BaseModel):
    whitelisted: bool
    is_admin: bool
    email: Optional[str] = None


class AccessGateResponse(BaseModel):
    """Granted screen, plus where to send the caller if it differs from the target."""
    screen: AccessScreen
    redirect: Optional[str] = None
    whitelisted: bool
    is_admin: bool


# ================== Internal Models ==================

class GoogleUserInfo(BaseModel):
    """User info from Google OAuth."""
    id: str
    email: str
    name: str
    picture: Optional[str] = None


class SessionData(BaseModel):
    """Session data stored in database."""
    user_id: str
    token_hash: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    expires_at: dt


class AccessTokenData(BaseModel):
    """Access token data stored in database."""
    user_id: str
    token_hash: str
    expires_at: dt
