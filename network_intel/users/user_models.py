"""
User Models - Pydantic schemas for user identities
"""

from datetime import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class UserRole(str, Enum):
    """Role mirrored locally from the primary-admin configuration."""
    USER = "user"
    ADMIN = "admin"


# ================== Response Models ==================

class UserProfileResponse(BaseModel):
    """Identity of the authenticated caller."""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    photo_url: Optional[str] = None
    role: UserRole
    login_method: Optional[str] = None
    created_at: dt
    last_signed_in: dt


class UserResponse(BaseModel):
    """Standard user response wrapper."""
    status: int = 1
    message: str
    data: UserProfileResponse


# ================== Internal Models ==================

class UserCreate(BaseModel):
    """Internal model for creating a user from an external identity."""
    user_id: str
    google_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    photo_url: Optional[str] = None
    role: UserRole = UserRole.USER
    login_method: Optional[str] = None
    is_active: bool = True
    created_at: dt
    updated_at: dt
    last_signed_in: dt
