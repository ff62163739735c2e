"""
Admin Models - Pydantic schemas for admin operations
"""

from datetime import datetime as dt
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


# ================== Request Models ==================

class WhitelistAddRequest(BaseModel):
    email: EmailStr
    name: Optional[str] = Field(None, max_length=255)


class WhitelistRemoveRequest(BaseModel):
    email: EmailStr


class InviteRequest(BaseModel):
    """Whitelist an email directly and tell the owner about it."""
    email: EmailStr
    message: Optional[str] = Field(None, max_length=500)


# ================== Response Models ==================

class WhitelistEntryResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    approved_by: Optional[str] = None
    created_at: dt


class AdminStatsResponse(BaseModel):
    contacts: int
    whitelisted: int
    pending_requests: int
    notes: int
    audit_entries: int


class AdminSuccessResponse(BaseModel):
    success: bool = True
