"""
Access Request Models - Pydantic schemas for the access-request lifecycle
"""

from datetime import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class AccessRequestStatus(str, Enum):
    """pending -> approved | denied; approved and denied are terminal."""
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


# ================== Request Models ==================

class AccessRequestSubmitRequest(BaseModel):
    """Access request submitted by an authenticated, non-whitelisted user."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    reason: Optional[str] = Field(None, max_length=1000)


class AccessRequestIdRequest(BaseModel):
    id: int = Field(..., ge=1)


# ================== Response Models ==================

class AccessRequestResponse(BaseModel):
    id: int
    email: str
    name: str
    reason: Optional[str] = None
    status: AccessRequestStatus
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[dt] = None
    created_at: dt
    updated_at: dt


class AccessRequestSubmitResponse(BaseModel):
    success: bool = True
    message: str


class AccessRequestStatusResponse(BaseModel):
    has_pending: bool
