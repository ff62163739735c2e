"""
Audit Models - Pydantic schemas for the append-only audit trail
"""

from datetime import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

AUDIT_LOG_MAX_LIMIT = 200
AUDIT_LOG_DEFAULT_LIMIT = 50


class AuditAction(str, Enum):
    """Closed set of audited actions."""
    PROFILE_VIEW = "profile_view"
    NOTE_ADDED = "note_added"
    NOTE_DELETED = "note_deleted"
    ACCESS_APPROVED = "access_approved"
    ACCESS_DENIED = "access_denied"
    WHITELIST_ADDED = "whitelist_added"
    WHITELIST_REMOVED = "whitelist_removed"
    CONTACT_UPDATED = "contact_updated"
    CONTACT_RESEARCHED = "contact_researched"
    INVITE_SENT = "invite_sent"


class AuditTargetType(str, Enum):
    CONTACT = "contact"
    ACCESS_REQUEST = "access_request"
    WHITELIST = "whitelist"


# ================== Request Models ==================

class LogViewRequest(BaseModel):
    """Profile view reported by the client."""
    contact_id: int = Field(..., ge=1)
    contact_name: str = Field(..., min_length=1, max_length=255)


# ================== Response Models ==================

class AuditLogEntryResponse(BaseModel):
    id: int
    action: AuditAction
    actor_email: str
    actor_name: Optional[str] = None
    target_type: Optional[str] = None
    target_id: Optional[int] = None
    details: Optional[str] = None
    created_at: dt


class AuditLogPageResponse(BaseModel):
    """One page of the audit log plus the total matching entries."""
    entries: List[AuditLogEntryResponse]
    total: int


class SuccessResponse(BaseModel):
    success: bool = True
