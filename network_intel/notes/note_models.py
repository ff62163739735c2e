"""
Note Models - Pydantic schemas for relationship notes
"""

from datetime import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class NoteType(str, Enum):
    MEETING = "meeting"
    CALL = "call"
    EMAIL = "email"
    FOLLOW_UP = "follow_up"
    GENERAL = "general"
    RESEARCH = "research"


# ================== Request Models ==================

class NoteCreateRequest(BaseModel):
    contact_id: int = Field(..., ge=1)
    note_type: NoteType
    content: str = Field(..., min_length=1, max_length=10000)


class NoteDeleteRequest(BaseModel):
    id: int = Field(..., ge=1)


# ================== Response Models ==================

class NoteResponse(BaseModel):
    id: int
    contact_id: int
    author_id: str
    author_email: str
    author_name: Optional[str] = None
    note_type: NoteType
    content: str
    created_at: dt
    updated_at: dt


class NoteDeleteResponse(BaseModel):
    success: bool = True
