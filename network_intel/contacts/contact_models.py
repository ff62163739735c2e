"""
Contact Models - Pydantic schemas for contact operations
"""

from datetime import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# ================== Request Models ==================

class ContactUpdateRequest(BaseModel):
    """Partial contact update; unset fields are left as they are."""
    id: int = Field(..., ge=1)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[str] = Field(None, max_length=255)
    organization: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    group: Optional[str] = Field(None, max_length=255)
    tier: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=320)
    phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    linkedin_url: Optional[str] = None
    company_domain: Optional[str] = Field(None, max_length=255)
    company_description: Optional[str] = None
    sector: Optional[str] = Field(None, max_length=255)
    confidence: Optional[str] = Field(None, max_length=50)
    event: Optional[str] = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value: Optional[str]) -> str:
        """name may be omitted but never cleared."""
        if value is None:
            raise ValueError("name cannot be null")
        return value


# ================== Response Models ==================

class ContactResponse(BaseModel):
    id: int
    name: str
    role: Optional[str] = None
    organization: Optional[str] = None
    location: Optional[str] = None
    country: Optional[str] = None
    group: Optional[str] = None
    tier: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    linkedin_url: Optional[str] = None
    company_domain: Optional[str] = None
    company_description: Optional[str] = None
    sector: Optional[str] = None
    confidence: Optional[str] = None
    event: Optional[str] = None
    last_researched_at: Optional[dt] = None
    last_contacted_at: Optional[dt] = None
    created_at: dt
    updated_at: dt


class SingleContactResponse(BaseModel):
    status: int = 1
    message: str
    data: ContactResponse


class ContactListResponse(BaseModel):
    status: int = 1
    message: str
    data: List[ContactResponse]
    total: int
