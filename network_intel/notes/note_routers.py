"""
Note Routers - relationship notes on contacts (whitelisted members)

Provides endpoints for:
- GET /list - Notes for a contact, newest first
- POST /create - Add a note
- POST /delete - Delete a note (author or admin)
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from network_intel.auth.auth_services import require_member
from network_intel.notes.note_models import (
    NoteCreateRequest,
    NoteDeleteRequest,
    NoteDeleteResponse,
    NoteResponse,
)
from network_intel.notes.note_services import note_service

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("/list", response_model=List[NoteResponse])
async def list_notes(
    contact_id: int = Query(..., ge=1),
    current_user: dict = Depends(require_member),
) -> List[NoteResponse]:
    return await note_service.list_for_contact(contact_id)


@router.post("/create", response_model=NoteResponse)
async def create_note(
    body: NoteCreateRequest,
    current_user: dict = Depends(require_member),
) -> NoteResponse:
    """Returns 404 if the contact does not exist."""
    return await note_service.create(body, current_user)


@router.post("/delete", response_model=NoteDeleteResponse)
async def delete_note(
    body: NoteDeleteRequest,
    current_user: dict = Depends(require_member),
) -> NoteDeleteResponse:
    """Returns 404 for unknown notes and 403 unless the caller is the author or an admin."""
    await note_service.delete(body.id, current_user)
    return NoteDeleteResponse()
