"""
Contact Routers - Contact API endpoints (whitelisted members)

Provides endpoints for:
- GET / - List contacts
- GET /stale - Contacts not reached within N days
- GET /{contact_id} - Get a contact (audited as a profile view)
- POST /update - Partial update (audited)
"""

from fastapi import APIRouter, Depends, Query

from network_intel.auth.auth_services import require_member
from network_intel.contacts.contact_models import (
    ContactListResponse,
    ContactUpdateRequest,
    SingleContactResponse,
)
from network_intel.contacts.contact_services import contact_service

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get("/", response_model=ContactListResponse)
async def list_contacts(current_user: dict = Depends(require_member)) -> ContactListResponse:
    contacts = await contact_service.list_contacts()
    return contact_service.build_contact_list_response(contacts)


@router.get("/stale", response_model=ContactListResponse)
async def stale_contacts(
    days_since: int = Query(30, ge=1, le=365, description="Days without contact"),
    current_user: dict = Depends(require_member),
) -> ContactListResponse:
    return await contact_service.stale_contacts(days_since)


@router.get("/{contact_id}", response_model=SingleContactResponse)
async def get_contact(
    contact_id: int,
    current_user: dict = Depends(require_member),
) -> SingleContactResponse:
    """Returns 404 if the contact does not exist."""
    return await contact_service.view_contact(contact_id, current_user)


@router.post("/update", response_model=SingleContactResponse)
async def update_contact(
    body: ContactUpdateRequest,
    current_user: dict = Depends(require_member),
) -> SingleContactResponse:
    return await contact_service.update_contact(body, current_user)
