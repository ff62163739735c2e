"""
Contact Services - Business logic for contact operations
"""

from datetime import datetime as dt
from datetime import timedelta as td
from datetime import timezone as tz
from typing import List, Optional

from network_intel.audit.audit_models import AuditAction, AuditTargetType
from network_intel.audit.audit_services import audit_service
from network_intel.contacts.contact_models import (
    ContactListResponse,
    ContactResponse,
    ContactUpdateRequest,
    SingleContactResponse,
)
from network_intel.core.db_manager import get_db
from network_intel.core.errors import NotFoundError

# Request field -> column; "group" is reserved in SQL
UPDATABLE_COLUMNS = {
    "name": "name",
    "role": "role",
    "organization": "organization",
    "location": "location",
    "group": "group_name",
    "tier": "tier",
    "email": "email",
    "phone": "phone",
    "notes": "notes",
    "linkedin_url": "linkedin_url",
    "company_domain": "company_domain",
    "company_description": "company_description",
    "sector": "sector",
    "confidence": "confidence",
    "event": "event",
}


def extract_country(location: Optional[str]) -> Optional[str]:
    """
    Country part of a location string: the last comma-separated segment.

    "Bogotá, Colombia" -> "Colombia"; "Washington, D.C., United States" -> "United States"
    """
    if not location:
        return None
    parts = [part.strip() for part in location.split(",")]
    return parts[-1] or None


class ContactService:
    """Contact service handling contact operations."""

    @property
    def db(self):
        """Get database client from global manager."""
        return get_db()

    # ================== Response Builders ==================

    def _build_contact_response(self, contact: dict) -> ContactResponse:
        data = {k: v for k, v in contact.items() if k != "group_name"}
        data["group"] = contact.get("group_name")
        data["country"] = extract_country(contact.get("location"))
        return ContactResponse(**data)

    def build_single_contact_response(self, contact: dict, message: str = "Contact retrieved") -> SingleContactResponse:
        return SingleContactResponse(status=1, message=message, data=self._build_contact_response(contact))

    def build_contact_list_response(self, contacts: List[dict], message: str = "Contacts retrieved") -> ContactListResponse:
        return ContactListResponse(
            status=1,
            message=message,
            data=[self._build_contact_response(c) for c in contacts],
            total=len(contacts),
        )

    # ================== Storage ==================

    async def get_contact_by_id(self, contact_id: int) -> Optional[dict]:
        return await self.db.read_one("SELECT * FROM contacts WHERE id = $1", contact_id)

    async def list_contacts(self) -> List[dict]:
        return await self.db.read("SELECT * FROM contacts ORDER BY name ASC, id ASC")

    async def list_stale_contacts(self, cutoff: dt) -> List[dict]:
        query = """
            SELECT * FROM contacts
            WHERE last_contacted_at IS NULL OR last_contacted_at < $1
            ORDER BY last_contacted_at ASC NULLS FIRST, name ASC
        """
        return await self.db.read(query, cutoff)

    async def mark_contacted(self, contact_id: int) -> None:
        await self.db.execute(
            "UPDATE contacts SET last_contacted_at = CURRENT_TIMESTAMP WHERE id = $1",
            contact_id,
        )

    async def count_contacts(self) -> int:
        return await self.db.read_value("SELECT COUNT(*) FROM contacts")

    async def update_contact_row(self, contact_id: int, fields: dict) -> Optional[dict]:
        """Update the given columns and return the new row (None if the contact is gone)."""
        updates = []
        values = []
        for param_index, (column, value) in enumerate(fields.items(), start=1):
            updates.append(f"{column} = ${param_index}")
            values.append(value)

        values.append(contact_id)
        query = f"""
            UPDATE contacts
            SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP
            WHERE id = ${len(values)}
            RETURNING *
        """
        return await self.db.execute_returning(query, *values)

    # ================== Operations ==================

    async def require_contact(self, contact_id: int) -> dict:
        contact = await self.get_contact_by_id(contact_id)
        if not contact:
            raise NotFoundError("Contact not found")
        return contact

    async def view_contact(self, contact_id: int, viewer: dict) -> SingleContactResponse:
        """Get a contact and audit the profile view."""
        contact = await self.require_contact(contact_id)
        await audit_service.record_for_user(
            viewer,
            AuditAction.PROFILE_VIEW,
            AuditTargetType.CONTACT,
            contact_id,
            contact["name"],
        )
        return self.build_single_contact_response(contact)

    async def update_contact(self, request: ContactUpdateRequest, editor: dict) -> SingleContactResponse:
        """
        Apply a partial update and audit the changed field names.

        Raises NotFoundError if the contact does not exist.
        """
        changes = request.model_dump(exclude_unset=True, exclude={"id"})
        fields = {UPDATABLE_COLUMNS[name]: value for name, value in changes.items()}

        if not fields:
            contact = await self.require_contact(request.id)
            return self.build_single_contact_response(contact, "Nothing to update")

        contact = await self.update_contact_row(request.id, fields)
        if not contact:
            raise NotFoundError("Contact not found")

        await audit_service.record_for_user(
            editor,
            AuditAction.CONTACT_UPDATED,
            AuditTargetType.CONTACT,
            request.id,
            f"Updated: {', '.join(changes)}",
        )
        return self.build_single_contact_response(contact, "Contact updated")

    async def stale_contacts(self, days_since: int) -> ContactListResponse:
        cutoff = dt.now(tz.utc) - td(days=days_since)
        contacts = await self.list_stale_contacts(cutoff)
        return self.build_contact_list_response(contacts, "Stale contacts retrieved")


# Global contact service instance
contact_service = ContactService()
