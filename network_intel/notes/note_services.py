"""
Note Services - relationship notes attached to contacts

A note can be deleted only by its author or an admin. Every add and delete
is audited with a short content preview, never the full content.
"""

from typing import List, Optional

from network_intel.admins.admin_whitelist_service import admin_whitelist_service
from network_intel.audit.audit_models import AuditAction, AuditTargetType
from network_intel.audit.audit_services import audit_service, content_preview
from network_intel.contacts.contact_services import contact_service
from network_intel.core.db_manager import get_db
from network_intel.core.errors import NotFoundError, PermissionDeniedError
from network_intel.core.logger import get_logger
from network_intel.notes.note_models import NoteCreateRequest, NoteResponse

logger = get_logger(__name__)


class NoteService:
    """Note service handling note operations."""

    @property
    def db(self):
        """Get database client from global manager."""
        return get_db()

    # ================== Storage ==================

    async def insert_note(self, note: dict) -> dict:
        return await self.db.insert_one("meeting_notes", note)

    async def find_note(self, note_id: int) -> Optional[dict]:
        return await self.db.read_one("SELECT * FROM meeting_notes WHERE id = $1", note_id)

    async def delete_note_row(self, note_id: int) -> None:
        await self.db.execute("DELETE FROM meeting_notes WHERE id = $1", note_id)

    async def list_notes_for_contact(self, contact_id: int) -> List[dict]:
        query = "SELECT * FROM meeting_notes WHERE contact_id = $1 ORDER BY created_at DESC, id DESC"
        return await self.db.read(query, contact_id)

    async def count_notes(self) -> int:
        return await self.db.read_value("SELECT COUNT(*) FROM meeting_notes")

    # ================== Operations ==================

    def can_delete(self, note: dict, user: dict) -> bool:
        """Author or admin."""
        return note["author_id"] == user["user_id"] or admin_whitelist_service.is_admin(user.get("email"))

    async def create(self, request: NoteCreateRequest, author: dict) -> NoteResponse:
        """
        Add a note to a contact, bump the contact's last-contacted time and
        audit the addition.

        Raises NotFoundError if the contact does not exist.
        """
        await contact_service.require_contact(request.contact_id)

        note = await self.insert_note({
            "contact_id": request.contact_id,
            "author_id": author["user_id"],
            "author_email": author.get("email") or "",
            "author_name": author.get("name"),
            "note_type": request.note_type.value,
            "content": request.content,
        })
        await contact_service.mark_contacted(request.contact_id)

        await audit_service.record_for_user(
            author,
            AuditAction.NOTE_ADDED,
            AuditTargetType.CONTACT,
            request.contact_id,
            f"Note #{note['id']} ({request.note_type.value}): {content_preview(request.content)}",
        )
        return NoteResponse(**note)

    async def delete(self, note_id: int, user: dict) -> None:
        """
        Delete a note.

        Raises:
            NotFoundError: Unknown note id
            PermissionDeniedError: Caller is neither the author nor an admin
        """
        note = await self.find_note(note_id)
        if not note:
            raise NotFoundError("Note not found")
        if not self.can_delete(note, user):
            raise PermissionDeniedError("Only the note's author or an admin can delete it")

        await self.delete_note_row(note_id)
        logger.info("Note %s on contact %s deleted by %s", note_id, note["contact_id"], user["user_id"])

        await audit_service.record_for_user(
            user,
            AuditAction.NOTE_DELETED,
            AuditTargetType.CONTACT,
            note["contact_id"],
            f"Note #{note_id} ({note['note_type']}): {content_preview(note['content'])}",
        )

    async def list_for_contact(self, contact_id: int) -> List[NoteResponse]:
        return [NoteResponse(**row) for row in await self.list_notes_for_contact(contact_id)]


# Global note service instance
note_service = NoteService()
