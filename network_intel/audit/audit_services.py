"""
Audit Services - append-only record of significant actions

record() is best-effort: an audit outage is logged and never blocks or
fails the primary action that triggered it.
"""

from typing import List, Optional, Tuple

from network_intel.audit.audit_models import (
    AUDIT_LOG_DEFAULT_LIMIT,
    AUDIT_LOG_MAX_LIMIT,
    AuditAction,
    AuditLogEntryResponse,
    AuditLogPageResponse,
    AuditTargetType,
)
from network_intel.core.db_manager import get_db
from network_intel.core.logger import get_logger

logger = get_logger(__name__)

PREVIEW_LENGTH = 80


def content_preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    """Collapse whitespace and cut content to a short preview for audit details."""
    flat = " ".join(content.split())
    if len(flat) <= length:
        return flat
    return flat[:length].rstrip() + "…"


class AuditService:
    """Audit service writing and paging the audit log."""

    @property
    def db(self):
        """Get database client from global manager."""
        return get_db()

    # ================== Storage ==================

    async def insert_entry(self, entry: dict) -> dict:
        return await self.db.insert_one("audit_log", entry)

    async def fetch_entries(
        self,
        action: Optional[AuditAction],
        limit: int,
        offset: int,
    ) -> Tuple[List[dict], int]:
        """Return one page (newest first) and the total count for the filter."""
        if action is not None:
            rows = await self.db.read(
                """
                SELECT * FROM audit_log WHERE action = $1
                ORDER BY created_at DESC, id DESC
                LIMIT $2 OFFSET $3
                """,
                action.value,
                limit,
                offset,
            )
            total = await self.db.read_value("SELECT COUNT(*) FROM audit_log WHERE action = $1", action.value)
        else:
            rows = await self.db.read(
                "SELECT * FROM audit_log ORDER BY created_at DESC, id DESC LIMIT $1 OFFSET $2",
                limit,
                offset,
            )
            total = await self.db.read_value("SELECT COUNT(*) FROM audit_log")
        return rows, total

    async def count_entries(self) -> int:
        return await self.db.read_value("SELECT COUNT(*) FROM audit_log")

    # ================== Writing ==================

    async def record(
        self,
        action: AuditAction,
        actor_email: str,
        actor_name: Optional[str] = None,
        target_type: Optional[AuditTargetType] = None,
        target_id: Optional[int] = None,
        details: Optional[str] = None,
    ) -> Optional[dict]:
        """
        Append one audit entry.

        Returns:
            The stored entry, or None if the write failed (logged as a warning)
        """
        entry = {
            "action": action.value,
            "actor_email": actor_email,
            "actor_name": actor_name,
            "target_type": target_type.value if target_type else None,
            "target_id": target_id,
            "details": details,
        }
        try:
            return await self.insert_entry(entry)
        except Exception as e:
            logger.warning("Audit write failed for %s by %s: %s", action.value, actor_email, e)
            return None

    async def record_for_user(
        self,
        user: dict,
        action: AuditAction,
        target_type: Optional[AuditTargetType] = None,
        target_id: Optional[int] = None,
        details: Optional[str] = None,
    ) -> Optional[dict]:
        """record() with the actor taken from an authenticated user dict."""
        return await self.record(
            action,
            user.get("email") or user["user_id"],
            user.get("name"),
            target_type,
            target_id,
            details,
        )

    # ================== Reading ==================

    async def query(
        self,
        action: Optional[AuditAction] = None,
        limit: int = AUDIT_LOG_DEFAULT_LIMIT,
        offset: int = 0,
    ) -> AuditLogPageResponse:
        """Page through the log newest first; limit is clamped to 1..200."""
        limit = max(1, min(limit, AUDIT_LOG_MAX_LIMIT))
        offset = max(0, offset)

        rows, total = await self.fetch_entries(action, limit, offset)
        return AuditLogPageResponse(
            entries=[AuditLogEntryResponse(**row) for row in rows],
            total=total,
        )


# Global audit service instance
audit_service = AuditService()
