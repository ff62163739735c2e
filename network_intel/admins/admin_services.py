"""
Admin Services - Business logic for admin operations

Every mutation here appends exactly one audit entry naming the acting admin.
"""

from typing import List, Optional

from network_intel.access_requests.access_request_models import (
    AccessRequestResponse,
    AccessRequestStatus,
)
from network_intel.access_requests.access_request_services import access_request_service
from network_intel.admins.admin_models import AdminStatsResponse, WhitelistEntryResponse
from network_intel.admins.admin_whitelist_service import admin_whitelist_service
from network_intel.audit.audit_models import AuditAction, AuditLogPageResponse, AuditTargetType
from network_intel.audit.audit_services import audit_service
from network_intel.contacts.contact_services import contact_service
from network_intel.core.environment import normalize_email
from network_intel.core.logger import get_logger
from network_intel.core.notification import notify_owner
from network_intel.notes.note_services import note_service

logger = get_logger(__name__)


class AdminService:
    """Admin service handling access review, whitelist administration and reporting."""

    # ================== Access Requests ==================

    async def list_requests(self, status: Optional[AccessRequestStatus] = None) -> List[AccessRequestResponse]:
        return await access_request_service.list_responses(status)

    async def approve_request(self, request_id: int, admin: dict) -> AccessRequestResponse:
        request = await access_request_service.approve(request_id, admin["email"])
        await audit_service.record_for_user(
            admin,
            AuditAction.ACCESS_APPROVED,
            AuditTargetType.ACCESS_REQUEST,
            request_id,
            request["email"],
        )
        return AccessRequestResponse(**request)

    async def deny_request(self, request_id: int, admin: dict) -> AccessRequestResponse:
        request = await access_request_service.deny(request_id, admin["email"])
        await audit_service.record_for_user(
            admin,
            AuditAction.ACCESS_DENIED,
            AuditTargetType.ACCESS_REQUEST,
            request_id,
            request["email"],
        )
        return AccessRequestResponse(**request)

    # ================== Whitelist ==================

    async def list_whitelist(self) -> List[WhitelistEntryResponse]:
        return [WhitelistEntryResponse(**row) for row in await admin_whitelist_service.list_entries()]

    async def add_whitelist(self, email: str, name: Optional[str], admin: dict) -> WhitelistEntryResponse:
        entry = await admin_whitelist_service.add(email, name, admin["email"])
        await audit_service.record_for_user(
            admin,
            AuditAction.WHITELIST_ADDED,
            AuditTargetType.WHITELIST,
            entry["id"],
            entry["email"],
        )
        return WhitelistEntryResponse(**entry)

    async def remove_whitelist(self, email: str, admin: dict) -> None:
        """Raises InvariantViolationError for the primary admin before touching the store."""
        await admin_whitelist_service.remove(email)
        await audit_service.record_for_user(
            admin,
            AuditAction.WHITELIST_REMOVED,
            AuditTargetType.WHITELIST,
            None,
            normalize_email(email),
        )

    async def invite(self, email: str, message: Optional[str], admin: dict) -> WhitelistEntryResponse:
        """Whitelist an email on an admin's invitation and notify the owner (best-effort)."""
        entry = await admin_whitelist_service.add(email, None, admin["email"])
        await audit_service.record_for_user(
            admin,
            AuditAction.INVITE_SENT,
            AuditTargetType.WHITELIST,
            entry["id"],
            entry["email"],
        )

        content = f"{admin.get('name') or admin['email']} invited {entry['email']} to the platform."
        if message:
            content += f"\n\nMessage: {message}"
        try:
            await notify_owner("Platform Invite Sent", content)
        except Exception as e:
            logger.warning("Failed to notify owner about invite for %s: %s", entry["email"], e)

        return WhitelistEntryResponse(**entry)

    # ================== Reporting ==================

    async def audit_log(
        self,
        action: Optional[AuditAction],
        limit: int,
        offset: int,
    ) -> AuditLogPageResponse:
        return await audit_service.query(action, limit, offset)

    async def stats(self) -> AdminStatsResponse:
        return AdminStatsResponse(
            contacts=await contact_service.count_contacts(),
            whitelisted=await admin_whitelist_service.count_entries(),
            pending_requests=await access_request_service.count_pending(),
            notes=await note_service.count_notes(),
            audit_entries=await audit_service.count_entries(),
        )


# Global admin service instance
admin_service = AdminService()
