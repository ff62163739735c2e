"""
Access Request Services - submission and review of access requests

Lifecycle: a request is created pending and is resolved exactly once, to
approved or denied. Approval adds the email to the whitelist in the same
transaction that flips the status.
"""

from typing import List, Optional

from asyncpg.exceptions import UniqueViolationError

from network_intel.access_requests.access_request_models import (
    AccessRequestResponse,
    AccessRequestStatus,
    AccessRequestSubmitResponse,
)
from network_intel.admins.admin_whitelist_service import admin_whitelist_service
from network_intel.core.db_manager import get_db
from network_intel.core.environment import normalize_email
from network_intel.core.errors import InvalidStateError, NotFoundError, PermissionDeniedError
from network_intel.core.logger import get_logger
from network_intel.core.notification import notify_owner

logger = get_logger(__name__)

MESSAGE_ALREADY_APPROVED = "You are already approved."
MESSAGE_ALREADY_PENDING = "Your request is already pending."
MESSAGE_SUBMITTED = "Your request has been submitted."


class AccessRequestService:
    """Service handling the access-request state machine."""

    @property
    def db(self):
        """Get database client from global manager."""
        return get_db()

    # ================== Storage ==================

    async def find_request(self, request_id: int) -> Optional[dict]:
        return await self.db.read_one("SELECT * FROM access_requests WHERE id = $1", request_id)

    async def find_pending_by_email(self, email: str) -> Optional[dict]:
        query = "SELECT * FROM access_requests WHERE email = $1 AND status = 'pending' LIMIT 1"
        return await self.db.read_one(query, normalize_email(email))

    async def insert_request(self, email: str, name: str, reason: Optional[str]) -> Optional[dict]:
        """Insert a pending request. Returns None if one is already pending for the email."""
        try:
            return await self.db.insert_one(
                "access_requests",
                {
                    "email": normalize_email(email),
                    "name": name,
                    "reason": reason,
                    "status": AccessRequestStatus.PENDING.value,
                },
            )
        except UniqueViolationError:
            return None

    async def list_requests(self, status: Optional[AccessRequestStatus] = None) -> List[dict]:
        if status is not None:
            return await self.db.read(
                "SELECT * FROM access_requests WHERE status = $1 ORDER BY created_at DESC, id DESC",
                status.value,
            )
        return await self.db.read("SELECT * FROM access_requests ORDER BY created_at DESC, id DESC")

    async def count_pending(self) -> int:
        return await self.db.read_value("SELECT COUNT(*) FROM access_requests WHERE status = 'pending'")

    async def apply_decision(
        self,
        request: dict,
        decision: AccessRequestStatus,
        reviewer_email: str,
    ) -> dict:
        """
        Resolve a pending request in one transaction.

        On approval the whitelist upsert and the status change commit
        together. The status update only matches a row that is still
        pending, so a concurrent reviewer makes this raise and roll back.
        """
        async with self.db.transaction() as conn:
            if decision == AccessRequestStatus.APPROVED:
                await admin_whitelist_service.upsert_entry(
                    request["email"], request.get("name"), reviewer_email, conn=conn
                )

            row = await conn.fetchrow(
                """
                UPDATE access_requests
                SET status = $1,
                    reviewed_by = $2,
                    reviewed_at = CURRENT_TIMESTAMP,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = $3 AND status = 'pending'
                RETURNING *
                """,
                decision.value,
                reviewer_email,
                request["id"],
            )
            if row is None:
                current = await conn.fetchval("SELECT status FROM access_requests WHERE id = $1", request["id"])
                raise InvalidStateError(f"Request is already {current}")

            return dict(row)

    # ================== Submission ==================

    async def submit(self, name: str, email: str, reason: Optional[str] = None) -> AccessRequestSubmitResponse:
        """
        Submit an access request.

        Already-whitelisted and already-pending emails are answered with a
        success message and create no row.
        """
        email = normalize_email(email)

        if await admin_whitelist_service.is_whitelisted(email):
            return AccessRequestSubmitResponse(message=MESSAGE_ALREADY_APPROVED)

        if await self.find_pending_by_email(email):
            return AccessRequestSubmitResponse(message=MESSAGE_ALREADY_PENDING)

        created = await self.insert_request(email, name, reason)
        if created is None:
            return AccessRequestSubmitResponse(message=MESSAGE_ALREADY_PENDING)

        logger.info("Access request %s submitted by %s", created["id"], email)
        await self._notify_new_request(name, email, reason)
        return AccessRequestSubmitResponse(message=MESSAGE_SUBMITTED)

    async def submit_for_user(
        self,
        user: dict,
        name: str,
        email: str,
        reason: Optional[str] = None,
    ) -> AccessRequestSubmitResponse:
        """
        Submit on behalf of the signed-in caller.

        Raises:
            PermissionDeniedError: The email is not the caller's own, or the
                caller has no email to be whitelisted under
        """
        own_email = normalize_email(user.get("email"))
        if not own_email:
            raise PermissionDeniedError("Your account has no email address to request access for")
        if normalize_email(email) != own_email:
            raise PermissionDeniedError("You can only request access for your own email")
        return await self.submit(name, own_email, reason)

    async def _notify_new_request(self, name: str, email: str, reason: Optional[str]) -> None:
        try:
            await notify_owner(
                "New Access Request",
                f"{name} ({email}) has requested access.\n\nReason: {reason or 'No reason provided'}",
            )
        except Exception as e:
            logger.warning("Failed to notify owner about access request from %s: %s", email, e)

    async def has_pending(self, email: Optional[str]) -> bool:
        if not normalize_email(email):
            return False
        return await self.find_pending_by_email(email) is not None

    # ================== Review ==================

    async def _get_pending(self, request_id: int) -> dict:
        request = await self.find_request(request_id)
        if not request:
            raise NotFoundError("Request not found")
        if request["status"] != AccessRequestStatus.PENDING.value:
            raise InvalidStateError(f"Request is already {request['status']}")
        return request

    async def approve(self, request_id: int, reviewer_email: str) -> dict:
        """
        Approve a pending request and whitelist its email.

        Raises:
            NotFoundError: Unknown request id
            InvalidStateError: Request is not pending (message names the status)
        """
        request = await self._get_pending(request_id)
        resolved = await self.apply_decision(request, AccessRequestStatus.APPROVED, reviewer_email)
        logger.info("Access request %s for %s approved by %s", request_id, request["email"], reviewer_email)
        return resolved

    async def deny(self, request_id: int, reviewer_email: str) -> dict:
        """Deny a pending request. The whitelist is not touched."""
        request = await self._get_pending(request_id)
        resolved = await self.apply_decision(request, AccessRequestStatus.DENIED, reviewer_email)
        logger.info("Access request %s for %s denied by %s", request_id, request["email"], reviewer_email)
        return resolved

    async def list_responses(self, status: Optional[AccessRequestStatus] = None) -> List[AccessRequestResponse]:
        return [AccessRequestResponse(**row) for row in await self.list_requests(status)]


# Global access request service instance
access_request_service = AccessRequestService()
