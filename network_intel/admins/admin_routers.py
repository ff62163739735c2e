"""
Admin Routers - Admin API endpoints (primary admin only)

Provides endpoints for:
- GET /requests, POST /requests/approve, POST /requests/deny - Access review
- GET /whitelist, POST /whitelist/add, POST /whitelist/remove - Whitelist administration
- POST /invite - Whitelist an email by invitation
- GET /audit_log - Paginated audit trail
- GET /stats - Counts for the admin dashboard
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from network_intel.access_requests.access_request_models import (
    AccessRequestIdRequest,
    AccessRequestResponse,
    AccessRequestStatus,
)
from network_intel.admins.admin_models import (
    AdminStatsResponse,
    AdminSuccessResponse,
    InviteRequest,
    WhitelistAddRequest,
    WhitelistEntryResponse,
    WhitelistRemoveRequest,
)
from network_intel.admins.admin_services import admin_service
from network_intel.audit.audit_models import (
    AUDIT_LOG_DEFAULT_LIMIT,
    AUDIT_LOG_MAX_LIMIT,
    AuditAction,
    AuditLogPageResponse,
)
from network_intel.auth.auth_services import require_admin

router = APIRouter(prefix="/admins", tags=["admins"])


# ================== Access Requests ==================

@router.get("/requests", response_model=List[AccessRequestResponse])
async def list_access_requests(
    status: Optional[AccessRequestStatus] = Query(None, description="Filter by status"),
    current_admin: dict = Depends(require_admin),
) -> List[AccessRequestResponse]:
    """Access requests, newest first."""
    return await admin_service.list_requests(status)


@router.post("/requests/approve", response_model=AdminSuccessResponse)
async def approve_access_request(
    body: AccessRequestIdRequest,
    current_admin: dict = Depends(require_admin),
) -> AdminSuccessResponse:
    """
    Approve a pending request and whitelist its email.
    Returns 404 if the request does not exist, 409 if it is not pending.
    """
    await admin_service.approve_request(body.id, current_admin)
    return AdminSuccessResponse()


@router.post("/requests/deny", response_model=AdminSuccessResponse)
async def deny_access_request(
    body: AccessRequestIdRequest,
    current_admin: dict = Depends(require_admin),
) -> AdminSuccessResponse:
    """
    Deny a pending request.
    Returns 404 if the request does not exist, 409 if it is not pending.
    """
    await admin_service.deny_request(body.id, current_admin)
    return AdminSuccessResponse()


# ================== Whitelist ==================

@router.get("/whitelist", response_model=List[WhitelistEntryResponse])
async def list_whitelist(current_admin: dict = Depends(require_admin)) -> List[WhitelistEntryResponse]:
    return await admin_service.list_whitelist()


@router.post("/whitelist/add", response_model=AdminSuccessResponse)
async def add_to_whitelist(
    body: WhitelistAddRequest,
    current_admin: dict = Depends(require_admin),
) -> AdminSuccessResponse:
    await admin_service.add_whitelist(body.email, body.name, current_admin)
    return AdminSuccessResponse()


@router.post("/whitelist/remove", response_model=AdminSuccessResponse)
async def remove_from_whitelist(
    body: WhitelistRemoveRequest,
    current_admin: dict = Depends(require_admin),
) -> AdminSuccessResponse:
    """Returns 400 if the email is the primary admin."""
    await admin_service.remove_whitelist(body.email, current_admin)
    return AdminSuccessResponse()


@router.post("/invite", response_model=AdminSuccessResponse)
async def invite(
    body: InviteRequest,
    current_admin: dict = Depends(require_admin),
) -> AdminSuccessResponse:
    await admin_service.invite(body.email, body.message, current_admin)
    return AdminSuccessResponse()


# ================== Reporting ==================

@router.get("/audit_log", response_model=AuditLogPageResponse)
async def audit_log(
    action: Optional[AuditAction] = Query(None, description="Filter by action"),
    limit: int = Query(AUDIT_LOG_DEFAULT_LIMIT, ge=1, le=AUDIT_LOG_MAX_LIMIT),
    offset: int = Query(0, ge=0),
    current_admin: dict = Depends(require_admin),
) -> AuditLogPageResponse:
    return await admin_service.audit_log(action, limit, offset)


@router.get("/stats", response_model=AdminStatsResponse)
async def stats(current_admin: dict = Depends(require_admin)) -> AdminStatsResponse:
    return await admin_service.stats()
