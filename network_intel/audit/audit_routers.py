"""
Audit Routers - client-reported audit events

Provides endpoints for:
- POST /log_view - Record that the caller opened a contact profile
"""

from fastapi import APIRouter, Depends

from network_intel.audit.audit_models import AuditAction, AuditTargetType, LogViewRequest, SuccessResponse
from network_intel.audit.audit_services import audit_service
from network_intel.auth.auth_services import require_member

router = APIRouter(prefix="/audit", tags=["audit"])


@router.post("/log_view", response_model=SuccessResponse)
async def log_view(
    body: LogViewRequest,
    current_user: dict = Depends(require_member),
) -> SuccessResponse:
    """Fire-and-forget: succeeds even if the audit write fails."""
    await audit_service.record_for_user(
        current_user,
        AuditAction.PROFILE_VIEW,
        AuditTargetType.CONTACT,
        body.contact_id,
        body.contact_name,
    )
    return SuccessResponse()
