"""
Access Request Routers - endpoints for authenticated, not-yet-whitelisted users

Provides endpoints for:
- POST /submit - Ask to be added to the whitelist
- GET /my_status - Whether the caller has a pending request
"""

from fastapi import APIRouter, Depends, Request

from network_intel.access_requests.access_request_models import (
    AccessRequestStatusResponse,
    AccessRequestSubmitRequest,
    AccessRequestSubmitResponse,
)
from network_intel.access_requests.access_request_services import access_request_service
from network_intel.auth.auth_services import get_current_user
from network_intel.core.rate_limit import ACCESS_REQUEST_RATE_LIMIT, limiter

router = APIRouter(prefix="/access_requests", tags=["access_requests"])


@router.post("/submit", response_model=AccessRequestSubmitResponse)
@limiter.limit(ACCESS_REQUEST_RATE_LIMIT)
async def submit_access_request(
    request: Request,
    body: AccessRequestSubmitRequest,
    current_user: dict = Depends(get_current_user),
) -> AccessRequestSubmitResponse:
    """
    Submit an access request.
    Already-approved and already-pending emails get a success message and no new request.
    Returns 403 if the email is not the caller's own.
    """
    return await access_request_service.submit_for_user(current_user, body.name, body.email, body.reason)


@router.get("/my_status", response_model=AccessRequestStatusResponse)
async def my_access_request_status(current_user: dict = Depends(get_current_user)) -> AccessRequestStatusResponse:
    has_pending = await access_request_service.has_pending(current_user.get("email"))
    return AccessRequestStatusResponse(has_pending=has_pending)
