"""
User Routers - User API endpoints

Provides endpoints for:
- GET /me - Full profile of the authenticated identity
"""

from fastapi import APIRouter, Depends

from network_intel.auth.auth_services import get_current_user
from network_intel.users.user_models import UserResponse
from network_intel.users.user_services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: dict = Depends(get_current_user)) -> UserResponse:
    """
    Get current authenticated user's profile.
    Accepts the session cookie or a bearer access token.
    """
    return user_service.build_user_response(current_user, "User profile retrieved")
