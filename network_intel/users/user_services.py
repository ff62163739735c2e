"""
User Services - local mirror of externally authenticated identities
"""

from datetime import datetime as dt
from datetime import timezone as tz
from typing import Optional

from network_intel.admins.admin_whitelist_service import admin_whitelist_service
from network_intel.core.db_manager import get_db
from network_intel.core.environment import normalize_email
from network_intel.core.logger import get_logger
from network_intel.core.security import generate_user_id
from network_intel.users.user_models import (
    UserCreate,
    UserProfileResponse,
    UserResponse,
    UserRole,
)

logger = get_logger(__name__)


class UserService:
    """User service handling identity mirroring."""

    @property
    def db(self):
        """Get database client from global manager."""
        return get_db()

    # ================== Response Builders ==================

    def _build_user_profile_response(self, user: dict) -> UserProfileResponse:
        return UserProfileResponse(
            user_id=user["user_id"],
            email=user.get("email"),
            name=user.get("name"),
            photo_url=user.get("photo_url"),
            role=user["role"],
            login_method=user.get("login_method"),
            created_at=user["created_at"],
            last_signed_in=user["last_signed_in"],
        )

    def build_user_response(self, user: dict, message: str = "User retrieved") -> UserResponse:
        """Build complete UserResponse wrapper."""
        return UserResponse(
            status=1,
            message=message,
            data=self._build_user_profile_response(user),
        )

    def role_for_email(self, email: Optional[str]) -> UserRole:
        """The primary admin is always mirrored as admin; everyone else is a user."""
        return UserRole.ADMIN if admin_whitelist_service.is_admin(email) else UserRole.USER

    # ================== Lookups ==================

    async def get_user_by_google_id(self, google_id: str) -> Optional[dict]:
        query = "SELECT * FROM users WHERE google_id = $1 AND is_active = TRUE"
        return await self.db.read_one(query, google_id)

    async def get_user_by_email(self, email: str) -> Optional[dict]:
        query = "SELECT * FROM users WHERE email = $1"
        return await self.db.read_one(query, normalize_email(email))

    # ================== Upsert from external identity ==================

    async def upsert_oauth_user(
        self,
        google_id: str,
        email: str,
        name: Optional[str] = None,
        photo_url: Optional[str] = None,
        login_method: str = "google",
    ) -> dict:
        """
        Find the user by external id, then by email, and refresh their
        sign-in metadata; create the user when neither matches.

        Args:
            google_id: Opaque id from the identity provider
            email: Email from the identity provider
            name: Display name
            photo_url: Avatar URL
            login_method: Provider name stored for display

        Returns:
            User dict
        """
        email = normalize_email(email)
        role = self.role_for_email(email)

        user = await self.get_user_by_google_id(google_id)
        if not user:
            user = await self.get_user_by_email(email)

        if user:
            updated = await self.db.execute_returning(
                """
                UPDATE users
                SET google_id = COALESCE(google_id, $1),
                    email = $2,
                    name = COALESCE($3, name),
                    photo_url = COALESCE(photo_url, $4),
                    role = $5,
                    login_method = $6,
                    last_signed_in = CURRENT_TIMESTAMP,
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = $7
                RETURNING *
                """,
                google_id,
                email,
                name,
                photo_url,
                role.value,
                login_method,
                user["user_id"],
            )
            return updated or user

        return await self._create_user(google_id, email, name, photo_url, role, login_method)

    async def _create_user(
        self,
        google_id: str,
        email: str,
        name: Optional[str],
        photo_url: Optional[str],
        role: UserRole,
        login_method: str,
    ) -> dict:
        user_id = generate_user_id()
        while await self.db.read_one("SELECT 1 FROM users WHERE user_id = $1", user_id):
            user_id = generate_user_id()

        now = dt.now(tz.utc)
        user_data = UserCreate(
            user_id=user_id,
            google_id=google_id,
            email=email,
            name=name,
            photo_url=photo_url,
            role=role,
            login_method=login_method,
            created_at=now,
            updated_at=now,
            last_signed_in=now,
        )

        record = user_data.model_dump()
        record["role"] = role.value
        user = await self.db.insert_one("users", record)
        logger.info("Created user %s (%s) with role %s", user_id, email, role.value)
        return user


# Global user service instance
user_service = UserService()
