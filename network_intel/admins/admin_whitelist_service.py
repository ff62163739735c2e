"""
Admin Whitelist Service - who may use the application

The whitelist is the only gate to app access. Lookups fail closed: if the
store cannot be read, the email is treated as not whitelisted.

The primary admin email is configuration, not data. It backs two separate
checks: is_admin() (who may call admin endpoints) and is_protected() (which
entry can never be removed).
"""

from typing import List, Optional

from asyncpg import Connection

from network_intel.core.db_manager import get_db
from network_intel.core.environment import env_config, normalize_email
from network_intel.core.errors import InvariantViolationError
from network_intel.core.logger import get_logger

logger = get_logger(__name__)

PRIMARY_ADMIN_REMOVAL_MESSAGE = "Cannot remove the primary admin from the whitelist"

UPSERT_ENTRY_SQL = """
    INSERT INTO whitelist (email, name, approved_by)
    VALUES ($1, $2, $3)
    ON CONFLICT (email) DO UPDATE
    SET approved_by = EXCLUDED.approved_by,
        name = COALESCE(EXCLUDED.name, whitelist.name)
    RETURNING *
"""


class AdminWhitelistService:
    """Service for whitelist checks and whitelist storage."""

    @property
    def db(self):
        """Get database client from global manager."""
        return get_db()

    # ================== Primary admin checks ==================

    def is_admin(self, email: Optional[str]) -> bool:
        """True iff the email is the configured primary admin."""
        admin_email = env_config.primary_admin_email
        return bool(admin_email) and normalize_email(email) == admin_email

    def is_protected(self, email: Optional[str]) -> bool:
        """True iff the email may never be removed from the whitelist."""
        admin_email = env_config.primary_admin_email
        return bool(admin_email) and normalize_email(email) == admin_email

    # ================== Storage ==================

    async def find_entry(self, email: str) -> Optional[dict]:
        query = "SELECT * FROM whitelist WHERE email = $1"
        return await self.db.read_one(query, normalize_email(email))

    async def upsert_entry(
        self,
        email: str,
        name: Optional[str],
        approved_by: Optional[str],
        conn: Optional[Connection] = None,
    ) -> dict:
        """
        Insert or refresh a whitelist entry.

        Pass conn to run inside a caller's transaction.
        """
        args = (normalize_email(email), name, approved_by)
        if conn is not None:
            return dict(await conn.fetchrow(UPSERT_ENTRY_SQL, *args))
        return await self.db.execute_returning(UPSERT_ENTRY_SQL, *args)

    async def delete_entry(self, email: str) -> bool:
        result = await self.db.execute("DELETE FROM whitelist WHERE email = $1", normalize_email(email))
        return result != "DELETE 0"

    async def list_entries(self) -> List[dict]:
        return await self.db.read("SELECT * FROM whitelist ORDER BY created_at DESC, id DESC")

    async def count_entries(self) -> int:
        return await self.db.read_value("SELECT COUNT(*) FROM whitelist")

    # ================== Checks ==================

    async def is_whitelisted(self, email: Optional[str]) -> bool:
        """
        Check if email is in the whitelist.

        Args:
            email: Email address to check (trimmed and lower-cased)

        Returns:
            True if whitelisted. False if absent, empty, or the lookup failed.
        """
        normalized = normalize_email(email)
        if not normalized:
            return False
        try:
            return await self.find_entry(normalized) is not None
        except Exception as e:
            logger.warning("Whitelist lookup failed for %s, denying access: %s", normalized, e)
            return False

    # ================== Administration ==================

    async def add(self, email: str, name: Optional[str] = None, approved_by: Optional[str] = None) -> dict:
        """Add or refresh an entry. Adding an existing email is not an error."""
        entry = await self.upsert_entry(email, name, approved_by)
        logger.info("Whitelisted %s (approved by %s)", entry["email"], approved_by)
        return entry

    async def remove(self, email: str) -> bool:
        """
        Remove an entry.

        Raises:
            InvariantViolationError: If email is the primary admin, whether
                or not it is currently present
        """
        if self.is_protected(email):
            raise InvariantViolationError(PRIMARY_ADMIN_REMOVAL_MESSAGE)

        removed = await self.delete_entry(email)
        logger.info("Removed %s from whitelist (present=%s)", normalize_email(email), removed)
        return removed

    async def seed_primary_admin(self) -> None:
        """Make sure the primary admin is whitelisted at startup."""
        admin_email = env_config.primary_admin_email
        if not admin_email:
            logger.warning("PRIMARY_ADMIN_EMAIL is not set; no admin can sign in")
            return

        if await self.find_entry(admin_email) is None:
            await self.upsert_entry(admin_email, "Admin", "system")
            logger.info("Primary admin seeded into whitelist: %s", admin_email)


# Global whitelist service instance
admin_whitelist_service = AdminWhitelistService()
