"""
Database Manager - process-wide PostgresAsyncClient

Services reach the database through get_db(); the app lifespan and the
test fixtures own init_database() / close_database().
"""

from pathlib import Path
from typing import Optional

from network_intel.core.logger import get_logger
from network_intel.core.postgres_database import PostgresAsyncClient

logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

_db: Optional[PostgresAsyncClient] = None


async def init_database(environment: Optional[str] = None, apply_schema: bool = True) -> PostgresAsyncClient:
    """
    Create the global client, open its pool and apply the schema.

    Args:
        environment: Force a specific environment (test, staging, prod)
        apply_schema: Run schema.sql (idempotent) after connecting
    """
    global _db
    if _db is None:
        _db = PostgresAsyncClient(environment)

    await _db.init_pool()
    if apply_schema:
        await _db.execute_script(SCHEMA_PATH.read_text(encoding="utf-8"))
        logger.info("Database schema applied")
    return _db


def get_db() -> PostgresAsyncClient:
    """Get the global database client."""
    if _db is None:
        raise RuntimeError("Database not initialized; call init_database() first")
    return _db


async def close_database() -> None:
    """Close the global client's pool and forget it."""
    global _db
    if _db is not None:
        await _db.close()
        _db = None
