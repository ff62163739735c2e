"""
PostgreSQL Async Database Client

Async PostgreSQL client with a lazily created connection pool, the small
set of query helpers the services use, and a transaction context for
multi-statement writes that must land together.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg
from asyncpg import Connection, Pool

from network_intel.core.environment import get_database_connection_string
from network_intel.core.logger import get_logger

logger = get_logger(__name__)


class PostgresAsyncClient:
    """Async PostgreSQL client with connection pooling."""

    def __init__(self, environment: Optional[str] = None, connection_string: Optional[str] = None):
        """
        Initialize PostgreSQL async client with environment support.

        Args:
            environment (str, optional): Environment name (test, staging, prod).
                                        If None, auto-detect from environment variables.
            connection_string (str, optional): Explicit DSN, skips environment lookup.
        """
        self.environment = environment
        self.connection_string = connection_string or get_database_connection_string(environment)

        self._pool: Optional[Pool] = None
        self._init_lock: Optional[asyncio.Lock] = None
        self._pool_loop_id: Optional[int] = None  # Event loop the pool is bound to

    def _get_init_lock(self) -> asyncio.Lock:
        if self._init_lock is None:
            self._init_lock = asyncio.Lock()
        return self._init_lock

    def _is_pool_valid(self) -> bool:
        """Check if the pool exists and is bound to the current event loop"""
        if self._pool is None:
            return False
        try:
            current_loop_id = id(asyncio.get_running_loop())
        except RuntimeError:
            return False
        if self._pool_loop_id is not None and self._pool_loop_id != current_loop_id:
            return False
        return not self._pool.is_closing()

    async def init_pool(self) -> None:
        """Initialize connection pool (async-safe, event-loop aware)"""
        if self._is_pool_valid():
            return

        async with self._get_init_lock():
            if self._is_pool_valid():
                return

            if self._pool is not None:
                # Pool from another loop cannot be closed cleanly here
                self._pool.terminate()
                self._pool = None

            self._pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=1,
                max_size=20,
                command_timeout=60,
                statement_cache_size=0,
            )
            self._pool_loop_id = id(asyncio.get_running_loop())
            logger.debug("Postgres pool created (environment=%s)", self.environment)

    async def close(self) -> None:
        """Close the database connection pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            self._pool_loop_id = None

    @asynccontextmanager
    async def get_connection(self) -> AsyncIterator[Connection]:
        """Get a database connection from the pool (auto-initializes if needed)"""
        await self.init_pool()
        if not self._pool:
            raise RuntimeError("Failed to initialize database connection pool")

        async with self._pool.acquire() as connection:
            yield connection

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Connection]:
        """
        Run several statements on one connection inside a transaction.

        Commits when the block exits normally, rolls back on exception.
        """
        async with self.get_connection() as conn:
            async with conn.transaction():
                yield conn

    # ================== Simple Query Methods ==================

    async def read(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        """
        Execute a SELECT query and return results as list of dictionaries

        Args:
            query (str): SQL SELECT query with $1, $2, etc. placeholders
            *args: Parameters for the query placeholders
        """
        async with self.get_connection() as conn:
            rows = await conn.fetch(query, *args)
            return [dict(row) for row in rows]

    async def read_one(self, query: str, *args: Any) -> Optional[Dict[str, Any]]:
        """
        Execute a SELECT query and return first result as dictionary, or None
        """
        async with self.get_connection() as conn:
            row = await conn.fetchrow(query, *args)
            return dict(row) if row else None

    async def read_value(self, query: str, *args: Any) -> Any:
        """Execute a query and return the first column of the first row."""
        async with self.get_connection() as conn:
            return await conn.fetchval(query, *args)

    async def insert_one(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a single record into a table

        Args:
            table (str): Table name
            data (Dict[str, Any]): Column names mapped to values

        Returns:
            Dict[str, Any]: The inserted row
        """
        columns = list(data.keys())
        placeholders = [f"${i}" for i in range(1, len(columns) + 1)]

        query = f"""
            INSERT INTO {table} ({', '.join(columns)})
            VALUES ({', '.join(placeholders)})
            RETURNING *
        """

        async with self.get_connection() as conn:
            row = await conn.fetchrow(query, *data.values())
            return dict(row)

    async def execute(self, query: str, *args: Any) -> str:
        """
        Execute an INSERT, UPDATE, or DELETE query

        Returns:
            str: Result status from the database (e.g., "UPDATE 1", "DELETE 1")
        """
        async with self.get_connection() as conn:
            return await conn.execute(query, *args)

    async def execute_returning(self, query: str, *args: Any) -> Optional[Dict[str, Any]]:
        """
        Execute an INSERT, UPDATE, or DELETE query with RETURNING clause
        """
        async with self.get_connection() as conn:
            row = await conn.fetchrow(query, *args)
            return dict(row) if row else None

    async def execute_script(self, script: str) -> None:
        """Run a multi-statement SQL script (no parameters)."""
        async with self.get_connection() as conn:
            await conn.execute(script)
