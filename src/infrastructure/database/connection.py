"""
Database connection management.

Handles PostgreSQL connection pooling and lifecycle using asyncpg.
Raw SQL only, no ORM.

Decision: Both services share this class. The account API keeps one pool for
its lifetime; the notification consumer opens a one-connection pool per message.
"""

import logging
from typing import TYPE_CHECKING, Any

import asyncpg

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Manages PostgreSQL connections through an asyncpg connection pool."""

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        min_connections: int = 1,
        max_connections: int = 10,
        command_timeout: float = 60.0,
    ):
        """
        Initialize database connection parameters.

        Args:
            host: Database host
            port: Database port
            database: Database name
            user: Database user
            password: Database password
            min_connections: Minimum connections in pool
            max_connections: Maximum connections in pool
            command_timeout: Default per-query timeout in seconds
        """
        self.connection_params = {
            "host": host,
            "port": port,
            "database": database,
            "user": user,
            "password": password,
        }
        self.min_connections = min_connections
        self.max_connections = max_connections
        self.command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        max_connections: int = 10,
        command_timeout: float = 60.0,
    ) -> "DatabaseConnection":
        return cls(
            host=settings.database_host,
            port=settings.database_port,
            database=settings.database_name,
            user=settings.database_user,
            password=settings.database_password,
            min_connections=1,
            max_connections=max_connections,
            command_timeout=command_timeout,
        )

    async def connect(self) -> None:
        """Initialize the connection pool."""
        try:
            self._pool = await asyncpg.create_pool(
                **self.connection_params,
                min_size=self.min_connections,
                max_size=self.max_connections,
                command_timeout=self.command_timeout,
            )
            logger.info(
                f"asyncpg connection pool initialized "
                f"(min={self.min_connections}, max={self.max_connections})"
            )
        except Exception as e:
            logger.error(f"Failed to initialize database connection pool: {e}")
            raise

    async def disconnect(self) -> None:
        """Close all connections in the pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")

    async def execute(
        self,
        query: str,
        *args: Any,
        fetch: bool = False,
        fetchone: bool = False,
        timeout: float | None = None,
    ) -> list | dict | None:
        """
        Execute a SQL query.

        Args:
            query: SQL query to execute (use $1, $2, $3 for parameters)
            *args: Query parameters (passed positionally)
            fetch: Whether to fetch all results
            fetchone: Whether to fetch single result
            timeout: Per-call timeout overriding the pool's command_timeout

        Returns:
            Query results if fetch=True/fetchone=True, None otherwise
        """
        if not self._pool:
            raise RuntimeError("Connection pool not initialized. Call connect() first.")

        async with self._pool.acquire(timeout=timeout) as conn:
            try:
                if fetchone:
                    row = await conn.fetchrow(query, *args, timeout=timeout)
                    return dict(row) if row else None
                elif fetch:
                    rows = await conn.fetch(query, *args, timeout=timeout)
                    return [dict(row) for row in rows]
                else:
                    await conn.execute(query, *args, timeout=timeout)
                    return None
            except Exception as e:
                logger.error(f"Database query failed: {e}\nQuery: {query}")
                raise

    async def init_schema(self) -> None:
        """
        Initialize database schema.

        Ideally should be done via migrations; kept here so both services can
        start against an empty database.

        Decision: The notification table has no foreign key to accounts. It
        is an append-only audit log owned by the notification service and
        may live in a different database.
        """
        schema = """
        CREATE TABLE IF NOT EXISTS accounts (
            id UUID PRIMARY KEY,
            email VARCHAR(255) UNIQUE NOT NULL,
            password_hash VARCHAR(255) NOT NULL,
            is_verified BOOLEAN DEFAULT FALSE,
            created_at TIMESTAMPTZ NOT NULL,
            verified_at TIMESTAMPTZ,
            verification_code VARCHAR(64),
            verification_code_issued_at TIMESTAMPTZ,
            verification_code_expires_at TIMESTAMPTZ
        );

        CREATE TABLE IF NOT EXISTS notification (
            notification_id UUID PRIMARY KEY,
            notification_type VARCHAR(32) NOT NULL,
            send_at TIMESTAMPTZ NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_accounts_email ON accounts(email);
        CREATE INDEX IF NOT EXISTS idx_notification_type ON notification(notification_type);
        """

        try:
            await self.execute(schema)
            logger.info("Database schema initialized")
        except asyncpg.exceptions.UniqueViolationError as e:
            # Another worker created the tables at the same time
            logger.warning(f"Schema already exists (concurrent worker): {e}")
        except Exception as e:
            logger.error(f"Failed to initialize database schema: {e}")
            raise
