"""
PostgreSQL implementation of NotificationRecordStore.

Insert-only. Database failures are translated into StoreError so the
dispatcher can treat them as transient without knowing about asyncpg.
"""

import logging

import asyncpg

from src.application.exceptions import StoreError, StoreErrorKind
from src.domain.notification import NotificationRecord
from src.domain.notification_repository import NotificationRecordStore
from src.infrastructure.database.connection import DatabaseConnection

logger = logging.getLogger(__name__)


class PostgresNotificationStore(NotificationRecordStore):
    """Appends notification records to the `notification` table."""

    INSERT_QUERY = """
    INSERT INTO notification (notification_id, notification_type, send_at)
    VALUES ($1, $2, $3)
    """

    def __init__(self, db_connection: DatabaseConnection, timeout: float | None = None):
        self.db = db_connection
        self.timeout = timeout

    async def save(self, record: NotificationRecord) -> None:
        """
        Insert a record.

        Raises:
            StoreError: CONSTRAINT_VIOLATION when Postgres rejects the row,
                UNAVAILABLE for connection problems, timeouts and other errors
        """
        try:
            await self.db.execute(
                self.INSERT_QUERY,
                record.id,
                record.type.value,
                record.sent_at,
                timeout=self.timeout,
            )
        except asyncpg.exceptions.IntegrityConstraintViolationError as e:
            logger.error(f"Notification record {record.id} rejected: {e}")
            raise StoreError(StoreErrorKind.CONSTRAINT_VIOLATION, str(e)) from e
        except (
            asyncpg.PostgresError,
            asyncpg.InterfaceError,
            OSError,
            TimeoutError,
            RuntimeError,
        ) as e:
            logger.error(f"Failed to save notification record {record.id}: {e}")
            raise StoreError(StoreErrorKind.UNAVAILABLE, str(e)) from e

        logger.debug(f"Saved notification record {record.id} ({record.type.value})")
