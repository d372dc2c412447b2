"""
Notification record store interface (Port).

Append-only: there is no update or delete in this contract.
"""

from abc import ABC, abstractmethod

from src.domain.notification import NotificationRecord


class NotificationRecordStore(ABC):
    """
    Durable log of notification delivery attempts.

    Implementations must be safe for concurrent use by several consumer workers.
    """

    @abstractmethod
    async def save(self, record: NotificationRecord) -> None:
        """
        Append a record.

        Args:
            record: The attempt to record

        Raises:
            StoreError: UNAVAILABLE when the store cannot be reached,
                CONSTRAINT_VIOLATION when the write is rejected
        """
        pass
