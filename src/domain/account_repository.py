"""
Account repository interface (Port).

The domain defines the contract, the infrastructure layer provides the adapter.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from src.domain.account import Account


class AccountRepository(ABC):
    """Abstract repository interface for Account persistence."""

    @abstractmethod
    async def save(self, account: Account) -> None:
        """
        Persist an account entity (create or update).

        Args:
            account: The account entity to persist
        """
        pass

    @abstractmethod
    async def delete(self, account_id: UUID) -> None:
        """
        Remove an account.

        Only used to roll back a registration whose event could not be published.
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Account | None:
        """
        Find an account by its email address.

        Returns:
            The Account entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool:
        """Check if an account with the given email exists."""
        pass
