"""
PostgreSQL implementation of AccountRepository.

The concrete adapter for account persistence, using raw SQL with asyncpg.
"""

import logging
from uuid import UUID

from src.domain.account import Account
from src.domain.account_repository import AccountRepository
from src.domain.verification_code import VerificationCode
from src.infrastructure.database.connection import DatabaseConnection

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, email, password_hash, is_verified, created_at, verified_at,
    verification_code, verification_code_issued_at, verification_code_expires_at
"""


class PostgresAccountRepository(AccountRepository):
    """
    PostgreSQL implementation of the AccountRepository interface.

    Decision: The verification code is stored inline on the account row. There
    is at most one live code per account, and a resend simply overwrites it.
    """

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection

    async def save(self, account: Account) -> None:
        """Insert or update an account (UPSERT on id)."""
        query = f"""
        INSERT INTO accounts ({_COLUMNS})
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
        ON CONFLICT (id) DO UPDATE SET
            email = EXCLUDED.email,
            password_hash = EXCLUDED.password_hash,
            is_verified = EXCLUDED.is_verified,
            verified_at = EXCLUDED.verified_at,
            verification_code = EXCLUDED.verification_code,
            verification_code_issued_at = EXCLUDED.verification_code_issued_at,
            verification_code_expires_at = EXCLUDED.verification_code_expires_at
        """

        code = account.verification_code
        try:
            await self.db.execute(
                query,
                account.id,
                account.email,
                account.password_hash,
                account.is_verified,
                account.created_at,
                account.verified_at,
                code.value if code else None,
                code.issued_at if code else None,
                code.expires_at if code else None,
            )
            logger.debug(f"Saved account: {account.email}")
        except Exception as e:
            logger.error(f"Failed to save account {account.email}: {e}")
            raise

    async def delete(self, account_id: UUID) -> None:
        try:
            await self.db.execute("DELETE FROM accounts WHERE id = $1", account_id)
            logger.info(f"Deleted account {account_id}")
        except Exception as e:
            logger.error(f"Failed to delete account {account_id}: {e}")
            raise

    async def find_by_email(self, email: str) -> Account | None:
        query = f"SELECT {_COLUMNS} FROM accounts WHERE email = $1"

        try:
            result = await self.db.execute(query, email, fetchone=True)
        except Exception as e:
            logger.error(f"Failed to find account by email {email}: {e}")
            raise

        if not result:
            return None
        assert isinstance(result, dict)
        return self._map_to_entity(result)

    async def exists_by_email(self, email: str) -> bool:
        query = "SELECT EXISTS(SELECT 1 FROM accounts WHERE email = $1) AS found"

        try:
            result = await self.db.execute(query, email, fetchone=True)
        except Exception as e:
            logger.error(f"Failed to check if account exists {email}: {e}")
            raise

        return bool(result and isinstance(result, dict) and result["found"])

    def _map_to_entity(self, row: dict) -> Account:
        """Rebuild the Account aggregate, including its VerificationCode, from a row."""
        verification_code = None
        if row["verification_code"] and row["verification_code_issued_at"]:
            verification_code = VerificationCode(
                value=row["verification_code"],
                issued_at=row["verification_code_issued_at"],
                expires_at=row["verification_code_expires_at"],
            )

        return Account(
            id=UUID(row["id"]) if isinstance(row["id"], str) else row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            is_verified=row["is_verified"],
            created_at=row["created_at"],
            verified_at=row["verified_at"],
            verification_code=verification_code,
        )
