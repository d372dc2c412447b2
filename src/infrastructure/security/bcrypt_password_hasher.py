"""
bcrypt password hasher.

Implements the PasswordHasher protocol used by the register and login use cases.
"""

import bcrypt

# Cost factor 12 balances security and performance (2^12 = 4096 iterations)
DEFAULT_ROUNDS = 12


class BcryptPasswordHasher:
    """Hashes and checks passwords with bcrypt; bcrypt handles salting itself."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            is_match: bool = bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Not a bcrypt hash at all
            return False
        return is_match
