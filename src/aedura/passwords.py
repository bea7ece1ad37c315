"""Salted one-way hashing of account passwords (argon2id)."""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError


class CredentialHasher:
    """Hash and verify passwords with tunable argon2 cost factors."""

    def __init__(self, time_cost: int = 3, memory_cost: int = 64 * 1024, parallelism: int = 1) -> None:
        self._ph = PasswordHasher(
            time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism
        )
        self._decoy: str | None = None

    def hash(self, plaintext: str) -> str:
        if not plaintext:
            raise ValueError("Cannot hash an empty password")
        # HashingError propagates: an account must never be stored unprotected
        return self._ph.hash(plaintext)

    def verify(self, plaintext: str, hash_digest: str) -> bool:
        if not plaintext or not hash_digest:
            return False
        try:
            return self._ph.verify(hash_digest, plaintext)
        except (VerificationError, InvalidHashError):
            return False

    def verify_decoy(self, plaintext: str) -> bool:
        """Spend the cost of a real verification when no account exists.

        Keeps the response time of an unknown email close to that of a wrong
        password. Always returns ``False``.
        """
        if self._decoy is None:
            self._decoy = self._ph.hash("decoy-password-for-timing")
        self.verify(plaintext, self._decoy)
        return False
