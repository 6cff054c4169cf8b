"""
Name: Password Hashing (Argon2)

Responsibilities:
  - Hash passwords with a salted one-way function (Argon2id)
  - Verify a password against a stored hash without raising on mismatch
  - Expose cost parameters so hosts can tune them

Collaborators:
  - argon2-cffi: PasswordHasher
  - crosscutting.config.Settings: cost parameters
  - identity/auth_store.py: consumes PasswordHasherPort
"""

from __future__ import annotations

from typing import Protocol

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ..crosscutting.config import Settings


class PasswordHasherPort(Protocol):
    """Black-box hashing primitive used by the auth store."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, password_hash: str) -> bool: ...


class Argon2PasswordHasher:
    """R: PasswordHasherPort backed by argon2-cffi."""

    def __init__(
        self,
        *,
        time_cost: int = 3,
        memory_cost: int = 64 * 1024,
        parallelism: int = 4,
    ) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return self._hasher.verify(password_hash, password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False


def build_password_hasher(settings: Settings) -> Argon2PasswordHasher:
    """R: Build the hasher from configured cost parameters."""
    return Argon2PasswordHasher(
        time_cost=settings.password_hash_time_cost,
        memory_cost=settings.password_hash_memory_cost_kib,
        parallelism=settings.password_hash_parallelism,
    )
