"""
Identity layer: user models, password hashing, the in-memory auth store and
session tokens.
"""

from .auth_store import InMemoryAuthStore
from .passwords import Argon2PasswordHasher, PasswordHasherPort, build_password_hasher
from .users import PublicUser, UserRole, UserStats

__all__ = [
    "InMemoryAuthStore",
    "Argon2PasswordHasher",
    "PasswordHasherPort",
    "build_password_hasher",
    "PublicUser",
    "UserRole",
    "UserStats",
]
