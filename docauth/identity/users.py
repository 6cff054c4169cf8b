"""
===============================================================================
CRC CARD: identity/users.py
===============================================================================

Module:
    User models

Responsibilities:
    - Define the user role enum.
    - Define UserRecord, the mutable row owned by the auth store.
    - Define PublicUser, the sanitized copy handed to every caller.
    - Define UserStats aggregate counts.

Collaborators:
    - identity/auth_store.py: owns UserRecord instances, returns PublicUser.
    - identity/tokens.py: reads PublicUser to build JWT claims.
    - api/auth_routes.py: serializes PublicUser / UserStats.

Notes:
    - No business logic here, only data shapes.
    - PublicUser has no password field at all; sanitizing is a type change,
      not a dict pop.
===============================================================================
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class UserRole(str, Enum):
    """Roles supported by the fallback store."""

    USER = "user"
    ADMIN = "admin"
    ENTERPRISE = "enterprise"


@dataclass(slots=True)
class UserRecord:
    """Internal user row. Never leaves the auth store."""

    id: int
    email: str
    username: str
    password_hash: str = field(repr=False)
    created_at: datetime
    updated_at: datetime
    first_name: str | None = None
    last_name: str | None = None
    role: UserRole = UserRole.USER
    is_active: bool = True
    email_verified: bool = False
    last_login: datetime | None = None

    def to_public(self) -> PublicUser:
        return PublicUser(
            id=self.id,
            email=self.email,
            username=self.username,
            first_name=self.first_name,
            last_name=self.last_name,
            role=self.role,
            is_active=self.is_active,
            email_verified=self.email_verified,
            created_at=self.created_at,
            updated_at=self.updated_at,
            last_login=self.last_login,
        )


@dataclass(frozen=True, slots=True)
class PublicUser:
    """Sanitized user record (no password hash)."""

    id: int
    email: str
    username: str
    first_name: str | None
    last_name: str | None
    role: UserRole
    is_active: bool
    email_verified: bool
    created_at: datetime
    updated_at: datetime
    last_login: datetime | None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["role"] = self.role.value
        for key in ("created_at", "updated_at", "last_login"):
            value = data[key]
            data[key] = value.isoformat() if value is not None else None
        return data


@dataclass(frozen=True, slots=True)
class UserStats:
    """Aggregate counts over the current record set."""

    total_users: int
    active_users: int
    verified_users: int
