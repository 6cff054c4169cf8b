"""
===============================================================================
TASK: Dev Seed Admin (local only)
===============================================================================

What it is:
    Ensures an admin record exists in the fallback store when configured, so a
    freshly started process can be logged into.

Safety:
    - Strict guard: only runs when app_env == "local".

CRC:
    Component: ensure_dev_admin
    Responsibilities:
      - Validate the environment guard
      - Resolve role from settings
      - Create the user if missing, otherwise skip (idempotent)
    Collaborators:
      - AdminSeedPort (InMemoryAuthStore satisfies it)
      - Settings
===============================================================================
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..identity.users import PublicUser, UserRole


class AdminSeedPort(Protocol):
    """Store operations needed by the seed task."""

    def get_by_email(self, email: str) -> PublicUser | None: ...

    def create_user(
        self,
        *,
        email: str,
        username: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> PublicUser: ...

    def update_user(self, user_id: Any, patch: Mapping[str, Any]) -> PublicUser: ...


def _resolve_role(role_str: str) -> UserRole:
    """Resolve UserRole with a safe fallback."""
    try:
        return UserRole((role_str or "").strip().lower())
    except ValueError:
        logger.warning(
            "Dev seed admin: invalid role; falling back to ADMIN",
            extra={"role": role_str},
        )
        return UserRole.ADMIN


def _assert_allowed_environment(settings: Settings) -> None:
    env = (settings.app_env or "").strip().lower()
    if env != "local":
        raise RuntimeError(
            f"FATAL: DEV_SEED_ADMIN is enabled but ENV is '{env}' (must be 'local'). "
            "Safety guard prevents accidental overrides."
        )


def ensure_dev_admin(settings: Settings, store: AdminSeedPort) -> PublicUser | None:
    """
    Ensure a development admin user exists if configured.

    Returns the created user, or None when disabled or already present.
    """
    if not settings.dev_seed_admin:
        return None

    _assert_allowed_environment(settings)

    email = (settings.dev_seed_admin_email or "").strip()
    username = (settings.dev_seed_admin_username or "").strip()
    password = settings.dev_seed_admin_password or ""
    if not email or not username or not password:
        raise ValueError("Dev seed admin is enabled but email/username/password are empty")

    role = _resolve_role(settings.dev_seed_admin_role)

    if store.get_by_email(email) is not None:
        logger.info("Dev seed admin: user exists; skipping", extra={"email": email})
        return None

    created = store.create_user(email=email, username=username, password=password)
    user = store.update_user(created.id, {"role": role, "email_verified": True})

    logger.info(
        "Dev seed admin: user created",
        extra={"email": user.email, "role": user.role.value},
    )
    return user
