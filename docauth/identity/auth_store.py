"""
============================================================
CRC CARD: identity/auth_store.py
============================================================
Class: InMemoryAuthStore

Responsibilities:
  - Own every UserRecord while the external users table is unavailable.
  - Enforce uniqueness (case-insensitive email, exact username).
  - Hash passwords on creation and check them on authentication.
  - Expose lookup / update / listing / stats accessors.
  - Hand out sanitized PublicUser copies only.

Collaborators:
  - identity.passwords.PasswordHasherPort (hash / verify)
  - identity.users (UserRecord, PublicUser, UserStats, UserRole)
  - crosscutting.exceptions (ValidationError, ConflictError, AuthError, NotFoundError)

Constraints / Notes:
  - Process memory only: records are lost on restart.
  - Thread-safe: both indexes and the id counter live under one Lock.
  - Hashing/verification runs outside the lock; it is the only slow step.
  - Ids are never reused: the counter only moves forward.
============================================================
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..crosscutting.exceptions import (
    AuthError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..crosscutting.logger import logger
from .passwords import Argon2PasswordHasher, PasswordHasherPort
from .users import PublicUser, UserRecord, UserRole, UserStats

DEFAULT_MIN_PASSWORD_LENGTH = 6

# Fields a caller may change through update_user(); anything else is ignored.
UPDATABLE_FIELDS = ("first_name", "last_name", "username", "role", "email_verified")

INVALID_CREDENTIALS = "Invalid credentials."
INACTIVE_USER = "User is inactive."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    """R: Single normalization rule for the email index."""
    return email.strip().lower()


class InMemoryAuthStore:
    """
    In-memory credential store and authenticator.

    Mental model:
    - _by_id is the "table" (id -> UserRecord), in insertion order.
    - _by_email indexes the same objects by normalized email.
    - Both are written together under _lock so they never disagree.
    """

    def __init__(
        self,
        *,
        password_hasher: PasswordHasherPort | None = None,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._hasher = password_hasher or Argon2PasswordHasher()
        self._min_password_length = min_password_length
        self._now = clock or _utcnow

        self._lock = Lock()
        self._by_id: Dict[int, UserRecord] = {}
        self._by_email: Dict[str, UserRecord] = {}
        self._next_id = 1
        self._dummy_hash: str | None = None

        logger.info("In-memory auth store initialized")

    # =========================================================
    # Internal helpers
    # =========================================================
    @staticmethod
    def _require_text(value: Any, field_name: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{field_name} is required.")
        return value

    @staticmethod
    def _coerce_id(user_id: Any) -> Optional[int]:
        """R: Accept ints and numeric strings; anything else matches nothing."""
        if isinstance(user_id, bool):
            return None
        if isinstance(user_id, int):
            return user_id
        if isinstance(user_id, str):
            text = user_id.strip()
            if text.isascii() and text.isdigit():
                return int(text)
        return None

    @staticmethod
    def _coerce_role(value: Any) -> UserRole:
        try:
            return UserRole(value)
        except ValueError as exc:
            allowed = ", ".join(r.value for r in UserRole)
            raise ValidationError(
                f"role must be one of: {allowed}.", original_error=exc
            ) from exc

    def _username_taken(self, username: str, *, exclude_id: int | None = None) -> bool:
        return any(
            record.username == username and record.id != exclude_id
            for record in self._by_id.values()
        )

    def _check_unique(self, email_key: str, username: str) -> None:
        if email_key in self._by_email:
            raise ConflictError("Email is already registered.")
        if self._username_taken(username):
            raise ConflictError("Username is already taken.")

    def _get_dummy_hash(self) -> str:
        """R: Hash compared against when the email is unknown."""
        if self._dummy_hash is None:
            self._dummy_hash = self._hasher.hash(secrets.token_urlsafe(16))
        return self._dummy_hash

    # =========================================================
    # Writes
    # =========================================================
    def create_user(
        self,
        *,
        email: str,
        username: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> PublicUser:
        """
        Register a new user.

        Raises:
            ValidationError: missing field or password too short.
            ConflictError: email (case-insensitive) or username already present.
        """
        self._require_text(email, "email")
        self._require_text(username, "username")
        if not isinstance(password, str) or not password:
            raise ValidationError("password is required.")
        if len(password) < self._min_password_length:
            raise ValidationError(
                f"password must be at least {self._min_password_length} characters."
            )

        email_key = normalize_email(email)

        # Fail fast before paying for the hash; re-checked below under the lock.
        with self._lock:
            self._check_unique(email_key, username)

        password_hash = self._hasher.hash(password)

        with self._lock:
            self._check_unique(email_key, username)

            now = self._now()
            record = UserRecord(
                id=self._next_id,
                email=email_key,
                username=username,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                created_at=now,
                updated_at=now,
            )
            self._next_id += 1
            self._by_id[record.id] = record
            self._by_email[record.email] = record
            public = record.to_public()

        logger.info(
            "User created in memory",
            extra={"user_id": public.id, "email": public.email},
        )
        return public

    def update_user(self, user_id: Any, patch: Mapping[str, Any]) -> PublicUser:
        """
        Apply the allowed fields present in `patch`.

        Unknown keys are ignored. first_name and last_name may be cleared with
        None; the other fields must carry a value. A username change is
        re-checked for uniqueness.

        Raises:
            NotFoundError: no record with that id.
            ValidationError: bad role, empty username or missing email_verified.
            ConflictError: username taken by another record.
        """
        changes = {name: patch[name] for name in UPDATABLE_FIELDS if name in patch}

        key = self._coerce_id(user_id)
        with self._lock:
            record = self._by_id.get(key) if key is not None else None
            if record is None:
                raise NotFoundError(f"User '{user_id}' not found.")

            if "role" in changes:
                changes["role"] = self._coerce_role(changes["role"])
            if "username" in changes:
                changes["username"] = self._require_text(
                    changes["username"], "username"
                )
            if "email_verified" in changes:
                if changes["email_verified"] is None:
                    raise ValidationError("email_verified must be true or false.")
                changes["email_verified"] = bool(changes["email_verified"])

            if "username" in changes and self._username_taken(
                changes["username"], exclude_id=record.id
            ):
                raise ConflictError("Username is already taken.")

            for name, value in changes.items():
                setattr(record, name, value)
            record.updated_at = self._now()
            public = record.to_public()

        logger.info(
            "User updated in memory",
            extra={"user_id": public.id, "fields": sorted(changes)},
        )
        return public

    def set_active(self, user_id: Any, is_active: bool) -> PublicUser:
        """
        Activate or deactivate a record.

        Raises:
            NotFoundError: no record with that id.
        """
        key = self._coerce_id(user_id)
        with self._lock:
            record = self._by_id.get(key) if key is not None else None
            if record is None:
                raise NotFoundError(f"User '{user_id}' not found.")
            record.is_active = bool(is_active)
            record.updated_at = self._now()
            public = record.to_public()

        logger.info(
            "User activation changed",
            extra={"user_id": public.id, "is_active": public.is_active},
        )
        return public

    # =========================================================
    # Authentication
    # =========================================================
    def authenticate(self, email: str, password: str) -> PublicUser:
        """
        Check credentials and stamp last_login.

        Unknown email and wrong password fail with the same message. An
        unknown email still pays for one hash verification.

        Raises:
            AuthError: invalid credentials or inactive user.
        """
        email_key = normalize_email(email) if isinstance(email, str) else ""
        password = password if isinstance(password, str) else ""

        with self._lock:
            record = self._by_email.get(email_key)
            stored_hash = record.password_hash if record is not None else None
            is_active = record.is_active if record is not None else False

        if record is None:
            self._hasher.verify(password, self._get_dummy_hash())
            logger.warning("Auth failed: unknown email", extra={"email": email_key})
            raise AuthError(INVALID_CREDENTIALS, reason="invalid_credentials")

        if not is_active:
            logger.warning("Auth failed: inactive user", extra={"email": email_key})
            raise AuthError(INACTIVE_USER, reason="inactive")

        if not self._hasher.verify(password, stored_hash):
            logger.warning("Auth failed: wrong password", extra={"email": email_key})
            raise AuthError(INVALID_CREDENTIALS, reason="invalid_credentials")

        with self._lock:
            # Deactivation may have landed while the hash was being checked.
            if not record.is_active:
                logger.warning(
                    "Auth failed: inactive user", extra={"email": email_key}
                )
                raise AuthError(INACTIVE_USER, reason="inactive")
            record.last_login = self._now()
            public = record.to_public()

        logger.info(
            "User authenticated", extra={"user_id": public.id, "email": public.email}
        )
        return public

    # =========================================================
    # Reads
    # =========================================================
    def get_by_id(self, user_id: Any) -> Optional[PublicUser]:
        """Active user by id, None if absent or inactive."""
        key = self._coerce_id(user_id)
        if key is None:
            return None
        with self._lock:
            record = self._by_id.get(key)
            if record is None or not record.is_active:
                return None
            return record.to_public()

    def get_by_email(self, email: str) -> Optional[PublicUser]:
        """
        User by email (case-insensitive).

        Unlike get_by_id this does not hide inactive records.
        """
        if not isinstance(email, str):
            return None
        with self._lock:
            record = self._by_email.get(normalize_email(email))
            return record.to_public() if record is not None else None

    def user_exists(self, email: str) -> bool:
        if not isinstance(email, str):
            return False
        with self._lock:
            return normalize_email(email) in self._by_email

    def list_users(self) -> List[PublicUser]:
        """Every record, active or not, in insertion order."""
        with self._lock:
            return [record.to_public() for record in self._by_id.values()]

    def get_stats(self) -> UserStats:
        with self._lock:
            records = list(self._by_id.values())
            return UserStats(
                total_users=len(records),
                active_users=sum(1 for r in records if r.is_active),
                verified_users=sum(1 for r in records if r.email_verified),
            )
