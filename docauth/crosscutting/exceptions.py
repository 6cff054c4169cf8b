"""
===============================================================================
MODULE: Typed errors raised by the auth store and identity layer
===============================================================================

Goal
----
Consistent internal errors with:
- a stable error_code
- an error_id for log correlation
- a human message that never leaks credentials

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  AuthStoreError + subclasses

Responsibilities:
  - Standardize failures that the HTTP layer maps to status codes
  - Generate error_id for tracing

Collaborators:
  - api/exception_handlers.py (maps to RFC 7807 responses)
  - identity/auth_store.py, identity/tokens.py (raise them)
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class AuthStoreError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      AuthStoreError

    Responsibilities:
      - Base for every failure surfaced by the auth store
      - Carry error_code + error_id + message

    Collaborators:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "AUTH_STORE_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class ValidationError(AuthStoreError):
    """Missing or malformed input (caller can fix and retry)."""

    error_code: str = "VALIDATION_ERROR"


class ConflictError(AuthStoreError):
    """Email or username already taken."""

    error_code: str = "CONFLICT"


class AuthError(AuthStoreError):
    """
    Bad credentials, inactive account or invalid session token.

    `reason` is for logs and tests only; the message for unknown email and
    wrong password is identical.
    """

    error_code: str = "UNAUTHORIZED"

    def __init__(
        self,
        message: str = "Invalid credentials.",
        *,
        reason: str = "invalid_credentials",
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, error_id=error_id, original_error=original_error)
        self.reason = reason


class NotFoundError(AuthStoreError):
    """Referenced user id does not exist."""

    error_code: str = "NOT_FOUND"


class PermissionDenied(AuthStoreError):
    """Authenticated, but the role is not allowed to perform the action."""

    error_code: str = "FORBIDDEN"
