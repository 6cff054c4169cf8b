"""
Name: FastAPI Identity Dependencies

Responsibilities:
  - Resolve the auth store and settings owned by the running app (app.state)
  - Resolve the current user from a Bearer header or the access-token cookie
  - Gate routes by role

Collaborators:
  - identity.tokens: decode_access_token, extract_bearer_token
  - identity.auth_store: InMemoryAuthStore (get_by_id)
  - crosscutting.exceptions: AuthError / PermissionDenied
"""

from __future__ import annotations

from typing import Callable

from fastapi import Header, Request

from ..crosscutting.exceptions import AuthError, PermissionDenied
from .auth_store import InMemoryAuthStore
from .tokens import (
    DEFAULT_ACCESS_TOKEN_COOKIE,
    AuthSettings,
    decode_access_token,
    extract_bearer_token,
    get_auth_settings,
)
from .users import PublicUser, UserRole


def get_auth_store(request: Request) -> InMemoryAuthStore:
    """R: The store instance the app factory attached to app.state."""
    return request.app.state.auth_store


def get_request_auth_settings(request: Request) -> AuthSettings:
    """R: Auth settings of the app serving this request."""
    return get_auth_settings(getattr(request.app.state, "settings", None))


def extract_access_token(
    request: Request, authorization: str | None, settings: AuthSettings
) -> str | None:
    """Resolve the token from Authorization or the auth cookie."""
    token = extract_bearer_token(authorization)
    if token:
        return token

    cookie_name = (settings.jwt_cookie_name or "").strip() or DEFAULT_ACCESS_TOKEN_COOKIE
    return request.cookies.get(cookie_name)


def get_current_user(
    store: InMemoryAuthStore, token: str, settings: AuthSettings | None = None
) -> PublicUser:
    """
    Validate the token, then look the user up.

    get_by_id hides inactive users, so a deactivated account loses access
    even with a token that has not expired yet.
    """
    payload = decode_access_token(token, settings)
    user = store.get_by_id(payload.user_id)
    if user is None:
        raise AuthError("Invalid token.", reason="unknown_subject")
    return user


def require_user() -> Callable:
    """FastAPI dependency: requires an authenticated user."""

    async def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> PublicUser:
        settings = get_request_auth_settings(request)
        token = extract_access_token(request, authorization, settings)
        if not token:
            raise AuthError("Missing bearer token.", reason="missing_token")

        user = get_current_user(get_auth_store(request), token, settings)
        request.state.user = user
        return user

    return dependency


def require_role(*roles: UserRole | str) -> Callable:
    """FastAPI dependency: requires one of the given roles."""
    allowed = {UserRole(r) for r in roles}

    async def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> PublicUser:
        user = await require_user()(request, authorization)
        if user.role not in allowed:
            raise PermissionDenied("Insufficient role.")
        return user

    return dependency
