"""
===============================================================================
CRC CARD: identity/tokens.py
===============================================================================

Module:
    Session tokens (JWT)

Responsibilities:
    - Issue signed, expiring access tokens at login.
    - Decode and validate tokens (signature, exp, iss, aud, minimum claims).
    - Stay independent of the auth store: a token is checked on its own,
      the store is only consulted afterwards to resolve the user.

Collaborators:
    - crosscutting.config.get_settings: secret, TTL, issuer, audience, cookie.
    - crosscutting.exceptions.AuthError: every token failure.
    - identity.users: PublicUser / UserRole.

Notes:
    - Claims: sub, email, username, role, iat, exp, typ, iss, aud.
    - Never log tokens or secrets.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from ..crosscutting.config import Settings, get_settings
from ..crosscutting.exceptions import AuthError
from .users import PublicUser, UserRole

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

JWT_ALGORITHM: str = "HS256"

DEFAULT_ACCESS_TOKEN_COOKIE: str = "access_token"

CLAIM_SUB: str = "sub"
CLAIM_EMAIL: str = "email"
CLAIM_USERNAME: str = "username"
CLAIM_ROLE: str = "role"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_TYP: str = "typ"

TOKEN_TYPE_ACCESS: str = "access"


# ---------------------------------------------------------------------------
# Internal contracts
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """Auth settings snapshot."""

    jwt_secret: str
    jwt_access_ttl_minutes: int
    jwt_issuer: str
    jwt_audience: str
    jwt_cookie_name: str
    jwt_cookie_secure: bool


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """Minimum payload expected from an access token."""

    user_id: int
    email: str
    username: str
    role: UserRole


def get_auth_settings(settings: Settings | None = None) -> AuthSettings:
    """Build an auth settings snapshot (global settings unless given)."""
    s = settings or get_settings()
    return AuthSettings(
        jwt_secret=s.jwt_secret,
        jwt_access_ttl_minutes=s.jwt_access_ttl_minutes,
        jwt_issuer=s.jwt_issuer,
        jwt_audience=s.jwt_audience,
        jwt_cookie_name=s.jwt_cookie_name,
        jwt_cookie_secure=s.jwt_cookie_secure,
    )


# ---------------------------------------------------------------------------
# Issue / decode
# ---------------------------------------------------------------------------


def create_access_token(
    user: PublicUser, settings: AuthSettings | None = None
) -> tuple[str, int]:
    """Create a signed access token.

    Returns:
        (token, expires_in_seconds)
    """
    auth_settings = settings or get_auth_settings()

    now = datetime.now(timezone.utc)
    expires_in = int(auth_settings.jwt_access_ttl_minutes * 60)

    payload: dict[str, object] = {
        CLAIM_SUB: str(user.id),
        CLAIM_EMAIL: user.email,
        CLAIM_USERNAME: user.username,
        CLAIM_ROLE: user.role.value,
        CLAIM_IAT: int(now.timestamp()),
        CLAIM_EXP: int((now + timedelta(seconds=expires_in)).timestamp()),
        CLAIM_TYP: TOKEN_TYPE_ACCESS,
        "iss": auth_settings.jwt_issuer,
        "aud": auth_settings.jwt_audience,
    }

    token = jwt.encode(payload, auth_settings.jwt_secret, algorithm=JWT_ALGORITHM)
    return token, expires_in


def decode_access_token(
    token: str, settings: AuthSettings | None = None
) -> TokenPayload:
    """Decode and validate an access token.

    Raises:
        AuthError: expired, bad signature, wrong issuer/audience, wrong type
        or missing claims.
    """
    auth_settings = settings or get_auth_settings()

    try:
        payload = jwt.decode(
            token,
            auth_settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            issuer=auth_settings.jwt_issuer,
            audience=auth_settings.jwt_audience,
            options={"require": [CLAIM_SUB, CLAIM_ROLE, CLAIM_EXP]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Token expired.", reason="token_expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid token.", reason="invalid_token") from exc

    if payload.get(CLAIM_TYP) != TOKEN_TYPE_ACCESS:
        raise AuthError("Invalid token type.", reason="invalid_token")

    sub = str(payload.get(CLAIM_SUB) or "")
    if not sub.isdigit():
        raise AuthError("Invalid token.", reason="invalid_token")

    try:
        role = UserRole(str(payload.get(CLAIM_ROLE)))
    except ValueError as exc:
        raise AuthError("Invalid token.", reason="invalid_token") from exc

    return TokenPayload(
        user_id=int(sub),
        email=str(payload.get(CLAIM_EMAIL) or ""),
        username=str(payload.get(CLAIM_USERNAME) or ""),
        role=role,
    )


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None
