"""
===============================================================================
CRC CARD: api/auth_routes.py (Authentication and user administration)
===============================================================================

Responsibilities:
  - Expose register / login / logout / profile endpoints backed by the
    in-memory auth store.
  - Issue JWT access tokens at login and mirror them in an httpOnly cookie.
  - Expose admin endpoints (list, stats, update, activate/deactivate).

Collaborators:
  - identity.dependencies: get_auth_store, require_user, require_role
  - identity.tokens: create_access_token, AuthSettings
  - api.schemas: request/response DTOs

Notes:
  - Handlers are plain `def` so FastAPI runs them in its threadpool; password
    hashing never blocks the event loop.
  - Store errors propagate; api/exception_handlers.py maps them to statuses.
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..identity.auth_store import InMemoryAuthStore
from ..identity.dependencies import (
    get_auth_store,
    get_request_auth_settings,
    require_role,
    require_user,
)
from ..identity.tokens import (
    DEFAULT_ACCESS_TOKEN_COOKIE,
    AuthSettings,
    create_access_token,
)
from ..identity.users import PublicUser, UserRole
from .schemas import (
    AdminUserUpdateRequest,
    LoginRequest,
    LoginResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    StatsResponse,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"], responses=OPENAPI_ERROR_RESPONSES)


# -----------------------------------------------------------------------------
# Cookie helpers
# -----------------------------------------------------------------------------


def _cookie_name(settings: AuthSettings) -> str:
    return settings.jwt_cookie_name or DEFAULT_ACCESS_TOKEN_COOKIE


def _set_auth_cookie(
    response: Response, settings: AuthSettings, token: str, expires_in: int
) -> None:
    response.set_cookie(
        key=_cookie_name(settings),
        value=token,
        httponly=True,
        secure=settings.jwt_cookie_secure,
        samesite="lax",
        max_age=expires_in,
        path="/",
    )


def _clear_auth_cookie(response: Response, settings: AuthSettings) -> None:
    response.delete_cookie(
        key=_cookie_name(settings),
        path="/",
        samesite="lax",
        secure=settings.jwt_cookie_secure,
    )


# -----------------------------------------------------------------------------
# Public endpoints
# -----------------------------------------------------------------------------


@router.post("/register", response_model=UserResponse, status_code=201)
def register(
    req: RegisterRequest,
    store: InMemoryAuthStore = Depends(get_auth_store),
):
    """Create an account in the fallback store."""
    user = store.create_user(
        email=req.email,
        username=req.username,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
    )
    return UserResponse.from_user(user)


@router.post("/login", response_model=LoginResponse)
def login(
    req: LoginRequest,
    response: Response,
    store: InMemoryAuthStore = Depends(get_auth_store),
    settings: AuthSettings = Depends(get_request_auth_settings),
):
    """Check credentials and return a JWT (also set as httpOnly cookie)."""
    user = store.authenticate(req.email, req.password)

    token, expires_in = create_access_token(user, settings)
    _set_auth_cookie(response, settings, token, expires_in)

    return LoginResponse(
        access_token=token,
        expires_in=expires_in,
        user=UserResponse.from_user(user),
    )


@router.post("/logout")
def logout(
    response: Response,
    settings: AuthSettings = Depends(get_request_auth_settings),
):
    """Clear the auth cookie. Idempotent, no token required."""
    _clear_auth_cookie(response, settings)
    return {"ok": True}


@router.get("/profile", response_model=UserResponse)
def profile(user: PublicUser = Depends(require_user())):
    """Current user, resolved from the token."""
    return UserResponse.from_user(user)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    req: ProfileUpdateRequest,
    user: PublicUser = Depends(require_user()),
    store: InMemoryAuthStore = Depends(get_auth_store),
):
    """Update the caller's own names/username."""
    updated = store.update_user(user.id, req.model_dump(exclude_unset=True))
    return UserResponse.from_user(updated)


# -----------------------------------------------------------------------------
# Admin endpoints
# -----------------------------------------------------------------------------


@router.get("/users", response_model=list[UserResponse])
def list_users_admin(
    _admin: PublicUser = Depends(require_role(UserRole.ADMIN)),
    store: InMemoryAuthStore = Depends(get_auth_store),
):
    """Every user, active or not, in registration order."""
    return [UserResponse.from_user(u) for u in store.list_users()]


@router.get("/stats", response_model=StatsResponse)
def stats_admin(
    _admin: PublicUser = Depends(require_role(UserRole.ADMIN)),
    store: InMemoryAuthStore = Depends(get_auth_store),
):
    return StatsResponse.from_stats(store.get_stats())


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user_admin(
    user_id: int,
    req: AdminUserUpdateRequest,
    _admin: PublicUser = Depends(require_role(UserRole.ADMIN)),
    store: InMemoryAuthStore = Depends(get_auth_store),
):
    updated = store.update_user(user_id, req.model_dump(exclude_unset=True))
    return UserResponse.from_user(updated)


@router.post("/users/{user_id}/deactivate", response_model=UserResponse)
def deactivate_user_admin(
    user_id: int,
    _admin: PublicUser = Depends(require_role(UserRole.ADMIN)),
    store: InMemoryAuthStore = Depends(get_auth_store),
):
    return UserResponse.from_user(store.set_active(user_id, False))


@router.post("/users/{user_id}/activate", response_model=UserResponse)
def activate_user_admin(
    user_id: int,
    _admin: PublicUser = Depends(require_role(UserRole.ADMIN)),
    store: InMemoryAuthStore = Depends(get_auth_store),
):
    return UserResponse.from_user(store.set_active(user_id, True))


__all__ = ["router"]
