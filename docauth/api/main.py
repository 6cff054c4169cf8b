"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Build the FastAPI app around one InMemoryAuthStore instance
  - Configure middleware (request context) and exception handlers
  - Mount the auth router and the health check
  - Seed the dev admin on startup when enabled

Collaborators:
  - identity.auth_store.InMemoryAuthStore: the store, owned by app.state
  - identity.passwords.build_password_hasher: Argon2 with configured cost
  - application.dev_seed_admin.ensure_dev_admin
  - api.auth_routes.router

Notes:
  - No import-time store: create_app() owns the store lifecycle, so tests and
    hosts get a fresh, independent instance per app.
  - The store is process memory only; restarting the app drops every user.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .. import __version__
from ..application.dev_seed_admin import ensure_dev_admin
from ..crosscutting.config import Settings, get_settings
from ..crosscutting.logger import logger
from ..crosscutting.middleware import RequestContextMiddleware
from ..identity.auth_store import InMemoryAuthStore
from ..identity.passwords import build_password_hasher
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers


def build_auth_store(settings: Settings) -> InMemoryAuthStore:
    """R: Compose the store from settings."""
    return InMemoryAuthStore(
        password_hasher=build_password_hasher(settings),
        min_password_length=settings.min_password_length,
    )


def create_app(
    settings: Settings | None = None,
    store: InMemoryAuthStore | None = None,
) -> FastAPI:
    """Build the application. Each call owns its own store."""
    settings = settings or get_settings()
    store = store or build_auth_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ensure_dev_admin(settings, app.state.auth_store)
        logger.info(
            "docauth starting up",
            extra={
                "app_env": settings.app_env,
                "jwt_access_ttl_minutes": settings.jwt_access_ttl_minutes,
                "min_password_length": settings.min_password_length,
            },
        )
        yield
        logger.info(
            "docauth shutting down; in-memory users discarded",
            extra={"total_users": app.state.auth_store.get_stats().total_users},
        )

    app = FastAPI(
        title="docauth",
        version=__version__,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "auth", "description": "Fallback user authentication (JWT)"},
        ],
    )
    app.state.auth_store = store
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(auth_router)

    @app.get("/healthz", tags=["health"])
    def healthz():
        return {"ok": True, "users": app.state.auth_store.get_stats().total_users}

    return app
