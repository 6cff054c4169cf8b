"""
Name: Dev Seed Admin Tests

Responsibilities:
  - Disabled -> no-op
  - Non-local environments are refused
  - Creates a verified admin once, then is idempotent
  - Runs from the app lifespan
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from docauth.api.main import create_app
from docauth.application.dev_seed_admin import ensure_dev_admin
from docauth.crosscutting.config import Settings
from docauth.identity.users import UserRole

pytestmark = pytest.mark.unit


def _seed_settings(**overrides) -> Settings:
    data = dict(
        app_env="local",
        dev_seed_admin=True,
        dev_seed_admin_email="Admin@Local",
        dev_seed_admin_username="admin",
        dev_seed_admin_password="admin123",
    )
    data.update(overrides)
    return Settings(**data)


def test_disabled_is_noop():
    store = MagicMock()

    assert ensure_dev_admin(Settings(dev_seed_admin=False), store) is None
    store.get_by_email.assert_not_called()
    store.create_user.assert_not_called()


@pytest.mark.parametrize("env", ["development", "production", "test"])
def test_refuses_non_local_environment(env):
    store = MagicMock()
    if env == "production":
        # Production settings refuse the default secret and a plain cookie.
        settings = _seed_settings(
            app_env=env, jwt_secret="x" * 40, jwt_cookie_secure=True
        )
    else:
        settings = _seed_settings(app_env=env)

    with pytest.raises(RuntimeError, match="must be 'local'"):
        ensure_dev_admin(settings, store)
    store.create_user.assert_not_called()


def test_creates_verified_admin(store):
    user = ensure_dev_admin(_seed_settings(), store)

    assert user.email == "admin@local"
    assert user.role is UserRole.ADMIN
    assert user.email_verified is True
    assert store.authenticate("admin@local", "admin123").id == user.id


def test_idempotent(store):
    ensure_dev_admin(_seed_settings(), store)

    assert ensure_dev_admin(_seed_settings(), store) is None
    assert store.get_stats().total_users == 1


def test_invalid_role_falls_back_to_admin(store):
    user = ensure_dev_admin(_seed_settings(dev_seed_admin_role="wizard"), store)
    assert user.role is UserRole.ADMIN


def test_empty_credentials_rejected(store):
    with pytest.raises(ValueError):
        ensure_dev_admin(_seed_settings(dev_seed_admin_password=""), store)


def test_lifespan_seeds_admin(store):
    app = create_app(settings=_seed_settings(jwt_secret="test-secret"), store=store)

    with TestClient(app) as client:
        response = client.post(
            "/auth/login", json={"email": "admin@local", "password": "admin123"}
        )

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"
