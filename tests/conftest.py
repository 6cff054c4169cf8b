"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure the test environment (no .env file, APP_ENV=test)
  - Provide a cheap Argon2 hasher so tests do not pay production cost
  - Provide a controllable clock and a fresh auth store per test
  - Provide a user factory for common registrations

Collaborators:
  - pytest: Test framework
  - docauth.identity: store, hasher, models

Notes:
  - Fixtures are function-scoped for per-test isolation
"""

import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_JSON", "true")

from docauth.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from docauth.identity.auth_store import InMemoryAuthStore  # noqa: E402
from docauth.identity.passwords import Argon2PasswordHasher  # noqa: E402


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


# ============================================================================
# Time
# ============================================================================


class FakeClock:
    """R: Deterministic, manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# Identity
# ============================================================================


@pytest.fixture
def fast_hasher() -> Argon2PasswordHasher:
    """R: Argon2 with the smallest legal cost."""
    return Argon2PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def store(fast_hasher: Argon2PasswordHasher, clock: FakeClock) -> InMemoryAuthStore:
    return InMemoryAuthStore(password_hasher=fast_hasher, clock=clock)


class UserFactory:
    """R: Registers users with sensible defaults."""

    def __init__(self, store: InMemoryAuthStore):
        self._store = store
        self._seq = 0

    def create(self, **overrides):
        self._seq += 1
        data = {
            "email": f"user{self._seq}@example.com",
            "username": f"user{self._seq}",
            "password": "secret1",
        }
        data.update(overrides)
        return self._store.create_user(**data)


@pytest.fixture
def user_factory(store: InMemoryAuthStore) -> UserFactory:
    return UserFactory(store)
