"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the fallback auth behavior

Collaborators:
  - api/main.py: reads settings for startup and the auth router
  - identity/passwords.py: reads Argon2 cost parameters
  - identity/tokens.py: reads JWT secret, TTL, issuer and audience
  - application/dev_seed_admin.py: reads dev seed flags

Constraints:
  - No business logic, pure configuration

Notes:
  - Singleton via lru_cache; tests build Settings(...) directly
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_SECRETS = {"dev-secret", "changeme", "change-me", "password"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (local/development/production/test)
        log_level: Logger level name (default: INFO)
        log_json: Emit JSON log lines (default: True)
        jwt_secret: Secret for signing JWT access tokens
        jwt_access_ttl_minutes: Access token TTL in minutes
        jwt_issuer: `iss` claim written and required on tokens
        jwt_audience: `aud` claim written and required on tokens
        jwt_cookie_name: Cookie name for access token
        jwt_cookie_secure: Set Secure on auth cookies
        min_password_length: Minimum accepted password length (default: 6)
        password_hash_time_cost: Argon2 iterations
        password_hash_memory_cost_kib: Argon2 memory in KiB
        password_hash_parallelism: Argon2 lanes
        dev_seed_admin: Create an admin record at startup (local only)
    """

    # Environment
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Security - JWT Auth
    jwt_secret: str = "dev-secret"
    jwt_access_ttl_minutes: int = 24 * 60
    jwt_issuer: str = "pdf-analyzer-app"
    jwt_audience: str = "pdf-analyzer-users"
    jwt_cookie_name: str = "access_token"
    jwt_cookie_secure: bool = False

    # Security - Passwords
    min_password_length: int = 6
    password_hash_time_cost: int = 3
    password_hash_memory_cost_kib: int = 64 * 1024
    password_hash_parallelism: int = 4

    # Dev Tools (Backend Safe)
    dev_seed_admin: bool = False
    dev_seed_admin_email: str = "admin@local"
    dev_seed_admin_username: str = "admin"
    dev_seed_admin_password: str = "admin123"
    dev_seed_admin_role: str = "admin"

    @field_validator("jwt_access_ttl_minutes")
    @classmethod
    def ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("jwt_access_ttl_minutes must be greater than 0")
        return v

    @field_validator("min_password_length")
    @classmethod
    def min_password_length_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("min_password_length must be >= 1")
        return v

    @field_validator(
        "password_hash_time_cost",
        "password_hash_memory_cost_kib",
        "password_hash_parallelism",
    )
    @classmethod
    def hash_cost_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("password hash cost parameters must be greater than 0")
        return v

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in _INSECURE_SECRETS:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")
        if not self.jwt_cookie_secure:
            raise ValueError("JWT_COOKIE_SECURE must be true in production")
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
