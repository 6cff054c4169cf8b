"""
Name: Auth HTTP Schemas (DTOs)

Responsibilities:
  - Define request/response bodies for the auth router
  - Convert PublicUser / UserStats into response models

Notes:
  - Register fields are optional at the schema level on purpose: missing or
    short values reach the store and come back as a 400 ValidationError,
    the same answer the store gives any other caller.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ..identity.users import PublicUser, UserRole, UserStats


class RegisterRequest(BaseModel):
    email: str | None = Field(default=None, max_length=320)
    username: str | None = Field(default=None, max_length=100)
    password: str | None = Field(default=None, max_length=512)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=512)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdateRequest(BaseModel):
    """Self-service profile changes (no role, no verification flag)."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    username: str | None = Field(default=None, max_length=100)


class AdminUserUpdateRequest(ProfileUpdateRequest):
    role: UserRole | None = None
    email_verified: bool | None = None


class UserResponse(BaseModel):
    id: int
    email: str
    username: str
    first_name: str | None
    last_name: str | None
    role: UserRole
    is_active: bool
    email_verified: bool
    created_at: datetime
    updated_at: datetime
    last_login: datetime | None

    @classmethod
    def from_user(cls, user: PublicUser) -> "UserResponse":
        return cls.model_validate(user.to_dict())


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class StatsResponse(BaseModel):
    total_users: int
    active_users: int
    verified_users: int

    @classmethod
    def from_stats(cls, stats: UserStats) -> "StatsResponse":
        return cls(
            total_users=stats.total_users,
            active_users=stats.active_users,
            verified_users=stats.verified_users,
        )
