"""Pydantic models for API request/response.

Responses serialize with camelCase keys.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.model.session import Session
from domain.model.user import User


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Requests ─────────────────────────────────────────────


class RegisterRequest(BaseModel):
    """Request model for user registration."""
    email: str
    password: str
    name: Optional[str] = None


class LoginRequest(BaseModel):
    """Request model for user login."""
    email: str
    password: str


# ── Responses ────────────────────────────────────────────


class ProfileResponse(CamelModel):
    name: str
    avatar_url: Optional[str] = None


class UserResponse(CamelModel):
    """Public view of a user; never carries credentials."""
    id: str = Field(..., description="User ID")
    email: str
    created_at: datetime
    profile: Optional[ProfileResponse] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        profile = None
        if user.profile is not None:
            profile = ProfileResponse(name=user.profile.name, avatar_url=user.profile.avatar_url)
        return cls(id=user.id, email=user.email, created_at=user.created_at, profile=profile)


class TokenResponse(CamelModel):
    access_token: str = Field(..., description="Bearer access token (JWT)")


class AuthUrlResponse(BaseModel):
    url: str = Field(..., description="Provider consent-screen URL")


class SessionResponse(CamelModel):
    id: str
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime
    expires_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    active: bool

    @classmethod
    def from_domain(cls, session: Session) -> "SessionResponse":
        return cls(
            id=session.id,
            user_agent=session.user_agent,
            ip_address=session.ip_address,
            created_at=session.created_at,
            expires_at=session.expires_at,
            revoked_at=session.revoked_at,
            active=session.is_valid(),
        )
