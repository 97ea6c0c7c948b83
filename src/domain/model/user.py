"""User identity domain model: users, profiles, and login-method bindings."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ProviderKind(str, Enum):
    """Well-known login-method kinds.

    Bindings store the provider as a plain string so that generic social
    providers (``github``, ``kakao``...) work without extending this enum.
    """
    PASSWORD = 'password'
    GOOGLE = 'google'


def provider_key(provider: str) -> str:
    """Normalize a ProviderKind or raw provider string to its stored form."""
    return provider.value if isinstance(provider, ProviderKind) else provider


# ── Entities ─────────────────────────────────────────────


@dataclass
class UserProfile:
    """Optional display data, at most one per user."""
    user_id: str
    name: str
    avatar_url: str | None = None


@dataclass
class UserProvider:
    """A login-method binding: (provider, provider_id) → one user."""
    id: str
    user_id: str
    provider: str
    provider_id: str
    created_at: datetime
    password_hash: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None

    @staticmethod
    def create(
        user_id: str,
        provider: str,
        provider_id: str,
        password_hash: str | None = None,
    ) -> 'UserProvider':
        return UserProvider(
            id=uuid.uuid4().hex,
            user_id=user_id,
            provider=provider_key(provider),
            provider_id=provider_id,
            created_at=datetime.now(timezone.utc),
            password_hash=password_hash,
        )

    @property
    def is_password(self) -> bool:
        return self.provider == ProviderKind.PASSWORD.value

    @property
    def has_password(self) -> bool:
        return self.is_password and bool(self.password_hash)


@dataclass
class User:
    """Domain model representing a user identity."""
    id: str
    email: str
    created_at: datetime
    updated_at: datetime | None = None
    profile: UserProfile | None = None

    @staticmethod
    def create(email: str) -> 'User':
        """Create a new, not yet persisted User with a generated ID."""
        return User(
            id=uuid.uuid4().hex,
            email=email,
            created_at=datetime.now(timezone.utc),
        )


# ── Value Objects ────────────────────────────────────────


@dataclass(frozen=True)
class ExternalUser:
    """Identity record returned by a third-party provider after code exchange."""
    id: str
    email: str
    name: str = ''
    avatar_url: str | None = None
    email_verified: bool = False
    access_token: str | None = field(default=None, repr=False)
    refresh_token: str | None = field(default=None, repr=False)
