"""Login session domain model and token value objects."""

import hashlib
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


def hash_refresh_token(refresh_token: str) -> str:
    """SHA-256 hex digest of a refresh token; only the digest is persisted."""
    return hashlib.sha256(refresh_token.encode('utf-8')).hexdigest()


@dataclass(frozen=True)
class DeviceInfo:
    """Optional client metadata recorded on a session."""
    user_agent: str | None = None
    ip_address: str | None = None


@dataclass
class Session:
    """A refresh-token-bearing login session.

    Valid while ``now < expires_at`` (or no expiry was set) and not revoked.
    Sessions are never deleted; revocation only stamps ``revoked_at``.
    """
    id: str
    user_id: str
    refresh_token_hash: str
    created_at: datetime
    user_agent: str | None = None
    ip_address: str | None = None
    expires_at: datetime | None = None
    revoked_at: datetime | None = None

    # ── factory ───────────────────────────────────────────

    @staticmethod
    def create(
        user_id: str,
        refresh_token: str,
        device: DeviceInfo | None = None,
        expires_at: datetime | None = None,
    ) -> 'Session':
        device = device or DeviceInfo()
        return Session(
            id=uuid.uuid4().hex,
            user_id=user_id,
            refresh_token_hash=hash_refresh_token(refresh_token),
            created_at=datetime.now(timezone.utc),
            user_agent=device.user_agent,
            ip_address=device.ip_address,
            expires_at=expires_at,
        )

    # ── queries ───────────────────────────────────────────

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        """True once the expiry has passed or the session was revoked."""
        if self.is_revoked:
            return True
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= _as_utc(self.expires_at)

    def is_valid(self, now: datetime | None = None) -> bool:
        return not self.is_expired(now)

    # ── state transitions ─────────────────────────────────

    def revoke(self, at: datetime | None = None) -> None:
        if self.revoked_at is None:
            self.revoked_at = at or datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # MongoDB returns naive datetimes in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ── Token value objects ──────────────────────────────────


@dataclass(frozen=True)
class TokenParams:
    """Inputs for signing an access token."""
    user_id: str
    session_id: str | None = None
    duration: timedelta = timedelta(hours=24)


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims extracted from an access token."""
    sub: str
    exp: int
    iat: int
    sid: str | None = None


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a successful login or refresh."""
    user_id: str
    access_token: str
    refresh_token: str
    session: Session
