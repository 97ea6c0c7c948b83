"""Session service: session creation, token issuance, refresh rotation and logout.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from domain.model.errors import AuthenticationError, ErrorKind
from domain.model.session import (
    DeviceInfo,
    LoginResult,
    Session,
    TokenParams,
    hash_refresh_token,
)
from port.session_repository import SessionRepository
from port.token_service import TokenService

logger = logging.getLogger(__name__)


# ── Commands ─────────────────────────────────────────────


@dataclass(frozen=True)
class CreateSessionCommand:
    user_id: str
    refresh_token: str
    device: DeviceInfo | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class RefreshTokenCommand:
    refresh_token: str
    device: DeviceInfo | None = None


@dataclass(frozen=True)
class LogoutCommand:
    refresh_token: str


# ── Handlers ─────────────────────────────────────────────


class CreateSessionHandler:
    """Persist a session for an already generated refresh token.

    Neither generates the token nor applies an expiry default; a session
    created without ``expires_at`` never expires.
    """

    def __init__(self, session_repo: SessionRepository):
        self.session_repo = session_repo

    def handle(self, cmd: CreateSessionCommand) -> Session:
        session = Session.create(
            user_id=cmd.user_id,
            refresh_token=cmd.refresh_token,
            device=cmd.device,
            expires_at=cmd.expires_at,
        )
        return self.session_repo.create(session)


class SessionIssuer:
    """Open a session and sign its access token.

    Shared by every login path so that all of them issue tokens the same way.
    """

    def __init__(
        self,
        create_session: CreateSessionHandler,
        token_service: TokenService,
        access_token_ttl: timedelta = timedelta(hours=24),
        refresh_token_ttl: timedelta = timedelta(days=30),
    ):
        self.create_session = create_session
        self.token_service = token_service
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl

    def issue(self, user_id: str, device: DeviceInfo | None = None) -> LoginResult:
        refresh_token = self.token_service.generate_refresh_token()
        session = self.create_session.handle(CreateSessionCommand(
            user_id=user_id,
            refresh_token=refresh_token,
            device=device,
            expires_at=datetime.now(timezone.utc) + self.refresh_token_ttl,
        ))
        access_token = self.token_service.generate_access_token(TokenParams(
            user_id=user_id,
            session_id=session.id,
            duration=self.access_token_ttl,
        ))

        logger.info("Session issued", extra={"userId": user_id, "sessionId": session.id})
        return LoginResult(
            user_id=user_id,
            access_token=access_token,
            refresh_token=refresh_token,
            session=session,
        )


def _find_active_session(session_repo: SessionRepository, refresh_token: str) -> Session:
    if not refresh_token:
        raise AuthenticationError(ErrorKind.INVALID_REFRESH_TOKEN)
    session = session_repo.find_by_refresh_token_hash(hash_refresh_token(refresh_token))
    if session is None or not session.is_valid():
        raise AuthenticationError(ErrorKind.INVALID_REFRESH_TOKEN)
    return session


class RefreshTokenHandler:
    """Rotate a refresh token: revoke its session and open a new one."""

    def __init__(self, session_repo: SessionRepository, issuer: SessionIssuer):
        self.session_repo = session_repo
        self.issuer = issuer

    def handle(self, cmd: RefreshTokenCommand) -> LoginResult:
        session = _find_active_session(self.session_repo, cmd.refresh_token)

        # Only the caller that actually revokes may rotate; a concurrent reuse loses
        if not self.session_repo.revoke(session.id, datetime.now(timezone.utc)):
            logger.warning("Refresh token reused", extra={"userId": session.user_id, "sessionId": session.id})
            raise AuthenticationError(ErrorKind.INVALID_REFRESH_TOKEN)

        device = cmd.device or DeviceInfo(session.user_agent, session.ip_address)
        result = self.issuer.issue(session.user_id, device)
        logger.info("Refresh token rotated", extra={
            "userId": session.user_id,
            "sessionId": result.session.id,
            "previousSessionId": session.id,
        })
        return result


class LogoutHandler:
    def __init__(self, session_repo: SessionRepository):
        self.session_repo = session_repo

    def handle(self, cmd: LogoutCommand) -> None:
        session = _find_active_session(self.session_repo, cmd.refresh_token)
        if not self.session_repo.revoke(session.id, datetime.now(timezone.utc)):
            raise AuthenticationError(ErrorKind.INVALID_REFRESH_TOKEN)
        logger.info("User logged out", extra={"userId": session.user_id, "sessionId": session.id})


class ListSessionsHandler:
    def __init__(self, session_repo: SessionRepository):
        self.session_repo = session_repo

    def handle(self, user_id: str, active_only: bool = False) -> list[Session]:
        """Sessions of ``user_id``, newest first."""
        sessions = self.session_repo.list_by_user(user_id)
        if active_only:
            now = datetime.now(timezone.utc)
            sessions = [s for s in sessions if s.is_valid(now)]
        return sessions
