from datetime import datetime
from typing import Protocol

from domain.model.session import Session


class SessionRepository(Protocol):
    """Protocol for login sessions. Sessions are never deleted."""
    def create(self, session: Session) -> Session:
        """Persist a new session. Raises DuplicateError on a reused refresh token."""
        ...

    def find_by_refresh_token_hash(self, refresh_token_hash: str) -> Session | None: ...

    def revoke(self, session_id: str, revoked_at: datetime) -> bool:
        """Stamp revoked_at on an active session.

        Return True only if this call revoked it; False when the session is
        missing or was already revoked.
        """
        ...

    def list_by_user(self, user_id: str) -> list[Session]:
        """All sessions of a user, newest first."""
        ...
