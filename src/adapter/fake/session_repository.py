"""In-memory implementation of SessionRepository for testing."""

from datetime import datetime

from domain.model.errors import DuplicateError
from domain.model.session import Session


class FakeSessionRepository:
    def __init__(self):
        self.store: dict[str, Session] = {}

    def create(self, session: Session) -> Session:
        if any(s.refresh_token_hash == session.refresh_token_hash for s in self.store.values()):
            raise DuplicateError(message="Refresh token already in use")
        self.store[session.id] = session
        return session

    def find_by_refresh_token_hash(self, refresh_token_hash: str) -> Session | None:
        for session in self.store.values():
            if session.refresh_token_hash == refresh_token_hash:
                return session
        return None

    def revoke(self, session_id: str, revoked_at: datetime) -> bool:
        session = self.store.get(session_id)
        if not session or session.is_revoked:
            return False
        session.revoke(revoked_at)
        return True

    def list_by_user(self, user_id: str) -> list[Session]:
        sessions = [s for s in self.store.values() if s.user_id == user_id]
        return sorted(sessions, key=lambda s: s.created_at, reverse=True)
