"""In-memory implementation of OAuthStateStore for testing."""

import secrets
from datetime import datetime, timedelta, timezone


class FakeOAuthStateStore:
    def __init__(self, ttl: timedelta = timedelta(minutes=2)):
        self.ttl = ttl
        self.states: dict[str, datetime] = {}

    def issue(self) -> str:
        state = secrets.token_urlsafe(32)
        self.states[state] = datetime.now(timezone.utc) + self.ttl
        return state

    def consume(self, state: str) -> bool:
        if not state:
            return False
        expires_at = self.states.pop(state, None)
        return expires_at is not None and datetime.now(timezone.utc) < expires_at
