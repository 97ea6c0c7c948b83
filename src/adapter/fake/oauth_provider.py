"""In-memory implementation of OAuthProvider for testing."""

import asyncio
from urllib.parse import urlencode

from domain.model.errors import OAuthError
from domain.model.user import ExternalUser


class FakeOAuthProvider:
    """Maps authorization codes to canned ExternalUser records.

    ``delay`` makes exchange_code() sleep first, for timeout/cancel tests.
    """

    def __init__(self, users: dict[str, ExternalUser] | None = None, delay: float = 0.0):
        self.users: dict[str, ExternalUser] = dict(users or {})
        self.delay = delay
        self.exchanged: list[str] = []

    def get_auth_url(self, state: str) -> str:
        return "https://accounts.example.com/auth?" + urlencode({'state': state})

    async def exchange_code(self, code: str) -> ExternalUser:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.exchanged.append(code)
        user = self.users.get(code)
        if user is None:
            raise OAuthError()
        return user
