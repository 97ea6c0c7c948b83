"""Shared wiring for service tests: every handler over the in-memory fakes."""

from datetime import timedelta

from adapter.fake.oauth_provider import FakeOAuthProvider
from adapter.fake.oauth_state_store import FakeOAuthStateStore
from adapter.fake.session_repository import FakeSessionRepository
from adapter.fake.user_repository import FakeUserRepository
from adapter.security.password_encrypter import BcryptPasswordEncrypter
from adapter.security.token_service import JwtTokenService
from services.external_login_service import ExternalLoginHandler, LoginGoogleHandler, LoginSocialHandler
from services.login_service import LoginUserHandler
from services.registration_service import RegisterUserHandler
from services.session_service import (
    CreateSessionHandler,
    ListSessionsHandler,
    LogoutHandler,
    RefreshTokenHandler,
    SessionIssuer,
)

SECRET = "test-secret-key"


class Wiring:
    def __init__(self, oauth_users=None, oauth_delay=0.0):
        self.users = FakeUserRepository()
        self.providers = self.users.providers
        self.profiles = self.users.profiles
        self.sessions = FakeSessionRepository()
        self.encrypter = BcryptPasswordEncrypter(rounds=4)
        self.tokens = JwtTokenService(SECRET)
        self.oauth = FakeOAuthProvider(oauth_users, delay=oauth_delay)
        self.state_store = FakeOAuthStateStore()

        self.issuer = SessionIssuer(
            CreateSessionHandler(self.sessions),
            self.tokens,
            access_token_ttl=timedelta(hours=24),
            refresh_token_ttl=timedelta(days=30),
        )
        self.register = RegisterUserHandler(self.users, self.encrypter)
        self.login = LoginUserHandler(self.providers, self.encrypter, self.issuer)
        self.external = ExternalLoginHandler(self.users, self.providers, self.profiles, self.issuer)
        self.google = LoginGoogleHandler(self.oauth, self.external, state_store=self.state_store, timeout=1.0)
        self.social = LoginSocialHandler(self.external)
        self.refresh = RefreshTokenHandler(self.sessions, self.issuer)
        self.logout = LogoutHandler(self.sessions)
        self.list_sessions = ListSessionsHandler(self.sessions)
