"""Unit tests for external_login_service module."""

import asyncio
import unittest
from unittest.mock import MagicMock

from jose import jwt

from adapter.fake.oauth_provider import FakeOAuthProvider
from domain.model.errors import (
    AuthenticationError,
    DuplicateError,
    ErrorKind,
    OAuthError,
    PersistenceError,
    ValidationError,
)
from domain.model.user import ExternalUser, ProviderKind, UserProfile
from services.external_login_service import (
    LoginGoogleCommand,
    LoginGoogleHandler,
    LoginSocialCommand,
    RedirectGoogleHandler,
)
from services.registration_service import RegisterUserCommand
from services.tests.helpers import SECRET, Wiring

GOOGLE_USER = ExternalUser(id="g-123", email="new@x.com", name="New User", email_verified=True)


class TestLoginGoogle(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.w = Wiring(oauth_users={"code-1": GOOGLE_USER, "code-2": GOOGLE_USER})

    async def _login(self, code):
        return await self.w.google.handle(LoginGoogleCommand(code=code, state=self.w.state_store.issue()))

    async def test_first_login_creates_user_binding_profile(self):
        result = await self._login("code-1")

        self.assertEqual(len(self.w.users.store), 1)
        self.assertEqual(len(self.w.providers.store), 1)
        self.assertEqual(len(self.w.profiles.store), 1)
        user = self.w.users.get_by_provider(ProviderKind.GOOGLE, "g-123")
        self.assertEqual(user.email, "new@x.com")
        self.assertEqual(user.profile.name, "New User")
        payload = jwt.decode(result.access_token, SECRET, algorithms=["HS256"])
        self.assertEqual(payload["sub"], user.id)

    async def test_repeat_login_creates_nothing(self):
        first = await self._login("code-1")
        second = await self._login("code-2")

        self.assertEqual(first.user_id, second.user_id)
        self.assertEqual(len(self.w.users.store), 1)
        self.assertEqual(len(self.w.providers.store), 1)
        self.assertEqual(len(self.w.profiles.store), 1)
        self.assertEqual(len(self.w.sessions.store), 2)

    async def test_links_to_existing_password_account(self):
        existing = self.w.register.handle(RegisterUserCommand("new@x.com", "Valid1Pass!"))

        result = await self._login("code-1")

        self.assertEqual(result.user_id, existing.id)
        self.assertEqual(len(self.w.users.store), 1)
        self.assertEqual(len(self.w.providers.store), 2)
        self.assertEqual(self.w.profiles.get_by_user_id(existing.id).name, "New User")

    async def test_link_keeps_existing_profile(self):
        existing = self.w.register.handle(RegisterUserCommand("new@x.com", "Valid1Pass!", name="Original"))

        await self._login("code-1")

        self.assertEqual(self.w.profiles.get_by_user_id(existing.id).name, "Original")

    async def test_unverified_email_links_with_warning(self):
        self.w.oauth.users["code-u"] = ExternalUser(id="g-9", email="new@x.com", name="", email_verified=False)
        existing = self.w.register.handle(RegisterUserCommand("new@x.com", "Valid1Pass!"))

        with self.assertLogs("services.external_login_service", level="WARNING") as logs:
            result = await self._login("code-u")

        self.assertEqual(result.user_id, existing.id)
        self.assertIn("unverified", logs.output[0])

    async def test_empty_code(self):
        with self.assertRaises(OAuthError) as ctx:
            await self.w.google.handle(LoginGoogleCommand(code="", state=self.w.state_store.issue()))
        self.assertEqual(ctx.exception.kind, ErrorKind.INVALID_OAUTH_CODE)

    async def test_state_is_one_shot(self):
        state = self.w.state_store.issue()
        await self.w.google.handle(LoginGoogleCommand(code="code-1", state=state))

        with self.assertRaises(OAuthError) as ctx:
            await self.w.google.handle(LoginGoogleCommand(code="code-2", state=state))

        self.assertEqual(ctx.exception.kind, ErrorKind.INVALID_STATE)
        self.assertEqual(self.w.oauth.exchanged, ["code-1"])

    async def test_unknown_state(self):
        with self.assertRaises(OAuthError) as ctx:
            await self.w.google.handle(LoginGoogleCommand(code="code-1", state="forged"))
        self.assertEqual(ctx.exception.kind, ErrorKind.INVALID_STATE)

    async def test_without_state_store_state_is_not_checked(self):
        handler = LoginGoogleHandler(self.w.oauth, self.w.external)
        result = await handler.handle(LoginGoogleCommand(code="code-1"))
        self.assertIsNotNone(result.access_token)

    async def test_rejected_code(self):
        with self.assertRaises(OAuthError) as ctx:
            await self._login("unknown-code")
        self.assertEqual(ctx.exception.kind, ErrorKind.OAUTH_EXCHANGE)
        self.assertEqual(self.w.users.store, {})

    async def test_exchange_timeout(self):
        slow = FakeOAuthProvider({"code-1": GOOGLE_USER}, delay=1.0)
        handler = LoginGoogleHandler(slow, self.w.external, timeout=0.01)

        with self.assertRaises(OAuthError) as ctx:
            await handler.handle(LoginGoogleCommand(code="code-1"))

        self.assertEqual(ctx.exception.kind, ErrorKind.OAUTH_EXCHANGE)
        self.assertEqual(slow.exchanged, [])
        self.assertEqual(self.w.users.store, {})

    async def test_command_timeout_overrides_default(self):
        slow = FakeOAuthProvider({"code-1": GOOGLE_USER}, delay=1.0)
        handler = LoginGoogleHandler(slow, self.w.external, timeout=30.0)

        with self.assertRaises(OAuthError):
            await handler.handle(LoginGoogleCommand(code="code-1", timeout=0.01))

    async def test_cancellation_propagates(self):
        slow = FakeOAuthProvider({"code-1": GOOGLE_USER}, delay=10.0)
        handler = LoginGoogleHandler(slow, self.w.external)

        task = asyncio.ensure_future(handler.handle(LoginGoogleCommand(code="code-1")))
        await asyncio.sleep(0.01)
        task.cancel()

        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertEqual(self.w.users.store, {})
        self.assertEqual(self.w.sessions.store, {})


class TestRedirectGoogle(unittest.TestCase):

    def test_url_carries_issued_state(self):
        w = Wiring()
        url = RedirectGoogleHandler(w.oauth, w.state_store).handle()

        self.assertEqual(len(w.state_store.states), 1)
        state = next(iter(w.state_store.states))
        self.assertIn(f"state={state}", url)


class TestLoginSocial(unittest.TestCase):

    def setUp(self):
        self.w = Wiring()

    def test_creates_user_for_new_identity(self):
        result = self.w.social.handle(LoginSocialCommand("github", "gh-1", "dev@example.com", name="Dev"))

        user = self.w.users.get_by_provider("github", "gh-1")
        self.assertEqual(user.id, result.user_id)
        self.assertEqual(user.profile.name, "Dev")

    def test_same_identity_resolves_same_user(self):
        first = self.w.social.handle(LoginSocialCommand("github", "gh-1", "dev@example.com"))
        second = self.w.social.handle(LoginSocialCommand("GitHub", "gh-1", "dev@example.com"))

        self.assertEqual(first.user_id, second.user_id)
        self.assertEqual(len(self.w.providers.store), 1)

    def test_signs_with_shared_token_service(self):
        result = self.w.social.handle(LoginSocialCommand("kakao", "k-1", "k@example.com"))
        claims = self.w.tokens.verify_access_token(result.access_token)
        self.assertEqual(claims.sub, result.user_id)

    def test_rejects_password_provider(self):
        with self.assertRaises(AuthenticationError):
            self.w.social.handle(LoginSocialCommand("password", "x@example.com", "x@example.com"))

    def test_rejects_missing_provider_id(self):
        with self.assertRaises(AuthenticationError):
            self.w.social.handle(LoginSocialCommand("github", "", "dev@example.com"))

    def test_rejects_malformed_email(self):
        with self.assertRaises(ValidationError):
            self.w.social.handle(LoginSocialCommand("github", "gh-1", "not-an-email"))

    def test_storage_failure_maps_to_creating_user(self):
        users = MagicMock(wraps=self.w.users)
        users.create_with_provider.side_effect = PersistenceError()
        self.w.external.user_repo = users

        with self.assertRaises(PersistenceError) as ctx:
            self.w.social.handle(LoginSocialCommand("github", "gh-1", "dev@example.com"))

        self.assertEqual(ctx.exception.kind, ErrorKind.CREATING_USER)
        self.assertEqual(self.w.sessions.store, {})


class TestExternalLoginRaces(unittest.TestCase):
    """A concurrent login that wins the create race must not fail the loser."""

    def setUp(self):
        self.w = Wiring()

    def test_create_conflict_resolves_to_winner(self):
        winner = self.w.social.handle(LoginSocialCommand("github", "gh-1", "dev@example.com"))

        # Simulate the loser's stale pre-check: both lookups missed
        users = MagicMock(wraps=self.w.users)
        users.get_by_provider.side_effect = [None, self.w.users.get_by_provider("github", "gh-1")]
        users.get_by_email.side_effect = [None]
        users.create_with_provider.side_effect = DuplicateError()
        self.w.external.user_repo = users

        result = self.w.social.handle(LoginSocialCommand("github", "gh-1", "dev@example.com"))

        self.assertEqual(result.user_id, winner.user_id)
        self.assertEqual(len(self.w.users.store), 1)

    def test_profile_conflict_is_ignored(self):
        existing = self.w.register.handle(RegisterUserCommand("dev@example.com", "Valid1Pass!"))
        profiles = MagicMock()
        profiles.create.side_effect = DuplicateError()
        profiles.get_by_user_id.return_value = UserProfile(existing.id, "Concurrent")
        self.w.external.profile_repo = profiles

        result = self.w.social.handle(LoginSocialCommand("github", "gh-1", "dev@example.com", name="Dev"))

        self.assertEqual(result.user_id, existing.id)
