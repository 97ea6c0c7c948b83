"""Unit tests for session_service module."""

import unittest
from datetime import datetime, timedelta, timezone

from domain.model.errors import AuthenticationError, ErrorKind
from domain.model.session import DeviceInfo, hash_refresh_token
from services.login_service import LoginUserCommand
from services.registration_service import RegisterUserCommand
from services.session_service import (
    CreateSessionCommand,
    CreateSessionHandler,
    LogoutCommand,
    RefreshTokenCommand,
)
from services.tests.helpers import Wiring


class TestCreateSession(unittest.TestCase):

    def setUp(self):
        self.w = Wiring()
        self.handler = CreateSessionHandler(self.w.sessions)

    def test_persists_hashed_token(self):
        expires_at = datetime.now(timezone.utc) + timedelta(days=1)
        session = self.handler.handle(CreateSessionCommand(
            user_id="u1",
            refresh_token="refresh-1",
            device=DeviceInfo(user_agent="ua", ip_address="1.2.3.4"),
            expires_at=expires_at,
        ))

        stored = self.w.sessions.find_by_refresh_token_hash(hash_refresh_token("refresh-1"))
        self.assertEqual(stored.id, session.id)
        self.assertEqual(stored.expires_at, expires_at)
        self.assertEqual(stored.ip_address, "1.2.3.4")

    def test_no_expiry_default(self):
        session = self.handler.handle(CreateSessionCommand(user_id="u1", refresh_token="r"))
        self.assertIsNone(session.expires_at)
        self.assertTrue(session.is_valid())


class _LoggedIn(unittest.TestCase):

    def setUp(self):
        self.w = Wiring()
        self.user = self.w.register.handle(RegisterUserCommand("a@example.com", "Valid1Pass!"))
        self.result = self.w.login.handle(LoginUserCommand("a@example.com", "Valid1Pass!"))


class TestRefreshToken(_LoggedIn):

    def test_rotation_revokes_old_session(self):
        rotated = self.w.refresh.handle(RefreshTokenCommand(self.result.refresh_token))

        self.assertNotEqual(rotated.refresh_token, self.result.refresh_token)
        self.assertNotEqual(rotated.session.id, self.result.session.id)
        self.assertEqual(rotated.user_id, self.user.id)
        self.assertTrue(self.w.sessions.store[self.result.session.id].is_revoked)
        self.assertTrue(self.w.sessions.store[rotated.session.id].is_valid())

    def test_reusing_old_token_fails(self):
        self.w.refresh.handle(RefreshTokenCommand(self.result.refresh_token))

        with self.assertRaises(AuthenticationError) as ctx:
            self.w.refresh.handle(RefreshTokenCommand(self.result.refresh_token))

        self.assertEqual(ctx.exception.kind, ErrorKind.INVALID_REFRESH_TOKEN)

    def test_unknown_token(self):
        with self.assertRaises(AuthenticationError):
            self.w.refresh.handle(RefreshTokenCommand("never-issued"))

    def test_empty_token(self):
        with self.assertRaises(AuthenticationError):
            self.w.refresh.handle(RefreshTokenCommand(""))

    def test_expired_session(self):
        self.w.sessions.store[self.result.session.id].expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)

        with self.assertRaises(AuthenticationError):
            self.w.refresh.handle(RefreshTokenCommand(self.result.refresh_token))

    def test_new_access_token_names_new_session(self):
        rotated = self.w.refresh.handle(RefreshTokenCommand(self.result.refresh_token))
        claims = self.w.tokens.verify_access_token(rotated.access_token)
        self.assertEqual(claims.sid, rotated.session.id)


class TestLogout(_LoggedIn):

    def test_logout_revokes_session(self):
        self.w.logout.handle(LogoutCommand(self.result.refresh_token))

        self.assertTrue(self.w.sessions.store[self.result.session.id].is_revoked)
        with self.assertRaises(AuthenticationError):
            self.w.refresh.handle(RefreshTokenCommand(self.result.refresh_token))

    def test_logout_twice_fails(self):
        self.w.logout.handle(LogoutCommand(self.result.refresh_token))
        with self.assertRaises(AuthenticationError) as ctx:
            self.w.logout.handle(LogoutCommand(self.result.refresh_token))
        self.assertEqual(ctx.exception.kind, ErrorKind.INVALID_REFRESH_TOKEN)


class TestListSessions(_LoggedIn):

    def test_newest_first_and_active_filter(self):
        second = self.w.login.handle(LoginUserCommand("a@example.com", "Valid1Pass!"))
        self.w.sessions.store[second.session.id].created_at += timedelta(seconds=1)
        self.w.logout.handle(LogoutCommand(self.result.refresh_token))

        sessions = self.w.list_sessions.handle(self.user.id)
        active = self.w.list_sessions.handle(self.user.id, active_only=True)

        self.assertEqual([s.id for s in sessions], [second.session.id, self.result.session.id])
        self.assertEqual([s.id for s in active], [second.session.id])

    def test_other_users_sessions_excluded(self):
        self.assertEqual(self.w.list_sessions.handle("someone-else"), [])
