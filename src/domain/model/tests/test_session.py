"""Tests for the Session domain model."""

import unittest
from datetime import datetime, timedelta, timezone

from domain.model.session import DeviceInfo, Session, hash_refresh_token


class TestSessionCreate(unittest.TestCase):

    def test_stores_hash_not_token(self):
        session = Session.create("user-1", "raw-token")
        self.assertEqual(session.refresh_token_hash, hash_refresh_token("raw-token"))
        self.assertNotEqual(session.refresh_token_hash, "raw-token")
        self.assertEqual(len(session.refresh_token_hash), 64)

    def test_copies_device_info(self):
        session = Session.create("user-1", "t", DeviceInfo(user_agent="curl/8", ip_address="10.0.0.1"))
        self.assertEqual(session.user_agent, "curl/8")
        self.assertEqual(session.ip_address, "10.0.0.1")

    def test_unique_ids(self):
        self.assertNotEqual(Session.create("u", "a").id, Session.create("u", "b").id)


class TestSessionValidity(unittest.TestCase):

    def test_past_expiry_is_expired(self):
        session = Session.create("u", "t", expires_at=datetime.now(timezone.utc) - timedelta(seconds=1))
        self.assertTrue(session.is_expired())
        self.assertFalse(session.is_valid())

    def test_future_expiry_is_valid(self):
        session = Session.create("u", "t", expires_at=datetime.now(timezone.utc) + timedelta(hours=1))
        self.assertFalse(session.is_expired())
        self.assertTrue(session.is_valid())

    def test_expiry_instant_is_expired(self):
        expires_at = datetime(2030, 1, 1, tzinfo=timezone.utc)
        session = Session.create("u", "t", expires_at=expires_at)
        self.assertTrue(session.is_expired(now=expires_at))

    def test_naive_expiry_treated_as_utc(self):
        session = Session.create("u", "t", expires_at=datetime(2030, 1, 1))
        self.assertFalse(session.is_expired(now=datetime(2029, 12, 31, tzinfo=timezone.utc)))
        self.assertTrue(session.is_expired(now=datetime(2030, 1, 2, tzinfo=timezone.utc)))

    def test_no_expiry_never_expires(self):
        session = Session.create("u", "t")
        self.assertTrue(session.is_valid(now=datetime(2999, 1, 1, tzinfo=timezone.utc)))

    def test_revoked_is_invalid(self):
        session = Session.create("u", "t", expires_at=datetime.now(timezone.utc) + timedelta(hours=1))
        session.revoke()
        self.assertTrue(session.is_revoked)
        self.assertFalse(session.is_valid())

    def test_revoke_keeps_first_timestamp(self):
        session = Session.create("u", "t")
        first = datetime(2030, 1, 1, tzinfo=timezone.utc)
        session.revoke(first)
        session.revoke(first + timedelta(days=1))
        self.assertEqual(session.revoked_at, first)
