"""Tests for the in-memory user repositories."""

import unittest

from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import DuplicateError, ErrorKind, NotFoundError
from domain.model.user import ProviderKind, User, UserProfile, UserProvider


def _new_user(email="a@example.com"):
    user = User.create(email)
    binding = UserProvider.create(user.id, ProviderKind.PASSWORD, email, password_hash="h")
    return user, binding


class TestFakeUserRepository(unittest.TestCase):

    def setUp(self):
        self.repo = FakeUserRepository()

    def test_create_with_provider_writes_all_rows(self):
        user, binding = _new_user()
        self.repo.create_with_provider(user, binding, UserProfile(user.id, "Ann"))

        self.assertEqual(len(self.repo.store), 1)
        self.assertEqual(len(self.repo.providers.store), 1)
        self.assertEqual(self.repo.get_by_id(user.id).profile.name, "Ann")

    def test_duplicate_email_rejected(self):
        user, binding = _new_user()
        self.repo.create_with_provider(user, binding)
        other, other_binding = _new_user()

        with self.assertRaises(DuplicateError) as ctx:
            self.repo.create_with_provider(other, other_binding)

        self.assertEqual(ctx.exception.kind, ErrorKind.EMAIL_ALREADY_EXISTS)
        self.assertEqual(len(self.repo.store), 1)

    def test_duplicate_binding_leaves_no_user(self):
        user, binding = _new_user("a@example.com")
        self.repo.create_with_provider(user, binding)
        other = User.create("b@example.com")
        clash = UserProvider.create(other.id, ProviderKind.PASSWORD, "a@example.com")

        with self.assertRaises(DuplicateError):
            self.repo.create_with_provider(other, clash)

        self.assertIsNone(self.repo.get_by_email("b@example.com"))

    def test_get_by_provider(self):
        user = User.create("g@example.com")
        self.repo.create_with_provider(user, UserProvider.create(user.id, ProviderKind.GOOGLE, "g-1"))

        self.assertEqual(self.repo.get_by_provider("google", "g-1").id, user.id)
        self.assertIsNone(self.repo.get_by_provider("google", "g-2"))

    def test_get_by_provider_orphaned_binding(self):
        self.repo.providers.create("ghost", UserProvider.create("ghost", "github", "gh-1"))
        with self.assertRaises(NotFoundError):
            self.repo.get_by_provider("github", "gh-1")

    def test_reads_return_copies(self):
        user, binding = _new_user()
        self.repo.create_with_provider(user, binding)

        loaded = self.repo.get_by_id(user.id)
        loaded.email = "changed@example.com"

        self.assertEqual(self.repo.get_by_id(user.id).email, "a@example.com")

    def test_second_profile_rejected(self):
        self.repo.profiles.create("u1", UserProfile("u1", "One"))
        with self.assertRaises(DuplicateError):
            self.repo.profiles.create("u1", UserProfile("u1", "Two"))
