"""In-memory implementations of the user-side repositories for testing.

The three fakes share state the way tables in one database would:
FakeUserRepository owns a FakeUserProviderRepository and a
FakeUserProfileRepository so that joins (get_by_provider, profile
loading) and the atomic create_with_provider behave like the real store.
"""

import copy

from domain.model.errors import DuplicateError, ErrorKind, NotFoundError
from domain.model.user import User, UserProfile, UserProvider, provider_key


class FakeUserProviderRepository:
    def __init__(self):
        self.store: dict[tuple[str, str], UserProvider] = {}

    def find(self, provider: str, provider_id: str) -> UserProvider | None:
        return self.store.get((provider_key(provider), provider_id))

    def create(self, user_id: str, provider: UserProvider) -> UserProvider:
        key = (provider_key(provider.provider), provider.provider_id)
        if key in self.store:
            raise DuplicateError(message=f"Provider binding already exists: {key[0]}")
        provider.user_id = user_id
        self.store[key] = provider
        return provider

    def list_by_user(self, user_id: str) -> list[UserProvider]:
        return [p for p in self.store.values() if p.user_id == user_id]


class FakeUserProfileRepository:
    def __init__(self):
        self.store: dict[str, UserProfile] = {}

    def create(self, user_id: str, profile: UserProfile) -> UserProfile:
        if user_id in self.store:
            raise DuplicateError(message="Profile already exists")
        profile.user_id = user_id
        self.store[user_id] = profile
        return profile

    def get_by_user_id(self, user_id: str) -> UserProfile | None:
        return self.store.get(user_id)


class FakeUserRepository:
    def __init__(
        self,
        providers: FakeUserProviderRepository | None = None,
        profiles: FakeUserProfileRepository | None = None,
    ):
        self.store: dict[str, User] = {}
        self.providers = providers or FakeUserProviderRepository()
        self.profiles = profiles or FakeUserProfileRepository()

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> User:
        if self._email_taken(user.email):
            raise DuplicateError(ErrorKind.EMAIL_ALREADY_EXISTS)
        self.store[user.id] = copy.copy(user)
        return user

    def create_with_provider(
        self,
        user: User,
        provider: UserProvider,
        profile: UserProfile | None = None,
    ) -> User:
        # Check every constraint before writing anything so a failure leaves no rows
        if self._email_taken(user.email):
            raise DuplicateError(ErrorKind.EMAIL_ALREADY_EXISTS)
        if self.providers.find(provider.provider, provider.provider_id):
            raise DuplicateError(message="Provider binding already exists")

        self.store[user.id] = copy.copy(user)
        self.providers.create(user.id, provider)
        if profile is not None:
            self.profiles.create(user.id, profile)
            user.profile = profile
        return user

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return self._hydrate(user)
        return None

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return self._hydrate(user) if user else None

    def get_by_provider(self, provider: str, provider_id: str) -> User | None:
        binding = self.providers.find(provider, provider_id)
        if binding is None:
            return None
        user = self.get_by_id(binding.user_id)
        if user is None:
            raise NotFoundError(message="Provider binding references a missing user")
        return user

    # ── helpers ──────────────────────────────────────────────

    def _email_taken(self, email: str) -> bool:
        return any(u.email == email for u in self.store.values())

    def _hydrate(self, user: User) -> User:
        result = copy.copy(user)
        result.profile = self.profiles.get_by_user_id(user.id)
        return result
