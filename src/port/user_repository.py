from typing import Protocol

from domain.model.user import User, UserProfile, UserProvider


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Writes raise DuplicateError on a uniqueness conflict (email) and
    PersistenceError on any other storage failure.
    """
    def create(self, user: User) -> User:
        """Persist a bare user row. Return the stored User."""
        ...

    def create_with_provider(
        self,
        user: User,
        provider: UserProvider,
        profile: UserProfile | None = None,
    ) -> User:
        """Atomically persist a user with its first binding (and optional profile).

        Leaves no user row behind if the binding or profile write fails.
        """
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user (with profile) by email. Return User or None if not found."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user (with profile) by ID. Return User or None if not found."""
        ...

    def get_by_provider(self, provider: str, provider_id: str) -> User | None:
        """Find the user owning the (provider, provider_id) binding."""
        ...
