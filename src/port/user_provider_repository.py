from typing import Protocol

from domain.model.user import UserProvider


class UserProviderRepository(Protocol):
    """Protocol for login-method bindings, unique per (provider, provider_id)."""
    def find(self, provider: str, provider_id: str) -> UserProvider | None:
        """Return the binding for (provider, provider_id) or None."""
        ...

    def create(self, user_id: str, provider: UserProvider) -> UserProvider:
        """Bind a login method to a user. Raises DuplicateError if the pair is taken."""
        ...
