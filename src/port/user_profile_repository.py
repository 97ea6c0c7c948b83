from typing import Protocol

from domain.model.user import UserProfile


class UserProfileRepository(Protocol):
    def create(self, user_id: str, profile: UserProfile) -> UserProfile:
        """Create the user's profile. Raises DuplicateError if one already exists."""
        ...

    def get_by_user_id(self, user_id: str) -> UserProfile | None: ...
