from typing import Protocol


class OAuthStateStore(Protocol):
    """One-shot anti-CSRF state tokens for the OAuth redirect round trip."""
    def issue(self) -> str:
        """Generate and remember a fresh random state."""
        ...

    def consume(self, state: str) -> bool:
        """Forget the state and return True if it was known and unexpired."""
        ...
