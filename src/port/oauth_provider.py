"""OAuth provider port: outbound interface for third-party identity providers."""

from typing import Protocol

from domain.model.user import ExternalUser


class OAuthProvider(Protocol):
    """Port for an authorization-code identity provider.

    exchange_code() is the only network-bound call in the login flow;
    it must stop as soon as the awaiting task is cancelled.
    """

    def get_auth_url(self, state: str) -> str: ...

    async def exchange_code(self, code: str) -> ExternalUser:
        """Exchange an authorization code for the provider's user record.

        Raises:
            OAuthError: the provider rejected the code or returned garbage
        """
        ...
