from typing import Protocol

from domain.model.session import TokenClaims, TokenParams


class TokenService(Protocol):
    def generate_access_token(self, params: TokenParams) -> str:
        """Sign an access token. Raises TokenError(TOKEN_GENERATION) on failure."""
        ...

    def verify_access_token(self, token: str) -> TokenClaims:
        """Verify signature and expiry. Raises TokenError(INVALID_ACCESS_TOKEN)."""
        ...

    def generate_refresh_token(self) -> str: ...
