"""JWT (HS256) implementation of TokenService using python-jose."""

import logging
import secrets
from datetime import datetime, timezone

from jose import JWTError, jwt

from domain.model.errors import ErrorKind, TokenError
from domain.model.session import TokenClaims, TokenParams

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
REFRESH_TOKEN_BYTES = 32


class JwtTokenService:
    """Signs and verifies access tokens with one symmetric key.

    The key is the UTF-8 encoding of the configured secret on every path.
    """

    def __init__(self, secret_key: str, algorithm: str = JWT_ALGORITHM):
        self._secret_key = secret_key
        self.algorithm = algorithm

    def generate_access_token(self, params: TokenParams) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": params.user_id,
            "iat": int(now.timestamp()),
            "exp": int((now + params.duration).timestamp()),
        }
        if params.session_id:
            payload["sid"] = params.session_id

        try:
            return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)
        except JWTError as e:
            logger.error("Access token signing failed", extra={"userId": params.user_id, "error": str(e)})
            raise TokenError(ErrorKind.TOKEN_GENERATION) from e

    def verify_access_token(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug(f"JWT verification failed: {e}")
            raise TokenError(ErrorKind.INVALID_ACCESS_TOKEN) from e

        sub = payload.get("sub")
        exp = payload.get("exp")
        if not sub or exp is None:
            raise TokenError(ErrorKind.INVALID_ACCESS_TOKEN)

        return TokenClaims(
            sub=sub,
            exp=int(exp),
            iat=int(payload.get("iat", 0)),
            sid=payload.get("sid"),
        )

    def generate_refresh_token(self) -> str:
        return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)
