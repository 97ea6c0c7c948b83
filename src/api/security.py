"""Bearer-token authentication dependencies."""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.dependencies import get_token_service, get_user_repo
from domain.model.errors import AuthenticationError, ErrorKind
from domain.model.session import TokenClaims
from domain.model.user import User
from port.token_service import TokenService
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_service: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """Verified claims of the bearer token. Raises 401 if missing or invalid."""
    if not credentials:
        raise AuthenticationError(ErrorKind.INVALID_ACCESS_TOKEN)
    return token_service.verify_access_token(credentials.credentials)


def get_current_user_required(
    claims: TokenClaims = Depends(get_current_claims),
    user_repo: UserRepository = Depends(get_user_repo),
) -> User:
    """Get current authenticated user (required). Raises 401 if not authenticated."""
    user = user_repo.get_by_id(claims.sub)
    if user is None:
        logger.warning("Token subject no longer exists", extra={"userId": claims.sub})
        raise AuthenticationError(ErrorKind.INVALID_ACCESS_TOKEN)
    return user
