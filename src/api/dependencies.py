"""FastAPI dependency providers.

Adapters and handlers are built per request from the AuthConfig stored on
app.state; tests swap any of them through app.dependency_overrides.
"""

from fastapi import Depends, HTTPException, Request

from adapter.external.google_oauth import GoogleOAuthProvider
from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb.session_repository import MongoSessionRepository
from adapter.mongodb.user_repository import (
    MongoUserProfileRepository,
    MongoUserProviderRepository,
    MongoUserRepository,
)
from adapter.security.password_encrypter import BcryptPasswordEncrypter
from adapter.security.token_service import JwtTokenService
from port.oauth_provider import OAuthProvider
from port.oauth_state_store import OAuthStateStore
from port.password_encrypter import PasswordEncrypter
from port.session_repository import SessionRepository
from port.token_service import TokenService
from port.user_profile_repository import UserProfileRepository
from port.user_provider_repository import UserProviderRepository
from port.user_repository import UserRepository
from services.external_login_service import (
    ExternalLoginHandler,
    LoginGoogleHandler,
    RedirectGoogleHandler,
)
from services.login_service import LoginUserHandler
from services.registration_service import RegisterUserHandler
from services.session_service import (
    CreateSessionHandler,
    ListSessionsHandler,
    LogoutHandler,
    RefreshTokenHandler,
    SessionIssuer,
)
from utils.config import AuthConfig


def get_config(request: Request) -> AuthConfig:
    return request.app.state.config


def _get_db(config: AuthConfig = Depends(get_config)):
    """Get MongoDB database, raising 503 if unavailable."""
    client = get_mongodb_client(config.mongo_url)
    if client is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return client[config.database_name]


# ── Repositories ─────────────────────────────────────────


def get_user_repo(db=Depends(_get_db)) -> UserRepository:
    return MongoUserRepository(db)


def get_provider_repo(db=Depends(_get_db)) -> UserProviderRepository:
    return MongoUserProviderRepository(db)


def get_profile_repo(db=Depends(_get_db)) -> UserProfileRepository:
    return MongoUserProfileRepository(db)


def get_session_repo(db=Depends(_get_db)) -> SessionRepository:
    return MongoSessionRepository(db)


# ── Adapters ─────────────────────────────────────────────


def get_token_service(config: AuthConfig = Depends(get_config)) -> TokenService:
    return JwtTokenService(config.jwt_secret_key)


def get_password_encrypter(config: AuthConfig = Depends(get_config)) -> PasswordEncrypter:
    return BcryptPasswordEncrypter(config.bcrypt_rounds)


def get_oauth_provider(config: AuthConfig = Depends(get_config)) -> OAuthProvider:
    if not (config.google_client_id and config.google_client_secret and config.google_redirect_url):
        raise HTTPException(status_code=503, detail="Google login not configured")
    return GoogleOAuthProvider(
        client_id=config.google_client_id,
        client_secret=config.google_client_secret,
        redirect_url=config.google_redirect_url,
        timeout=config.oauth_exchange_timeout,
    )


def get_state_store(request: Request) -> OAuthStateStore:
    # one instance per app so the Redis client cache survives across requests
    return request.app.state.state_store


# ── Handlers ─────────────────────────────────────────────


def get_session_issuer(
    session_repo: SessionRepository = Depends(get_session_repo),
    token_service: TokenService = Depends(get_token_service),
    config: AuthConfig = Depends(get_config),
) -> SessionIssuer:
    return SessionIssuer(
        CreateSessionHandler(session_repo),
        token_service,
        access_token_ttl=config.access_token_ttl,
        refresh_token_ttl=config.refresh_token_ttl,
    )


def get_register_handler(
    user_repo: UserRepository = Depends(get_user_repo),
    encrypter: PasswordEncrypter = Depends(get_password_encrypter),
) -> RegisterUserHandler:
    return RegisterUserHandler(user_repo, encrypter)


def get_login_handler(
    provider_repo: UserProviderRepository = Depends(get_provider_repo),
    encrypter: PasswordEncrypter = Depends(get_password_encrypter),
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> LoginUserHandler:
    return LoginUserHandler(provider_repo, encrypter, issuer)


def get_external_login_handler(
    user_repo: UserRepository = Depends(get_user_repo),
    provider_repo: UserProviderRepository = Depends(get_provider_repo),
    profile_repo: UserProfileRepository = Depends(get_profile_repo),
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> ExternalLoginHandler:
    return ExternalLoginHandler(user_repo, provider_repo, profile_repo, issuer)


def get_redirect_google_handler(
    oauth_provider: OAuthProvider = Depends(get_oauth_provider),
    state_store: OAuthStateStore = Depends(get_state_store),
) -> RedirectGoogleHandler:
    return RedirectGoogleHandler(oauth_provider, state_store)


def get_login_google_handler(
    oauth_provider: OAuthProvider = Depends(get_oauth_provider),
    external_login: ExternalLoginHandler = Depends(get_external_login_handler),
    state_store: OAuthStateStore = Depends(get_state_store),
    config: AuthConfig = Depends(get_config),
) -> LoginGoogleHandler:
    return LoginGoogleHandler(
        oauth_provider,
        external_login,
        state_store=state_store,
        timeout=config.oauth_exchange_timeout,
    )


def get_refresh_handler(
    session_repo: SessionRepository = Depends(get_session_repo),
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> RefreshTokenHandler:
    return RefreshTokenHandler(session_repo, issuer)


def get_logout_handler(session_repo: SessionRepository = Depends(get_session_repo)) -> LogoutHandler:
    return LogoutHandler(session_repo)


def get_list_sessions_handler(session_repo: SessionRepository = Depends(get_session_repo)) -> ListSessionsHandler:
    return ListSessionsHandler(session_repo)
