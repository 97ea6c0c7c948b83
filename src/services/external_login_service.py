"""External identity login: Google OAuth and trusted social assertions.

Both paths resolve the external identity to a local user the same way:
binding → email → new user, then open a session through SessionIssuer.
"""

import asyncio
import logging
from dataclasses import dataclass

from domain.model.credentials import validate_email
from domain.model.errors import (
    AuthenticationError,
    DuplicateError,
    ErrorKind,
    OAuthError,
    PersistenceError,
)
from domain.model.session import DeviceInfo, LoginResult
from domain.model.user import (
    ExternalUser,
    ProviderKind,
    User,
    UserProfile,
    UserProvider,
    provider_key,
)
from port.oauth_provider import OAuthProvider
from port.oauth_state_store import OAuthStateStore
from port.user_profile_repository import UserProfileRepository
from port.user_provider_repository import UserProviderRepository
from port.user_repository import UserRepository
from services.session_service import SessionIssuer

logger = logging.getLogger(__name__)

DEFAULT_EXCHANGE_TIMEOUT_SECONDS = 10.0


# ── Commands ─────────────────────────────────────────────


@dataclass(frozen=True)
class LoginGoogleCommand:
    code: str
    state: str | None = None
    device: DeviceInfo | None = None
    timeout: float | None = None


@dataclass(frozen=True)
class LoginSocialCommand:
    provider: str
    provider_id: str
    email: str
    name: str | None = None
    avatar_url: str | None = None
    device: DeviceInfo | None = None


# ── Shared resolution ────────────────────────────────────


class ExternalLoginHandler:
    """Resolve an external identity to a local user and open a session."""

    def __init__(
        self,
        user_repo: UserRepository,
        provider_repo: UserProviderRepository,
        profile_repo: UserProfileRepository,
        issuer: SessionIssuer,
    ):
        self.user_repo = user_repo
        self.provider_repo = provider_repo
        self.profile_repo = profile_repo
        self.issuer = issuer

    def login(self, provider: str, external_user: ExternalUser, device: DeviceInfo | None = None) -> LoginResult:
        provider = provider_key(provider)
        user = self._resolve(provider, external_user)
        result = self.issuer.issue(user.id, device)
        logger.info("User logged in", extra={"userId": user.id, "provider": provider})
        return result

    def _resolve(self, provider: str, ext: ExternalUser) -> User:
        user = self.user_repo.get_by_provider(provider, ext.id)
        if user is not None:
            return user

        user = self.user_repo.get_by_email(ext.email)
        if user is not None:
            return self._link(user, provider, ext)

        try:
            return self._create(provider, ext)
        except DuplicateError:
            # A concurrent login created the user or binding first
            return self._resolve_after_conflict(provider, ext)
        except PersistenceError as e:
            logger.error("Failed to create user from external identity", extra={"provider": provider})
            raise PersistenceError(ErrorKind.CREATING_USER) from e

    def _create(self, provider: str, ext: ExternalUser) -> User:
        user = User.create(ext.email)
        binding = UserProvider.create(user.id, provider, ext.id)
        profile = UserProfile(user.id, ext.name, ext.avatar_url) if ext.name else None
        user = self.user_repo.create_with_provider(user, binding, profile)
        logger.info("User created from external identity", extra={"userId": user.id, "provider": provider})
        return user

    def _link(self, user: User, provider: str, ext: ExternalUser) -> User:
        if not ext.email_verified:
            logger.warning(
                "Linking external identity with unverified email",
                extra={"userId": user.id, "provider": provider},
            )
        try:
            self.provider_repo.create(user.id, UserProvider.create(user.id, provider, ext.id))
        except DuplicateError:
            winner = self.user_repo.get_by_provider(provider, ext.id)
            if winner is None:
                raise
            return winner
        logger.info("External identity linked", extra={"userId": user.id, "provider": provider})

        if user.profile is None and ext.name:
            try:
                user.profile = self.profile_repo.create(user.id, UserProfile(user.id, ext.name, ext.avatar_url))
            except DuplicateError:
                user.profile = self.profile_repo.get_by_user_id(user.id)
        return user

    def _resolve_after_conflict(self, provider: str, ext: ExternalUser) -> User:
        user = self.user_repo.get_by_provider(provider, ext.id)
        if user is not None:
            return user
        user = self.user_repo.get_by_email(ext.email)
        if user is None:
            raise PersistenceError(ErrorKind.CREATING_USER)
        return self._link(user, provider, ext)


# ── Google ───────────────────────────────────────────────


class RedirectGoogleHandler:
    def __init__(self, oauth_provider: OAuthProvider, state_store: OAuthStateStore):
        self.oauth_provider = oauth_provider
        self.state_store = state_store

    def handle(self) -> str:
        """Return the consent-screen URL carrying a fresh one-shot state."""
        return self.oauth_provider.get_auth_url(self.state_store.issue())


class LoginGoogleHandler:
    def __init__(
        self,
        oauth_provider: OAuthProvider,
        external_login: ExternalLoginHandler,
        state_store: OAuthStateStore | None = None,
        timeout: float = DEFAULT_EXCHANGE_TIMEOUT_SECONDS,
    ):
        self.oauth_provider = oauth_provider
        self.external_login = external_login
        self.state_store = state_store
        self.timeout = timeout

    async def handle(self, cmd: LoginGoogleCommand) -> LoginResult:
        """Complete the Google callback.

        Cancellation of the awaiting task propagates unchanged.

        Raises:
            OAuthError: INVALID_OAUTH_CODE, INVALID_STATE or OAUTH_EXCHANGE
        """
        if not cmd.code:
            raise OAuthError(ErrorKind.INVALID_OAUTH_CODE)
        if self.state_store is not None and not self.state_store.consume(cmd.state or ''):
            raise OAuthError(ErrorKind.INVALID_STATE)

        timeout = cmd.timeout or self.timeout
        try:
            external_user = await asyncio.wait_for(self.oauth_provider.exchange_code(cmd.code), timeout)
        except asyncio.TimeoutError as e:
            logger.warning("Google code exchange timed out", extra={"timeoutSeconds": timeout})
            raise OAuthError(ErrorKind.OAUTH_EXCHANGE) from e

        return self.external_login.login(ProviderKind.GOOGLE, external_user, cmd.device)


# ── Generic social ───────────────────────────────────────


class LoginSocialHandler:
    """Log in with an identity already asserted by a trusted upstream provider."""

    def __init__(self, external_login: ExternalLoginHandler):
        self.external_login = external_login

    def handle(self, cmd: LoginSocialCommand) -> LoginResult:
        provider = provider_key(cmd.provider or '').strip().lower()
        if not provider or provider == ProviderKind.PASSWORD.value or not cmd.provider_id:
            raise AuthenticationError(ErrorKind.INVALID_CREDENTIALS)
        email = validate_email(cmd.email)

        external_user = ExternalUser(
            id=cmd.provider_id,
            email=email,
            name=cmd.name or '',
            avatar_url=cmd.avatar_url,
            # the upstream provider vouched for this identity
            email_verified=True,
        )
        return self.external_login.login(provider, external_user, cmd.device)
