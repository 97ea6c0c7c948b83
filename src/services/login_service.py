"""Password login service.

Uses constant-time comparison and doesn't reveal whether the email exists.
"""

import logging
from dataclasses import dataclass, field

from domain.model.credentials import normalize_email
from domain.model.errors import AuthenticationError, ErrorKind, SocialLoginOnlyError
from domain.model.session import DeviceInfo, LoginResult
from domain.model.user import ProviderKind
from port.password_encrypter import PasswordEncrypter
from port.user_provider_repository import UserProviderRepository
from services.session_service import SessionIssuer

logger = logging.getLogger(__name__)

_DUMMY_PASSWORD = 'not-a-real-password'


@dataclass(frozen=True)
class LoginUserCommand:
    email: str
    password: str = field(repr=False)
    device: DeviceInfo | None = None


class LoginUserHandler:
    def __init__(
        self,
        provider_repo: UserProviderRepository,
        encrypter: PasswordEncrypter,
        issuer: SessionIssuer,
    ):
        self.provider_repo = provider_repo
        self.encrypter = encrypter
        self.issuer = issuer
        self._dummy_hash: str | None = None

    def handle(self, cmd: LoginUserCommand) -> LoginResult:
        """Authenticate by email and password and open a session.

        Raises:
            AuthenticationError: INVALID_CREDENTIALS (deliberately vague)
            SocialLoginOnlyError: account has no password binding hash
        """
        email = normalize_email(cmd.email)
        if not email or not cmd.password:
            raise AuthenticationError(ErrorKind.INVALID_CREDENTIALS)

        binding = self.provider_repo.find(ProviderKind.PASSWORD, email)
        if binding is None:
            # Spend a bcrypt check anyway so unknown emails take as long as wrong passwords
            self.encrypter.check_password(self._get_dummy_hash(), cmd.password)
            raise AuthenticationError(ErrorKind.INVALID_CREDENTIALS)

        if not binding.has_password:
            logger.info("Password login on social-only account", extra={"userId": binding.user_id})
            raise SocialLoginOnlyError()

        if not self.encrypter.check_password(binding.password_hash, cmd.password):
            logger.info("Password login failed", extra={"userId": binding.user_id})
            raise AuthenticationError(ErrorKind.INVALID_CREDENTIALS)

        result = self.issuer.issue(binding.user_id, cmd.device)
        logger.info("User logged in", extra={"userId": binding.user_id, "provider": ProviderKind.PASSWORD.value})
        return result

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.encrypter.hash_password(_DUMMY_PASSWORD)
        return self._dummy_hash
