"""Registration service: create a password account.

Flow: validate email → validate password → duplicate check → hash → atomic create
"""

import logging
from dataclasses import dataclass, field

from domain.model.credentials import validate_email, validate_password
from domain.model.errors import DuplicateError, ErrorKind, PersistenceError
from domain.model.user import ProviderKind, User, UserProfile, UserProvider
from port.password_encrypter import PasswordEncrypter
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisterUserCommand:
    email: str
    password: str = field(repr=False)
    name: str | None = None


class RegisterUserHandler:
    def __init__(self, user_repo: UserRepository, encrypter: PasswordEncrypter):
        self.user_repo = user_repo
        self.encrypter = encrypter

    def handle(self, cmd: RegisterUserCommand) -> User:
        """Register a new user. No token is issued.

        Returns the created User domain object.

        Raises:
            ValidationError: malformed email or weak password
            DuplicateError: EMAIL_ALREADY_EXISTS
            PersistenceError: CREATING_USER on any other storage failure
        """
        email = validate_email(cmd.email)
        validate_password(cmd.password)

        if self.user_repo.get_by_email(email):
            raise DuplicateError(ErrorKind.EMAIL_ALREADY_EXISTS)

        password_hash = self.encrypter.hash_password(cmd.password)

        user = User.create(email)
        binding = UserProvider.create(user.id, ProviderKind.PASSWORD, email, password_hash=password_hash)
        name = (cmd.name or '').strip()
        profile = UserProfile(user_id=user.id, name=name) if name else None

        try:
            user = self.user_repo.create_with_provider(user, binding, profile)
        except DuplicateError as e:
            # Lost a race with a concurrent registration for the same email
            raise DuplicateError(ErrorKind.EMAIL_ALREADY_EXISTS) from e
        except PersistenceError as e:
            raise PersistenceError(ErrorKind.CREATING_USER) from e

        logger.info("User registered", extra={"userId": user.id})
        return user
