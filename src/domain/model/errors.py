"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Every error carries an ErrorKind so callers switch on ``err.kind``
instead of comparing identities. Route handlers map kinds to HTTP
status codes.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds the identity core can report."""
    INVALID_CREDENTIALS = 'invalid_credentials'
    SOCIAL_LOGIN_ONLY = 'social_login_only'
    EMAIL_ALREADY_EXISTS = 'email_already_exists'
    INVALID_EMAIL_FORMAT = 'invalid_email_format'
    PASSWORD_TOO_SHORT = 'password_too_short'
    PASSWORD_MISSING_UPPER = 'password_missing_upper'
    PASSWORD_MISSING_LOWER = 'password_missing_lower'
    PASSWORD_MISSING_DIGIT = 'password_missing_digit'
    PASSWORD_MISSING_SYMBOL = 'password_missing_symbol'
    CREATING_USER = 'creating_user'
    TOKEN_GENERATION = 'token_generation'
    INVALID_ACCESS_TOKEN = 'invalid_access_token'
    INVALID_REFRESH_TOKEN = 'invalid_refresh_token'
    INVALID_OAUTH_CODE = 'invalid_oauth_code'
    INVALID_STATE = 'invalid_state'
    OAUTH_EXCHANGE = 'oauth_exchange'
    DUPLICATE = 'duplicate'
    NOT_FOUND = 'not_found'
    PERSISTENCE = 'persistence'


DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_CREDENTIALS: "Invalid email or password",
    ErrorKind.SOCIAL_LOGIN_ONLY: "User has no password (social login only)",
    ErrorKind.EMAIL_ALREADY_EXISTS: "Email already in use",
    ErrorKind.INVALID_EMAIL_FORMAT: "Invalid email format",
    ErrorKind.PASSWORD_TOO_SHORT: "Password must be at least 8 characters long",
    ErrorKind.PASSWORD_MISSING_UPPER: "Password must contain at least one uppercase letter",
    ErrorKind.PASSWORD_MISSING_LOWER: "Password must contain at least one lowercase letter",
    ErrorKind.PASSWORD_MISSING_DIGIT: "Password must contain at least one digit",
    ErrorKind.PASSWORD_MISSING_SYMBOL: "Password must contain at least one special character",
    ErrorKind.CREATING_USER: "Error creating user",
    ErrorKind.TOKEN_GENERATION: "Failed to generate token",
    ErrorKind.INVALID_ACCESS_TOKEN: "Invalid or expired access token",
    ErrorKind.INVALID_REFRESH_TOKEN: "Invalid or expired refresh token",
    ErrorKind.INVALID_OAUTH_CODE: "Missing or invalid authorization code",
    ErrorKind.INVALID_STATE: "Invalid or expired state",
    ErrorKind.OAUTH_EXCHANGE: "Error exchanging authorization code",
    ErrorKind.DUPLICATE: "Entity with the same unique key already exists",
    ErrorKind.NOT_FOUND: "Requested entity does not exist",
    ErrorKind.PERSISTENCE: "Storage operation failed",
}


class DomainError(Exception):
    """Base class for all domain errors."""

    default_kind: ErrorKind = ErrorKind.PERSISTENCE

    def __init__(self, kind: ErrorKind | None = None, message: str | None = None):
        self.kind = kind or self.default_kind
        self.message = message or DEFAULT_MESSAGES[self.kind]
        super().__init__(self.message)


class NotFoundError(DomainError):
    """Requested entity does not exist."""
    default_kind = ErrorKind.NOT_FOUND


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""
    default_kind = ErrorKind.DUPLICATE


class ValidationError(DomainError):
    """Input violates a business validation rule."""
    default_kind = ErrorKind.INVALID_EMAIL_FORMAT


class AuthenticationError(DomainError):
    """Caller could not be authenticated."""
    default_kind = ErrorKind.INVALID_CREDENTIALS


class SocialLoginOnlyError(AuthenticationError):
    """Password login attempted on an account that only has external bindings."""
    default_kind = ErrorKind.SOCIAL_LOGIN_ONLY


class TokenError(DomainError):
    """Access token could not be generated or verified."""
    default_kind = ErrorKind.TOKEN_GENERATION


class OAuthError(DomainError):
    """Third-party identity provider interaction failed."""
    default_kind = ErrorKind.OAUTH_EXCHANGE


class PersistenceError(DomainError):
    """Storage backend failed for a reason other than a uniqueness conflict."""
    default_kind = ErrorKind.PERSISTENCE
