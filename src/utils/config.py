"""Application configuration.

Loaded once by the app factory and passed explicitly to every component
that needs it; nothing else reads the environment.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta

from dotenv import load_dotenv

BCRYPT_MIN_ROUNDS = 4


@dataclass(frozen=True)
class AuthConfig:
    """Immutable process configuration."""
    jwt_secret_key: str = field(repr=False)
    access_token_ttl: timedelta = timedelta(hours=24)
    refresh_token_ttl: timedelta = timedelta(days=30)
    bcrypt_rounds: int = 12

    mongo_url: str | None = None
    database_name: str = 'identity'
    redis_url: str | None = None

    google_client_id: str | None = None
    google_client_secret: str | None = field(default=None, repr=False)
    google_redirect_url: str | None = None
    oauth_exchange_timeout: float = 10.0
    oauth_state_ttl: timedelta = timedelta(minutes=2)

    refresh_cookie_name: str = 'refresh_token'
    refresh_cookie_path: str = '/auth'
    cookie_secure: bool = True
    cors_origins: str = '*'

    def __post_init__(self) -> None:
        if not self.jwt_secret_key:
            raise ValueError(
                "JWT_SECRET_KEY environment variable is required. "
                "Generate a secure key with: openssl rand -hex 32"
            )
        if self.bcrypt_rounds < BCRYPT_MIN_ROUNDS:
            raise ValueError(f"BCRYPT_ROUNDS must be at least {BCRYPT_MIN_ROUNDS}")


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {key}: expected integer, got {raw!r}") from None


def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {key}: expected number, got {raw!r}") from None


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or raw == '':
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


def load_config() -> AuthConfig:
    """Build AuthConfig from the environment (and a .env file if present)."""
    load_dotenv()

    return AuthConfig(
        jwt_secret_key=os.getenv('JWT_SECRET_KEY', ''),
        access_token_ttl=timedelta(hours=_env_int('ACCESS_TOKEN_TTL_HOURS', 24)),
        refresh_token_ttl=timedelta(days=_env_int('REFRESH_TOKEN_TTL_DAYS', 30)),
        bcrypt_rounds=_env_int('BCRYPT_ROUNDS', 12),
        mongo_url=os.getenv('MONGO_URL') or None,
        database_name=os.getenv('MONGODB_DATABASE', 'identity'),
        redis_url=os.getenv('REDIS_URL') or None,
        google_client_id=os.getenv('GOOGLE_CLIENT_ID') or None,
        google_client_secret=os.getenv('GOOGLE_CLIENT_SECRET') or None,
        google_redirect_url=os.getenv('GOOGLE_REDIRECT_URL') or None,
        oauth_exchange_timeout=_env_float('OAUTH_EXCHANGE_TIMEOUT_SECONDS', 10.0),
        refresh_cookie_path=os.getenv('REFRESH_COOKIE_PATH', '/auth'),
        cookie_secure=_env_bool('COOKIE_SECURE', True),
        cors_origins=os.getenv('CORS_ORIGINS', '*'),
    )
