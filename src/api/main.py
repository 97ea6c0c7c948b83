"""FastAPI application entry point.

Run with: uvicorn api.main:create_app --factory
"""

import logging
import os
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb.indexes import ensure_all_indexes
from adapter.state.oauth_state_store import RedisOAuthStateStore
from api.errors import register_exception_handlers
from api.routes import auth, health
from utils.config import AuthConfig, load_config
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "Identity API"
DISTRIBUTION_NAME = "identity-core"

try:
    VERSION = version(DISTRIBUTION_NAME)
except PackageNotFoundError:
    VERSION = "0.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    # Startup: ensure MongoDB indexes (the unique ones back the duplicate checks)
    config: AuthConfig = app.state.config
    client = get_mongodb_client(config.mongo_url)
    if client:
        if ensure_all_indexes(client[config.database_name]):
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create some MongoDB indexes")
    else:
        logger.warning("MongoDB unavailable, skipping index creation")

    yield  # App runs here


def _cors_settings(cors_origins_env: str) -> tuple[str | list[str], bool]:
    """Parse CORS_ORIGINS into (origins, allow_credentials).

    Browsers reject credentials with a wildcard origin, and the refresh
    cookie needs credentials, so only an explicit origin list enables them.
    """
    if cors_origins_env == "*":
        logger.warning(
            "CORS configured with wildcard origin ('*'). "
            "For production, set CORS_ORIGINS to specific domains (e.g., 'https://app.example.com')"
        )
        return ["*"], False
    origins = [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
    logger.info(f"CORS configured with specific origins: {origins}")
    return origins, True


def create_app(config: AuthConfig | None = None) -> FastAPI:
    """Build the application. Loads configuration from the environment unless given one."""
    setup_structured_logging(SERVICE_NAME)
    config = config or load_config()

    app = FastAPI(
        title=SERVICE_NAME,
        description="Identity and session service - registration, login and token issuance",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.state_store = RedisOAuthStateStore(config.redis_url, ttl=config.oauth_state_ttl)

    origins, allow_credentials = _cors_settings(config.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(health.router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": SERVICE_NAME,
            "version": VERSION,
            "status": "running"
        }

    return app


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    # Application logs (via our structured logging) replace uvicorn's access log
    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=port,
        access_log=False,
    )
