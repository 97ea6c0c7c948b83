"""Health check endpoint."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from adapter.mongodb.connection import get_mongodb_client
from api.dependencies import get_config, get_state_store
from port.oauth_state_store import OAuthStateStore
from utils.config import AuthConfig

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(
    config: AuthConfig = Depends(get_config),
    state_store: OAuthStateStore = Depends(get_state_store),
):
    """Health check endpoint with dependency status."""
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        "services": {}
    }

    overall_healthy = True

    # Check Redis connection (OAuth state store)
    ping = getattr(state_store, "ping", None)
    if ping is not None and ping():
        health_status["services"]["redis"] = {
            "status": "healthy",
            "message": "Connection successful"
        }
    else:
        health_status["services"]["redis"] = {
            "status": "unhealthy",
            "message": "Connection failed or not configured"
        }
        overall_healthy = False

    # Check MongoDB connection
    try:
        mongo_client = get_mongodb_client(config.mongo_url)
        if mongo_client:
            mongo_client.admin.command('ping')
            health_status["services"]["mongodb"] = {
                "status": "healthy",
                "message": "Connection successful"
            }
        else:
            health_status["services"]["mongodb"] = {
                "status": "unhealthy",
                "message": "Connection failed or not configured"
            }
            overall_healthy = False
    except PyMongoError as e:
        health_status["services"]["mongodb"] = {
            "status": "unhealthy",
            "message": f"Connection error: {str(e)[:200]}"
        }
        overall_healthy = False

    if not overall_healthy:
        health_status["status"] = "degraded"

    status_code = status.HTTP_200_OK if overall_healthy else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        content=health_status,
        status_code=status_code
    )
