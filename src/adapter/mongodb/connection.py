import logging

from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

logger = logging.getLogger(__name__)

# Suppress verbose driver-level logs
logging.getLogger('pymongo').setLevel(logging.WARNING)

_client_cache: dict[str, MongoClient] = {}
_failed_urls: set[str] = set()
_connected_urls: set[str] = set()


def reset_client() -> None:
    for client in _client_cache.values():
        client.close()
    _client_cache.clear()
    _failed_urls.clear()
    _connected_urls.clear()


def get_mongodb_client(mongo_url: str | None) -> MongoClient | None:
    """Get MongoDB client with connection caching and reconnection logic.

    Connection strategy:
    1. Return cached client if healthy (ping succeeds)
    2. If cached client fails, attempt reconnection
    3. If initial connection failed (config issue), don't retry

    Returns:
        MongoDB client or None if connection fails
    """
    if not mongo_url:
        logger.error("[MONGODB] MONGO_URL not configured.")
        return None

    cached = _client_cache.get(mongo_url)
    if cached is not None:
        try:
            cached.admin.command('ping')
            return cached
        except PyMongoError:
            _client_cache.pop(mongo_url, None)
            logger.debug("[MONGODB] Cached client failed ping, attempting reconnection...")

    if mongo_url in _failed_urls:
        return None

    try:
        client = MongoClient(
            mongo_url,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            socketTimeoutMS=30000,
            maxPoolSize=10,
            minPoolSize=0,
            maxIdleTimeMS=30000,
            waitQueueTimeoutMS=10000,
            # failures propagate to the caller instead of being retried
            retryWrites=False,
            retryReads=False,
        )
        client.admin.command('ping')
        _client_cache[mongo_url] = client
        if mongo_url not in _connected_urls:
            _connected_urls.add(mongo_url)
            logger.info("[MONGODB] Connected successfully")
        return client
    except (ConnectionFailure, PyMongoError) as e:
        # Only a never-successful URL is treated as a configuration problem
        if mongo_url not in _connected_urls:
            logger.error(f"[MONGODB] Initial connection failed: {str(e)[:200]}")
            _failed_urls.add(mongo_url)
        return None
