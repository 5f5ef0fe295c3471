"""
Shared MongoDB client for the policy service.

All relationship lookups in one process share a single motor client and
connection pool. The client is created lazily on first use.

Usage:
    from sis_policy.database import get_shared_mongo_client

    client = get_shared_mongo_client(config.mongo_uri)
    lookup = MongoRelationshipLookup(client[config.db_name])
"""

import logging
import threading
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import (
    ConnectionFailure,
    InvalidOperation,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from ..constants import (
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
)

logger = logging.getLogger(__name__)

APP_NAME = "SIS_POLICY"

_shared_client: AsyncIOMotorClient | None = None
_client_lock = threading.Lock()


def _client_options(
    max_pool_size: int, min_pool_size: int, server_selection_timeout_ms: int
) -> dict[str, Any]:
    # Lookups are read-only point queries
    return {
        "appname": APP_NAME,
        "maxPoolSize": max_pool_size,
        "minPoolSize": min_pool_size,
        "serverSelectionTimeoutMS": server_selection_timeout_ms,
        "retryReads": True,
    }


def get_shared_mongo_client(
    mongo_uri: str,
    max_pool_size: int = DEFAULT_MAX_POOL_SIZE,
    min_pool_size: int = DEFAULT_MIN_POOL_SIZE,
    server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
) -> AsyncIOMotorClient:
    """
    Return the process-wide motor client, creating it on first call.

    Pool settings only apply to the call that creates the client.

    Args:
        mongo_uri: MongoDB connection URI
        max_pool_size: Maximum connection pool size
        min_pool_size: Minimum connection pool size
        server_selection_timeout_ms: Server selection timeout in milliseconds

    Raises:
        ValueError, TypeError: If the URI or options are rejected by the driver
    """
    global _shared_client

    with _client_lock:
        if _shared_client is None:
            options = _client_options(max_pool_size, min_pool_size, server_selection_timeout_ms)
            try:
                _shared_client = AsyncIOMotorClient(mongo_uri, **options)
            except (ValueError, TypeError) as e:
                logger.error(f"Could not create MongoDB client for policy lookups: {e}")
                raise
            logger.info(
                f"MongoDB client created (pool {min_pool_size}-{max_pool_size}, "
                f"selection timeout {server_selection_timeout_ms}ms)"
            )
        return _shared_client


async def verify_shared_client() -> bool:
    """Ping the shared client. Returns False if there is no client or no answer."""
    client = _shared_client
    if client is None:
        logger.warning("No MongoDB client to verify")
        return False

    try:
        await client.admin.command("ping")
    except (
        ConnectionFailure,
        ServerSelectionTimeoutError,
        OperationFailure,
        InvalidOperation,
    ) as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return False
    return True


def close_shared_client() -> None:
    """Close and forget the shared client. Safe to call when none exists."""
    global _shared_client

    with _client_lock:
        client, _shared_client = _shared_client, None

    if client is None:
        return
    try:
        client.close()
    except InvalidOperation as e:
        logger.warning(f"Error closing MongoDB client: {e}")
    else:
        logger.info("MongoDB client closed")
