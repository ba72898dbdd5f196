"""
Redis client holder for advisory channel locks.
"""

import threading

from loguru import logger
from redis.asyncio import Redis

from ..config import config
from .mongo import hide_password

_client: Redis | None = None
_client_lock = threading.Lock()


def get_redis_client() -> Redis:
    """Get the process-wide async Redis client, creating it on first use."""
    global _client
    with _client_lock:
        if _client is None:
            url = config.get_redis_url()
            logger.info("Open Redis client: {}", hide_password(url))
            _client = Redis.from_url(url, decode_responses=True)
        return _client


async def close_redis_client() -> None:
    global _client
    with _client_lock:
        client, _client = _client, None
    if client is not None:
        await client.aclose()
        logger.info("Closed Redis client")
