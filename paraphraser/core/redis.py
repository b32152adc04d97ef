from redis.asyncio import Redis

from paraphraser.core.config import Settings, get_settings
from paraphraser.core.logging import get_logger

logger = get_logger(__name__)

_redis: Redis | None = None


def build_redis(settings: Settings) -> Redis:
    """Client used by the rate limiter, with socket timeouts from settings."""
    timeout = settings.redis_socket_timeout_seconds
    return Redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
        health_check_interval=30,
    )


async def get_redis() -> Redis:
    global _redis
    if _redis is None:
        settings = get_settings()
        _redis = build_redis(settings)
        logger.info("redis_client_created", socket_timeout=settings.redis_socket_timeout_seconds)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is None:
        return
    await _redis.aclose()
    _redis = None
    logger.info("redis_client_closed")
