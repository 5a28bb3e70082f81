"""Redis connection management."""

from redis import Redis

from hivqi.core.config import settings

# Redis connection instance (lazy initialized)
_redis_client: Redis | None = None


def get_redis() -> Redis:
    """Get or create Redis connection.

    Returns a Redis client configured from settings.
    Connection is lazily created on first call.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(
            settings.redis_url,
            decode_responses=True,
        )
    return _redis_client


def close_redis() -> None:
    """Close Redis connection."""
    global _redis_client
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None
