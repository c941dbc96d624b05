import redis
import structlog

from appforge.errors import StorageFault

logger = structlog.get_logger(__name__)


class RedisStorage:
    """Key-value storage backed by Redis."""

    def __init__(self, redis_url: str | None = None, client: redis.Redis | None = None):
        """Initialize Redis storage.

        Args:
            redis_url: Redis connection URL, used when no client is given.
            client: Pre-built client (e.g. fakeredis in tests). Not closed by us.
        """
        if client is None and not redis_url:
            raise StorageFault("Redis URL not provided. Set APPFORGE_REDIS_URL.")
        self.redis_url = redis_url
        self._redis: redis.Redis | None = client
        self._owns_client = client is None

    def open(self) -> None:
        """Connect to Redis."""
        if self._redis is None:
            self._redis = redis.Redis.from_url(self.redis_url, decode_responses=True)
            logger.info("redis_connected", redis_url=self.redis_url)

    def close(self) -> None:
        """Close Redis connection."""
        if self._redis is not None and self._owns_client:
            self._redis.close()
            self._redis = None
            logger.info("redis_connection_closed")

    @property
    def redis(self) -> redis.Redis:
        """Get Redis client, ensuring connection."""
        if self._redis is None:
            raise StorageFault("Redis not connected. Call open() first.")
        return self._redis

    def get(self, key: str) -> str | None:
        try:
            value = self.redis.get(key)
        except redis.RedisError as e:
            raise StorageFault(f"Redis read failed: {e}") from e
        if isinstance(value, bytes):
            value = value.decode()
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self.redis.set(key, value)
        except redis.RedisError as e:
            raise StorageFault(f"Redis write failed: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self.redis.delete(key)
        except redis.RedisError as e:
            raise StorageFault(f"Redis delete failed: {e}") from e
