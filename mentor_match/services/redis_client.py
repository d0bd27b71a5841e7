import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.asyncio.lock import Lock
from redis.exceptions import LockError

from mentor_match.config import settings
from mentor_match.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class FastRedisClient:
    """Pooled Redis client used for short-lived coordination keys."""

    def __init__(self):
        self.pool = None
        self.client = None
        self._initialized = False

    async def initialize(self):
        """Initialize connection pool on startup"""
        if self._initialized:
            return

        try:
            self.pool = ConnectionPool.from_url(
                settings.REDIS_URL,
                max_connections=20,
                retry_on_timeout=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                health_check_interval=30,
                decode_responses=True,
            )
            self.client = redis.Redis(connection_pool=self.pool)

            result = await self.client.ping()
            logger.info("Redis ping successful", result=result)

            self._initialized = True
            logger.info("Redis client initialized successfully", max_connections=20)

        except Exception as e:
            logger.error("Failed to initialize Redis client", error=str(e))
            self._initialized = False
            raise RuntimeError("Redis initialization failed") from e

    async def close(self):
        """Clean shutdown"""
        try:
            if self.client:
                await self.client.aclose()
            if self.pool:
                await self.pool.disconnect()
            self._initialized = False
            logger.info("Redis client closed")
        except Exception as e:
            logger.error("Error closing Redis client", error=str(e))

    async def _ensure_initialized(self):
        if not self._initialized:
            logger.warning("Redis not initialized, attempting to initialize")
            await self.initialize()

    async def ping(self) -> bool:
        """Test Redis connection"""
        try:
            await self._ensure_initialized()
            return bool(await self.client.ping())
        except Exception as e:
            logger.error("Redis ping failed", error=str(e))
            return False

    async def acquire_lock(self, key: str, timeout_s: float, wait_s: float) -> Lock | None:
        """
        Acquire a named lock, waiting up to ``wait_s`` seconds.

        Returns the held lock, or None when the lock is contended past the
        wait or Redis is unreachable. Callers treat None as "proceed unlocked".
        """
        try:
            await self._ensure_initialized()
            lock = self.client.lock(key, timeout=timeout_s, blocking_timeout=wait_s)
            if await lock.acquire():
                return lock
            logger.warning("Redis lock wait timed out", key=key[:60], wait_s=wait_s)
            return None
        except Exception as e:
            logger.error("Redis lock acquire failed", key=key[:60], error=str(e))
            return None

    async def release_lock(self, lock: Lock) -> None:
        """Release a lock obtained from acquire_lock; expired locks are ignored."""
        try:
            await lock.release()
        except LockError as e:
            logger.warning("Redis lock already released or expired", error=str(e))
        except Exception as e:
            logger.error("Redis lock release failed", error=str(e))


# Global instance
fast_redis = FastRedisClient()
