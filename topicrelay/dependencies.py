from fast_depends import inject
from redis.asyncio import Redis

from topicrelay.config import get_settings
from topicrelay.database.kvstore import KeyValueStore


class Dependencies:
    _kvstore_instance: KeyValueStore | None = None
    _redis_instance: Redis | None = None

    @classmethod
    async def initialize_redis(cls) -> None:
        """Initialize Redis connection."""
        if cls._redis_instance is None:
            settings = get_settings()
            cls._redis_instance = Redis.from_url(str(settings.redis_url))
            cls._kvstore_instance = KeyValueStore(
                cls._redis_instance, prefix=settings.kv_prefix
            )

    @classmethod
    @inject
    async def get_kvstore(cls) -> KeyValueStore:
        """
        Dependency provider for the KVStore instance.
        Redis is connected on first use.
        """
        if cls._kvstore_instance is None:
            await cls.initialize_redis()
        return cls._kvstore_instance

    @classmethod
    async def cleanup(cls) -> None:
        """Cleanup resources."""
        if cls._redis_instance:
            await cls._redis_instance.aclose()
        cls._redis_instance = None
        cls._kvstore_instance = None


# Create singleton dependencies
get_kvstore = Dependencies.get_kvstore
