import json
from collections.abc import AsyncIterator
from typing import Any, Optional, Tuple, Union
from urllib.parse import quote, unquote

from loguru import logger
from redis.asyncio import Redis

KeyPart = Union[str, int]
Key = Tuple[KeyPart, ...]

# Cached marker for keys known to be absent
_ABSENT = object()


def encode_key(key: Key) -> str:
    """Encode a tuple key into a flat Redis key body.

    Each part gets a type tag so ``("1",)`` and ``(1,)`` stay distinct. String
    parts are percent-escaped, which keeps ``:`` and glob characters out of
    the encoded text.
    """
    if not key:
        raise ValueError("Key must have at least one part")

    parts = []
    for part in key:
        if isinstance(part, bool):
            raise TypeError("Boolean key parts are not supported")
        if isinstance(part, int):
            parts.append(f"i{part}")
        elif isinstance(part, str):
            parts.append("s" + quote(part, safe=""))
        else:
            raise TypeError(f"Unsupported key part type: {type(part).__name__}")
    return ":".join(parts)


def decode_key(raw: str) -> Key:
    """Reverse of ``encode_key``."""
    parts: list[KeyPart] = []
    for part in raw.split(":"):
        tag, body = part[:1], part[1:]
        if tag == "i":
            parts.append(int(body))
        elif tag == "s":
            parts.append(unquote(body))
        else:
            raise ValueError(f"Malformed key part: {part!r}")
    return tuple(parts)


def _sort_key(key: Key) -> tuple:
    # Strings sort before integers at the same position
    return tuple((1, part) if isinstance(part, int) else (0, part) for part in key)


class KeyValueStore:
    """Tuple-keyed JSON store on top of Redis with a local read cache"""

    def __init__(self, redis: Redis, prefix: str = "kvstore:"):
        self.redis = redis
        self.prefix = prefix  # Namespace Redis keys to avoid conflicts
        self._cache: dict[Key, Any] = {}

    def _key(self, key: Key) -> str:
        """Prefix the encoded key to namespace it"""
        return f"{self.prefix}{encode_key(key)}"

    @staticmethod
    def _decode_value(raw: Union[bytes, str, None]) -> Any:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)

    async def get(self, key: Key) -> Optional[Any]:
        """Get a value, reading Redis only on the first lookup of a key"""
        cached = self._cache.get(key)
        if cached is _ABSENT:
            return None
        if cached is not None:
            return json.loads(cached)

        raw = await self.redis.get(self._key(key))
        if raw is None:
            self._cache[key] = _ABSENT
            return None

        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        self._cache[key] = raw
        return json.loads(raw)

    async def set(self, key: Key, value: Any) -> None:
        """Set a value in the cache and in Redis"""
        if value is None:
            raise ValueError("None cannot be stored, use delete() instead")

        payload = json.dumps(value)
        self._cache[key] = payload
        await self.redis.set(self._key(key), payload)

    async def delete(self, key: Key) -> None:
        """Drop a value from the cache and from Redis"""
        self._cache.pop(key, None)
        await self.redis.delete(self._key(key))

    async def scan_items(self, prefix: Key) -> AsyncIterator[Tuple[Key, Any]]:
        """Yield ``(key, value)`` pairs for every key under ``prefix``.

        Keys are listed once when iteration starts and yielded in key order.
        Values are read straight from Redis; a key deleted after listing is
        skipped.
        """
        pattern = f"{self._key(prefix)}:*"
        keys = []
        async for raw_key in self.redis.scan_iter(match=pattern):
            if isinstance(raw_key, bytes):
                raw_key = raw_key.decode("utf-8")
            keys.append(decode_key(raw_key[len(self.prefix) :]))

        keys.sort(key=_sort_key)
        logger.debug(f"Scanning {len(keys)} keys under {prefix}")

        for key in keys:
            value = self._decode_value(await self.redis.get(self._key(key)))
            if value is None:
                continue
            yield key, value

    async def scan(self, prefix: Key) -> AsyncIterator[Any]:
        """Yield every value stored under ``prefix``"""
        async for _key, value in self.scan_items(prefix):
            yield value

    def clear_cache(self) -> None:
        """Forget everything read so far"""
        self._cache.clear()
