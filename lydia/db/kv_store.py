"""
Client-scoped key-value string stores backing the cart.

Each shopper session gets its own store; keys are plain strings and values are
serialized strings. No expiry, no atomicity beyond a single set/delete call.
"""
from typing import Dict, Optional, Protocol

import structlog
from upstash_redis import Redis

from lydia.core.config import settings

logger = structlog.get_logger()


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class RedisKeyValueStore:
    def __init__(self, client: Redis, namespace: str):
        self.client = client
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[str]:
        value = self.client.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        self.client.set(self._key(key), value)

    def delete(self, key: str) -> None:
        self.client.delete(self._key(key))


class InMemoryCartStorage:
    """Hands out one in-process store per cart session."""

    def __init__(self):
        self._sessions: Dict[str, InMemoryKeyValueStore] = {}

    def for_session(self, session_id: str) -> InMemoryKeyValueStore:
        if session_id not in self._sessions:
            self._sessions[session_id] = InMemoryKeyValueStore()
        return self._sessions[session_id]


class RedisCartStorage:
    def __init__(self, client: Redis, prefix: str = "lydia:session"):
        self.client = client
        self.prefix = prefix

    def for_session(self, session_id: str) -> RedisKeyValueStore:
        return RedisKeyValueStore(self.client, f"{self.prefix}:{session_id}")


def build_cart_storage():
    if settings.CART_BACKEND == "redis":
        logger.info("cart_storage_backend", backend="redis")
        if not settings.UPSTASH_REDIS_REST_URL or not settings.UPSTASH_REDIS_REST_TOKEN:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        client = Redis(url=settings.UPSTASH_REDIS_REST_URL, token=settings.UPSTASH_REDIS_REST_TOKEN)
        return RedisCartStorage(client)
    logger.info("cart_storage_backend", backend="memory")
    return InMemoryCartStorage()
