# multicache/services/redis_cache.py
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Tuple

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from multicache.exceptions import ConnectivityError, SerializationError
from multicache.schemas.connection import ConnectionDescriptor
from .cache import Cache
from .serialization import decode, encode

logger = logging.getLogger(__name__)

# A key containing this marker is treated as a SCAN MATCH pattern by delete().
PATTERN_WILDCARD = "*"

ClientFactory = Callable[..., redis.Redis]


@contextmanager
def _store_errors(name: str, operation: str) -> Iterator[None]:
    """Re-raise redis-py connection and timeout errors as ConnectivityError."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as ex:
        raise ConnectivityError(f"Redis connection '{name}' failed on {operation}: {ex}") from ex


class RedisCache(Cache):
    """
    One Redis connection bound to a logical database and a default TTL.
    Values are stored as JSON text; reads decode them back (optionally into a typed result).
    The handle holds no per-call state, so it can be shared across threads as far as redis.Redis allows.
    """

    def __init__(self, client: redis.Redis, descriptor: ConnectionDescriptor):
        self._client = client
        self._descriptor = descriptor

    @classmethod
    def connect(
        cls, descriptor: ConnectionDescriptor, client_factory: ClientFactory = redis.Redis
    ) -> "RedisCache":
        """Open a client for the descriptor and ping it. A failed ping closes the client and raises ConnectivityError."""
        client = client_factory(
            host=descriptor.host,
            port=descriptor.port,
            db=descriptor.database,
            decode_responses=True,
        )
        handle = cls(client, descriptor)
        try:
            handle.ping()
        except ConnectivityError:
            client.close()
            raise
        logger.info(
            "Redis connection '%s' STARTED [connection: %s, address: %s, database: %s, ttl: %ss]",
            descriptor.name,
            descriptor.index,
            descriptor.address,
            descriptor.database,
            descriptor.ttl,
        )
        return handle

    @property
    def descriptor(self) -> ConnectionDescriptor:
        return self._descriptor

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def host(self) -> str:
        return self._descriptor.host

    @property
    def port(self) -> int:
        return self._descriptor.port

    @property
    def database(self) -> int:
        return self._descriptor.database

    @property
    def ttl(self) -> int:
        return self._descriptor.ttl

    @property
    def instance(self) -> redis.Redis:
        """The underlying redis-py client, for commands this wrapper does not cover."""
        return self._client

    def ping(self) -> None:
        try:
            self._client.ping()
        except redis.RedisError as ex:
            raise ConnectivityError(
                f"Redis connection '{self.name}' is offline [address: {self._descriptor.address}]: {ex}"
            ) from ex

    def set_with_ttl(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store `value` as JSON under `key`, expiring after `ttl_seconds` (0 = never)."""
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")
        try:
            payload = encode(value)
        except SerializationError as ex:
            logger.debug("Error while trying to SET cache key %s - error: %s", key, ex)
            raise
        with _store_errors(self.name, "set"):
            self._client.set(key, payload, ex=ttl_seconds or None)

    def set(self, key: str, value: Any) -> None:
        self.set_with_ttl(key, value, self.ttl)

    def get(self, key: str, as_type: Optional[Any] = None) -> Tuple[Any, bool]:
        """
        Returns (value, found).
        - Missing key: (None, False); a miss is not an error.
        - Stored value: decoded JSON, validated into `as_type` when given.
        Raises SerializationError if the stored text does not decode into the requested shape.
        """
        with _store_errors(self.name, "get"):
            raw = self._client.get(key)
        if not raw:
            return None, False
        try:
            return decode(raw, as_type), True
        except SerializationError as ex:
            logger.debug("Error while trying to GET cache value with key %s - error: %s", key, ex)
            raise

    def delete(self, key: str) -> int:
        """
        Delete one exact key, or every key matching a pattern when `key` contains '*'.
        Pattern deletes walk the keyspace with SCAN and delete keys one by one; they are not atomic,
        so keys removed before a failure stay removed. Returns the number of keys deleted.
        """
        if PATTERN_WILDCARD not in key:
            logger.debug("Deleting key [%s]", key)
            with _store_errors(self.name, "delete"):
                return self._client.delete(key)

        deleted = 0
        try:
            with _store_errors(self.name, "delete"):
                for match in self._client.scan_iter(match=key):
                    logger.debug("Deleting key [%s]", match)
                    deleted += self._client.delete(match)
        except (redis.RedisError, ConnectivityError):
            logger.debug("Error deleting pattern %s after %d key(s)", key, deleted)
            raise
        return deleted

    def close(self) -> None:
        self._client.close()

    def __repr__(self) -> str:
        return (
            f"RedisCache(name={self.name!r}, address={self._descriptor.address!r}, "
            f"database={self.database}, ttl={self.ttl})"
        )
