# multicache/services/registry.py

import logging
import os
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import redis

from multicache.config import MAX_REDIS_CONNECTIONS, REDIS_CONNECTION_PREFIX
from multicache.exceptions import CacheError, ConfigurationError
from multicache.schemas.connection import ConnectionDescriptor
from .cache import Cache
from .redis_cache import ClientFactory, RedisCache

logger = logging.getLogger(__name__)


def iter_connection_descriptors(
    environ: Optional[Mapping[str, str]] = None,
    prefix: str = REDIS_CONNECTION_PREFIX,
    max_connections: int = MAX_REDIS_CONNECTIONS,
) -> Iterator[ConnectionDescriptor]:
    """
    Yield descriptors from <prefix>0, <prefix>1, ... in order.
    The scan stops at the first missing or empty variable, even if later indices are set,
    and never goes past `max_connections`.
    """
    env = os.environ if environ is None else environ
    for index in range(max_connections):
        raw = env.get(f"{prefix}{index}", "")
        if not raw:
            return
        yield ConnectionDescriptor.parse(raw, index)


class ConnectionRegistry(Cache):
    """
    Name -> RedisCache mapping built once at startup.
    The first handle is the default one; the Cache methods on the registry
    (ping/get/set/set_with_ttl/delete) forward to it.
    """

    def __init__(self, handles: Iterable[RedisCache]):
        self._handles: Dict[str, RedisCache] = {}
        for handle in handles:
            if handle.name in self._handles:
                raise ConfigurationError(
                    f"Redis connection name '{handle.name}' is used more than once",
                    handle.descriptor.index,
                )
            self._handles[handle.name] = handle
        if not self._handles:
            raise ConfigurationError("Redis WAS NOT STARTED because no connection is configured")
        self._default = next(iter(self._handles.values()))

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        client_factory: ClientFactory = redis.Redis,
        prefix: str = REDIS_CONNECTION_PREFIX,
        max_connections: int = MAX_REDIS_CONNECTIONS,
    ) -> "ConnectionRegistry":
        """
        Open and ping one connection per REDIS_CONNECTION_<n> variable.
        Any bad descriptor, unreachable store or duplicate name raises (ConfigurationError /
        ConnectivityError) after closing the connections opened so far.
        """
        opened: List[RedisCache] = []
        try:
            for descriptor in iter_connection_descriptors(environ, prefix, max_connections):
                if any(h.name == descriptor.name for h in opened):
                    raise ConfigurationError(
                        f"Redis connection name '{descriptor.name}' is used more than once",
                        descriptor.index,
                    )
                opened.append(RedisCache.connect(descriptor, client_factory))
            registry = cls(opened)
        except CacheError:
            for handle in opened:
                handle.close()
            raise
        logger.info(
            "Redis registry ready [connections: %s, default: '%s']",
            ", ".join(registry.names),
            registry.default.name,
        )
        return registry

    @property
    def default(self) -> RedisCache:
        return self._default

    @property
    def names(self) -> List[str]:
        return list(self._handles)

    def get_handle(self, name: str) -> Optional[RedisCache]:
        return self._handles.get(name)

    def __getitem__(self, name: str) -> RedisCache:
        return self._handles[name]

    def __contains__(self, name: object) -> bool:
        return name in self._handles

    def __iter__(self) -> Iterator[str]:
        return iter(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def close(self) -> None:
        for handle in self._handles.values():
            handle.close()

    # Default-connection facade

    @property
    def instance(self) -> redis.Redis:
        return self._default.instance

    def ping(self) -> None:
        self._default.ping()

    def get(self, key: str, as_type: Optional[Any] = None) -> Tuple[Any, bool]:
        return self._default.get(key, as_type)

    def set(self, key: str, value: Any) -> None:
        self._default.set(key, value)

    def set_with_ttl(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._default.set_with_ttl(key, value, ttl_seconds)

    def delete(self, key: str) -> int:
        return self._default.delete(key)
