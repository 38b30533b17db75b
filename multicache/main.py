# multicache/main.py

import logging
import sys
from typing import Mapping, Optional

import redis
from pydantic import BaseModel

from multicache.config import LOG_LEVEL
from multicache.exceptions import CacheError, ConfigurationError, ConnectivityError
from multicache.services.keys import prepare_key
from multicache.services.redis_cache import ClientFactory
from multicache.services.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


def resolve_log_level(name: str) -> str:
    """Return `name` if logging knows it as a level, else "INFO"."""
    name = name.upper()
    if isinstance(logging.getLevelName(name), int):
        return name
    return "INFO"


class Sample(BaseModel):
    code: int
    description: str


def run_examples(registry: ConnectionRegistry) -> None:
    """Walk through set/get/delete on the default connection and, if configured, on a second one."""
    logger.info("SINGLE DATABASE - SET/GET a few keys using the '%s' connection", registry.default.name)

    value, found = registry.get("my-key-x")
    logger.info("Checking if 'my-key-x' exists [value: %r, found: %s]", value, found)

    registry.set("key1", "my-value-1")
    registry.set_with_ttl("key2", 123456, 60)
    registry.set("key3", Sample(code=1234, description="Test of models"))

    key1, _ = registry.get("key1", str)
    key2, _ = registry.get("key2", int)
    key3, _ = registry.get("key3", Sample)
    logger.info("Returned values: [key1: %s, key2: %s, key3: %r]", key1, key2, key3)

    registry.delete("key2")
    _, found = registry.get("key2", int)
    logger.info("DELETE 'key2' - found after delete: %s", found)

    deleted = registry.delete("key*")
    logger.info("DELETE BY PATTERN 'key*' - %d key(s) deleted", deleted)

    lookup_key = prepare_key("samples", {"code": 1234}, use_hash=True)
    registry.set(lookup_key, Sample(code=1234, description="Keyed by hash"))
    logger.info("Prepared key %s -> %r", lookup_key, registry.get(lookup_key, Sample)[0])
    registry.delete(lookup_key)

    if len(registry) < 2:
        return

    other = registry[registry.names[1]]
    logger.info("MULTI DATABASES - SET/GET a few keys using the '%s' connection", other.name)
    other.set("key1", "my-value-2")
    other.set_with_ttl("key2", 7777777, 60)
    other.set("key3", Sample(code=5678, description="Just other test of models"))
    logger.info(
        "Returned values: [key1: %s, key2: %s, key3: %r]",
        other.get("key1", str)[0],
        other.get("key2", int)[0],
        other.get("key3", Sample)[0],
    )
    logger.info("DELETE BY PATTERN 'key*' - %d key(s) deleted", other.delete("key*"))


def main(
    environ: Optional[Mapping[str, str]] = None,
    client_factory: ClientFactory = redis.Redis,
) -> int:
    level = resolve_log_level(LOG_LEVEL)
    logging.basicConfig(level=level)
    if level != LOG_LEVEL:
        logger.warning("Unknown LOG_LEVEL %r, using %s", LOG_LEVEL, level)

    try:
        registry = ConnectionRegistry.from_env(environ, client_factory=client_factory)
    except (ConfigurationError, ConnectivityError):
        logger.critical("Redis WAS NOT STARTED!", exc_info=True)
        return 1

    try:
        run_examples(registry)
    except CacheError:
        logger.exception("Cache example failed")
        return 1
    finally:
        registry.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
