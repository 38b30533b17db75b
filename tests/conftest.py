# tests/conftest.py
from fnmatch import fnmatchcase
from typing import Dict, List, Optional, Tuple

import pytest
import redis

from multicache.schemas.connection import ConnectionDescriptor
from multicache.services.redis_cache import RedisCache


# ---------- Minimal in-memory Redis used only for tests ----------

class _FakeServer:
    """
    Keyspaces shared by every fake client, keyed by (host, port, db).
    Addresses listed in `offline` refuse every command, like a stopped server.
    """
    def __init__(self):
        self.keyspaces: Dict[Tuple[str, int, int], Dict[str, Tuple[str, Optional[int]]]] = {}
        self.offline: set = set()
        self.clients: List["_FakeRedis"] = []


class _FakeRedis:
    """
    API-compatible with the subset of redis.Redis used by RedisCache:
    ping/get/set/delete/scan_iter/ttl/close. Expirations are recorded, not enforced.
    """
    def __init__(self, server: _FakeServer, host="localhost", port=6379, db=0, decode_responses=False):
        self._server = server
        self.host = host
        self.port = port
        self.db = db
        self.decode_responses = decode_responses
        self.closed = False
        # scan_iter raises after yielding this many keys (None = never)
        self.fail_scan_after: Optional[int] = None

    @property
    def _data(self) -> Dict[str, Tuple[str, Optional[int]]]:
        return self._server.keyspaces.setdefault((self.host, self.port, self.db), {})

    def _check(self):
        if (self.host, self.port) in self._server.offline:
            raise redis.exceptions.ConnectionError(f"Error connecting to {self.host}:{self.port}. Connection refused.")

    def ping(self):
        self._check()
        return True

    def get(self, key):
        self._check()
        item = self._data.get(key)
        return item[0] if item else None

    def set(self, key, value, ex=None):
        self._check()
        if ex is not None and ex <= 0:
            raise redis.exceptions.ResponseError("invalid expire time in 'set' command")
        self._data[key] = (value, ex)
        return True

    def delete(self, *keys):
        self._check()
        return sum(1 for k in keys if self._data.pop(k, None) is not None)

    def scan_iter(self, match=None, count=None):
        self._check()
        yielded = 0
        for key in list(self._data):
            if match is None or fnmatchcase(key, match):
                if self.fail_scan_after is not None and yielded >= self.fail_scan_after:
                    raise redis.exceptions.ConnectionError("Connection lost during SCAN")
                yielded += 1
                yield key

    def ttl(self, key):
        self._check()
        item = self._data.get(key)
        if item is None:
            return -2
        return -1 if item[1] is None else item[1]

    def close(self):
        self.closed = True


@pytest.fixture
def fake_server():
    return _FakeServer()


@pytest.fixture
def client_factory(fake_server):
    """Drop-in for redis.Redis as the client factory of RedisCache.connect / ConnectionRegistry.from_env."""
    def _factory(**kwargs):
        client = _FakeRedis(fake_server, **kwargs)
        fake_server.clients.append(client)
        return client
    return _factory


@pytest.fixture
def descriptor():
    return ConnectionDescriptor.parse("localhost,6379,0,60,default")


@pytest.fixture
def handle(descriptor, client_factory):
    return RedisCache.connect(descriptor, client_factory)
