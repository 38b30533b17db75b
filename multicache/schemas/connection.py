# multicache/schemas/connection.py

import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from multicache.exceptions import ConfigurationError

DESCRIPTOR_FORMAT = "host,port,database,ttl_seconds,name"
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _to_int(value: str, field: str, index: int) -> int:
    # ASCII digits only: int() would also take "1_5" or non-ASCII digits
    if not _INTEGER.fullmatch(value):
        raise ConfigurationError(
            f"Redis WAS NOT STARTED because {field} is invalid: {value!r}", index
        )
    return int(value)


class ConnectionDescriptor(BaseModel):
    """
    One Redis connection as declared in a REDIS_CONNECTION_<n> variable.
    Notes:
    - ttl is the default expiration in seconds for writes through this connection; 0 disables it.
    - index is the numeric suffix of the variable; index 0 is the default connection.
    """
    model_config = ConfigDict(frozen=True)

    index: int = Field(0, ge=0, description="Numeric suffix of the environment variable.")
    host: str = Field(..., min_length=1, description="Redis host name or address.")
    port: int = Field(..., ge=1, le=65535, description="Redis TCP port.")
    database: int = Field(..., ge=0, description="Logical database selected on connect.")
    ttl: int = Field(..., ge=0, description="Default TTL in seconds, 0 = no expiration.")
    name: str = Field(..., min_length=1, description="Unique connection name.")

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def parse(cls, raw: str, index: int = 0) -> "ConnectionDescriptor":
        """
        Parse "host,port,database,ttl_seconds,name" (fields are trimmed, extra fields ignored).
        Raises ConfigurationError on anything that cannot be used to open a connection.
        """
        fields = [f.strip() for f in raw.split(",")]
        if len(fields) < 5:
            raise ConfigurationError(
                f"Redis WAS NOT STARTED because some field is missing, expected '{DESCRIPTOR_FORMAT}', got {raw!r}",
                index,
            )
        host, port, database, ttl, name = fields[:5]
        if not host or not port or not name:
            raise ConfigurationError(
                f"Redis WAS NOT STARTED because CONNECTION STRING is invalid: {raw!r}", index
            )

        try:
            return cls(
                index=index,
                host=host,
                port=_to_int(port, "PORT", index),
                database=_to_int(database, "DATABASE", index),
                ttl=_to_int(ttl, "EXPIRATION", index),
                name=name,
            )
        except ValidationError as ex:
            # range checks (negative ttl, port > 65535, ...)
            errors = ", ".join(
                f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in ex.errors()
            )
            raise ConfigurationError(
                f"Redis WAS NOT STARTED because CONNECTION STRING is invalid ({errors})", index
            ) from ex
