# multicache/services/serialization.py

import json
from functools import lru_cache
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from multicache.exceptions import SerializationError


def encode(value: Any, sort_keys: bool = False) -> str:
    """
    Serialize a value to compact JSON text.
    Pydantic models, dataclasses, datetimes, UUIDs, sets etc. are converted to plain JSON first.
    NaN/Infinity are rejected since they are not valid JSON.
    """
    try:
        return json.dumps(
            to_jsonable_python(value),
            separators=(",", ":"),
            ensure_ascii=False,
            sort_keys=sort_keys,
            allow_nan=False,
        )
    except (PydanticSerializationError, TypeError, ValueError) as ex:
        raise SerializationError(f"cannot encode value of type {type(value).__name__}: {ex}") from ex


@lru_cache(maxsize=256)
def _adapter(as_type: Any) -> TypeAdapter:
    return TypeAdapter(as_type)


def decode(raw: str, as_type: Optional[Any] = None) -> Any:
    """Parse JSON text, validating it into `as_type` when one is given."""
    try:
        if as_type is None:
            return json.loads(raw)
        return _adapter(as_type).validate_json(raw)
    except (ValueError, ValidationError) as ex:
        # json.JSONDecodeError is a ValueError
        raise SerializationError(f"cannot decode cached value: {ex}") from ex
