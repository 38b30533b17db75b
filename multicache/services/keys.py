# multicache/services/keys.py

import hashlib
from typing import Any, Optional

from multicache import config
from .serialization import encode


def md5_hash(text: str) -> str:
    """Hex MD5 of `text`. Used to shorten keys, not for security."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def prepare_key(
    namespace: str,
    obj: Optional[Any] = None,
    use_hash: bool = False,
    app_name: Optional[str] = None,
) -> str:
    """
    Build a cache key from a namespace and an optional discriminator object:
      - obj and namespace     -> "<app>:<namespace>:<json or md5(json)>"
      - obj only              -> "<app>:<json or md5(json)>"
      - namespace only        -> "<app>:<namespace>"   (use_hash is ignored)
      - neither               -> ""

    The object is encoded as compact JSON with sorted keys, so equal mappings map to the same key.
    Raises SerializationError when the object is not JSON encodable.
    """
    app = config.APP_NAME if app_name is None else app_name

    if obj is not None:
        encoded = encode(obj, sort_keys=True)
        suffix = md5_hash(encoded) if use_hash else encoded
        if namespace:
            return f"{app}:{namespace}:{suffix}"
        return f"{app}:{suffix}"

    if namespace:
        return f"{app}:{namespace}"
    return ""
