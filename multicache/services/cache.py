from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

class Cache(ABC):
    """Minimal cache interface shared by a single connection handle and the registry's default-connection facade."""

    @abstractmethod
    def ping(self) -> None:
        ...

    @abstractmethod
    def get(self, key: str, as_type: Optional[Any] = None) -> Tuple[Any, bool]:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def set_with_ttl(self, key: str, value: Any, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> int:
        ...
