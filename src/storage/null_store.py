"""No-op backend: accepts writes, retains nothing."""
from typing import List, Optional

from .base import KeyValueStore


class NullKeyValueStore(KeyValueStore):
    """Key-value store that discards every write.

    Used by the posts routes, which are scaffolding only: writes succeed,
    reads return nothing and listings are always empty.
    """

    name = "null"

    def put(self, key: str, value: str) -> None:
        return None

    def get(self, key: str) -> Optional[str]:
        return None

    def list(self, prefix: str = "") -> List[str]:
        return []

    def delete(self, key: str) -> None:
        return None
