"""In-process dictionary backend for development and tests."""
import logging
import threading
from typing import Dict, List, Optional

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """Key-value store kept in a dict guarded by a lock.

    Contents live only as long as the process; each gunicorn worker gets
    its own copy.
    """

    name = "memory"

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def list(self, prefix: str = "") -> List[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
