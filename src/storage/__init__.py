"""Storage Package - Key-Value Store Backends.

Exports the collaborator interface (KeyValueStore), its backends and
create_store(), which picks a backend from the "storage" section of
the configuration.

Backends:
    sqlite: SqliteKeyValueStore, durable, the default
    memory: InMemoryKeyValueStore, per-process, for development and tests
    null:   NullKeyValueStore, discards writes (posts scaffolding)
"""
import logging
from typing import Any, Dict

from .base import KeyValueStore, StorageError
from .memory_store import InMemoryKeyValueStore
from .null_store import NullKeyValueStore
from .sqlite_store import SqliteKeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = "./data/kv"


def create_store(config: Dict[str, Any]) -> KeyValueStore:
    """Build the key-value store described by config["storage"].

    Raises:
        ValueError: If the configured backend name is unknown
    """
    storage_config = config.get("storage", {}) or {}
    backend = str(storage_config.get("backend", "sqlite")).lower()

    if backend == "sqlite":
        path = storage_config.get("path", DEFAULT_STORAGE_PATH)
        store = SqliteKeyValueStore(path, timeout=float(storage_config.get("timeout", 5.0)))
    elif backend == "memory":
        store = InMemoryKeyValueStore()
    elif backend == "null":
        store = NullKeyValueStore()
    else:
        raise ValueError(f"Unknown storage backend: {backend!r}")

    logger.info(f"Using {store.name} key-value store: {store!r}")
    return store


__all__ = [
    "KeyValueStore",
    "StorageError",
    "InMemoryKeyValueStore",
    "NullKeyValueStore",
    "SqliteKeyValueStore",
    "create_store",
]
