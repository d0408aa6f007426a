"""
Key-Value Store Collaborator Interface.

Every piece of durable state in Saltbox goes through this interface. It maps
string keys to string values and supports four primitives: put, get,
prefix listing and delete.

Ordering Contract:
    list(prefix) returns the matching keys in ascending lexicographic
    (code point) order. Callers may rely on it; every backend is tested
    against it.

Error Contract:
    Backend failures are raised as StorageError carrying the underlying
    error text. Reading or deleting a key that does not exist is not an
    error (get returns None, delete is a no-op).
"""
from abc import ABC, abstractmethod
from typing import List, Optional


class StorageError(Exception):
    """Raised when the underlying key-value backend fails an operation."""
    pass


class KeyValueStore(ABC):
    """Abstract base class for key-value store backends.

    Example:
        >>> store.put("acme:user-1:2024-01-15T10:00:00.000Z", '{"id": "user-1"}')
        >>> store.list("acme:")
        ['acme:user-1:2024-01-15T10:00:00.000Z']
    """

    #: Short backend name used in logs and configuration
    name = "abstract"

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None when absent."""

    @abstractmethod
    def list(self, prefix: str = "") -> List[str]:
        """Return all keys starting with prefix, sorted ascending."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Missing keys are ignored."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
