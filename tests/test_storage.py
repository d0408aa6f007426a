"""
Unit Tests for Key-Value Store Backends.

Every backend must honour the collaborator contract: put/get round trip,
prefix listing in ascending key order, and silent deletes of missing keys.

Running Tests:
    $ poetry run pytest tests/test_storage.py -v
"""
import sqlite3
from unittest.mock import patch

import pytest

from storage import (
    InMemoryKeyValueStore,
    NullKeyValueStore,
    SqliteKeyValueStore,
    StorageError,
    create_store,
)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Each durable-ish backend under the same contract tests."""
    if request.param == "sqlite":
        return SqliteKeyValueStore(str(tmp_path / "kv"))
    return InMemoryKeyValueStore()


def test_put_then_get(store):
    store.put("acme:user-1:2024-01-15T10:00:00.000Z", '{"id": "user-1"}')

    assert store.get("acme:user-1:2024-01-15T10:00:00.000Z") == '{"id": "user-1"}'


def test_put_overwrites_existing_value(store):
    store.put("k", "first")
    store.put("k", "second")

    assert store.get("k") == "second"
    assert store.list() == ["k"]


def test_get_missing_key_returns_none(store):
    assert store.get("nope") is None


def test_list_returns_keys_in_lexicographic_order(store):
    for key in ["acme:b:2", "acme:a:3", "acme:a:1", "acme:c:0"]:
        store.put(key, "v")

    assert store.list("acme:") == ["acme:a:1", "acme:a:3", "acme:b:2", "acme:c:0"]


def test_list_only_returns_keys_with_prefix(store):
    store.put("acme:a:1", "v")
    store.put("acmecorp:a:1", "v")
    store.put("other:a:1", "v")

    assert store.list("acme:") == ["acme:a:1"]
    assert store.list("acme") == ["acme:a:1", "acmecorp:a:1"]


def test_list_without_prefix_returns_everything(store):
    store.put("b", "v")
    store.put("a", "v")

    assert store.list() == ["a", "b"]


def test_list_prefix_is_literal(store):
    """SQL wildcard characters in a prefix must not act as wildcards."""
    store.put("100%:x", "v")
    store.put("100a:x", "v")
    store.put("a_b:x", "v")
    store.put("acb:x", "v")

    assert store.list("100%") == ["100%:x"]
    assert store.list("a_b") == ["a_b:x"]


def test_delete_removes_key(store):
    store.put("k", "v")
    store.delete("k")

    assert store.get("k") is None
    assert store.list() == []


def test_delete_missing_key_is_noop(store):
    store.delete("never-stored")

    assert store.list() == []


def test_sqlite_store_persists_across_instances(tmp_path):
    path = str(tmp_path / "kv")
    SqliteKeyValueStore(path).put("acme:user-1:t", "payload")

    reopened = SqliteKeyValueStore(path)

    assert reopened.get("acme:user-1:t") == "payload"


def test_sqlite_store_wraps_sqlite_errors(tmp_path):
    store = SqliteKeyValueStore(str(tmp_path / "kv"))

    with patch.object(store, "_connect", side_effect=sqlite3.OperationalError("database is locked")):
        with pytest.raises(StorageError, match="database is locked"):
            store.put("k", "v")
        with pytest.raises(StorageError):
            store.get("k")
        with pytest.raises(StorageError):
            store.list("k")
        with pytest.raises(StorageError):
            store.delete("k")


def test_null_store_retains_nothing():
    store = NullKeyValueStore()
    store.put("k", "v")

    assert store.get("k") is None
    assert store.list() == []
    store.delete("k")


def test_create_store_sqlite(tmp_path):
    store = create_store({"storage": {"backend": "sqlite", "path": str(tmp_path / "kv")}})

    assert isinstance(store, SqliteKeyValueStore)
    assert store.db_path == str(tmp_path / "kv" / "kv.db")


def test_create_store_memory():
    assert isinstance(create_store({"storage": {"backend": "memory"}}), InMemoryKeyValueStore)


def test_create_store_null():
    assert isinstance(create_store({"storage": {"backend": "NULL"}}), NullKeyValueStore)


def test_create_store_unknown_backend():
    with pytest.raises(ValueError, match="Unknown storage backend"):
        create_store({"storage": {"backend": "redis"}})


def test_sqlite_store_wraps_unencodable_keys(tmp_path):
    """Lone surrogates cannot be encoded as UTF-8 for SQLite."""
    store = SqliteKeyValueStore(str(tmp_path / "kv"))

    with pytest.raises(StorageError):
        store.put("acme:\ud800:2024-01-15T10:00:00.000Z", "v")
    with pytest.raises(StorageError):
        store.get("\ud800")
    assert store.list() == []
