"""
Pytest configuration and shared fixtures for all tests.

This module provides shared fixtures for the test suite, including:
- An isolated in-memory key-value store per test
- A Flask test client wired to that store
- A deterministic clock for validation request timestamps
"""

import pytest

from api.app import create_app
from storage import InMemoryKeyValueStore


TEST_CONFIG = {
    "cors": {"origins": "*"},
    "storage": {"backend": "memory"},
}


def make_clock(*timestamps):
    """Return a clock callable yielding the given timestamps in order."""
    remaining = iter(timestamps)
    return lambda: next(remaining)


@pytest.fixture
def kv_store():
    """Fresh in-memory key-value store for each test."""
    return InMemoryKeyValueStore()


@pytest.fixture
def app(kv_store):
    """Flask app backed by the per-test in-memory store."""
    app = create_app(config=dict(TEST_CONFIG), store=kv_store)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client for making HTTP requests without a server."""
    with app.test_client() as client:
        yield client


@pytest.fixture
def clock():
    """Factory for deterministic clocks: clock("2024-...", "2024-...")."""
    return make_clock
