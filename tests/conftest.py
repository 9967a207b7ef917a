"""
Pytest fixtures for the stock ledger test suite.

Provides:
- an in-memory key-value backend shared by every store a test builds
- an initialized InventoryStore per test
- a way to seed the backend with a raw database image
- captured structured logs
"""

import json
import logging
from io import StringIO

import pytest

from stockledger.logging_config import StructuredFormatter, configure_logging, reset_logging
from stockledger.persistence import MemoryBackend, SnapshotStore, encode_image
from stockledger.store import InventoryStore

SNAPSHOT_KEY = "materialsDB"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture
def captured_logs():
    """
    Capture stockledger logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, make_store):
            make_store()
            assert any(r["message"] == "store_initialized" for r in captured_logs())
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stockledger")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Store fixtures
# =============================================================================


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def snapshot(backend):
    return SnapshotStore(backend, SNAPSHOT_KEY)


@pytest.fixture
def make_store(backend):
    """Build (and by default initialize) a fresh store over the shared backend."""

    def _make(config: dict | None = None, init: bool = True) -> InventoryStore:
        s = InventoryStore(SnapshotStore(backend, SNAPSHOT_KEY), config=config)
        if init:
            s.init()
        return s

    return _make


@pytest.fixture
def store(make_store):
    return make_store()


@pytest.fixture
def bolt(store):
    return store.add_material(
        {"name": "Bolt", "category": "Hardware", "unit": "pcs", "min_stock": 10}
    )


@pytest.fixture
def seed_image(backend):
    """Put a raw database image into the backend under the snapshot key."""

    def _seed(data: bytes) -> None:
        backend.set(SNAPSHOT_KEY, encode_image(data))

    return _seed
