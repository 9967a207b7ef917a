from stockledger.exceptions import (
    CorruptSnapshotError,
    InitializationError,
    InvalidStatusTransitionError,
    MaterialNotFoundError,
    OrderNotFoundError,
    SchemaMigrationError,
    SchemaVersionError,
    StockLedgerError,
    StoreNotInitializedError,
    ValidationError,
)
from stockledger.persistence import JsonFileBackend, MemoryBackend, SnapshotStore
from stockledger.store import InventoryStore

__all__ = [n for n in dir() if n[:1].isupper()]
