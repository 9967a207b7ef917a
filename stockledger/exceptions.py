"""
Typed exceptions for the stock ledger.

Every exception carries a machine-readable ``code`` so callers can branch on
the type (or the code) instead of parsing messages::

    StockLedgerError
    +-- InitializationError
    +-- StoreNotInitializedError
    +-- CorruptSnapshotError
    +-- SchemaError
    |   +-- SchemaMigrationError
    |   +-- SchemaVersionError
    +-- ValidationError            (also a ValueError)
    +-- MaterialNotFoundError
    +-- OrderNotFoundError
    +-- InvalidStatusTransitionError
"""


class StockLedgerError(Exception):
    """Base class for all stock ledger errors."""

    code: str = "STOCK_LEDGER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InitializationError(StockLedgerError):
    """No engine source could be loaded."""

    code = "INITIALIZATION_FAILED"

    def __init__(self, sources: list[str]):
        self.sources = list(sources)
        super().__init__(
            f"Could not initialize the database from any source: {', '.join(sources)}"
        )


class StoreNotInitializedError(StockLedgerError):
    code = "STORE_NOT_INITIALIZED"

    def __init__(self):
        super().__init__("Database is not initialized; call init() first")


class CorruptSnapshotError(StockLedgerError):
    """The persisted image could not be decoded."""

    code = "CORRUPT_SNAPSHOT"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Snapshot '{key}' is unreadable: {reason}")


class SchemaError(StockLedgerError):
    code = "SCHEMA_ERROR"


class SchemaMigrationError(SchemaError):
    code = "SCHEMA_MIGRATION_FAILED"

    def __init__(self, table: str, reason: str):
        self.table = table
        self.reason = reason
        super().__init__(f"Migration of '{table}' failed: {reason}")


class SchemaVersionError(SchemaError):
    """The image was written by a newer schema than this code understands."""

    code = "UNSUPPORTED_SCHEMA_VERSION"

    def __init__(self, found: int, supported: int):
        self.found = found
        self.supported = supported
        super().__init__(
            f"Schema version {found} is newer than supported version {supported}"
        )


class ValidationError(StockLedgerError, ValueError):
    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class MaterialNotFoundError(StockLedgerError):
    code = "MATERIAL_NOT_FOUND"

    def __init__(self, material_id):
        self.material_id = material_id
        super().__init__(f"Material {material_id} not found")


class OrderNotFoundError(StockLedgerError):
    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class InvalidStatusTransitionError(StockLedgerError):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move order from '{current}' to '{requested}'")
