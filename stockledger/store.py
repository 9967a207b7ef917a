"""
InventoryStore: the one object callers hold.

It resolves an engine source, restores the last snapshot (or starts empty),
brings the schema up to date, and then serves every ledger, order and query
operation. Each mutation is followed by a full snapshot flush, which is the
only durability boundary.

Typical use::

    store = InventoryStore()
    store.init()
    bolt = store.add_material({"name": "Bolt", "category": "Hardware", "unit": "pcs"})
    store.record_inbound({"material_id": bolt, "quantity": 50, "operator": "A"})
"""

from contextlib import contextmanager

from flask import Flask
from sqlalchemy.exc import SQLAlchemyError

from stockledger.app import create_app
from stockledger.configs import Config
from stockledger.dao import inventory as inv_dao
from stockledger.dao import material as material_dao
from stockledger.dao import order as order_dao
from stockledger.dao import reports as reports_dao
from stockledger.db import image, schema
from stockledger.exceptions import (
    CorruptSnapshotError,
    InitializationError,
    StoreNotInitializedError,
)
from stockledger.logging_config import get_logger
from stockledger.persistence import JsonFileBackend, MemoryBackend, SnapshotStore

logger = get_logger("store")


class InventoryStore:
    def __init__(self, snapshot: SnapshotStore | None = None, config: dict | None = None):
        self.config = dict(config or {})
        self.engine_urls = list(self.config.get("ENGINE_URLS", Config.ENGINE_URLS))
        if snapshot is None:
            path = self.config.get("SNAPSHOT_PATH", Config.SNAPSHOT_PATH)
            backend = JsonFileBackend(path) if path else MemoryBackend()
            snapshot = SnapshotStore(
                backend, self.config.get("SNAPSHOT_KEY", Config.SNAPSHOT_KEY)
            )
        self.snapshot = snapshot
        self.app: Flask | None = None
        self.initialized = False

    # ---------------- initialization ----------------
    def _connect(self, url: str) -> Flask:
        app = create_app(url, self.config)
        with app.app_context():
            if not image.supports_images():
                raise ValueError(f"engine for {url} cannot export database images")
        return app

    def _restore(self, app: Flask, url: str) -> Flask:
        """Load the saved image into ``app``; on a corrupt one, start over empty."""
        with app.app_context():
            try:
                data = self.snapshot.load()
                if data is not None:
                    image.import_image(data, self.snapshot.key)
                    logger.info("snapshot_restored", extra={"size": len(data)})
                return app
            except CorruptSnapshotError:
                logger.warning("snapshot_corrupt_resetting", exc_info=True)
        self.snapshot.clear()
        return self._connect(url)

    def init(self) -> None:
        """Open the first usable engine source and make the schema current.

        Raises InitializationError when every source fails. Schema errors
        propagate unchanged. Either way the store stays uninitialized.
        """
        if self.initialized and self.app is not None:
            return

        last_error = None
        for url in self.engine_urls:
            try:
                app = self._connect(url)
            except (SQLAlchemyError, ImportError, ValueError) as e:
                logger.error("engine_source_failed", extra={"engine_url": url}, exc_info=True)
                last_error = e
                continue
            break
        else:
            self.app = None
            self.initialized = False
            raise InitializationError(self.engine_urls) from last_error

        try:
            app = self._restore(app, url)
            with app.app_context():
                if schema.ensure_schema():
                    self._flush()
        except Exception:
            self.app = None
            self.initialized = False
            raise

        self.app = app
        self.initialized = True
        logger.info("store_initialized", extra={"engine_url": url})

    @contextmanager
    def _context(self):
        if not self.initialized or self.app is None:
            raise StoreNotInitializedError()
        with self.app.app_context():
            yield

    def _flush(self) -> None:
        self.snapshot.save(image.export_image())

    def ensure_schema(self) -> bool:
        with self._context():
            changed = schema.ensure_schema()
            if changed:
                self._flush()
        return changed

    def schema_version(self) -> int:
        with self._context():
            return schema.stamped_version()

    def export_snapshot(self) -> bytes:
        with self._context():
            return image.export_image()

    # ---------------- materials ----------------
    def add_material(self, fields: dict) -> int:
        with self._context():
            material_id = material_dao.create_material(fields)
            self._flush()
        return material_id

    def update_material(self, material_id: int, fields: dict) -> None:
        with self._context():
            material_dao.update_material(material_id, fields)
            self._flush()

    def delete_material(self, material_id: int) -> None:
        with self._context():
            material_dao.delete_material(material_id)
            self._flush()

    def adjust_stock(self, material_id: int, delta: int) -> None:
        with self._context():
            inv_dao.adjust_stock(material_id, delta)
            self._flush()

    # ---------------- movements ----------------
    def record_inbound(self, movement: dict) -> int:
        with self._context():
            record_id = inv_dao.record_inbound(movement)
            self._flush()
        return record_id

    def record_outbound(self, movement: dict) -> int:
        with self._context():
            record_id = inv_dao.record_outbound(movement)
            self._flush()
        return record_id

    # ---------------- orders ----------------
    def add_order(self, fields: dict) -> int:
        with self._context():
            order_id = order_dao.create_order(fields)
            self._flush()
        return order_id

    def update_order_status(self, order_id: int, status: str, actual_date=None) -> None:
        with self._context():
            order_dao.update_order_status(order_id, status, actual_date)
            self._flush()

    # ---------------- queries ----------------
    def list_materials(self) -> list[dict]:
        with self._context():
            return material_dao.list_materials()

    def get_material(self, material_id: int) -> dict | None:
        with self._context():
            return material_dao.get_material(material_id)

    def get_material_by_code(self, code: str) -> dict | None:
        with self._context():
            return material_dao.get_material_by_code(code)

    def search_materials(self, keyword: str) -> list[dict]:
        with self._context():
            return material_dao.search_materials(keyword)

    def low_stock_materials(self) -> list[dict]:
        with self._context():
            return reports_dao.low_stock_materials()

    def statistics(self) -> dict:
        with self._context():
            return reports_dao.statistics()

    def inbound_records(self, limit: int | None = None) -> list[dict]:
        with self._context():
            return inv_dao.list_inbound(limit)

    def outbound_records(self, limit: int | None = None) -> list[dict]:
        with self._context():
            return inv_dao.list_outbound(limit)

    def list_orders(self) -> list[dict]:
        with self._context():
            return order_dao.list_orders()

    def get_order(self, order_id: int) -> dict | None:
        with self._context():
            return order_dao.get_order(order_id)
