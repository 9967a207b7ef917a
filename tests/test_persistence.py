"""
Snapshot persistence tests: encoding, backends, corrupt entries and
round-tripping the database through a fresh store.
"""

import json

import pytest

from stockledger.exceptions import CorruptSnapshotError
from stockledger.persistence import (
    JsonFileBackend,
    MemoryBackend,
    SnapshotStore,
    decode_image,
    encode_image,
)


class TestEncoding:

    def test_array_of_byte_values(self):
        text = encode_image(b"\x00\x01\xff")
        assert json.loads(text) == [0, 1, 255]
        assert decode_image(text) == b"\x00\x01\xff"

    @pytest.mark.parametrize(
        "text",
        ["not json", '{"a": 1}', "[1, 2, 256]", "[1, -1]", '["x"]', "[1.5]"],
    )
    def test_unreadable_entries(self, text):
        with pytest.raises(CorruptSnapshotError):
            decode_image(text, "materialsDB")


class TestSnapshotStore:

    def test_load_missing_is_none(self):
        assert SnapshotStore(MemoryBackend()).load() is None

    def test_save_replaces_entry(self):
        backend = MemoryBackend()
        snap = SnapshotStore(backend, "k")
        snap.save(b"first")
        snap.save(b"second")
        assert snap.load() == b"second"
        snap.clear()
        assert backend.get("k") is None

    def test_json_file_backend(self, tmp_path):
        path = tmp_path / "store" / "local.json"
        snap = SnapshotStore(JsonFileBackend(str(path)), "materialsDB")
        snap.save(b"\x10\x20")

        other = SnapshotStore(JsonFileBackend(str(path)), "materialsDB")
        assert other.load() == b"\x10\x20"
        assert json.loads(path.read_text())["materialsDB"] == "[16,32]"

    def test_json_file_backend_corrupt_file(self, tmp_path):
        path = tmp_path / "local.json"
        path.write_text("{oops")
        backend = JsonFileBackend(str(path))
        with pytest.raises(CorruptSnapshotError):
            backend.get("materialsDB")
        backend.remove("materialsDB")
        assert json.loads(path.read_text()) == {}


class TestRoundTrip:

    def test_fresh_store_sees_same_state(self, store, make_store):
        bolt = store.add_material(
            {"name": "Bolt", "category": "Hardware", "unit": "pcs", "unit_price": "0.40", "code": "B1"}
        )
        store.record_inbound({"material_id": bolt, "quantity": 50, "operator": "A"})
        store.record_outbound({"material_id": bolt, "quantity": 8, "recipient": "B", "operator": "A"})
        order_id = store.add_order(
            {"order_number": "PO-9", "supplier": "Acme", "order_date": "2024-02-02", "operator": "A"}
        )
        store.update_order_status(order_id, "fulfilled", "2024-02-05")

        reloaded = make_store()
        assert reloaded.list_materials() == store.list_materials()
        assert reloaded.inbound_records() == store.inbound_records()
        assert reloaded.outbound_records() == store.outbound_records()
        assert reloaded.list_orders() == store.list_orders()
        assert reloaded.statistics() == store.statistics()

    def test_every_mutation_is_flushed(self, store, make_store):
        bolt = store.add_material({"name": "Bolt", "category": "Hardware", "unit": "pcs"})
        assert make_store().get_material(bolt)["current_stock"] == 0

        store.adjust_stock(bolt, 3)
        assert make_store().get_material(bolt)["current_stock"] == 3

        store.delete_material(bolt)
        assert make_store().get_material(bolt) is None

    def test_export_matches_saved_snapshot(self, store, snapshot):
        store.add_material({"name": "Bolt", "category": "Hardware", "unit": "pcs"})
        assert snapshot.load() == store.export_snapshot()

    def test_json_file_round_trip(self, tmp_path):
        from stockledger.store import InventoryStore

        config = {"SNAPSHOT_PATH": str(tmp_path / "ledger.json")}
        first = InventoryStore(config=config)
        first.init()
        first.add_material({"name": "Tape", "category": "Office", "unit": "roll"})

        second = InventoryStore(config=config)
        second.init()
        assert [m["name"] for m in second.list_materials()] == ["Tape"]


class TestCorruptSnapshot:

    @pytest.mark.parametrize(
        "stored",
        ["definitely not json", "[1, 2, 999]", encode_image(b"hello world " * 200)],
    )
    def test_resets_to_empty_schema(self, backend, make_store, captured_logs, stored):
        backend.set("materialsDB", stored)
        store = make_store()

        assert store.initialized
        assert store.list_materials() == []
        # the bad entry was replaced by a readable fresh image
        assert SnapshotStore(backend, "materialsDB").load() == store.export_snapshot()

        messages = [r["message"] for r in captured_logs()]
        assert "snapshot_corrupt_resetting" in messages
        assert "snapshot_cleared" in messages
