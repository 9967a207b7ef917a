# dao/inventory.py
from datetime import datetime
from typing import List

from flask import current_app
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from stockledger.configs import db
from stockledger.db.models.inventory import InboundRecord, OutboundRecord
from stockledger.db.models.material import Material
from stockledger.exceptions import MaterialNotFoundError, StockLedgerError, ValidationError
from stockledger.utils.fields import parse_date, require, to_decimal, to_int, to_text


# ---------- stock projection ----------
def inbound_delta(quantity: int) -> int:
    return int(quantity)


def outbound_delta(quantity: int) -> int:
    """Outbound always removes stock, whatever sign the caller used."""
    return -abs(int(quantity))


def apply_stock_delta(material_id: int, delta: int) -> None:
    """
    Add delta to current_stock in one UPDATE statement.

    The only writer of ``current_stock``. Does not commit. The result may go
    negative; over-issue is recorded as is.
    """
    result = db.session.execute(
        update(Material)
        .where(Material.id == to_int(material_id, "material_id"))
        .values(
            current_stock=Material.current_stock + to_int(delta, "delta"),
            updated_at=datetime.utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise MaterialNotFoundError(material_id)


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def _write_movement(record, delta: int) -> int:
    """Insert the movement and apply its delta in the same transaction."""
    try:
        db.session.add(record)
        db.session.flush()
        record_id = record.id
        apply_stock_delta(record.material_id, delta)
    except (SQLAlchemyError, StockLedgerError):
        db.session.rollback()
        raise
    _commit()
    return record_id


def _material_id(movement: dict) -> int:
    if movement.get("material_id") in (None, ""):
        raise ValidationError("material_id", "is required")
    return to_int(movement["material_id"], "material_id")


# ---------- public APIs ----------
def adjust_stock(material_id: int, delta: int) -> None:
    apply_stock_delta(material_id, delta)
    _commit()


def record_inbound(movement: dict) -> int:
    material_id = _material_id(movement)
    quantity = to_int(movement.get("quantity"), "quantity")
    if quantity <= 0:
        raise ValidationError("quantity", "inbound quantity must be positive")
    operator = require(movement, "operator")

    unit_price = to_decimal(movement.get("unit_price"), "unit_price")
    total_amount = movement.get("total_amount")
    if total_amount in (None, ""):
        total_amount = unit_price * quantity

    record = InboundRecord(
        material_id=material_id,
        quantity=quantity,
        unit_price=unit_price,
        total_amount=to_decimal(total_amount, "total_amount"),
        supplier=to_text(movement.get("supplier")),
        batch_number=to_text(movement.get("batch_number")),
        production_date=parse_date(movement.get("production_date"), "production_date"),
        expiry_date=parse_date(movement.get("expiry_date"), "expiry_date"),
        operator=operator,
        remark=to_text(movement.get("remark")),
        created_at=datetime.utcnow(),
    )
    return _write_movement(record, inbound_delta(quantity))


def record_outbound(movement: dict) -> int:
    """
    Record an issue and remove its quantity from stock.

    Zero and negative quantities are accepted; the magnitude is stored and
    removed from stock. Available stock is not checked.
    """
    material_id = _material_id(movement)
    if movement.get("quantity") in (None, ""):
        raise ValidationError("quantity", "is required")
    quantity = to_int(movement["quantity"], "quantity")
    recipient = require(movement, "recipient")
    operator = require(movement, "operator")

    record = OutboundRecord(
        material_id=material_id,
        quantity=abs(quantity),
        purpose=to_text(movement.get("purpose")),
        department=to_text(movement.get("department")),
        recipient=recipient,
        operator=operator,
        remark=to_text(movement.get("remark")),
        created_at=datetime.utcnow(),
    )
    return _write_movement(record, outbound_delta(quantity))


def _list_with_material(model, limit: int | None) -> List[dict]:
    # LEFT JOIN: records of deleted materials still show, with null names
    if limit is None:
        limit = current_app.config["RECORD_LIMIT"]
    q = (
        select(
            model,
            Material.name.label("material_name"),
            Material.unit.label("unit"),
            Material.category.label("category"),
        )
        .outerjoin(Material, Material.id == model.material_id)
        .order_by(model.created_at.desc(), model.id.desc())
        .limit(limit)
    )
    rows = []
    for r in db.session.execute(q):
        d = r[0].to_dict()
        d.update(material_name=r.material_name, unit=r.unit, category=r.category)
        rows.append(d)
    return rows


def list_inbound(limit: int | None = None) -> List[dict]:
    return _list_with_material(InboundRecord, limit)


def list_outbound(limit: int | None = None) -> List[dict]:
    return _list_with_material(OutboundRecord, limit)
