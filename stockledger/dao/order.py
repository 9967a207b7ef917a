# dao/order.py
from datetime import datetime
from typing import Optional, List

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from stockledger.configs import db
from stockledger.db.models.order import Order, OrderStatus
from stockledger.exceptions import (
    InvalidStatusTransitionError,
    OrderNotFoundError,
    ValidationError,
)
from stockledger.utils.fields import parse_date, require, to_decimal, to_int, to_text


def list_orders() -> List[dict]:
    rows = db.session.scalars(
        select(Order).order_by(Order.created_at.desc(), Order.id.desc())
    ).all()
    return [o.to_dict() for o in rows]


def get_order(order_id: int) -> Optional[dict]:
    o = db.session.get(Order, to_int(order_id, "id"))
    return o.to_dict() if o else None


def _terminal_statuses() -> tuple:
    return tuple(s.strip().lower() for s in current_app.config["ORDER_TERMINAL_STATUSES"])


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


# ---------------- mutations ----------------
def create_order(fields: dict) -> int:
    order_date = parse_date(fields.get("order_date"), "order_date")
    if order_date is None:
        raise ValidationError("order_date", "is required")

    now = datetime.utcnow()
    o = Order(
        order_number=require(fields, "order_number"),
        supplier=require(fields, "supplier"),
        status=OrderStatus.PENDING.value,
        total_amount=to_decimal(fields.get("total_amount"), "total_amount"),
        order_date=order_date,
        expected_date=parse_date(fields.get("expected_date"), "expected_date"),
        operator=require(fields, "operator"),
        remark=to_text(fields.get("remark")),
        created_at=now,
        updated_at=now,
    )
    db.session.add(o)
    try:
        db.session.flush()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    order_id = o.id
    _commit()
    return order_id


def update_order_status(order_id: int, status: str, actual_date=None) -> None:
    """pending -> one of the configured terminal statuses, once."""
    o = db.session.get(Order, to_int(order_id, "id"))
    if o is None:
        raise OrderNotFoundError(order_id)

    requested = to_text(status).lower()
    if o.status != OrderStatus.PENDING.value or requested not in _terminal_statuses():
        raise InvalidStatusTransitionError(o.status, requested)

    o.status = requested
    stamped = parse_date(actual_date, "actual_date")
    if stamped is not None:
        o.actual_date = stamped
    o.updated_at = datetime.utcnow()
    _commit()
