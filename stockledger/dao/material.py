from datetime import datetime
from typing import Optional, List

from flask import current_app
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError

from stockledger.configs import db
from stockledger.db.models.material import Material
from stockledger.exceptions import MaterialNotFoundError
from stockledger.utils.fields import require, to_decimal, to_int, to_text

OPTIONAL_TEXT_FIELDS = ("code", "specification", "location", "supplier", "remark")


def list_materials() -> List[dict]:
    rows = db.session.scalars(select(Material).order_by(Material.name.asc())).all()
    return [m.to_dict() for m in rows]


def get_material(material_id: int) -> Optional[dict]:
    m = db.session.get(Material, to_int(material_id, "id"))
    return m.to_dict() if m else None


def get_material_by_code(code: str) -> Optional[dict]:
    m = db.session.scalars(
        select(Material).where(Material.code == code).order_by(Material.id).limit(1)
    ).first()
    return m.to_dict() if m else None


def search_materials(keyword: str, limit: int | None = None) -> List[dict]:
    """Substring match on code or name; LIKE follows SQLite's default collation."""
    if limit is None:
        limit = current_app.config["SEARCH_LIMIT"]
    term = f"%{keyword or ''}%"
    rows = db.session.scalars(
        select(Material)
        .where(or_(Material.code.like(term), Material.name.like(term)))
        .order_by(Material.name.asc())
        .limit(limit)
    ).all()
    return [m.to_dict() for m in rows]


# ---------------- helpers ----------------
def _editable_values(fields: dict) -> dict:
    """Every editable column, validated. current_stock is never among them."""
    values = {
        "name": require(fields, "name"),
        "category": require(fields, "category"),
        "unit": require(fields, "unit"),
        "min_stock": to_int(fields.get("min_stock"), "min_stock"),
        "max_stock": to_int(fields.get("max_stock"), "max_stock"),
        "unit_price": to_decimal(fields.get("unit_price"), "unit_price"),
    }
    for k in OPTIONAL_TEXT_FIELDS:
        values[k] = to_text(fields.get(k))
    return values


def _get_or_raise(material_id: int) -> Material:
    m = db.session.get(Material, to_int(material_id, "id"))
    if m is None:
        raise MaterialNotFoundError(material_id)
    return m


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


# ---------------- mutations ----------------
def create_material(fields: dict) -> int:
    now = datetime.utcnow()
    m = Material(current_stock=0, created_at=now, updated_at=now, **_editable_values(fields))
    db.session.add(m)
    db.session.flush()
    material_id = m.id
    _commit()
    return material_id


def update_material(material_id: int, fields: dict) -> None:
    m = _get_or_raise(material_id)
    for k, v in _editable_values(fields).items():
        setattr(m, k, v)
    m.updated_at = datetime.utcnow()
    _commit()


def delete_material(material_id: int) -> None:
    # movement rows are left in place on purpose
    m = _get_or_raise(material_id)
    db.session.delete(m)
    _commit()
