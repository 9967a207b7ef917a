from decimal import Decimal
from typing import List

from sqlalchemy import func, select

from stockledger.configs import db
from stockledger.db.models.material import Material

_is_low = Material.current_stock <= Material.min_stock


def low_stock_materials() -> List[dict]:
    """Materials at or below their minimum; the boundary counts as low."""
    rows = db.session.scalars(
        select(Material).where(_is_low).order_by(Material.name.asc())
    ).all()
    return [m.to_dict() for m in rows]


def statistics() -> dict:
    total = db.session.execute(select(func.count(Material.id))).scalar() or 0
    low = db.session.execute(select(func.count(Material.id)).where(_is_low)).scalar() or 0
    # rows without a price contribute nothing but are still counted above
    value = db.session.execute(
        select(func.sum(Material.current_stock * Material.unit_price))
    ).scalar()
    return {
        "total_materials": int(total),
        "low_stock_count": int(low),
        "total_value": Decimal(str(value or 0)),
    }
