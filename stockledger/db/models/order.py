from datetime import datetime
import enum

from stockledger.configs import db
from stockledger.db.models.base import RowMixin


class OrderStatus(enum.Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


class Order(RowMixin, db.Model):
    __tablename__ = "orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    order_number = db.Column(db.Text, unique=True, nullable=False)
    supplier = db.Column(db.Text, nullable=False)

    # plain text: the terminal set is configured per store
    status = db.Column(db.Text, default=OrderStatus.PENDING.value)
    total_amount = db.Column(db.Numeric(18, 2), default=0)

    order_date = db.Column(db.Date, nullable=False)
    expected_date = db.Column(db.Date)
    actual_date = db.Column(db.Date)

    operator = db.Column(db.Text, nullable=False)
    remark = db.Column(db.Text, default="")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)
