from datetime import datetime

from stockledger.configs import db
from stockledger.db.models.base import RowMixin


# material_id is a plain column, not a ForeignKey: deleting a material must
# leave its movement history in place.


class InboundRecord(RowMixin, db.Model):
    __tablename__ = "inbound_records"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    material_id = db.Column(db.Integer, nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(18, 2), default=0)
    total_amount = db.Column(db.Numeric(18, 2), default=0)
    supplier = db.Column(db.Text, default="")
    batch_number = db.Column(db.Text, default="")
    production_date = db.Column(db.Date)
    expiry_date = db.Column(db.Date)
    operator = db.Column(db.Text, nullable=False)
    remark = db.Column(db.Text, default="")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class OutboundRecord(RowMixin, db.Model):
    __tablename__ = "outbound_records"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    material_id = db.Column(db.Integer, nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)  # stored as a magnitude
    purpose = db.Column(db.Text, default="")
    department = db.Column(db.Text, default="")
    recipient = db.Column(db.Text, nullable=False)
    operator = db.Column(db.Text, nullable=False)
    remark = db.Column(db.Text, default="")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
