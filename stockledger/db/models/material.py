from datetime import datetime

from stockledger.configs import db
from stockledger.db.models.base import RowMixin


class Material(RowMixin, db.Model):
    __tablename__ = "materials"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    code = db.Column(db.Text, default="")  # not unique: legacy images carry duplicates
    name = db.Column(db.Text, nullable=False)
    category = db.Column(db.Text, nullable=False)
    specification = db.Column(db.Text, default="")
    unit = db.Column(db.Text, nullable=False)

    # only ever changed through dao.inventory.apply_stock_delta
    current_stock = db.Column(db.Integer, default=0, nullable=False)
    min_stock = db.Column(db.Integer, default=0)
    max_stock = db.Column(db.Integer, default=0)
    unit_price = db.Column(db.Numeric(18, 2), default=0)

    location = db.Column(db.Text, default="")
    supplier = db.Column(db.Text, default="")
    remark = db.Column(db.Text, default="")

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Material {self.id} {self.name}>"
