from datetime import datetime
from src.extensions import db
import uuid


class Sale(db.Model):
    __tablename__ = "sales"

    # UUID primary key
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Human-readable receipt identifier
    transaction_id = db.Column(db.String(64), unique=True, nullable=False, index=True)

    # Cashier (nullable when recorded without an authenticated user)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    sub_total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    discount_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    discount_percentage = db.Column(db.Numeric(5, 2), nullable=True, default=0)
    grand_total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default="completed")
    amount_paid = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    change_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    payment_method = db.Column(db.String(20), nullable=False, default="cash")
    customer_name = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship("User", backref="sales")
    sale_items = db.relationship("SaleItem", backref="sale", lazy=True, cascade="all, delete-orphan")


class SaleItem(db.Model):
    __tablename__ = "sale_items"

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.String(36), db.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)

    # Snapshots taken from the product at sale time; no FK so history survives catalog deletes
    product_id = db.Column(db.Integer, nullable=False, index=True)
    category_id = db.Column(db.Integer, nullable=True, index=True)
    product_name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)

    # Product stock levels after this line's decrement
    quantity_left = db.Column(db.Integer, nullable=False)
    quantity_sold = db.Column(db.Integer, nullable=False)

    profit = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    expiry_date = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
