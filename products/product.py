from datetime import datetime
from src.extensions import db


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=False, index=True)

    selling_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    cost_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    # Lifetime stocked quantity
    total_quantity = db.Column(db.Integer, nullable=False, default=0)

    # Current on-hand quantity
    quantity_left = db.Column(db.Integer, nullable=False, default=0)

    # Lifetime sold quantity
    quantity_sold = db.Column(db.Integer, nullable=False, default=0)

    reorder_level = db.Column(db.Integer, nullable=False, default=0)
    expiry_date = db.Column(db.Date, nullable=True)

    # Unit profit (selling - cost) and profit over the stocked quantity
    profit = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_profit = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    product_image = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)
