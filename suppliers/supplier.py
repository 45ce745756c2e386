from datetime import datetime
from src.extensions import db


class Supplier(db.Model):
    __tablename__ = "suppliers"

    id = db.Column(db.Integer, primary_key=True)

    # Contact Person
    name = db.Column(db.String(255), nullable=False)

    # Company / Business Name
    company_name = db.Column(db.String(255), nullable=False)

    email = db.Column(db.String(255), unique=True, nullable=False)
    phone = db.Column(db.String(20), nullable=False)
    address = db.Column(db.Text, nullable=True)

    # active / inactive
    status = db.Column(db.String(20), default="active", nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    products = db.relationship("Product", backref="supplier", lazy=True, cascade="all, delete-orphan")
