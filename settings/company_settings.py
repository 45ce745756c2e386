from datetime import datetime
from src.extensions import db


class CompanySetting(db.Model):
    __tablename__ = "company_settings"

    id = db.Column(db.Integer, primary_key=True)

    # Storefront Information
    company_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    country = db.Column(db.String(100), nullable=True)
    website = db.Column(db.String(255), nullable=True)

    # Receipt Text
    return_policy = db.Column(db.Text, nullable=True)
    thank_you_message = db.Column(db.Text, nullable=True)

    # Logo & Branding
    logo = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "companyName": self.company_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "country": self.country,
            "returnPolicy": self.return_policy,
            "thankYouMessage": self.thank_you_message,
            "website": self.website,
            "logo": self.logo,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
