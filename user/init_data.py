from .user import User, Role, SUPER_ADMIN, ADMIN, CASHIER, INVENTORY
from src.extensions import db
from category.category import Category
from settings.company_settings import CompanySetting

# Seeded in this order so the ids are stable: 1 super admin ... 4 inventory
ROLES = [
    {'name': SUPER_ADMIN, 'description': 'Full system access'},
    {'name': ADMIN, 'description': 'Manage operations'},
    {'name': CASHIER, 'description': 'Perform sales activities'},
    {'name': INVENTORY, 'description': 'Manage stock and products'},
]

CATEGORIES = [
    {'name': 'Analgesics', 'description': 'Pain relievers'},
    {'name': 'Antibiotics', 'description': 'Infection fighters'},
    {'name': 'Antiseptics', 'description': 'Wound care'},
    {'name': 'Vitamins', 'description': 'Nutritional supplements'},
    {'name': 'Cough and Cold', 'description': 'Respiratory relief'},
    {'name': 'Allergy Medications', 'description': 'Allergy relief'},
    {'name': 'Digestive Aids', 'description': 'Gastrointestinal health'},
    {'name': 'Skin Care', 'description': 'Dermatological products'},
    {'name': 'Eye Care', 'description': 'Ophthalmic solutions'},
    {'name': 'First Aid', 'description': 'Emergency care supplies'},
    {'name': 'Medical Supplies', 'description': 'General medical supplies'},
    {'name': 'Personal Care', 'description': 'Hygiene and personal care products'},
    {'name': 'Health Devices', 'description': 'Medical devices and equipment'},
]

COMPANY_SETTINGS = {
    'company_name': 'Acme Retail Store',
    'email': 'contact@acmeretail.com',
    'phone': '+233 20 123 4567',
    'address': '123 Main Street, Accra',
    'country': 'Ghana',
    'return_policy': 'Returns accepted within 7 days with receipt',
    'thank_you_message': 'Thank you for your purchase! Have a nice day!',
    'website': 'https://example.com',
}


def init_roles():
    for role_data in ROLES:
        if not Role.query.filter_by(name=role_data['name']).first():
            db.session.add(Role(**role_data))
    db.session.commit()


def create_admin_user(email='admin@example.com', password='admin123'):
    """Create the default super admin; returns None when it already exists."""
    if User.query.filter_by(email=email).first():
        return None

    admin_user = User(
        name='Administrator',
        email=email,
        role=Role.query.filter_by(name=SUPER_ADMIN).first(),
        status='active',
    )
    admin_user.set_password(password)
    db.session.add(admin_user)
    db.session.commit()
    return admin_user


def init_categories():
    for category in CATEGORIES:
        if not Category.query.filter_by(name=category['name']).first():
            db.session.add(Category(**category))
    db.session.commit()


def init_company_settings():
    if not CompanySetting.query.first():
        db.session.add(CompanySetting(**COMPANY_SETTINGS))
        db.session.commit()


def seed_all():
    init_roles()
    admin = create_admin_user()
    init_categories()
    init_company_settings()
    return admin
