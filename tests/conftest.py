"""
Shared fixtures: an app on in-memory SQLite with the four roles seeded,
one user per role with bearer-token headers, and a small catalog.
"""

import pytest
from decimal import Decimal
from datetime import date, timedelta

from src.main import create_app
from src.config import TestConfig
from src.extensions import db
from category.category import Category
from suppliers.supplier import Supplier
from products.product import Product
from products.product_service import apply_derived_fields
from user.user import User, Role, SUPER_ADMIN, ADMIN, CASHIER, INVENTORY
from user.init_data import init_roles
from user.jwt_utils import generate_tokens


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create and configure a new app instance for each test."""
    app = create_app(TestConfig)
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')

    with app.app_context():
        db.create_all()
        init_roles()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(role_name, email=None, password='secret123', status='active', name=None):
        user = User(
            name=name or f'{role_name.title()} User',
            email=email or f"{role_name.replace(' ', '_')}@example.com",
            phone='0200000000',
            role=Role.query.filter_by(name=role_name).first(),
            status=status,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


def bearer(user):
    return {'Authorization': f"Bearer {generate_tokens(user)['access_token']}"}


@pytest.fixture
def super_admin(make_user):
    return make_user(SUPER_ADMIN)


@pytest.fixture
def admin_user(make_user):
    return make_user(ADMIN)


@pytest.fixture
def cashier_user(make_user):
    return make_user(CASHIER, name='Ama Mensah')


@pytest.fixture
def inventory_user(make_user):
    return make_user(INVENTORY)


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def cashier_headers(cashier_user):
    return bearer(cashier_user)


@pytest.fixture
def inventory_headers(inventory_user):
    return bearer(inventory_user)


@pytest.fixture
def category(app):
    category = Category(name='Analgesics', description='Pain relievers')
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def supplier(app):
    supplier = Supplier(
        name='Kofi Asante',
        company_name='Accra Pharma Ltd',
        email='orders@accrapharma.com',
        phone='0244000000',
        address='Ring Road, Accra',
        status='active',
    )
    db.session.add(supplier)
    db.session.commit()
    return supplier


@pytest.fixture
def make_product(category, supplier):
    def _make_product(name='Paracetamol', quantity=10, selling_price='10.00', cost_price='6.00',
                      reorder_level=2, expiry_date=None, category_id=None):
        product = Product(
            name=name,
            category_id=category_id or category.id,
            supplier_id=supplier.id,
            selling_price=Decimal(selling_price),
            cost_price=Decimal(cost_price),
            total_quantity=quantity,
            quantity_left=quantity,
            quantity_sold=0,
            reorder_level=reorder_level,
            expiry_date=expiry_date or (date.today() + timedelta(days=365)),
        )
        apply_derived_fields(product)
        db.session.add(product)
        db.session.commit()
        return product
    return _make_product


@pytest.fixture
def product(make_product):
    return make_product()


def checkout_payload(lines, discount_amount='0', payment_method='cash', customer_name=None):
    """Build a checkout body from (product, quantity) pairs using the product's price."""
    items = []
    subtotal = Decimal('0')
    for product, quantity in lines:
        line_total = Decimal(str(product.selling_price)) * quantity
        subtotal += line_total
        items.append({
            'product_id': product.id,
            'quantity': quantity,
            'price': str(product.selling_price),
            'subtotal': str(line_total),
        })
    grand_total = subtotal - Decimal(discount_amount)
    return {
        'items': items,
        'subtotal': str(subtotal),
        'discount_amount': discount_amount,
        'discount_percentage': 0,
        'total_amount': str(grand_total),
        'payment_method': payment_method,
        'amount_received': str(grand_total),
        'change_amount': '0',
        'customer_name': customer_name,
    }
