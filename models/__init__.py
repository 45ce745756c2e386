from src.extensions import db

# Import all models so migrations can detect them
from category.category import Category
from suppliers.supplier import Supplier
from products.product import Product
from sales.sale import Sale, SaleItem
from settings.company_settings import CompanySetting
from user.user import User, Role


__all__ = [
    "db",
    "Category",
    "Supplier",
    "Product",
    "Sale",
    "SaleItem",
    "CompanySetting",
    "User",
    "Role",
]
