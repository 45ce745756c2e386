from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from src.extensions import db
from src.exceptions import ResourceNotFoundException
from products.product import Product
from category.category import Category
from suppliers.supplier import Supplier

OUT_OF_STOCK = "out-of-stock"
EXPIRED = "expired"
LOW_STOCK = "low-stock"
IN_STOCK = "in-stock"


def stock_status(quantity_left, reorder_level, expiry_date, today=None):
    """Display status for a product.

    Zero stock wins over expiry, expiry wins over the reorder threshold.
    """
    today = today or date.today()
    if isinstance(expiry_date, datetime):
        expiry_date = expiry_date.date()

    if (quantity_left or 0) <= 0:
        return OUT_OF_STOCK
    if expiry_date and expiry_date < today:
        return EXPIRED
    if quantity_left <= (reorder_level or 0):
        return LOW_STOCK
    return IN_STOCK


def parse_date(value):
    """Accepts YYYY-MM-DD or ISO-8601 strings (as sent by the date pickers)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    date_str = str(value).strip()
    if 'T' in date_str:
        return datetime.fromisoformat(date_str.replace('Z', '+00:00')).date()
    for fmt in ('%Y-%m-%d', '%d/%m/%Y', '%m/%d/%Y'):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date: {value}")


def to_decimal(value):
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Invalid number: {value}")


def apply_derived_fields(product):
    """profit is per unit; total_profit covers the whole stocked quantity."""
    product.profit = (to_decimal(product.selling_price) - to_decimal(product.cost_price)).quantize(Decimal("0.01"))
    product.total_profit = (product.profit * (product.total_quantity or 0)).quantize(Decimal("0.01"))
    return product


def validate_product_data(data, partial=False, product=None):
    """Returns a dict of field -> message for the product form payload.

    When updating, `product` is the stored row; a new totalQuantity may not
    drop below the units already gone from the shelf.
    """
    errors = {}

    if not partial or "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            errors["name"] = "name is required"
        elif len(name) > 255:
            errors["name"] = "name must not exceed 255 characters"

    for field in ("category", "supplier", "totalQuantity", "reorderLevel"):
        if partial and field not in data:
            continue
        try:
            value = int(data.get(field))
            if value < 0:
                errors[field] = f"{field} must not be negative"
        except (TypeError, ValueError):
            errors[field] = f"{field} must be an integer"

    for field in ("sellingPrice", "costPrice"):
        if partial and field not in data:
            continue
        try:
            if to_decimal(data.get(field)) < 0:
                errors[field] = f"{field} must not be negative"
        except ValueError:
            errors[field] = f"{field} must be a number"

    if not partial or "expiryDate" in data:
        try:
            if not parse_date(data.get("expiryDate")):
                errors["expiryDate"] = "expiryDate is required"
        except ValueError:
            errors["expiryDate"] = "expiryDate must be a valid date"

    if "category" not in errors and data.get("category") is not None:
        if not Category.query.get(int(data["category"])):
            errors["category"] = "category does not exist"
    if "supplier" not in errors and data.get("supplier") is not None:
        if not Supplier.query.get(int(data["supplier"])):
            errors["supplier"] = "supplier does not exist"
    if product is not None and "totalQuantity" in data and "totalQuantity" not in errors:
        minimum = product.total_quantity - product.quantity_left
        if int(data["totalQuantity"]) < minimum:
            errors["totalQuantity"] = f"totalQuantity must be at least {minimum}, the quantity already sold"

    return errors


class ProductService:
    @staticmethod
    def create_product(data, image_path=None):
        """
        Create product from the form payload.
        New stock starts fully on hand: quantity_left = total_quantity.
        """
        product = Product(
            name=data["name"].strip(),
            category_id=int(data["category"]),
            supplier_id=int(data["supplier"]),
            total_quantity=int(data["totalQuantity"]),
            selling_price=to_decimal(data["sellingPrice"]),
            cost_price=to_decimal(data["costPrice"]),
            expiry_date=parse_date(data.get("expiryDate")),
            reorder_level=int(data.get("reorderLevel") or 0),
            quantity_sold=0,
            product_image=image_path,
        )
        product.quantity_left = product.total_quantity
        apply_derived_fields(product)
        db.session.add(product)
        db.session.commit()
        return product

    @staticmethod
    def update_product(product_id, data, image_path=None):
        """Restocking is expressed as a new totalQuantity; the delta moves quantity_left."""
        product = Product.query.get(product_id)
        if not product:
            raise ResourceNotFoundException(f"Product with ID {product_id} not found")

        if "name" in data:
            product.name = data["name"].strip()
        if "category" in data:
            product.category_id = int(data["category"])
        if "supplier" in data:
            product.supplier_id = int(data["supplier"])
        if "sellingPrice" in data:
            product.selling_price = to_decimal(data["sellingPrice"])
        if "costPrice" in data:
            product.cost_price = to_decimal(data["costPrice"])
        if "expiryDate" in data:
            product.expiry_date = parse_date(data["expiryDate"])
        if "reorderLevel" in data:
            product.reorder_level = int(data["reorderLevel"])
        if "totalQuantity" in data:
            new_total = int(data["totalQuantity"])
            product.quantity_left = product.quantity_left + (new_total - product.total_quantity)
            product.total_quantity = new_total
        if image_path:
            product.product_image = image_path

        apply_derived_fields(product)
        db.session.commit()
        return product

    @staticmethod
    def get_product_by_id(product_id):
        return Product.query.get(product_id)

    @staticmethod
    def serialize(product, today=None):
        return {
            "id": product.id,
            "name": product.name,
            "category": product.category.name if product.category else None,
            "category_id": product.category_id,
            "supplier": product.supplier.company_name if product.supplier else None,
            "supplier_id": product.supplier_id,
            "totalQuantity": product.total_quantity,
            "quantityLeft": product.quantity_left,
            "quantitySold": product.quantity_sold,
            "sellingPrice": str(product.selling_price),
            "costPrice": str(product.cost_price),
            "profit": str(product.profit),
            "totalProfit": str(product.total_profit),
            "image": product.product_image,
            "expiryDate": product.expiry_date.isoformat() if product.expiry_date else None,
            "reorderLevel": product.reorder_level,
            "status": stock_status(product.quantity_left, product.reorder_level, product.expiry_date, today),
        }

    @staticmethod
    def list_products(today=None):
        products = Product.query.order_by(Product.id).all()
        return [ProductService.serialize(p, today) for p in products]

    @staticmethod
    def pos_products():
        """Compact listing for the checkout screen."""
        products = Product.query.order_by(Product.name).all()
        return [{
            "id": p.id,
            "name": p.name,
            "category": p.category.name if p.category else None,
            "stock": p.quantity_left,
            "price": str(p.selling_price),
            "image": p.product_image,
        } for p in products]
