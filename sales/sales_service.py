from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from flask import current_app
from src.extensions import db
from src.exceptions import StockValidationError, PayloadValidationError, ResourceNotFoundException
from src.log import get_logger
from products.product import Product
from category.category import Category
from sales.sale import Sale, SaleItem
import re
import uuid

logger = get_logger("SalesService")

CENT = Decimal("0.01")

PAYMENT_METHOD_LABELS = {
    'credit_card': 'Credit Card',
    'debit_card': 'Debit Card',
    'cash': 'Cash',
    'mobile_money': 'Mobile Money',
    'momo': 'Mobile Money',
}


def format_payment_method(method):
    if not method:
        return 'Unknown'
    if method in PAYMENT_METHOD_LABELS:
        return PAYMENT_METHOD_LABELS[method]
    return method.replace('_', ' ').capitalize()


def money(value):
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def generate_transaction_id(prefix=None, now=None):
    """Receipt-friendly id: prefix, sale date and a random uuid fragment."""
    prefix = prefix or current_app.config.get("TRANSACTION_ID_PREFIX", "TNX")
    now = now or datetime.utcnow()
    return f"{prefix}-{now.strftime('%Y%m%d')}-{uuid.uuid4().hex[:10].upper()}"


def _integer(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and re.fullmatch(r"\s*-?\d+\s*", value):
        return int(value)
    return None


def _number(data, field, errors, required=True, minimum=None, maximum=None, key=None):
    key = key or field
    value = data.get(field)
    if value is None or value == "":
        if required:
            errors.setdefault(key, []).append(f"The {field} field is required.")
        return None
    number = None
    if not isinstance(value, bool):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            number = None
    if number is None or not number.is_finite():
        errors.setdefault(key, []).append(f"The {field} field must be a number.")
        return None
    if minimum is not None and number < minimum:
        errors.setdefault(key, []).append(f"The {field} field must be at least {minimum}.")
    if maximum is not None and number > maximum:
        errors.setdefault(key, []).append(f"The {field} field must not be greater than {maximum}.")
    return number


def validate_transaction_payload(data, payment_methods=None):
    """Field-level checks for a checkout payload.

    Returns a dict of field name -> list of messages; empty when valid.
    Product existence is not checked here, the recording step reports
    missing products per line.
    """
    errors = {}
    if not isinstance(data, dict):
        return {"payload": ["A JSON object is required."]}

    payment_methods = payment_methods or current_app.config.get("PAYMENT_METHODS", ("cash", "card"))

    items = data.get("items")
    if not isinstance(items, list) or not items:
        errors["items"] = ["At least one item is required for the transaction."]
    else:
        for index, item in enumerate(items):
            prefix = f"items.{index}"
            if not isinstance(item, dict):
                errors[prefix] = ["Each item must be an object."]
                continue
            if item.get("product_id") in (None, ""):
                errors.setdefault(f"{prefix}.product_id", []).append("The product_id field is required.")
            quantity = _integer(item.get("quantity"))
            if quantity is None:
                errors.setdefault(f"{prefix}.quantity", []).append("Quantity must be an integer.")
            elif quantity < 1:
                errors.setdefault(f"{prefix}.quantity", []).append("Quantity must be at least 1.")
            _number(item, "subtotal", errors, minimum=0, key=f"{prefix}.subtotal")
            _number(item, "price", errors, required=False, minimum=0, key=f"{prefix}.price")

    _number(data, "subtotal", errors, minimum=0)
    _number(data, "discount_amount", errors, minimum=0)
    _number(data, "discount_percentage", errors, required=False, minimum=0, maximum=100)
    _number(data, "total_amount", errors, required=False, minimum=0)
    _number(data, "amount_received", errors, minimum=0)
    _number(data, "change_amount", errors, minimum=0)

    method = data.get("payment_method")
    if not method:
        errors.setdefault("payment_method", []).append("The payment_method field is required.")
    elif method not in payment_methods:
        errors.setdefault("payment_method", []).append(
            "Payment method must be one of: " + ", ".join(payment_methods) + "."
        )

    customer_name = data.get("customer_name")
    if customer_name is not None:
        if not isinstance(customer_name, str):
            errors.setdefault("customer_name", []).append("The customer_name field must be a string.")
        elif len(customer_name) > 255:
            errors.setdefault("customer_name", []).append("The customer_name field must not exceed 255 characters.")

    return errors


class SalesService:
    @staticmethod
    def check_stock(items):
        """Collect every line that cannot be fulfilled instead of stopping at the first."""
        stock_errors = []
        for item in items:
            product_id = _integer(item["product_id"])
            product = Product.query.get(product_id) if product_id is not None else None
            if not product:
                stock_errors.append(f"Product with ID {item['product_id']} not found.")
                continue

            quantity = _integer(item["quantity"])
            if product.quantity_left < quantity:
                stock_errors.append(
                    f"Insufficient stock for {product.name}. "
                    f"Available: {product.quantity_left}, Requested: {quantity}"
                )
        return stock_errors

    @staticmethod
    def _decrement_stock(product_id, quantity):
        """Single conditional UPDATE so two checkouts can never both take the last units."""
        updated = Product.query.filter(
            Product.id == product_id,
            Product.quantity_left >= quantity,
        ).update(
            {
                Product.quantity_left: Product.quantity_left - quantity,
                Product.quantity_sold: Product.quantity_sold + quantity,
            },
            synchronize_session=False,
        )
        return updated == 1

    @staticmethod
    def save_transaction(payload, user_id=None):
        """
        Record a checkout atomically:
         - validate stock for every line (all errors collected)
         - insert the sale header
         - decrement stock and snapshot each line into sale_items
        Nothing is committed unless every line succeeds.
        """
        errors = validate_transaction_payload(payload)
        if errors:
            raise PayloadValidationError(errors)

        items = payload["items"]
        try:
            stock_errors = SalesService.check_stock(items)
            if stock_errors:
                raise StockValidationError(stock_errors)

            logger.info("Saving transaction for user %s: %s", user_id, payload)

            sub_total = money(payload["subtotal"])
            discount_amount = money(payload["discount_amount"])
            grand_total = (sub_total - discount_amount).quantize(CENT, rounding=ROUND_HALF_UP)

            sale = Sale(
                transaction_id=generate_transaction_id(),
                user_id=user_id,
                sub_total=sub_total,
                discount_amount=discount_amount,
                discount_percentage=money(payload.get("discount_percentage") or 0),
                grand_total=grand_total,
                status="completed",
                amount_paid=money(payload["amount_received"]),
                change_amount=money(payload["change_amount"]),
                payment_method=payload["payment_method"],
                customer_name=payload.get("customer_name"),
            )
            db.session.add(sale)
            db.session.flush()

            for item in items:
                product_id = _integer(item["product_id"])
                quantity = _integer(item["quantity"])

                if not SalesService._decrement_stock(product_id, quantity):
                    product = Product.query.get(product_id)
                    if not product:
                        raise StockValidationError([f"Product with ID {item['product_id']} not found."])
                    db.session.refresh(product)
                    raise StockValidationError([
                        f"Insufficient stock for {product.name}. "
                        f"Available: {product.quantity_left}, Requested: {quantity}"
                    ])

                # Re-read after the update so the snapshot carries post-sale levels
                product = Product.query.get(product_id)
                db.session.refresh(product)

                sale_item = SaleItem(
                    sale_id=sale.id,
                    product_id=product.id,
                    category_id=product.category_id,
                    product_name=product.name,
                    quantity=quantity,
                    price=product.selling_price,
                    total_amount=money(item["subtotal"]),
                    quantity_left=product.quantity_left,
                    quantity_sold=product.quantity_sold,
                    profit=money(Decimal(str(product.profit)) * quantity),
                    expiry_date=product.expiry_date,
                )
                db.session.add(sale_item)

            db.session.commit()
            return sale
        except StockValidationError:
            db.session.rollback()
            raise
        except Exception:
            db.session.rollback()
            logger.exception("Transaction failed for user %s, payload: %s", user_id, payload)
            raise

    # -------------------------
    # Read side
    # -------------------------
    @staticmethod
    def serialize_sale(sale):
        return {
            "id": sale.id,
            "transaction_id": sale.transaction_id,
            "user_id": sale.user_id,
            "cashier": sale.user.name if sale.user else None,
            "customer_name": sale.customer_name,
            "sub_total": str(sale.sub_total),
            "discount_amount": str(sale.discount_amount),
            "discount_percentage": str(sale.discount_percentage) if sale.discount_percentage is not None else None,
            "grand_total": str(sale.grand_total),
            "amount_paid": str(sale.amount_paid),
            "change_amount": str(sale.change_amount),
            "payment_method": sale.payment_method,
            "status": sale.status,
            "items_count": sum(i.quantity for i in sale.sale_items),
            "created_at": sale.created_at.isoformat() if sale.created_at else None,
        }

    @staticmethod
    def serialize_sale_item(item):
        return {
            "id": item.id,
            "sale_id": item.sale_id,
            "product_id": item.product_id,
            "category_id": item.category_id,
            "product_name": item.product_name,
            "quantity": item.quantity,
            "price": str(item.price),
            "total_amount": str(item.total_amount),
            "quantity_left": item.quantity_left,
            "quantity_sold": item.quantity_sold,
            "profit": str(item.profit),
            "expiry_date": item.expiry_date.isoformat() if item.expiry_date else None,
        }

    @staticmethod
    def list_transactions():
        sales = Sale.query.order_by(Sale.created_at.desc()).all()
        return [SalesService.serialize_sale(s) for s in sales]

    @staticmethod
    def get_sale(sale_id):
        sale = Sale.query.get(sale_id)
        if not sale:
            raise ResourceNotFoundException(f"Transaction {sale_id} not found")
        return sale

    @staticmethod
    def sale_items(sale_id):
        sale = SalesService.get_sale(sale_id)
        return [SalesService.serialize_sale_item(i) for i in sale.sale_items]

    @staticmethod
    def transaction_details(sale_id):
        sale = SalesService.get_sale(sale_id)
        details = SalesService.serialize_sale(sale)
        details["items"] = [SalesService.serialize_sale_item(i) for i in sale.sale_items]
        return details

    @staticmethod
    def sales_details():
        """One row per sold line, joined with its header and category."""
        rows = (
            db.session.query(SaleItem, Sale, Category.name)
            .join(Sale, SaleItem.sale_id == Sale.id)
            .outerjoin(Category, SaleItem.category_id == Category.id)
            .order_by(Sale.created_at.desc(), SaleItem.id)
            .all()
        )
        result = []
        for item, sale, category_name in rows:
            price = Decimal(str(item.price))
            profit = Decimal(str(item.profit))
            margin = float(round(profit / price * 100, 2)) if price else 0.0
            result.append({
                "id": item.id,
                "saleDate": item.created_at.strftime('%Y-%m-%d') if item.created_at else None,
                "transactionId": sale.transaction_id,
                "productName": item.product_name,
                "category": category_name,
                "customerName": sale.customer_name,
                "quantity": item.quantity,
                "sellingPrice": float(price),
                "totalAmount": float(item.total_amount),
                "profit": float(profit),
                "paymentMethod": sale.payment_method,
                "salesPerson": sale.user.name if sale.user else None,
                "profitMargin": margin,
            })
        return result
