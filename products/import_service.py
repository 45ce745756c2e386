import csv
import io
from decimal import Decimal
from src.extensions import db
from src.exceptions import ImportFileError
from src.log import get_logger
from src.validation import is_valid_email
from products.product import Product
from products.product_service import parse_date, to_decimal, apply_derived_fields
from category.category import Category
from suppliers.supplier import Supplier

logger = get_logger("ProductImport")

COLUMNS = (
    "name", "category_name", "supplier_email", "selling_price",
    "cost_price", "total_quantity", "reorder_level", "expiry_date",
)
MIN_COLUMNS = 7
ALLOWED_EXTENSIONS = ("csv", "txt")


def _is_integer(value):
    try:
        return int(value) == Decimal(value)
    except (ValueError, ArithmeticError):
        return False


def validate_row(row):
    """Returns a list of messages for one mapped CSV row."""
    messages = []

    for field in ("name", "category_name"):
        if not row[field]:
            messages.append(f"The {field} field is required.")
        elif len(row[field]) > 255:
            messages.append(f"The {field} field must not be greater than 255 characters.")

    if not row["supplier_email"]:
        messages.append("The supplier_email field is required.")
    elif not is_valid_email(row["supplier_email"]):
        messages.append("The supplier_email field must be a valid email address.")

    for field in ("selling_price", "cost_price"):
        try:
            if to_decimal(row[field]) < 0:
                messages.append(f"The {field} field must be at least 0.")
        except ValueError:
            messages.append(f"The {field} field must be a number.")

    if not _is_integer(row["total_quantity"]):
        messages.append("The total_quantity field must be an integer.")
    elif int(row["total_quantity"]) < 0:
        messages.append("The total_quantity field must be at least 0.")

    if row["reorder_level"] != "":
        if not _is_integer(row["reorder_level"]):
            messages.append("The reorder_level field must be an integer.")
        elif int(row["reorder_level"]) < 0:
            messages.append("The reorder_level field must be at least 0.")

    if not row["expiry_date"]:
        messages.append("The expiry_date field is required.")
    else:
        try:
            parse_date(row["expiry_date"])
        except ValueError:
            messages.append("The expiry_date field must be a valid date.")

    return messages


class ProductImportService:
    @staticmethod
    def check_file(uploaded_file):
        if uploaded_file is None or not uploaded_file.filename:
            raise ImportFileError("The csv_file field is required.")
        extension = uploaded_file.filename.rsplit('.', 1)[-1].lower() if '.' in uploaded_file.filename else ''
        if extension not in ALLOWED_EXTENSIONS:
            raise ImportFileError("The csv_file field must be a file of type: csv, txt.")

    @staticmethod
    def import_csv(text):
        """
        Import products from CSV text.

        Row 1 is the header. Bad rows are reported as "Row N: ..." and skipped,
        good rows are saved. Unknown categories are created on the fly.
        """
        imported_count = 0
        errors = []

        try:
            reader = csv.reader(io.StringIO(text, newline=''))
            for row_number, data in enumerate(reader, start=1):
                if row_number == 1:
                    continue
                if not any(cell.strip() for cell in data):
                    continue
                if len(data) < MIN_COLUMNS:
                    errors.append(f"Row {row_number}: Insufficient data columns")
                    continue

                row = {field: (data[i].strip() if i < len(data) else "") for i, field in enumerate(COLUMNS)}

                messages = validate_row(row)
                if messages:
                    errors.append(f"Row {row_number}: " + ", ".join(messages))
                    continue

                supplier = Supplier.query.filter_by(email=row["supplier_email"]).first()
                if not supplier:
                    errors.append(f"Row {row_number}: Supplier with email '{row['supplier_email']}' does not exist")
                    continue

                try:
                    with db.session.begin_nested():
                        category = Category.query.filter_by(name=row["category_name"]).first()
                        if not category:
                            category = Category(name=row["category_name"], description="Imported category")
                            db.session.add(category)
                            db.session.flush()

                        total_quantity = int(row["total_quantity"])
                        product = Product(
                            name=row["name"],
                            category_id=category.id,
                            supplier_id=supplier.id,
                            selling_price=to_decimal(row["selling_price"]),
                            cost_price=to_decimal(row["cost_price"]),
                            total_quantity=total_quantity,
                            quantity_left=total_quantity,
                            quantity_sold=0,
                            reorder_level=int(row["reorder_level"] or 0),
                            expiry_date=parse_date(row["expiry_date"]),
                        )
                        apply_derived_fields(product)
                        db.session.add(product)
                    imported_count += 1
                except Exception as e:
                    errors.append(f"Row {row_number}: Failed to create product - {e}")

            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception("Product import failed")
            raise

        logger.info("Product import finished: %s imported, %s rows failed", imported_count, len(errors))

        response = {
            "message": f"Successfully imported {imported_count} products",
            "imported_count": imported_count,
        }
        if errors:
            response["errors"] = errors
            response["message"] += f". {len(errors)} rows failed."
        return response
