from flask import Blueprint, request, jsonify
from src.exceptions import ImportFileError
from products.import_service import ProductImportService
from user.auth_middleware import require_role
from user.user import INVENTORY

bp = Blueprint("imports", __name__)


@bp.route("/products/upload", methods=["POST"])
@require_role(INVENTORY)
def upload_products():
    uploaded_file = request.files.get('csv_file')
    try:
        ProductImportService.check_file(uploaded_file)
    except ImportFileError as e:
        return jsonify({"message": "Validation failed", "errors": {"csv_file": [str(e)]}}), 422

    try:
        text = uploaded_file.stream.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        return jsonify({"message": "Validation failed", "errors": {"csv_file": ["The file must be UTF-8 encoded text."]}}), 422

    try:
        result = ProductImportService.import_csv(text)
    except Exception as e:
        return jsonify({"message": f"Error importing file: {e}"}), 500
    return jsonify(result), 200
