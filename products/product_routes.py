from flask import Blueprint, request, jsonify, current_app
from werkzeug.utils import secure_filename
from src.extensions import db
from src.exceptions import ResourceNotFoundException
from products.product import Product
from products.product_service import ProductService, validate_product_data
from user.auth_middleware import require_role
from user.user import INVENTORY
import os
import uuid

bp = Blueprint("products", __name__)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}


def _request_data():
    if request.content_type and 'multipart/form-data' in request.content_type:
        return request.form.to_dict(), request.files.get('image')
    return request.get_json() or {}, None


def save_product_image(uploaded_file):
    """Store an uploaded image under UPLOAD_FOLDER/products and return its relative path."""
    filename = secure_filename(uploaded_file.filename)
    extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    if extension not in IMAGE_EXTENSIONS:
        raise ValueError("image must be one of: " + ", ".join(sorted(IMAGE_EXTENSIONS)))

    folder = os.path.join(current_app.config["UPLOAD_FOLDER"], "products")
    os.makedirs(folder, exist_ok=True)

    stored_name = f"{uuid.uuid4().hex[:12]}_{filename}"
    uploaded_file.save(os.path.join(folder, stored_name))
    return f"products/{stored_name}"


# -------------------------
# List all products with stock status
# -------------------------
@bp.route("/", methods=["GET"])
@require_role(INVENTORY)
def list_products():
    return jsonify(ProductService.list_products()), 200


@bp.route("/<int:product_id>", methods=["GET"])
@require_role(INVENTORY)
def get_product(product_id):
    product = ProductService.get_product_by_id(product_id)
    if not product:
        return jsonify({"error": "Product not found"}), 404
    return jsonify(ProductService.serialize(product)), 200


# -------------------------
# Create product (JSON or multipart with image)
# -------------------------
@bp.route("/", methods=["POST"])
@require_role(INVENTORY)
def create_product():
    data, uploaded_file = _request_data()

    errors = validate_product_data(data)
    if errors:
        return jsonify({"error": "Validation failed", "errors": errors}), 400

    try:
        image_path = save_product_image(uploaded_file) if uploaded_file and uploaded_file.filename else None
    except ValueError as e:
        return jsonify({"error": "Validation failed", "errors": {"image": str(e)}}), 400

    try:
        product = ProductService.create_product(data, image_path=image_path)
    except Exception as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 500
    return jsonify(ProductService.serialize(product)), 201


@bp.route("/<int:product_id>", methods=["PUT", "POST"])
@require_role(INVENTORY)
def update_product(product_id):
    data, uploaded_file = _request_data()

    errors = validate_product_data(data, partial=True, product=ProductService.get_product_by_id(product_id))
    if errors:
        return jsonify({"error": "Validation failed", "errors": errors}), 400

    try:
        image_path = save_product_image(uploaded_file) if uploaded_file and uploaded_file.filename else None
    except ValueError as e:
        return jsonify({"error": "Validation failed", "errors": {"image": str(e)}}), 400

    try:
        product = ProductService.update_product(product_id, data, image_path=image_path)
    except ResourceNotFoundException as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 500
    return jsonify(ProductService.serialize(product)), 200


@bp.route("/<int:product_id>", methods=["DELETE"])
@require_role(INVENTORY)
def delete_product(product_id):
    product = Product.query.get(product_id)
    if not product:
        return jsonify({"error": "Product not found"}), 404
    db.session.delete(product)
    db.session.commit()
    return jsonify({"message": "Product deleted successfully"}), 200
