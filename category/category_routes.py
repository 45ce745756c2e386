from flask import Blueprint, request, jsonify
from sqlalchemy import func
from src.extensions import db
from category.category import Category
from products.product import Product
from user.auth_middleware import require_role
from user.user import INVENTORY

bp = Blueprint("categories", __name__)


def _validate(data, category_id=None):
    errors = {}
    name = (data.get("name") or "").strip()
    if not name:
        errors["name"] = "name is required"
    elif len(name) > 255:
        errors["name"] = "name must not exceed 255 characters"
    else:
        existing = Category.query.filter(func.lower(Category.name) == name.lower()).first()
        if existing and existing.id != category_id:
            errors["name"] = "A category with this name already exists"

    description = data.get("description")
    if description and len(description) > 1000:
        errors["description"] = "description must not exceed 1000 characters"
    return errors


def _serialize(category, product_count=0):
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "productCount": product_count,
        "createdAt": category.created_at.isoformat() if category.created_at else None,
    }


@bp.route("/", methods=["GET"])
@require_role(INVENTORY)
def list_categories():
    counts = dict(
        db.session.query(Product.category_id, func.count(Product.id))
        .group_by(Product.category_id)
        .all()
    )
    cats = Category.query.order_by(Category.created_at.desc()).all()
    return jsonify([_serialize(c, counts.get(c.id, 0)) for c in cats]), 200


@bp.route("/options", methods=["GET"])
@require_role(INVENTORY)
def category_options():
    cats = Category.query.order_by(Category.name).all()
    return jsonify([{"value": c.id, "label": c.name} for c in cats]), 200


@bp.route("/", methods=["POST"])
@require_role(INVENTORY)
def create_category():
    data = request.get_json() or {}
    errors = _validate(data)
    if errors:
        return jsonify({"error": "Validation failed", "errors": errors}), 400

    c = Category(name=data["name"].strip(), description=data.get("description"))
    db.session.add(c)
    db.session.commit()
    return jsonify(_serialize(c)), 201


@bp.route("/<int:category_id>", methods=["GET"])
@require_role(INVENTORY)
def get_category(category_id):
    c = Category.query.get(category_id)
    if not c:
        return jsonify({"error": "Not found"}), 404
    return jsonify(_serialize(c, len(c.products))), 200


@bp.route("/<int:category_id>", methods=["PUT"])
@require_role(INVENTORY)
def update_category(category_id):
    c = Category.query.get(category_id)
    if not c:
        return jsonify({"error": "Not found"}), 404

    data = request.get_json() or {}
    errors = _validate(data, category_id=c.id)
    if errors:
        return jsonify({"error": "Validation failed", "errors": errors}), 400

    c.name = data["name"].strip()
    c.description = data.get("description", c.description)
    db.session.commit()
    return jsonify(_serialize(c, len(c.products))), 200


@bp.route("/<int:category_id>", methods=["DELETE"])
@require_role(INVENTORY)
def delete_category(category_id):
    c = Category.query.get(category_id)
    if not c:
        return jsonify({"error": "Not found"}), 404
    db.session.delete(c)
    db.session.commit()
    return jsonify({"message": "Category deleted successfully"}), 200


@bp.route("/bulk-delete", methods=["POST"])
@require_role(INVENTORY)
def bulk_delete():
    data = request.get_json() or {}
    ids = data.get("ids")
    if not isinstance(ids, list) or not ids:
        return jsonify({"error": "ids must be a non-empty list"}), 400

    cats = Category.query.filter(Category.id.in_(ids)).all()
    for c in cats:
        db.session.delete(c)
    db.session.commit()
    return jsonify({"message": f"{len(cats)} categories deleted successfully", "deleted": len(cats)}), 200
