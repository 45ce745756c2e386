from flask import Blueprint, request, jsonify
from src.extensions import db
from suppliers.supplier import Supplier
from user.auth_middleware import require_role
from user.user import INVENTORY
from src.validation import is_valid_email

bp = Blueprint("suppliers", __name__)

STATUSES = ("active", "inactive")


def validate_supplier(data, supplier_id=None):
    errors = {}

    company_name = (data.get("companyName") or "").strip()
    if not company_name:
        errors["companyName"] = "companyName is required"
    elif len(company_name) > 255:
        errors["companyName"] = "companyName must not exceed 255 characters"

    contact_person = (data.get("contactPerson") or "").strip()
    if not contact_person:
        errors["contactPerson"] = "contactPerson is required"
    elif len(contact_person) > 255:
        errors["contactPerson"] = "contactPerson must not exceed 255 characters"

    email = (data.get("email") or "").strip()
    if not email:
        errors["email"] = "email is required"
    elif not is_valid_email(email):
        errors["email"] = "email must be a valid email address"
    else:
        existing = Supplier.query.filter_by(email=email).first()
        if existing and existing.id != supplier_id:
            errors["email"] = "A supplier with this email already exists"

    phone = (data.get("phone") or "").strip()
    if not phone:
        errors["phone"] = "phone is required"
    elif len(phone) > 20:
        errors["phone"] = "phone must not exceed 20 characters"

    if data.get("status") not in STATUSES:
        errors["status"] = "status must be active or inactive"

    return errors


def _serialize(s):
    return {
        "id": s.id,
        "companyName": s.company_name,
        "contactPerson": s.name,
        "email": s.email,
        "phone": s.phone,
        "address": s.address,
        "status": s.status,
        "productCount": len(s.products),
        "createdAt": s.created_at.isoformat() if s.created_at else None,
        "updatedAt": s.updated_at.isoformat() if s.updated_at else None,
    }


def _apply(s, data):
    s.company_name = data["companyName"].strip()
    s.name = data["contactPerson"].strip()
    s.email = data["email"].strip()
    s.phone = data["phone"].strip()
    s.address = data.get("address")
    s.status = data["status"]


@bp.route("/", methods=["GET"])
@require_role(INVENTORY)
def list_suppliers():
    search = request.args.get('search', '').strip()

    query = Supplier.query
    if search:
        query = query.filter(
            db.or_(
                Supplier.company_name.ilike(f'%{search}%'),
                Supplier.name.ilike(f'%{search}%'),
                Supplier.email.ilike(f'%{search}%'),
                Supplier.phone.ilike(f'%{search}%')
            )
        )
    sup = query.order_by(Supplier.created_at.desc()).all()
    return jsonify([_serialize(x) for x in sup]), 200


@bp.route("/options", methods=["GET"])
@require_role(INVENTORY)
def supplier_options():
    sup = Supplier.query.filter_by(status="active").order_by(Supplier.company_name).all()
    return jsonify([{"value": s.id, "label": s.company_name} for s in sup]), 200


@bp.route("/", methods=["POST"])
@require_role(INVENTORY)
def create_supplier():
    data = request.get_json() or {}
    errors = validate_supplier(data)
    if errors:
        return jsonify({"error": "Validation failed", "errors": errors}), 400

    s = Supplier()
    _apply(s, data)
    db.session.add(s)
    db.session.commit()
    return jsonify(_serialize(s)), 201


@bp.route("/<int:supplier_id>", methods=["GET"])
@require_role(INVENTORY)
def get_supplier(supplier_id):
    s = Supplier.query.get(supplier_id)
    if not s:
        return jsonify({"error": "Supplier not found"}), 404
    return jsonify(_serialize(s)), 200


@bp.route("/<int:supplier_id>", methods=["PUT"])
@require_role(INVENTORY)
def update_supplier(supplier_id):
    s = Supplier.query.get(supplier_id)
    if not s:
        return jsonify({"error": "Supplier not found"}), 404

    data = request.get_json() or {}
    errors = validate_supplier(data, supplier_id=s.id)
    if errors:
        return jsonify({"error": "Validation failed", "errors": errors}), 400

    _apply(s, data)
    db.session.commit()
    return jsonify(_serialize(s)), 200


@bp.route("/<int:supplier_id>/toggle-status", methods=["PATCH"])
@require_role(INVENTORY)
def toggle_status(supplier_id):
    s = Supplier.query.get(supplier_id)
    if not s:
        return jsonify({"error": "Supplier not found"}), 404
    s.status = "inactive" if s.status == "active" else "active"
    db.session.commit()
    return jsonify({"message": f"Supplier marked {s.status}", "status": s.status}), 200


@bp.route("/<int:supplier_id>", methods=["DELETE"])
@require_role(INVENTORY)
def delete_supplier(supplier_id):
    s = Supplier.query.get(supplier_id)
    if not s:
        return jsonify({"error": "Supplier not found"}), 404
    db.session.delete(s)
    db.session.commit()
    return jsonify({"message": "Supplier deleted successfully"}), 200
