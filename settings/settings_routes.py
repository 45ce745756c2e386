from flask import Blueprint, request, jsonify
from src.extensions import db
from src.validation import is_valid_email, is_valid_url
from settings.company_settings import CompanySetting
from settings.settings_cache import settings_cache
from user.auth_middleware import require_role
from user.user import CASHIER, INVENTORY

bp = Blueprint("settings", __name__)

# payload key -> (column, required, max length)
FIELDS = {
    "companyName": ("company_name", True, 255),
    "email": ("email", True, 255),
    "phone": ("phone", True, 20),
    "address": ("address", True, 500),
    "country": ("country", True, 100),
    "website": ("website", False, 255),
    "returnPolicy": ("return_policy", False, None),
    "thankYouMessage": ("thank_you_message", False, None),
    "logo": ("logo", False, 500),
}


def validate_settings(data):
    errors = {}
    for key, (_, required, max_length) in FIELDS.items():
        value = data.get(key)
        if value in (None, ""):
            if required:
                errors[key] = f"{key} is required"
            continue
        if not isinstance(value, str):
            errors[key] = f"{key} must be a string"
        elif max_length and len(value) > max_length:
            errors[key] = f"{key} must not exceed {max_length} characters"

    if "email" not in errors and not is_valid_email(data.get("email")):
        errors["email"] = "email must be a valid email address"
    if data.get("website") and "website" not in errors and not is_valid_url(data["website"]):
        errors["website"] = "website must be a valid URL"
    return errors


@bp.route("/", methods=["GET"])
@require_role(CASHIER, INVENTORY)
def get_settings():
    settings = settings_cache.get()
    if not settings:
        return jsonify({"message": "No settings found"}), 404
    return jsonify(settings), 200


@bp.route("/", methods=["POST"])
@require_role()
def save_settings():
    data = request.get_json() or {}
    errors = validate_settings(data)
    if errors:
        return jsonify({"error": "Validation failed", "errors": errors}), 400

    settings = CompanySetting.query.first()
    created = settings is None
    if created:
        settings = CompanySetting()
        db.session.add(settings)

    for key, (column, _, _) in FIELDS.items():
        if key in data:
            setattr(settings, column, data[key] or None)

    db.session.commit()
    settings_cache.invalidate()

    return jsonify({
        "message": "Settings created successfully" if created else "Settings updated successfully",
        "settings": settings.to_dict(),
    }), 201 if created else 200
