from flask import Blueprint, request, jsonify, current_app
from src.extensions import db
from src.validation import is_valid_email
from user.user import User, Role, ROLE_NAMES
from user.jwt_utils import generate_tokens, refresh_access_token
from user.jwt_middleware import jwt_required, get_current_user
from user.auth_middleware import require_role
from user.auth_service import AuthService
from user.exceptions import InvalidCredentialsException, InactiveUserException

bp = Blueprint('user', __name__)

STATUSES = ('active', 'inactive')


def serialize_user(user):
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'phone': user.phone,
        'role': user.role_name,
        'status': user.status,
        'lastLoginAt': user.last_login_at.isoformat() if user.last_login_at else None,
        'createdAt': user.created_at.isoformat() if user.created_at else None,
    }


def validate_user(data, user_id=None):
    errors = {}

    name = (data.get('name') or '').strip()
    if not name:
        errors['name'] = 'name is required'
    elif len(name) > 255:
        errors['name'] = 'name must not exceed 255 characters'

    email = (data.get('email') or '').strip().lower()
    if not email:
        errors['email'] = 'email is required'
    elif not is_valid_email(email):
        errors['email'] = 'email must be a valid email address'
    else:
        existing = User.query.filter_by(email=email).first()
        if existing and existing.id != user_id:
            errors['email'] = 'A user with this email already exists'

    phone = data.get('phone')
    if phone and len(phone) > 20:
        errors['phone'] = 'phone must not exceed 20 characters'

    if data.get('role') not in ROLE_NAMES:
        errors['role'] = 'role must be one of: ' + ', '.join(ROLE_NAMES)

    if data.get('status', 'active') not in STATUSES:
        errors['status'] = 'status must be active or inactive'

    return errors


@bp.route('/login', methods=['POST'])
def login():
    data = request.get_json() or {}
    email = data.get('email')
    password = data.get('password')

    if not email or not password:
        return jsonify({'error': 'Email and password required'}), 400

    try:
        user = AuthService.authenticate(email, password)
    except InvalidCredentialsException:
        return jsonify({'error': 'Invalid credentials'}), 401
    except InactiveUserException:
        return jsonify({'error': 'User account is inactive'}), 403

    tokens = generate_tokens(user)
    return jsonify({
        'success': True,
        'access_token': tokens['access_token'],
        'refresh_token': tokens['refresh_token'],
        'access_expires_in': tokens['access_expires_in'],
        'refresh_expires_in': tokens['refresh_expires_in'],
        'token_type': tokens['token_type'],
        'user': serialize_user(user)
    }), 200


@bp.route('/logout', methods=['POST'])
def logout():
    return jsonify({'success': True, 'message': 'Logged out successfully'})


@bp.route('/refresh', methods=['POST'])
def refresh_token():
    """Refresh access token using refresh token"""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({
            'error': 'JSON data required',
            'error_code': 'NO_JSON_DATA'
        }), 400

    refresh_token = data.get('refresh_token')
    if not refresh_token:
        return jsonify({
            'error': 'Refresh token required',
            'error_code': 'REFRESH_TOKEN_MISSING'
        }), 400

    result = refresh_access_token(refresh_token)
    if not result:
        return jsonify({
            'error': 'Invalid or expired refresh token',
            'error_code': 'REFRESH_TOKEN_INVALID'
        }), 401

    return jsonify({
        'success': True,
        'access_token': result['access_token'],
        'expires_in': result['expires_in'],
        'token_type': result['token_type']
    }), 200


@bp.route('/me', methods=['GET'])
@jwt_required
def me():
    user = User.query.get(get_current_user()['user_id'])
    if not user:
        return jsonify({'error': 'User not found'}), 404
    return jsonify(serialize_user(user)), 200


# -------------------------
# User management (admins)
# -------------------------
@bp.route('/users', methods=['GET'])
@require_role()
def list_users():
    users = User.query.order_by(User.created_at.desc()).all()
    return jsonify([serialize_user(u) for u in users]), 200


@bp.route('/users', methods=['POST'])
@require_role()
def create_user():
    data = request.get_json() or {}
    errors = validate_user(data)
    if errors:
        return jsonify({'error': 'Validation failed', 'errors': errors}), 400

    user = User(
        name=data['name'].strip(),
        email=data['email'].strip().lower(),
        phone=data.get('phone'),
        role=Role.query.filter_by(name=data['role']).first(),
        status=data.get('status', 'active'),
    )
    user.set_password(data.get('password') or current_app.config['DEFAULT_USER_PASSWORD'])
    db.session.add(user)
    db.session.commit()
    return jsonify(serialize_user(user)), 201


@bp.route('/users/<int:user_id>', methods=['GET'])
@require_role()
def get_user(user_id):
    user = User.query.get(user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404
    return jsonify(serialize_user(user)), 200


@bp.route('/users/<int:user_id>', methods=['PUT'])
@require_role()
def update_user(user_id):
    user = User.query.get(user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404

    data = request.get_json() or {}
    data.setdefault('status', user.status)
    errors = validate_user(data, user_id=user.id)
    if errors:
        return jsonify({'error': 'Validation failed', 'errors': errors}), 400

    user.name = data['name'].strip()
    user.email = data['email'].strip().lower()
    user.phone = data.get('phone')
    user.role = Role.query.filter_by(name=data['role']).first()
    user.status = data['status']
    db.session.commit()
    return jsonify(serialize_user(user)), 200


@bp.route('/users/<int:user_id>/toggle-status', methods=['PATCH'])
@require_role()
def toggle_user_status(user_id):
    user = User.query.get(user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404
    if user.id == get_current_user()['user_id']:
        return jsonify({'error': 'You cannot deactivate your own account'}), 400

    user.status = 'inactive' if user.is_active else 'active'
    db.session.commit()
    return jsonify({'message': f'User marked {user.status}', 'status': user.status}), 200


@bp.route('/users/<int:user_id>/reset-password', methods=['POST'])
@require_role()
def reset_password(user_id):
    user = User.query.get(user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404

    data = request.get_json() or {}
    new_password = data.get('newPassword') or ''
    if len(new_password) < 6:
        return jsonify({'error': 'Validation failed',
                        'errors': {'newPassword': 'newPassword must be at least 6 characters'}}), 400
    if new_password != data.get('confirmPassword'):
        return jsonify({'error': 'Validation failed',
                        'errors': {'confirmPassword': 'Passwords do not match'}}), 400

    user.set_password(new_password)
    db.session.commit()
    return jsonify({'message': 'Password reset successfully'}), 200


@bp.route('/users/<int:user_id>', methods=['DELETE'])
@require_role()
def delete_user(user_id):
    user = User.query.get(user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404
    if user.id == get_current_user()['user_id']:
        return jsonify({'error': 'You cannot delete your own account'}), 400

    db.session.delete(user)
    db.session.commit()
    return jsonify({'message': 'User deleted successfully'}), 200


@bp.route('/roles', methods=['GET'])
@require_role()
def list_roles():
    roles = Role.query.order_by(Role.id).all()
    return jsonify([{'id': r.id, 'name': r.name, 'description': r.description} for r in roles]), 200
