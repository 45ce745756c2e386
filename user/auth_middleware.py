from functools import wraps
from flask import jsonify, g
from user.user import User, SUPER_ADMIN, ADMIN
from user.jwt_middleware import jwt_required, get_current_user

ADMIN_ROLES = (SUPER_ADMIN, ADMIN)


def require_role(*roles):
    """JWT-based role check. Admin roles are always allowed."""
    allowed = set(roles) | set(ADMIN_ROLES)

    def decorator(f):
        @wraps(f)
        @jwt_required
        def decorated_function(*args, **kwargs):
            current_user = get_current_user()

            # Role and status are re-read so deactivation takes effect immediately
            user = User.query.get(current_user['user_id'])
            if not user:
                return jsonify({'error': 'User not found'}), 401
            if not user.is_active:
                return jsonify({'error': 'User account is inactive'}), 403

            if user.role_name not in allowed:
                return jsonify({'error': 'Access denied'}), 403

            g.current_user['role'] = user.role_name
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def require_exact_role(role):
    """Only the given role passes; used for per-user views such as the cashier dashboard."""
    def decorator(f):
        @wraps(f)
        @jwt_required
        def decorated_function(*args, **kwargs):
            user = User.query.get(get_current_user()['user_id'])
            if not user or not user.is_active or user.role_name != role:
                return jsonify({'error': 'Unauthorized'}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator
