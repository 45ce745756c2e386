import jwt
from datetime import datetime, timedelta
from flask import current_app
import secrets

JWT_ALGORITHM = 'HS256'


def _access_payload(user, now):
    return {
        'user_id': user.id,
        'name': user.name,
        'role': user.role_name,
        'token_type': 'access',
        'exp': now + timedelta(hours=current_app.config['ACCESS_TOKEN_EXPIRATION_HOURS']),
        'iat': now,
        'jti': secrets.token_hex(16)  # Unique token ID
    }


def generate_tokens(user):
    """Generate both access and refresh tokens for user"""
    now = datetime.utcnow()
    access_hours = current_app.config['ACCESS_TOKEN_EXPIRATION_HOURS']
    refresh_days = current_app.config['REFRESH_TOKEN_EXPIRATION_DAYS']

    access_token = jwt.encode(_access_payload(user, now), current_app.config['JWT_SECRET_KEY'], algorithm=JWT_ALGORITHM)

    refresh_payload = {
        'user_id': user.id,
        'token_type': 'refresh',
        'exp': now + timedelta(days=refresh_days),
        'iat': now,
        'jti': secrets.token_hex(16)
    }
    refresh_token = jwt.encode(refresh_payload, current_app.config['REFRESH_SECRET_KEY'], algorithm=JWT_ALGORITHM)

    return {
        'access_token': access_token,
        'refresh_token': refresh_token,
        'access_expires_in': access_hours * 60 * 60,  # seconds
        'refresh_expires_in': refresh_days * 24 * 60 * 60,  # seconds
        'token_type': 'Bearer'
    }


def _decode(token, secret, token_type):
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
    if payload.get('token_type') != token_type:
        return None
    return payload


def decode_access_token(token):
    """Decode and validate access token"""
    return _decode(token, current_app.config['JWT_SECRET_KEY'], 'access')


def decode_refresh_token(token):
    """Decode and validate refresh token"""
    return _decode(token, current_app.config['REFRESH_SECRET_KEY'], 'refresh')


def refresh_access_token(refresh_token):
    """Generate new access token using refresh token"""
    payload = decode_refresh_token(refresh_token)
    if not payload:
        return None

    from user.user import User
    user = User.query.get(payload['user_id'])
    if not user or not user.is_active:
        return None

    now = datetime.utcnow()
    return {
        'access_token': jwt.encode(_access_payload(user, now), current_app.config['JWT_SECRET_KEY'], algorithm=JWT_ALGORITHM),
        'expires_in': current_app.config['ACCESS_TOKEN_EXPIRATION_HOURS'] * 60 * 60,
        'token_type': 'Bearer'
    }


def get_token_from_header(request):
    """Extract token from Authorization header"""
    auth_header = request.headers.get('Authorization')
    if auth_header and auth_header.startswith('Bearer '):
        return auth_header.split(' ')[1]
    return None
