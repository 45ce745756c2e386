from .user import User, Role, SUPER_ADMIN, ADMIN, CASHIER, INVENTORY, ROLE_NAMES
from .auth_middleware import require_role, require_exact_role
from .init_data import init_roles, create_admin_user, seed_all

__all__ = [
    'User', 'Role', 'SUPER_ADMIN', 'ADMIN', 'CASHIER', 'INVENTORY', 'ROLE_NAMES',
    'require_role', 'require_exact_role',
    'init_roles', 'create_admin_user', 'seed_all'
]
