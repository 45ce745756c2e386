from datetime import datetime
from src.extensions import db
from src.log import get_logger
from user.user import User
from user.exceptions import InvalidCredentialsException, InactiveUserException

logger = get_logger("AuthService")


class AuthService:
    @staticmethod
    def authenticate(email, password):
        """Checks credentials and stamps the login time used as the shift start."""
        user = User.query.filter_by(email=(email or '').strip().lower()).first()
        if not user or not user.check_password(password):
            logger.warning("Failed login attempt for %s", email)
            raise InvalidCredentialsException("Invalid credentials")
        if not user.is_active:
            raise InactiveUserException("User account is inactive")

        user.last_login_at = datetime.utcnow()
        db.session.commit()
        logger.info("User %s logged in", user.id)
        return user
