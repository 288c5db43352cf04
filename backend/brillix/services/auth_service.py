# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Passwords are hashed with bcrypt (cost from BCRYPT_ROUNDS). Assigning
User.password is the only way a hash gets written, so unrelated updates never
rehash.

LOGIN MESSAGES:
- Unknown email and wrong password share "Invalid credentials"
- A deactivated account, a missing business and an inactive business each get
  their own message
"""

from flask import current_app

from ..extensions import db
from ..errors import AuthenticationError, AuthorizationError, ValidationError
from ..models import User
from ..security import verify_password
from ..time_utils import utcnow
from . import token_service


INVALID_CREDENTIALS = "Invalid credentials"
MIN_ROTATION_PASSWORD = 6


def find_by_email(email: str) -> User | None:
    return db.session.query(User).filter(User.email == email.strip().lower()).first()


def authenticate(email: str, password: str) -> dict:
    """
    Check credentials and open a session.

    Returns {token, user, business} on success.
    Updates last_login_at on success.

    Raises:
        AuthenticationError: unknown email, wrong password, deactivated account
        AuthorizationError: account has no business, or business is inactive
    """
    user = find_by_email(email)

    if not user:
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not user.is_active:
        raise AuthenticationError("Your account has been deactivated. Please contact support.")

    if not verify_password(password, user.password_hash):
        raise AuthenticationError(INVALID_CREDENTIALS)

    business = user.business
    if business is None:
        raise AuthorizationError("No business associated with this account. Please contact support.")

    if not business.is_active:
        raise AuthorizationError("Your business account is not active. Please contact support.")

    token = token_service.issue_token(user.id)

    user.last_login_at = utcnow()
    db.session.commit()

    current_app.logger.info("User logged in: %s", user.email)

    return {
        "token": token,
        "user": user.to_public_dict(),
        "business": business.to_public_dict(),
    }


def current_session(user: User) -> dict:
    business = user.business
    return {
        "user": user.to_public_dict(),
        "business": business.to_public_dict() if business else None,
    }


def change_password(user: User, current_password: str | None, new_password: str | None) -> str:
    """
    Rotate the account password and return a fresh token.

    Rotation only requires MIN_ROTATION_PASSWORD characters; registration
    applies the stricter policy in validation.validate_registration.
    """
    if not current_password or not new_password:
        raise ValidationError("Please provide current password and new password")

    if not isinstance(new_password, str) or len(new_password) < MIN_ROTATION_PASSWORD:
        raise ValidationError(f"New password must be at least {MIN_ROTATION_PASSWORD} characters long")

    if not verify_password(str(current_password), user.password_hash):
        raise AuthenticationError("Current password is incorrect")

    user.password = new_password
    db.session.commit()

    current_app.logger.info("Password updated for user: %s", user.email)

    return token_service.issue_token(user.id)
