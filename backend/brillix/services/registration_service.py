# Overview: Service-layer operations for self-registration; creates an account and its business atomically.

"""
Registration: one account + one business, or neither.

The two rows reference each other (users.business_id, businesses.owner_id),
so neither can be complete without the other's id:

1. Insert the account with its business reference deferred -> account id
2. Insert the business owned by that account id -> business id
3. Point the account at the business, validate fully, stamp last login
4. Commit

Everything between the first flush and the commit runs in one session
transaction. Any exception rolls the whole thing back and is re-raised for
the central error handler.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..errors import ConflictError, ValidationError
from ..models import User
from ..time_utils import utcnow
from ..validation import REGISTRATION_REQUIRED, missing_registration_fields, validate_registration
from . import token_service
from .auth_service import find_by_email
from .preferences_service import new_business_with_defaults


def register_account(payload: dict | None) -> dict:
    """
    Create an owner account and its business.

    Returns {token, user, business}.

    Raises:
        ValidationError: missing or malformed fields
        ConflictError: email already registered
        ModelValidationError / IntegrityError: store-level failures (after rollback)
    """
    payload = payload or {}

    if missing_registration_fields(payload):
        raise ValidationError(
            f"Please provide all required fields: {', '.join(REGISTRATION_REQUIRED)}"
        )

    data = validate_registration(payload)

    if find_by_email(data["email"]):
        raise ConflictError("User with this email already exists")

    try:
        user = User(
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
            phone=data["phone"],
            role="owner",
            is_active=True,
            is_email_verified=False,
        )
        user.password = data["password"]

        # Step 1: account row without its business reference
        user.validate(defer=("business_id",))
        db.session.add(user)
        db.session.flush()

        # Step 2: business owned by the new account
        business = new_business_with_defaults(
            name=data["business_name"],
            owner_id=user.id,
            industry=data["industry"],
            email=data["business_email"] or user.email,
            phone=data["business_phone"] or user.phone,
        )
        business.validate()
        db.session.add(business)
        db.session.flush()

        # Step 3: close the loop, now with full validation
        user.business_id = business.id
        user.last_login_at = utcnow()
        user.validate()
        db.session.flush()

        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Registration failed for %s", data["email"])
        raise

    token = token_service.issue_token(user.id)

    current_app.logger.info("New user registered: %s", user.email)

    return {
        "token": token,
        "user": user.to_public_dict(),
        "business": business.to_public_dict(),
    }
