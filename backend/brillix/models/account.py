from __future__ import annotations

import re

from ..extensions import db
from ..errors import ModelValidationError
from ..security import hash_password, verify_password
from ..time_utils import to_utc_z


USER_ROLES = ("owner", "admin", "manager", "employee")

EMAIL_RE = re.compile(r"^\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,3})+$")
PHONE_RE = re.compile(r"^[0-9+\-\s()]*$")


class User(db.Model):
    """
    User accounts for authentication and attribution.

    Every account belongs to exactly one business (business_id). The column is
    nullable only so registration can insert the account before its business
    exists; validate() enforces the reference unless the caller defers it.

    Email is unique across the whole system, not per business.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_business_id", "business_id"),
        db.Index("ix_users_is_active", "is_active"),
        db.Index("ix_users_role", "role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    phone = db.Column(db.String(32), nullable=True)

    # Bcrypt hashed password, never serialized
    password_hash = db.Column(db.String(255), nullable=False)

    business_id = db.Column(
        db.Integer,
        db.ForeignKey("businesses.id", use_alter=True, name="fk_users_business_id"),
        nullable=True,
    )

    role = db.Column(db.String(16), nullable=False, default="owner")

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_email_verified = db.Column(db.Boolean, nullable=False, default=False)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    reset_password_token = db.Column(db.String(255), nullable=True)
    reset_password_expires_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    business = db.relationship(
        "Business",
        foreign_keys=[business_id],
        post_update=True,
        backref=db.backref("members", lazy=True),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"

    @property
    def password(self):
        raise AttributeError("password is write-only")

    @password.setter
    def password(self, plaintext: str) -> None:
        # Fresh salt on every assignment; nothing else rewrites password_hash
        self.password_hash = hash_password(plaintext)

    def check_password(self, plaintext: str) -> bool:
        return verify_password(plaintext, self.password_hash)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def validate(self, defer: tuple[str, ...] = ()) -> None:
        """Raise ModelValidationError listing every invalid field."""
        errors = []

        if not (self.first_name or "").strip():
            errors.append({"field": "firstName", "message": "First name is required"})
        elif len(self.first_name) > 50:
            errors.append({"field": "firstName", "message": "First name cannot exceed 50 characters"})

        if not (self.last_name or "").strip():
            errors.append({"field": "lastName", "message": "Last name is required"})
        elif len(self.last_name) > 50:
            errors.append({"field": "lastName", "message": "Last name cannot exceed 50 characters"})

        if not self.email:
            errors.append({"field": "email", "message": "Email is required"})
        elif not EMAIL_RE.match(self.email):
            errors.append({"field": "email", "message": "Please provide a valid email address"})

        if self.phone and not PHONE_RE.match(self.phone):
            errors.append({"field": "phone", "message": "Please provide a valid phone number"})

        if (self.role or "owner") not in USER_ROLES:
            errors.append({"field": "role", "message": f"Invalid role: {self.role}"})

        if not self.password_hash:
            errors.append({"field": "password", "message": "Password is required"})

        if "business_id" not in defer and self.business_id is None:
            errors.append({"field": "business", "message": "Business is required"})

        if errors:
            raise ModelValidationError(errors)

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "business": self.business_id,
            "isActive": self.is_active,
            "isEmailVerified": self.is_email_verified,
            "lastLogin": to_utc_z(self.last_login_at),
            "createdAt": to_utc_z(self.created_at),
        }
