from __future__ import annotations

from ..extensions import db
from ..errors import ModelValidationError
from ..time_utils import to_utc_z
from .account import EMAIL_RE


INDUSTRIES = (
    "retail",
    "restaurant",
    "services",
    "manufacturing",
    "technology",
    "healthcare",
    "education",
    "real-estate",
    "finance",
    "other",
)
CURRENCIES = ("NGN", "USD", "EUR", "GBP")
SUBSCRIPTION_STATUSES = ("trial", "active", "suspended", "cancelled")
SUBSCRIPTION_PLANS = ("free", "basic", "premium", "enterprise")

ADDRESS_FIELDS = ("street", "city", "state", "country", "postalCode")
DEFAULT_COUNTRY = "Nigeria"


def default_address() -> dict:
    return {"street": None, "city": None, "state": None, "country": DEFAULT_COUNTRY, "postalCode": None}


class Business(db.Model):
    """
    Tenant root: every account belongs to exactly one business.

    Preferences (categories, units, product types) live in a single JSON
    document on the row, so replacing them is a one-row write. Callers must
    assign a new dict rather than mutate the stored one in place.
    """
    __tablename__ = "businesses"
    __table_args__ = (
        db.Index("ix_businesses_owner_id", "owner_id"),
        db.Index("ix_businesses_name", "name"),
        db.Index("ix_businesses_is_active", "is_active"),
        db.Index("ix_businesses_subscription_status", "subscription_status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    industry = db.Column(db.String(32), nullable=False, default="other")

    # Contact
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    website = db.Column(db.String(255), nullable=True)
    address = db.Column(db.JSON, nullable=True, default=default_address)

    # Registration: unique when present, NULLs do not collide
    registration_number = db.Column(db.String(64), nullable=True, unique=True)
    tax_id = db.Column(db.String(64), nullable=True)

    currency = db.Column(db.String(3), nullable=False, default="NGN")
    timezone = db.Column(db.String(64), nullable=False, default="Africa/Lagos")

    preferences = db.Column(db.JSON, nullable=True)

    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    subscription_status = db.Column(db.String(16), nullable=False, default="trial")
    subscription_plan = db.Column(db.String(16), nullable=False, default="free")

    logo = db.Column(db.String(512), nullable=True)
    total_employees = db.Column(db.Integer, nullable=False, default=1)
    total_revenue = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    owner = db.relationship("User", foreign_keys=[owner_id])

    def __repr__(self) -> str:
        return f"<Business id={self.id} name={self.name!r}>"

    def validate(self) -> None:
        errors = []

        if not (self.name or "").strip():
            errors.append({"field": "name", "message": "Business name is required"})
        elif len(self.name) > 100:
            errors.append({"field": "name", "message": "Business name cannot exceed 100 characters"})

        if self.description and len(self.description) > 500:
            errors.append({"field": "description", "message": "Description cannot exceed 500 characters"})

        if (self.industry or "other") not in INDUSTRIES:
            errors.append({"field": "industry", "message": f"Invalid industry: {self.industry}"})

        if self.email and not EMAIL_RE.match(self.email):
            errors.append({"field": "email", "message": "Please provide a valid email address"})

        if (self.currency or "NGN") not in CURRENCIES:
            errors.append({"field": "currency", "message": f"Invalid currency: {self.currency}"})

        if (self.subscription_status or "trial") not in SUBSCRIPTION_STATUSES:
            errors.append({"field": "subscriptionStatus", "message": "Invalid subscription status"})

        if (self.subscription_plan or "free") not in SUBSCRIPTION_PLANS:
            errors.append({"field": "subscriptionPlan", "message": "Invalid subscription plan"})

        if self.owner_id is None:
            errors.append({"field": "owner", "message": "Owner is required"})

        if errors:
            raise ModelValidationError(errors)

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "industry": self.industry,
            "email": self.email,
            "phone": self.phone,
            "website": self.website,
            "address": self.address,
            "currency": self.currency,
            "timezone": self.timezone,
            "logo": self.logo,
            "subscriptionPlan": self.subscription_plan,
            "subscriptionStatus": self.subscription_status,
            "createdAt": to_utc_z(self.created_at),
        }

    def to_summary_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "industry": self.industry,
            "subscriptionPlan": self.subscription_plan,
        }
