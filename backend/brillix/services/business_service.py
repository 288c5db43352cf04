# Overview: Service-layer operations for the business profile.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..errors import NotFoundError, ValidationError
from ..models import Business, CURRENCIES, INDUSTRIES
from ..models.business import ADDRESS_FIELDS, default_address
from ..validation import ModelValidationPolicy, validate_payload


PROFILE_POLICY = ModelValidationPolicy(
    writable_fields={
        "name": "name",
        "description": "description",
        "industry": "industry",
        "email": "email",
        "phone": "phone",
        "website": "website",
        "address": "address",
        "currency": "currency",
        "timezone": "timezone",
        "registrationNumber": "registration_number",
        "taxId": "tax_id",
    },
    choices={
        "industry": INDUSTRIES,
        "currency": CURRENCIES,
    },
)


def get_business(business_id: int | None) -> Business:
    business = db.session.get(Business, business_id) if business_id is not None else None
    if not business:
        raise NotFoundError("Business not found")
    return business


def get_profile(business: Business) -> dict:
    owner = business.owner
    return {
        "business": business.to_public_dict(),
        "owner": {
            "name": owner.full_name,
            "email": owner.email,
        } if owner else None,
    }


def _merge_address(current: dict | None, patch) -> dict:
    if not isinstance(patch, dict):
        raise ValidationError("address must be an object")

    unknown = [k for k in patch if k not in ADDRESS_FIELDS]
    if unknown:
        raise ValidationError(f"Unknown address field: {', '.join(unknown)}")

    merged = dict(current or default_address())
    for key, value in patch.items():
        merged[key] = str(value).strip() if value is not None else None
    return merged


def update_profile(business: Business, payload: dict | None) -> Business:
    """
    Apply a partial profile update.

    Address is merged into the stored address rather than replaced.
    Email is lower-cased. A blank registration number clears it.
    """
    patch = validate_payload(model=Business, payload=payload, policy=PROFILE_POLICY)

    if "address" in patch:
        patch["address"] = _merge_address(business.address, patch["address"])

    if patch.get("email"):
        patch["email"] = patch["email"].lower()

    for attr, value in patch.items():
        setattr(business, attr, value)

    business.validate()
    db.session.commit()

    current_app.logger.info("Business profile updated: %s", business.name)
    return business
