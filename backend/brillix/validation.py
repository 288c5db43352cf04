from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from flask import request
from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError
from .models.account import EMAIL_RE, PHONE_RE
from .models.business import INDUSTRIES


REGISTRATION_REQUIRED = ("firstName", "lastName", "email", "password", "businessName")

PASSWORD_COMPLEXITY_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
MIN_REGISTRATION_PASSWORD = 8
MAX_EMAIL_LENGTH = 255
MAX_PHONE_LENGTH = 32


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: API field name -> model attribute clients may set (security boundary)
    - choices: model attribute -> allowed values
    """
    writable_fields: dict[str, str]
    choices: dict[str, tuple] = field(default_factory=dict)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(api_name: str, col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if not isinstance(value, str):
            raise ValidationError(f"{api_name} must be a string")
        return str(value).strip()

    # Default: leave as-is (JSON columns)
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
) -> dict:
    """
    Validates + normalizes a partial update (only provided keys) against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields) and enum choices
    Returns a cleaned patch dict keyed by model attribute.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")

    patch: dict = {}

    for api_name, raw in payload.items():
        attr = policy.writable_fields[api_name]
        col = cols[attr]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{api_name} cannot be null")
            patch[attr] = None
            continue

        val = _coerce_value(api_name, col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and isinstance(val, str) and val == "":
            if not col.nullable:
                raise ValidationError(f"{api_name} cannot be blank")
            if col.unique:
                # Blank unique values are stored as NULL so they never collide
                val = None

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{api_name} cannot exceed {col.type.length} characters")

        allowed = policy.choices.get(attr)
        if allowed is not None and val not in allowed:
            raise ValidationError(f"Invalid {api_name}: {val}")

        patch[attr] = val

    return patch


def _field_error(errors: list, field_name: str, message: str) -> None:
    errors.append({"field": field_name, "message": message})


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _check_phone(errors: list, field_name: str, phone: str | None) -> None:
    if not phone:
        return
    if len(phone) > MAX_PHONE_LENGTH:
        _field_error(errors, field_name, f"Phone number cannot exceed {MAX_PHONE_LENGTH} characters")
    elif not PHONE_RE.match(phone):
        _field_error(errors, field_name, "Please provide a valid phone number")


def missing_registration_fields(payload: dict) -> list[str]:
    return [k for k in REGISTRATION_REQUIRED if not _text(payload, k)]


def validate_registration(payload: dict) -> dict:
    """
    Field-level checks for POST /api/auth/register.

    Returns the normalized input; raises ValidationError carrying a
    [{field, message}] list when anything is off.
    """
    errors: list[dict] = []

    first_name = _text(payload, "firstName")
    if not 2 <= len(first_name) <= 50:
        _field_error(errors, "firstName", "First name must be between 2 and 50 characters")

    last_name = _text(payload, "lastName")
    if not 2 <= len(last_name) <= 50:
        _field_error(errors, "lastName", "Last name must be between 2 and 50 characters")

    email = _text(payload, "email").lower()
    if len(email) > MAX_EMAIL_LENGTH:
        _field_error(errors, "email", f"Email cannot exceed {MAX_EMAIL_LENGTH} characters")
    elif not EMAIL_RE.match(email):
        _field_error(errors, "email", "Please provide a valid email")

    password = payload.get("password") or ""
    if not isinstance(password, str):
        _field_error(errors, "password", "Password must be a string")
    elif len(password) < MIN_REGISTRATION_PASSWORD:
        _field_error(errors, "password", "Password must be at least 8 characters")
    elif not PASSWORD_COMPLEXITY_RE.match(password):
        _field_error(
            errors,
            "password",
            "Password must contain at least one uppercase letter, one lowercase letter, and one number",
        )

    business_name = _text(payload, "businessName")
    if not 2 <= len(business_name) <= 100:
        _field_error(errors, "businessName", "Business name must be between 2 and 100 characters")

    industry = payload.get("industry")
    if industry is not None and industry not in INDUSTRIES:
        _field_error(errors, "industry", "Invalid industry type")

    phone = _text(payload, "phone") or None
    _check_phone(errors, "phone", phone)

    business_phone = _text(payload, "businessPhone") or None
    _check_phone(errors, "businessPhone", business_phone)

    business_email = _text(payload, "businessEmail").lower() or None
    if business_email and len(business_email) > MAX_EMAIL_LENGTH:
        _field_error(errors, "businessEmail", f"Business email cannot exceed {MAX_EMAIL_LENGTH} characters")
    elif business_email and not EMAIL_RE.match(business_email):
        _field_error(errors, "businessEmail", "Please provide a valid email")

    if errors:
        raise ValidationError("Validation failed", errors)

    return {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "password": password,
        "phone": phone,
        "business_name": business_name,
        "industry": industry,
        "business_email": business_email,
        "business_phone": business_phone,
    }


def validate_login(payload: dict) -> tuple[str, str]:
    email = _text(payload, "email").lower()
    password = payload.get("password")

    if not email or not password:
        raise ValidationError("Please provide email and password")

    if not EMAIL_RE.match(email):
        raise ValidationError("Validation failed", [{"field": "email", "message": "Please provide a valid email"}])

    return email, str(password)


def json_body() -> dict:
    """Request JSON as a dict; an absent body is treated as {}."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload
