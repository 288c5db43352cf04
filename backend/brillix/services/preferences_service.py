# Overview: Service-layer operations for business preferences; validation, normalization and persistence.

"""
Business Preferences

A business carries three independently replaceable collections:
- categories    keyed by lower-cased trimmed name
- units         keyed by upper-cased trimmed abbreviation
- productTypes  keyed by lower-cased trimmed name

REPLACE SEMANTICS:
- Each supplied collection replaces the stored one as a whole
- Collections not supplied are left untouched
- Every supplied collection is validated before anything is assigned, so a bad
  units list never leaves a half-applied categories list behind
- The document is written once, as a single row update
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Any, Callable

from flask import current_app

from ..extensions import db
from ..errors import ValidationError
from ..models import Business
from ..time_utils import parse_iso_datetime, to_utc_z, utcnow


COLLECTIONS = ("categories", "units", "productTypes")
UNIT_TYPES = ("weight", "volume", "length", "quantity", "other")

DEFAULT_CATEGORY_ICON = "📦"
DEFAULT_CATEGORY_COLOR = "#6366f1"
COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

MAX_NAME_LENGTH = 100
MAX_ABBREVIATION_LENGTH = 10
MAX_DESCRIPTION_LENGTH = 500


DEFAULT_PREFERENCES = {
    "categories": [
        {
            "name": "Electronics",
            "description": "Electronic devices and accessories",
            "icon": "💻",
            "color": "#3b82f6",
        },
        {
            "name": "Clothing",
            "description": "Apparel and fashion items",
            "icon": "👕",
            "color": "#ec4899",
        },
        {
            "name": "Food & Beverages",
            "description": "Food items and drinks",
            "icon": "🍔",
            "color": "#f59e0b",
        },
    ],
    "units": [
        {"name": "Piece", "abbreviation": "PCS", "type": "quantity"},
        {"name": "Kilogram", "abbreviation": "KG", "type": "weight"},
        {"name": "Liter", "abbreviation": "L", "type": "volume"},
        {"name": "Dozen", "abbreviation": "DZ", "type": "quantity"},
    ],
    "productTypes": [
        {
            "name": "Physical Product",
            "description": "Tangible goods that can be shipped",
            "requiresSerialNumber": False,
            "requiresExpiryDate": False,
            "trackInventory": True,
        },
        {
            "name": "Perishable",
            "description": "Products with expiry dates",
            "requiresSerialNumber": False,
            "requiresExpiryDate": True,
            "trackInventory": True,
        },
        {
            "name": "Service",
            "description": "Non-physical services",
            "requiresSerialNumber": False,
            "requiresExpiryDate": False,
            "trackInventory": False,
        },
    ],
}


def empty_preferences() -> dict:
    return {name: [] for name in COLLECTIONS}


def default_preferences() -> dict:
    """The bootstrap set with every element fully normalized and stamped now."""
    now = to_utc_z(utcnow())
    prefs = copy.deepcopy(DEFAULT_PREFERENCES)
    return {
        "categories": [_normalize_category(c, now) for c in prefs["categories"]],
        "units": [_normalize_unit(u, now) for u in prefs["units"]],
        "productTypes": [_normalize_product_type(pt, now) for pt in prefs["productTypes"]],
    }


def new_business_with_defaults(
    *,
    name: str,
    owner_id: int,
    industry: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    preferences: dict | None = None,
) -> Business:
    """
    Build an unsaved Business with the default preference set.

    This is the only place a Business is constructed for registration, so
    "a new business never has empty preferences" holds here and nowhere else.
    """
    return Business(
        name=name,
        owner_id=owner_id,
        industry=industry or "other",
        email=email,
        phone=phone,
        currency="NGN",
        timezone="Africa/Lagos",
        subscription_status="trial",
        subscription_plan="free",
        preferences=preferences if preferences else default_preferences(),
    )


# =============================================================================
# NORMALIZATION
# =============================================================================

def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    return bool(value)


def _created_at(value: Any, now: str) -> str:
    if not value:
        return now
    try:
        parsed = parse_iso_datetime(str(value))
    except ValueError:
        raise ValidationError(f"Invalid createdAt value: {value}")
    return to_utc_z(parsed) if parsed else now


def _normalize_category(item: dict, now: str) -> dict:
    return {
        "name": _text(item.get("name")),
        "description": _text(item.get("description")),
        "icon": _text(item.get("icon")) or DEFAULT_CATEGORY_ICON,
        "color": _text(item.get("color")) or DEFAULT_CATEGORY_COLOR,
        "isActive": _flag(item.get("isActive"), True),
        "createdAt": _created_at(item.get("createdAt"), now),
    }


def _normalize_unit(item: dict, now: str) -> dict:
    return {
        "name": _text(item.get("name")),
        "abbreviation": _text(item.get("abbreviation")).upper(),
        "type": _text(item.get("type")) or "quantity",
        "isActive": _flag(item.get("isActive"), True),
        "createdAt": _created_at(item.get("createdAt"), now),
    }


def _normalize_product_type(item: dict, now: str) -> dict:
    return {
        "name": _text(item.get("name")),
        "description": _text(item.get("description")),
        "requiresSerialNumber": _flag(item.get("requiresSerialNumber"), False),
        "requiresExpiryDate": _flag(item.get("requiresExpiryDate"), False),
        "trackInventory": _flag(item.get("trackInventory"), True),
        "isActive": _flag(item.get("isActive"), True),
        "createdAt": _created_at(item.get("createdAt"), now),
    }


# =============================================================================
# VALIDATION
# =============================================================================

def _check_types(item: dict, label: str, strings: tuple, flags: tuple) -> None:
    for key in strings:
        value = item.get(key)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{label} {key} must be a string")
    for key in flags:
        value = item.get(key)
        if value is not None and not isinstance(value, bool):
            raise ValidationError(f"{label} {key} must be a boolean")


def _check_category(item: dict) -> None:
    _check_types(item, "Category", ("name", "description", "icon", "color", "createdAt"), ("isActive",))
    if not _text(item.get("name")):
        raise ValidationError("Each category must have a name")
    if len(_text(item.get("name"))) > MAX_NAME_LENGTH:
        raise ValidationError(f"Category name cannot exceed {MAX_NAME_LENGTH} characters")
    if len(_text(item.get("description"))) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Category description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")
    color = _text(item.get("color"))
    if color and not COLOR_RE.match(color):
        raise ValidationError(f"Invalid category color: {color}")


def _check_unit(item: dict) -> None:
    _check_types(item, "Unit", ("name", "abbreviation", "type", "createdAt"), ("isActive",))
    if not _text(item.get("name")):
        raise ValidationError("Each unit must have a name")
    abbreviation = _abbreviation_key(item)
    if not abbreviation:
        raise ValidationError("Each unit must have an abbreviation")
    if len(abbreviation) > MAX_ABBREVIATION_LENGTH:
        raise ValidationError(f"Unit abbreviation cannot exceed {MAX_ABBREVIATION_LENGTH} characters")
    unit_type = item.get("type")
    if unit_type is not None and unit_type not in UNIT_TYPES:
        raise ValidationError("Invalid unit type")


def _check_product_type(item: dict) -> None:
    _check_types(
        item,
        "Product type",
        ("name", "description", "createdAt"),
        ("requiresSerialNumber", "requiresExpiryDate", "trackInventory", "isActive"),
    )
    if not _text(item.get("name")):
        raise ValidationError("Each product type must have a name")
    if len(_text(item.get("name"))) > MAX_NAME_LENGTH:
        raise ValidationError(f"Product type name cannot exceed {MAX_NAME_LENGTH} characters")
    if len(_text(item.get("description"))) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Product type description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")


def _name_key(item: dict) -> str:
    return _text(item.get("name")).lower()


def _abbreviation_key(item: dict) -> str:
    return _text(item.get("abbreviation")).upper()


@dataclass(frozen=True)
class CollectionSpec:
    field: str
    label: str  # "Categories must be an array"
    duplicate_label: str  # "Duplicate category names found: ..."
    key: Callable[[dict], str]
    check: Callable[[dict], None]
    normalize: Callable[[dict, str], dict]


COLLECTION_SPECS = {
    "categories": CollectionSpec(
        field="categories",
        label="Categories",
        duplicate_label="category names",
        key=_name_key,
        check=_check_category,
        normalize=_normalize_category,
    ),
    "units": CollectionSpec(
        field="units",
        label="Units",
        duplicate_label="unit abbreviations",
        key=_abbreviation_key,
        check=_check_unit,
        normalize=_normalize_unit,
    ),
    "productTypes": CollectionSpec(
        field="productTypes",
        label="Product types",
        duplicate_label="product type names",
        key=_name_key,
        check=_check_product_type,
        normalize=_normalize_product_type,
    ),
}


def build_collection(spec: CollectionSpec, items: Any, now: str | None = None) -> list[dict]:
    """
    Validate and normalize one submitted collection.

    Elements are indexed by their normalized key while validating, so a
    repeated key is caught in one pass. Order of the submitted list is kept.

    Raises ValidationError; nothing is written.
    """
    if not isinstance(items, list):
        raise ValidationError(f"{spec.label} must be an array")

    for item in items:
        if not isinstance(item, dict):
            raise ValidationError(f"Each entry in {spec.field} must be an object")

    index: dict[str, dict] = {}
    duplicates: list[str] = []
    for item in items:
        key = spec.key(item)
        if not key:
            # Reported by the required-field check below
            continue
        if key in index:
            if key not in duplicates:
                duplicates.append(key)
            continue
        index[key] = item

    if duplicates:
        raise ValidationError(f"Duplicate {spec.duplicate_label} found: {', '.join(duplicates)}")

    for item in items:
        spec.check(item)

    now = now or to_utc_z(utcnow())
    return [spec.normalize(item, now) for item in items]


def compute_stats(preferences: dict | None) -> dict:
    preferences = preferences or {}

    def _counts(name: str) -> tuple[int, int]:
        items = preferences.get(name) or []
        return len(items), sum(1 for item in items if item.get("isActive", True))

    total_categories, active_categories = _counts("categories")
    total_units, active_units = _counts("units")
    total_product_types, active_product_types = _counts("productTypes")

    return {
        "totalCategories": total_categories,
        "activeCategories": active_categories,
        "totalUnits": total_units,
        "activeUnits": active_units,
        "totalProductTypes": total_product_types,
        "activeProductTypes": active_product_types,
    }


# =============================================================================
# READ / REPLACE
# =============================================================================

def _needs_repair(preferences: Any) -> bool:
    if not isinstance(preferences, dict):
        return True
    return any(not isinstance(preferences.get(name), list) for name in COLLECTIONS)


def get_preferences(business: Business) -> tuple[dict, dict]:
    """
    Return (preferences, stats).

    Rows created before preferences existed are repaired in place: missing
    collections become empty lists and the row is saved before returning.
    """
    if _needs_repair(business.preferences):
        current = business.preferences if isinstance(business.preferences, dict) else {}
        repaired = empty_preferences()
        for name in COLLECTIONS:
            if isinstance(current.get(name), list):
                repaired[name] = current[name]
        business.preferences = repaired
        db.session.commit()
        current_app.logger.info("Initialized empty preferences for business: %s", business.name)

    preferences = business.preferences
    current_app.logger.info("Preferences retrieved for business: %s", business.name)
    return preferences, compute_stats(preferences)


def replace_preferences(business: Business, payload: dict | None) -> tuple[dict, dict]:
    """
    Replace any of categories / units / productTypes on a business.

    Returns (preferences, stats) after the single commit.

    Raises:
        ValidationError: nothing supplied, wrong type, duplicates, missing fields
    """
    payload = payload or {}
    supplied = [name for name in COLLECTIONS if payload.get(name) is not None]

    if not supplied:
        raise ValidationError(
            "At least one preference field (categories, units, or productTypes) must be provided"
        )

    now = to_utc_z(utcnow())
    replacements = {
        name: build_collection(COLLECTION_SPECS[name], payload[name], now)
        for name in supplied
    }

    current = business.preferences if isinstance(business.preferences, dict) else {}
    updated = empty_preferences()
    for name in COLLECTIONS:
        if name in replacements:
            updated[name] = replacements[name]
        elif isinstance(current.get(name), list):
            updated[name] = copy.deepcopy(current[name])

    # Fresh dict so the JSON column is flagged dirty
    business.preferences = updated
    db.session.commit()

    current_app.logger.info(
        "Preferences updated for business: %s (%s)", business.name, ", ".join(supplied)
    )
    return business.preferences, compute_stats(business.preferences)


def migrate_legacy_preferences(dry_run: bool = False) -> list[Business]:
    """
    Install the default set on businesses whose preferences are missing or
    lack a categories list. Returns the businesses touched.
    """
    candidates = [
        business
        for business in db.session.query(Business).order_by(Business.id.asc()).all()
        if not isinstance(business.preferences, dict)
        or not isinstance(business.preferences.get("categories"), list)
    ]

    if dry_run:
        return candidates

    for business in candidates:
        business.preferences = default_preferences()
    db.session.commit()

    for business in candidates:
        current_app.logger.info("Migrated preferences for: %s", business.name)
    return candidates
