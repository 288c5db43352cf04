# Overview: Flask API routes for the business profile and catalog preferences.

"""
Business API routes

All routes act on the caller's own business (g.current_user.business_id).
Reads are open to any authenticated member; writes are owner-only.
"""

from flask import Blueprint, g

from ..decorators import require_auth, require_role
from ..responses import success_response
from ..services import business_service, preferences_service
from ..validation import json_body


business_bp = Blueprint("business", __name__, url_prefix="/api/business")


def _own_business():
    return business_service.get_business(g.current_user.business_id)


@business_bp.get("/profile")
@require_auth
def get_profile_route():
    business = _own_business()
    return success_response(business_service.get_profile(business))


@business_bp.put("/profile")
@require_auth
@require_role("owner")
def update_profile_route():
    """
    Partial update of the business profile.

    Request body: any of name, description, industry, email, phone, website,
    address (merged field by field), currency, timezone, registrationNumber, taxId.
    """
    business = _own_business()
    business = business_service.update_profile(business, json_body())
    return success_response(
        {"business": business.to_public_dict()},
        "Business profile updated successfully",
    )


@business_bp.get("/preferences")
@require_auth
def get_preferences_route():
    business = _own_business()
    preferences, stats = preferences_service.get_preferences(business)
    return success_response(
        {"preferences": preferences, "stats": stats},
        "Preferences retrieved successfully",
    )


@business_bp.put("/preferences")
@require_auth
@require_role("owner")
def update_preferences_route():
    """
    Replace one or more preference collections.

    Request body:
    {
        "categories": [{"name": "...", "icon": "...", "color": "#rrggbb", "isActive": true}],
        "units": [{"name": "...", "abbreviation": "...", "type": "quantity"}],
        "productTypes": [{"name": "...", "requiresSerialNumber": false, "requiresExpiryDate": false, "trackInventory": true}]
    }

    Collections that are omitted are left untouched.
    """
    business = _own_business()
    preferences, stats = preferences_service.replace_preferences(business, json_body())
    return success_response(
        {"preferences": preferences, "stats": stats},
        "Preferences updated successfully",
    )
