# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/brillix/routes/auth.py
"""
Authentication API routes

SECURITY FEATURES:
- Password strength validation on registration
- Per-IP rate limits on login (5 / 15 min) and registration (3 / hour)
- Stateless JWT sessions; logout is client-side token removal
"""

from flask import Blueprint, current_app, g

from ..decorators import rate_limit, require_auth
from ..responses import success_response
from ..services import auth_service, registration_service
from ..validation import json_body, validate_login


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
@rate_limit("register")
def register_route():
    """
    Register a new owner account together with its business.

    Request body:
    {
        "firstName": "John", "lastName": "Doe",
        "email": "john@example.com", "password": "Password123",
        "phone": "+2348012345678",            // optional
        "businessName": "John's Electronics",
        "industry": "retail",                 // optional, default "other"
        "businessEmail": "...",               // optional, default account email
        "businessPhone": "..."                // optional, default account phone
    }
    """
    data = registration_service.register_account(json_body())
    return success_response(data, "Registration successful", 201)


@auth_bp.post("/login")
@rate_limit("auth")
def login_route():
    """
    Authenticate with email + password.

    Returns token, user and business on success.
    Token must be included in Authorization header for protected routes.
    """
    email, password = validate_login(json_body())
    data = auth_service.authenticate(email, password)
    return success_response(data, "Login successful")


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current account and its business."""
    return success_response(auth_service.current_session(g.current_user))


@auth_bp.put("/update-password")
@require_auth
def update_password_route():
    """
    Rotate the current user's password.

    Request body:
    {
        "currentPassword": "...",
        "newPassword": "..."      // at least 6 characters
    }

    Returns a fresh token.
    """
    payload = json_body()
    token = auth_service.change_password(
        g.current_user,
        payload.get("currentPassword"),
        payload.get("newPassword"),
    )
    return success_response({"token": token}, "Password updated successfully")


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """
    Logout is client-side token removal; this records the event only.
    """
    current_app.logger.info("User logged out: %s", g.current_user.email)
    return success_response(message="Logged out successfully")
