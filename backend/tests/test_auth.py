"""
Login, session and password rotation tests.

Verifies:
- Unknown email and wrong password are indistinguishable
- Deactivated accounts and missing/inactive businesses are refused
- Password rotation checks the current password and issues a new token
"""

import pytest

from brillix.extensions import db
from brillix.models import Business, User
from brillix.services import token_service
from conftest import OWNER_PASSWORD


def _login(client, email="john@example.com", password=OWNER_PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


class TestLogin:

    def test_success(self, client, registered):
        resp = _login(client)
        assert resp.status_code == 200

        body = resp.get_json()
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["id"] == registered["user"]["id"]
        assert body["data"]["business"]["id"] == registered["business"]["id"]

        claims = token_service.verify_token(body["data"]["token"])
        assert claims.user_id == registered["user"]["id"]

    def test_email_is_case_insensitive(self, client, registered):
        resp = _login(client, email="  JOHN@Example.com ")
        assert resp.status_code == 200

    def test_updates_last_login(self, client, registered):
        user = db.session.get(User, registered["user"]["id"])
        user.last_login_at = None
        db.session.commit()

        _login(client)

        db.session.expire_all()
        assert db.session.get(User, registered["user"]["id"]).last_login_at is not None

    def test_wrong_password_and_unknown_email_look_the_same(self, client, registered):
        wrong_password = _login(client, password="Wrong12345")
        unknown_email = _login(client, email="nobody@example.com")

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.get_json() == unknown_email.get_json()
        assert wrong_password.get_json()["message"] == "Invalid credentials"

    @pytest.mark.parametrize("payload", [{}, {"email": "john@example.com"}, {"password": "x"}])
    def test_missing_fields(self, client, db_session, payload):
        resp = client.post("/api/auth/login", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Please provide email and password"

    def test_malformed_email(self, client, db_session):
        resp = _login(client, email="not-an-email")
        assert resp.status_code == 400
        assert resp.get_json()["errors"][0]["field"] == "email"

    def test_deactivated_account(self, client, registered):
        user = db.session.get(User, registered["user"]["id"])
        user.is_active = False
        db.session.commit()

        resp = _login(client)
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Your account has been deactivated. Please contact support."

    def test_inactive_business(self, client, registered):
        business = db.session.get(Business, registered["business"]["id"])
        business.is_active = False
        db.session.commit()

        resp = _login(client)
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Your business account is not active. Please contact support."

    def test_account_without_business(self, client, db_session):
        user = User(first_name="Lone", last_name="Wolf", email="lone@example.com", role="owner")
        user.password = OWNER_PASSWORD
        db_session.add(user)
        db_session.commit()

        resp = _login(client, email="lone@example.com")
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "No business associated with this account. Please contact support."


class TestSession:

    def test_me(self, client, registered, owner_headers):
        resp = client.get("/api/auth/me", headers=owner_headers)
        assert resp.status_code == 200

        data = resp.get_json()["data"]
        assert data["user"]["email"] == "john@example.com"
        assert data["business"]["name"] == "John's Electronics"

    def test_logout(self, client, owner_headers):
        resp = client.post("/api/auth/logout", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Logged out successfully"


class TestPasswordRotation:

    def test_success_returns_new_token(self, client, registered, owner_headers):
        resp = client.put(
            "/api/auth/update-password",
            json={"currentPassword": OWNER_PASSWORD, "newPassword": "simple"},
            headers=owner_headers,
        )
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Password updated successfully"

        new_token = resp.get_json()["data"]["token"]
        assert token_service.verify_token(new_token).user_id == registered["user"]["id"]

        assert _login(client, password="simple").status_code == 200
        assert _login(client).status_code == 401

    def test_wrong_current_password(self, client, owner_headers):
        resp = client.put(
            "/api/auth/update-password",
            json={"currentPassword": "Nope12345", "newPassword": "another1"},
            headers=owner_headers,
        )
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Current password is incorrect"

    def test_new_password_too_short(self, client, owner_headers):
        resp = client.put(
            "/api/auth/update-password",
            json={"currentPassword": OWNER_PASSWORD, "newPassword": "abc"},
            headers=owner_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "New password must be at least 6 characters long"

    def test_missing_fields(self, client, owner_headers):
        resp = client.put("/api/auth/update-password", json={}, headers=owner_headers)
        assert resp.status_code == 400

    def test_unrelated_update_does_not_rehash(self, registered):
        user = db.session.get(User, registered["user"]["id"])
        original_hash = user.password_hash

        user.first_name = "Johnny"
        db.session.commit()

        assert db.session.get(User, user.id).password_hash == original_hash

    def test_requires_auth(self, client, db_session):
        resp = client.put(
            "/api/auth/update-password",
            json={"currentPassword": "x", "newPassword": "yyyyyy"},
        )
        assert resp.status_code == 401
