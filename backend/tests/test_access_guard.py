"""
Access guard tests.

Verifies:
- Missing, malformed, tampered and expired tokens return 401
- Tokens for deleted or deactivated accounts return 401
- Role enforcement returns 403 without touching stored data
- optional_auth never rejects
"""

from datetime import timedelta

import jwt
import pytest
from flask import g

from brillix.decorators import optional_auth
from brillix.extensions import db
from brillix.models import Business, User
from brillix.time_utils import utcnow
from conftest import bearer


PROTECTED = [
    ("GET", "/api/auth/me"),
    ("PUT", "/api/auth/update-password"),
    ("POST", "/api/auth/logout"),
    ("GET", "/api/business/profile"),
    ("PUT", "/api/business/profile"),
    ("GET", "/api/business/preferences"),
    ("PUT", "/api/business/preferences"),
]


def _token(app, **claims):
    return jwt.encode(claims, app.config["JWT_SECRET_KEY"], algorithm="HS256")


class TestMissingOrBadToken:

    @pytest.mark.parametrize("method,path", PROTECTED)
    def test_no_token(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.get_json()["message"] == "Not authorized to access this route. No token provided."

    def test_non_bearer_scheme(self, client, registered):
        resp = client.get("/api/auth/me", headers={"Authorization": f"Token {registered['token']}"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Not authorized to access this route. No token provided."

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/auth/me", headers=bearer("not.a.jwt"))
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Not authorized. Invalid token."

    def test_wrong_signature(self, client, registered):
        forged = jwt.encode(
            {"sub": str(registered["user"]["id"]), "exp": utcnow() + timedelta(days=1)},
            "some-other-secret-that-is-also-32-bytes-long",
            algorithm="HS256",
        )
        resp = client.get("/api/auth/me", headers=bearer(forged))
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Not authorized. Invalid token."

    def test_expired_token(self, app, client, registered):
        issued = utcnow() - timedelta(days=8)
        expired = _token(
            app,
            sub=str(registered["user"]["id"]),
            iat=issued,
            exp=issued + timedelta(days=7),
        )
        resp = client.get("/api/auth/me", headers=bearer(expired))
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Not authorized. Invalid token."


class TestAccountState:

    def test_deleted_account(self, client, registered, owner_headers):
        user = db.session.get(User, registered["user"]["id"])
        db.session.delete(user)
        db.session.commit()

        resp = client.get("/api/auth/me", headers=owner_headers)
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "User no longer exists"

    def test_deactivated_account(self, client, registered, owner_headers):
        user = db.session.get(User, registered["user"]["id"])
        user.is_active = False
        db.session.commit()

        resp = client.get("/api/auth/me", headers=owner_headers)
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Your account has been deactivated"


class TestRoleEnforcement:

    def test_employee_can_read(self, client, employee_headers):
        assert client.get("/api/business/profile", headers=employee_headers).status_code == 200
        assert client.get("/api/business/preferences", headers=employee_headers).status_code == 200

    def test_employee_cannot_update_profile(self, client, registered, employee_headers):
        resp = client.put("/api/business/profile", json={"name": "Hijacked"}, headers=employee_headers)
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "User role 'employee' is not authorized to access this route"

        db.session.expire_all()
        assert db.session.get(Business, registered["business"]["id"]).name == "John's Electronics"

    def test_employee_cannot_replace_preferences(self, client, registered, employee_headers):
        before = db.session.get(Business, registered["business"]["id"]).preferences

        resp = client.put(
            "/api/business/preferences",
            json={"units": [{"name": "Box", "abbreviation": "BX", "type": "quantity"}]},
            headers=employee_headers,
        )
        assert resp.status_code == 403

        db.session.expire_all()
        assert db.session.get(Business, registered["business"]["id"]).preferences == before


class TestOptionalAuth:

    @staticmethod
    def _whoami():
        return g.current_user

    def test_anonymous(self, app, db_session):
        view = optional_auth(self._whoami)
        with app.test_request_context("/"):
            assert view() is None
            assert g.current_business is None

    def test_invalid_token_is_ignored(self, app, db_session):
        view = optional_auth(self._whoami)
        with app.test_request_context("/", headers=bearer("garbage")):
            assert view() is None

    def test_valid_token_attaches_user(self, app, registered):
        view = optional_auth(self._whoami)
        with app.test_request_context("/", headers=bearer(registered["token"])):
            user = view()
            assert user.id == registered["user"]["id"]
            assert g.current_business["id"] == registered["business"]["id"]
            assert set(g.current_business) == {"id", "name", "industry", "subscriptionPlan"}
