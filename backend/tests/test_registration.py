"""
Registration tests.

Verifies:
- Account and business are created together and reference each other
- New businesses start with the default preference set
- Duplicate email and invalid input create nothing
- A failure midway through the transaction leaves no rows behind
"""

import pytest

from brillix.extensions import db
from brillix.models import Business, User
from brillix.services import registration_service
from conftest import registration_payload


def _counts():
    return db.session.query(User).count(), db.session.query(Business).count()


class TestRegistrationSuccess:

    def test_creates_linked_account_and_business(self, client, db_session):
        resp = client.post("/api/auth/register", json=registration_payload())
        assert resp.status_code == 201

        body = resp.get_json()
        assert body["success"] is True
        assert body["message"] == "Registration successful"

        data = body["data"]
        assert data["token"]
        assert data["user"]["email"] == "john@example.com"
        assert data["user"]["role"] == "owner"
        assert data["user"]["business"] == data["business"]["id"]
        assert "password" not in data["user"]
        assert "passwordHash" not in data["user"]

        user = db.session.get(User, data["user"]["id"])
        business = db.session.get(Business, data["business"]["id"])
        assert user.business_id == business.id
        assert business.owner_id == user.id
        assert user.last_login_at is not None

    def test_business_defaults(self, registered):
        business = db.session.get(Business, registered["business"]["id"])

        assert business.currency == "NGN"
        assert business.timezone == "Africa/Lagos"
        assert business.subscription_status == "trial"
        assert business.subscription_plan == "free"
        assert business.industry == "retail"
        # Business contact falls back to the account's
        assert business.email == "john@example.com"
        assert business.phone == "+2348012345678"

    def test_default_preferences_installed(self, registered):
        business = db.session.get(Business, registered["business"]["id"])
        prefs = business.preferences

        assert [c["name"] for c in prefs["categories"]] == ["Electronics", "Clothing", "Food & Beverages"]
        assert [u["abbreviation"] for u in prefs["units"]] == ["PCS", "KG", "L", "DZ"]
        assert [p["name"] for p in prefs["productTypes"]] == ["Physical Product", "Perishable", "Service"]
        assert all(c["isActive"] for c in prefs["categories"])
        assert all(u["createdAt"].endswith("Z") for u in prefs["units"])

    def test_email_is_lowercased(self, client, db_session):
        resp = client.post("/api/auth/register", json=registration_payload(email="John@Example.COM"))
        assert resp.status_code == 201
        assert resp.get_json()["data"]["user"]["email"] == "john@example.com"

    def test_industry_defaults_to_other(self, client, db_session):
        payload = registration_payload()
        payload.pop("industry")
        resp = client.post("/api/auth/register", json=payload)
        assert resp.status_code == 201
        assert resp.get_json()["data"]["business"]["industry"] == "other"

    def test_password_is_hashed(self, registered):
        user = db.session.get(User, registered["user"]["id"])
        assert user.password_hash != "Password123"
        assert user.password_hash.startswith("$2")
        assert user.check_password("Password123")


class TestRegistrationRejected:

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/register", json={"email": "a@b.com"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == (
            "Please provide all required fields: firstName, lastName, email, password, businessName"
        )
        assert _counts() == (0, 0)

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"firstName": "J"}, "firstName"),
            ({"lastName": "D" * 51}, "lastName"),
            ({"email": "not-an-email"}, "email"),
            ({"password": "short1A"}, "password"),
            ({"password": "alllowercase1"}, "password"),
            ({"businessName": "X"}, "businessName"),
            ({"industry": "mining"}, "industry"),
            ({"email": "a" * 250 + "@example.com"}, "email"),
            ({"phone": "1" * 40}, "phone"),
            ({"businessPhone": "1" * 40}, "businessPhone"),
            ({"businessEmail": "b" * 250 + "@example.com"}, "businessEmail"),
        ],
    )
    def test_field_validation(self, client, db_session, overrides, field):
        resp = client.post("/api/auth/register", json=registration_payload(**overrides))
        assert resp.status_code == 400

        body = resp.get_json()
        assert body["message"] == "Validation failed"
        assert field in [e["field"] for e in body["errors"]]
        assert _counts() == (0, 0)

    def test_duplicate_email_creates_nothing(self, client, registered):
        before = _counts()

        resp = client.post(
            "/api/auth/register",
            json=registration_payload(email="JOHN@example.com", businessName="Another Shop"),
        )
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "User with this email already exists"
        assert _counts() == before

    def test_non_object_body(self, client, db_session):
        resp = client.post("/api/auth/register", json=["not", "an", "object"])
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid JSON payload"


class TestRegistrationAtomicity:

    def test_failure_after_account_insert_rolls_back(self, client, db_session, monkeypatch):
        def explode(**kwargs):
            raise RuntimeError("business insert failed")

        monkeypatch.setattr(registration_service, "new_business_with_defaults", explode)

        resp = client.post("/api/auth/register", json=registration_payload())
        assert resp.status_code == 500
        assert resp.get_json()["message"] == "Internal server error"
        assert _counts() == (0, 0)

    def test_model_validation_failure_rolls_back(self, client, db_session, monkeypatch):
        from brillix.services import preferences_service

        real = preferences_service.new_business_with_defaults

        def bad_currency(**kwargs):
            business = real(**kwargs)
            business.currency = "XYZ"
            return business

        monkeypatch.setattr(registration_service, "new_business_with_defaults", bad_currency)

        resp = client.post("/api/auth/register", json=registration_payload())
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Validation error"
        assert _counts() == (0, 0)

    def test_can_register_again_after_failure(self, client, db_session, monkeypatch):
        def explode(**kwargs):
            raise RuntimeError("business insert failed")

        monkeypatch.setattr(registration_service, "new_business_with_defaults", explode)
        client.post("/api/auth/register", json=registration_payload())
        monkeypatch.undo()

        resp = client.post("/api/auth/register", json=registration_payload())
        assert resp.status_code == 201
