"""
Pytest fixtures for Brillix backend tests.

Provides the application, an isolated database per test, and a registered
owner account with its business.
"""

import pytest
from brillix import create_app
from brillix.extensions import db
from brillix.models import User
from brillix.services import token_service


OWNER_PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'ENV': 'test',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'JWT_SECRET_KEY': 'test-jwt-secret-with-at-least-32-bytes',
        'BCRYPT_ROUNDS': 4,
        'RATELIMIT_ENABLED': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client with fresh rate-limit counters."""
    for limiter in app.extensions["rate_limiters"].values():
        limiter.reset()
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.remove()

        yield db.session

        # Cleanup after test
        db.session.rollback()
        db.session.remove()


def registration_payload(**overrides):
    payload = {
        "firstName": "John",
        "lastName": "Doe",
        "email": "john@example.com",
        "password": OWNER_PASSWORD,
        "phone": "+2348012345678",
        "businessName": "John's Electronics",
        "industry": "retail",
    }
    payload.update(overrides)
    return payload


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope='function')
def registered(client, db_session):
    """Register an owner through the API; returns the response data."""
    resp = client.post("/api/auth/register", json=registration_payload())
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


@pytest.fixture(scope='function')
def owner_headers(registered):
    return bearer(registered["token"])


@pytest.fixture(scope='function')
def employee(db_session, registered):
    """An employee account in the registered owner's business."""
    user = User(
        first_name="Ada",
        last_name="Obi",
        email="ada@example.com",
        role="employee",
        business_id=registered["business"]["id"],
    )
    user.password = "Employee123"
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def employee_headers(employee):
    return bearer(token_service.issue_token(employee.id))
