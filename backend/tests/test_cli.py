"""
CLI command tests.
"""

from brillix.extensions import db
from brillix.models import Business


def _clear_preferences(business_id):
    business = db.session.get(Business, business_id)
    business.preferences = None
    db.session.commit()


def test_migrate_preferences(app, registered):
    business_id = registered["business"]["id"]
    _clear_preferences(business_id)

    result = app.test_cli_runner().invoke(args=["business", "migrate-preferences"])

    assert result.exit_code == 0, result.output
    assert "Migrated 1 business(es)." in result.output

    db.session.expire_all()
    prefs = db.session.get(Business, business_id).preferences
    assert len(prefs["categories"]) == 3


def test_migrate_preferences_dry_run(app, registered):
    business_id = registered["business"]["id"]
    _clear_preferences(business_id)

    result = app.test_cli_runner().invoke(args=["business", "migrate-preferences", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Would migrate 1 business(es)." in result.output

    db.session.expire_all()
    assert db.session.get(Business, business_id).preferences is None


def test_migrate_preferences_nothing_to_do(app, registered):
    result = app.test_cli_runner().invoke(args=["business", "migrate-preferences"])

    assert result.exit_code == 0
    assert "Nothing to do" in result.output


def test_list_commands(app, registered):
    runner = app.test_cli_runner()

    users = runner.invoke(args=["users", "list"])
    assert users.exit_code == 0
    assert "john@example.com" in users.output

    businesses = runner.invoke(args=["business", "list"])
    assert businesses.exit_code == 0
    assert "John's Electronics" in businesses.output
