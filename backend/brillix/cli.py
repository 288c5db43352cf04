# Overview: Flask CLI command groups for schema bootstrap, inspection, and maintenance.

# backend/brillix/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Business maintenance:
# - python -m flask business migrate-preferences [--dry-run]
#   Install the default categories/units/product types on businesses created
#   before preferences existed.
# - python -m flask business list
#   List businesses with owner email and active status.
#
# User inspection:
# - python -m flask users list [--business-id 1]
#   List accounts with role, business and active status.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Business, User
from .services import preferences_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("PASS Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('business')
def business_group():
    """Business maintenance commands."""


@business_group.command('migrate-preferences')
@click.option('--dry-run', is_flag=True, help='Report affected businesses without writing')
@with_appcontext
def migrate_preferences(dry_run):
    """Backfill default preferences on businesses that have none."""
    click.echo("Starting preferences migration...")

    touched = preferences_service.migrate_legacy_preferences(dry_run=dry_run)

    if not touched:
        click.echo("All businesses already have preferences. Nothing to do.")
        return

    verb = "Would migrate" if dry_run else "Migrated"
    for business in touched:
        click.echo(f"  {verb}: {business.id} {business.name}")

    click.echo(f"PASS {verb} {len(touched)} business(es).")


@business_group.command('list')
@with_appcontext
def list_businesses():
    """List all businesses."""
    businesses = db.session.query(Business).order_by(Business.id.asc()).all()

    if not businesses:
        click.echo("No businesses found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<30} {'Industry':<15} {'Owner':<30} {'Active'}")
    click.echo("="*90)

    for business in businesses:
        owner_email = business.owner.email if business.owner else "-"
        active_str = "Yes" if business.is_active else "No"
        click.echo(
            f"{business.id:<5} {business.name:<30} {business.industry or '-':<15} {owner_email:<30} {active_str}"
        )

    click.echo("="*90 + "\n")


@click.group('users')
def users_group():
    """User inspection commands."""


@users_group.command('list')
@click.option('--business-id', type=int, help='Filter by business ID')
@with_appcontext
def list_users(business_id):
    """List all users with their roles."""
    query = db.session.query(User)

    if business_id:
        query = query.filter_by(business_id=business_id)

    users = query.order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Business':<10} {'Email':<35} {'Role':<10} {'Active'}")
    click.echo("="*90)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        business_str = str(user.business_id) if user.business_id else "-"
        click.echo(f"{user.id:<5} {business_str:<10} {user.email:<35} {user.role:<10} {active_str}")

    click.echo("="*90 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(business_group)
    app.cli.add_command(users_group)
