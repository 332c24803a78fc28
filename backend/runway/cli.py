# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/runway/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to runway (PowerShell: $env:FLASK_APP="runway").
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Organizations:
# - python -m flask orgs list
#   List all organizations with member and transaction counts.
#
# Users:
# - python -m flask users create --email owner@example.com --password "secret1" --org-name "Acme"
#   Sign up a user with a new organization (same path as the signup API).
#
# Summary:
# - python -m flask summary recompute --org-id 1
#   Recompute and cache an organization's cash-flow summary.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Membership, Organization, Transaction
from .services import auth_service, summary_service
from .services.ledger_store import current_store
from .services.tenant_service import TenantAccessError
from .validation import ConflictError, ValidationError, validate_signup_payload


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


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
    click.echo("CREATE  Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset complete")


@click.group('orgs')
def orgs_group():
    """Organization (tenant) inspection commands."""


@orgs_group.command('list')
@with_appcontext
def list_orgs():
    """List all organizations."""
    orgs = db.session.query(Organization).order_by(Organization.id).all()

    if not orgs:
        click.echo("No organizations found.")
        return

    click.echo("\n" + "="*72)
    click.echo(f"{'ID':<5} {'Name':<30} {'Currency':<10} {'Members':<9} {'Transactions'}")
    click.echo("="*72)

    for org in orgs:
        member_count = db.session.query(Membership).filter_by(org_id=org.id).count()
        txn_count = db.session.query(Transaction).filter_by(org_id=org.id).count()
        click.echo(f"{org.id:<5} {org.name:<30} {org.default_currency:<10} {member_count:<9} {txn_count}")

    click.echo("="*72 + "\n")


@click.group('users')
def users_group():
    """User bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Login email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password (6+ chars)')
@click.option('--org-name', prompt=True, help='Name of the organization to create')
@with_appcontext
def create_user_cli(email, password, org_name):
    """Create a user together with a new organization they own."""
    try:
        email, password, org_name = validate_signup_payload({
            "email": email,
            "password": password,
            "organization_name": org_name,
        })
        user, org = auth_service.signup(current_store(), email, password, org_name)
    except (ValidationError, ConflictError) as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    click.echo(f"PASS Created user {user.email} (ID: {user.id}) owning '{org.name}' (ID: {org.id})")


@click.group('summary')
def summary_group():
    """Cash-flow summary commands."""


@summary_group.command('recompute')
@click.option('--org-id', type=int, required=True, help='Organization ID')
@with_appcontext
def recompute_summary(org_id):
    """Recompute and cache the summary for one organization."""
    try:
        summary = summary_service.compute_summary(current_store(), org_id)
    except TenantAccessError:
        click.echo(f"FAIL Organization ID {org_id} not found")
        raise SystemExit(1)

    click.echo(
        f"PASS org {org_id}: cash_on_hand={summary['cash_on_hand']} "
        f"monthly_burn={summary['monthly_burn']} runway_months={summary['runway_months']} "
        f"{summary['currency']} (updated {summary['updated_at']})"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(orgs_group)
    app.cli.add_command(users_group)
    app.cli.add_command(summary_group)
