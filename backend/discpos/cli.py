# Overview: Flask CLI command groups for bootstrap, inspection, and account maintenance.

# backend/discpos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create any missing tables (idempotent). Prefer `flask db upgrade` once migrations are in use.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system check
#   Verify the database answers.
#
# Accounts (operator console, acts with superadmin rights):
# - python -m flask users list [--status pending]
# - python -m flask users approve someone@example.com
# - python -m flask users block someone@example.com

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User, STATUSES
from .services import auth_service, system_service
from .services.auth_service import AuthzError
from .services.system_service import InfrastructureError

OPERATOR_ROLE = "superadmin"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create the users, products, sales and sale_items tables if missing.

    No accounts are seeded: the first person to register becomes the
    superadmin.
    """
    click.echo("START Initializing database...")
    db.create_all()

    user_count = db.session.query(User).count()
    click.echo(f"PASS Tables ready ({user_count} users)")
    if user_count == 0:
        click.echo("INFO No accounts yet: the first registration becomes the superadmin.")


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


@system_group.command('check')
@with_appcontext
def check_system():
    """Check database connectivity."""
    try:
        result = system_service.check_database()
    except InfrastructureError as e:
        click.echo(f"FAIL Database unreachable: {e}")
        raise SystemExit(1)

    click.echo(f"PASS Database connected ({result['dialect']}, {result['latency_ms']} ms)")


# =============================================================================
# USER MANAGEMENT COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """User inspection and approval commands."""


@users_group.command('list')
@click.option('--status', type=click.Choice(STATUSES), help='Filter by status')
@with_appcontext
def list_users(status):
    """List all users with role and status."""
    query = db.session.query(User)

    if status:
        query = query.filter_by(status=status)

    users = query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<30} {'Role':<12} {'Status'}")
    click.echo("="*90)

    for user in users:
        click.echo(f"{user.id:<5} {user.full_name:<25} {user.email:<30} {user.role:<12} {user.status}")

    click.echo("="*90 + "\n")


def _find_user(email: str) -> User | None:
    user = db.session.query(User).filter_by(email=email).first()
    if not user:
        click.echo(f"FAIL No user with email {email}")
    return user


@users_group.command('approve')
@click.argument('email')
@with_appcontext
def approve_user_cli(email):
    """Approve a pending account."""
    user = _find_user(email)
    if not user:
        raise SystemExit(1)

    user = auth_service.approve_user(user.id, OPERATOR_ROLE)
    click.echo(f"PASS {user.email} is now {user.status}")


@users_group.command('block')
@click.argument('email')
@with_appcontext
def block_user_cli(email):
    """Block an account so it can no longer log in."""
    user = _find_user(email)
    if not user:
        raise SystemExit(1)

    try:
        user = auth_service.block_user(user.id, None, OPERATOR_ROLE)
    except AuthzError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    click.echo(f"PASS {user.email} is now {user.status}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
