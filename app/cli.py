import os
import click
from flask import current_app
from flask.cli import with_appcontext
from flask_migrate import upgrade as alembic_upgrade, stamp as alembic_stamp, migrate as alembic_migrate


def _assert_safe_for_upgrade():
    # Prevent accidental prod upgrades unless explicitly allowed
    env = (current_app.config.get("ENV") or "").lower()
    app_env = (os.getenv("APP_ENV") or "").lower()
    if app_env == "production" or env == "production":
        if (os.getenv("ALLOW_DB_MIGRATIONS") or "").lower() not in ("1", "true", "yes"):
            raise click.ClickException("Refusing to run DB migration in production without ALLOW_DB_MIGRATIONS=true")


@click.command("db-migrate-safe")
@click.option("-m", "--message", default="auto migration", help="Migration message")
@with_appcontext
def db_migrate_safe(message):
    """Generate a new migration script from current models."""
    alembic_migrate(message=message)
    click.echo("Migration script generated.")


@click.command("db-upgrade-safe")
@with_appcontext
def db_upgrade_safe():
    """Apply migrations to the configured database."""
    _assert_safe_for_upgrade()
    alembic_upgrade()
    click.echo("Database upgraded.")


@click.command("db-stamp-safe")
@click.option("--revision", default="head", help="Revision to stamp, default 'head'")
@with_appcontext
def db_stamp_safe(revision):
    """Mark the database at a given revision without running migrations."""
    _assert_safe_for_upgrade()
    alembic_stamp(revision)
    click.echo(f"Database stamped at {revision}.")


@click.command("create-admin")
@click.option("--email", required=True, help="Admin login email")
@click.option("--name", default="Admin", help="Display name")
@click.password_option()
@with_appcontext
def create_admin(email, name, password):
    """Create an admin account for the approval console."""
    from app.errors import DuplicateUserError
    from app.services import accounts

    try:
        user = accounts.create_admin(name, email, password)
    except DuplicateUserError as e:
        raise click.ClickException(e.message)
    click.echo(f"Admin {user.id} created.")


@click.command("subscriptions-sweep")
@with_appcontext
def subscriptions_sweep():
    """Advance subscriptions whose end date has passed."""
    from app.services import subscriptions
    from app.utils import transactional

    with transactional("Subscription sweep failed"):
        counts = subscriptions.sweep()
    click.echo(f"Expired: {counts['expired']}, grace period: {counts['grace_period']}")


@click.command("analytics-rollup")
@click.option("--date", "day", default=None, help="Day to roll up (YYYY-MM-DD), default yesterday")
@click.option("--vendor-id", type=int, default=None, help="Limit to one vendor")
@with_appcontext
def analytics_rollup(day, vendor_id):
    """Write daily analytics rollups."""
    from app.services import analytics

    target = analytics.parse_day(day, "date")
    if vendor_id is not None:
        analytics.record_daily_rollup(vendor_id, target)
        click.echo("Rollup written for 1 vendor.")
        return
    count = analytics.rollup_all(target)
    click.echo(f"Rollup written for {count} vendors.")




def register_cli(app):
    app.cli.add_command(db_migrate_safe)
    app.cli.add_command(db_upgrade_safe)
    app.cli.add_command(db_stamp_safe)
    app.cli.add_command(create_admin)
    app.cli.add_command(subscriptions_sweep)
    app.cli.add_command(analytics_rollup)
