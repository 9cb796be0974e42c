# access_admin/cli.py
import click
from flask import current_app
from flask.cli import AppGroup
from sqlalchemy.exc import IntegrityError

from access_admin.extensions import db
from access_admin.models import User, UserRole
from access_admin.services import get_reminder_service

reminders_cli = AppGroup("reminders", help="Access review reminder jobs.")
users_cli = AppGroup("users", help="User administration.")


@reminders_cli.command("sweep")
@click.option("--dry-run", is_flag=True, help="List due reminders without sending or advancing them.")
def sweep_command(dry_run):
    """Send every due reminder and schedule its next occurrence (run hourly from cron)."""
    report = get_reminder_service().sweep_due(dry_run=dry_run)
    click.echo(
        f"checked={report.checked} sent={len(report.sent)} "
        f"skipped={len(report.skipped)} failed={len(report.failed)}"
    )
    if report.failed:
        raise SystemExit(1)


@users_cli.command("create-admin")
@click.argument("username")
@click.argument("email")
@click.password_option()
def create_admin_command(username, email, password):
    """Bootstrap an admin account."""
    user = User(username=username, email=email.lower(), role=UserRole.ADMIN.value)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise click.ClickException("Username or email already exists")
    current_app.logger.info("Admin user %s created", user.id)
    click.echo(f"Created admin {username} (id={user.id})")


def register_cli(app):
    app.cli.add_command(reminders_cli)
    app.cli.add_command(users_cli)
