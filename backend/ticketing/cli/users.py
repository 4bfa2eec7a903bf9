"""Flask CLI commands for account administration."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from ticketing.infra.wiring import get_auth_service
from ticketing.models.user import UserRole
from ticketing.services._shared.errors import ServiceError
from ticketing.uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


@click.group("users")
def users_cli() -> None:
    """Manage accounts and their refresh sessions."""


@users_cli.command("create-admin")
@click.argument("email")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password used when the account does not exist yet.",
)
@with_appcontext
def create_admin_command(email: str, password: str) -> None:
    """Create an administrator, or promote the existing account EMAIL."""
    if len(password) < 8:
        raise click.BadParameter("must be at least 8 characters", param_hint="--password")
    try:
        with SQLAlchemyUnitOfWork() as uow:
            existed = uow.users.exists_by_email(email)
            user, _ = uow.users.find_or_create(email=email, password=password, role=UserRole.ADMIN)
            uow.users.set_role(user, UserRole.ADMIN)
            user_id, user_email = user.id, user.email
    except (SQLAlchemyError, ValueError) as exc:
        raise click.ClickException(f"Could not create administrator: {exc}") from exc

    LOGGER.info("cli.users.admin_ready", extra={"user_id": user_id})
    verb = "Promoted" if existed else "Created"
    click.echo(f"{verb} administrator {user_email} (id={user_id})")


@users_cli.command("revoke-sessions")
@click.argument("email")
@with_appcontext
def revoke_sessions_command(email: str) -> None:
    """Revoke every active refresh session of EMAIL."""
    with SQLAlchemyUnitOfWork() as uow:
        user = uow.users.get_by_email(email)
        user_id = user.id if user is not None else None
    if user_id is None:
        raise click.ClickException(f"No user with email {email}")

    try:
        count = get_auth_service().revoke_all_sessions(user_id)
    except ServiceError as exc:
        raise click.ClickException(f"Could not revoke sessions: {exc}") from exc
    click.echo(f"Revoked {count} session(s) for {email}")
