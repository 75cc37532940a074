"""
app/cli.py - Flask CLI commands.

Every API route requires a token, so the first account of a fresh database is
created from the command line:

    flask --app "square_admin.app:create_app('development')" create-user admin --admin
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext
from marshmallow import ValidationError

from square_admin.app.errors import AppError
from square_admin.app.extensions import db
from square_admin.app.schemas.adm_schema import UserSchema
from square_admin.app.services import group_service, user_service
from square_admin.app.services.auth_service import ADMIN_GROUP_NAME


@click.command("create-user")
@click.argument("name")
@click.option("--caption", default=None, help="Display name; defaults to NAME.")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Login password (prompted when omitted).",
)
@click.option(
    "--admin",
    "is_admin",
    is_flag=True,
    help=f"Also add the user to the '{ADMIN_GROUP_NAME}' group.",
)
@with_appcontext
def create_user_command(name: str, caption: str | None, password: str, is_admin: bool) -> None:
    """Create a user that can log in."""
    try:
        data = UserSchema().load({
            "name": name,
            "caption": caption or name,
            "password": password,
        })
        user = user_service.create_user(
            name=data["name"],
            caption=data["caption"],
            password=data["password"],
            session=db.session,
        )
        if is_admin:
            group = group_service.get_or_create_group(ADMIN_GROUP_NAME, db.session)
            user_service.add_user_groups(user["id"], [group.id], db.session)
    except ValidationError as error:
        db.session.rollback()
        raise click.ClickException(str(error.messages)) from error
    except AppError as error:
        db.session.rollback()
        raise click.ClickException(error.message) from error

    db.session.commit()
    suffix = f" in group '{ADMIN_GROUP_NAME}'" if is_admin else ""
    click.echo(f"Created user {user['id']} ({user['name']}){suffix}")
