"""Operator commands: database setup and privileged accounts.

Self-service registration only ever creates students; teachers and admins
are created here.
"""
import click

from .config import get_settings
from .database import build_engine, build_session_factory, init_db
from .exceptions import PortalError
from .logging_config import configure_logging
from .models.models import Role
from .services.accounts import create_user
from .utils.security import build_password_context


@click.group()
def cli():
    """CCCD submission portal administration."""
    configure_logging(get_settings().log_level)


@cli.command("init-db")
def init_db_cmd():
    """Create all tables."""
    settings = get_settings()
    init_db(build_engine(settings.database_url))
    click.secho("Database tables created", fg="green")


@cli.command("create-user")
@click.option("--email", required=True)
@click.option("--password", required=True, prompt=True, hide_input=True)
@click.option("--cccd", required=True, help="12-digit national ID")
@click.option("--name", required=True)
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.TEACHER.value,
    show_default=True,
)
def create_user_cmd(email, password, cccd, name, role):
    """Create an account with an explicit role."""
    settings = get_settings()
    engine = build_engine(settings.database_url)
    init_db(engine)
    db = build_session_factory(engine)()
    try:
        user = create_user(
            db,
            email=email,
            password=password,
            cccd=cccd,
            name=name,
            role=Role(role),
            pwd_context=build_password_context(settings.bcrypt_rounds),
        )
    except PortalError as e:
        raise click.ClickException(e.message)
    finally:
        db.close()
    click.secho(f"Created {user.role.value} {user.email} ({user.id})", fg="green")


if __name__ == "__main__":
    cli()
