"""Command-line interface for managing secondary passwords."""

from dataclasses import dataclass
from typing import Optional

import click
import structlog
from rich.console import Console
from rich.table import Table
from rich.text import Text

from . import __version__
from .audit import setup_logging
from .config import ConfigError, Settings, load_settings
from .storage import (
    CredentialStore,
    InvalidIndexError,
    InvalidRecordError,
    JsonFileBackend,
    NoRecordsError,
    PersistenceError,
)

logger = structlog.get_logger(__name__)
console = Console()


@dataclass
class CliContext:
    settings: Settings
    store: CredentialStore
    user: Optional[str]

    def require_user(self) -> str:
        if not self.user:
            raise click.UsageError("Missing option '--user'.")
        if not self.settings.is_known_user(self.user):
            raise click.ClickException(f"Unknown user: {self.user}")
        return self.user


def print_table(title: str, rows: list[dict], columns: list[tuple[str, str]]) -> None:
    """Print data in a formatted table.

    Args:
        title: Table title
        rows: List of row dictionaries
        columns: List of (key, header) tuples defining columns
    """
    table = Table(title=title)
    for _, header in columns:
        table.add_column(header, style="cyan")

    for row in rows:
        table.add_row(*(Text(str(row.get(key, ""))) for key, _ in columns))

    console.print(table)


@click.group()
@click.version_option(__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON settings file",
)
@click.option("--data-file", type=click.Path(dir_okay=False), default=None, help="Password data file")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default=None,
    help="Set logging level",
)
@click.option("--log-dir", type=click.Path(file_okay=False), default=None, help="Log directory")
@click.option("--user", envvar="ANOTHERPASS_USER", default=None, help="User whose passwords are managed")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    data_file: Optional[str],
    log_level: Optional[str],
    log_dir: Optional[str],
    user: Optional[str],
) -> None:
    """Manage additional login passwords.

    Every command acts on the records of the user given by --user.
    """
    try:
        settings = load_settings(
            config_path, data_file=data_file, log_level=log_level, log_dir=log_dir
        )
    except ConfigError as e:
        raise click.ClickException(str(e))

    setup_logging(log_level=settings.log_level, base_dir=settings.log_dir)

    store = CredentialStore(
        JsonFileBackend(settings.data_file),
        known_user=settings.is_known_user if settings.users else None,
        hash_prefix_len=settings.hash_prefix_len,
        salt_length=settings.salt_length,
    )
    try:
        store.load()
    except PersistenceError as e:
        raise click.ClickException(str(e))

    ctx.obj = CliContext(settings=settings, store=store, user=user)


@cli.command()
@click.argument("password", required=False)
@click.argument("remainder", required=False, default="")
@click.pass_obj
def add(obj: CliContext, password: Optional[str], remainder: str) -> None:
    """Add a password, optionally labelled with REMAINDER.

    The password is prompted for when omitted.
    """
    user = obj.require_user()
    if password is None:
        password = click.prompt("Password", hide_input=True, confirmation_prompt=True)

    try:
        added = obj.store.add(user, password, remainder)
    except InvalidRecordError as e:
        raise click.ClickException(str(e))
    except PersistenceError as e:
        raise click.ClickException(f"Password added but could not be saved: {e}")

    click.echo("Password added." if added else "Password is already added.")


@cli.command(name="list")
@click.pass_obj
def list_passwords(obj: CliContext) -> None:
    """List your passwords."""
    user = obj.require_user()
    views = obj.store.list(user)
    if not views:
        click.echo("No passwords set for your user")
        return

    rows = [
        {"id": v.index, "remainder": v.remainder, "hash": v.hash_prefix}
        for v in views
    ]
    print_table(
        f"Passwords of {user}",
        rows,
        [("id", "Id"), ("remainder", "Remainder"), ("hash", "PassHash")],
    )


@cli.command(name="del")
@click.argument("index", type=int)
@click.pass_obj
def delete(obj: CliContext, index: int) -> None:
    """Remove the password shown at INDEX by 'list'."""
    user = obj.require_user()
    try:
        obj.store.delete_by_index(user, index)
    except NoRecordsError:
        raise click.ClickException("No passwords set for your user")
    except InvalidIndexError:
        raise click.ClickException('Invalid #, check "list"')
    except PersistenceError as e:
        raise click.ClickException(f"Removed but could not be saved: {e}")

    click.echo("Removed")


@cli.command()
@click.confirmation_option(prompt="Remove all your passwords?")
@click.pass_obj
def clear(obj: CliContext) -> None:
    """Remove all your passwords."""
    user = obj.require_user()
    try:
        cleared = obj.store.clear(user)
    except PersistenceError as e:
        raise click.ClickException(f"Cleared but could not be saved: {e}")

    click.echo("Cleared" if cleared else "No passwords set for your user")


@cli.command()
@click.password_option(confirmation_prompt=False, help="Password to check")
@click.pass_obj
def check(obj: CliContext, password: str) -> None:
    """Check whether a password would be accepted at login."""
    user = obj.require_user()
    if obj.store.check_login(user, password):
        click.echo("Accepted")
        return

    click.echo("Not accepted", err=True)
    raise SystemExit(1)


@cli.command()
@click.pass_obj
def users(obj: CliContext) -> None:
    """List users that have passwords."""
    names = obj.store.users()
    if not names:
        click.echo("No passwords stored.")
        return

    print_table(
        "Users",
        [{"user": name, "count": obj.store.count(name)} for name in sorted(names)],
        [("user", "User"), ("count", "Passwords")],
    )


def main() -> None:
    """CLI entry point."""
    cli()
