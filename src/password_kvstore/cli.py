"""Command-line interface for password-kvstore."""

from pathlib import Path
from typing import Dict, NoReturn, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from .audit import EventType, audit_event, configure_logging
from .config import Settings
from .crypto import PasswordCipher
from .entry import Entry
from .errors import AlreadyExists, KVStoreError
from .folder import Folder
from .storage import FileBlobStore, load_folder, save_folder

console = Console()


def parse_attributes(attributes: Tuple[str, ...]) -> Dict[str, str]:
    """Parse ``key=value`` pairs.

    Raises:
        click.BadParameter: If a pair has no ``=``.
    """
    try:
        return dict(item.split("=", 1) for item in attributes)
    except ValueError:
        raise click.BadParameter("attributes must be in key=value format") from None


def master_password_option(func):
    return click.option(
        "--password",
        prompt="Master password",
        hide_input=True,
        envvar="PWKV_PASSWORD",
        help="Master password used to derive the encryption key.",
    )(func)


def entry_options(func):
    for option in reversed(
        [
            click.option("--username", default=None, help="Username for the entry."),
            click.option("--email", default=None, help="Email address for the entry."),
            click.option("--description", default=None, help="Free-text description."),
            click.option("--url", "urls", multiple=True, help="URL (repeatable)."),
            click.option(
                "--attribute",
                "attributes",
                multiple=True,
                help="Secret attribute in key=value format (repeatable).",
            ),
        ]
    ):
        func = option(func)
    return func


def _cipher(settings: Settings, password: str) -> PasswordCipher:
    return PasswordCipher(password, settings.iterations, settings.hashing)


def _fail(
    ctx: click.Context, event_type: EventType, folder: str, error: KVStoreError
) -> NoReturn:
    audit_event(event_type=event_type, folder=folder, success=False, error=error)
    click.echo(str(error), err=True)
    ctx.exit(1)


def _print_entry(entry: Entry, reveal: bool) -> None:
    def render(secret) -> str:
        return secret.plaintext() if reveal else str(secret)

    table = Table(title=entry.name, show_header=False)
    table.add_column("field", style="cyan")
    table.add_column("value")
    table.add_row("username", entry.username)
    table.add_row("password", render(entry.password))
    table.add_row("email", entry.email)
    table.add_row("description", entry.description)
    table.add_row("urls", ", ".join(entry.urls))
    for key in sorted(entry.attributes):
        table.add_row(key, render(entry.attributes[key]))
    console.print(table)


@click.group()
@click.version_option(package_name="password-kvstore")
@click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path of the store file (default: $PWKV_STORE or ~/.local/share/pwkv).",
)
@click.option("--iterations", type=click.IntRange(1, 2**32 - 1), default=None,
              help="PBKDF2 iterations (default: $PWKV_ITERATIONS or 100000).")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default=None,
    help="Set logging level",
)
@click.pass_context
def cli(
    ctx: click.Context,
    store_path: Optional[Path],
    iterations: Optional[int],
    log_level: Optional[str],
) -> None:
    """Encrypted password store."""
    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise click.UsageError(f"invalid PWKV_* environment setting: {e}") from e
    updates = {
        "store_path": store_path,
        "iterations": iterations,
        "log_level": log_level,
    }
    settings = settings.model_copy(update={k: v for k, v in updates.items() if v is not None})
    configure_logging(settings.log_level, settings.log_file)
    ctx.obj = settings


@cli.command()
@click.argument("name")
@click.pass_context
def init(ctx: click.Context, name: str) -> None:
    """Create an empty store called NAME."""
    settings: Settings = ctx.obj
    store = FileBlobStore(settings.store_path)
    try:
        if store.exists():
            raise AlreadyExists(f"store {str(store.path)!r} already exists")
        save_folder(store, Folder(name=name))
    except KVStoreError as e:
        _fail(ctx, EventType.FOLDER_CREATE, name, e)
    audit_event(event_type=EventType.FOLDER_CREATE, folder=name, success=True)
    click.echo(f"Store {name} created at {store.path}.")


@cli.command()
@click.argument("name")
@entry_options
@click.option("--entry-password", prompt="Entry password", hide_input=True,
              confirmation_prompt=True, help="Password stored in the entry.")
@master_password_option
@click.pass_context
def add(
    ctx: click.Context,
    name: str,
    username: Optional[str],
    email: Optional[str],
    description: Optional[str],
    urls: Tuple[str, ...],
    attributes: Tuple[str, ...],
    entry_password: str,
    password: str,
) -> None:
    """Add an entry called NAME."""
    settings: Settings = ctx.obj
    store = FileBlobStore(settings.store_path)
    folder_name = ""
    try:
        folder = load_folder(store)
        folder_name = folder.name
        entry = Entry(
            name=name,
            username=username or "",
            password=entry_password,
            email=email or "",
            description=description or "",
            urls=list(urls),
            attributes=parse_attributes(attributes),
        )
        with _cipher(settings, password) as cipher:
            folder.add_entry(entry, cipher)
        save_folder(store, folder)
    except KVStoreError as e:
        _fail(ctx, EventType.ENTRY_CREATE, folder_name, e)
    audit_event(event_type=EventType.ENTRY_CREATE, folder=folder_name, success=True,
                details={"entry": name})
    click.echo(f"Entry {name} added.")


@cli.command()
@click.argument("name")
@click.option("--reveal", is_flag=True, help="Show secret values instead of asterisks.")
@master_password_option
@click.pass_context
def get(ctx: click.Context, name: str, reveal: bool, password: str) -> None:
    """Show the entry called NAME."""
    settings: Settings = ctx.obj
    store = FileBlobStore(settings.store_path)
    folder_name = ""
    try:
        folder = load_folder(store)
        folder_name = folder.name
        with _cipher(settings, password) as cipher:
            entry = folder.get(name, cipher)
        _print_entry(entry, reveal)
    except KVStoreError as e:
        _fail(ctx, EventType.ENTRY_READ, folder_name, e)
    audit_event(event_type=EventType.ENTRY_READ, folder=folder_name, success=True,
                details={"entry": name})


@cli.command()
@click.argument("name")
@entry_options
@click.option("--entry-password", default=None, help="New password stored in the entry.")
@master_password_option
@click.pass_context
def update(
    ctx: click.Context,
    name: str,
    username: Optional[str],
    email: Optional[str],
    description: Optional[str],
    urls: Tuple[str, ...],
    attributes: Tuple[str, ...],
    entry_password: Optional[str],
    password: str,
) -> None:
    """Change fields of the entry called NAME."""
    settings: Settings = ctx.obj
    store = FileBlobStore(settings.store_path)
    folder_name = ""
    try:
        folder = load_folder(store)
        folder_name = folder.name
        with _cipher(settings, password) as cipher:
            entry = folder.get(name, cipher)
            changes = {
                "username": username,
                "email": email,
                "description": description,
                "password": entry_password,
            }
            for field, value in changes.items():
                if value is not None:
                    setattr(entry, field, value)
            if urls:
                entry.urls = list(urls)
            if attributes:
                merged = dict(entry.attributes)
                merged.update(parse_attributes(attributes))
                entry.attributes = merged
            folder.update_entry(entry, cipher)
        save_folder(store, folder)
    except KVStoreError as e:
        _fail(ctx, EventType.ENTRY_UPDATE, folder_name, e)
    audit_event(event_type=EventType.ENTRY_UPDATE, folder=folder_name, success=True,
                details={"entry": name})
    click.echo(f"Entry {name} updated.")


@cli.command()
@click.argument("name")
@click.pass_context
def delete(ctx: click.Context, name: str) -> None:
    """Delete the entry called NAME."""
    settings: Settings = ctx.obj
    store = FileBlobStore(settings.store_path)
    folder_name = ""
    try:
        folder = load_folder(store)
        folder_name = folder.name
        folder.delete(name)
        save_folder(store, folder)
    except KVStoreError as e:
        _fail(ctx, EventType.ENTRY_DELETE, folder_name, e)
    audit_event(event_type=EventType.ENTRY_DELETE, folder=folder_name, success=True,
                details={"entry": name})
    click.echo(f"Entry {name} deleted.")


@cli.command(name="list")
@click.pass_context
def list_entries(ctx: click.Context) -> None:
    """List entry names."""
    settings: Settings = ctx.obj
    store = FileBlobStore(settings.store_path)
    try:
        folder = load_folder(store)
    except KVStoreError as e:
        _fail(ctx, EventType.ENTRY_LIST, "", e)

    table = Table(title=folder.name or "entries")
    table.add_column("Name", style="cyan")
    for name in folder.names():
        table.add_row(name)
    console.print(table)
    audit_event(event_type=EventType.ENTRY_LIST, folder=folder.name, success=True)


def main() -> None:
    """Entry point for the ``pwkv`` script."""
    cli(prog_name="pwkv")


if __name__ == "__main__":
    main()
