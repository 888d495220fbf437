# ruff: noqa: I001
"""CLI for the ``donation_ledger`` package.

A Typer-based console interface over :mod:`donation_ledger.api`. Environment
variables (``DATABASE_URL``, ``DONATIONS_*`` overrides, SMTP credentials) are
loaded from a local ``.env`` using ``python-dotenv`` before any command runs.

Run interactively, commands print their summary (``--display``). A scheduler
runs the same commands with ``--no-display --email-result`` so the summary is
mailed to ``report_recipients`` instead.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from db.client import resolve_database_url

from .config import SETTING_NAMES
from .errors import ConfigurationError
from .logging_setup import configure_logging

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import donation files into the ledger, send acknowledgements, and "
        "build the annual recurring-gift rollup."
    ),
)

console = Console()

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
DATABASE_URL_OPTION = typer.Option(None, help="Override DATABASE_URL (falls back to env var).")
DISPLAY_OPTION = typer.Option(True, "--display/--no-display", help="Print the run summary.")
EMAIL_RESULT_OPTION = typer.Option(
    False,
    "--email-result/--no-email-result",
    help="Email the run summary to report_recipients (only when there was work).",
)


def _fail(message: str) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)
    raise typer.Exit(1)


def _database_url(override: str | None) -> str:
    try:
        return resolve_database_url(override)
    except RuntimeError as e:
        _fail(str(e))


@app.command("init-db")
def init_db_cmd(database_url: str | None = DATABASE_URL_OPTION) -> None:
    """Create the ledger tables if they do not exist."""

    from .ledger import create_schema

    try:
        create_schema(database_url=_database_url(database_url))
    except SQLAlchemyError as e:
        _fail(f"could not create schema: {e}")
    typer.echo("Ledger schema is ready.")


@app.command("set-setting")
def set_setting_cmd(
    name: str = typer.Argument(..., help="Setting name, e.g. pending_folder."),
    value: str = typer.Argument(..., help="Setting value (empty string clears it)."),
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Store a named setting alongside the ledger."""

    from .ledger import ledger_writer

    if name not in SETTING_NAMES:
        _fail(f"unknown setting {name!r}; known settings: {', '.join(SETTING_NAMES)}")
    with ledger_writer(database_url=_database_url(database_url)) as store:
        store.set_setting(name, value)
    typer.echo(f"{name} = {value}")


@app.command("show-settings")
def show_settings_cmd(database_url: str | None = DATABASE_URL_OPTION) -> None:
    """Print the effective settings (stored values with environment overrides)."""

    from .config import resolve_settings
    from .ledger import ledger_writer

    with ledger_writer(database_url=_database_url(database_url)) as store:
        effective = resolve_settings(store.settings())

    table = Table("setting", "value")
    for name in SETTING_NAMES:
        value = effective.get(name, "")
        table.add_row(name, "********" if name == "smtp_password" and value else value)
    console.print(table)


@app.command("import-pending")
def import_pending_cmd(
    database_url: str | None = DATABASE_URL_OPTION,
    display: bool = DISPLAY_OPTION,
    email_result: bool = EMAIL_RESULT_OPTION,
) -> None:
    """Import every file waiting in the pending folder."""

    from .api import import_pending_donations

    try:
        result = import_pending_donations(
            database_url=_database_url(database_url),
            display_result=display,
            email_result=email_result,
            console=console,
        )
    except ConfigurationError as e:
        _fail(str(e))
    if any(not f.succeeded for f in result.files):
        raise typer.Exit(2)


@app.command("acknowledge")
def acknowledge_cmd(
    database_url: str | None = DATABASE_URL_OPTION,
    display: bool = DISPLAY_OPTION,
    email_result: bool = EMAIL_RESULT_OPTION,
) -> None:
    """Email or generate acknowledgements for unacknowledged donations."""

    from .api import acknowledge_donations

    try:
        result = acknowledge_donations(
            database_url=_database_url(database_url),
            display_result=display,
            email_result=email_result,
            console=console,
        )
    except ConfigurationError as e:
        _fail(str(e))
    if result.errors:
        raise typer.Exit(2)


@app.command("annual-rollup")
def annual_rollup_cmd(
    tax_year: int | None = typer.Option(
        None, help="Tax year to summarize (default: the previous calendar year)."
    ),
    database_url: str | None = DATABASE_URL_OPTION,
    display: bool = DISPLAY_OPTION,
    email_result: bool = EMAIL_RESULT_OPTION,
) -> None:
    """Create one P4 rollup record per recurring donor for a tax year."""

    from .api import generate_rollup

    try:
        generate_rollup(
            database_url=_database_url(database_url),
            tax_year=tax_year,
            display_result=display,
            email_result=email_result,
            console=console,
        )
    except ConfigurationError as e:
        _fail(str(e))


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
