"""Shared CLI plumbing: opening a registry and reporting refusals."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from sciledger.config import settings
from sciledger.core.clock import StoreClock
from sciledger.core.errors import RegistryError
from sciledger.core.payments import StorePaymentService
from sciledger.core.registry import ContributionRegistry
from sciledger.core.store import SQLiteStore

console = Console()

DB_OPTION_HELP = "Path to the registry SQLite database."


def db_option() -> Path:
    return typer.Option(settings.db_path, "--db", "-d", help=DB_OPTION_HELP)


@contextmanager
def open_registry(db_path: Path) -> Iterator[ContributionRegistry]:
    """Open a registry whose clock and fee log live in the same database."""
    store = SQLiteStore(db_path)
    try:
        yield ContributionRegistry(
            store,
            clock=StoreClock(store),
            payments=StorePaymentService(store),
            settings=settings,
        )
    finally:
        store.close()


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Print a refused operation in red and exit with status 1."""
    try:
        yield
    except RegistryError as exc:
        console.print(
            f"[red]Refused:[/red] [bold]{exc.kind.value}[/bold] (u{exc.code}) {escape(exc.args[0])}"
        )
        raise typer.Exit(code=1) from exc
