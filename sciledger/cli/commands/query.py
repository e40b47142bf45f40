"""Read-only commands: show, list, count, exists."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from sciledger.cli.commands.common import console, db_option, open_registry
from sciledger.core.hasher import hash_from_hex
from sciledger.models.contributions import Contribution, ContributionStatus


def _status_markup(contribution: Contribution) -> str:
    if contribution.is_approved:
        return "[green]approved[/green]"
    return "[yellow]pending[/yellow]"


def show_cmd(
    contribution_id: int = typer.Argument(..., help="Contribution id."),
    db_path: Path = db_option(),
) -> None:
    """Show one contribution and its latest update."""
    with open_registry(db_path) as registry:
        contribution = registry.get_contribution(contribution_id)
        update = registry.get_contribution_update(contribution_id)

    if contribution is None:
        console.print(f"[dim]No contribution with id {contribution_id}.[/dim]")
        raise typer.Exit(code=1)

    table = Table(title=f"Contribution {contribution_id}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Hash", contribution.hash_hex)
    table.add_row("Status", _status_markup(contribution))
    table.add_row("Submitter", escape(contribution.submitter))
    table.add_row("Category", contribution.category.value)
    table.add_row("Data type", contribution.data_type.value)
    table.add_row("Metadata", escape(contribution.metadata))
    table.add_row("Description", escape(contribution.description))
    table.add_row("Location", escape(contribution.location) or "-")
    table.add_row("Timestamp", str(contribution.timestamp))
    table.add_row("Expiry", str(contribution.expiry))
    table.add_row("Points", str(contribution.points_awarded))
    if update is not None:
        table.add_row("Last update", f"{escape(update.updater)} at {update.update_timestamp}")
    console.print(table)


def list_cmd(
    status: ContributionStatus = typer.Option(None, "--status", help="Filter by status."),
    db_path: Path = db_option(),
) -> None:
    """List contributions in id order."""
    with open_registry(db_path) as registry:
        contributions = registry.list_contributions(status)

    if not contributions:
        console.print("[dim]No contributions.[/dim]")
        return

    table = Table(title="Contributions")
    table.add_column("Id", justify="right")
    table.add_column("Category", style="cyan")
    table.add_column("Type")
    table.add_column("Submitter")
    table.add_column("Metadata")
    table.add_column("Status", justify="center")
    for c in contributions:
        table.add_row(
            str(c.contribution_id),
            c.category.value,
            c.data_type.value,
            escape(c.submitter),
            escape(c.metadata),
            _status_markup(c),
        )
    console.print(table)


def count_cmd(db_path: Path = db_option()) -> None:
    """Print the number of contributions ever created."""
    with open_registry(db_path) as registry:
        console.print(str(registry.get_contribution_count()))


def exists_cmd(
    hash_hex: str = typer.Argument(..., help="Fingerprint as hex."),
    db_path: Path = db_option(),
) -> None:
    """Exit 0 if the fingerprint is registered, 1 otherwise."""
    try:
        data_hash = hash_from_hex(hash_hex)
    except ValueError as exc:
        console.print(f"[red]Not a hex fingerprint:[/red] {escape(hash_hex)}")
        raise typer.Exit(code=2) from exc
    with open_registry(db_path) as registry:
        found = registry.check_existence(data_hash)
    console.print("true" if found else "false")
    if not found:
        raise typer.Exit(code=1)
