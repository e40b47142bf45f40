"""``sciledger submit`` / ``update`` / ``approve``: contribution lifecycle."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape

from sciledger.cli.commands.common import console, db_option, open_registry, reporting_errors
from sciledger.core.hasher import fingerprint_file, hash_from_hex


def _resolve_hash(hash_hex: str | None, file: Path | None) -> bytes:
    if (hash_hex is None) == (file is None):
        console.print("[red]Give exactly one of --hash or --file.[/red]")
        raise typer.Exit(code=2)
    if file is not None:
        return fingerprint_file(file)
    try:
        return hash_from_hex(hash_hex)
    except ValueError as exc:
        console.print(f"[red]Not a hex fingerprint:[/red] {escape(hash_hex)}")
        raise typer.Exit(code=2) from exc


def submit_cmd(
    metadata: str = typer.Option(..., "--metadata", "-m", help="Short metadata, 1-256 chars."),
    category: str = typer.Option(..., "--category", help="environment, biology, astronomy or physics."),
    data_type: str = typer.Option(..., "--data-type", help="observation, measurement, photo or sample."),
    description: str = typer.Option(..., "--description", help="Description, 1-512 chars."),
    expiry: int = typer.Option(..., "--expiry", help="Expiry block height, after the current one."),
    caller: str = typer.Option(..., "--caller", "-c", help="Submitting principal."),
    location: str = typer.Option("", "--location", help="Optional location, up to 100 chars."),
    points: int = typer.Option(0, "--points", help="Initial points awarded."),
    hash_hex: str = typer.Option(None, "--hash", help="32-byte fingerprint as hex."),
    file: Path = typer.Option(
        None, "--file", exists=True, dir_okay=False, help="Fingerprint this file instead."
    ),
    db_path: Path = db_option(),
) -> None:
    """Submit a contribution; the submission fee is charged to the caller."""
    data_hash = _resolve_hash(hash_hex, file)
    with open_registry(db_path) as registry, reporting_errors():
        contribution_id = registry.submit_contribution(
            data_hash,
            metadata,
            category,
            data_type,
            description,
            location,
            expiry,
            points,
            caller=caller,
        )
    console.print(f"[green]Contribution submitted.[/green] id=[bold]{contribution_id}[/bold]")
    # Plain id for scripting
    console.print(str(contribution_id))


def update_cmd(
    contribution_id: int = typer.Argument(..., help="Contribution id."),
    metadata: str = typer.Option(..., "--metadata", "-m", help="New metadata."),
    description: str = typer.Option(..., "--description", help="New description."),
    caller: str = typer.Option(..., "--caller", "-c", help="Must be the submitter."),
    db_path: Path = db_option(),
) -> None:
    """Update a pending contribution (submitter only)."""
    with open_registry(db_path) as registry, reporting_errors():
        registry.update_contribution(contribution_id, metadata, description, caller=caller)
    console.print(f"[green]Contribution {contribution_id} updated.[/green]")


def approve_cmd(
    contribution_id: int = typer.Argument(..., help="Contribution id."),
    caller: str = typer.Option(..., "--caller", "-c", help="Must be the authority."),
    db_path: Path = db_option(),
) -> None:
    """Approve a pending contribution (authority only)."""
    with open_registry(db_path) as registry, reporting_errors():
        registry.approve_contribution(contribution_id, caller=caller)
    console.print(f"[green]Contribution {contribution_id} approved.[/green]")
