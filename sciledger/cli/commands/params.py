"""Registry setup commands: init, authority, parameters, block height."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape
from rich.panel import Panel

from sciledger.cli.commands.common import console, db_option, open_registry, reporting_errors
from sciledger.core.clock import StoreClock


def init_cmd(db_path: Path = db_option()) -> None:
    """Create the registry database and show its parameters."""
    with open_registry(db_path) as registry:
        config = registry.get_config()
        height = registry.clock.current_height()

    authority = escape(config.authority) if config.authority else "[dim]not configured[/dim]"
    console.print(
        Panel(
            "\n".join([
                "[bold green]Registry ready.[/bold green]",
                "",
                f"[bold]Database:[/bold]             {escape(str(db_path))}",
                f"[bold]Authority:[/bold]            {authority}",
                f"[bold]Contributions:[/bold]        {config.next_id} / {config.max_contributions}",
                f"[bold]Submission fee:[/bold]       {config.submission_fee}",
                f"[bold]Reward rate:[/bold]          {config.reward_rate}",
                f"[bold]Validation threshold:[/bold] {config.validation_threshold}",
                f"[bold]Block height:[/bold]         {height}",
            ]),
            title="[bold]Sciledger[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )


def set_authority_cmd(
    principal: str = typer.Argument(..., help="Principal empowered to approve."),
    db_path: Path = db_option(),
) -> None:
    """Configure the approving authority (write-once)."""
    with open_registry(db_path) as registry, reporting_errors():
        registry.set_authority(principal)
    console.print(f"[green]Authority set to[/green] {escape(principal)}")


def set_fee_cmd(
    fee: int = typer.Argument(..., help="New submission fee."),
    caller: str = typer.Option(None, "--caller", "-c", help="Principal making the change."),
    db_path: Path = db_option(),
) -> None:
    """Replace the submission fee."""
    with open_registry(db_path) as registry, reporting_errors():
        registry.set_submission_fee(fee, caller=caller)
    console.print(f"[green]Submission fee set to[/green] {fee}")


def set_reward_rate_cmd(
    rate: int = typer.Argument(..., help="Reward rate, 1-50."),
    caller: str = typer.Option(None, "--caller", "-c", help="Principal making the change."),
    db_path: Path = db_option(),
) -> None:
    """Replace the reward rate."""
    with open_registry(db_path) as registry, reporting_errors():
        registry.set_reward_rate(rate, caller=caller)
    console.print(f"[green]Reward rate set to[/green] {rate}")


def set_threshold_cmd(
    threshold: int = typer.Argument(..., help="Validation threshold, 1-10."),
    caller: str = typer.Option(None, "--caller", "-c", help="Principal making the change."),
    db_path: Path = db_option(),
) -> None:
    """Replace the validation threshold."""
    with open_registry(db_path) as registry, reporting_errors():
        registry.set_validation_threshold(threshold, caller=caller)
    console.print(f"[green]Validation threshold set to[/green] {threshold}")


def advance_cmd(
    blocks: int = typer.Argument(1, help="Number of blocks to advance."),
    db_path: Path = db_option(),
) -> None:
    """Advance the persisted block height."""
    with open_registry(db_path) as registry:
        try:
            height = StoreClock(registry.store).advance(blocks)
        except ValueError as exc:
            console.print(f"[red]{escape(str(exc))}[/red]")
            raise typer.Exit(code=1) from exc
    console.print(f"Block height: [bold]{height}[/bold]")
