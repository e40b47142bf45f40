"""Main Typer application: imports and registers all CLI commands.

Entry point: ``sciledger`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer

from sciledger.cli.commands.lifecycle import approve_cmd, submit_cmd, update_cmd
from sciledger.cli.commands.params import (
    advance_cmd,
    init_cmd,
    set_authority_cmd,
    set_fee_cmd,
    set_reward_rate_cmd,
    set_threshold_cmd,
)
from sciledger.cli.commands.query import count_cmd, exists_cmd, list_cmd, show_cmd
from sciledger.config import settings

app = typer.Typer(
    name="sciledger",
    help="Sciledger: fee-gated, authority-approved registry for scientific data contributions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Setup
app.command(name="init", help="Create the registry database.")(init_cmd)
app.command(name="set-authority", help="Configure the approving authority.")(set_authority_cmd)
app.command(name="set-fee", help="Set the submission fee.")(set_fee_cmd)
app.command(name="set-reward-rate", help="Set the reward rate.")(set_reward_rate_cmd)
app.command(name="set-threshold", help="Set the validation threshold.")(set_threshold_cmd)
app.command(name="advance", help="Advance the block height.")(advance_cmd)

# Lifecycle
app.command(name="submit", help="Submit a contribution.")(submit_cmd)
app.command(name="update", help="Update a pending contribution.")(update_cmd)
app.command(name="approve", help="Approve a pending contribution.")(approve_cmd)

# Queries
app.command(name="show", help="Show a contribution.")(show_cmd)
app.command(name="list", help="List contributions.")(list_cmd)
app.command(name="count", help="Count contributions.")(count_cmd)
app.command(name="exists", help="Check whether a fingerprint is registered.")(exists_cmd)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app()


if __name__ == "__main__":
    main()
