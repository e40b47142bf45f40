"""Sciledger CLI: Typer-based command-line interface.

Provides the ``sciledger`` command with subcommands for configuring the
registry, submitting, updating and approving contributions, and querying
the registry database.

All output uses Rich for formatted terminal display.
"""
