"""CLI command modules."""

from __future__ import annotations

import os
from typing import Any

import typer
from rich.console import Console

from devcli.accounts import CLIConfiguration
from devcli.accounts.constants import ENV_ACCOUNT_ID
from devcli.exceptions import AuthenticationError, ConfigError

_console = Console()


def load_configuration() -> CLIConfiguration:
    """Load the accounts config, or exit with an error message."""
    config = CLIConfiguration()
    try:
        loaded = config.load(use_env=ENV_ACCOUNT_ID in os.environ, silence_errors=True)
    except ConfigError as e:
        _console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if loaded is None:
        _console.print("[red]No config file found. Run 'devcli accounts add' first.[/red]")
        raise typer.Exit(1)
    return config


def get_authenticated_client(account: str | None = None) -> Any:
    """Get a DevClient for ``account`` (or the default account), or exit with an error message."""
    from devcli.client import DevClient

    config = load_configuration()
    account_config = config.get_account(config.get_account_id(account))
    if account_config is None:
        _console.print(f"[red]Account {account or '(default)'} not found in config.[/red]")
        raise typer.Exit(1)

    timeout_ms = config.get_and_load_if_needed().get("httpTimeout")
    try:
        return DevClient.from_account(account_config, timeout=timeout_ms / 1000 if timeout_ms else None)
    except AuthenticationError as e:
        _console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
