"""Secrets commands for the devcli CLI."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from devcli.cli.commands import get_authenticated_client

app = typer.Typer(help="Manage serverless function secrets")
console = Console()

_account_option = typer.Option(None, "--account", "-a", help="Account name or ID (default account if omitted)")


@app.command("list")
def list_secrets(account: Optional[str] = _account_option) -> None:
    """List secret names."""
    client = get_authenticated_client(account)

    try:
        secrets = client.secrets.list().get("results", [])
        if not secrets:
            console.print("[yellow]No secrets found.[/yellow]")
            return

        console.print(f"\n[bold]Secrets for account {client.account_id}[/bold]\n")
        for key in secrets:
            console.print(f"  {key}")
    finally:
        client.close()


@app.command()
def add(
    key: str = typer.Argument(help="Secret name"),
    account: Optional[str] = _account_option,
) -> None:
    """Add a secret. The value is prompted for."""
    value = typer.prompt("Secret value", hide_input=True)
    client = get_authenticated_client(account)

    try:
        client.secrets.add(key, value)
        console.print(f"[green]Secret {key} added.[/green]")
    finally:
        client.close()


@app.command()
def update(
    key: str = typer.Argument(help="Secret name"),
    account: Optional[str] = _account_option,
) -> None:
    """Update the value of a secret."""
    value = typer.prompt("New secret value", hide_input=True)
    client = get_authenticated_client(account)

    try:
        client.secrets.update(key, value)
        console.print(f"[green]Secret {key} updated.[/green]")
    finally:
        client.close()


@app.command()
def delete(
    key: str = typer.Argument(help="Secret name"),
    account: Optional[str] = _account_option,
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a secret."""
    if not force:
        confirm = typer.confirm(f"Are you sure you want to delete secret {key}?")
        if not confirm:
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(0)

    client = get_authenticated_client(account)

    try:
        client.secrets.delete(key)
        console.print(f"[green]Secret {key} deleted.[/green]")
    finally:
        client.close()
