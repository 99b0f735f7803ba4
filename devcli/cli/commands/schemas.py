"""Custom object schema commands for the devcli CLI."""

from __future__ import annotations

import json
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from devcli.cli.commands import get_authenticated_client

app = typer.Typer(help="Manage custom object schemas")
console = Console()

_account_option = typer.Option(None, "--account", "-a", help="Account name or ID (default account if omitted)")


@app.command("list")
def list_schemas(account: Optional[str] = _account_option) -> None:
    """List custom object schemas."""
    client = get_authenticated_client(account)

    try:
        schemas = client.custom_objects.list_schemas().get("results", [])
        if not schemas:
            console.print("[yellow]No schemas found.[/yellow]")
            return

        table = Table(title="Custom Object Schemas")
        table.add_column("Object Type ID", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Label")

        for schema in schemas:
            labels = schema.get("labels") or {}
            table.add_row(
                schema.get("objectTypeId", ""),
                schema.get("name", ""),
                labels.get("singular", ""),
            )

        console.print(table)
    finally:
        client.close()


@app.command()
def get(
    object_type: str = typer.Argument(help="Schema name or object type ID"),
    account: Optional[str] = _account_option,
) -> None:
    """Print a schema as JSON."""
    client = get_authenticated_client(account)

    try:
        schema = client.custom_objects.get_schema(object_type)
        typer.echo(json.dumps(schema, indent=2))
    finally:
        client.close()


@app.command()
def delete(
    object_type: str = typer.Argument(help="Schema name or object type ID"),
    account: Optional[str] = _account_option,
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a schema."""
    if not force:
        confirm = typer.confirm(f"Are you sure you want to delete schema {object_type}?")
        if not confirm:
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(0)

    client = get_authenticated_client(account)

    try:
        client.custom_objects.delete_schema(object_type)
        console.print(f"[green]Schema {object_type} deleted.[/green]")
    finally:
        client.close()
