"""Account commands for the devcli CLI."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from devcli.accounts import CLIConfiguration
from devcli.accounts.constants import API_KEY_AUTH_METHOD, PERSONAL_ACCESS_KEY_AUTH_METHOD
from devcli.cli.commands import load_configuration
from devcli.exceptions import ConfigError

app = typer.Typer(help="Manage configured accounts")
console = Console()


@app.command("list")
def list_accounts() -> None:
    """List the accounts in the config file."""
    config = load_configuration()
    accounts = config.accounts

    if not accounts:
        console.print("[yellow]No accounts configured.[/yellow]")
        return

    default_id = config.get_account_id()
    table = Table(title=f"Accounts ({config.path or 'environment'})")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Account ID")
    table.add_column("Env")
    table.add_column("Auth Type", style="green")
    table.add_column("Default")

    for account in accounts:
        table.add_row(
            account.get("name", ""),
            str(account.get("accountId", "")),
            account.get("env", ""),
            account.get("authType", ""),
            "*" if account.get("accountId") == default_id else "",
        )

    console.print(table)


@app.command()
def add(
    account_id: int = typer.Option(..., "--account-id", help="The account ID"),
    name: str = typer.Option(..., "--name", "-n", help="Account name, without spaces"),
    personal_access_key: Optional[str] = typer.Option(None, "--personal-access-key", help="Personal access key"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Legacy API key"),
    env: str = typer.Option("prod", "--env", help="prod or qa"),
) -> None:
    """Add an account to the config file, creating the file if needed."""
    if bool(personal_access_key) == bool(api_key):
        console.print("[red]Pass exactly one of --personal-access-key or --api-key.[/red]")
        raise typer.Exit(1)

    config = CLIConfiguration()
    try:
        config.load(silence_errors=True)
        if config.account_name_exists(name):
            console.print(f"[red]An account named {name} already exists.[/red]")
            raise typer.Exit(1)

        config.set_default_path_if_unset()
        config.update_account(
            account_id,
            name=name,
            environment=env,
            auth_type=PERSONAL_ACCESS_KEY_AUTH_METHOD if personal_access_key else API_KEY_AUTH_METHOD,
            personal_access_key=personal_access_key,
            api_key=api_key,
        )
        if not config.default_account:
            config.update_default_account(name)
        config.write()
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Account {name} added to {config.path}.[/green]")


@app.command()
def use(name: str = typer.Argument(help="Account name or ID")) -> None:
    """Set the default account."""
    config = load_configuration()
    if config.get_account_id(name) is None:
        console.print(f"[red]Cannot find account with identifier {name}[/red]")
        raise typer.Exit(1)

    config.update_default_account(name)
    console.print(f"[green]Default account is now {name}.[/green]")


@app.command()
def rename(
    current_name: str = typer.Argument(help="Current account name or ID"),
    new_name: str = typer.Argument(help="New account name"),
) -> None:
    """Rename an account."""
    config = load_configuration()
    try:
        config.rename_account(current_name, new_name)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Renamed {current_name} to {new_name}.[/green]")


@app.command()
def remove(
    name: str = typer.Argument(help="Account name or ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Remove an account from the config file."""
    if not force:
        confirm = typer.confirm(f"Are you sure you want to remove account {name}?")
        if not confirm:
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(0)

    config = load_configuration()
    try:
        config.delete_account(name)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Account {name} removed.[/green]")
