"""Main entry point for the devcli CLI."""

from __future__ import annotations

import logging

try:
    import typer
except ImportError:
    import sys

    print("devcli CLI requires extras: pip install devcli[cli]")
    sys.exit(1)

from .commands import accounts, ports, schemas, secrets

app = typer.Typer(
    name="devcli",
    help="devcli - Manage accounts, secrets, schemas and local dev server ports",
    no_args_is_help=True,
)

app.add_typer(accounts.app, name="accounts")
app.add_typer(ports.app, name="ports")
app.add_typer(schemas.app, name="schemas")
app.add_typer(secrets.app, name="secrets")


def _version_callback(value: bool) -> None:
    """Handle --version and exit early."""
    if value:
        from devcli import __version__

        typer.echo(f"devcli {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the CLI version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    debug: bool = typer.Option(False, "--debug", help="Log debug output."),
) -> None:
    """devcli root callback."""
    _ = version
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Show the CLI version."""
    from devcli import __version__

    typer.echo(f"devcli {__version__}")


if __name__ == "__main__":
    app()
