"""Port manager commands for the devcli CLI."""

from __future__ import annotations

from typing import List, Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

from devcli.exceptions import APIError, PortManagerInUseError
from devcli.ports import PORT_MANAGER_SERVER_PORT, PortManagerClient, PortManagerServer

app = typer.Typer(help="Coordinate local dev server ports between CLI processes")
console = Console()

_port_option = typer.Option(PORT_MANAGER_SERVER_PORT, "--manager-port", help="Port manager server port")


def _client(manager_port: int) -> PortManagerClient:
    return PortManagerClient(port=manager_port)


def _not_running(manager_port: int) -> typer.Exit:
    console.print(f"[red]The port manager is not running on port {manager_port}.[/red]")
    console.print("Start it with [bold]devcli ports serve[/bold].")
    return typer.Exit(1)


@app.command()
def serve(manager_port: int = _port_option) -> None:
    """Run the port manager server until it is stopped."""
    server = PortManagerServer(port=manager_port)
    try:
        server.start()
    except PortManagerInUseError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Port manager listening on {server.url}[/green]")
    console.print("[dim]Stop it with 'devcli ports stop' or Ctrl+C.[/dim]")
    try:
        server.wait()
    except KeyboardInterrupt:
        server.close()


@app.command("list")
def list_servers(manager_port: int = _port_option) -> None:
    """List every instance and the port it was given."""
    with _client(manager_port) as client:
        try:
            result = client.list_servers()
        except httpx.TransportError:
            raise _not_running(manager_port)

    servers = result.get("servers", {})
    if not servers:
        console.print("[yellow]No ports assigned.[/yellow]")
        return

    table = Table(title=f"Assigned Ports ({result.get('count', len(servers))})")
    table.add_column("Instance", style="cyan", no_wrap=True)
    table.add_column("Port", style="green")
    for instance_id, port in sorted(servers.items(), key=lambda item: item[1]):
        table.add_row(instance_id, str(port))
    console.print(table)


@app.command()
def get(
    instance_id: str = typer.Argument(help="The instance ID"),
    manager_port: int = _port_option,
) -> None:
    """Show the port assigned to an instance."""
    with _client(manager_port) as client:
        try:
            port = client.get_port(instance_id)
        except httpx.TransportError:
            raise _not_running(manager_port)
        except APIError as e:
            console.print(f"[red]{e.message}[/red]")
            raise typer.Exit(1)
    typer.echo(port)


@app.command()
def assign(
    instance_ids: List[str] = typer.Argument(help="Instance IDs that need a port"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Preferred port"),
    manager_port: int = _port_option,
) -> None:
    """Assign ports to one or more instances."""
    with _client(manager_port) as client:
        try:
            ports = client.request_ports(instance_ids, port=port)
        except httpx.TransportError:
            raise _not_running(manager_port)
        except APIError as e:
            console.print(f"[red]{e.message}[/red]")
            try:
                results = e.response.json().get("results", []) if e.response is not None else []
            except ValueError:
                results = []
            for result in results:
                if result.get("status") == "assigned":
                    console.print(f"  {result['instanceId']}: {result['port']}")
            raise typer.Exit(1)

    for instance_id, assigned in ports.items():
        console.print(f"  {instance_id}: [green]{assigned}[/green]")


@app.command()
def release(
    instance_id: str = typer.Argument(help="The instance ID"),
    manager_port: int = _port_option,
) -> None:
    """Release the port of an instance."""
    with _client(manager_port) as client:
        try:
            client.release(instance_id)
        except httpx.TransportError:
            raise _not_running(manager_port)
        except APIError as e:
            console.print(f"[red]{e.message}[/red]")
            raise typer.Exit(1)
    console.print(f"[green]Released port for {instance_id}.[/green]")


@app.command()
def stop(manager_port: int = _port_option) -> None:
    """Stop the running port manager server."""
    with _client(manager_port) as client:
        try:
            client.stop_server()
        except httpx.TransportError:
            raise _not_running(manager_port)
    console.print("[green]Port manager stopped.[/green]")
