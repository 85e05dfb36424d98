"""CLI entry point for smilehub."""

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from . import __version__
from .client import GatewaySession
from .core.config import get_config
from .core.exceptions import SmileHubError
from .discovery import Scanner
from .gateway.models import mask_credential
from .output import export_json
from .registry import HubRegistry

console = Console()


def print_error(message: str) -> None:
    """Print error message in red."""
    console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print success message in green."""
    console.print(f"[green]✓[/green] {message}")


def print_warning(message: str) -> None:
    """Print warning message in yellow."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=verbose)],
        force=True,
    )


def _sweep_progress() -> Progress:
    return Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def _registry(ctx: click.Context) -> HubRegistry:
    registry = HubRegistry(ctx.obj["config"].hubs_dir)
    registry.load_all()
    return registry


@click.group()
@click.version_option(version=__version__, prog_name="smilehub")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """smilehub - Locate Plugwise gateways and read their devices."""
    ctx.ensure_object(dict)
    config = get_config()
    config.verbose = verbose or config.verbose
    _setup_logging(config.verbose)
    ctx.obj["config"] = config


@main.command()
@click.argument("credential")
@click.option("--network", "-n", help="Network to sweep (CIDR, range or list)")
@click.option("--timeout", type=float, help="Timeout per probe in seconds")
@click.pass_context
def locate(ctx: click.Context, credential: str, network: str | None, timeout: float | None) -> None:
    """Find the gateway that accepts CREDENTIAL."""
    config = ctx.obj["config"]
    if timeout is not None:
        config.scan.probe_timeout = timeout

    console.print(f"[bold]Locating hub {mask_credential(credential)}...[/bold]")

    with _sweep_progress() as progress:
        task = progress.add_task("Probing...", total=None)

        def on_progress(completed: int, total: int) -> None:
            progress.update(task, completed=completed, total=total)

        scanner = Scanner(_registry(ctx), config=config, progress_callback=on_progress)
        try:
            hub = asyncio.run(scanner.locate(credential, network))
        except SmileHubError as e:
            print_error(str(e))
            sys.exit(1)

    summary = scanner.last_summary
    if hub is None:
        print_error(summary.message if summary else "Hub not found")
        sys.exit(1)

    body = (
        f"[cyan]Name:[/cyan] {hub.name}\n"
        f"[cyan]Address:[/cyan] {hub.address}\n"
        f"[cyan]Model:[/cyan] {hub.model or '-'}\n"
        f"[cyan]Firmware:[/cyan] {hub.firmware or '-'}"
    )
    console.print(Panel(body, title="Hub Found", border_style="green"))
    if summary:
        source = "stored address" if summary.fast_path else "sweep"
        console.print(
            f"[dim]{summary.addresses_checked} address(es) checked via {source} "
            f"in {summary.elapsed:.1f}s[/dim]"
        )


@main.command()
@click.option("--network", "-n", help="Network to sweep (CIDR, range or list)")
@click.pass_context
def scan(ctx: click.Context, network: str | None) -> None:
    """Discover every hub configured via HUBn variables or the config file."""
    config = ctx.obj["config"]

    with _sweep_progress() as progress:
        task = progress.add_task("Scanning...", total=None)

        def on_progress(completed: int, total: int) -> None:
            progress.update(task, completed=completed, total=total)

        scanner = Scanner(_registry(ctx), config=config, progress_callback=on_progress)
        try:
            report = asyncio.run(scanner.scan(network))
        except SmileHubError as e:
            print_error(str(e))
            sys.exit(1)

    if not report.discovered:
        print_warning(f"No hubs found ({report.scanned_count} probes)")
        return

    table = Table(title=f"Discovered Hubs ({len(report.discovered)})")
    table.add_column("Name", style="cyan")
    table.add_column("Address", style="green", no_wrap=True)
    table.add_column("Model", style="yellow")
    table.add_column("Firmware", style="magenta")

    for hub in report.discovered:
        table.add_row(hub.name, hub.address, hub.model or "-", hub.firmware or "-")

    console.print(table)
    console.print(f"[dim]{report.scanned_count} probe(s)[/dim]")


@main.command()
@click.pass_context
def hubs(ctx: click.Context) -> None:
    """List hubs stored in the registry."""
    try:
        known = _registry(ctx).all()
    except SmileHubError as e:
        print_error(str(e))
        sys.exit(1)

    if not known:
        console.print("[yellow]No hubs stored. Run 'smilehub locate' first.[/yellow]")
        return

    table = Table(title=f"Known Hubs ({len(known)})")
    table.add_column("Name", style="cyan")
    table.add_column("Address", style="green", no_wrap=True)
    table.add_column("Credential", style="dim")
    table.add_column("Model", style="yellow")
    table.add_column("Firmware", style="magenta")
    table.add_column("Discovered", style="dim")

    for hub in known:
        table.add_row(
            hub.name,
            hub.address,
            mask_credential(hub.credential),
            hub.model or "-",
            hub.firmware or "-",
            hub.discovered_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


async def _read_devices(hub, config):
    session = GatewaySession.from_config(hub.address, hub.credential, config.session)
    await session.connect()
    return await session.get_devices()


@main.command()
@click.argument("credential")
@click.option("--output", "-o", type=click.Path(), help="Output file (JSON)")
@click.pass_context
def devices(ctx: click.Context, credential: str, output: str | None) -> None:
    """Show devices and zones of the hub stored for CREDENTIAL."""
    config = ctx.obj["config"]
    try:
        hub = _registry(ctx).lookup(credential)
    except SmileHubError as e:
        print_error(str(e))
        sys.exit(1)

    if hub is None:
        print_error("Unknown hub. Run 'smilehub locate' first.")
        sys.exit(1)

    try:
        data = asyncio.run(_read_devices(hub, config))
    except SmileHubError as e:
        print_error(str(e))
        sys.exit(1)

    info = data.gateway_info
    console.print(
        Panel(
            f"[cyan]Model:[/cyan] {info.model}\n"
            f"[cyan]Firmware:[/cyan] {info.version}\n"
            f"[cyan]Type:[/cyan] {info.type.value}",
            title=info.name,
            border_style="blue",
        )
    )

    table = Table(title=f"Entities ({len(data.entities)})")
    table.add_column("ID", style="dim", max_width=12)
    table.add_column("Name", style="cyan")
    table.add_column("Class", style="yellow")
    table.add_column("Sensors", style="green")
    table.add_column("Setpoint", style="magenta")

    for entity in data.entities:
        sensors = ", ".join(f"{k}={v:g}" for k, v in entity.sensors.items())
        setpoint = "-"
        if entity.thermostat and entity.thermostat.setpoint is not None:
            setpoint = f"{entity.thermostat.setpoint:g}"
        table.add_row(entity.id, entity.name, entity.dev_class, sensors or "-", setpoint)

    console.print(table)

    if output:
        export_json(data, output)
        print_success(f"Results saved to {output}")


if __name__ == "__main__":
    main()
