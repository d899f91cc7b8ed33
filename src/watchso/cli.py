"""watchso CLI entry point."""

import asyncio
import logging
from pathlib import Path

import click
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from watchso import __version__
from watchso.config import WatchConfig
from watchso.errors import WatchError
from watchso.framework import FRAMEWORKS, Framework, get_framework, get_framework_from_path
from watchso.progress import console
from watchso.watch import watch

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console, show_path=verbose)],
    )


async def print_programs(framework: Framework) -> None:
    """Show the programs that will be hot reloaded."""
    programs = await framework.project_map.programs()
    if not programs:
        console.print("[yellow]No programs found[/yellow]")
        return

    table = Table(title=f"Programs ({framework.name})")
    table.add_column("Program", style="cyan")
    table.add_column("Path", style="dim")

    for name, path in sorted(programs.items()):
        try:
            shown = path.relative_to(framework.origin)
        except ValueError:
            shown = path
        table.add_row(name, str(shown))

    console.print(table)


async def run(origin: Path, config: WatchConfig, framework_name: str | None = None) -> None:
    """Detect the framework at `origin` and watch it."""
    if framework_name:
        framework = get_framework(framework_name, origin)
    else:
        framework = await get_framework_from_path(origin)

    console.print(f"[bold green]Watching {framework.name} project at {origin}[/bold green]")

    async def on_ready() -> None:
        await print_programs(framework)
        console.print("[dim]Press Ctrl+C to stop[/dim]")

    report = await watch(framework, config, on_ready=on_ready)
    for stage in report.failed_stages:
        logger.debug(f"{stage.name} had {len(stage.failures)} failure(s)")


@click.command()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.option(
    "--debounce",
    default=200,
    show_default=True,
    envvar="WATCHSO_DEBOUNCE_MS",
    help="Milliseconds to wait for changes to settle before handling them",
)
@click.option(
    "--validator-wait",
    default=2.0,
    show_default=True,
    envvar="WATCHSO_VALIDATOR_WAIT",
    help="Seconds to give the test validator to start",
)
@click.option("--no-validator", is_flag=True, help="Don't start solana-test-validator")
@click.option(
    "--framework",
    "framework_name",
    type=click.Choice(sorted(FRAMEWORKS)),
    help="Skip detection and use this framework",
)
@click.version_option(__version__, prog_name="watchso")
def cli(
    verbose: bool,
    debounce: int,
    validator_wait: float,
    no_validator: bool,
    framework_name: str | None,
) -> None:
    """Hot reload the Solana programs in the current directory."""
    setup_logging(verbose)

    config = WatchConfig(
        debounce_ms=debounce,
        validator_wait=validator_wait,
        start_validator=not no_validator,
    )

    try:
        asyncio.run(run(Path.cwd(), config, framework_name))
    except WatchError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")
        raise SystemExit(130) from None


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
