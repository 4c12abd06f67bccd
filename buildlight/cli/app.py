"""Main Typer application — the ``buildlight [INTERVAL]`` entry point.

Entry point: ``buildlight`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from buildlight.bridge.fetcher import PipelineFetcher
from buildlight.bridge.indicators import FirmataIndicators, HardwareUnavailableError
from buildlight.config import DEFAULT_INTERVAL_SECONDS, MonitorSettings
from buildlight.core.orchestrator import Orchestrator
from buildlight.monitor.renderer import StatusRenderer

console = Console()

app = typer.Typer(
    name="buildlight",
    help="Mirror the latest CI pipeline status of a branch on LEDs and a buzzer.",
    rich_markup_mode="rich",
    add_completion=False,
)


def configure_logging(debug: bool) -> None:
    """Route all log records through a markup-aware Rich handler."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, markup=True, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO; keep it for verbose mode only.
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


@app.command()
def watch(
    interval: int = typer.Argument(
        DEFAULT_INTERVAL_SECONDS,
        min=1,
        help="Seconds between two checks.",
    ),
) -> None:
    """Poll the tracked branch until interrupted with Ctrl+C."""
    try:
        settings = MonitorSettings()
    except ValidationError as exc:
        names = sorted({str(err["loc"][0]).upper() for err in exc.errors() if err["loc"]})
        console.print(
            f"[bold red]Missing or invalid settings:[/bold red] {', '.join(names)}"
        )
        console.print("[dim]Set them in the environment or in a .env file.[/dim]")
        raise typer.Exit(code=1)

    configure_logging(settings.debug)

    with PipelineFetcher.from_settings(settings) as fetcher:
        orchestrator = Orchestrator(
            fetcher,
            lambda: FirmataIndicators.connect(settings.board_port),
            branch=settings.branch,
            interval=interval,
            renderer=StatusRenderer(console=console),
        )
        try:
            orchestrator.run()
        except HardwareUnavailableError as exc:
            console.print(f"[bold red]Hardware unavailable:[/bold red] {exc}")
            raise typer.Exit(code=1)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
