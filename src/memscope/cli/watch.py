"""``memscope watch``: re-scan on file changes."""

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import MemscopeError
from ..formatters import RichFormatter
from ..logging_config import setup_logging
from ..scanning import Scanner, ScanSession
from ..scanning.models import ScanResult
from ..watcher import ScanWatcher
from . import app
from ._common import build_view, console, resolve_config


@app.command()
def watch(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        "-i",
        help="Also re-scan every N seconds",
        min=0.5,
    ),
    top: int = typer.Option(20, "--top", "-n", help="Largest declarations to show", min=1),
    groups: bool = typer.Option(False, "--groups", "-g", help="Show group totals"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    workers: Optional[int] = typer.Option(None, "-w", "--workers", help="Parallel workers"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """Watch a source tree and print a fresh estimate after every change."""
    root = ctx.obj.get("path", Path.cwd()).resolve()
    setup_logging(verbose=verbose)

    try:
        settings = resolve_config(config=config, workers=workers, verbose=verbose)
    except MemscopeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    setup_logging(verbosity=settings.verbosity)

    formatter = RichFormatter()

    def show(result: ScanResult) -> None:
        formatter.render(result, build_view(result, root, top=top, show_groups=groups))

    session = ScanSession(root, Scanner(settings))
    watcher = ScanWatcher(session, on_result=show, interval=interval, config=settings)

    console.print(f"[bold]Watching[/bold] {root}")
    console.print("[dim]Press Ctrl+C to stop[/dim]")
    try:
        watcher.run()
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
        if session.discarded:
            console.print(f"[dim]{session.discarded} stale scan(s) discarded[/dim]")
        console.print("\n[dim]Stopped.[/dim]")
