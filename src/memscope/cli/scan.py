"""Main scan command."""

from pathlib import Path
from typing import List, Optional

import click
import typer

from ..exceptions import MemscopeError
from ..formatters import FORMATS, get_formatter
from ..logging_config import setup_logging
from ..scanning import Scanner
from . import app
from ._common import KIND_CHOICES, build_view, console, resolve_config

# Exit code for a root that could not be read at all
EXIT_UNAVAILABLE = 2


@app.callback(invoke_without_command=True, no_args_is_help=False)
def main(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None,
        "-C",
        "--path",
        help="Project root to scan (default: current directory)",
        file_okay=False,
        dir_okay=True,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format (same as --format json)",
    ),
    output_format: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format",
        click_type=click.Choice(list(FORMATS), case_sensitive=False),
    ),
    top: Optional[int] = typer.Option(
        None,
        "--top",
        "-n",
        help="Show only the N largest declarations",
        min=1,
    ),
    search_term: Optional[str] = typer.Option(
        None,
        "--search",
        "-s",
        help="Case-insensitive match on name, type, file or qualifier",
    ),
    kinds: Optional[List[str]] = typer.Option(
        None,
        "--kind",
        "-k",
        help="Only show declarations of this kind (repeatable)",
        click_type=click.Choice(KIND_CHOICES, case_sensitive=False),
    ),
    groups: bool = typer.Option(
        False,
        "--groups",
        "-g",
        help="Show totals per (kind, type) group instead of declarations",
    ),
    rss_kb: Optional[int] = typer.Option(
        None,
        "--rss-kb",
        help="Resident set size in KB measured elsewhere; adds an estimated total",
        min=0,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel file workers (default: sequential)",
        min=1,
        max=32,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Estimate the stack and heap footprint of every top-level Rust declaration.

    Sizes are lexical heuristics over the source text; nothing is compiled.

    [bold cyan]Examples:[/bold cyan]

      memscope

      memscope -C /path/to/crate --top 20

      memscope --kind struct --kind enum --groups

      memscope --search vec --json

      memscope --rss-kb 20480
    """
    # Store resolved path in context for subcommands
    target = Path(path) if path else Path.cwd()
    ctx.ensure_object(dict)
    ctx.obj["path"] = target

    if ctx.invoked_subcommand is not None:
        return

    if version:
        from .. import __version__

        console.print(f"[bold cyan]memscope[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    logger = setup_logging(verbose=verbose, quiet=quiet)

    try:
        settings = resolve_config(config=config, workers=workers, verbose=verbose, quiet=quiet)
        logger = setup_logging(verbosity=settings.verbosity)
        result = Scanner(settings).scan(target)

        view = build_view(
            result,
            target,
            top=top,
            search_term=search_term,
            kinds=[k.lower() for k in kinds] if kinds else None,
            show_groups=groups,
            rss_kb=rss_kb,
        )
        formatter = get_formatter("json" if json_output else output_format.lower())
        formatter.render(result, view)

        if not result.available:
            raise typer.Exit(EXIT_UNAVAILABLE)

    except typer.Exit:
        raise

    except MemscopeError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Scan interrupted by user")
        console.print("\n[yellow]Scan interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception("Unexpected error during scan")
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)
