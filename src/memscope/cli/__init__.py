"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="memscope",
    help="memscope - Static memory footprint estimator for Rust sources",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .scan import main as _main_callback  # noqa: F401, E402
from .watch import watch as _watch  # noqa: F401, E402
