"""Rich terminal formatter for memscope."""

import io
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..query import estimated_total_kb, format_size, ranked_groups, usage_color
from ..scanning.models import ScanResult
from .base import BaseFormatter, ReportView

console = Console(stderr=True)


def _share_label(size: int, total: int) -> str:
    pct = (size / total * 100) if total > 0 else 0.0
    color = usage_color(pct)
    return f"[{color}]{pct:5.1f}%[/{color}]"


class RichFormatter(BaseFormatter):
    """Rich terminal output with a summary panel and declaration/group tables."""

    def __init__(self, target: Optional[Console] = None) -> None:
        self.console = target or console

    def render(self, result: ScanResult, view: ReportView) -> None:
        if not result.available:
            self.console.print(
                Panel(
                    f"[red]Scan unavailable:[/red] {escape(result.error or 'unknown error')}",
                    title="[bold red]memscope[/bold red]",
                    expand=False,
                )
            )
            return

        self._print_summary(result, view)
        if view.show_groups:
            self._print_groups(result)
        else:
            self._print_declarations(result, view)

    def format(self, result: ScanResult, view: ReportView) -> str:
        buffer = Console(file=io.StringIO(), width=120, record=True)
        RichFormatter(buffer).render(result, view)
        return buffer.export_text()

    # -- private helpers --

    def _print_summary(self, result: ScanResult, view: ReportView) -> None:
        summary_text = (
            f"Scanned [bold]{result.files_scanned}[/bold] files "
            f"([cyan]{escape(view.root)}[/cyan])  |  "
            f"[yellow]{len(result.declarations)}[/yellow] declarations  |  "
            f"Total: [bold]{format_size(result.total_size)}[/bold] "
            f"(stack {format_size(result.stack_total)}, "
            f"heap {format_size(result.heap_total)})"
        )
        if result.files_skipped:
            summary_text += f"  |  [red]{result.files_skipped}[/red] skipped"
        if view.rss_kb is not None:
            total_kb = estimated_total_kb(view.rss_kb, result.total_size)
            summary_text += (
                f"\nEstimated total: [bold]{format_size(total_kb * 1024)}[/bold] "
                f"(RSS {format_size(view.rss_kb * 1024)} + declarations)"
            )
        self.console.print(Panel(summary_text, title="[bold cyan]Summary[/bold cyan]", expand=False))
        self.console.print()

    def _print_declarations(self, result: ScanResult, view: ReportView) -> None:
        shown = view.shown
        if not shown:
            self.console.print("[dim]No declarations matched.[/dim]")
            return

        if view.top_n is not None:
            title = f"Top {len(shown)} Declarations by Size"
        else:
            title = f"{len(shown)} Declarations"
        table = Table(title=title, expand=True)
        table.add_column("#", style="dim", width=4)
        table.add_column("Name", style="bold")
        table.add_column("Kind", style="cyan")
        table.add_column("Type", style="white", ratio=2)
        table.add_column("Stack", justify="right")
        table.add_column("Heap", justify="right")
        table.add_column("Total", justify="right")
        table.add_column("Share", justify="right", width=7)
        table.add_column("Location", style="yellow", ratio=2)

        for i, decl in enumerate(shown, 1):
            table.add_row(
                str(i),
                escape(decl.name),
                decl.kind.value,
                escape(decl.type_label),
                format_size(decl.stack_size),
                format_size(decl.heap_size),
                format_size(decl.total),
                _share_label(decl.total, result.total_size),
                escape(decl.location),
            )

        self.console.print(table)
        self.console.print()

    def _print_groups(self, result: ScanResult) -> None:
        groups = ranked_groups(result)
        if not groups:
            self.console.print("[dim]No declarations found.[/dim]")
            return

        table = Table(title="Declarations by Kind and Type", expand=True)
        table.add_column("Kind", style="cyan")
        table.add_column("Type", style="white", ratio=2)
        table.add_column("Count", justify="right")
        table.add_column("Total", justify="right")
        table.add_column("Share", justify="right", width=7)

        for key, summary in groups:
            table.add_row(
                key.kind.value,
                escape(key.type_label),
                str(summary.count),
                format_size(summary.total_size),
                _share_label(summary.total_size, result.total_size),
            )

        self.console.print(table)
        self.console.print()
