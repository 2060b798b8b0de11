"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from ..config import ScanConfig, load_config
from ..formatters import ReportView
from ..query import filter_kind, heaviest, search
from ..scanning.models import DeclarationKind, ScanResult

console = Console()

KIND_CHOICES = [kind.value for kind in DeclarationKind]


def resolve_config(
    config: Optional[Path] = None,
    workers: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> ScanConfig:
    """Build scan configuration from CLI options."""
    overrides = {}
    if workers is not None:
        overrides["workers"] = workers
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)


def build_view(
    result: ScanResult,
    root: Path,
    top: Optional[int] = None,
    search_term: Optional[str] = None,
    kinds: Optional[Sequence[str]] = None,
    show_groups: bool = False,
    rss_kb: Optional[int] = None,
) -> ReportView:
    """Select, filter and rank the declarations a formatter should show."""
    selected = filter_kind(result.declarations, [DeclarationKind(k) for k in kinds or ()])
    if search_term:
        selected = search(selected, search_term)
    return ReportView(
        root=str(root),
        declarations=tuple(heaviest(selected)),
        top_n=top,
        show_groups=show_groups,
        search=search_term,
        kinds=tuple(kinds or ()),
        rss_kb=rss_kb,
    )
