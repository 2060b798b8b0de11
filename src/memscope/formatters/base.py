"""Base formatter interface for memscope output rendering."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..scanning.models import Declaration, ScanResult


@dataclass(frozen=True)
class ReportView:
    """What part of a ScanResult to show.

    ``declarations`` is the already filtered/ranked selection; the totals in
    the summary always describe the whole result. ``rss_kb`` is a resident
    set size measured outside memscope; when given, an estimated total
    (RSS plus declarations) is reported alongside.
    """

    root: str = "."
    declarations: tuple[Declaration, ...] = ()
    top_n: Optional[int] = None
    show_groups: bool = False
    search: Optional[str] = None
    kinds: tuple[str, ...] = field(default_factory=tuple)
    rss_kb: Optional[int] = None

    @property
    def shown(self) -> tuple[Declaration, ...]:
        if self.top_n is None:
            return self.declarations
        return self.declarations[: self.top_n]


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, result: ScanResult, view: ReportView) -> None:
        """Render a scan result to stderr/stdout as appropriate."""

    @abstractmethod
    def format(self, result: ScanResult, view: ReportView) -> str:
        """Return formatted string representation of a scan result."""
