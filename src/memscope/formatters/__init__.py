"""Output formatters for memscope."""

from .base import BaseFormatter, ReportView
from .rich_formatter import RichFormatter
from .json_formatter import JsonFormatter
from .csv_formatter import CsvFormatter

FORMATS = ("rich", "json", "csv")


def get_formatter(name: str) -> BaseFormatter:
    """Get a formatter instance by name.

    Args:
        name: One of "rich", "json", "csv"

    Returns:
        Formatter instance

    Raises:
        ValueError: If name is not recognized
    """
    formatters = {
        "rich": RichFormatter,
        "json": JsonFormatter,
        "csv": CsvFormatter,
    }
    cls = formatters.get(name)
    if cls is None:
        raise ValueError(f"Unknown formatter: {name!r}. Choose from: {', '.join(sorted(formatters))}")
    return cls()


__all__ = [
    "BaseFormatter",
    "ReportView",
    "RichFormatter",
    "JsonFormatter",
    "CsvFormatter",
    "FORMATS",
    "get_formatter",
]
