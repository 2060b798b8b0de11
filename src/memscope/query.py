"""Query helpers over a ScanResult: search, filtering, ranking, units."""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Optional

from .scanning.models import Declaration, DeclarationKind, GroupKey, GroupSummary, ScanResult


def search(declarations: Iterable[Declaration], term: str) -> list[Declaration]:
    """Case-insensitive match on name, type, file or qualifier."""
    needle = term.lower()
    if not needle:
        return list(declarations)
    return [
        d
        for d in declarations
        if needle in d.name.lower()
        or needle in d.type_label.lower()
        or needle in d.file.lower()
        or needle in d.qualifier.lower()
    ]


def filter_kind(
    declarations: Iterable[Declaration], kinds: Optional[Iterable[DeclarationKind]]
) -> list[Declaration]:
    if not kinds:
        return list(declarations)
    wanted = set(kinds)
    return [d for d in declarations if d.kind in wanted]


def heaviest(declarations: Iterable[Declaration], limit: Optional[int] = None) -> list[Declaration]:
    """Declarations by descending total; ties keep file/line order."""
    ranked = sorted(declarations, key=lambda d: (-d.total, d.file, d.line))
    return ranked if limit is None else ranked[:limit]


def ranked_groups(result: ScanResult) -> list[tuple[GroupKey, GroupSummary]]:
    """Groups by descending total size, then kind and label."""
    return sorted(
        result.groups.items(),
        key=lambda item: (-item[1].total_size, item[0].kind.value, item[0].type_label),
    )


def format_size(num_bytes: float) -> str:
    """Human readable byte count: ``512 B``, ``1.50 KB``, ``2.00 MB``."""
    if num_bytes < 1024:
        return f"{int(num_bytes)} B"
    for unit in ("KB", "MB", "GB"):
        num_bytes /= 1024
        if num_bytes < 1024 or unit == "GB":
            return f"{num_bytes:.2f} {unit}"
    return f"{num_bytes:.2f} GB"


def usage_color(percentage: float) -> str:
    """Rich colour for a usage percentage."""
    if percentage < 50:
        return "green"
    elif percentage < 80:
        return "yellow"
    return "red"


def estimated_total_kb(rss_kb: int, total_size_bytes: int) -> int:
    """Process resident size plus the static estimate, in KB."""
    return rss_kb + math.ceil(total_size_bytes / 1024)
