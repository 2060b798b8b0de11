"""Result aggregator: merges per-file declaration batches into a ScanResult."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import Declaration, GroupKey, GroupSummary, ScanResult


def group_declarations(declarations: Iterable[Declaration]) -> dict[GroupKey, GroupSummary]:
    """Count and total declarations per ``(kind, type_label)``."""
    groups: dict[GroupKey, GroupSummary] = {}
    for decl in declarations:
        key = GroupKey(decl.kind, decl.type_label)
        summary = groups.get(key)
        groups[key] = GroupSummary(1, decl.total) if summary is None else summary.add(decl.total)
    return groups


def aggregate(
    batches: Iterable[Sequence[Declaration]],
    files_scanned: int = 0,
    files_skipped: int = 0,
) -> ScanResult:
    """Concatenate batches in order and build the group index and total.

    Stateless: every call builds a fresh ScanResult.
    """
    declarations = tuple(decl for batch in batches for decl in batch)
    return ScanResult(
        declarations=declarations,
        groups=group_declarations(declarations),
        total_size=sum(decl.total for decl in declarations),
        files_scanned=files_scanned,
        files_skipped=files_skipped,
    )
