"""Data models for the scanning layer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, NamedTuple, Optional


class DeclarationKind(Enum):
    """The thirteen declaration kinds the scanner recognises."""

    BINDING = "binding"
    FUNCTION = "function"
    STRUCT = "struct"
    ENUM = "enum"
    TRAIT = "trait"
    IMPL = "impl"
    TYPE_ALIAS = "type_alias"
    MODULE = "module"
    UNION = "union"
    MACRO = "macro"
    USE = "use"
    EXTERN_CRATE = "extern_crate"
    EXTERN_BLOCK = "extern_block"

    @property
    def is_aggregate(self) -> bool:
        return self in (DeclarationKind.STRUCT, DeclarationKind.ENUM, DeclarationKind.UNION)


class TypeEstimate(NamedTuple):
    """Stack/heap byte estimate for a type."""

    stack: int
    heap: int

    @property
    def total(self) -> int:
        return self.stack + self.heap


ZERO = TypeEstimate(0, 0)


@dataclass(frozen=True)
class RawMatch:
    """One declaration match before sizing.

    Attributes:
        kind: Declaration kind
        name: Identifier text
        type_text: Type signature text the size is derived from (may be empty)
        type_label: Human-readable label used for display and grouping
        offset: Character offset where the match starts
        end: Character offset where the match ends
        line: 1-based line number
        initializer: Initializer expression (bindings only)
        qualifier: Declaration keyword(s), e.g. "let mut" or "pub fn"
    """

    kind: DeclarationKind
    name: str
    type_text: str
    type_label: str
    offset: int
    end: int
    line: int
    initializer: Optional[str] = None
    qualifier: str = ""


@dataclass(frozen=True)
class Declaration:
    """One discovered declaration with its estimated footprint."""

    name: str
    kind: DeclarationKind
    type_label: str
    stack_size: int
    heap_size: int
    file: str
    line: int
    qualifier: str = ""

    @property
    def total(self) -> int:
        return self.stack_size + self.heap_size

    @property
    def location(self) -> str:
        """``file:line`` navigation target."""
        return f"{self.file}:{self.line}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "type": self.type_label,
            "qualifier": self.qualifier,
            "stack_size": self.stack_size,
            "heap_size": self.heap_size,
            "total": self.total,
            "file": self.file,
            "line": self.line,
        }


class GroupKey(NamedTuple):
    kind: DeclarationKind
    type_label: str


@dataclass(frozen=True)
class GroupSummary:
    count: int
    total_size: int

    def add(self, size: int) -> GroupSummary:
        return GroupSummary(self.count + 1, self.total_size + size)


@dataclass(frozen=True)
class ScanResult:
    """Everything one scan pass produced.

    ``available`` is False only when the scan root could not be read at all;
    ``error`` then carries the reason for the presentation layer. Immutable
    once built: ``groups`` is exposed as a read-only mapping.
    """

    declarations: tuple[Declaration, ...] = ()
    groups: Mapping[GroupKey, GroupSummary] = field(default_factory=dict)
    total_size: int = 0
    files_scanned: int = 0
    files_skipped: int = 0
    available: bool = True
    error: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "declarations", tuple(self.declarations))
        if not isinstance(self.groups, MappingProxyType):
            object.__setattr__(self, "groups", MappingProxyType(dict(self.groups)))

    @classmethod
    def unavailable(cls, reason: str) -> ScanResult:
        return cls(available=False, error=reason)

    @property
    def stack_total(self) -> int:
        return sum(d.stack_size for d in self.declarations)

    @property
    def heap_total(self) -> int:
        return sum(d.heap_size for d in self.declarations)

    def to_dict(self) -> dict[str, Any]:
        return {
            "available": self.available,
            "error": self.error,
            "total_size": self.total_size,
            "stack_total": self.stack_total,
            "heap_total": self.heap_total,
            "files_scanned": self.files_scanned,
            "files_skipped": self.files_skipped,
            "declaration_count": len(self.declarations),
            "groups": [
                {
                    "kind": key.kind.value,
                    "type": key.type_label,
                    "count": summary.count,
                    "total_size": summary.total_size,
                }
                for key, summary in self.groups.items()
            ],
            "declarations": [d.to_dict() for d in self.declarations],
        }
