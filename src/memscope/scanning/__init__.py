"""Static declaration scanning and heuristic size estimation for Rust sources."""

from .aggregates import AggregateSizer, parse_body
from .aggregator import aggregate, group_declarations
from .declarations import DeclarationScanner
from .discovery import discover
from .estimator import SizeEstimator, estimate
from .lines import LineLocator
from .models import (
    Declaration,
    DeclarationKind,
    GroupKey,
    GroupSummary,
    RawMatch,
    ScanResult,
    TypeEstimate,
)
from .scanner import Scanner, scan
from .session import ScanSession

__all__ = [
    # Entry points
    "Scanner",
    "scan",
    "ScanSession",
    # Components
    "discover",
    "DeclarationScanner",
    "LineLocator",
    "AggregateSizer",
    "parse_body",
    "SizeEstimator",
    "estimate",
    "aggregate",
    "group_declarations",
    # Models
    "Declaration",
    "DeclarationKind",
    "GroupKey",
    "GroupSummary",
    "RawMatch",
    "ScanResult",
    "TypeEstimate",
]
