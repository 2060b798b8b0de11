"""
memscope - Static memory footprint estimation for Rust source trees

Walks a crate, finds every top-level declaration (bindings, functions,
structs, enums, unions, traits, impls, aliases, modules, macros, imports,
extern items) and estimates its stack and heap footprint from the source
text alone. Nothing is compiled; every number is a heuristic.
"""

__version__ = "0.1.0"

from .config import ScanConfig, load_config
from .scanning import (
    Declaration,
    DeclarationKind,
    GroupKey,
    GroupSummary,
    Scanner,
    ScanResult,
    ScanSession,
    TypeEstimate,
    scan,
)

__all__ = [
    "scan",  # Main entry point
    "Scanner",
    "ScanSession",
    "ScanResult",
    "Declaration",
    "DeclarationKind",
    "GroupKey",
    "GroupSummary",
    "TypeEstimate",
    "ScanConfig",
    "load_config",
]
