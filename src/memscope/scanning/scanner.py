"""Scanner: the single entry point from a directory to a ScanResult.

Discover files, read each one, extract declarations of every kind, size
them, and aggregate. Unreadable files are skipped; an unreadable root
produces an unavailable ScanResult instead of an exception.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from ..config import DEFAULT_CONFIG, ScanConfig
from ..exceptions import FileAccessError, ScanUnavailableError
from ..file_ops import safe_read_file
from ..logging_config import get_logger
from .aggregates import AggregateSizer
from .aggregator import aggregate
from .declarations import DeclarationScanner
from .discovery import discover
from .estimator import SizeEstimator
from .models import ZERO, Declaration, DeclarationKind, RawMatch, ScanResult, TypeEstimate

logger = get_logger(__name__)

# Kinds whose size comes from their own type text
_TYPED_KINDS = frozenset(
    {DeclarationKind.BINDING, DeclarationKind.FUNCTION, DeclarationKind.TYPE_ALIAS}
)


class Scanner:
    """Estimates per-declaration memory footprints for a source tree.

    A Scanner holds configuration and stateless helpers only; every call to
    :meth:`scan` builds a new ScanResult.
    """

    def __init__(self, config: Optional[ScanConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.estimator = SizeEstimator()
        self.sizer = AggregateSizer(self.estimator)
        self.declarations = DeclarationScanner()
        logger.debug(f"Initialized {self.__class__.__name__}")

    def scan(self, root: Path) -> ScanResult:
        """Scan every source file under ``root``."""
        root = Path(root)
        try:
            self._check_root(root)
        except ScanUnavailableError as e:
            logger.error(str(e))
            return ScanResult.unavailable(e.reason)

        files = discover(root, self.config)
        workers = self.config.workers or 1

        if workers > 1 and len(files) > 1:
            # map() yields in submission order, so the merge stays deterministic
            with ThreadPoolExecutor(max_workers=workers) as executor:
                batches = list(executor.map(lambda fp: self._scan_file(fp, root), files))
        else:
            batches = [self._scan_file(fp, root) for fp in files]

        readable = [batch for batch in batches if batch is not None]
        result = aggregate(
            readable,
            files_scanned=len(readable),
            files_skipped=len(batches) - len(readable),
        )
        logger.info(
            f"Scan complete: {result.files_scanned} files, "
            f"{len(result.declarations)} declarations, {result.total_size} bytes"
        )
        return result

    def scan_text(self, text: str, file: str = "<text>") -> list[Declaration]:
        """Extract and size every declaration in ``text``."""
        return [self._declaration(text, raw, file) for raw in self.declarations.scan(text)]

    def size_of(self, text: str, raw: RawMatch) -> TypeEstimate:
        if raw.kind.is_aggregate:
            return self.sizer.size_of(raw.kind, text, raw.end)
        if raw.kind in _TYPED_KINDS:
            if raw.kind is DeclarationKind.FUNCTION and not raw.type_text:
                return ZERO
            return self.estimator.estimate(raw.type_text, raw.initializer)
        return ZERO

    # ── Internals ──────────────────────────────────────────────

    @staticmethod
    def _check_root(root: Path) -> None:
        if not root.is_dir():
            raise ScanUnavailableError(root, "not a directory")
        try:
            with os.scandir(root):
                pass
        except OSError as e:
            raise ScanUnavailableError(root, e.strerror or str(e))

    def _scan_file(self, filepath: Path, root: Path) -> Optional[list[Declaration]]:
        try:
            text = safe_read_file(filepath, max_bytes=self.config.max_file_size_bytes)
        except FileAccessError as e:
            logger.warning(f"Access error for {filepath}: {e.reason}")
            return None
        rel_path = filepath.relative_to(root).as_posix()
        return self.scan_text(text, rel_path)

    def _declaration(self, text: str, raw: RawMatch, file: str) -> Declaration:
        size = self.size_of(text, raw)
        return Declaration(
            name=raw.name,
            kind=raw.kind,
            type_label=raw.type_label,
            stack_size=size.stack,
            heap_size=size.heap,
            file=file,
            line=raw.line,
            qualifier=raw.qualifier,
        )


def scan(root: Path, config: Optional[ScanConfig] = None) -> ScanResult:
    """Scan ``root`` with a fresh Scanner."""
    return Scanner(config).scan(root)
