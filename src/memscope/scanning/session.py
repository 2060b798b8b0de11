"""Last-writer-wins coordination for repeated scans.

A change trigger (file watcher, timer, user action) may start a new scan
before the previous one finishes. Each scan receives a token; a result is
only accepted if no newer scan has started since, so an older, slower scan
can never overwrite or mix with newer data.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

from ..logging_config import get_logger
from .models import ScanResult
from .scanner import Scanner

logger = get_logger(__name__)


class ScanSession:
    """Holds the latest accepted ScanResult for one root directory.

    Thread-safe: scans may run on worker threads while readers call
    :attr:`latest`.
    """

    def __init__(self, root: Path, scanner: Optional[Scanner] = None) -> None:
        self.root = Path(root)
        self.scanner = scanner or Scanner()
        self._lock = threading.Lock()
        self._generation = 0
        self._latest: Optional[ScanResult] = None
        self._discarded = 0

    def begin(self) -> int:
        """Start a new scan and return its token; older tokens become stale."""
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._generation

    def publish(self, token: int, result: ScanResult) -> bool:
        """Store ``result`` if ``token`` is still the newest scan.

        Returns False (and drops the result) when a newer scan has begun.
        """
        with self._lock:
            if token != self._generation:
                self._discarded += 1
                logger.debug(f"Discarding stale scan {token} (current {self._generation})")
                return False
            self._latest = result
            return True

    def run(self) -> Optional[ScanResult]:
        """Scan the root and publish; returns the result only if accepted."""
        token = self.begin()
        result = self.scanner.scan(self.root)
        return result if self.publish(token, result) else None

    @property
    def latest(self) -> Optional[ScanResult]:
        with self._lock:
            return self._latest

    @property
    def discarded(self) -> int:
        """Number of stale results dropped so far."""
        with self._lock:
            return self._discarded
