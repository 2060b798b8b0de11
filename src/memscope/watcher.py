"""Debounced file watcher that re-scans a source tree on change or timer."""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from watchfiles import watch

from .config import DEFAULT_CONFIG, ScanConfig
from .logging_config import get_logger
from .scanning.models import ScanResult
from .scanning.session import ScanSession

logger = get_logger(__name__)

# Debounce: wait this long after last change before re-scanning
DEBOUNCE_MS = 500

# How long watchfiles blocks waiting for changes when no timer is set
RUST_TIMEOUT_MS = 5000

ResultCallback = Callable[[ScanResult], None]


class RustSourceFilter:
    """watchfiles filter: only source files outside excluded directories.

    With a ``root``, only directories below it are checked against
    ``exclude_dirs``, matching what discovery prunes; a root that itself
    lives under e.g. ``target/`` is still watched.
    """

    def __init__(self, config: ScanConfig = DEFAULT_CONFIG, root: Optional[Path] = None) -> None:
        self.extension = config.extension
        self.exclude_dirs = frozenset(config.exclude_dirs)
        self.root = Path(root).resolve() if root is not None else None

    def __call__(self, change: object, path: str) -> bool:
        p = Path(path)
        if p.suffix != self.extension:
            return False
        return not any(part in self.exclude_dirs for part in self._dir_parts(p))

    def _dir_parts(self, path: Path) -> tuple[str, ...]:
        if self.root is not None:
            try:
                return path.resolve().relative_to(self.root).parts[:-1]
            except ValueError:
                pass
        return path.parts[:-1]


class ScanWatcher:
    """Re-runs scans whenever watched files change.

    Each trigger starts a scan on a worker thread. A scan overtaken by a
    newer trigger finishes but its result is discarded by the session, so
    ``on_result`` only ever sees the newest data.
    """

    def __init__(
        self,
        session: ScanSession,
        on_result: ResultCallback,
        interval: Optional[float] = None,
        config: ScanConfig = DEFAULT_CONFIG,
    ) -> None:
        self.session = session
        self.on_result = on_result
        self.interval = interval
        self.filter = RustSourceFilter(config, root=session.root)
        self._stop_event = threading.Event()
        self._emit_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="memscope-scan")

    def trigger(self, reason: str = "manual") -> Future:
        """Start a scan now; returns the future of the scan."""
        token = self.session.begin()
        logger.debug(f"Scan {token} triggered ({reason})")
        return self._executor.submit(self._scan, token)

    def run(self) -> None:
        """Block, re-scanning on change (and timer) until :meth:`stop`."""
        timeout_ms = int(self.interval * 1000) if self.interval else RUST_TIMEOUT_MS
        logger.info(f"Watching {self.session.root} for changes")
        self.trigger("initial")

        try:
            for changes in watch(
                self.session.root,
                watch_filter=self.filter,
                debounce=DEBOUNCE_MS,
                rust_timeout=timeout_ms,
                yield_on_timeout=self.interval is not None,
                stop_event=self._stop_event,
            ):
                if self._stop_event.is_set():
                    break
                if changes:
                    logger.info(f"Detected {len(changes)} changed file(s), re-scanning...")
                    self.trigger("change")
                else:
                    self.trigger("timer")
        finally:
            self._executor.shutdown(wait=True)

    def stop(self) -> None:
        self._stop_event.set()

    def _scan(self, token: int) -> Optional[ScanResult]:
        try:
            result = self.session.scanner.scan(self.session.root)
        except Exception:
            logger.exception(f"Scan {token} failed")
            return None
        # Publish and emit as one step so a result overtaken after publishing
        # can never reach the callback after the newer one
        with self._emit_lock:
            if not self.session.publish(token, result):
                return None
            self.on_result(result)
        return result
