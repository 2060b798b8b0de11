"""Tests for the change-triggered re-scan loop."""

import itertools
import threading
from concurrent.futures import wait
from pathlib import Path

import pytest
from watchfiles import Change

from memscope import watcher as watcher_module
from memscope.config import ScanConfig
from memscope.scanning import Scanner, ScanResult, ScanSession
from memscope.watcher import RustSourceFilter, ScanWatcher


class _FailingScanner(Scanner):
    def scan(self, root):
        raise RuntimeError("disk on fire")


class _CountingScanner(Scanner):
    """Returns a distinct result per call, numbered in call order."""

    def __init__(self, gate=None):
        super().__init__()
        self._counter = itertools.count(1)
        self.gate = gate
        self.first_started = threading.Event()

    def scan(self, root):
        number = next(self._counter)
        if number == 1 and self.gate is not None:
            self.first_started.set()
            self.gate.wait(timeout=5)
        return ScanResult(files_scanned=number)


class _SlowFirstPublishSession(ScanSession):
    """Pauses right after the first scan is published, before it is reported."""

    def __init__(self, root):
        super().__init__(root, scanner=_CountingScanner())
        self.first_published = threading.Event()
        self.release_first = threading.Event()

    def publish(self, token, result):
        accepted = super().publish(token, result)
        if token == 1:
            self.first_published.set()
            self.release_first.wait(timeout=5)
        return accepted


class TestRustSourceFilter:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/repo/src/main.rs", True),
            ("/repo/crates/core/lib.rs", True),
            ("/repo/target/debug/build/out.rs", False),
            ("/repo/.git/hooks/x.rs", False),
            ("/repo/README.md", False),
            ("/repo/src/main.rs.bak", False),
        ],
    )
    def test_filter(self, path, expected):
        assert RustSourceFilter()(Change.modified, path) is expected

    def test_uses_config(self):
        source_filter = RustSourceFilter(ScanConfig(exclude_dirs=("gen",)))
        assert not source_filter(Change.added, "/repo/gen/a.rs")
        assert source_filter(Change.added, "/repo/target/a.rs")

    def test_root_inside_excluded_directory_is_watched(self, tmp_path):
        root = tmp_path / "target" / "crate"
        source_filter = RustSourceFilter(root=root)
        assert source_filter(Change.modified, str(root / "src" / "main.rs"))
        assert not source_filter(Change.modified, str(root / "target" / "out.rs"))

    def test_path_outside_root_checks_every_part(self, tmp_path):
        source_filter = RustSourceFilter(root=tmp_path / "crate")
        assert not source_filter(Change.modified, "/elsewhere/target/a.rs")


class TestScanWatcher:
    def test_trigger_publishes_and_reports(self, rust_project):
        seen = []
        session = ScanSession(rust_project)
        scan_watcher = ScanWatcher(session, on_result=seen.append)
        result = scan_watcher.trigger().result(timeout=10)
        assert result is not None
        assert seen == [result]
        assert session.latest is result

    def test_failed_scan_is_logged_not_raised(self, rust_project):
        seen = []
        session = ScanSession(rust_project, scanner=_FailingScanner())
        scan_watcher = ScanWatcher(session, on_result=seen.append)
        assert scan_watcher.trigger().result(timeout=10) is None
        assert seen == []
        assert session.latest is None

    def test_run_rescans_on_change_and_timer(self, rust_project, monkeypatch):
        calls = {}

        def fake_watch(*paths, **kwargs):
            calls["paths"] = paths
            calls["kwargs"] = kwargs
            yield {(Change.modified, str(rust_project / "src" / "main.rs"))}
            yield set()

        monkeypatch.setattr(watcher_module, "watch", fake_watch)
        seen = []
        session = ScanSession(rust_project)
        scan_watcher = ScanWatcher(session, on_result=seen.append, interval=2.0)
        scan_watcher.run()

        assert calls["paths"] == (Path(rust_project),)
        assert calls["kwargs"]["yield_on_timeout"] is True
        assert calls["kwargs"]["rust_timeout"] == 2000
        assert isinstance(calls["kwargs"]["watch_filter"], RustSourceFilter)
        # initial + change + timer; only non-stale scans reach the callback
        assert len(seen) >= 1
        assert len(seen) + session.discarded == 3
        assert session.latest is not None

    def test_run_without_interval_does_not_yield_on_timeout(self, tmp_path, monkeypatch):
        calls = {}

        def fake_watch(*paths, **kwargs):
            calls["kwargs"] = kwargs
            return iter(())

        monkeypatch.setattr(watcher_module, "watch", fake_watch)
        ScanWatcher(ScanSession(tmp_path), on_result=lambda r: None).run()
        assert calls["kwargs"]["yield_on_timeout"] is False
        assert calls["kwargs"]["rust_timeout"] == watcher_module.RUST_TIMEOUT_MS

    def test_stop_ends_loop(self, tmp_path, monkeypatch):
        seen = []

        def fake_watch(*paths, **kwargs):
            scan_watcher.stop()
            yield {(Change.added, str(tmp_path / "a.rs"))}

        monkeypatch.setattr(watcher_module, "watch", fake_watch)
        session = ScanSession(tmp_path)
        scan_watcher = ScanWatcher(session, on_result=seen.append)
        scan_watcher.run()
        # only the initial scan ran
        assert len(seen) + session.discarded == 1


class TestResultOrdering:
    """The callback's last result is always the session's latest."""

    def test_result_overtaken_after_publish_is_not_reported_last(self, tmp_path):
        session = _SlowFirstPublishSession(tmp_path)
        seen = []
        scan_watcher = ScanWatcher(session, on_result=seen.append)

        first = scan_watcher.trigger("first")
        assert session.first_published.wait(timeout=5)
        second = scan_watcher.trigger("second")
        wait([second], timeout=0.2)
        session.release_first.set()
        first.result(timeout=10)
        second.result(timeout=10)

        assert [r.files_scanned for r in seen] == [1, 2]
        assert seen[-1] is session.latest

    def test_result_overtaken_before_publish_is_never_reported(self, tmp_path):
        gate = threading.Event()
        scanner = _CountingScanner(gate=gate)
        session = ScanSession(tmp_path, scanner=scanner)
        seen = []
        scan_watcher = ScanWatcher(session, on_result=seen.append)

        first = scan_watcher.trigger("first")
        assert scanner.first_started.wait(timeout=5)
        second = scan_watcher.trigger("second")
        assert second.result(timeout=10) is not None
        gate.set()
        assert first.result(timeout=10) is None

        assert [r.files_scanned for r in seen] == [2]
        assert session.latest is seen[-1]
        assert session.discarded == 1
