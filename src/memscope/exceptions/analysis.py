"""Scan-related exceptions: file access and unavailable scan roots."""

from pathlib import Path

from .base import MemscopeError


class AnalysisError(MemscopeError):
    """Base class for scan-related errors."""
    pass


class FileAccessError(AnalysisError):
    """Raised when a source file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ScanUnavailableError(AnalysisError):
    """Raised when the scan root itself cannot be read.

    The scanner never lets this escape; it is turned into an unavailable
    ScanResult so callers can report "scan unavailable".
    """

    def __init__(self, root: Path, reason: str):
        super().__init__(
            f"Scan unavailable for {root}",
            details={"root": str(root), "reason": reason},
        )
        self.root = root
        self.reason = reason
