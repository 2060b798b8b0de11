"""Exception hierarchy for memscope."""

from .analysis import AnalysisError, FileAccessError, ScanUnavailableError
from .base import MemscopeError
from .config import ConfigurationError, InvalidConfigError, InvalidPathError

__all__ = [
    "MemscopeError",
    "AnalysisError",
    "FileAccessError",
    "ScanUnavailableError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
]
