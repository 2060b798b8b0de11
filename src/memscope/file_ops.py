"""
Safe file operations for memscope.

Size-limited reads and glob-based exclusion shared by the discoverer
and the scanner.
"""

from pathlib import Path
from typing import Optional

from .exceptions import FileAccessError


def safe_read_file(
    filepath: Path,
    max_bytes: Optional[int] = None,
    encoding: str = "utf-8",
    errors: str = "replace",
) -> str:
    """
    Read a source file, converting every failure into FileAccessError.

    Args:
        filepath: File to read
        max_bytes: Refuse files larger than this (None = no limit)
        encoding: Text encoding
        errors: How to handle encoding errors

    Returns:
        File contents as string

    Raises:
        FileAccessError: If the file cannot be read or is too large
    """
    try:
        if max_bytes is not None:
            size = filepath.stat().st_size
            if size > max_bytes:
                raise FileAccessError(filepath, f"File too large ({size} > {max_bytes} bytes)")
        with open(filepath, encoding=encoding, errors=errors) as f:
            return f.read()
    except FileAccessError:
        raise
    except UnicodeDecodeError as e:
        raise FileAccessError(filepath, f"Encoding error: {e}")
    except OSError as e:
        raise FileAccessError(filepath, f"OS error: {e}")


def should_skip_file(filepath: Path, exclude_patterns: list[str]) -> bool:
    """
    Check if a file should be skipped based on exclusion patterns.

    Args:
        filepath: File to check
        exclude_patterns: List of glob patterns to exclude

    Returns:
        True if file should be skipped
    """
    for pattern in exclude_patterns:
        if filepath.match(pattern):
            return True
    return False
