"""Source file discovery with directory exclusion."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from ..config import DEFAULT_CONFIG, ScanConfig
from ..file_ops import should_skip_file
from ..logging_config import get_logger

logger = get_logger(__name__)


def discover(root: Path, config: Optional[ScanConfig] = None) -> list[Path]:
    """List source files under ``root`` in sorted walk order.

    Directories whose *name* is in ``config.exclude_dirs`` are never entered.
    Unreadable directories are skipped without aborting the walk.

    Args:
        root: Directory to walk
        config: Scan configuration (extension, exclusions, limits)

    Returns:
        Paths of matching source files
    """
    config = config or DEFAULT_CONFIG
    root = Path(root)
    excluded = set(config.exclude_dirs)
    files: list[Path] = []

    def on_error(error: OSError) -> None:
        logger.debug(f"Skipping unreadable directory {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(
        root, onerror=on_error, followlinks=config.follow_symlinks
    ):
        # Prune in place so os.walk never descends into excluded directories
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)

        for filename in sorted(filenames):
            if not filename.endswith(config.extension):
                continue
            filepath = Path(dirpath) / filename
            if config.exclude_patterns and should_skip_file(filepath, config.exclude_patterns):
                logger.debug(f"Skipped (pattern): {filepath}")
                continue
            if len(files) >= config.max_files:
                logger.warning(f"Reached max files limit ({config.max_files})")
                return files
            files.append(filepath)

    return files
