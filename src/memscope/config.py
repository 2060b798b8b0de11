"""Configuration loading and management for memscope.

Configuration sources are merged in priority order:
    1. Defaults (defined in ScanConfig)
    2. Global config (~/.memscope.toml)
    3. Project config (./memscope.toml)
    4. Explicit config file
    5. Environment variables (MEMSCOPE_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(verbose=True, max_files=500)
    >>> config.verbosity
    'verbose'
    >>> config.max_files
    500
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError, InvalidPathError, MemscopeError

Verbosity = Literal["quiet", "normal", "verbose"]

# Build output, dependency caches and VCS metadata never hold project sources.
DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = ("target", ".cargo", "node_modules", ".git")


@dataclass(frozen=True)
class ScanConfig:
    """Configuration for a scan pass.

    Attributes:
        File discovery:
            extension: Source file suffix to collect
            exclude_dirs: Directory names never descended into (exact match)
            exclude_patterns: Extra glob patterns matched against file paths
            max_files: Maximum number of files to scan
            max_file_size_mb: Files larger than this are skipped
            follow_symlinks: Follow symbolic links during the walk

        Performance tuning:
            workers: Parallel file workers (None or 1 = sequential)

        Output control:
            verbosity: Logging verbosity level
    """

    extension: str = ".rs"
    exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDE_DIRS
    exclude_patterns: list[str] = field(default_factory=list)
    max_files: int = 20000
    max_file_size_mb: float = 5.0
    follow_symlinks: bool = False

    workers: Optional[int] = None

    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.extension.startswith("."):
            raise ValueError("extension must start with '.'")
        if self.max_files < 1:
            raise ValueError("max_files must be at least 1")
        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")
        # TOML hands lists back; keep the field hashable and immutable
        if not isinstance(self.exclude_dirs, tuple):
            object.__setattr__(self, "exclude_dirs", tuple(self.exclude_dirs))

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)


DEFAULT_CONFIG = ScanConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> ScanConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated ScanConfig instance

    Raises:
        MemscopeError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".memscope.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise MemscopeError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "memscope.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise MemscopeError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise InvalidPathError(config_file, "config file not found")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise MemscopeError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ScanConfig(**merged)
    except (TypeError, ValueError) as e:
        raise MemscopeError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from MEMSCOPE_* environment variables.

    Supported environment variables:
        MEMSCOPE_EXTENSION: str
        MEMSCOPE_MAX_FILES: int
        MEMSCOPE_MAX_FILE_SIZE_MB: float
        MEMSCOPE_FOLLOW_SYMLINKS: bool (true/false/1/0)
        MEMSCOPE_WORKERS: int
        MEMSCOPE_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any MEMSCOPE_* vars found.
    """
    type_hints = get_type_hints(ScanConfig)

    result: dict[str, Any] = {}

    for field_name in ScanConfig.__dataclass_fields__:
        env_key = f"MEMSCOPE_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be expressed in an env var
    (lists and tuples).

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin in (list, tuple) or type_hint in (list, tuple):
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    A ``[memscope]`` table is used when present, otherwise the top level.
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    with open(path, "rb") as f:
        data = tomllib.load(f)
    section = data.get("memscope")
    return dict(section) if isinstance(section, dict) else data
