"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib


@dataclass
class HighlighterConfig:
    """Configuration for the markdown syntax highlighter.

    Attributes:
        debounce_delay: Idle time in milliseconds before a debounced pass runs.
        max_lines_for_full_highlight: Documents with more lines than this are
            narrowed to the viewport when one is supplied.
        visible_lines_buffer: Lines kept above and below the viewport.
        enable_performance_logging: Whether to log timing for every pass.
        max_cache_size: Maximum number of rendered results kept in the cache.
        performance_budget_ms: Target duration of a single pass.
        performance_budget_lines: Document length covered by the budget; longer
            documents get a proportionally larger budget.
        max_file_size: Maximum file size in bytes accepted by the CLI.

    Examples:
        HighlighterConfig(debounce_delay=150, visible_lines_buffer=20)
    """

    # Scheduling
    debounce_delay: int = 300

    # Viewport narrowing
    max_lines_for_full_highlight: int = 1000
    visible_lines_buffer: int = 50

    # Instrumentation
    enable_performance_logging: bool = False
    performance_budget_ms: float = 100.0
    performance_budget_lines: int = 10_000

    # Limits
    max_cache_size: int = 100
    max_file_size: int = 10 * 1024 * 1024


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`max_cache_size` must be a positive integer")
    """


# Option names used by the editor frontend.
OPTION_ALIASES = {
    "debounceDelay": "debounce_delay",
    "maxLinesForFullHighlight": "max_lines_for_full_highlight",
    "visibleLinesBuffer": "visible_lines_buffer",
    "enablePerformanceLogging": "enable_performance_logging",
    "maxCacheSize": "max_cache_size",
}

# Options whose change makes previously rendered output stale.
OUTPUT_AFFECTING_OPTIONS = frozenset({"max_lines_for_full_highlight", "visible_lines_buffer"})


# Files consulted in each directory, with the tables read from them.
CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", "md-highlight"),)),
    (".md-highlight.toml", (("md-highlight",), ("tool", "md-highlight"))),
)

_ABSENT = object()


def load_config(search_path: Path) -> HighlighterConfig:
    """Find and load the closest md-highlight configuration.

    Directories are visited from `search_path` up to the filesystem root. In
    each one, `pyproject.toml` (``[tool.md-highlight]``) is consulted before
    `.md-highlight.toml` (``[md-highlight]``, or ``[tool.md-highlight]``). The
    first table found wins, even an empty one. Files that are unreadable or
    not valid TOML are ignored.

    Args:
        search_path: Directory where the search starts.

    Returns:
        HighlighterConfig: The configuration found, or the defaults.

    Raises:
        ConfigError: If the table found is not a table or has unknown keys.

    Examples:
        load_config(Path("notes"))
    """
    start = search_path.resolve()
    for directory in (start, *start.parents):
        for filename, table_paths in CONFIG_SOURCES:
            config = _read_config_file(directory / filename, table_paths)
            if config is not None:
                return config
    return HighlighterConfig()


def _read_config_file(
    path: Path, table_paths: tuple[tuple[str, ...], ...]
) -> HighlighterConfig | None:
    if not path.is_file():
        return None
    try:
        document = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        table = _lookup(document, table_path)
        if table is not _ABSENT:
            return _config_from_table(table, f"{path} [{'.'.join(table_path)}]")
    return None


def _lookup(document: dict, keys: tuple[str, ...]) -> object:
    node: object = document
    for key in keys:
        if not isinstance(node, dict):
            return _ABSENT
        node = node.get(key, _ABSENT)
        if node is _ABSENT:
            return _ABSENT
    return node


def _config_from_table(table: object, location: str) -> HighlighterConfig:
    if table is None or table == {}:
        return HighlighterConfig()
    if not isinstance(table, dict):
        raise ConfigError(f"Expected a table of options at {location}")

    try:
        return HighlighterConfig(**normalize_option_names(table))
    except TypeError as error:
        raise ConfigError(f"Unsupported settings at {location}: {error}") from error


def normalize_option_names(options: dict[str, object]) -> dict[str, object]:
    """Translate frontend-style option names to `HighlighterConfig` fields.

    Examples:
        normalize_option_names({"debounceDelay": 100})  # {"debounce_delay": 100}
    """
    return {OPTION_ALIASES.get(key, key): value for key, value in options.items()}


# Smallest accepted value of each integer option.
_INTEGER_MINIMUMS = {
    "debounce_delay": 0,
    "visible_lines_buffer": 0,
    "max_lines_for_full_highlight": 1,
    "performance_budget_lines": 1,
    "max_cache_size": 1,
    "max_file_size": 1,
}


def validate_config(config: HighlighterConfig) -> None:
    """Check option types and ranges.

    Delays and the viewport buffer may be zero; line thresholds, cache and
    file size limits, and the time budget must be positive.

    Raises:
        ConfigError: Naming the first offending option.

    Examples:
        validate_config(HighlighterConfig(max_cache_size=10))
    """
    for name, minimum in _INTEGER_MINIMUMS.items():
        _check_integer(name, getattr(config, name), minimum)

    budget = config.performance_budget_ms
    if isinstance(budget, bool) or not isinstance(budget, (int, float)) or budget <= 0:
        raise ConfigError("`performance_budget_ms` must be a positive number")

    if not isinstance(config.enable_performance_logging, bool):
        raise ConfigError("`enable_performance_logging` must be a boolean")


def apply_overrides(config: HighlighterConfig, **overrides: object) -> HighlighterConfig:
    """Return `config` with the given options replaced.

    Args:
        config: Base configuration.
        overrides: New values keyed by field name or frontend alias. None
            means "keep the current value".

    Returns:
        HighlighterConfig: Updated copy, or `config` itself when nothing
        changes.

    Raises:
        ConfigError: If an option name is unknown.

    Examples:
        updated = apply_overrides(config, debounce_delay=100, visibleLinesBuffer=10)
    """
    changes = {
        name: value
        for name, value in normalize_option_names(overrides).items()
        if value is not None
    }
    if not changes:
        return config

    unknown = sorted(changes.keys() - {option.name for option in fields(HighlighterConfig)})
    if unknown:
        raise ConfigError(f"Unknown option(s): {', '.join(unknown)}")

    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> HighlighterConfig:
    """Resolve the effective configuration for files under `search_path`.

    Equivalent to `load_config`, then `apply_overrides`, then
    `validate_config`.

    Raises:
        ConfigError: If the file or the overrides are invalid.

    Examples:
        config = build_config(Path.cwd(), visible_lines_buffer=20)
    """
    config = apply_overrides(load_config(search_path), **overrides)
    validate_config(config)
    return config


def _check_integer(name: str, value: object, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"`{name}` must be an integer")
    if value < minimum:
        qualifier = "positive" if minimum > 0 else "non-negative"
        raise ConfigError(f"`{name}` must be a {qualifier} integer")
