"""Constants used across the md-highlight package."""

from __future__ import annotations

from .config import HighlighterConfig

DEFAULT_CONFIG = HighlighterConfig()

# Markup naming scheme
CLASS_PREFIX = "md-"
# Presence of this text marks content as already rendered.
RENDERED_MARKER = f'class="{CLASS_PREFIX}'

# Viewport narrowing defaults
DEFAULT_MAX_LINES_FOR_FULL_HIGHLIGHT = DEFAULT_CONFIG.max_lines_for_full_highlight
DEFAULT_VISIBLE_LINES_BUFFER = DEFAULT_CONFIG.visible_lines_buffer
DEFAULT_LINE_HEIGHT = 20.0

# Cache and instrumentation defaults
DEFAULT_MAX_CACHE_SIZE = DEFAULT_CONFIG.max_cache_size
FULL_DOCUMENT_KEY = "full"
DEFAULT_PERFORMANCE_BUDGET_MS = DEFAULT_CONFIG.performance_budget_ms
DEFAULT_PERFORMANCE_BUDGET_LINES = DEFAULT_CONFIG.performance_budget_lines

# Files accepted by the CLI
DEFAULT_MAX_FILE_SIZE = DEFAULT_CONFIG.max_file_size
MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".mkdn")
