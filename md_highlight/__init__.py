"""
md-highlight: live syntax highlighting for Markdown editors.

The engine turns markdown text into nested ``<span class="md-...">``
fragments that an editor overlay can style, with delimiter characters and
content in separate spans.

CLI Usage:
    md-highlight notes.md

Library Usage:
    import asyncio
    from md_highlight import BufferTarget, SyntaxHighlighter

    engine = SyntaxHighlighter(debounce_delay=150)
    target = BufferTarget()
    asyncio.run(engine.highlight("# Notes\\n\\n**bold** text", target))
    markup = target.markup
"""

from .cache import ResultCache, make_cache_key
from .config import ConfigError, HighlighterConfig
from .engine import SyntaxHighlighter
from .exceptions import HighlightError, InvalidRequestError, RenderError
from .models import (
    BufferTarget,
    EngineState,
    PerformanceStats,
    RenderTarget,
    Token,
    TokenType,
    ViewportInfo,
)
from .patterns import PatternDefinition, build_registry
from .renderer import is_rendered, render, tokenize
from .viewport import extract_visible_content

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "SyntaxHighlighter",
    "render",
    "tokenize",
    "is_rendered",
    "build_registry",
    "extract_visible_content",
    "make_cache_key",
    # Data models
    "BufferTarget",
    "EngineState",
    "HighlighterConfig",
    "PatternDefinition",
    "PerformanceStats",
    "RenderTarget",
    "ResultCache",
    "Token",
    "TokenType",
    "ViewportInfo",
    # Exceptions
    "ConfigError",
    "HighlightError",
    "InvalidRequestError",
    "RenderError",
    # Version
    "__version__",
]
