"""Data models for md-highlight."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

from .constants import DEFAULT_LINE_HEIGHT


class TokenType(Enum):
    """Markdown token types recognized by the highlighter.

    Each value is the slug used in the generated class names
    (``md-<slug>``, ``md-<slug>-marker``, ``md-<slug>-content``).
    """

    HEADER = "header"
    BOLD = "bold"
    ITALIC = "italic"
    CODE_INLINE = "code-inline"
    CODE_BLOCK = "code-block"
    LINK = "link"
    LIST = "list"
    BLOCKQUOTE = "blockquote"
    STRIKETHROUGH = "strikethrough"
    TABLE = "table"
    TEXT = "text"


class EngineState(Enum):
    """Lifecycle states of a `SyntaxHighlighter`.

    Attributes:
        IDLE: No pass scheduled or running.
        SCHEDULED: A debounce timer is armed.
        RENDERING: A pass is executing.
        DESTROYED: The engine released its resources.
    """

    IDLE = auto()
    SCHEDULED = auto()
    RENDERING = auto()
    DESTROYED = auto()


@dataclass
class Token:
    """A recognized unit of markdown syntax.

    Offsets refer to the text passed to the tokenizer. ``raw`` is the exact
    source slice ``[start, end)``; the content range is the part rendered as
    ``md-<type>-content``, everything else in the slice is delimiter text or
    whitespace.

    Attributes:
        type: Token type.
        raw: Source text consumed by the token.
        start: Offset of the first consumed character.
        end: Offset one past the last consumed character.
        content_start: Offset where the semantic content begins.
        content_end: Offset where the semantic content ends.
        content: Semantic text (stripped for block tokens).
        level: Header level or blockquote depth.
        delimiter: Emphasis delimiter (``**``, ``_``, ``~~``...).
        language: Code block info string, ``"text"`` when absent.
        url: Inline link destination.
        ref: Reference link label.
        marker: List item marker.
        indent: Leading whitespace width of list items and blockquotes.
        children: Tokens nested inside the content range.
    """

    type: TokenType
    raw: str
    start: int
    end: int
    content_start: int
    content_end: int
    content: str = ""
    level: int | None = None
    delimiter: str | None = None
    language: str | None = None
    url: str | None = None
    ref: str | None = None
    marker: str | None = None
    indent: int | None = None
    children: list[Token] = field(default_factory=list)


@dataclass(frozen=True)
class ViewportInfo:
    """Visible line range of the consuming editor (zero-based, inclusive).

    Examples:
        ViewportInfo(first_visible_line=100, last_visible_line=120)
    """

    first_visible_line: int
    last_visible_line: int

    @classmethod
    def from_scroll(
        cls, scroll_top: float, visible_height: float, line_height: float = DEFAULT_LINE_HEIGHT
    ) -> ViewportInfo:
        """Derive the visible range from editor scroll geometry.

        Examples:
            ViewportInfo.from_scroll(scroll_top=2000, visible_height=400)
            # ViewportInfo(first_visible_line=100, last_visible_line=120)
        """
        if line_height <= 0:
            line_height = DEFAULT_LINE_HEIGHT
        first = max(0, math.floor(scroll_top / line_height))
        visible_lines = max(0, math.ceil(visible_height / line_height))
        return cls(first_visible_line=first, last_visible_line=first + visible_lines)

    def fingerprint(self) -> str:
        return f"{self.first_visible_line}:{self.last_visible_line}"


@dataclass
class ExtractedContent:
    """Slice of a document selected for highlighting.

    Attributes:
        content: Lines joined with ``\\n``.
        start_line_index: Index of the first extracted line in the document.
    """

    content: str
    start_line_index: int


class RenderTarget(Protocol):
    """Sink that displays rendered markup (an editor overlay)."""

    def show(self, markup: str) -> None: ...

    def hide(self) -> None: ...


@dataclass
class BufferTarget:
    """In-memory render target.

    Attributes:
        markup: Last markup written to the target.
        visible: False after a failed pass hid the target.
        writes: Number of `show` calls received.
    """

    markup: str = ""
    visible: bool = True
    writes: int = 0

    def show(self, markup: str) -> None:
        self.markup = markup
        self.visible = True
        self.writes += 1

    def hide(self) -> None:
        self.markup = ""
        self.visible = False


@dataclass
class HighlightRequest:
    """A single highlighting invocation.

    Attributes:
        content: Full document text.
        target: Sink receiving the rendered markup.
        viewport: Visible range, or None to highlight the whole document.
    """

    content: str
    target: RenderTarget
    viewport: ViewportInfo | None = None


@dataclass
class PerformanceStats:
    """Snapshot of highlighter timing.

    Attributes:
        last_highlight_time: Duration of the most recent pass in milliseconds.
        total_highlights: Number of completed passes, cache hits included.
        average_time: Mean pass duration in milliseconds.
        cache_size: Entries currently cached.
        max_cache_size: Cache capacity.
        cache_hits: Passes served from the cache.
    """

    last_highlight_time: float
    total_highlights: int
    average_time: float
    cache_size: int
    max_cache_size: int
    cache_hits: int = 0

    def as_dict(self) -> dict[str, float | int]:
        """Return the stats keyed the way the editor frontend reads them."""
        return {
            "lastHighlightTime": self.last_highlight_time,
            "totalHighlights": self.total_highlights,
            "averageTime": self.average_time,
            "cacheSize": self.cache_size,
            "maxCacheSize": self.max_cache_size,
            "cacheHits": self.cache_hits,
        }
