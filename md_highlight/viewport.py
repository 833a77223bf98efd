"""Narrow oversized documents to the lines around the viewport."""

from __future__ import annotations

from collections.abc import Sequence

from .constants import DEFAULT_MAX_LINES_FOR_FULL_HIGHLIGHT, DEFAULT_VISIBLE_LINES_BUFFER
from .models import ExtractedContent, ViewportInfo


def should_narrow(
    line_count: int,
    viewport: ViewportInfo | None,
    max_lines_for_full_highlight: int = DEFAULT_MAX_LINES_FOR_FULL_HIGHLIGHT,
) -> bool:
    """Return True when only the viewport region should be highlighted."""
    return viewport is not None and line_count > max_lines_for_full_highlight


def extract_visible_content(
    lines: Sequence[str],
    viewport: ViewportInfo | None,
    max_lines_for_full_highlight: int = DEFAULT_MAX_LINES_FOR_FULL_HIGHLIGHT,
    buffer: int = DEFAULT_VISIBLE_LINES_BUFFER,
) -> ExtractedContent:
    """Select the lines worth highlighting.

    Small documents and requests without a viewport are returned whole. For
    larger documents the visible range is widened by `buffer` lines on both
    sides and clamped to the document. Tokens outside the slice stay
    unhighlighted until they scroll into view.

    Args:
        lines: Document split on ``\\n``.
        viewport: Visible line range, or None.
        max_lines_for_full_highlight: Documents with at most this many lines
            are always returned whole.
        buffer: Extra lines kept above and below the viewport.

    Returns:
        ExtractedContent: Joined slice and the index of its first line. A
            viewport past the end of the document yields the last line.

    Examples:
        extract_visible_content(lines_1500, ViewportInfo(100, 120), 1000, 50)
        # ExtractedContent(content=<lines 50..170>, start_line_index=50)
    """
    if not should_narrow(len(lines), viewport, max_lines_for_full_highlight):
        return ExtractedContent(content="\n".join(lines), start_line_index=0)

    end = max(0, min(len(lines) - 1, viewport.last_visible_line + buffer))
    start = min(max(0, viewport.first_visible_line - buffer), end)

    return ExtractedContent(content="\n".join(lines[start : end + 1]), start_line_index=start)
