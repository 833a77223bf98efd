"""Markdown tokenization and markup rendering."""

from __future__ import annotations

import html
import logging
import re
from bisect import bisect_left, bisect_right
from collections.abc import Sequence

from .constants import CLASS_PREFIX, RENDERED_MARKER
from .exceptions import RenderError
from .models import Token, TokenType
from .patterns import DEFAULT_REGISTRY, PatternDefinition

logger = logging.getLogger(__name__)

_WHITESPACE_SPLIT = re.compile(r"(\s+)")

# Code is literal text: nothing may be recognized inside it.
OPAQUE_TOKENS = frozenset({TokenType.CODE_BLOCK, TokenType.CODE_INLINE})


class ClaimedRanges:
    """Ranges of the source already owned by tokens, kept as a tree.

    Siblings never overlap and are sorted by start offset. A new token is
    accepted when it is disjoint from its siblings, when every sibling it
    touches lies inside its content range (those become its children), or when
    it lies inside the content range of a non-code token (it is inserted among
    that token's children). Anything else is a conflicting overlap.
    """

    def __init__(self):
        self._roots: list[Token] = []

    @property
    def tokens(self) -> list[Token]:
        return list(self._roots)

    def claim(self, token: Token) -> bool:
        """Try to claim the range covered by `token`.

        Args:
            token: Candidate token.

        Returns:
            bool: True when the token was accepted, False when it conflicts
                with a token claimed earlier.

        Examples:
            claimed = ClaimedRanges()
            claimed.claim(code_block_token)  # True
            claimed.claim(link_token_inside_code_block)  # False
        """
        return _insert(self._roots, token)


def _insert(siblings: list[Token], token: Token) -> bool:
    low = bisect_right(siblings, token.start, key=_start_of)
    if low > 0 and siblings[low - 1].end > token.start:
        low -= 1
    high = bisect_left(siblings, token.end, low, key=_start_of)
    touched = siblings[low:high]

    if len(touched) == 1:
        parent = touched[0]
        if parent.content_start <= token.start and token.end <= parent.content_end:
            if parent.type in OPAQUE_TOKENS:
                return False
            return _insert(parent.children, token)

    for other in touched:
        if other.start < token.content_start or other.end > token.content_end:
            return False

    token.children.extend(touched)
    siblings[low:high] = [token]
    return True


def _start_of(token: Token) -> int:
    return token.start


def is_rendered(content: str) -> bool:
    """Detect markup previously generated by the renderer.

    Examples:
        is_rendered('<span class="md-text">x</span>')  # True
        is_rendered("# Title")  # False
    """
    return RENDERED_MARKER in content


def tokenize(
    content: str, registry: Sequence[PatternDefinition] = DEFAULT_REGISTRY
) -> list[Token]:
    """Split markdown text into top-level tokens.

    Patterns run in registry order against the original text, never against
    generated markup. A match is kept when it nests cleanly with the tokens
    found so far (see `ClaimedRanges`); otherwise it is dropped and the scan
    resumes one character after its start. Nothing is recognized inside code.

    Args:
        content: Markdown text.
        registry: Pattern definitions, highest precedence first.

    Returns:
        list[Token]: Top-level tokens sorted by offset; nested tokens are
            reachable through `Token.children`.

    Raises:
        RenderError: If an extractor fails on a match.

    Examples:
        [token.type for token in tokenize("**bold** *italic*")]
        # [TokenType.BOLD, TokenType.ITALIC]
    """
    claimed = ClaimedRanges()

    for pattern in registry:
        position = 0
        while position <= len(content):
            match = pattern.regex.search(content, position)
            if match is None:
                break
            if match.end() == match.start():
                position = match.end() + 1
                continue

            try:
                token = pattern.extractor(match)
            except Exception as error:
                raise RenderError(pattern.token_type.value, match.start()) from error

            position = match.end() if claimed.claim(token) else match.start() + 1

    return claimed.tokens


def render(content: str, registry: Sequence[PatternDefinition] = DEFAULT_REGISTRY) -> str:
    """Convert markdown text into styled markup.

    Every token becomes a ``<span class="md-<type>">`` wrapper whose delimiter
    characters sit in ``md-<type>-marker`` spans and whose text sits in a
    ``md-<type>-content`` span. Text between tokens is wrapped in
    ``md-text`` spans. All source characters are preserved (HTML-escaped).

    Content that already contains generated markup is returned unchanged.

    Args:
        content: Markdown text.
        registry: Pattern definitions, highest precedence first.

    Returns:
        str: Rendered markup.

    Raises:
        RenderError: If an extractor fails on a match.

    Examples:
        render("**hi**")
        # '<span class="md-bold"><span class="md-bold-marker">**</span>...'
    """
    if is_rendered(content):
        logger.warning("Content already contains highlight markup; skipping render")
        return content

    tokens = tokenize(content, registry)
    return _render_range(content, tokens, 0, len(content), wrap_text=True)


def _render_range(source: str, tokens: list[Token], start: int, end: int, wrap_text: bool) -> str:
    parts = []
    cursor = start
    for token in tokens:
        if token.start > cursor:
            parts.append(_render_text(source[cursor : token.start], wrap_text))
        parts.append(_render_token(source, token))
        cursor = token.end
    if cursor < end:
        parts.append(_render_text(source[cursor:end], wrap_text))
    return "".join(parts)


def _render_text(text: str, wrap: bool) -> str:
    escaped = html.escape(text)
    if not wrap:
        return escaped
    return f'<span class="{CLASS_PREFIX}{TokenType.TEXT.value}">{escaped}</span>'


def _render_markers(text: str, slug: str) -> str:
    """Wrap delimiter runs in marker spans; whitespace stays plain."""
    parts = []
    for piece in _WHITESPACE_SPLIT.split(text):
        if not piece:
            continue
        if piece.isspace():
            parts.append(html.escape(piece))
        else:
            parts.append(f'<span class="{CLASS_PREFIX}{slug}-marker">{html.escape(piece)}</span>')
    return "".join(parts)


def _token_classes(token: Token) -> str:
    slug = token.type.value
    classes = f"{CLASS_PREFIX}{slug}"
    if token.type is TokenType.HEADER:
        classes += f" {CLASS_PREFIX}{slug}-{token.level}"
    elif token.type is TokenType.BLOCKQUOTE:
        classes += f" {CLASS_PREFIX}{slug}-level-{token.level}"
    elif token.type is TokenType.LIST:
        classes += f" {CLASS_PREFIX}{slug}-level-{(token.indent or 0) // 2}"
    return classes


def _render_link_suffix(suffix: str, slug: str) -> str:
    # "](url)" or "][ref]": the target sits between the two bracket pairs.
    opener, target, closer = suffix[:2], suffix[2:-1], suffix[-1:]
    return (
        "".join(
            f'<span class="{CLASS_PREFIX}{slug}-marker">{html.escape(char)}</span>'
            for char in opener
        )
        + f'<span class="{CLASS_PREFIX}{slug}-url">{html.escape(target)}</span>'
        + f'<span class="{CLASS_PREFIX}{slug}-marker">{html.escape(closer)}</span>'
    )


def _render_token(source: str, token: Token) -> str:
    slug = token.type.value
    prefix = source[token.start : token.content_start]
    suffix = source[token.content_end : token.end]
    inner = _render_range(
        source, token.children, token.content_start, token.content_end, wrap_text=False
    )

    if token.type is TokenType.LINK:
        closing = _render_link_suffix(suffix, slug)
    else:
        closing = _render_markers(suffix, slug)

    return (
        f'<span class="{_token_classes(token)}">'
        f"{_render_markers(prefix, slug)}"
        f'<span class="{CLASS_PREFIX}{slug}-content">{inner}</span>'
        f"{closing}"
        "</span>"
    )
