"""Markdown token grammars and their precedence order."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .models import Token, TokenType

Extractor = Callable[[re.Match[str]], Token]

# Fenced code blocks; the body excludes the newline before the closing fence
# and may not contain another line starting with a fence.
CODE_BLOCK_PATTERN = re.compile(
    r"^```(\w+)?\n((?:(?!^```).)*?)\n?^```[ \t]*$", re.MULTILINE | re.DOTALL
)
CODE_INLINE_PATTERN = re.compile(r"`([^`\n]+)`")
HEADER_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.*)$", re.MULTILINE)
BOLD_PATTERN = re.compile(r"(\*\*|__)([^*_\n]+?)\1")
# Single delimiters only: `*` must not touch another `*` and `_` must not sit inside a word.
ITALIC_PATTERN = re.compile(
    r"(?<!\*)(\*)(?=\S)([^*\n]+?)\*(?!\*)|(?<![\w])(_)(?=\S)([^_\n]+?)_(?![\w])"
)
STRIKETHROUGH_PATTERN = re.compile(r"~~((?:(?!~~)[^~\n])+)~~")
LINK_PATTERN = re.compile(r"\[([^\]\n]+)\]\(([^)\n]+)\)|\[([^\]\n]+)\]\[([^\]\n]*)\]")
BLOCKQUOTE_PATTERN = re.compile(r"^([ \t]*)(>+)[ \t]*(.*)$", re.MULTILINE)
LIST_PATTERN = re.compile(r"^([ \t]*)([-*+]|\d+\.)[ \t]+(.*)$", re.MULTILINE)
TABLE_PATTERN = re.compile(r"^\|(.+)\|[ \t]*$", re.MULTILINE)

# Code comes first so its literal contents are claimed before any inline
# formatting; bold precedes italic because `**` contains `*`.
PATTERN_ORDER = (
    TokenType.CODE_BLOCK,
    TokenType.CODE_INLINE,
    TokenType.HEADER,
    TokenType.BOLD,
    TokenType.ITALIC,
    TokenType.STRIKETHROUGH,
    TokenType.LINK,
    TokenType.BLOCKQUOTE,
    TokenType.LIST,
    TokenType.TABLE,
)


@dataclass(frozen=True)
class PatternDefinition:
    """Grammar for one token type.

    Attributes:
        token_type: Type of the tokens produced.
        regex: Compiled pattern applied to the whole document.
        extractor: Pure function building a `Token` from a match.
    """

    token_type: TokenType
    regex: re.Pattern[str]
    extractor: Extractor


def _first_group(match: re.Match[str], *groups: int) -> int:
    """Return the first group index that participated in the match."""
    for group in groups:
        if match.group(group) is not None:
            return group
    return groups[-1]


def _token(token_type: TokenType, match: re.Match[str], content_group: int, **fields) -> Token:
    content_start, content_end = match.span(content_group)
    if content_start < 0:
        content_start = content_end = match.end()
    fields.setdefault("content", match.group(content_group) or "")
    return Token(
        type=token_type,
        raw=match.group(0),
        start=match.start(),
        end=match.end(),
        content_start=content_start,
        content_end=content_end,
        **fields,
    )


def extract_code_block(match: re.Match[str]) -> Token:
    return _token(TokenType.CODE_BLOCK, match, 2, language=match.group(1) or "text")


def extract_code_inline(match: re.Match[str]) -> Token:
    return _token(TokenType.CODE_INLINE, match, 1, delimiter="`")


def extract_header(match: re.Match[str]) -> Token:
    return _token(
        TokenType.HEADER,
        match,
        2,
        level=len(match.group(1)),
        content=match.group(2).strip(),
    )


def extract_bold(match: re.Match[str]) -> Token:
    return _token(TokenType.BOLD, match, 2, delimiter=match.group(1))


def extract_italic(match: re.Match[str]) -> Token:
    content_group = _first_group(match, 2, 4)
    return _token(TokenType.ITALIC, match, content_group, delimiter=match.group(content_group - 1))


def extract_strikethrough(match: re.Match[str]) -> Token:
    return _token(TokenType.STRIKETHROUGH, match, 1, delimiter="~~")


def extract_link(match: re.Match[str]) -> Token:
    """Build a link token from either the inline or the reference form.

    Examples:
        extract_link(LINK_PATTERN.search("[docs](https://example.com)")).url
        # "https://example.com"
        extract_link(LINK_PATTERN.search("[docs][1]")).ref  # "1"
    """
    text_group = _first_group(match, 1, 3)
    if text_group == 1:
        return _token(TokenType.LINK, match, 1, url=match.group(2))
    return _token(TokenType.LINK, match, 3, ref=match.group(4))


def extract_blockquote(match: re.Match[str]) -> Token:
    return _token(
        TokenType.BLOCKQUOTE,
        match,
        3,
        level=len(match.group(2)),
        indent=len(match.group(1)),
        content=match.group(3).strip(),
    )


def extract_list(match: re.Match[str]) -> Token:
    return _token(
        TokenType.LIST,
        match,
        3,
        marker=match.group(2),
        indent=len(match.group(1).expandtabs(4)),
        content=match.group(3).strip(),
    )


def extract_table(match: re.Match[str]) -> Token:
    return _token(TokenType.TABLE, match, 1, content=match.group(1).strip())


_GRAMMAR: dict[TokenType, tuple[re.Pattern[str], Extractor]] = {
    TokenType.CODE_BLOCK: (CODE_BLOCK_PATTERN, extract_code_block),
    TokenType.CODE_INLINE: (CODE_INLINE_PATTERN, extract_code_inline),
    TokenType.HEADER: (HEADER_PATTERN, extract_header),
    TokenType.BOLD: (BOLD_PATTERN, extract_bold),
    TokenType.ITALIC: (ITALIC_PATTERN, extract_italic),
    TokenType.STRIKETHROUGH: (STRIKETHROUGH_PATTERN, extract_strikethrough),
    TokenType.LINK: (LINK_PATTERN, extract_link),
    TokenType.BLOCKQUOTE: (BLOCKQUOTE_PATTERN, extract_blockquote),
    TokenType.LIST: (LIST_PATTERN, extract_list),
    TokenType.TABLE: (TABLE_PATTERN, extract_table),
}


def build_registry(order: Sequence[TokenType] = PATTERN_ORDER) -> tuple[PatternDefinition, ...]:
    """Build the pattern registry in precedence order.

    Args:
        order: Token types to include, highest precedence first.

    Returns:
        tuple[PatternDefinition, ...]: One definition per token type.

    Raises:
        ValueError: If `order` names a token type without a grammar
            (``TokenType.TEXT``).

    Examples:
        [pattern.token_type for pattern in build_registry()][:2]
        # [TokenType.CODE_BLOCK, TokenType.CODE_INLINE]
    """
    registry = []
    for token_type in order:
        if token_type not in _GRAMMAR:
            raise ValueError(f"No grammar defined for {token_type.value!r} tokens")
        regex, extractor = _GRAMMAR[token_type]
        registry.append(PatternDefinition(token_type, regex, extractor))
    return tuple(registry)


DEFAULT_REGISTRY = build_registry()
