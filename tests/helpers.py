from __future__ import annotations

import html
import re

from md_highlight.models import Token

_TAG = re.compile(r"<[^>]*>")


def plain_text(markup: str) -> str:
    """Drop generated tags and entities, leaving the source text."""
    return html.unescape(_TAG.sub("", markup))


def walk(tokens: list[Token]):
    for token in tokens:
        yield token
        yield from walk(token.children)
