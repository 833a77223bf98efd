from __future__ import annotations

import os

import pytest

from helpers import plain_text
from md_highlight.renderer import is_rendered, render, tokenize

atheris = pytest.importorskip("atheris")


def test_render_with_fuzzed_input():
    data = os.urandom(4096)
    provider = atheris.FuzzedDataProvider(data)
    rendered = 0

    for _ in range(64):
        if provider.remaining_bytes() == 0:
            break
        text = provider.ConsumeUnicodeNoSurrogates(128)
        if is_rendered(text):
            continue
        assert plain_text(render(text)) == text
        rendered += 1

    assert rendered  # ensure we exercised the loop


def test_tokenize_with_fuzzed_markdown():
    data = os.urandom(4096)
    provider = atheris.FuzzedDataProvider(data)
    fragments = ["# ", "**", "*", "_", "`", "```", "~~", "[", "](", ")", "> ", "- ", "|", "\n"]
    pieces: list[str] = []

    while provider.remaining_bytes() > 0 and len(pieces) < 256:
        if provider.ConsumeBool():
            pieces.append(fragments[provider.ConsumeIntInRange(0, len(fragments) - 1)])
        else:
            pieces.append(provider.ConsumeUnicodeNoSurrogates(8))

    content = "".join(pieces)
    for token in tokenize(content):
        assert content[token.start : token.end] == token.raw
