from __future__ import annotations

import pytest

from md_highlight.models import ViewportInfo
from md_highlight.viewport import extract_visible_content, should_narrow


def _lines(count: int) -> list[str]:
    return [f"line {index}" for index in range(count)]


def test_large_document_is_narrowed_to_viewport_and_buffer():
    lines = _lines(1500)

    extracted = extract_visible_content(lines, ViewportInfo(100, 120), 1000, 50)

    assert extracted.start_line_index == 50
    assert extracted.content.split("\n") == lines[50:171]


def test_small_document_is_returned_whole():
    lines = _lines(200)

    extracted = extract_visible_content(lines, ViewportInfo(100, 120), 1000, 50)

    assert extracted.start_line_index == 0
    assert extracted.content == "\n".join(lines)


def test_document_at_threshold_is_not_narrowed():
    lines = _lines(1000)

    extracted = extract_visible_content(lines, ViewportInfo(900, 950), 1000, 10)

    assert extracted.start_line_index == 0
    assert len(extracted.content.split("\n")) == 1000


def test_missing_viewport_returns_whole_document():
    lines = _lines(5000)

    extracted = extract_visible_content(lines, None, 1000, 50)

    assert extracted.start_line_index == 0
    assert extracted.content == "\n".join(lines)


def test_viewport_at_top_clamps_start():
    lines = _lines(1500)

    extracted = extract_visible_content(lines, ViewportInfo(0, 30), 1000, 50)

    assert extracted.start_line_index == 0
    assert extracted.content.split("\n") == lines[0:81]


def test_viewport_at_bottom_clamps_end():
    lines = _lines(1500)

    extracted = extract_visible_content(lines, ViewportInfo(1480, 1499), 1000, 50)

    assert extracted.start_line_index == 1430
    assert extracted.content.split("\n")[-1] == "line 1499"


def test_viewport_past_end_yields_last_line():
    lines = _lines(1500)

    extracted = extract_visible_content(lines, ViewportInfo(5000, 5100), 1000, 50)

    assert extracted.start_line_index == 1499
    assert extracted.content == "line 1499"


def test_zero_buffer_keeps_exact_viewport():
    lines = _lines(1500)

    extracted = extract_visible_content(lines, ViewportInfo(10, 12), 1000, 0)

    assert extracted.content.split("\n") == ["line 10", "line 11", "line 12"]


@pytest.mark.parametrize(
    "line_count, viewport, expected",
    [
        (1001, ViewportInfo(0, 10), True),
        (1000, ViewportInfo(0, 10), False),
        (5000, None, False),
    ],
)
def test_should_narrow(line_count, viewport, expected):
    assert should_narrow(line_count, viewport, 1000) is expected
