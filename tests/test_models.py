from md_highlight.models import (
    BufferTarget,
    EngineState,
    PerformanceStats,
    Token,
    TokenType,
    ViewportInfo,
)


def test_engine_state_members():
    assert list(EngineState) == [
        EngineState.IDLE,
        EngineState.SCHEDULED,
        EngineState.RENDERING,
        EngineState.DESTROYED,
    ]


def test_token_type_values_are_class_slugs():
    assert TokenType.CODE_INLINE.value == "code-inline"
    assert TokenType.CODE_BLOCK.value == "code-block"
    assert TokenType.TEXT.value == "text"


def test_viewport_from_scroll():
    viewport = ViewportInfo.from_scroll(scroll_top=2000, visible_height=400)

    assert viewport == ViewportInfo(first_visible_line=100, last_visible_line=120)
    assert viewport.fingerprint() == "100:120"


def test_viewport_from_scroll_rounds_partial_lines():
    viewport = ViewportInfo.from_scroll(scroll_top=30, visible_height=45, line_height=20)

    assert viewport.first_visible_line == 1
    assert viewport.last_visible_line == 4


def test_viewport_from_scroll_falls_back_to_default_line_height():
    assert ViewportInfo.from_scroll(40, 20, line_height=0) == ViewportInfo(2, 3)


def test_token_defaults():
    token = Token(TokenType.LINK, "[a](b)", 0, 6, 1, 2, content="a", url="b")

    assert token.url == "b"
    assert token.ref is None
    assert token.level is None
    assert token.children == []


def test_buffer_target_show_and_hide():
    target = BufferTarget()

    target.show("<span>x</span>")
    assert target.markup == "<span>x</span>"
    assert target.writes == 1

    target.hide()
    assert target.markup == ""
    assert target.visible is False

    target.show("")
    assert target.visible is True
    assert target.writes == 2


def test_performance_stats_as_dict():
    stats = PerformanceStats(
        last_highlight_time=1.5,
        total_highlights=4,
        average_time=2.0,
        cache_size=3,
        max_cache_size=100,
        cache_hits=1,
    )

    assert stats.as_dict() == {
        "lastHighlightTime": 1.5,
        "totalHighlights": 4,
        "averageTime": 2.0,
        "cacheSize": 3,
        "maxCacheSize": 100,
        "cacheHits": 1,
    }
