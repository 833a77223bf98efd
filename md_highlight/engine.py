"""The syntax highlighting engine used by the editor overlay."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import fields

from .cache import ResultCache, make_cache_key
from .config import (
    OUTPUT_AFFECTING_OPTIONS,
    ConfigError,
    HighlighterConfig,
    apply_overrides,
    normalize_option_names,
    validate_config,
)
from .exceptions import InvalidRequestError
from .instrumentation import PerformanceMonitor
from .models import EngineState, HighlightRequest, PerformanceStats, RenderTarget, ViewportInfo
from .patterns import PatternDefinition, build_registry
from .renderer import render
from .scheduler import DebounceScheduler
from .viewport import extract_visible_content, should_narrow

logger = logging.getLogger(__name__)


class SyntaxHighlighter:
    """Live markdown highlighter for one editor instance.

    Owns its pattern registry, result cache, debounce timer, and timing
    statistics; separate instances share nothing. Highlighting errors never
    reach the caller: a failed pass hides the render target and is logged.

    Args:
        config: Base configuration; defaults to `HighlighterConfig()`.
        patterns: Pattern registry override, highest precedence first.
        options: Individual option overrides (snake_case or the frontend's
            camelCase names).

    Raises:
        ConfigError: If the options are unknown or invalid.

    Examples:
        engine = SyntaxHighlighter(debounce_delay=150)
        target = BufferTarget()
        await engine.highlight("# Notes", target)
    """

    def __init__(
        self,
        config: HighlighterConfig | None = None,
        *,
        patterns: Sequence[PatternDefinition] | None = None,
        **options: object,
    ):
        config = apply_overrides(config or HighlighterConfig(), **options)
        validate_config(config)
        self._config = config

        self._patterns = tuple(patterns) if patterns is not None else build_registry()
        self._cache = ResultCache(config.max_cache_size)
        self._monitor = PerformanceMonitor(
            budget_ms=config.performance_budget_ms,
            budget_lines=config.performance_budget_lines,
            log_every_pass=config.enable_performance_logging,
        )
        self._scheduler = DebounceScheduler(config.debounce_delay)
        self._state = EngineState.IDLE

        logger.debug("SyntaxHighlighter initialized with %s", config)

    @property
    def config(self) -> HighlighterConfig:
        return self._config

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def patterns(self) -> tuple[PatternDefinition, ...]:
        return self._patterns

    def render(self, content: str) -> str:
        """Render markdown text with this engine's patterns (no cache, no target)."""
        return render(content, self._patterns)

    async def highlight(
        self, content: str, target: RenderTarget, viewport: ViewportInfo | None = None
    ) -> None:
        """Highlight `content` into `target` immediately.

        Never raises; invalid requests are logged and ignored, failed passes
        hide the target.
        """
        self._run_pass(HighlightRequest(content=content, target=target, viewport=viewport))

    def highlight_with_debounce(
        self, content: str, target: RenderTarget, viewport: ViewportInfo | None = None
    ) -> asyncio.Future[None]:
        """Schedule a pass after `debounce_delay` milliseconds of quiet.

        Only the last request of a burst is highlighted; every caller in the
        burst gets a future that resolves once that single pass finished.

        Args:
            content: Full document text.
            target: Sink receiving the markup.
            viewport: Visible range, or None for the whole document.

        Returns:
            asyncio.Future[None]: Resolves after the coalesced pass; never
                fails.

        Raises:
            RuntimeError: If called without a running event loop.

        Examples:
            await asyncio.gather(
                engine.highlight_with_debounce("# a", target),
                engine.highlight_with_debounce("# ab", target),
            )
        """
        request = HighlightRequest(content=content, target=target, viewport=viewport)
        if self._state is EngineState.DESTROYED:
            logger.warning("Highlight requested after destroy(); ignoring")
            waiter = asyncio.get_running_loop().create_future()
            waiter.set_result(None)
            return waiter

        waiter = self._scheduler.schedule(lambda: self._run_pass(request))
        self._state = EngineState.SCHEDULED
        return waiter

    def update_options(self, **options: object) -> None:
        """Merge option overrides into the current configuration.

        Never raises. Unknown option names are logged and skipped; if any
        value is invalid, the whole update is logged and the current
        configuration is kept.

        Examples:
            engine.update_options(debounceDelay=150, visible_lines_buffer=20)
        """
        known = {option.name for option in fields(HighlighterConfig)}
        requested = normalize_option_names(options)
        unknown = sorted(set(requested) - known)
        if unknown:
            logger.warning("Ignoring unknown highlighter option(s): %s", ", ".join(unknown))
        requested = {name: value for name, value in requested.items() if name in known}

        try:
            config = apply_overrides(self._config, **requested)
            validate_config(config)
        except ConfigError as error:
            logger.warning("Invalid highlighter options %s: %s", requested, error)
            return

        changed = {
            name for name in requested if getattr(config, name) != getattr(self._config, name)
        }
        self._config = config

        self._scheduler.delay_ms = config.debounce_delay
        self._cache.resize(config.max_cache_size)
        self._monitor.budget_ms = config.performance_budget_ms
        self._monitor.budget_lines = config.performance_budget_lines
        self._monitor.log_every_pass = config.enable_performance_logging
        if changed & OUTPUT_AFFECTING_OPTIONS:
            self._cache.clear()

        logger.info("Syntax highlighter options updated: %s", requested)

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug("Syntax highlighting cache cleared")

    def get_performance_stats(self) -> PerformanceStats:
        return self._monitor.stats(len(self._cache), self._cache.max_size)

    def destroy(self) -> None:
        """Cancel pending work and release patterns and cached results."""
        self._scheduler.cancel()
        self._cache.clear()
        self._patterns = ()
        self._state = EngineState.DESTROYED
        logger.debug("SyntaxHighlighter destroyed")

    def _validate(self, request: HighlightRequest) -> None:
        if not isinstance(request.content, str):
            raise InvalidRequestError("content must be a string")
        if request.target is None:
            raise InvalidRequestError("a render target is required")

    def _run_pass(self, request: HighlightRequest) -> None:
        if self._state is EngineState.DESTROYED:
            logger.warning("Highlight requested after destroy(); ignoring")
            return

        try:
            self._validate(request)
        except InvalidRequestError as error:
            logger.warning("Invalid highlight parameters: %s", error)
            self._settle()
            return

        self._state = EngineState.RENDERING
        started = time.perf_counter()
        try:
            self._render_into(request, started)
        except Exception:
            logger.exception("Error during syntax highlighting")
            _hide(request.target)
        finally:
            self._settle()

    def _render_into(self, request: HighlightRequest, started: float) -> None:
        content = request.content
        key = make_cache_key(content, request.viewport)

        cached = self._cache.get(key)
        if cached is not None:
            request.target.show(cached)
            self._record(started, content.count("\n") + 1, cached=True)
            logger.debug("Used cached highlight result for %s", key)
            return

        lines = content.split("\n")
        extracted = extract_visible_content(
            lines,
            request.viewport,
            max_lines_for_full_highlight=self._config.max_lines_for_full_highlight,
            buffer=self._config.visible_lines_buffer,
        )
        markup = render(extracted.content, self._patterns)

        request.target.show(markup)
        self._cache.put(key, markup)
        self._record(started, len(lines), cached=False)

        if should_narrow(len(lines), request.viewport, self._config.max_lines_for_full_highlight):
            logger.debug(
                "Highlighted viewport slice starting at line %d of %d",
                extracted.start_line_index,
                len(lines),
            )

    def _record(self, started: float, line_count: int, cached: bool) -> None:
        duration_ms = (time.perf_counter() - started) * 1000
        self._monitor.record(duration_ms, line_count, cached=cached)

    def _settle(self) -> None:
        if self._state is EngineState.DESTROYED:
            return
        self._state = EngineState.SCHEDULED if self._scheduler.pending else EngineState.IDLE


def _hide(target: RenderTarget) -> None:
    try:
        target.hide()
    except Exception:
        logger.exception("Could not hide render target after a failed pass")
