"""Package-specific exception types."""

from __future__ import annotations


class HighlightError(ValueError):
    """Base class for highlighting-related errors."""


class InvalidRequestError(HighlightError):
    """Raised when a highlight request lacks usable content or a render target."""


class RenderError(HighlightError):
    """Raised when a pattern extractor fails on a match.

    Args:
        token_type: Slug of the token type whose extractor failed.
        offset: Zero-based offset of the failing match in the source text.
    """

    def __init__(self, token_type: str, offset: int):
        self.token_type = token_type
        self.offset = offset
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return f"Failed to extract {self.token_type} token at offset {self.offset}"
