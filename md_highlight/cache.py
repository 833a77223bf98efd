"""Bounded FIFO cache for rendered markup."""

from __future__ import annotations

import logging
import zlib
from collections import OrderedDict

from .constants import DEFAULT_MAX_CACHE_SIZE, FULL_DOCUMENT_KEY
from .models import ViewportInfo

logger = logging.getLogger(__name__)


def make_cache_key(content: str, viewport: ViewportInfo | None = None) -> str:
    """Fingerprint a document and viewport.

    Uses CRC-32 of the UTF-8 content plus its length; collisions are possible
    and accepted. The key is not a security boundary.

    Examples:
        make_cache_key("# Title")  # "<crc32 hex>-7-full"
        make_cache_key("# Title", ViewportInfo(0, 20))  # "<crc32 hex>-7-0:20"
    """
    checksum = zlib.crc32(content.encode("utf-8", "surrogatepass"))
    viewport_key = viewport.fingerprint() if viewport is not None else FULL_DOCUMENT_KEY
    return f"{checksum:08x}-{len(content)}-{viewport_key}"


class ResultCache:
    """Rendered results keyed by fingerprint, evicted oldest-inserted first.

    Reads do not refresh an entry's age, and re-inserting an existing key keeps
    its original position.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_CACHE_SIZE):
        if max_size <= 0:
            raise ValueError("`max_size` must be a positive integer")
        self.max_size = max_size
        self._entries: OrderedDict[str, str] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def put(self, key: str, value: str) -> None:
        if key in self._entries:
            self._entries[key] = value
            return
        while len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %s", evicted)
        self._entries[key] = value

    def resize(self, max_size: int) -> None:
        """Change the capacity, evicting the oldest entries that no longer fit."""
        if max_size <= 0:
            raise ValueError("`max_size` must be a positive integer")
        self.max_size = max_size
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()
