"""InMemoryResolutionCache — lock-guarded dict with TTL and generations."""

from __future__ import annotations

import logging
import threading
import time
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from ..template import NotificationTemplate, TemplateKey

logger = logging.getLogger("cqrs_ddd.templates.cache")


class InMemoryResolutionCache:
    """
    Process-local implementation of ``IResolutionCache``.

    Generations come from one monotonically increasing counter: ``invalidate``
    stamps the key with the next value and ``clear`` raises a floor under every
    key, so a ``put`` prepared before either is dropped.
    """

    def __init__(
        self,
        ttl: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[
            TemplateKey, tuple[dict[str, NotificationTemplate], float | None]
        ] = {}
        self._generations: dict[TemplateKey, int] = {}
        self._counter = 0
        self._floor = 0

    def get(self, key: TemplateKey) -> Mapping[str, NotificationTemplate] | None:
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            entry, expires_at = item
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[key]
                return None
            return MappingProxyType(dict(entry))

    def put(
        self,
        key: TemplateKey,
        entry: Mapping[str, NotificationTemplate],
        *,
        generation: int | None = None,
    ) -> None:
        with self._lock:
            if generation is not None and generation != self._generation(key):
                logger.debug("Dropping stale cache put for %s", key.as_string())
                return
            expires_at = self._clock() + self._ttl if self._ttl else None
            self._entries[key] = (dict(entry), expires_at)

    def invalidate(self, key: TemplateKey) -> None:
        with self._lock:
            self._counter += 1
            self._generations[key] = self._counter
            self._entries.pop(key, None)

    def generation(self, key: TemplateKey) -> int:
        with self._lock:
            return self._generation(key)

    def clear(self) -> None:
        with self._lock:
            self._counter += 1
            self._floor = self._counter
            self._generations.clear()
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _generation(self, key: TemplateKey) -> int:
        return max(self._generations.get(key, 0), self._floor)
