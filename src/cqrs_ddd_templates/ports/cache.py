"""IResolutionCache - Protocol for the tenant-unaware resolution cache."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..template import NotificationTemplate, TemplateKey

    CacheEntry = Mapping[str, NotificationTemplate]


@runtime_checkable
class IResolutionCache(Protocol):
    """
    Key-value cache of resolved templates.

    One entry per :class:`TemplateKey` maps requested locale -> resolved
    template, so invalidating a key drops every locale of that scenario.

    Concurrency contract:
    - ``put`` is last-write-wins.
    - ``invalidate`` bumps the key's generation; a ``put`` carrying an older
      generation is dropped, so an invalidate always wins over a racing put.
    """

    def get(self, key: TemplateKey) -> CacheEntry | None:
        """Return the cached entry or None when absent/expired."""
        ...

    def put(
        self,
        key: TemplateKey,
        entry: CacheEntry,
        *,
        generation: int | None = None,
    ) -> None:
        """Store an entry; ignored when ``generation`` is stale."""
        ...

    def invalidate(self, key: TemplateKey) -> None:
        """Drop the entry. Must raise rather than silently fail."""
        ...

    def generation(self, key: TemplateKey) -> int:
        """Current generation of the key, read before a store lookup."""
        ...

    def clear(self) -> None:
        """Drop every entry of this cache."""
        ...
