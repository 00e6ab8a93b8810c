"""TenantCachePartition — one resolution cache per tenant."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from ..config import TemplateSettings
from .memory import InMemoryResolutionCache

if TYPE_CHECKING:
    from collections.abc import Callable

    from redis import Redis

    from ..ports.cache import IResolutionCache


class TenantCachePartition:
    """
    Hands out a separate :class:`IResolutionCache` per tenant id.

    Cache keys carry no tenant, so two tenants can never read each other's
    entries. Caches are created lazily by ``factory`` and memoized.
    """

    def __init__(self, factory: Callable[[int], IResolutionCache]) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._caches: dict[int, IResolutionCache] = {}

    @classmethod
    def in_memory(cls, settings: TemplateSettings | None = None) -> TenantCachePartition:
        ttl = (settings or TemplateSettings()).cache_ttl
        return cls(lambda _tenant_id: InMemoryResolutionCache(ttl))

    @classmethod
    def redis(
        cls, redis_client: Redis, settings: TemplateSettings | None = None
    ) -> TenantCachePartition:
        from .redis import RedisResolutionCache

        settings = settings or TemplateSettings()
        return cls(
            lambda tenant_id: RedisResolutionCache(
                redis_client,
                namespace=f"{settings.cache_namespace}:{tenant_id}",
                ttl=settings.cache_ttl,
            )
        )

    def for_tenant(self, tenant_id: int) -> IResolutionCache:
        with self._lock:
            cache = self._caches.get(tenant_id)
            if cache is None:
                cache = self._factory(tenant_id)
                self._caches[tenant_id] = cache
            return cache

    def invalidate_tenant(self, tenant_id: int) -> None:
        """Drop every cached resolution of one tenant."""
        self.for_tenant(tenant_id).clear()

    def clear(self) -> None:
        with self._lock:
            caches = list(self._caches.values())
        for cache in caches:
            cache.clear()
