"""Resolution caching.

``RedisResolutionCache`` lives in ``cache.redis`` and needs the ``redis``
extra.
"""

from __future__ import annotations

from cqrs_ddd_templates.cache.memory import InMemoryResolutionCache
from cqrs_ddd_templates.cache.partition import TenantCachePartition
from cqrs_ddd_templates.cache.resolver import CachingResolver

__all__ = [
    "CachingResolver",
    "InMemoryResolutionCache",
    "TenantCachePartition",
]
