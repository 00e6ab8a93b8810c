"""Tenant domain -> tenant id resolvers."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from .exceptions import TenantResolutionError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .ports.tenancy import ITenantResolver

logger = logging.getLogger("cqrs_ddd.templates.tenancy")


class StaticTenantResolver:
    """Fixed mapping of tenant domains to ids. Domains are case-insensitive."""

    def __init__(self, tenants: Mapping[str, int]) -> None:
        self._tenants = {domain.lower(): tenant_id for domain, tenant_id in tenants.items()}

    def id_for(self, tenant_domain: str) -> int:
        try:
            return self._tenants[tenant_domain.lower()]
        except KeyError:
            raise TenantResolutionError(tenant_domain, "unknown tenant domain") from None


class CachingTenantResolver:
    """
    Memoizing decorator for any :class:`ITenantResolver`.

    Tenant ids never change for a domain, so entries do not expire; call
    ``forget`` after a tenant is re-provisioned. Failures are not cached.
    """

    def __init__(self, inner: ITenantResolver) -> None:
        self._inner = inner
        self._lock = threading.Lock()
        self._ids: dict[str, int] = {}

    def id_for(self, tenant_domain: str) -> int:
        domain = tenant_domain.lower()
        with self._lock:
            cached = self._ids.get(domain)
        if cached is not None:
            return cached
        tenant_id = self._inner.id_for(tenant_domain)
        with self._lock:
            self._ids[domain] = tenant_id
        logger.debug("Resolved tenant %s to id %s", tenant_domain, tenant_id)
        return tenant_id

    def forget(self, tenant_domain: str) -> None:
        with self._lock:
            self._ids.pop(tenant_domain.lower(), None)
