"""ITenantResolver — Protocol for mapping tenant domains to storage ids."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ITenantResolver(Protocol):
    def id_for(self, tenant_domain: str) -> int:
        """Return the tenant id used to namespace storage keys.

        Raises ``TenantResolutionError`` when the domain is unknown or the
        lookup fails.
        """
        ...
