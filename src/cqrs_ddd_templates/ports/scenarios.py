"""IScenarioCatalog — Protocol for the per-tenant scenario registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..template import NotificationChannel


@runtime_checkable
class IScenarioCatalog(Protocol):
    """Registry of known scenarios per tenant and channel.

    Scenarios are matched by normalized name; the display name given on
    creation is what ``list_scenarios`` returns.
    """

    def add_scenario(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> None: ...

    def scenario_exists(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> bool: ...

    def list_scenarios(
        self, channel: NotificationChannel, tenant_id: int
    ) -> list[str]: ...

    def delete_scenario(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        """Remove the scenario and every template under it, atomically."""
        ...
