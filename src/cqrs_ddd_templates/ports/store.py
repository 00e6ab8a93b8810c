"""ITemplateStore — Protocol for durable, per-tenant template storage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import builtins

    from ..template import NotificationChannel, NotificationTemplate


@runtime_checkable
class ITemplateStore(Protocol):
    """
    Durable storage of concrete (scenario, channel, locale, tenant, app?) records.

    Scope shadowing is a store-boundary contract: when ``application`` is given
    only the app-scoped record is considered. A missing app record is a plain
    ``None``, never an automatic org-level fallback.

    Implementations raise :class:`~cqrs_ddd_templates.exceptions.TemplateStoreError`
    for I/O failures, with the driver error chained.
    """

    def read(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> NotificationTemplate | None:
        """Return the record at exactly this scope and locale, or None."""
        ...

    def write(
        self,
        template: NotificationTemplate,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        """Upsert: create the record (and its scenario) or replace it."""
        ...

    def delete(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        """Delete one record. Deleting an absent record is a no-op."""
        ...

    def delete_all(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        """Delete every locale of a scenario in one scope.

        Org-level deletion leaves app-level overrides untouched.
        """
        ...

    def list(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> list[NotificationTemplate]:
        """All locales of a scenario in one scope."""
        ...

    def list_all(
        self, channel: NotificationChannel, tenant_id: int
    ) -> builtins.list[NotificationTemplate]:
        """All org-level templates of every scenario in a channel."""
        ...
