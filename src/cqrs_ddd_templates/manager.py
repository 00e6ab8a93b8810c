"""TemplateManager — tenant-facing entry point over the resolution engine."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .catalog import DefaultTemplateCatalog
from .config import TemplateSettings
from .exceptions import TenantResolutionError
from .resolver import LayeredResolver

if TYPE_CHECKING:
    from .cache.partition import TenantCachePartition
    from .cache.resolver import CachingResolver
    from .ports.store import ITemplateStore
    from .ports.tenancy import ITenantResolver
    from .template import NotificationChannel, NotificationTemplate

logger = logging.getLogger("cqrs_ddd.templates.manager")


class TemplateManager:
    """
    Manage and resolve notification templates of tenants addressed by domain.

    Every call maps the tenant domain to its id through the injected
    :class:`ITenantResolver`, then delegates to a :class:`LayeredResolver`
    (or a :class:`CachingResolver` wrapping one).

    Example::

        manager = TemplateManager.build(
            store,
            StaticTenantResolver({"acme.example": 1}),
            cache=TenantCachePartition.in_memory(),
        )
        template = manager.resolve(
            "Password Reset", "fr-FR", NotificationChannel.EMAIL, "acme.example"
        )
    """

    def __init__(
        self,
        resolver: LayeredResolver | CachingResolver,
        tenants: ITenantResolver,
    ) -> None:
        self._resolver = resolver
        self._tenants = tenants

    @classmethod
    def build(
        cls,
        store: ITemplateStore,
        tenants: ITenantResolver,
        *,
        settings: TemplateSettings | None = None,
        catalog: DefaultTemplateCatalog | None = None,
        cache: TenantCachePartition | None = None,
    ) -> TemplateManager:
        """Wire store, catalog and optional cache with shared settings.

        Without ``catalog`` the bundled ``en-us`` defaults are loaded, which
        raises :class:`CatalogError` when ``settings`` configures another
        default locale. Such deployments pass their own catalog built with
        :meth:`DefaultTemplateCatalog.from_directory`.
        """
        settings = settings or TemplateSettings()
        if catalog is None:
            catalog = DefaultTemplateCatalog.bundled(settings)
        resolver: LayeredResolver | CachingResolver = LayeredResolver(
            store, catalog, settings
        )
        if cache is not None:
            from .cache.resolver import CachingResolver

            resolver = CachingResolver(resolver, cache)
        return cls(resolver, tenants)

    def _tenant_id(self, tenant_domain: str) -> int:
        try:
            return self._tenants.id_for(tenant_domain)
        except TenantResolutionError:
            raise
        except Exception as e:  # noqa: BLE001
            raise TenantResolutionError(tenant_domain, str(e)) from e

    # -- resolution and queries ---------------------------------------------

    def resolve(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_domain: str,
        application: str | None = None,
    ) -> NotificationTemplate:
        return self._resolver.resolve(
            scenario, locale, channel, self._tenant_id(tenant_domain), application
        )

    def exists(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_domain: str,
        application: str | None = None,
    ) -> bool:
        return self._resolver.exists(
            scenario, locale, channel, self._tenant_id(tenant_domain), application
        )

    def list_by_scenario(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_domain: str,
        application: str | None = None,
    ) -> list[NotificationTemplate]:
        return self._resolver.list_by_scenario(
            scenario, channel, self._tenant_id(tenant_domain), application
        )

    def list_all(
        self, channel: NotificationChannel, tenant_domain: str
    ) -> list[NotificationTemplate]:
        return self._resolver.list_all(channel, self._tenant_id(tenant_domain))

    def scenario_exists(
        self, scenario: str, channel: NotificationChannel, tenant_domain: str
    ) -> bool:
        return self._resolver.scenario_exists(
            scenario, channel, self._tenant_id(tenant_domain)
        )

    def list_scenarios(
        self, channel: NotificationChannel, tenant_domain: str
    ) -> list[str]:
        return self._resolver.list_scenarios(channel, self._tenant_id(tenant_domain))

    # -- management ---------------------------------------------------------

    def upsert(
        self,
        template: NotificationTemplate,
        tenant_domain: str,
        application: str | None = None,
    ) -> NotificationTemplate:
        return self._resolver.upsert(
            template, self._tenant_id(tenant_domain), application
        )

    def delete(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_domain: str,
        application: str | None = None,
    ) -> None:
        self._resolver.delete(
            scenario, locale, channel, self._tenant_id(tenant_domain), application
        )

    def delete_all(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_domain: str,
        application: str | None = None,
    ) -> None:
        self._resolver.delete_all(
            scenario, channel, self._tenant_id(tenant_domain), application
        )

    def add_scenario(
        self, scenario: str, channel: NotificationChannel, tenant_domain: str
    ) -> None:
        self._resolver.add_scenario(scenario, channel, self._tenant_id(tenant_domain))

    def delete_scenario(
        self, scenario: str, channel: NotificationChannel, tenant_domain: str
    ) -> None:
        self._resolver.delete_scenario(
            scenario, channel, self._tenant_id(tenant_domain)
        )

    def seed_defaults(self, channel: NotificationChannel, tenant_domain: str) -> int:
        """Copy missing default templates into the tenant; returns how many."""
        added = self._resolver.seed_defaults(channel, self._tenant_id(tenant_domain))
        logger.info(
            "Seeded %d default %s templates for tenant %s",
            added,
            channel.value,
            tenant_domain,
        )
        return added
