"""CachingResolver - read-through resolution cache over LayeredResolver."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import TemplateCacheError
from ..template import TemplateKey
from ..validation import normalize_locale, normalize_scenario, validate_application

if TYPE_CHECKING:
    from ..config import TemplateSettings
    from ..ports.cache import IResolutionCache
    from ..resolver import LayeredResolver
    from ..template import NotificationChannel, NotificationTemplate
    from .partition import TenantCachePartition

logger = logging.getLogger("cqrs_ddd.caching")


class CachingResolver:
    """
    Decorator that adds read-through caching to a :class:`LayeredResolver`.

    Pattern:
    - resolve(): read generation -> check cache -> delegate -> cache result
    - upsert/delete/delete_all: delegate -> invalidate the key
    - delete_scenario/seed_defaults: delegate -> drop the tenant's cache

    Invalidation always happens after the durable write returned and is never
    swallowed: a failure raises :class:`TemplateCacheError`. Listing and
    existence queries are passed through uncached.
    """

    def __init__(self, inner: LayeredResolver, partition: TenantCachePartition) -> None:
        self._inner = inner
        self._partition = partition

    @property
    def settings(self) -> TemplateSettings:
        return self._inner.settings

    def resolve(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> NotificationTemplate:
        """Resolve a template with read-through caching."""
        name = normalize_scenario(
            scenario, max_length=self._inner.settings.scenario_max_length
        )
        locale = normalize_locale(locale)
        validate_application(application)

        cache = self._partition.for_tenant(tenant_id)
        key = TemplateKey(name, channel, application)

        # 1. Generation first, so an invalidation racing this call wins
        generation = self._read_generation(cache, key)

        # 2. Try cache
        entry = self._cache_get(cache, key)
        if entry is not None and locale in entry:
            return entry[locale]

        # 3. Delegate to inner
        template = self._inner.resolve(scenario, locale, channel, tenant_id, application)

        # 4. Update cache
        if generation is not None:
            updated = dict(entry or {})
            updated[locale] = template
            try:
                cache.put(key, updated, generation=generation)
            except Exception as e:  # noqa: BLE001
                logger.warning("Cache set failed for key %s: %s", key.as_string(), e)
        return template

    # -- uncached queries ---------------------------------------------------

    def exists(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> bool:
        return self._inner.exists(scenario, locale, channel, tenant_id, application)

    def scenario_exists(
        self, scenario: str, channel: NotificationChannel, tenant_id: int
    ) -> bool:
        return self._inner.scenario_exists(scenario, channel, tenant_id)

    def list_scenarios(self, channel: NotificationChannel, tenant_id: int) -> list[str]:
        return self._inner.list_scenarios(channel, tenant_id)

    def list_by_scenario(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> list[NotificationTemplate]:
        return self._inner.list_by_scenario(scenario, channel, tenant_id, application)

    def list_all(
        self, channel: NotificationChannel, tenant_id: int
    ) -> list[NotificationTemplate]:
        return self._inner.list_all(channel, tenant_id)

    # -- writes -------------------------------------------------------------

    def upsert(
        self,
        template: NotificationTemplate,
        tenant_id: int,
        application: str | None = None,
    ) -> NotificationTemplate:
        stored = self._inner.upsert(template, tenant_id, application)
        self._invalidate(
            tenant_id, TemplateKey.of(stored.scenario, stored.channel, application)
        )
        return stored

    def delete(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        self._inner.delete(scenario, locale, channel, tenant_id, application)
        self._invalidate(tenant_id, TemplateKey.of(scenario, channel, application))

    def delete_all(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        self._inner.delete_all(scenario, channel, tenant_id, application)
        self._invalidate(tenant_id, TemplateKey.of(scenario, channel, application))

    def add_scenario(
        self, scenario: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        self._inner.add_scenario(scenario, channel, tenant_id)

    def delete_scenario(
        self, scenario: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        # App-level keys of the scenario are unknown here; drop the tenant.
        self._inner.delete_scenario(scenario, channel, tenant_id)
        self._partition.invalidate_tenant(tenant_id)

    def seed_defaults(self, channel: NotificationChannel, tenant_id: int) -> int:
        added = self._inner.seed_defaults(channel, tenant_id)
        if added:
            self._partition.invalidate_tenant(tenant_id)
        return added

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _read_generation(cache: IResolutionCache, key: TemplateKey) -> int | None:
        try:
            return cache.generation(key)
        except TemplateCacheError as e:
            logger.warning(
                "Cache generation read failed for key %s, not caching: %s",
                key.as_string(),
                e,
            )
            return None

    @staticmethod
    def _cache_get(
        cache: IResolutionCache, key: TemplateKey
    ) -> dict[str, NotificationTemplate] | None:
        try:
            entry = cache.get(key)
        except Exception as e:  # noqa: BLE001
            logger.warning("Cache get failed for key %s: %s", key.as_string(), e)
            return None
        return dict(entry) if entry is not None else None

    def _invalidate(self, tenant_id: int, key: TemplateKey) -> None:
        self._partition.for_tenant(tenant_id).invalidate(key)
