"""LayeredResolver — durable store + default catalog behind one contract."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from .config import TemplateSettings
from .exceptions import (
    DuplicateScenarioError,
    ScenarioNotFoundError,
    TemplateContentError,
    TemplateError,
    TemplateNotFoundError,
    TemplateStoreError,
)
from .fallback import FallbackState, LocaleFallbackPolicy, Tier, TierPlan, TierSource
from .merge import name_merger, template_merger
from .ports.scenarios import IScenarioCatalog
from .template import TemplateScope
from .validation import (
    normalize_locale,
    validate_application,
    validate_scenario,
    validate_template_for_write,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .catalog import DefaultTemplateCatalog
    from .ports.store import ITemplateStore
    from .template import NotificationChannel, NotificationTemplate

logger = logging.getLogger("cqrs_ddd.templates.resolver")

R = TypeVar("R")


class LayeredResolver:
    """
    Compose one durable :class:`ITemplateStore` with the
    :class:`DefaultTemplateCatalog`.

    Resolution order for ``resolve``:
    1. durable store, exact (scenario, locale, scope)
    2. durable store, channel default locale, same scope
       (skipped when the requested locale already is the default)
    3. default catalog, default locale (tenant/application agnostic)

    The first tier returning a record wins. Scope shadowing (app-level hides
    org-level) is decided by the store. Writes only ever reach the durable
    store; the catalog is read-only.
    """

    def __init__(
        self,
        store: ITemplateStore,
        catalog: DefaultTemplateCatalog,
        settings: TemplateSettings | None = None,
        *,
        scenarios: IScenarioCatalog | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._settings = settings or TemplateSettings()
        self._policy = LocaleFallbackPolicy(self._settings)
        if scenarios is None:
            if not isinstance(store, IScenarioCatalog):
                raise TypeError(
                    "store does not implement IScenarioCatalog; pass scenarios="
                )
            scenarios = store
        self._scenarios = scenarios

    @property
    def settings(self) -> TemplateSettings:
        return self._settings

    @property
    def catalog(self) -> DefaultTemplateCatalog:
        return self._catalog

    # -- resolution ---------------------------------------------------------

    def resolve(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> NotificationTemplate:
        """Resolve a usable template or raise.

        Raises:
            TemplateValidationError: malformed scenario, locale or application.
            TemplateNotFoundError: every tier missed.
            TemplateContentError: the located record has a blank body.
            TemplateStoreError: the durable store failed.
        """
        self._validate_scenario(scenario)
        locale = normalize_locale(locale)
        validate_application(application)
        scope = TemplateScope(tenant_id, application)

        tiers = [
            self._bind_tier(plan, scenario, channel, scope)
            for plan in self._policy.plan(locale, channel)
        ]
        outcome = self._policy.run(tiers)

        if outcome.template is None:
            logger.error(
                "No template for scenario %r (%s) in locale %r or default locale "
                "for %s; default catalog has no entry either",
                scenario,
                channel.value,
                locale,
                scope,
            )
            raise TemplateNotFoundError(
                scenario,
                locale,
                channel.value,
                tenant=tenant_id,
                application=application,
                tiers=[p.state.value for p in outcome.attempted],
            )

        template = outcome.template
        if not template.is_usable:
            logger.warning(
                "Template %r (%s, locale=%s) found in tier %s for %s has a blank "
                "body; stored content is corrupt or incomplete",
                scenario,
                channel.value,
                template.locale,
                outcome.state.value,
                scope,
            )
            raise TemplateContentError(
                scenario,
                template.locale,
                channel=channel.value,
                tier=outcome.state.value,
                scope=str(scope),
            )

        if outcome.state is not FallbackState.EXACT:
            logger.debug(
                "Template %r (%s) for %s not found in locale %r; served from tier %s "
                "in locale %r",
                scenario,
                channel.value,
                scope,
                locale,
                outcome.state.value,
                template.locale,
            )
        return template

    def _bind_tier(
        self,
        plan: TierPlan,
        scenario: str,
        channel: NotificationChannel,
        scope: TemplateScope,
    ) -> Tier:
        if plan.source is TierSource.CATALOG:
            return Tier(plan, lambda: self._catalog.get(scenario, channel, plan.locale))

        def lookup() -> NotificationTemplate | None:
            return self._guard(
                "read",
                lambda: self._store.read(
                    scenario, plan.locale, channel, scope.tenant_id, scope.application
                ),
                scenario=scenario,
                locale=plan.locale,
                channel=channel.value,
                tier=plan.state.value,
                scope=str(scope),
            )

        return Tier(plan, lookup)

    # -- queries ------------------------------------------------------------

    def exists(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> bool:
        """Exact-locale existence in the durable store or the default catalog."""
        self._validate_scenario(scenario)
        locale = normalize_locale(locale)
        validate_application(application)
        stored = self._guard(
            "read",
            lambda: self._store.read(scenario, locale, channel, tenant_id, application),
            scenario=scenario,
            locale=locale,
            channel=channel.value,
            scope=str(TemplateScope(tenant_id, application)),
        )
        return stored is not None or self._catalog.get(scenario, channel, locale) is not None

    def scenario_exists(
        self, scenario: str, channel: NotificationChannel, tenant_id: int
    ) -> bool:
        self._validate_scenario(scenario)
        return self._durable_scenario_exists(
            scenario, channel, tenant_id
        ) or self._catalog.contains(scenario, channel)

    def list_scenarios(
        self, channel: NotificationChannel, tenant_id: int
    ) -> list[str]:
        """Display names from both tiers; order is not guaranteed."""
        durable = self._guard(
            "list_scenarios",
            lambda: self._scenarios.list_scenarios(channel, tenant_id),
            channel=channel.value,
            tenant=tenant_id,
        )
        return name_merger.merge(durable, self._catalog.scenarios(channel))

    def list_by_scenario(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> list[NotificationTemplate]:
        """Every locale of a scenario, durable records winning over defaults."""
        self._validate_scenario(scenario)
        validate_application(application)
        in_store = self._durable_scenario_exists(scenario, channel, tenant_id)
        if not in_store and not self._catalog.contains(scenario, channel):
            raise ScenarioNotFoundError(scenario, channel.value, tenant_id)

        durable: list[NotificationTemplate] = []
        if in_store:
            durable = self._guard(
                "list",
                lambda: self._store.list(scenario, channel, tenant_id, application),
                scenario=scenario,
                channel=channel.value,
                scope=str(TemplateScope(tenant_id, application)),
            )
        return template_merger.merge(durable, self._catalog.list(scenario, channel))

    def list_all(
        self, channel: NotificationChannel, tenant_id: int
    ) -> list[NotificationTemplate]:
        """Org-level templates of every scenario merged with the defaults."""
        durable = self._guard(
            "list_all",
            lambda: self._store.list_all(channel, tenant_id),
            channel=channel.value,
            tenant=tenant_id,
        )
        return template_merger.merge(durable, self._catalog.list_all(channel))

    # -- writes (durable tier only) -----------------------------------------

    def upsert(
        self,
        template: NotificationTemplate,
        tenant_id: int,
        application: str | None = None,
    ) -> NotificationTemplate:
        """Create or replace a template; returns the normalized template stored."""
        template = validate_template_for_write(
            template, max_length=self._settings.scenario_max_length
        )
        validate_application(application)
        self._guard(
            "write",
            lambda: self._store.write(template, tenant_id, application),
            scenario=template.scenario,
            locale=template.locale,
            channel=template.channel.value,
            scope=str(TemplateScope(tenant_id, application)),
        )
        logger.debug(
            "Template %r (%s, locale=%s) upserted for %s",
            template.scenario,
            template.channel.value,
            template.locale,
            TemplateScope(tenant_id, application),
        )
        return template

    def delete(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        self._validate_scenario(scenario)
        locale = normalize_locale(locale)
        validate_application(application)
        self._guard(
            "delete",
            lambda: self._store.delete(scenario, locale, channel, tenant_id, application),
            scenario=scenario,
            locale=locale,
            channel=channel.value,
            scope=str(TemplateScope(tenant_id, application)),
        )

    def delete_all(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        """Delete every locale of a scenario in one scope."""
        self._validate_scenario(scenario)
        validate_application(application)
        if not self._durable_scenario_exists(scenario, channel, tenant_id):
            return
        self._guard(
            "delete_all",
            lambda: self._store.delete_all(scenario, channel, tenant_id, application),
            scenario=scenario,
            channel=channel.value,
            scope=str(TemplateScope(tenant_id, application)),
        )

    def add_scenario(
        self, scenario: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        self._validate_scenario(scenario)
        if self._durable_scenario_exists(scenario, channel, tenant_id):
            raise DuplicateScenarioError(scenario, channel.value, tenant_id)
        self._guard(
            "add_scenario",
            lambda: self._scenarios.add_scenario(scenario, channel, tenant_id),
            scenario=scenario,
            channel=channel.value,
            tenant=tenant_id,
        )

    def delete_scenario(
        self, scenario: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        """Remove a durable scenario and all of its templates.

        Default-catalog scenarios cannot be removed; they stay resolvable.
        """
        self._validate_scenario(scenario)
        if not self._durable_scenario_exists(scenario, channel, tenant_id):
            return
        self._guard(
            "delete_scenario",
            lambda: self._scenarios.delete_scenario(scenario, channel, tenant_id),
            scenario=scenario,
            channel=channel.value,
            tenant=tenant_id,
        )

    def seed_defaults(self, channel: NotificationChannel, tenant_id: int) -> int:
        """Copy catalog defaults into the tenant without touching existing ones."""
        added = 0
        for template in self._catalog.list_all(channel):
            if self._exists_in_store(template.scenario, template.locale, channel, tenant_id):
                continue
            self.upsert(template, tenant_id)
            added += 1
        logger.debug(
            "Added %d default %s templates to tenant %s", added, channel.value, tenant_id
        )
        return added

    def _exists_in_store(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> bool:
        stored = self._guard(
            "read",
            lambda: self._store.read(scenario, locale, channel, tenant_id, application),
            scenario=scenario,
            locale=locale,
            channel=channel.value,
        )
        return stored is not None

    # -- helpers ------------------------------------------------------------

    def _validate_scenario(self, scenario: str) -> None:
        validate_scenario(scenario, max_length=self._settings.scenario_max_length)

    def _durable_scenario_exists(
        self, scenario: str, channel: NotificationChannel, tenant_id: int
    ) -> bool:
        return self._guard(
            "scenario_exists",
            lambda: self._scenarios.scenario_exists(scenario, channel, tenant_id),
            scenario=scenario,
            channel=channel.value,
            tenant=tenant_id,
        )

    @staticmethod
    def _guard(operation: str, call: Callable[[], R], **context: Any) -> R:
        """Run a durable-tier call, adding context to whatever it raises."""
        try:
            return call()
        except TemplateError as e:
            raise e.with_context(operation=operation, **context)
        except Exception as e:  # noqa: BLE001
            raise TemplateStoreError(
                f"Template store {operation} failed: {e}", operation=operation, **context
            ) from e
