"""InMemoryTemplateStore — dict-backed durable tier for tests and embedding."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from ..template import NotificationChannel, normalize_name
from ..validation import ensure_charset

if TYPE_CHECKING:
    import builtins

    from ..template import NotificationTemplate

_ScenarioKey = tuple[int, NotificationChannel, str]


class InMemoryTemplateStore:
    """In-memory implementation of ``ITemplateStore`` and ``IScenarioCatalog``.

    Org-level templates and app-level overrides live in separate dicts keyed
    by ``(tenant_id, channel, normalized scenario)``, mirroring the relational
    layout. A single lock serializes every operation.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._scenarios: dict[_ScenarioKey, str] = {}
        self._org: dict[_ScenarioKey, dict[str, NotificationTemplate]] = {}
        self._apps: dict[_ScenarioKey, dict[str, dict[str, NotificationTemplate]]] = {}

    # -- ITemplateStore -----------------------------------------------------

    def read(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> NotificationTemplate | None:
        key = _key(scenario, channel, tenant_id)
        with self._lock:
            template = self._locales(key, application).get(locale)
        return _with_charset(template) if template is not None else None

    def write(
        self,
        template: NotificationTemplate,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        key = _key(template.scenario, template.channel, tenant_id)
        with self._lock:
            self._scenarios.setdefault(key, template.scenario)
            if application is None:
                self._org.setdefault(key, {})[template.locale] = template
            else:
                apps = self._apps.setdefault(key, {})
                apps.setdefault(application, {})[template.locale] = template

    def delete(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        key = _key(scenario, channel, tenant_id)
        with self._lock:
            self._locales(key, application).pop(locale, None)

    def delete_all(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        key = _key(scenario, channel, tenant_id)
        with self._lock:
            if application is None:
                self._org.pop(key, None)
            else:
                self._apps.get(key, {}).pop(application, None)

    def list(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> builtins.list[NotificationTemplate]:
        key = _key(scenario, channel, tenant_id)
        with self._lock:
            templates = list(self._locales(key, application).values())
        return [_with_charset(t) for t in templates]

    def list_all(
        self, channel: NotificationChannel, tenant_id: int
    ) -> builtins.list[NotificationTemplate]:
        with self._lock:
            templates = [
                template
                for (tenant, chan, _), locales in self._org.items()
                if tenant == tenant_id and chan is channel
                for template in locales.values()
            ]
        return [_with_charset(t) for t in templates]

    # -- IScenarioCatalog ---------------------------------------------------

    def add_scenario(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        with self._lock:
            self._scenarios.setdefault(_key(display_name, channel, tenant_id), display_name)

    def scenario_exists(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> bool:
        with self._lock:
            return _key(display_name, channel, tenant_id) in self._scenarios

    def list_scenarios(
        self, channel: NotificationChannel, tenant_id: int
    ) -> builtins.list[str]:
        with self._lock:
            return [
                name
                for (tenant, chan, _), name in self._scenarios.items()
                if tenant == tenant_id and chan is channel
            ]

    def delete_scenario(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        key = _key(display_name, channel, tenant_id)
        with self._lock:
            self._apps.pop(key, None)
            self._org.pop(key, None)
            self._scenarios.pop(key, None)

    def _locales(
        self, key: _ScenarioKey, application: str | None
    ) -> dict[str, NotificationTemplate]:
        """Locale map of one scope; caller holds the lock."""
        if application is None:
            return self._org.get(key, {})
        return self._apps.get(key, {}).get(application, {})

    # ── Test helpers ─────────────────────────────────────────────────

    def clear(self) -> None:
        with self._lock:
            self._scenarios.clear()
            self._org.clear()
            self._apps.clear()


def _key(scenario: str, channel: NotificationChannel, tenant_id: int) -> _ScenarioKey:
    return tenant_id, channel, normalize_name(scenario)


def _with_charset(template: NotificationTemplate) -> NotificationTemplate:
    if template.channel is not NotificationChannel.EMAIL or not template.content_type:
        return template
    content_type = ensure_charset(template.content_type)
    if content_type == template.content_type:
        return template
    return template.model_copy(update={"content_type": content_type})
