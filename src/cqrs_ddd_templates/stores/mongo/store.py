"""MongoTemplateStore — hierarchical durable tier, one document per scenario."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from pymongo.errors import PyMongoError

from ...exceptions import TemplateStoreError
from ...template import NotificationChannel, NotificationTemplate, normalize_name
from ...validation import ensure_charset

if TYPE_CHECKING:
    import builtins
    from collections.abc import Iterator

    from .connection import MongoConnectionManager

logger = logging.getLogger("cqrs_ddd.templates.stores.mongo")

_CONTENT_FIELDS = ("subject", "body", "footer", "content_type")


class MongoTemplateStore:
    """
    Implementation of ``ITemplateStore`` and ``IScenarioCatalog`` over a
    resource tree stored as one document per (tenant, channel, scenario)::

        {
          "_id": "42:email:passwordreset",
          "tenant_id": 42, "channel": "email",
          "name": "passwordreset", "display_name": "Password Reset",
          "templates": {"en-us": {"subject": ..., "body": ...}},
          "apps": {"billing": {"fr-fr": {...}}}
        }

    Templates are addressed with dotted paths (``templates.en-us``,
    ``apps.billing.fr-fr``). Every mutation touches a single document, so
    deleting a scenario is one atomic ``delete_one``.
    """

    def __init__(
        self,
        connection: MongoConnectionManager,
        collection: str = "notification_templates",
        *,
        database: str | None = None,
    ) -> None:
        self._connection = connection
        self._collection_name = collection
        self._database = database

    def _collection(self) -> Any:
        database_name = self._database or self._connection.database_name
        return self._connection.client.get_database(database_name).get_collection(
            self._collection_name
        )

    @contextmanager
    def _errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except PyMongoError as e:
            logger.debug("Mongo template store %s failed", operation, exc_info=True)
            raise TemplateStoreError(
                f"Mongo template store {operation} failed: {e}", operation=operation
            ) from e

    def ensure_indexes(self) -> None:
        """Index the listing fields; ``_id`` already covers point lookups."""
        with self._errors("ensure_indexes"):
            self._collection().create_index([("tenant_id", 1), ("channel", 1)])

    # -- ITemplateStore -----------------------------------------------------

    def read(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> NotificationTemplate | None:
        with self._errors("read"):
            doc = self._collection().find_one({"_id": _doc_id(scenario, channel, tenant_id)})
        if doc is None:
            return None
        content = _locales(doc, application).get(locale)
        return _to_template(doc, locale, content) if content else None

    def write(
        self,
        template: NotificationTemplate,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        content = {f: getattr(template, f) for f in _CONTENT_FIELDS}
        with self._errors("write"):
            self._collection().update_one(
                {"_id": _doc_id(template.scenario, template.channel, tenant_id)},
                {
                    "$set": {_path(application, template.locale): content},
                    "$setOnInsert": _scenario_fields(
                        template.scenario, template.channel, tenant_id
                    ),
                },
                upsert=True,
            )

    def delete(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        with self._errors("delete"):
            self._collection().update_one(
                {"_id": _doc_id(scenario, channel, tenant_id)},
                {"$unset": {_path(application, locale): ""}},
            )

    def delete_all(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        with self._errors("delete_all"):
            self._collection().update_one(
                {"_id": _doc_id(scenario, channel, tenant_id)},
                {"$unset": {_path(application): ""}},
            )

    def list(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> builtins.list[NotificationTemplate]:
        with self._errors("list"):
            doc = self._collection().find_one({"_id": _doc_id(scenario, channel, tenant_id)})
        if doc is None:
            return []
        return [
            _to_template(doc, locale, content)
            for locale, content in _locales(doc, application).items()
        ]

    def list_all(
        self, channel: NotificationChannel, tenant_id: int
    ) -> builtins.list[NotificationTemplate]:
        with self._errors("list_all"):
            docs = list(
                self._collection().find({"tenant_id": tenant_id, "channel": channel.value})
            )
        return [
            _to_template(doc, locale, content)
            for doc in docs
            for locale, content in doc.get("templates", {}).items()
        ]

    # -- IScenarioCatalog ---------------------------------------------------

    def add_scenario(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        with self._errors("add_scenario"):
            self._collection().update_one(
                {"_id": _doc_id(display_name, channel, tenant_id)},
                {"$setOnInsert": _scenario_fields(display_name, channel, tenant_id)},
                upsert=True,
            )

    def scenario_exists(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> bool:
        with self._errors("scenario_exists"):
            count = self._collection().count_documents(
                {"_id": _doc_id(display_name, channel, tenant_id)}, limit=1
            )
        return count > 0

    def list_scenarios(
        self, channel: NotificationChannel, tenant_id: int
    ) -> builtins.list[str]:
        with self._errors("list_scenarios"):
            docs = self._collection().find(
                {"tenant_id": tenant_id, "channel": channel.value},
                {"display_name": 1},
            )
            return [doc["display_name"] for doc in docs]

    def delete_scenario(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        with self._errors("delete_scenario"):
            self._collection().delete_one(
                {"_id": _doc_id(display_name, channel, tenant_id)}
            )


def _doc_id(scenario: str, channel: NotificationChannel, tenant_id: int) -> str:
    return f"{tenant_id}:{channel.value}:{normalize_name(scenario)}"


def _scenario_fields(
    display_name: str, channel: NotificationChannel, tenant_id: int
) -> dict[str, Any]:
    return {
        "tenant_id": tenant_id,
        "channel": channel.value,
        "name": normalize_name(display_name),
        "display_name": display_name,
    }


def _path(application: str | None, locale: str | None = None) -> str:
    """Dotted path of a scope subtree, or of one locale inside it."""
    base = "templates" if application is None else f"apps.{application}"
    return base if locale is None else f"{base}.{locale}"


def _locales(doc: dict[str, Any], application: str | None) -> dict[str, Any]:
    if application is None:
        return doc.get("templates") or {}
    return (doc.get("apps") or {}).get(application) or {}


def _to_template(
    doc: dict[str, Any], locale: str, content: dict[str, Any]
) -> NotificationTemplate:
    channel = NotificationChannel(doc["channel"])
    content_type = content.get("content_type")
    if channel is NotificationChannel.EMAIL:
        content_type = ensure_charset(content_type)
    return NotificationTemplate(
        scenario=doc["display_name"],
        channel=channel,
        locale=locale,
        subject=content.get("subject"),
        body=content.get("body") or "",
        footer=content.get("footer"),
        content_type=content_type,
    )
