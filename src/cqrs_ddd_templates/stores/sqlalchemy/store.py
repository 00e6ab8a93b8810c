"""SQLAlchemyTemplateStore — relational durable tier on a sync sessionmaker."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ...exceptions import TemplateStoreError
from ...template import NotificationChannel, NotificationTemplate, normalize_name
from ...validation import ensure_charset
from .models import AppTemplateModel, Base, OrgTemplateModel, ScenarioModel

if TYPE_CHECKING:
    import builtins
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine

logger = logging.getLogger("cqrs_ddd.templates.stores.sqlalchemy")

TemplateModel = type[OrgTemplateModel] | type[AppTemplateModel]


def create_schema(engine: Engine) -> None:
    """Create the scenario and template tables if they do not exist."""
    Base.metadata.create_all(engine)


class SQLAlchemyTemplateStore:
    """
    Implementation of ``ITemplateStore`` and ``IScenarioCatalog`` on three
    tables: ``notification_scenario``, ``org_notification_template`` and
    ``app_notification_template``.

    Every public method runs in its own transaction
    (``sessionmaker.begin()``), so a scenario deletion removes app overrides,
    org templates and the scenario row atomically. ``SQLAlchemyError`` is
    wrapped in :class:`TemplateStoreError` with the driver error chained.

    Usage::

        engine = create_engine("postgresql+psycopg://...")
        create_schema(engine)
        store = SQLAlchemyTemplateStore(sessionmaker(engine))
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_engine(cls, engine: Engine) -> SQLAlchemyTemplateStore:
        return cls(sessionmaker(engine))

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        try:
            with self._session_factory.begin() as session:
                yield session
        except SQLAlchemyError as e:
            logger.debug("SQL template store %s failed", operation, exc_info=True)
            raise TemplateStoreError(
                f"SQL template store {operation} failed: {e}", operation=operation
            ) from e

    # -- ITemplateStore -----------------------------------------------------

    def read(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> NotificationTemplate | None:
        model = _model_for(application)
        with self._transaction("read") as session:
            stmt = _scope_query(model, scenario, channel, tenant_id, application).where(
                model.locale == locale
            )
            row = session.scalars(stmt).one_or_none()
            return _to_template(row) if row is not None else None

    def write(
        self,
        template: NotificationTemplate,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        model = _model_for(application)
        content = {
            "subject": template.subject,
            "body": template.body,
            "footer": template.footer,
            "content_type": template.content_type,
        }
        with self._transaction("write") as session:
            scenario_row = self._get_or_create_scenario(
                session, template.scenario, template.channel, tenant_id
            )
            stmt = select(model).where(
                model.scenario_id == scenario_row.id, model.locale == template.locale
            )
            if application is not None:
                stmt = stmt.where(AppTemplateModel.application == application)
            row = session.scalars(stmt).one_or_none()
            if row is None:
                extra: dict[str, Any] = {}
                if application is not None:
                    extra["application"] = application
                session.add(
                    model(
                        scenario_id=scenario_row.id,
                        locale=template.locale,
                        **content,
                        **extra,
                    )
                )
            else:
                for attr, value in content.items():
                    setattr(row, attr, value)

    def delete(
        self,
        scenario: str,
        locale: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        with self._transaction("delete") as session:
            scenario_id = _scenario_id(session, scenario, channel, tenant_id)
            if scenario_id is None:
                return
            session.execute(
                _scoped_delete(scenario_id, application).where(
                    _model_for(application).locale == locale
                )
            )

    def delete_all(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> None:
        with self._transaction("delete_all") as session:
            scenario_id = _scenario_id(session, scenario, channel, tenant_id)
            if scenario_id is not None:
                session.execute(_scoped_delete(scenario_id, application))

    def list(
        self,
        scenario: str,
        channel: NotificationChannel,
        tenant_id: int,
        application: str | None = None,
    ) -> builtins.list[NotificationTemplate]:
        model = _model_for(application)
        with self._transaction("list") as session:
            stmt = _scope_query(model, scenario, channel, tenant_id, application)
            return [_to_template(row) for row in session.scalars(stmt)]

    def list_all(
        self, channel: NotificationChannel, tenant_id: int
    ) -> builtins.list[NotificationTemplate]:
        with self._transaction("list_all") as session:
            stmt = (
                select(OrgTemplateModel)
                .join(OrgTemplateModel.scenario)
                .where(
                    ScenarioModel.tenant_id == tenant_id,
                    ScenarioModel.channel == channel,
                )
            )
            return [_to_template(row) for row in session.scalars(stmt)]

    # -- IScenarioCatalog ---------------------------------------------------

    def add_scenario(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        with self._transaction("add_scenario") as session:
            self._get_or_create_scenario(session, display_name, channel, tenant_id)

    def scenario_exists(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> bool:
        with self._transaction("scenario_exists") as session:
            return _scenario_id(session, display_name, channel, tenant_id) is not None

    def list_scenarios(
        self, channel: NotificationChannel, tenant_id: int
    ) -> builtins.list[str]:
        with self._transaction("list_scenarios") as session:
            stmt = select(ScenarioModel.display_name).where(
                ScenarioModel.tenant_id == tenant_id, ScenarioModel.channel == channel
            )
            return list(session.scalars(stmt))

    def delete_scenario(
        self, display_name: str, channel: NotificationChannel, tenant_id: int
    ) -> None:
        with self._transaction("delete_scenario") as session:
            scenario_id = _scenario_id(session, display_name, channel, tenant_id)
            if scenario_id is None:
                return
            session.execute(
                delete(AppTemplateModel).where(AppTemplateModel.scenario_id == scenario_id)
            )
            session.execute(
                delete(OrgTemplateModel).where(OrgTemplateModel.scenario_id == scenario_id)
            )
            session.execute(delete(ScenarioModel).where(ScenarioModel.id == scenario_id))

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _get_or_create_scenario(
        session: Session,
        display_name: str,
        channel: NotificationChannel,
        tenant_id: int,
    ) -> ScenarioModel:
        stmt = select(ScenarioModel).where(
            ScenarioModel.tenant_id == tenant_id,
            ScenarioModel.channel == channel,
            ScenarioModel.name == normalize_name(display_name),
        )
        row = session.scalars(stmt).one_or_none()
        if row is None:
            row = ScenarioModel(
                tenant_id=tenant_id,
                channel=channel,
                name=normalize_name(display_name),
                display_name=display_name,
            )
            session.add(row)
            session.flush()
        return row


def _model_for(application: str | None) -> TemplateModel:
    return OrgTemplateModel if application is None else AppTemplateModel


def _scenario_id(
    session: Session, display_name: str, channel: NotificationChannel, tenant_id: int
) -> int | None:
    stmt = select(ScenarioModel.id).where(
        ScenarioModel.tenant_id == tenant_id,
        ScenarioModel.channel == channel,
        ScenarioModel.name == normalize_name(display_name),
    )
    return session.scalars(stmt).one_or_none()


def _scope_query(
    model: TemplateModel,
    scenario: str,
    channel: NotificationChannel,
    tenant_id: int,
    application: str | None,
) -> Any:
    stmt = (
        select(model)
        .join(model.scenario)
        .where(
            ScenarioModel.tenant_id == tenant_id,
            ScenarioModel.channel == channel,
            ScenarioModel.name == normalize_name(scenario),
        )
    )
    if application is not None:
        stmt = stmt.where(AppTemplateModel.application == application)
    return stmt


def _scoped_delete(scenario_id: int, application: str | None) -> Any:
    if application is None:
        return delete(OrgTemplateModel).where(OrgTemplateModel.scenario_id == scenario_id)
    return delete(AppTemplateModel).where(
        AppTemplateModel.scenario_id == scenario_id,
        AppTemplateModel.application == application,
    )


def _to_template(row: OrgTemplateModel | AppTemplateModel) -> NotificationTemplate:
    channel = row.scenario.channel
    content_type = row.content_type
    if channel is NotificationChannel.EMAIL:
        content_type = ensure_charset(content_type)
    return NotificationTemplate(
        scenario=row.scenario.display_name,
        channel=channel,
        locale=row.locale,
        subject=row.subject,
        body=row.body,
        footer=row.footer,
        content_type=content_type,
    )
