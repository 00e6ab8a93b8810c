"""SQLAlchemy durable template store."""

from __future__ import annotations

from cqrs_ddd_templates.stores.sqlalchemy.models import (
    AppTemplateModel,
    Base,
    OrgTemplateModel,
    ScenarioModel,
)
from cqrs_ddd_templates.stores.sqlalchemy.store import (
    SQLAlchemyTemplateStore,
    create_schema,
)

__all__ = [
    "AppTemplateModel",
    "Base",
    "OrgTemplateModel",
    "SQLAlchemyTemplateStore",
    "ScenarioModel",
    "create_schema",
]
