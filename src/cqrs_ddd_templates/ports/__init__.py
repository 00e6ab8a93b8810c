"""Ports — protocols the resolution engine depends on."""

from __future__ import annotations

from cqrs_ddd_templates.ports.cache import IResolutionCache
from cqrs_ddd_templates.ports.scenarios import IScenarioCatalog
from cqrs_ddd_templates.ports.store import ITemplateStore
from cqrs_ddd_templates.ports.tenancy import ITenantResolver

__all__ = [
    "IResolutionCache",
    "IScenarioCatalog",
    "ITemplateStore",
    "ITenantResolver",
]
