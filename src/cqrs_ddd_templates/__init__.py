"""Layered, multi-tenant notification template resolution for CQRS/DDD."""

from __future__ import annotations

from .cache import CachingResolver, InMemoryResolutionCache, TenantCachePartition
from .catalog import DefaultTemplateCatalog
from .config import DEFAULT_LOCALE, TemplateSettings
from .exceptions import (
    CatalogError,
    DuplicateScenarioError,
    ErrorKind,
    ScenarioNotFoundError,
    TemplateCacheError,
    TemplateClientError,
    TemplateContentError,
    TemplateError,
    TemplateNotFoundError,
    TemplateServerError,
    TemplateStoreError,
    TemplateValidationError,
    TenantResolutionError,
)
from .fallback import FallbackState, LocaleFallbackPolicy
from .manager import TemplateManager
from .merge import ResultMerger
from .ports import IResolutionCache, IScenarioCatalog, ITemplateStore, ITenantResolver
from .resolver import LayeredResolver
from .stores import InMemoryTemplateStore
from .template import NotificationChannel, NotificationTemplate, TemplateKey, TemplateScope
from .tenancy import CachingTenantResolver, StaticTenantResolver

__all__ = [
    # Model
    "NotificationChannel",
    "NotificationTemplate",
    "TemplateKey",
    "TemplateScope",
    # Engine
    "DefaultTemplateCatalog",
    "FallbackState",
    "LayeredResolver",
    "LocaleFallbackPolicy",
    "ResultMerger",
    "TemplateManager",
    # Config
    "DEFAULT_LOCALE",
    "TemplateSettings",
    # Ports
    "IResolutionCache",
    "IScenarioCatalog",
    "ITemplateStore",
    "ITenantResolver",
    # Adapters
    "CachingResolver",
    "CachingTenantResolver",
    "InMemoryResolutionCache",
    "InMemoryTemplateStore",
    "StaticTenantResolver",
    "TenantCachePartition",
    # Exceptions
    "CatalogError",
    "DuplicateScenarioError",
    "ErrorKind",
    "ScenarioNotFoundError",
    "TemplateCacheError",
    "TemplateClientError",
    "TemplateContentError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateServerError",
    "TemplateStoreError",
    "TemplateValidationError",
    "TenantResolutionError",
]
