"""MongoDB durable template store."""

from __future__ import annotations

from cqrs_ddd_templates.stores.mongo.connection import MongoConnectionManager
from cqrs_ddd_templates.stores.mongo.store import MongoTemplateStore

__all__ = ["MongoConnectionManager", "MongoTemplateStore"]
