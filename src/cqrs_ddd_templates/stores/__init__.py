"""Durable template stores.

Only the in-memory store is imported eagerly; the SQLAlchemy and MongoDB
stores live in ``stores.sqlalchemy`` and ``stores.mongo`` and need their
optional extras installed.
"""

from __future__ import annotations

from cqrs_ddd_templates.stores.memory import InMemoryTemplateStore

__all__ = ["InMemoryTemplateStore"]
