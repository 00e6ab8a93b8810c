"""MongoConnectionManager — pymongo client lifecycle and health check."""

from __future__ import annotations

from typing import Any

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from ...exceptions import TemplateStoreError


class MongoConnectionManager:
    """Wrap a pymongo client with lifecycle and health-check helpers."""

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        database: str = "notifications",
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._connect_timeout_ms = connect_timeout_ms
        self._kwargs = kwargs
        self._client: MongoClient[Any] | None = None

    @classmethod
    def from_client(
        cls, client: Any, *, database: str = "notifications"
    ) -> MongoConnectionManager:
        """Adopt an already-built client (shared pool, or mongomock in tests)."""
        manager = cls(database=database)
        manager._client = client
        return manager

    @property
    def database_name(self) -> str:
        return self._database

    def connect(self) -> MongoClient[Any]:
        """Create and cache the client. Idempotent."""
        if self._client is not None:
            return self._client
        try:
            self._client = MongoClient(
                self._url,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                connectTimeoutMS=self._connect_timeout_ms,
                **self._kwargs,
            )
            return self._client
        except PyMongoError as e:
            raise TemplateStoreError(
                f"Cannot connect to MongoDB: {e}", operation="connect"
            ) from e

    @property
    def client(self) -> MongoClient[Any]:
        """Return the client; raises if not connected."""
        if self._client is None:
            raise TemplateStoreError(
                "Not connected; call connect() first", operation="connect"
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def health_check(self) -> bool:
        """Ping the server; return True if reachable."""
        if self._client is None:
            return False
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError:
            return False
