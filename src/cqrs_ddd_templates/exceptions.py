"""Exception hierarchy for notification template resolution."""

from __future__ import annotations

import enum
from typing import Any


class ErrorKind(str, enum.Enum):
    """Failure classes a caller can branch on without inspecting messages."""

    CLIENT = "client"
    NOT_FOUND = "not_found"
    CONTENT = "content"
    SERVER = "server"


class TemplateError(Exception):
    """Root exception for the notification templates package.

    Carries a :class:`ErrorKind` and a structured ``context`` dict
    (scenario, locale, channel, tier, scope, ...).
    """

    kind: ErrorKind = ErrorKind.SERVER

    def __init__(self, message: str, **context: Any) -> None:
        self.context: dict[str, Any] = {
            k: v for k, v in context.items() if v is not None
        }
        super().__init__(message)

    def with_context(self, **context: Any) -> TemplateError:
        """Attach context without replacing keys set closer to the failure."""
        for key, value in context.items():
            if value is not None:
                self.context.setdefault(key, value)
        return self


# ── Client errors ────────────────────────────────────────────────────


class TemplateClientError(TemplateError):
    """The request itself cannot be satisfied. Never retried."""

    kind = ErrorKind.CLIENT

    def __init__(self, message: str, field: str | None = None, **context: Any):
        self.field = field
        super().__init__(message, **context)


class TemplateValidationError(TemplateClientError):
    """Raised when input fails validation.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(
        self,
        errors: dict[str, list[str]] | str,
        **context: Any,
    ) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        else:
            self.errors = errors
        field = next(iter(self.errors), None)
        super().__init__(str(self.errors), field=field, **context)

    @classmethod
    def for_field(cls, field: str, message: str, **context: Any) -> TemplateValidationError:
        return cls({field: [message]}, **context)


class DuplicateScenarioError(TemplateClientError):
    """Raised when adding a scenario that already exists for the tenant."""

    def __init__(self, scenario: str, channel: str, tenant: object) -> None:
        super().__init__(
            f"Scenario {scenario!r} already exists for channel {channel} "
            f"in tenant {tenant}",
            field="scenario",
            scenario=scenario,
            channel=channel,
            tenant=tenant,
        )


class ScenarioNotFoundError(TemplateClientError):
    """Raised when listing templates of a scenario unknown to every tier."""

    def __init__(self, scenario: str, channel: str, tenant: object) -> None:
        super().__init__(
            f"Scenario {scenario!r} not found for channel {channel} "
            f"in tenant {tenant}",
            field="scenario",
            scenario=scenario,
            channel=channel,
            tenant=tenant,
        )


class TemplateContentError(TemplateClientError):
    """A template was located but its content is unusable (blank body)."""

    kind = ErrorKind.CONTENT

    def __init__(self, scenario: str, locale: str, **context: Any) -> None:
        super().__init__(
            f"Template {scenario!r} in locale {locale!r} has no content",
            field="body",
            scenario=scenario,
            locale=locale,
            **context,
        )


# ── Terminal miss ────────────────────────────────────────────────────


class TemplateNotFoundError(TemplateError):
    """No content for the scenario exists in any tier.

    Never expected in a correctly provisioned deployment: the default-locale
    template is missing from both the durable store and the default catalog.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self, scenario: str, locale: str, channel: str, **context: Any
    ) -> None:
        super().__init__(
            f"No template found for {scenario}/{channel}/{locale}",
            scenario=scenario,
            locale=locale,
            channel=channel,
            **context,
        )


# ── Server errors ────────────────────────────────────────────────────


class TemplateServerError(TemplateError):
    """Base class for infrastructure failures. Cause is always chained."""

    kind = ErrorKind.SERVER


class TemplateStoreError(TemplateServerError):
    """Raised when a durable template store operation fails."""


class TenantResolutionError(TemplateServerError):
    """Raised when a tenant domain cannot be mapped to a tenant id."""

    def __init__(self, tenant_domain: str, reason: str | None = None) -> None:
        self.tenant_domain = tenant_domain
        msg = f"Cannot resolve tenant {tenant_domain!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, tenant=tenant_domain)


class TemplateCacheError(TemplateServerError):
    """Raised when the resolution cache cannot guarantee freshness."""


class CatalogError(TemplateServerError):
    """Raised when the bundled default catalog is malformed."""


__all__: list[str] = [
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
