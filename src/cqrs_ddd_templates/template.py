"""Template value objects, channel enum, scope and identity key."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


class NotificationChannel(str, enum.Enum):
    """Delivery media with distinct content shapes."""

    EMAIL = "email"
    SMS = "sms"


def normalize_name(display_name: str) -> str:
    """Storage form of a scenario display name: whitespace removed, lowercased."""
    return "".join(display_name.split()).lower()


class NotificationTemplate(BaseModel):
    """Immutable template content for one scenario/channel/locale.

    ``subject``, ``footer`` and ``content_type`` only apply to EMAIL.
    """

    model_config = ConfigDict(frozen=True)

    scenario: str
    channel: NotificationChannel
    locale: str
    body: str
    subject: str | None = None
    footer: str | None = None
    content_type: str | None = None

    @property
    def normalized_scenario(self) -> str:
        return normalize_name(self.scenario)

    @property
    def is_usable(self) -> bool:
        return bool(self.body and self.body.strip())


@dataclass(frozen=True)
class TemplateScope:
    """Where a durable template lives: tenant-wide or per application."""

    tenant_id: int
    application: str | None = None

    def __str__(self) -> str:
        if self.application is None:
            return f"tenant={self.tenant_id}"
        return f"tenant={self.tenant_id}/app={self.application}"


@dataclass(frozen=True)
class TemplateKey:
    """Identity and cache key: (normalized scenario, channel, application?).

    Tenant is deliberately absent; caches are partitioned per tenant by
    their owner.
    """

    scenario: str
    channel: NotificationChannel
    application: str | None = None

    @classmethod
    def of(
        cls,
        scenario: str,
        channel: NotificationChannel,
        application: str | None = None,
    ) -> TemplateKey:
        return cls(normalize_name(scenario), channel, application)

    def as_string(self) -> str:
        return f"{self.scenario}:{self.channel.value}:{self.application or '-'}"
