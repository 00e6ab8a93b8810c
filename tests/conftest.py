"""Test configuration for cqrs-ddd-notification-templates."""

from __future__ import annotations

import pytest

from cqrs_ddd_templates.catalog import DefaultTemplateCatalog
from cqrs_ddd_templates.config import TemplateSettings
from cqrs_ddd_templates.resolver import LayeredResolver
from cqrs_ddd_templates.stores.memory import InMemoryTemplateStore
from cqrs_ddd_templates.template import NotificationChannel, NotificationTemplate

TENANT = 1
OTHER_TENANT = 2


def email(
    scenario: str = "Password Reset",
    locale: str = "en-us",
    body: str = "Reset it here",
    **fields,
) -> NotificationTemplate:
    """Build an email template with sensible defaults."""
    fields.setdefault("subject", f"{scenario} ({locale})")
    return NotificationTemplate(
        scenario=scenario,
        channel=NotificationChannel.EMAIL,
        locale=locale,
        body=body,
        **fields,
    )


def sms(
    scenario: str = "SMS OTP", locale: str = "en-us", body: str = "Code: {{ otp }}"
) -> NotificationTemplate:
    return NotificationTemplate(
        scenario=scenario, channel=NotificationChannel.SMS, locale=locale, body=body
    )


@pytest.fixture
def settings() -> TemplateSettings:
    return TemplateSettings()


@pytest.fixture
def catalog(settings: TemplateSettings) -> DefaultTemplateCatalog:
    """Small catalog with one default per channel."""
    return DefaultTemplateCatalog(
        [
            email(body="Default reset body", subject="Reset your password"),
            sms(body="Default OTP {{ otp }}"),
        ],
        settings,
    )


@pytest.fixture
def store() -> InMemoryTemplateStore:
    return InMemoryTemplateStore()


@pytest.fixture
def resolver(
    store: InMemoryTemplateStore,
    catalog: DefaultTemplateCatalog,
    settings: TemplateSettings,
) -> LayeredResolver:
    return LayeredResolver(store, catalog, settings)
