"""Input validation and normalization for scenarios, locales and templates."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from .exceptions import TemplateValidationError
from .template import NotificationChannel, normalize_name

if TYPE_CHECKING:
    from .template import NotificationTemplate

_SCENARIO_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 _.\-]*$")
_LOCALE_PATTERN = re.compile(r"^[a-z]{2,3}(-[a-z0-9]{2,8})*$")
_APPLICATION_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_:\-]*$")

CHARSET_UTF_8 = "charset=UTF-8"


def validate_scenario(scenario: str | None, *, max_length: int = 255) -> str:
    """Return the display name unchanged, or raise naming the ``scenario`` field."""
    if scenario is None or not scenario.strip():
        raise TemplateValidationError.for_field(
            "scenario", "Scenario display name cannot be blank"
        )
    if len(scenario) > max_length:
        raise TemplateValidationError.for_field(
            "scenario",
            f"Scenario display name exceeds {max_length} characters",
            scenario=scenario,
        )
    if not _SCENARIO_PATTERN.match(scenario):
        raise TemplateValidationError.for_field(
            "scenario",
            f"Scenario display name {scenario!r} contains invalid characters",
            scenario=scenario,
        )
    return scenario


def normalize_scenario(scenario: str | None, *, max_length: int = 255) -> str:
    return normalize_name(validate_scenario(scenario, max_length=max_length))


def normalize_locale(locale: str | None, *, field_name: str = "locale") -> str:
    """Lowercase the tag and use ``-`` as separator (``en_US`` -> ``en-us``)."""
    if locale is None or not locale.strip():
        raise TemplateValidationError.for_field(field_name, "Locale cannot be blank")
    normalized = locale.strip().replace("_", "-").lower()
    if not _LOCALE_PATTERN.match(normalized):
        raise TemplateValidationError.for_field(
            field_name, f"Locale {locale!r} is not a valid locale tag", locale=locale
        )
    return normalized


def validate_application(application: str | None) -> str | None:
    if application is None:
        return None
    if not application.strip() or not _APPLICATION_PATTERN.match(application):
        raise TemplateValidationError.for_field(
            "application",
            f"Application id {application!r} is not valid",
            application=application,
        )
    return application


def ensure_charset(content_type: str | None) -> str | None:
    """Email content is always UTF-8; add the charset when it is missing."""
    if content_type is None:
        return None
    if "charset" in content_type.lower():
        return content_type
    return f"{content_type}; {CHARSET_UTF_8}"


def validate_template_for_write(
    template: NotificationTemplate, *, max_length: int = 255
) -> NotificationTemplate:
    """Validate a template before it reaches a durable store.

    Returns a copy with the locale normalized.
    """
    errors: dict[str, list[str]] = {}

    try:
        validate_scenario(template.scenario, max_length=max_length)
    except TemplateValidationError as e:
        errors.update(e.errors)

    locale = template.locale
    try:
        locale = normalize_locale(template.locale)
    except TemplateValidationError as e:
        errors.update(e.errors)

    if not template.is_usable:
        errors.setdefault("body", []).append("Template body cannot be blank")

    if template.channel is NotificationChannel.SMS:
        for field_name in ("subject", "footer", "content_type"):
            if getattr(template, field_name) is not None:
                errors.setdefault(field_name, []).append(
                    f"SMS templates do not carry a {field_name}"
                )

    if errors:
        raise TemplateValidationError(
            errors, scenario=template.scenario, locale=template.locale
        )

    if locale != template.locale:
        return template.model_copy(update={"locale": locale})
    return template
