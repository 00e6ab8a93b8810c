"""Settings for template resolution, injected through constructors."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .template import NotificationChannel
from .validation import normalize_locale

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_LOCALE = "en-us"


def _default_locales() -> Mapping[NotificationChannel, str]:
    return MappingProxyType(
        {
            NotificationChannel.EMAIL: DEFAULT_LOCALE,
            NotificationChannel.SMS: DEFAULT_LOCALE,
        }
    )


@dataclass(frozen=True)
class TemplateSettings:
    """
    Immutable configuration shared by resolver, stores and caches.

    ``default_locales`` holds exactly one fallback locale per channel.
    ``cache_ttl`` of ``None`` keeps entries until invalidated.
    """

    default_locales: Mapping[NotificationChannel, str] = field(
        default_factory=_default_locales
    )
    scenario_max_length: int = 255
    cache_ttl: int | None = 300
    cache_namespace: str = "templates"

    def __post_init__(self) -> None:
        missing = [c.value for c in NotificationChannel if c not in self.default_locales]
        if missing:
            raise ValueError(f"No default locale configured for: {', '.join(missing)}")
        normalized = {
            channel: normalize_locale(locale, field_name=f"default_locales.{channel.value}")
            for channel, locale in self.default_locales.items()
        }
        object.__setattr__(self, "default_locales", MappingProxyType(normalized))

    def default_locale(self, channel: NotificationChannel) -> str:
        return self.default_locales[channel]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TemplateSettings:
        """Build settings from plain config data (parsed file, env mapping).

        Example::

            TemplateSettings.from_mapping({
                "default_locales": {"email": "en-US", "sms": "en_GB"},
                "cache_ttl": 60,
            })
        """
        kwargs: dict[str, Any] = {}
        locales = data.get("default_locales")
        if locales:
            merged = dict(_default_locales())
            merged.update(
                {NotificationChannel(str(k).lower()): str(v) for k, v in locales.items()}
            )
            kwargs["default_locales"] = merged
        if "scenario_max_length" in data:
            kwargs["scenario_max_length"] = int(data["scenario_max_length"])
        if "cache_ttl" in data:
            ttl = data["cache_ttl"]
            kwargs["cache_ttl"] = None if ttl in (None, "", 0, "0") else int(ttl)
        if "cache_namespace" in data:
            kwargs["cache_namespace"] = str(data["cache_namespace"])
        return cls(**kwargs)
