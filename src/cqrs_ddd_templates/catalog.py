"""DefaultTemplateCatalog — immutable, baked-in fallback templates."""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from .exceptions import CatalogError, TemplateValidationError
from .template import NotificationChannel, NotificationTemplate, normalize_name
from .validation import normalize_locale

if TYPE_CHECKING:
    import builtins
    from collections.abc import Iterable, Iterator

    from .config import TemplateSettings

logger = logging.getLogger("cqrs_ddd.templates.catalog")

BUNDLED_DEFAULTS_DIR = Path(__file__).parent / "defaults"
BUNDLED_LOCALE = "en-us"

_FRONTMATTER_FIELDS = {
    "name": "scenario",
    "subject": "subject",
    "footer": "footer",
    "content-type": "content_type",
}


class DefaultTemplateCatalog:
    """
    Read-only set of default templates, one per scenario x channel default locale.

    Built once at process start and injected into the resolver; it is never
    mutated or reloaded at runtime. Lookups are tenant and application agnostic.
    """

    def __init__(
        self,
        templates: Iterable[NotificationTemplate],
        settings: TemplateSettings,
    ) -> None:
        self._settings = settings
        entries: dict[tuple[NotificationChannel, str], NotificationTemplate] = {}
        for template in templates:
            default_locale = settings.default_locale(template.channel)
            if template.locale != default_locale:
                raise CatalogError(
                    f"Default template {template.scenario!r} ({template.channel.value}) "
                    f"uses locale {template.locale!r}; expected {default_locale!r}",
                    scenario=template.scenario,
                    channel=template.channel.value,
                )
            if not template.is_usable:
                raise CatalogError(
                    f"Default template {template.scenario!r} "
                    f"({template.channel.value}) has no body",
                    scenario=template.scenario,
                    channel=template.channel.value,
                )
            key = (template.channel, template.normalized_scenario)
            if key in entries:
                raise CatalogError(
                    f"Duplicate default template {template.scenario!r} "
                    f"for channel {template.channel.value}",
                    scenario=template.scenario,
                    channel=template.channel.value,
                )
            entries[key] = template
        self._entries = MappingProxyType(entries)

    # -- lookups ------------------------------------------------------------

    def get(
        self,
        scenario: str,
        channel: NotificationChannel,
        locale: str | None = None,
    ) -> NotificationTemplate | None:
        """Default-locale template of a scenario, or None.

        Asking for any locale other than the channel default returns None.
        """
        if locale is not None and locale != self._settings.default_locale(channel):
            return None
        return self._entries.get((channel, normalize_name(scenario)))

    def contains(self, scenario: str, channel: NotificationChannel) -> bool:
        return (channel, normalize_name(scenario)) in self._entries

    def list(
        self, scenario: str, channel: NotificationChannel
    ) -> builtins.list[NotificationTemplate]:
        template = self.get(scenario, channel)
        return [template] if template is not None else []

    def list_all(
        self, channel: NotificationChannel
    ) -> builtins.list[NotificationTemplate]:
        return [t for (c, _), t in self._entries.items() if c is channel]

    def scenarios(self, channel: NotificationChannel) -> builtins.list[str]:
        return [t.scenario for t in self.list_all(channel)]

    def __iter__(self) -> Iterator[NotificationTemplate]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    # -- construction -------------------------------------------------------

    @classmethod
    def empty(cls, settings: TemplateSettings) -> DefaultTemplateCatalog:
        return cls((), settings)

    @classmethod
    def bundled(cls, settings: TemplateSettings) -> DefaultTemplateCatalog:
        """Catalog of the defaults shipped inside this package.

        The shipped files are written in ``en-us``. Settings whose channel
        default locale differs need their own catalog from
        :meth:`from_directory`.
        """
        mismatched = [
            channel.value
            for channel in NotificationChannel
            if settings.default_locale(channel) != BUNDLED_LOCALE
        ]
        if mismatched:
            raise CatalogError(
                f"Bundled defaults are written in {BUNDLED_LOCALE!r} but the "
                f"default locale of {', '.join(mismatched)} differs; load a "
                "catalog with DefaultTemplateCatalog.from_directory instead",
                channels=mismatched,
            )
        return cls.from_directory(BUNDLED_DEFAULTS_DIR, settings)

    @classmethod
    def from_directory(
        cls, templates_dir: Path, settings: TemplateSettings
    ) -> DefaultTemplateCatalog:
        """
        Load defaults using a Jinja2 ``FileSystemLoader``.

        Directory structure: ``{channel}/{scenario}_{locale}.j2``
        """
        from jinja2 import Environment, FileSystemLoader

        if not templates_dir.is_dir():
            raise CatalogError(f"Default templates directory {templates_dir} not found")

        loader = FileSystemLoader(str(templates_dir))
        env = Environment(loader=loader, autoescape=False)

        templates = []
        for name in env.list_templates(extensions=["j2"]):
            source, _, _ = loader.get_source(env, name)
            templates.append(_parse_default_template(name, source))

        catalog = cls(templates, settings)
        logger.debug("Loaded %d default templates from %s", len(catalog), templates_dir)
        return catalog


def _parse_default_template(name: str, source: str) -> NotificationTemplate:
    """Build a template from ``{channel}/{scenario}_{locale}.j2`` and its source."""
    parts = name.split("/")
    if len(parts) != 2:
        raise CatalogError(f"Default template {name!r} is not under a channel directory")
    channel_dir, filename = parts
    try:
        channel = NotificationChannel(channel_dir.lower())
    except ValueError as e:
        raise CatalogError(f"Unknown channel directory {channel_dir!r}") from e

    stem = filename[: -len(".j2")]
    if "_" not in stem:
        raise CatalogError(f"Default template {name!r} has no locale suffix")
    slug, raw_locale = stem.rsplit("_", 1)
    try:
        locale = normalize_locale(raw_locale)
    except TemplateValidationError as e:
        raise CatalogError(f"Default template {name!r}: {e}") from e

    fields, body = _parse_template_content(source)
    fields.setdefault("scenario", slug)
    if channel is NotificationChannel.SMS:
        fields = {"scenario": fields["scenario"]}

    return NotificationTemplate(channel=channel, locale=locale, body=body, **fields)


def _parse_template_content(source: str) -> tuple[dict[str, str], str]:
    """
    Parse template content for optional front-matter.

    Format:
    ---
    Name: Password Reset
    Subject: Reset your password
    Content-Type: text/html
    ---
    Body content here...
    """
    lines = source.split("\n")
    if len(lines) > 1 and lines[0].strip() == "---":
        parts = source.split("---", 2)
        if len(parts) == 3:
            fields: dict[str, str] = {}
            for line in parts[1].strip().split("\n"):
                header, sep, value = line.partition(":")
                target = _FRONTMATTER_FIELDS.get(header.strip().lower())
                if sep and target:
                    fields[target] = value.strip()
            return fields, parts[2].strip()
    return {}, source.strip()
