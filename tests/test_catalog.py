"""Tests for DefaultTemplateCatalog."""

from pathlib import Path

import pytest

from conftest import email, sms
from cqrs_ddd_templates.catalog import DefaultTemplateCatalog
from cqrs_ddd_templates.config import TemplateSettings
from cqrs_ddd_templates.exceptions import CatalogError
from cqrs_ddd_templates.template import NotificationChannel


def test_lookup_ignores_case_and_whitespace(catalog):
    template = catalog.get("password reset", NotificationChannel.EMAIL)
    assert template is not None
    assert template.scenario == "Password Reset"
    assert catalog.get("PasswordReset", NotificationChannel.EMAIL) is template


def test_only_default_locale_is_served(catalog):
    assert catalog.get("Password Reset", NotificationChannel.EMAIL, "en-us") is not None
    assert catalog.get("Password Reset", NotificationChannel.EMAIL, "fr-fr") is None


def test_channels_are_separate(catalog):
    assert catalog.contains("SMS OTP", NotificationChannel.SMS)
    assert not catalog.contains("SMS OTP", NotificationChannel.EMAIL)
    assert catalog.scenarios(NotificationChannel.SMS) == ["SMS OTP"]


def test_list(catalog):
    assert [t.locale for t in catalog.list("Password Reset", NotificationChannel.EMAIL)] == [
        "en-us"
    ]
    assert catalog.list("Unknown", NotificationChannel.EMAIL) == []
    assert len(catalog.list_all(NotificationChannel.EMAIL)) == 1
    assert len(catalog) == 2


def test_rejects_non_default_locale(settings):
    with pytest.raises(CatalogError, match="fr-fr"):
        DefaultTemplateCatalog([email(locale="fr-fr")], settings)


def test_rejects_duplicates(settings):
    with pytest.raises(CatalogError, match="Duplicate"):
        DefaultTemplateCatalog([email("Password Reset"), email("password reset")], settings)


def test_rejects_blank_body(settings):
    with pytest.raises(CatalogError, match="no body"):
        DefaultTemplateCatalog([sms(body=" ")], settings)


def test_bundled_defaults(settings):
    catalog = DefaultTemplateCatalog.bundled(settings)

    reset = catalog.get("Password Reset", NotificationChannel.EMAIL)
    assert reset is not None
    assert reset.subject == "Reset your password"
    assert reset.content_type == "text/html"
    assert reset.footer
    assert "{{ reset_link }}" in reset.body

    otp = catalog.get("SMS OTP", NotificationChannel.SMS)
    assert otp is not None
    assert otp.subject is None
    assert otp.body == "Your one-time password is {{ otp }}."

    assert set(catalog.scenarios(NotificationChannel.EMAIL)) == {
        "Password Reset",
        "Account Confirmation",
        "Welcome Email",
        "Account Locked",
    }


def test_bundled_defaults_need_matching_default_locale():
    settings = TemplateSettings.from_mapping({"default_locales": {"sms": "fr-FR"}})

    with pytest.raises(CatalogError) as exc_info:
        DefaultTemplateCatalog.bundled(settings)

    assert exc_info.value.context["channels"] == ["sms"]
    assert "from_directory" in str(exc_info.value)


def test_from_directory_without_front_matter(tmp_path: Path, settings):
    (tmp_path / "sms").mkdir()
    (tmp_path / "sms" / "order-shipped_en-US.j2").write_text("Order {{ id }} shipped")

    catalog = DefaultTemplateCatalog.from_directory(tmp_path, settings)

    template = catalog.get("order-shipped", NotificationChannel.SMS)
    assert template is not None
    assert template.locale == "en-us"
    assert template.body == "Order {{ id }} shipped"


def test_from_directory_rejects_unknown_channel(tmp_path: Path, settings):
    (tmp_path / "push").mkdir()
    (tmp_path / "push" / "hello_en-us.j2").write_text("Hi")
    with pytest.raises(CatalogError, match="push"):
        DefaultTemplateCatalog.from_directory(tmp_path, settings)


def test_from_directory_requires_locale_suffix(tmp_path: Path, settings):
    (tmp_path / "email").mkdir()
    (tmp_path / "email" / "hello.j2").write_text("Hi")
    with pytest.raises(CatalogError, match="locale"):
        DefaultTemplateCatalog.from_directory(tmp_path, settings)


def test_missing_directory(tmp_path: Path, settings):
    with pytest.raises(CatalogError):
        DefaultTemplateCatalog.from_directory(tmp_path / "nope", settings)
