"""Tests for the locale fallback policy."""

from unittest.mock import MagicMock

import pytest

from conftest import email
from cqrs_ddd_templates.config import TemplateSettings
from cqrs_ddd_templates.fallback import (
    FallbackState,
    LocaleFallbackPolicy,
    Tier,
    TierPlan,
    TierSource,
)
from cqrs_ddd_templates.template import NotificationChannel


@pytest.fixture
def policy():
    return LocaleFallbackPolicy(TemplateSettings())


def test_plan_for_non_default_locale(policy):
    plan = policy.plan("fr-fr", NotificationChannel.EMAIL)
    assert plan == [
        TierPlan(FallbackState.EXACT, TierSource.STORE, "fr-fr"),
        TierPlan(FallbackState.DEFAULT_LOCALE, TierSource.STORE, "en-us"),
        TierPlan(FallbackState.SYSTEM_DEFAULT, TierSource.CATALOG, "en-us"),
    ]


def test_plan_skips_default_locale_tier_for_default_locale(policy):
    plan = policy.plan("en-us", NotificationChannel.SMS)
    assert [p.state for p in plan] == [FallbackState.EXACT, FallbackState.SYSTEM_DEFAULT]


def test_transitions(policy):
    ch = NotificationChannel.EMAIL
    assert policy.transition(FallbackState.EXACT, "de-de", ch) is FallbackState.DEFAULT_LOCALE
    assert policy.transition(FallbackState.EXACT, "en-us", ch) is FallbackState.SYSTEM_DEFAULT
    assert (
        policy.transition(FallbackState.DEFAULT_LOCALE, "de-de", ch)
        is FallbackState.SYSTEM_DEFAULT
    )
    assert (
        policy.transition(FallbackState.SYSTEM_DEFAULT, "de-de", ch)
        is FallbackState.UNSATISFIED
    )


def test_per_channel_default_locale():
    policy = LocaleFallbackPolicy(
        TemplateSettings(
            default_locales={
                NotificationChannel.EMAIL: "en-us",
                NotificationChannel.SMS: "en-gb",
            }
        )
    )
    plan = policy.plan("en-us", NotificationChannel.SMS)
    assert [p.locale for p in plan] == ["en-us", "en-gb", "en-gb"]


def test_run_short_circuits(policy):
    hit = email()
    first = MagicMock(return_value=None)
    second = MagicMock(return_value=hit)
    third = MagicMock(return_value=email(body="never"))
    plans = policy.plan("fr-fr", NotificationChannel.EMAIL)

    outcome = policy.run(
        [Tier(plans[0], first), Tier(plans[1], second), Tier(plans[2], third)]
    )

    assert outcome.found
    assert outcome.state is FallbackState.DEFAULT_LOCALE
    assert outcome.template is hit
    assert outcome.attempted == tuple(plans[:2])
    third.assert_not_called()


def test_run_unsatisfied(policy):
    plans = policy.plan("en-us", NotificationChannel.EMAIL)
    outcome = policy.run([Tier(p, lambda: None) for p in plans])
    assert not outcome.found
    assert outcome.state is FallbackState.UNSATISFIED
    assert outcome.attempted == tuple(plans)
