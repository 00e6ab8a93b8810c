"""Tests for ResultMerger."""

from conftest import email
from cqrs_ddd_templates.merge import ResultMerger, name_merger, template_merger


def test_primary_wins_on_collision():
    durable = email(body="tenant body")
    default = email(body="default body")

    merged = template_merger.merge([durable], [default])

    assert merged == [durable]


def test_secondary_fills_missing_keys():
    fr = email(locale="fr-fr")
    default = email(locale="en-us")

    merged = template_merger.merge([fr], [default])

    assert {t.locale for t in merged} == {"fr-fr", "en-us"}


def test_template_identity_ignores_display_name_case():
    durable = email("password reset")
    default = email("Password Reset")
    assert template_merger.merge([durable], [default]) == [durable]


def test_names_merge_case_insensitively():
    merged = name_merger.merge(["Password Reset", "Custom"], ["PASSWORD RESET", "Welcome"])
    assert set(merged) == {"Password Reset", "Custom", "Welcome"}


def test_idempotent():
    a = [email("A"), email("B", locale="fr-fr")]
    b = [email("B", locale="fr-fr", body="other"), email("C")]

    once = template_merger.merge(a, b)
    twice = template_merger.merge(template_merger.merge(a, b), b)

    assert set(once) == set(twice)


def test_self_merge_is_identity():
    items = [email("A"), email("B"), email("A", locale="de-de")]
    assert set(template_merger.merge(items, items)) == set(items)


def test_first_occurrence_wins_within_a_list():
    merger = ResultMerger(str.lower)
    assert merger.merge(["A", "a"], ["b"]) == ["A", "b"]


def test_empty_inputs():
    assert template_merger.merge([], []) == []
    only = [email()]
    assert template_merger.merge([], only) == only
