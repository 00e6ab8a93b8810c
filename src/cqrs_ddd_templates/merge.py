"""ResultMerger — deduplicating merge of list results from two sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from .template import NotificationTemplate, normalize_name

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable

T = TypeVar("T")


def scenario_identity(display_name: str) -> str:
    """Case-insensitive identity of a scenario display name."""
    return normalize_name(display_name)


def template_identity(template: NotificationTemplate) -> tuple[str, str]:
    """Scenario identity plus locale; the channel is constant within a list."""
    return template.normalized_scenario, template.locale


class ResultMerger(Generic[T]):
    """
    Merge ``primary`` and ``secondary`` as a set keyed by identity.

    - Primary entries always win on key collision.
    - Secondary entries are only added for keys absent from primary.
    - Within one list the first occurrence of a key is kept.

    Enumeration order of the result is NOT guaranteed. Callers and tests must
    compare as sets.
    """

    def __init__(self, key: Callable[[T], Hashable]) -> None:
        self._key = key

    def merge(self, primary: Iterable[T], secondary: Iterable[T]) -> list[T]:
        merged: dict[Hashable, T] = {}
        for item in primary:
            merged.setdefault(self._key(item), item)
        for item in secondary:
            merged.setdefault(self._key(item), item)
        return list(merged.values())


name_merger: ResultMerger[str] = ResultMerger(scenario_identity)
template_merger: ResultMerger[NotificationTemplate] = ResultMerger(template_identity)
