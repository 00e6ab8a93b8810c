"""Locale fallback policy — tiers tried in a fixed order, first hit wins."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .config import TemplateSettings
    from .template import NotificationChannel, NotificationTemplate

logger = logging.getLogger("cqrs_ddd.templates.fallback")


class FallbackState(str, enum.Enum):
    EXACT = "exact"
    DEFAULT_LOCALE = "default_locale"
    SYSTEM_DEFAULT = "system_default"
    UNSATISFIED = "unsatisfied"


class TierSource(str, enum.Enum):
    """Which backing source serves a tier."""

    STORE = "store"
    CATALOG = "catalog"


@dataclass(frozen=True)
class TierPlan:
    """One step of the fallback chain: where to look and at which locale."""

    state: FallbackState
    source: TierSource
    locale: str


@dataclass(frozen=True)
class Tier:
    """A planned step bound to the lookup that serves it."""

    plan: TierPlan
    lookup: Callable[[], NotificationTemplate | None]

    @property
    def state(self) -> FallbackState:
        return self.plan.state


@dataclass(frozen=True)
class FallbackOutcome:
    state: FallbackState
    template: NotificationTemplate | None
    attempted: tuple[TierPlan, ...]

    @property
    def found(self) -> bool:
        return self.template is not None


class LocaleFallbackPolicy:
    """
    Per-channel state machine over {EXACT, DEFAULT_LOCALE, SYSTEM_DEFAULT,
    UNSATISFIED}.

    - EXACT -> DEFAULT_LOCALE on miss, or straight to SYSTEM_DEFAULT when the
      requested locale already is the channel default.
    - DEFAULT_LOCALE -> SYSTEM_DEFAULT on miss.
    - SYSTEM_DEFAULT -> UNSATISFIED on miss (terminal).

    Fallback only ever changes the locale; scenario and tenant are fixed.
    """

    def __init__(self, settings: TemplateSettings) -> None:
        self._settings = settings

    def transition(
        self, state: FallbackState, locale: str, channel: NotificationChannel
    ) -> FallbackState:
        """Next state after a miss in ``state``."""
        if state is FallbackState.EXACT:
            if locale == self._settings.default_locale(channel):
                return FallbackState.SYSTEM_DEFAULT
            return FallbackState.DEFAULT_LOCALE
        if state is FallbackState.DEFAULT_LOCALE:
            return FallbackState.SYSTEM_DEFAULT
        return FallbackState.UNSATISFIED

    def plan(self, locale: str, channel: NotificationChannel) -> list[TierPlan]:
        """Ordered tiers for a request; ``locale`` must be normalized."""
        default_locale = self._settings.default_locale(channel)
        steps: list[TierPlan] = []
        state = FallbackState.EXACT
        while state is not FallbackState.UNSATISFIED:
            if state is FallbackState.EXACT:
                steps.append(TierPlan(state, TierSource.STORE, locale))
            elif state is FallbackState.DEFAULT_LOCALE:
                steps.append(TierPlan(state, TierSource.STORE, default_locale))
            else:
                steps.append(TierPlan(state, TierSource.CATALOG, default_locale))
            state = self.transition(state, locale, channel)
        return steps

    @staticmethod
    def run(tiers: Sequence[Tier]) -> FallbackOutcome:
        """Try tiers in order and stop at the first one that returns a record."""
        attempted: list[TierPlan] = []
        for tier in tiers:
            attempted.append(tier.plan)
            template = tier.lookup()
            if template is not None:
                return FallbackOutcome(tier.state, template, tuple(attempted))
            logger.debug(
                "Miss in tier %s (%s, locale=%s)",
                tier.state.value,
                tier.plan.source.value,
                tier.plan.locale,
            )
        return FallbackOutcome(FallbackState.UNSATISFIED, None, tuple(attempted))
