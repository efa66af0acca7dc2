"""engine.arbiter

Decides, once per tick, which (if any) of the gated trigger paths fires.

The paths form an explicit priority list (TRIGGER_ORDER). Each is tried only
while the event/boss gate is free; the first one that fires wins the tick and
the later ones are not attempted at all (no probability draw happens for them).

The arbiter only decides. Locking the gate, pausing the clock and presenting
the prompt are done by the simulation that applies the decision.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from content.schemas import EventDefinition
from core.calendar import elapsed_seconds, week_number
from core.rng import pick
from core.rules import RuleSpec
from core.state import GATE_BOSS, GATE_CRISIS, GATE_RANDOM, GATE_SCRIPTED, GameState

BOSS_VARIANTS = ("boss", "boss01")


@dataclass(frozen=True)
class TickSignals:
    """Cadence facts computed by the tick driver for this second."""

    boss_due: bool = False
    random_bucket: Optional[int] = None  # set only when the 40 s bucket changed
    scripted_bucket: int = -1


@dataclass(frozen=True)
class TriggerDecision:
    kind: str  # boss | random | scripted | crisis
    event: Optional[EventDefinition] = None
    boss_variant: str = ""
    window_ms: int = 0
    bucket: int = -1


@dataclass(frozen=True)
class TriggerRule:
    name: str
    check: Callable[[GameState, random.Random, TickSignals], Optional[TriggerDecision]]


def boss_window_ms(day: int, variant: str, rules: RuleSpec) -> int:
    table = rules.boss_window_week1_ms if week_number(day) < 2 else rules.boss_window_later_ms
    return int(table.get(variant, table["boss"]))


def boss_variants_for(day: int, rules: RuleSpec) -> Tuple[str, ...]:
    return BOSS_VARIANTS if int(day) >= rules.boss_alt_variant_from_day else BOSS_VARIANTS[:1]


def eligible_random_events(catalog: Sequence[EventDefinition], triggered_today) -> List[EventDefinition]:
    return [ev for ev in catalog if ev.id not in triggered_today]


def eligible_scripted_events(catalog: Sequence[EventDefinition], state: GameState) -> List[EventDefinition]:
    return [
        ev
        for ev in catalog
        if ev.id not in state.consumed_scripted_events
        and ev.is_eligible(state.day, state.relationship, state.story_flags)
    ]


class EventArbiter:
    def __init__(
        self,
        rules: RuleSpec,
        random_events: Sequence[EventDefinition],
        scripted_events: Sequence[EventDefinition],
    ) -> None:
        self.rules = rules
        self.random_events = tuple(random_events)
        self.scripted_events = tuple(scripted_events)
        self.trigger_order: Tuple[TriggerRule, ...] = (
            TriggerRule(GATE_BOSS, self.boss_check),
            TriggerRule(GATE_RANDOM, self.random_event_check),
            TriggerRule(GATE_SCRIPTED, self.scripted_event_check),
            TriggerRule(GATE_CRISIS, self.relationship_crisis_check),
        )

    def decide(self, state: GameState, rng: random.Random, signals: TickSignals) -> Optional[TriggerDecision]:
        for rule in self.trigger_order:
            if state.lock_event_or_boss:
                return None
            decision = rule.check(state, rng, signals)
            if decision is not None:
                return decision
        return None

    # --- paths, in priority order ---

    def boss_check(self, state: GameState, rng: random.Random, signals: TickSignals) -> Optional[TriggerDecision]:
        if not signals.boss_due:
            return None
        if not state.is_fishing or state.paused_for_event or state.boss_visible:
            return None
        if state.game_ended or state.day_ended:
            return None
        if rng.random() < self.rules.boss_abort_below:
            return None
        variants = boss_variants_for(state.day, self.rules)
        variant = pick(rng, variants) if len(variants) > 1 else variants[0]
        return TriggerDecision(
            kind=GATE_BOSS,
            boss_variant=variant,
            window_ms=boss_window_ms(state.day, variant, self.rules),
        )

    def random_event_check(self, state: GameState, rng: random.Random, signals: TickSignals) -> Optional[TriggerDecision]:
        bucket = signals.random_bucket
        if bucket is None or bucket == 0:
            return None
        if state.game_ended or state.day_ended:
            return None
        if state.last_event_bucket == bucket:
            return None
        if rng.random() >= self.rules.random_event_chance:
            return None
        pool = eligible_random_events(self.random_events, state.daily_triggered_events)
        if not pool:
            return None
        return TriggerDecision(kind=GATE_RANDOM, event=pick(rng, pool), bucket=bucket)

    def scripted_event_check(self, state: GameState, rng: random.Random, signals: TickSignals) -> Optional[TriggerDecision]:
        bucket = signals.scripted_bucket
        if bucket == state.last_scripted_check:
            return None
        if rng.random() >= self.rules.scripted_chance:
            return None
        # the coin landed: this 30 s bucket is spent whatever happens next
        state.last_scripted_check = bucket
        if state.game_ended or state.day_ended:
            return None
        if state.day == 1 and elapsed_seconds(state.seconds_left, self.rules.day_length) < self.rules.scripted_quiet_seconds_day1:
            return None
        pool = eligible_scripted_events(self.scripted_events, state)
        if not pool:
            return None
        return TriggerDecision(kind=GATE_SCRIPTED, event=pick(rng, pool), bucket=bucket)

    def relationship_crisis_check(self, state: GameState, rng: random.Random, signals: TickSignals) -> Optional[TriggerDecision]:
        if state.relationship_event_triggered:
            return None
        if state.game_ended or state.day_ended:
            return None
        if state.relationship < self.rules.crisis_threshold:
            return TriggerDecision(kind=GATE_CRISIS)
        return None
