"""
core.effects
Economy / performance rules:
- daily / weekly performance calculator
- outcome deltas (mood, money, performance, relationship) with clamp rules
- expense tracking
- lottery draw
- story flag writes
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from .rules import LOTTERY_MISS_MESSAGE, LotteryTier, RuleSpec
from .state import Branch, Delta, GameState, clamp, metrics_to_dict, round1


# -------------------------
# Performance calculator
# -------------------------


def work_progress(clicks: int, target: int) -> float:
    """0..1 share of the daily quota."""
    if target <= 0:
        return 1.0
    return clamp(float(clicks) / float(target), 0.0, 1.0)


def daily_perf(clicks: int, penalty: float, *, target: int = 400, base: float = 10.0) -> float:
    """round(min(1, clicks/target) * base - penalty, 1); may be negative."""
    return round1(work_progress(clicks, target) * float(base) - float(penalty))


def shown_perf(clicks: int, penalty: float, *, target: int = 400, base: float = 10.0) -> float:
    return max(0.0, daily_perf(clicks, penalty, target=target, base=base))


def weekly_perf_total(weekly_base: float, weekly_extra: float, *, extra_cap: float = 20.0) -> float:
    # extra is capped, never floored; base carries the daily penalties
    return round1(float(weekly_base) + min(float(weekly_extra), float(extra_cap)))


def salary_for(weekly_total: float, *, per_point: float = 40.0) -> float:
    return round1(float(weekly_total) * float(per_point))


# -------------------------
# Outcome applier
# -------------------------


@dataclass(frozen=True)
class OutcomeReport:
    """What apply_outcome() did, for the run log and deferred notices."""

    delta: Delta
    expense: float
    lottery_win: float
    lottery_message: str
    flags_written: Tuple[str, ...]
    before: Dict[str, float]
    after: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "delta": dict(self.delta),
            "expense": float(self.expense),
            "lottery_win": float(self.lottery_win),
            "lottery_message": self.lottery_message,
            "flags_written": list(self.flags_written),
            "before": dict(self.before),
            "after": dict(self.after),
        }


def lottery_prize(draw: float, tiers: Iterable[LotteryTier]) -> Tuple[float, str]:
    """Map one uniform draw onto the cumulative prize tiers."""
    for upper, prize, message in tiers:
        if draw < upper:
            return float(prize), message
    return 0.0, LOTTERY_MISS_MESSAGE


def apply_performance(state: GameState, perf: float) -> None:
    """Bonuses feed the weekly extra bucket; penalties the daily one (never merged)."""
    if perf > 0:
        state.weekly_extra_perf += float(perf)
    elif perf < 0:
        state.daily_penalty_perf += abs(float(perf))


def record_expense(state: GameState, amount: float) -> None:
    state.daily_event_expenses += float(amount)
    state.weekly_event_expenses += float(amount)


def write_story_flags(state: GameState, flag_rules: Iterable[Any], branch: Branch) -> Tuple[str, ...]:
    """Write every flag whose rule targets `branch` (or either branch, when=None)."""
    written = []
    for rule in flag_rules:
        if rule.when is None or rule.when == branch:
            state.story_flags[rule.flag] = branch
            written.append(str(rule.flag.value))
    return tuple(written)


def apply_outcome(
    state: GameState,
    delta: Delta,
    *,
    rules: RuleSpec,
    rng: random.Random,
    special: Optional[str] = None,
    flag_rules: Iterable[Any] = (),
    branch: Branch = Branch.A,
) -> OutcomeReport:
    """Apply one chosen outcome to the state in place.

    Order: mood (clamped), money (+ expense tracking), performance, relationship
    (clamped), story flags. A `lottery` special draws after mood/relationship
    and adds the prize to money; the prize is not an expense offset.
    """
    before = metrics_to_dict(state)

    mood = float(delta.get("mood", 0.0))
    money = float(delta.get("money", 0.0))
    perf = float(delta.get("perf", 0.0))
    relationship = float(delta.get("relationship", 0.0))

    state.mood = clamp(state.mood + mood, 0.0, 100.0)

    state.money += money
    expense = abs(money) if money < 0 else 0.0
    if expense:
        record_expense(state, expense)

    apply_performance(state, perf)

    if relationship:
        state.relationship = clamp(state.relationship + relationship, 0.0, 100.0)

    flags = write_story_flags(state, flag_rules, branch)

    win, message = 0.0, ""
    if special == "lottery":
        win, message = lottery_prize(rng.random(), rules.lottery_tiers)
        state.money += win

    return OutcomeReport(
        delta={"mood": mood, "money": money, "perf": perf, "relationship": relationship},
        expense=float(expense),
        lottery_win=float(win),
        lottery_message=message,
        flags_written=flags,
        before=before,
        after=metrics_to_dict(state),
    )


def apply_fishing_second(state: GameState, rules: RuleSpec) -> bool:
    """Advance both fishing accumulators by one second.

    Returns True when a boss check is due this second.
    """
    state.fish_accum_sec += 1
    state.boss_accum_sec += 1
    if state.fish_accum_sec >= rules.fish_mood_every:
        state.fish_accum_sec -= rules.fish_mood_every
        state.mood = clamp(state.mood + rules.fish_mood_gain, 0.0, 100.0)
    if state.boss_accum_sec >= rules.boss_check_every:
        state.boss_accum_sec -= rules.boss_check_every
        return True
    return False


def apply_catch(state: GameState, rules: RuleSpec) -> None:
    state.daily_penalty_perf += float(rules.catch_penalty)
    state.daily_caught += 1
    state.weekly_caught += 1


def apply_click_fatigue(state: GameState, rules: RuleSpec) -> bool:
    """Typing fatigue for the current click. Returns True when mood dropped."""
    if rules.click_fatigue_mood <= 0 or rules.click_fatigue_every <= 0:
        return False
    if state.clicks_today % rules.click_fatigue_every != 0:
        return False
    state.mood = clamp(state.mood - rules.click_fatigue_mood, 0.0, 100.0)
    return True
