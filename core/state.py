"""
core.state
Core domain data models (UI independent).
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Set


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def round1(x: float) -> float:
    """Round to one decimal, halves toward +inf."""
    return math.floor(float(x) * 10 + 0.5) / 10


Delta = Dict[str, float]


class Branch(str, Enum):
    A = "A"
    B = "B"


class StoryFlag(str, Enum):
    """Named markers recording past scripted choices, one per story beat."""

    MENTOR_CLOSENESS = "mentor_closeness"
    ANNOYING_FIRST_IMPRESSION = "annoying_first_impression"
    PARTNER_IMPRESSION = "partner_impression"
    WEEKEND_WORK = "weekend_work"
    PARTNER_TRUST = "partner_trust"
    XIAOYA_LUNCH = "xiaoya_lunch"
    XIAOYA_SUPPORT = "xiaoya_support"
    XIAOYA_FRIENDSHIP = "xiaoya_friendship"
    ANNOYING_COMPLEX = "annoying_complex"
    MENTOR_PERSONAL = "mentor_personal"
    CRISIS_RESPONSE = "crisis_response"
    MENTOR_LEAVING_HINT = "mentor_leaving_hint"


# gate owners
GATE_BOSS = "boss"
GATE_RANDOM = "random"
GATE_SCRIPTED = "scripted"
GATE_CRISIS = "crisis"


@dataclass
class GameState:
    """The single mutable aggregate owned by one simulation.

    Field groups:
    - calendar: day, seconds_left
    - player metrics: clicks_today, mood, money, relationship (hidden)
    - minigame: is_fishing, boss_visible, boss_variant, accumulators
    - performance: daily_penalty_perf, weekly_extra_perf, weekly_base_perf
    - latches: gate_owner, paused_for_event, day_ended, game_ended
    - bookkeeping for endings: streaks, social_event_count, story_flags
    """

    day: int = 1
    seconds_left: int = 240
    clicks_today: int = 0
    mood: float = 100.0
    money: float = 800.0
    relationship: float = 60.0

    started: bool = False
    is_fishing: bool = False
    boss_visible: bool = False
    boss_variant: str = "boss"
    fish_accum_sec: int = 0
    boss_accum_sec: int = 0

    daily_penalty_perf: float = 0.0
    weekly_extra_perf: float = 0.0
    weekly_base_perf: float = 0.0
    daily_caught: int = 0
    weekly_caught: int = 0

    daily_event_expenses: float = 0.0
    weekly_event_expenses: float = 0.0

    # who holds the event/boss exclusion latch (None = free)
    gate_owner: Optional[str] = None
    paused_for_event: bool = False

    last_minute_mark: int = -1
    last_event_bucket: int = -1
    last_scripted_check: int = -1

    daily_triggered_events: Set[str] = field(default_factory=set)
    consumed_scripted_events: Set[str] = field(default_factory=set)
    story_flags: Dict[StoryFlag, Branch] = field(default_factory=dict)
    relationship_event_triggered: bool = False

    work_done_notified: bool = False
    work_done_elapsed: Optional[int] = None

    low_mood_days_streak: int = 0
    high_perf_weeks_streak: int = 0
    perfect_fish_weeks_streak: int = 0
    early_finish_days_streak: int = 0
    social_event_count: int = 0

    day_ended: bool = False
    game_ended: bool = False

    @property
    def lock_event_or_boss(self) -> bool:
        return self.gate_owner is not None


def default_start_state(
    *,
    day_length: int = 240,
    mood: float = 100.0,
    money: float = 800.0,
    relationship: float = 60.0,
) -> GameState:
    """Baseline start state.

    Keep it in core so headless tests and UI share the same baseline.
    """
    return GameState(
        day=1,
        seconds_left=int(day_length),
        mood=float(mood),
        money=float(money),
        relationship=float(relationship),
    )


def state_to_dict(s: GameState) -> Dict[str, Any]:
    """JSON-friendly view (sets become sorted lists, enums become values)."""
    d = asdict(s)
    d["daily_triggered_events"] = sorted(s.daily_triggered_events)
    d["consumed_scripted_events"] = sorted(s.consumed_scripted_events)
    d["story_flags"] = {str(k.value): str(v.value) for k, v in s.story_flags.items()}
    d["lock_event_or_boss"] = s.lock_event_or_boss
    return d


def metrics_to_dict(s: GameState) -> Dict[str, float]:
    """The subset the run log records as before/after."""
    return {
        "mood": float(s.mood),
        "money": float(s.money),
        "relationship": float(s.relationship),
        "daily_penalty_perf": float(s.daily_penalty_perf),
        "weekly_extra_perf": float(s.weekly_extra_perf),
        "weekly_base_perf": float(s.weekly_base_perf),
    }
