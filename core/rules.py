"""
core.rules
Balance presets (timings, probabilities, thresholds, economy).

Kept in core so balancing lives in one place, but UI can still display labels.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


# (cumulative upper bound of the draw, prize, message)
LotteryTier = Tuple[float, float, str]

DEFAULT_LOTTERY_TIERS: Tuple[LotteryTier, ...] = (
    (0.0001, 10000.0, "🎉 恭喜！中了大奖10000元！发财了！"),
    (0.0001 + 0.05, 100.0, "🎊 运气不错！中了100元小奖！"),
    (0.0001 + 0.05 + 0.20, 20.0, "😊 中了20元安慰奖！"),
)
LOTTERY_MISS_MESSAGE = "😔 很遗憾，没有中奖..."


@dataclass(frozen=True)
class RuleSpec:
    key: str
    desc: str

    # day / work
    day_length: int = 240
    work_target: int = 400
    daily_base_perf: float = 10.0
    start_mood: float = 100.0
    start_money: float = 800.0
    start_relationship: float = 60.0

    # fishing minigame
    fish_mood_every: int = 2
    fish_mood_gain: float = 1.0
    boss_check_every: int = 6
    boss_abort_below: float = 0.4
    boss_alt_variant_from_day: int = 3
    # week 1 / week >= 2 reaction windows, per variant
    boss_window_week1_ms: Dict[str, int] = field(default_factory=lambda: {"boss": 3000, "boss01": 1000})
    boss_window_later_ms: Dict[str, int] = field(default_factory=lambda: {"boss": 1500, "boss01": 800})
    boss_linger_ms: int = 1000
    catch_penalty: float = 1.0

    # events
    random_event_bucket: int = 40
    random_event_chance: float = 0.6
    scripted_bucket: int = 30
    scripted_chance: float = 0.3
    scripted_quiet_seconds_day1: int = 60
    crisis_threshold: float = 40.0
    crisis_penalty: float = 5.0

    # endings / bookkeeping
    daily_perf_floor: float = 6.0
    mood_floor: float = 50.0
    low_mood_mark: float = 60.0
    daily_caught_limit: int = 3
    weekly_caught_limit: int = 5
    weekly_perf_floor: float = 50.0
    weekly_extra_cap: float = 20.0
    high_perf_week: float = 80.0
    perfect_fish_week: float = 60.0
    early_finish_hour: float = 16.5

    # economy
    salary_per_point: float = 40.0
    weekly_rent: float = 800.0
    daily_living_cost: float = 80.0
    lottery_tiers: Tuple[LotteryTier, ...] = DEFAULT_LOTTERY_TIERS

    # typing fatigue: every N clicks lose mood (0 disables)
    click_fatigue_every: int = 16
    click_fatigue_mood: float = 0.0


DEFAULT_RULES: Dict[str, RuleSpec] = {
    "standard": RuleSpec(
        key="standard",
        desc="标准规则：专心敲键盘不会掉心情，靠事件和摸鱼调节。",
    ),
    "classic": RuleSpec(
        key="classic",
        desc="经典规则：每敲16下心情-3，心情低于50直接出局。",
        click_fatigue_mood=3.0,
    ),
}


def get_rules(rules_key: str) -> RuleSpec:
    return DEFAULT_RULES.get(rules_key, DEFAULT_RULES["standard"])
