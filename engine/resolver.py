"""engine.resolver

Day / week resolution: daily performance, streaks, weekly payroll and the
ending checks.

Endings are ordered rule lists (first match wins). settle_day() evaluates them
in this order:
  daily bad -> weekly bad -> payroll -> money bad -> good endings.
Closing the minigame and modals before settlement is the simulation's job.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable, Optional, Sequence, Tuple

from core.calendar import in_game_hour, is_week_end_day, next_workday
from core.effects import daily_perf as compute_daily_perf
from core.effects import salary_for, weekly_perf_total
from core.rules import RuleSpec
from core.state import Branch, GameState, StoryFlag, round1

from .ports import DailySummary, Ending, WeeklySummary

logger = logging.getLogger(__name__)

WORKDAYS_PER_WEEK = 5


@dataclass(frozen=True)
class SettlementContext:
    """Values an ending predicate may look at besides the state."""

    state: GameState
    rules: RuleSpec
    daily_perf: float
    weekly_total: float = 0.0


@dataclass(frozen=True)
class EndingRule:
    key: str
    kind: str  # good | bad
    message: str
    applies: Callable[[SettlementContext], bool]


DAILY_BAD_ENDINGS: Tuple[EndingRule, ...] = (
    EndingRule("daily_perf", "bad", "公司不再需要你了（每日绩效不足）",
               lambda c: c.daily_perf < c.rules.daily_perf_floor),
    EndingRule("low_mood", "bad", "不吃草的马儿（心情过低）",
               lambda c: c.state.mood < c.rules.mood_floor),
    EndingRule("daily_caught", "bad", "再也不用摸鱼了（当日被抓≥3）",
               lambda c: c.state.daily_caught >= c.rules.daily_caught_limit),
)

# checked right after a boss window expires with the player still fishing
CATCH_ENDINGS: Tuple[EndingRule, ...] = (
    DAILY_BAD_ENDINGS[2],
    EndingRule("weekly_caught", "bad", "再也不用摸鱼了（本周被抓≥5）",
               lambda c: c.state.weekly_caught >= c.rules.weekly_caught_limit),
)

WEEKLY_BAD_ENDINGS: Tuple[EndingRule, ...] = (
    EndingRule("weekly_perf", "bad", "公司不再需要你了（周绩效不足）",
               lambda c: c.weekly_total < c.rules.weekly_perf_floor),
    CATCH_ENDINGS[1],
)

MONEY_ENDING = EndingRule("broke", "bad", "回老家吧（钱包<0）", lambda c: c.state.money < 0)

MOOD_ENDING = DAILY_BAD_ENDINGS[1]

GOOD_ENDINGS: Tuple[EndingRule, ...] = (
    EndingRule(
        "perfect_balance", "good",
        "完美平衡！工作、生活、人际关系各方面都表现出色，获得公司海外项目机会",
        lambda c: c.weekly_total >= 60 and c.state.mood >= 70 and c.state.relationship >= 65
        and c.state.money >= 2000 and c.state.day >= 15,
    ),
    EndingRule(
        "model_employee", "good",
        "模范员工！连续高绩效表现获得公司认可，直接晋升为部门主管",
        lambda c: c.state.high_perf_weeks_streak >= 3,
    ),
    EndingRule(
        "slacking_master", "good",
        "摸鱼大师！在保持高绩效的同时完全没被发现摸鱼，堪称隐藏高手",
        lambda c: c.state.perfect_fish_weeks_streak >= 3 and c.weekly_total >= 70,
    ),
    EndingRule(
        "best_partner", "good",
        "最佳搭档！与张小雅建立深厚友谊，两人决定一起跳槽到更好的公司",
        lambda c: c.state.story_flags.get(StoryFlag.XIAOYA_FRIENDSHIP) == Branch.A
        and c.state.relationship >= 70 and c.state.day >= 15,
    ),
    EndingRule(
        "efficiency_expert", "good",
        "效率专家！在高效完成工作的同时从未被抓摸鱼，获得\"最佳新人\"称号",
        lambda c: c.weekly_total >= 70 and c.state.weekly_caught == 0 and c.state.day >= 12,
    ),
    EndingRule(
        "office_star", "good",
        "职场红人！同事们都很信任你，公司决定提前转正并加薪",
        lambda c: c.state.relationship >= 85 and c.state.day >= 15,
    ),
    EndingRule(
        "social_butterfly", "good",
        "社交达人！积极的社交态度让你成为公司文化大使，获得特殊津贴",
        lambda c: c.state.social_event_count >= 5 and c.state.relationship >= 65 and c.state.day >= 20,
    ),
    EndingRule("street_stall", "good", "辞职摆摊咯~", lambda c: c.state.money > 6000),
)


def first_match(rules: Sequence[EndingRule], ctx: SettlementContext) -> Optional[Ending]:
    for rule in rules:
        if rule.applies(ctx):
            return Ending(kind=rule.kind, key=rule.key, message=rule.message, day=int(ctx.state.day))
    return None


@dataclass(frozen=True)
class DaySettlement:
    daily_perf: float
    ending: Optional[Ending] = None
    daily: Optional[DailySummary] = None
    weekly: Optional[WeeklySummary] = None

    def to_dict(self):
        return {
            "daily_perf": self.daily_perf,
            "ending": None if self.ending is None else asdict(self.ending),
            "daily": None if self.daily is None else asdict(self.daily),
            "weekly": None if self.weekly is None else asdict(self.weekly),
        }


def update_week_streaks(state: GameState, weekly_total: float, rules: RuleSpec) -> None:
    if weekly_total >= rules.high_perf_week:
        state.high_perf_weeks_streak += 1
    else:
        state.high_perf_weeks_streak = 0

    if weekly_total >= rules.perfect_fish_week and state.weekly_caught == 0:
        state.perfect_fish_weeks_streak += 1
    else:
        state.perfect_fish_weeks_streak = 0


def finish_hour(state: GameState, rules: RuleSpec) -> float:
    """In-game hour at which the quota was met (or now, if it never was)."""
    if state.work_done_elapsed is not None:
        elapsed = state.work_done_elapsed
    else:
        elapsed = rules.day_length - state.seconds_left
    return in_game_hour(elapsed, rules.day_length)


def settle_day(state: GameState, rules: RuleSpec) -> Optional[DaySettlement]:
    """Resolve the current day in place.

    Returns None when the day was already resolved. When an ending fires,
    `game_ended` is set and no summaries are produced.
    """
    if state.day_ended:
        return None
    state.day_ended = True

    perf = compute_daily_perf(
        state.clicks_today,
        state.daily_penalty_perf,
        target=rules.work_target,
        base=rules.daily_base_perf,
    )

    if state.mood < rules.low_mood_mark:
        state.low_mood_days_streak += 1
    else:
        state.low_mood_days_streak = 0

    ctx = SettlementContext(state=state, rules=rules, daily_perf=perf)
    ending = first_match(DAILY_BAD_ENDINGS, ctx)
    if ending is not None:
        return _terminate(state, perf, ending)

    state.weekly_base_perf = round1(state.weekly_base_perf + perf)

    if finish_hour(state, rules) <= rules.early_finish_hour and perf >= rules.daily_base_perf:
        state.early_finish_days_streak += 1
    else:
        state.early_finish_days_streak = 0

    weekly: Optional[WeeklySummary] = None
    week_end = is_week_end_day(state.day)
    if week_end:
        total = weekly_perf_total(state.weekly_base_perf, state.weekly_extra_perf, extra_cap=rules.weekly_extra_cap)
        ctx = SettlementContext(state=state, rules=rules, daily_perf=perf, weekly_total=total)
        ending = first_match(WEEKLY_BAD_ENDINGS, ctx)
        if ending is not None:
            return _terminate(state, perf, ending)

        update_week_streaks(state, total, rules)

        salary = salary_for(total, per_point=rules.salary_per_point)
        state.money = round1(state.money + salary - rules.weekly_rent)
        logger.debug("payroll day=%s total=%.1f salary=%.1f money=%.1f", state.day, total, salary, state.money)

        ending = first_match((MONEY_ENDING,) + GOOD_ENDINGS, ctx)
        if ending is not None:
            return _terminate(state, perf, ending)

        week_expenses = float(state.weekly_event_expenses)
        state.weekly_base_perf = 0.0
        state.weekly_extra_perf = 0.0
        state.weekly_caught = 0
        state.weekly_event_expenses = 0.0
        state.low_mood_days_streak = 1 if state.mood < rules.low_mood_mark else 0
        weekly = WeeklySummary(
            day=int(state.day),
            weekly_perf_total=total,
            salary=salary,
            rent=float(rules.weekly_rent),
            expenses=round1(rules.weekly_rent + week_expenses + WORKDAYS_PER_WEEK * rules.daily_living_cost),
            money=float(state.money),
        )

    expenses = round1(rules.daily_living_cost + state.daily_event_expenses)
    state.money = round1(state.money - rules.daily_living_cost)
    daily = DailySummary(
        day=int(state.day),
        daily_perf=perf,
        mood=float(state.mood),
        expenses=expenses,
        money=float(state.money),
        week_end=week_end,
    )
    logger.debug("day %s settled perf=%.1f expenses=%.1f money=%.1f", state.day, perf, expenses, state.money)
    return DaySettlement(daily_perf=perf, daily=daily, weekly=weekly)


def _terminate(state: GameState, perf: float, ending: Ending) -> DaySettlement:
    state.game_ended = True
    logger.info("ending %s (%s) on day %s", ending.key, ending.kind, state.day)
    return DaySettlement(daily_perf=perf, ending=ending)


def check_catch_endings(state: GameState, rules: RuleSpec) -> Optional[Ending]:
    ending = first_match(CATCH_ENDINGS, SettlementContext(state=state, rules=rules, daily_perf=0.0))
    if ending is not None:
        state.game_ended = True
        logger.info("ending %s (%s) on day %s", ending.key, ending.kind, state.day)
    return ending


def check_mood_ending(state: GameState, rules: RuleSpec) -> Optional[Ending]:
    """Immediate mood check used by presets with click fatigue."""
    ending = first_match((MOOD_ENDING,), SettlementContext(state=state, rules=rules, daily_perf=0.0))
    if ending is not None:
        state.game_ended = True
        logger.info("ending %s (%s) on day %s", ending.key, ending.kind, state.day)
    return ending


def advance_to_next_day(state: GameState, rules: RuleSpec) -> int:
    """Next-day reset. Weekly accumulators were already reset by settle_day()."""
    state.day = next_workday(state.day)
    state.seconds_left = int(rules.day_length)
    state.clicks_today = 0
    state.mood = 100.0
    state.daily_penalty_perf = 0.0
    state.daily_caught = 0
    state.daily_event_expenses = 0.0
    state.daily_triggered_events = set()
    state.is_fishing = False
    state.boss_visible = False
    state.fish_accum_sec = 0
    state.boss_accum_sec = 0
    state.day_ended = False
    state.work_done_notified = False
    state.work_done_elapsed = None
    state.paused_for_event = False
    state.gate_owner = None
    state.last_scripted_check = -1
    state.last_minute_mark = -1
    state.last_event_bucket = -1
    return state.day
