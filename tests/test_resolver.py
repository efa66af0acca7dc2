from core.rules import get_rules
from core.state import Branch, StoryFlag, default_start_state
from engine.resolver import (
    GOOD_ENDINGS,
    advance_to_next_day,
    check_catch_endings,
    settle_day,
)

RULES = get_rules("standard")


def _finished_day(day=1, **fields):
    s = default_start_state()
    s.day = day
    s.seconds_left = 0
    s.clicks_today = 400
    for k, v in fields.items():
        setattr(s, k, v)
    return s


def test_full_day_settles_with_living_cost():
    s = _finished_day()
    out = settle_day(s, RULES)
    assert out.ending is None
    assert out.daily_perf == 10.0
    assert out.daily.expenses == 80.0
    assert out.weekly is None
    assert s.money == 720.0
    assert s.weekly_base_perf == 10.0
    assert s.day_ended


def test_settle_is_idempotent():
    s = _finished_day()
    assert settle_day(s, RULES) is not None
    assert settle_day(s, RULES) is None
    assert s.money == 720.0


def test_daily_expenses_include_events():
    s = _finished_day(daily_event_expenses=45.0)
    assert settle_day(s, RULES).daily.expenses == 125.0


def test_daily_bad_endings_in_order():
    s = _finished_day(clicks_today=0, mood=40.0)
    out = settle_day(s, RULES)
    assert out.ending.key == "daily_perf"
    assert out.ending.kind == "bad"
    assert s.game_ended

    s = _finished_day(mood=49.0)
    assert settle_day(s, RULES).ending.message == "不吃草的马儿（心情过低）"

    s = _finished_day(daily_caught=3)
    assert settle_day(s, RULES).ending.key == "daily_caught"


def test_penalties_can_push_daily_perf_below_floor():
    s = _finished_day(daily_penalty_perf=4.5)
    out = settle_day(s, RULES)
    assert out.daily_perf == 5.5
    assert out.ending.key == "daily_perf"


def test_low_mood_streak():
    s = _finished_day(mood=55.0, low_mood_days_streak=2)
    settle_day(s, RULES)
    assert s.low_mood_days_streak == 3


def test_week_end_payroll():
    s = _finished_day(day=5, weekly_base_perf=45.0, weekly_extra_perf=10.0, money=1000.0)
    out = settle_day(s, RULES)
    assert out.ending is None
    assert out.weekly.weekly_perf_total == 65.0
    assert out.weekly.salary == 2600.0
    assert out.weekly.money == 2800.0
    assert out.weekly.expenses == 800.0 + 5 * 80.0
    assert out.daily.week_end
    assert s.money == 2720.0
    assert s.weekly_base_perf == 0.0
    assert s.weekly_extra_perf == 0.0
    assert s.high_perf_weeks_streak == 0
    assert s.perfect_fish_weeks_streak == 1


def test_weekly_summary_uses_the_weeks_event_expenses():
    s = _finished_day(day=12, weekly_base_perf=45.0, weekly_event_expenses=135.0)
    out = settle_day(s, RULES)
    assert out.weekly.expenses == 800.0 + 135.0 + 400.0
    assert s.weekly_event_expenses == 0.0


def test_weekly_bad_endings():
    s = _finished_day(day=5, weekly_base_perf=35.0)
    assert settle_day(s, RULES).ending.key == "weekly_perf"

    s = _finished_day(day=5, weekly_base_perf=45.0, weekly_caught=5)
    assert settle_day(s, RULES).ending.key == "weekly_caught"

    s = _finished_day(day=5, weekly_base_perf=35.0, money=-2000.0)
    # weekly perf is checked before money
    assert settle_day(s, RULES).ending.key == "weekly_perf"

    s = _finished_day(day=5, weekly_base_perf=45.0, money=-2000.0)
    out = settle_day(s, RULES)
    assert out.ending.key == "broke"
    assert out.ending.message == "回老家吧（钱包<0）"


def test_weekly_checks_skip_ordinary_days():
    s = _finished_day(day=4, weekly_base_perf=0.0)
    out = settle_day(s, RULES)
    assert out.ending is None
    assert out.weekly is None


def test_good_ending_priority():
    assert [r.key for r in GOOD_ENDINGS] == [
        "perfect_balance",
        "model_employee",
        "slacking_master",
        "best_partner",
        "efficiency_expert",
        "office_star",
        "social_butterfly",
        "street_stall",
    ]
    s = _finished_day(day=19, weekly_base_perf=45.0, weekly_extra_perf=10.0, relationship=90.0, money=3000.0)
    out = settle_day(s, RULES)
    assert out.ending.key == "perfect_balance"
    assert out.ending.kind == "good"
    assert s.game_ended


def test_street_stall_ending():
    s = _finished_day(day=5, weekly_base_perf=45.0, money=5000.0)
    out = settle_day(s, RULES)
    assert out.ending.key == "street_stall"
    assert out.ending.message == "辞职摆摊咯~"


def test_best_partner_needs_the_friendship_flag():
    fields = dict(weekly_base_perf=45.0, relationship=75.0, mood=60.0, weekly_caught=1)
    s = _finished_day(day=19, **fields)
    assert settle_day(s, RULES).ending is None

    s = _finished_day(day=19, **fields)
    s.story_flags[StoryFlag.XIAOYA_FRIENDSHIP] = Branch.A
    assert settle_day(s, RULES).ending.key == "best_partner"


def test_early_finish_streak_uses_quota_time():
    s = _finished_day(work_done_elapsed=180)
    settle_day(s, RULES)
    assert s.early_finish_days_streak == 1

    s = _finished_day(work_done_elapsed=201, early_finish_days_streak=2)
    settle_day(s, RULES)
    assert s.early_finish_days_streak == 0


def test_catch_endings():
    s = default_start_state()
    s.daily_caught = 2
    s.weekly_caught = 4
    assert check_catch_endings(s, RULES) is None
    s.weekly_caught = 5
    assert check_catch_endings(s, RULES).key == "weekly_caught"
    s.daily_caught = 3
    assert check_catch_endings(s, RULES).key == "daily_caught"


def test_advance_to_next_day_resets_the_day():
    s = _finished_day(day=5, mood=70.0, daily_caught=2, daily_penalty_perf=2.0, daily_event_expenses=30.0)
    s.daily_triggered_events.add("team_building")
    s.day_ended = True
    s.gate_owner = "random"
    s.paused_for_event = True
    assert advance_to_next_day(s, RULES) == 8
    assert s.seconds_left == 240
    assert s.mood == 100.0
    assert s.clicks_today == 0
    assert s.daily_caught == 0
    assert s.daily_penalty_perf == 0.0
    assert s.daily_event_expenses == 0.0
    assert s.daily_triggered_events == set()
    assert not s.day_ended
    assert not s.lock_event_or_boss
    assert not s.paused_for_event
