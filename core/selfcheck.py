"""
core.selfcheck
Minimal "it runs" proof for the core rules (no engine, no clock).

Run:
  python -m core.selfcheck
"""

from __future__ import annotations

from .calendar import is_week_end_day, next_workday
from .effects import apply_outcome, daily_perf, salary_for, weekly_perf_total
from .rng import rng_from
from .rules import get_rules
from .state import default_start_state, metrics_to_dict, round1


def run_week_smoke() -> None:
    rules = get_rules("standard")
    rng = rng_from("selfcheck", 1, base_seed=42)
    state = default_start_state(
        day_length=rules.day_length,
        mood=rules.start_mood,
        money=rules.start_money,
        relationship=rules.start_relationship,
    )

    days = []
    while True:
        days.append(state.day)
        state.clicks_today = rules.work_target

        # one small event per day, alternating bonus and cost
        delta = {"mood": -2, "perf": 1, "relationship": 1} if state.day % 2 else {"mood": 3, "money": -25}
        apply_outcome(state, delta, rules=rules, rng=rng)

        perf = daily_perf(state.clicks_today, state.daily_penalty_perf, target=rules.work_target, base=rules.daily_base_perf)
        assert perf == 10.0
        state.weekly_base_perf = round1(state.weekly_base_perf + perf)

        if is_week_end_day(state.day):
            total = weekly_perf_total(state.weekly_base_perf, state.weekly_extra_perf, extra_cap=rules.weekly_extra_cap)
            salary = salary_for(total, per_point=rules.salary_per_point)
            state.money = round1(state.money + salary - rules.weekly_rent)
        state.money = round1(state.money - rules.daily_living_cost)

        # invariants
        assert 0.0 <= state.mood <= 100.0
        assert 0.0 <= state.relationship <= 100.0

        if is_week_end_day(state.day):
            break
        state.day = next_workday(state.day)

    assert days == [1, 2, 3, 4, 5]
    assert next_workday(state.day) == 8
    assert state.weekly_event_expenses == 50.0

    print("OK: one-week core smoke test passed.")
    print("Final metrics:", metrics_to_dict(state))


if __name__ == "__main__":
    run_week_smoke()
