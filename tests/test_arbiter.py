from content.catalog import RANDOM_EVENTS, SCRIPTED_EVENTS
from core.rules import get_rules
from core.state import Branch, StoryFlag, default_start_state
from engine.arbiter import (
    EventArbiter,
    TickSignals,
    boss_variants_for,
    boss_window_ms,
    eligible_random_events,
    eligible_scripted_events,
)

RULES = get_rules("standard")


def _arbiter():
    return EventArbiter(RULES, RANDOM_EVENTS, SCRIPTED_EVENTS)


def test_trigger_order_is_explicit():
    assert [r.name for r in _arbiter().trigger_order] == ["boss", "random", "scripted", "crisis"]


def test_boss_windows_by_week_and_variant():
    assert boss_window_ms(1, "boss", RULES) == 3000
    assert boss_window_ms(5, "boss01", RULES) == 1000
    assert boss_window_ms(8, "boss", RULES) == 1500
    assert boss_window_ms(15, "boss01", RULES) == 800


def test_second_boss_variant_unlocks_on_day_three():
    assert boss_variants_for(2, RULES) == ("boss",)
    assert boss_variants_for(3, RULES) == ("boss", "boss01")


def test_boss_wins_the_tick_and_later_paths_do_not_draw(scripted_random):
    s = default_start_state()
    s.is_fishing = True
    rng = scripted_random([0.5])
    d = _arbiter().decide(s, rng, TickSignals(boss_due=True, random_bucket=1, scripted_bucket=1))
    assert d.kind == "boss"
    assert d.boss_variant == "boss"
    assert d.window_ms == 3000
    assert rng.calls == 1
    assert s.last_scripted_check == -1


def test_boss_abort_falls_through_to_other_paths(scripted_random):
    s = default_start_state()
    s.is_fishing = True
    rng = scripted_random([0.3, 0.9, 0.9])
    d = _arbiter().decide(s, rng, TickSignals(boss_due=True, random_bucket=1, scripted_bucket=1))
    assert d is None
    assert rng.calls == 3


def test_boss_variant_pick_from_day_three(scripted_random):
    s = default_start_state()
    s.day = 8
    s.is_fishing = True
    d = _arbiter().decide(s, scripted_random([0.5, 0.7]), TickSignals(boss_due=True))
    assert d.boss_variant == "boss01"
    assert d.window_ms == 800


def test_locked_gate_skips_everything(scripted_random):
    s = default_start_state()
    s.gate_owner = "boss"
    s.relationship = 10
    rng = scripted_random([0.0])
    assert _arbiter().decide(s, rng, TickSignals(random_bucket=1, scripted_bucket=1)) is None
    assert rng.calls == 0


def test_random_event_never_in_first_bucket(scripted_random):
    s = default_start_state()
    rng = scripted_random([0.0])
    assert _arbiter().random_event_check(s, rng, TickSignals(random_bucket=0)) is None
    assert rng.calls == 0


def test_random_event_pick(scripted_random):
    s = default_start_state()
    d = _arbiter().random_event_check(s, scripted_random([0.5, 0.0]), TickSignals(random_bucket=2))
    assert d.kind == "random"
    assert d.event.id == "colleague_help"
    assert d.bucket == 2


def test_random_pool_excludes_todays_events():
    pool = eligible_random_events(RANDOM_EVENTS, {"colleague_help", "team_building"})
    assert len(pool) == 9
    assert "colleague_help" not in {e.id for e in pool}


def test_random_event_empty_pool_aborts(scripted_random):
    s = default_start_state()
    s.daily_triggered_events = {e.id for e in RANDOM_EVENTS}
    assert _arbiter().random_event_check(s, scripted_random([0.1]), TickSignals(random_bucket=3)) is None


def test_scripted_event_quiet_start_on_day_one(scripted_random):
    s = default_start_state()
    s.seconds_left = 240 - 30
    assert _arbiter().scripted_event_check(s, scripted_random([0.1]), TickSignals(scripted_bucket=1)) is None
    # the coin landed, so the bucket is spent
    assert s.last_scripted_check == 1


def test_scripted_event_fires_after_quiet_start(scripted_random):
    s = default_start_state()
    s.seconds_left = 240 - 61
    d = _arbiter().scripted_event_check(s, scripted_random([0.1, 0.0]), TickSignals(scripted_bucket=2))
    assert d.kind == "scripted"
    assert d.event.id == "DAY1_MENTOR_INTRO"


def test_scripted_coin_miss_keeps_bucket_open(scripted_random):
    s = default_start_state()
    s.seconds_left = 100
    assert _arbiter().scripted_event_check(s, scripted_random([0.5]), TickSignals(scripted_bucket=4)) is None
    assert s.last_scripted_check == -1


def test_consumed_scripted_events_never_return():
    s = default_start_state()
    assert [e.id for e in eligible_scripted_events(SCRIPTED_EVENTS, s)] == ["DAY1_MENTOR_INTRO"]
    s.consumed_scripted_events.add("DAY1_MENTOR_INTRO")
    assert eligible_scripted_events(SCRIPTED_EVENTS, s) == []


def test_scripted_eligibility_reads_story_flags():
    s = default_start_state()
    s.day = 4
    assert [e.id for e in eligible_scripted_events(SCRIPTED_EVENTS, s)] == ["DAY4_XIAOYA_LUNCH"]
    s.story_flags[StoryFlag.MENTOR_CLOSENESS] = Branch.A
    assert [e.id for e in eligible_scripted_events(SCRIPTED_EVENTS, s)] == ["DAY4_MENTOR_GUIDANCE", "DAY4_XIAOYA_LUNCH"]


def test_relationship_bonus_is_any_day():
    s = default_start_state()
    s.day = 6
    s.relationship = 80
    assert [e.id for e in eligible_scripted_events(SCRIPTED_EVENTS, s)] == ["RELATIONSHIP_80_BONUS"]


def test_crisis_fires_once_below_threshold(scripted_random):
    s = default_start_state()
    arb = _arbiter()
    s.relationship = 40
    assert arb.relationship_crisis_check(s, scripted_random([]), TickSignals()) is None
    s.relationship = 39.5
    assert arb.relationship_crisis_check(s, scripted_random([]), TickSignals()).kind == "crisis"
    s.relationship_event_triggered = True
    assert arb.relationship_crisis_check(s, scripted_random([]), TickSignals()) is None
