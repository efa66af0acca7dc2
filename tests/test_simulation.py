import json

import pytest

from content.catalog import RANDOM_EVENTS, RELATIONSHIP_CRISIS_NOTICE
from core.state import Branch, StoryFlag
from engine.config import EngineConfig
from engine.logging import dumps_run_export
from engine.ports import AudioCue, PROMPT_CRISIS, PROMPT_SCRIPTED
from engine.simulation import CAUGHT_MESSAGE, WORK_DONE_MESSAGE, Simulation

LOTTERY = tuple(e for e in RANDOM_EVENTS if e.id == "lottery_ticket")


def _click_to_quota(sim):
    for _ in range(sim.rules.work_target):
        assert sim.click_work()


def test_initial_snapshot(make_sim):
    sim, presenter = make_sim()
    snap = presenter.last
    assert snap.clock == "09:00"
    assert snap.weekday == "周一"
    assert snap.money == 800.0
    assert snap.perf == 0.0
    assert not snap.paused


def test_full_day_end_to_end(make_sim):
    sim, presenter = make_sim()
    _click_to_quota(sim)
    assert presenter.notices[-1].message == WORK_DONE_MESSAGE
    assert AudioCue.SUCCESS in presenter.cues
    assert sim.state.paused_for_event
    assert not sim.click_work()

    sim.dismiss_notice()
    sim.advance(240_000)
    assert sim.state.day_ended
    assert sim.ending is None
    summary = presenter.daily[-1]
    assert summary.daily_perf == 10.0
    assert summary.expenses == 80.0
    assert summary.money == 720.0
    assert presenter.cues[-1] == AudioCue.END_OF_DAY

    # the clock is stopped until the player moves on
    sim.advance(5000)
    assert sim.state.seconds_left == 0

    assert sim.proceed_next_day()
    assert presenter.transitions == [(1, 2)]
    assert sim.state.day == 2
    assert sim.state.seconds_left == 240
    assert sim.daily_summary is None
    assert not sim.proceed_next_day()


def test_end_day_now(make_sim):
    sim, _ = make_sim()
    _click_to_quota(sim)
    sim.dismiss_notice()
    assert sim.end_day_now()
    assert sim.daily_summary.daily_perf == 10.0
    assert sim.state.early_finish_days_streak == 1
    assert not sim.end_day_now()


def test_boss_catches_player_still_fishing(make_sim):
    sim, presenter = make_sim()
    assert sim.open_fish()
    assert presenter.cues[-1] == AudioCue.FISHING_BGM_START

    sim.advance(6000)
    assert sim.state.boss_visible
    assert sim.state.gate_owner == "boss"
    assert AudioCue.BOSS_CATCH in presenter.cues

    sim.advance(3000)
    assert sim.state.daily_caught == 1
    assert sim.state.weekly_caught == 1
    assert sim.state.daily_penalty_perf == 1.0
    assert presenter.notices[-1].message == CAUGHT_MESSAGE
    assert sim.run_log[-1]["type"] == "caught"

    sim.advance(1000)
    assert not sim.state.boss_visible
    assert sim.state.gate_owner is None


def test_third_catch_of_the_day_ends_the_game(make_sim):
    sim, presenter = make_sim()
    sim.state.daily_caught = 2
    sim.open_fish()
    sim.advance(9000)
    assert sim.state.game_ended
    assert sim.ending.key == "daily_caught"
    assert presenter.endings[-1].kind == "bad"
    assert presenter.cues[-1] == AudioCue.WARNING
    assert sim.scheduler.pending() == ["tick"]


def test_closing_fish_cancels_the_reaction_window(make_sim):
    sim, _ = make_sim()
    sim.open_fish()
    sim.advance(6000)
    assert "boss_window" in sim.scheduler.pending()

    sim.advance(2000)
    assert sim.close_fish()
    assert "boss_window" not in sim.scheduler.pending()
    assert not sim.state.boss_visible
    assert not sim.state.lock_event_or_boss

    sim.advance(5000)
    assert sim.state.daily_caught == 0


def test_random_event_pauses_the_clock(make_sim, fixed_random):
    sim, presenter = make_sim(rng=fixed_random(0.5))
    sim.advance(40_000)
    prompt = sim.pending_prompt
    assert prompt.event_id == "team_building"
    assert prompt.title == "部门团建"
    assert presenter.prompts == [prompt]
    assert presenter.cues[-1] == AudioCue.RANDOM_EVENT
    assert sim.state.seconds_left == 200

    sim.advance(5000)
    assert sim.state.seconds_left == 200

    report = sim.choose("A")
    assert report.delta["relationship"] == 2.0
    assert sim.state.relationship == 62.0
    assert sim.state.social_event_count == 1
    assert not sim.state.paused_for_event
    assert sim.run_log[-1]["event_id"] == "team_building"

    # next bucket: today's events are excluded from the pool
    sim.advance(40_000)
    assert sim.pending_prompt.event_id == "bathroom_smoking"
    assert sim.state.seconds_left == 160


def test_scripted_event_writes_story_flag(make_sim, fixed_random):
    sim, _ = make_sim(rng=fixed_random(0.1), random_events=())
    sim.advance(59_000)
    assert sim.pending_prompt is None

    sim.advance(1000)
    prompt = sim.pending_prompt
    assert prompt.kind == PROMPT_SCRIPTED
    assert prompt.event_id == "DAY1_MENTOR_INTRO"

    sim.choose(Branch.A)
    assert sim.state.story_flags[StoryFlag.MENTOR_CLOSENESS] == Branch.A
    assert sim.state.weekly_extra_perf == 1.0
    assert "DAY1_MENTOR_INTRO" in sim.state.consumed_scripted_events


def test_relationship_crisis_is_acknowledge_only(make_sim):
    sim, presenter = make_sim()
    sim.state.relationship = 39.0
    sim.advance(1000)
    prompt = sim.pending_prompt
    assert prompt.kind == PROMPT_CRISIS
    assert prompt.option_b is None

    with pytest.raises(ValueError):
        sim.choose("B")

    sim.acknowledge()
    assert sim.state.daily_penalty_perf == 5.0
    assert presenter.notices[-1].message == RELATIONSHIP_CRISIS_NOTICE
    sim.dismiss_notice()

    sim.advance(10_000)
    assert sim.pending_prompt is None
    assert len(presenter.prompts) == 1


def test_choose_without_prompt(make_sim):
    sim, _ = make_sim()
    with pytest.raises(ValueError):
        sim.choose("A")


def test_lottery_result_is_shown_as_notice(make_sim, fixed_random):
    sim, presenter = make_sim(rng=fixed_random(0.10), random_events=LOTTERY)
    sim.advance(40_000)
    assert sim.pending_prompt.event_id == "lottery_ticket"

    report = sim.choose("A")
    assert report.lottery_win == 20.0
    assert sim.state.money == 810.0
    notice = presenter.notices[-1]
    assert notice.title == "买了彩票"
    assert notice.message == "😊 中了20元安慰奖！"
    assert sim.state.paused_for_event


def test_daily_perf_ending_stops_input(make_sim):
    sim, presenter = make_sim()
    sim.advance(240_000)
    assert sim.ending.key == "daily_perf"
    assert presenter.endings == [sim.ending]
    assert presenter.cues[-1] == AudioCue.WARNING
    assert not sim.click_work()
    assert not sim.open_fish()
    assert not sim.proceed_next_day()


def test_classic_rules_tire_the_player(make_sim):
    sim, presenter = make_sim(rules_key="classic")
    first_notice_at = None
    while not sim.state.game_ended:
        if sim.notices:
            if first_notice_at is None:
                first_notice_at = sim.state.clicks_today
            sim.dismiss_notice()
        else:
            sim.click_work()
    assert first_notice_at == 224
    assert presenter.notices[0].kind == "mood"
    assert sim.state.clicks_today == 272
    assert sim.ending.key == "low_mood"


def test_reset_returns_to_start_screen(make_sim):
    sim, _ = make_sim()
    sim.click_work()
    sim.open_fish()
    sim.advance(7000)
    sim.reset_game()
    assert sim.reset_count == 1
    assert not sim.state.started
    assert sim.state.clicks_today == 0
    assert sim.state.seconds_left == 240
    assert sim.run_log == []
    assert sim.scheduler.pending() == ["tick"]

    sim.advance(3000)
    assert sim.state.seconds_left == 240


def test_broken_presenter_does_not_stop_the_game(fixed_random):
    class Broken:
        def __getattr__(self, name):
            def fail(*args):
                raise RuntimeError(name)

            return fail

    sim = Simulation(EngineConfig(), Broken(), rng=fixed_random(0.99))
    sim.start()
    for _ in range(400):
        sim.click_work()
    assert sim.state.clicks_today == 400
    assert len(sim.notices) == 1
    sim.dismiss_notice()
    sim.advance(240_000)
    assert sim.daily_summary.money == 720.0


def test_run_export_is_json(make_sim):
    sim, _ = make_sim()
    _click_to_quota(sim)
    sim.dismiss_notice()
    sim.end_day_now()
    data = json.loads(dumps_run_export(sim.export_run()))
    assert data["version"] == 1
    assert data["seed"] == 42
    assert data["config"]["rules_key"] == "standard"
    assert data["initial_state"]["day"] == 1
    assert [entry["type"] for entry in data["logs"]] == ["settlement"]
