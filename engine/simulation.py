"""engine.simulation

The simulation context: owns one GameState, one RNG stream and one scheduler,
and is the only writer of that state.

Time moves only through `advance(ms)` (the 1 Hz tick is a recurring scheduler
task). Player input arrives through the public methods below. Both paths take
the same re-entrant lock, so a UI thread and a timer thread can share one
Simulation safely.

This layer is UI-agnostic: everything visible goes through a Presenter.
"""

from __future__ import annotations

import copy
import logging
import random
import threading
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Sequence, Union

from content.catalog import (
    RANDOM_EVENTS,
    RELATIONSHIP_CRISIS_ACK,
    RELATIONSHIP_CRISIS_DESCRIPTION,
    RELATIONSHIP_CRISIS_ID,
    RELATIONSHIP_CRISIS_NOTICE,
    RELATIONSHIP_CRISIS_TITLE,
    SCRIPTED_EVENTS,
)
from content.schemas import EventDefinition, validate_catalog
from core.calendar import next_workday
from core.effects import OutcomeReport, apply_catch, apply_click_fatigue, apply_fishing_second, apply_outcome
from core.rng import rng_from
from core.state import (
    GATE_BOSS,
    GATE_CRISIS,
    GATE_RANDOM,
    GATE_SCRIPTED,
    Branch,
    GameState,
    default_start_state,
    metrics_to_dict,
)

from .arbiter import EventArbiter, TickSignals, TriggerDecision
from .config import EngineConfig
from .logging import make_run_export
from .ports import (
    PROMPT_CRISIS,
    PROMPT_RANDOM,
    PROMPT_SCRIPTED,
    AudioCue,
    ChoicePrompt,
    DailySummary,
    Ending,
    Notice,
    NullPresenter,
    Presenter,
    Snapshot,
    WeeklySummary,
    build_snapshot,
)
from .resolver import advance_to_next_day, check_catch_endings, check_mood_ending, settle_day
from .scheduler import ScheduledTask, TaskScheduler

logger = logging.getLogger(__name__)

# notice titles by kind, as the toast shows them
NOTICE_TITLES = {
    "warning": "小心老板！",
    "success": "工作完成！",
    "mood": "开始摸鱼！",
    "info": "提示",
}

CAUGHT_MESSAGE = "摸鱼被抓，绩效-1"
WORK_DONE_MESSAGE = "恭喜！今日工作目标已完成"
MOOD_LOW_MESSAGE = "心情值过低，需要休息一下"
LOTTERY_NOTICE_TITLE = "买了彩票"

_PROMPT_KIND = {GATE_RANDOM: PROMPT_RANDOM, GATE_SCRIPTED: PROMPT_SCRIPTED, GATE_CRISIS: PROMPT_CRISIS}


class Simulation:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        presenter: Optional[Presenter] = None,
        *,
        rng: Optional[random.Random] = None,
        random_events: Sequence[EventDefinition] = RANDOM_EVENTS,
        scripted_events: Sequence[EventDefinition] = SCRIPTED_EVENTS,
    ) -> None:
        validate_catalog(random_events)
        validate_catalog(scripted_events)

        self.config = config or EngineConfig()
        self.rules = self.config.rules
        self.presenter: Presenter = presenter or NullPresenter()
        self.arbiter = EventArbiter(self.rules, random_events, scripted_events)
        self.scheduler = TaskScheduler()
        self._lock = threading.RLock()
        self._rng_override = rng
        self.reset_count = 0
        self._init_run()

    def _init_run(self) -> None:
        r = self.rules
        self.state: GameState = default_start_state(
            day_length=r.day_length,
            mood=r.start_mood,
            money=r.start_money,
            relationship=r.start_relationship,
        )
        self.initial_state: GameState = copy.deepcopy(self.state)
        self.rng: random.Random = self._rng_override or rng_from("run", self.reset_count, base_seed=self.config.base_seed)
        self.run_log: List[Dict[str, Any]] = []

        self.pending_prompt: Optional[ChoicePrompt] = None
        self._pending_event: Optional[EventDefinition] = None
        self.notices: List[Notice] = []
        self.daily_summary: Optional[DailySummary] = None
        self.weekly_summary: Optional[WeeklySummary] = None
        self.ending: Optional[Ending] = None

        self._boss_window: Optional[ScheduledTask] = None
        self._boss_linger: Optional[ScheduledTask] = None
        self._tick_task = self.scheduler.call_every(self.config.tick_ms, "tick", self.tick)

    # -------------------------
    # Collaborator calls
    # -------------------------

    def _present(self, method: str, *args: Any) -> None:
        try:
            getattr(self.presenter, method)(*args)
        except Exception as e:
            logger.warning("presenter.%s failed: %s", method, e)

    def _cue(self, cue: AudioCue) -> None:
        self._present("cue", cue)

    def _render(self) -> None:
        self._present("render", self.snapshot())

    def _notify(self, message: str, kind: str = "info", title: Optional[str] = None) -> None:
        if self.state.game_ended:
            return
        notice = Notice(title=title or NOTICE_TITLES.get(kind, NOTICE_TITLES["info"]), message=message, kind=kind)
        self.notices.append(notice)
        self.state.paused_for_event = True
        self._cue(AudioCue.TIPS)
        self._present("present_notice", notice)

    # -------------------------
    # Clock
    # -------------------------

    def start(self) -> None:
        with self._lock:
            if self.state.started:
                return
            self.state.started = True
            self._render()

    def advance(self, ms: int) -> List[str]:
        """Move virtual time forward; returns the names of the tasks that fired."""
        with self._lock:
            return self.scheduler.advance(ms)

    def tick(self) -> bool:
        """One clock second. Returns False when the tick was a no-op."""
        with self._lock:
            s = self.state
            r = self.rules
            if s.game_ended or s.day_ended or not s.started or s.paused_for_event:
                return False

            s.seconds_left -= 1
            boss_due = apply_fishing_second(s, r) if s.is_fishing else False

            elapsed = r.day_length - s.seconds_left
            random_bucket: Optional[int] = None
            bucket = elapsed // r.random_event_bucket
            if bucket != s.last_minute_mark:
                s.last_minute_mark = bucket
                self._release_stale_gate()
                random_bucket = bucket

            signals = TickSignals(
                boss_due=boss_due,
                random_bucket=random_bucket,
                scripted_bucket=elapsed // r.scripted_bucket,
            )
            decision = self.arbiter.decide(s, self.rng, signals)
            if decision is not None:
                self._open(decision)

            if s.seconds_left <= 0:
                s.seconds_left = 0
                self._end_of_day()

            self._render()
            return True

    def _release_stale_gate(self) -> None:
        s = self.state
        if s.gate_owner is None:
            return
        stale = (s.gate_owner == GATE_BOSS and not s.boss_visible) or (
            s.gate_owner != GATE_BOSS and self.pending_prompt is None
        )
        if stale:
            logger.debug("releasing stale gate held by %s", s.gate_owner)
            s.gate_owner = None

    # -------------------------
    # Trigger application
    # -------------------------

    def _open(self, decision: TriggerDecision) -> None:
        s = self.state
        if decision.kind == GATE_BOSS:
            self._open_boss(decision)
            return

        s.gate_owner = decision.kind
        s.paused_for_event = True
        if decision.kind == GATE_CRISIS:
            s.relationship_event_triggered = True
            prompt = ChoicePrompt(
                kind=PROMPT_CRISIS,
                event_id=RELATIONSHIP_CRISIS_ID,
                title=RELATIONSHIP_CRISIS_TITLE,
                description=RELATIONSHIP_CRISIS_DESCRIPTION,
                option_a=RELATIONSHIP_CRISIS_ACK,
            )
        else:
            ev = decision.event
            assert ev is not None
            if decision.kind == GATE_RANDOM:
                s.last_event_bucket = decision.bucket
                s.daily_triggered_events.add(ev.id)
            else:
                s.consumed_scripted_events.add(ev.id)
            self._pending_event = ev
            prompt = ChoicePrompt(
                kind=_PROMPT_KIND[decision.kind],
                event_id=ev.id,
                title=ev.title,
                description=ev.description,
                option_a=ev.a.label,
                option_b=ev.b.label,
            )
        logger.debug("day %s: %s prompt %s", s.day, prompt.kind, prompt.event_id)
        self.pending_prompt = prompt
        self._cue(AudioCue.RANDOM_EVENT)
        self._present("present_choice", prompt)

    def _open_boss(self, decision: TriggerDecision) -> None:
        s = self.state
        s.boss_variant = decision.boss_variant
        s.boss_visible = True
        s.gate_owner = GATE_BOSS
        logger.debug("day %s: boss %s, window %sms", s.day, decision.boss_variant, decision.window_ms)
        self._cue(AudioCue.BOSS_CATCH)
        self.scheduler.cancel(self._boss_window)
        self._boss_window = self.scheduler.call_later(decision.window_ms, "boss_window", self._boss_window_expired)

    def _boss_window_expired(self) -> None:
        with self._lock:
            self._boss_window = None
            s = self.state
            if s.game_ended:
                return
            if s.is_fishing:
                apply_catch(s, self.rules)
                self.run_log.append(
                    {
                        "type": "caught",
                        "day": int(s.day),
                        "variant": s.boss_variant,
                        "daily_caught": int(s.daily_caught),
                        "weekly_caught": int(s.weekly_caught),
                    }
                )
                self._notify(CAUGHT_MESSAGE, "warning")
                ending = check_catch_endings(s, self.rules)
                if ending is not None:
                    self._finish(ending)
                    return
            self._boss_linger = self.scheduler.call_later(self.rules.boss_linger_ms, "boss_linger", self._boss_linger_done)
            self._render()

    def _boss_linger_done(self) -> None:
        with self._lock:
            self._boss_linger = None
            s = self.state
            s.boss_visible = False
            if s.gate_owner == GATE_BOSS:
                s.gate_owner = None
            self._render()

    def _cancel_boss_tasks(self) -> None:
        self.scheduler.cancel(self._boss_window)
        self.scheduler.cancel(self._boss_linger)
        self._boss_window = None
        self._boss_linger = None

    # -------------------------
    # Player input
    # -------------------------

    def click_work(self) -> bool:
        with self._lock:
            s = self.state
            if not s.started or s.game_ended or s.day_ended or s.paused_for_event:
                return False
            if s.is_fishing:
                self._close_fish()
            s.clicks_today += 1

            if apply_click_fatigue(s, self.rules):
                ending = check_mood_ending(s, self.rules)
                if ending is not None:
                    self._finish(ending)
                    return True
                if s.mood < self.rules.low_mood_mark:
                    self._notify(MOOD_LOW_MESSAGE, "mood")

            if not s.work_done_notified and s.clicks_today >= self.rules.work_target:
                s.work_done_notified = True
                s.work_done_elapsed = self.rules.day_length - s.seconds_left
                self._cue(AudioCue.SUCCESS)
                self._notify(WORK_DONE_MESSAGE, "success")
            self._render()
            return True

    def open_fish(self) -> bool:
        with self._lock:
            s = self.state
            if not s.started or s.game_ended or s.day_ended or s.paused_for_event or s.is_fishing:
                return False
            s.is_fishing = True
            self._cue(AudioCue.FISHING_BGM_START)
            self._render()
            return True

    def close_fish(self) -> bool:
        with self._lock:
            if not self.state.is_fishing and not self.state.boss_visible:
                return False
            self._close_fish()
            self._render()
            return True

    def _close_fish(self) -> None:
        s = self.state
        if s.is_fishing:
            self._cue(AudioCue.FISHING_BGM_STOP)
        s.is_fishing = False
        self._cancel_boss_tasks()
        s.boss_visible = False
        s.fish_accum_sec = 0
        s.boss_accum_sec = 0
        if s.gate_owner == GATE_BOSS:
            s.gate_owner = None

    def choose(self, branch: Union[Branch, str]) -> Optional[OutcomeReport]:
        """Resolve the pending prompt with branch A or B.

        Raises:
            ValueError: no prompt is pending, or B was chosen on an
                acknowledgement-only prompt.
        """
        with self._lock:
            prompt = self.pending_prompt
            if prompt is None:
                raise ValueError("No pending choice")
            branch = Branch(branch)
            if prompt.option_b is None and branch != Branch.A:
                raise ValueError(f"Prompt {prompt.event_id} only accepts A")

            s = self.state
            if prompt.kind == PROMPT_CRISIS:
                s.daily_penalty_perf += float(self.rules.crisis_penalty)
                self._close_prompt()
                self.run_log.append(
                    {
                        "type": "crisis",
                        "day": int(s.day),
                        "penalty": float(self.rules.crisis_penalty),
                        "after": metrics_to_dict(s),
                    }
                )
                self._notify(RELATIONSHIP_CRISIS_NOTICE, "warning")
                self._render()
                return None

            ev = self._pending_event
            assert ev is not None
            outcome = ev.outcome(branch)
            report = apply_outcome(
                s,
                outcome.to_delta(),
                rules=self.rules,
                rng=self.rng,
                special=outcome.special,
                flag_rules=ev.flags,
                branch=branch,
            )
            social = bool(ev.social and outcome.relationship > 0)
            if social:
                s.social_event_count += 1
            self._close_prompt()

            self.run_log.append(
                {
                    "type": "choice",
                    "day": int(s.day),
                    "kind": prompt.kind,
                    "event_id": ev.id,
                    "branch": branch.value,
                    "label": outcome.label,
                    "social": social,
                    **report.to_dict(),
                }
            )
            if report.expense:
                logger.debug("day %s: %s cost %.1f", s.day, ev.id, report.expense)
            if report.lottery_message:
                self._notify(report.lottery_message, "success" if report.lottery_win > 0 else "info", title=LOTTERY_NOTICE_TITLE)
            self._render()
            return report

    def acknowledge(self) -> Optional[OutcomeReport]:
        return self.choose(Branch.A)

    def _close_prompt(self) -> None:
        s = self.state
        self.pending_prompt = None
        self._pending_event = None
        if s.gate_owner in (GATE_RANDOM, GATE_SCRIPTED, GATE_CRISIS):
            s.gate_owner = None
        s.paused_for_event = bool(self.notices)

    def dismiss_notice(self) -> Optional[Notice]:
        with self._lock:
            if not self.notices:
                return None
            notice = self.notices.pop(0)
            if not self.notices and self.pending_prompt is None:
                self.state.paused_for_event = False
            self._render()
            return notice

    # -------------------------
    # Day flow
    # -------------------------

    def _end_of_day(self) -> None:
        s = self.state
        if s.day_ended:
            return
        self._close_fish()
        self.pending_prompt = None
        self._pending_event = None
        self.notices = []
        s.gate_owner = None
        s.paused_for_event = False

        settlement = settle_day(s, self.rules)
        if settlement is None:
            return
        self.run_log.append({"type": "settlement", "day": int(s.day), **settlement.to_dict(), "after": metrics_to_dict(s)})
        if settlement.ending is not None:
            self._finish(settlement.ending)
            return

        self._cue(AudioCue.END_OF_DAY)
        if settlement.weekly is not None:
            self.weekly_summary = settlement.weekly
            self._present("present_weekly_summary", settlement.weekly)
        self.daily_summary = settlement.daily
        self._present("present_daily_summary", settlement.daily)

    def end_day_now(self) -> bool:
        """Run end-of-day resolution immediately (debug / headless use)."""
        with self._lock:
            s = self.state
            if s.game_ended or s.day_ended or not s.started:
                return False
            s.seconds_left = 0
            self._end_of_day()
            self._render()
            return True

    def _finish(self, ending: Ending) -> None:
        s = self.state
        s.game_ended = True
        self.ending = ending
        self._cancel_boss_tasks()
        self.run_log.append({"type": "ending", **asdict(ending)})
        logger.info("game ended on day %s: %s", ending.day, ending.key)
        self._cue(AudioCue.WARNING if ending.kind == "bad" else AudioCue.END_OF_DAY)
        self._present("present_ending", ending)

    def proceed_next_day(self) -> bool:
        """Continue from the day summary. Returns False when not at a summary."""
        with self._lock:
            s = self.state
            if not s.day_ended or s.game_ended:
                return False
            from_day = int(s.day)
            self._present("play_day_transition", from_day, next_workday(from_day))
            advance_to_next_day(s, self.rules)
            self._cancel_boss_tasks()
            self.daily_summary = None
            self.weekly_summary = None
            self.notices = []
            logger.debug("day %s -> %s", from_day, s.day)
            self._render()
            return True

    def reset_game(self) -> None:
        """Back to the start screen with a fresh state and RNG stream."""
        with self._lock:
            self.scheduler.cancel_all()
            self.reset_count += 1
            self._init_run()
            self._render()

    # -------------------------
    # Read side
    # -------------------------

    @property
    def pending_notice(self) -> Optional[Notice]:
        return self.notices[0] if self.notices else None

    def snapshot(self) -> Snapshot:
        return build_snapshot(self.state, self.rules)

    def export_run(self) -> Dict[str, Any]:
        with self._lock:
            return make_run_export(
                seed=self.config.base_seed,
                config=asdict(self.config),
                initial_state=self.initial_state,
                logs=self.run_log,
            )
