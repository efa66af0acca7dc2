"""engine.sim_runner

Headless runner for quick sanity checks.

This keeps tests deterministic and CI-friendly: no Streamlit, no real time.
It uses a recording presenter and a tiny auto-player that clicks to quota,
answers every prompt with A and dismisses every notice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .config import EngineConfig
from .ports import AudioCue, ChoicePrompt, DailySummary, Ending, Notice, Snapshot, WeeklySummary
from .simulation import Simulation


@dataclass
class RecordingPresenter:
    """Deterministic presenter for tests: remembers everything it was shown."""

    snapshots: List[Snapshot] = field(default_factory=list)
    prompts: List[ChoicePrompt] = field(default_factory=list)
    notices: List[Notice] = field(default_factory=list)
    daily: List[DailySummary] = field(default_factory=list)
    weekly: List[WeeklySummary] = field(default_factory=list)
    endings: List[Ending] = field(default_factory=list)
    cues: List[AudioCue] = field(default_factory=list)
    transitions: List[Tuple[int, int]] = field(default_factory=list)

    def render(self, snapshot: Snapshot) -> None:
        self.snapshots.append(snapshot)

    def present_choice(self, prompt: ChoicePrompt) -> None:
        self.prompts.append(prompt)

    def present_notice(self, notice: Notice) -> None:
        self.notices.append(notice)

    def present_daily_summary(self, summary: DailySummary) -> None:
        self.daily.append(summary)

    def present_weekly_summary(self, summary: WeeklySummary) -> None:
        self.weekly.append(summary)

    def present_ending(self, ending: Ending) -> None:
        self.endings.append(ending)

    def cue(self, cue: AudioCue) -> None:
        self.cues.append(cue)

    def play_day_transition(self, from_day: int, to_day: int) -> None:
        self.transitions.append((from_day, to_day))

    @property
    def last(self) -> Optional[Snapshot]:
        return self.snapshots[-1] if self.snapshots else None


def play_day(sim: Simulation, *, fish_seconds: int = 0) -> None:
    """Auto-play the current day until it is settled (or the game ends).

    Clicks the whole quota up front, optionally slacks off for `fish_seconds`
    (closing the minigame as soon as the boss shows up), then lets the clock run.
    """
    rules = sim.rules
    s = sim.state
    while s.clicks_today < rules.work_target and not s.game_ended:
        if sim.pending_prompt is not None:
            sim.choose("A")
        elif sim.notices:
            sim.dismiss_notice()
        else:
            sim.click_work()

    fished = 0
    while not s.day_ended and not s.game_ended:
        if sim.pending_prompt is not None:
            sim.choose("A")
            continue
        if sim.notices:
            sim.dismiss_notice()
            continue
        if s.boss_visible:
            sim.close_fish()
        elif fished < fish_seconds and not s.is_fishing:
            sim.open_fish()
        elif fished >= fish_seconds and s.is_fishing:
            sim.close_fish()
        sim.advance(sim.config.tick_ms)
        if s.is_fishing:
            fished += 1


def run_headless_sim(days: int = 10, *, base_seed: int = 123, rules_key: str = "standard", fish_seconds: int = 30) -> Dict[str, Any]:
    """Run a deterministic simulation and return summary."""
    cfg = EngineConfig(base_seed=base_seed, rules_key=rules_key)
    presenter = RecordingPresenter()
    sim = Simulation(cfg, presenter)
    sim.start()

    played = 0
    while played < days and not sim.state.game_ended:
        play_day(sim, fish_seconds=fish_seconds)
        played += 1
        if sim.state.game_ended:
            break
        sim.proceed_next_day()

    return {
        "days": played,
        "final": sim.state,
        "ending": sim.ending,
        "logs": list(sim.run_log),
        "presenter": presenter,
    }
