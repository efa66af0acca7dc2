"""engine.ports

Collaborator interfaces and the records passed across them.

The simulation never renders, plays audio or animates on its own. It hands
snapshots, prompts, summaries and cues to a Presenter; the Streamlit app and
the headless runner each provide one.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from core.calendar import format_workday_clock, weekday_name
from core.effects import shown_perf, work_progress
from core.rules import RuleSpec
from core.state import GameState


class AudioCue(str, Enum):
    TIPS = "tips"
    SUCCESS = "success"
    WARNING = "warning"
    BOSS_CATCH = "bossCatch"
    RANDOM_EVENT = "randomEvent"
    END_OF_DAY = "endOfDay"
    FISHING_BGM_START = "fishingBgmStart"
    FISHING_BGM_STOP = "fishingBgmStop"


PROMPT_RANDOM = "random"
PROMPT_SCRIPTED = "scripted"
PROMPT_CRISIS = "crisis"


@dataclass(frozen=True)
class Snapshot:
    day: int
    weekday: str
    clock: str
    seconds_left: int
    mood: float
    perf: float
    progress: float
    money: float
    is_fishing: bool
    boss_visible: bool
    boss_variant: str
    paused: bool
    day_ended: bool
    game_ended: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ChoicePrompt:
    kind: str  # random | scripted | crisis
    event_id: str
    title: str
    description: str
    option_a: str
    option_b: Optional[str] = None  # None: acknowledgement-only


@dataclass(frozen=True)
class Notice:
    title: str
    message: str
    kind: str = "info"  # info | warning | success | mood


@dataclass(frozen=True)
class DailySummary:
    day: int
    daily_perf: float
    mood: float
    expenses: float
    money: float
    week_end: bool


@dataclass(frozen=True)
class WeeklySummary:
    day: int
    weekly_perf_total: float
    salary: float
    rent: float
    expenses: float
    money: float


@dataclass(frozen=True)
class Ending:
    kind: str  # good | bad
    key: str
    message: str
    day: int


class Presenter(Protocol):
    def render(self, snapshot: Snapshot) -> None: ...

    def present_choice(self, prompt: ChoicePrompt) -> None: ...

    def present_notice(self, notice: Notice) -> None: ...

    def present_daily_summary(self, summary: DailySummary) -> None: ...

    def present_weekly_summary(self, summary: WeeklySummary) -> None: ...

    def present_ending(self, ending: Ending) -> None: ...

    def cue(self, cue: AudioCue) -> None: ...

    def play_day_transition(self, from_day: int, to_day: int) -> None:
        """Blocks until the night/morning transition finished (may be a no-op)."""
        ...


class NullPresenter:
    """Presenter that ignores everything."""

    def render(self, snapshot: Snapshot) -> None:
        return None

    def present_choice(self, prompt: ChoicePrompt) -> None:
        return None

    def present_notice(self, notice: Notice) -> None:
        return None

    def present_daily_summary(self, summary: DailySummary) -> None:
        return None

    def present_weekly_summary(self, summary: WeeklySummary) -> None:
        return None

    def present_ending(self, ending: Ending) -> None:
        return None

    def cue(self, cue: AudioCue) -> None:
        return None

    def play_day_transition(self, from_day: int, to_day: int) -> None:
        return None


def build_snapshot(state: GameState, rules: RuleSpec) -> Snapshot:
    return Snapshot(
        day=int(state.day),
        weekday=weekday_name(state.day),
        clock=format_workday_clock(state.seconds_left, rules.day_length),
        seconds_left=int(state.seconds_left),
        mood=float(state.mood),
        perf=shown_perf(state.clicks_today, state.daily_penalty_perf, target=rules.work_target, base=rules.daily_base_perf),
        progress=work_progress(state.clicks_today, rules.work_target),
        money=max(0.0, float(state.money)),
        is_fishing=bool(state.is_fishing),
        boss_visible=bool(state.boss_visible),
        boss_variant=str(state.boss_variant),
        paused=bool(state.paused_for_event),
        day_ended=bool(state.day_ended),
        game_ended=bool(state.game_ended),
    )
