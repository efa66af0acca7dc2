"""content.schemas

Contracts for event catalogs:
- EventOutcome: one branch's deltas (+ optional special tag).
- EventCondition: eligibility gate for scripted events.
- FlagRule: which story flag a branch writes.
- EventDefinition: immutable catalog entry (random or scripted).

Design choice:
Definitions never carry mutable progress. Which scripted events were consumed
lives in the per-game state, so one catalog can back any number of games.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from core.calendar import is_workday
from core.state import Branch, Delta, StoryFlag

ALLOWED_SPECIALS = {"lottery"}
ALLOWED_CHARACTERS = {"", "mentor", "annoying", "partner", "general"}

CONDITION_RELATIONSHIP = "relationship"
CONDITION_FLAG = "flag"


@dataclass(frozen=True)
class EventOutcome:
    label: str
    mood: float = 0.0
    perf: float = 0.0
    money: float = 0.0
    relationship: float = 0.0
    special: Optional[str] = None

    def to_delta(self) -> Delta:
        return {
            "mood": float(self.mood),
            "perf": float(self.perf),
            "money": float(self.money),
            "relationship": float(self.relationship),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, **self.to_delta(), "special": self.special}


@dataclass(frozen=True)
class EventCondition:
    kind: str  # relationship | flag
    threshold: float = 0.0
    flag: Optional[StoryFlag] = None
    value: Optional[Branch] = None

    @staticmethod
    def relationship_at_least(threshold: float) -> "EventCondition":
        return EventCondition(kind=CONDITION_RELATIONSHIP, threshold=float(threshold))

    @staticmethod
    def flag_equals(flag: StoryFlag, value: Branch) -> "EventCondition":
        return EventCondition(kind=CONDITION_FLAG, flag=flag, value=value)

    def is_met(self, relationship: float, story_flags: Mapping[StoryFlag, Branch]) -> bool:
        if self.kind == CONDITION_RELATIONSHIP:
            return float(relationship) >= self.threshold
        if self.kind == CONDITION_FLAG:
            return story_flags.get(self.flag) == self.value
        return False

    def to_dict(self) -> Dict[str, Any]:
        if self.kind == CONDITION_RELATIONSHIP:
            return {"type": self.kind, "value": self.threshold}
        return {
            "type": self.kind,
            "flag": self.flag.value if self.flag else None,
            "value": self.value.value if self.value else None,
        }


@dataclass(frozen=True)
class FlagRule:
    flag: StoryFlag
    when: Optional[Branch] = None  # None: either branch writes it


@dataclass(frozen=True)
class EventDefinition:
    id: str
    title: str
    description: str
    a: EventOutcome
    b: EventOutcome
    day: Optional[int] = None
    condition: Optional[EventCondition] = None
    flags: Tuple[FlagRule, ...] = field(default_factory=tuple)
    character: str = ""
    social: bool = False  # counts toward socialEventCount when the pick raises relationship

    def outcome(self, branch: Branch) -> EventOutcome:
        return self.a if Branch(branch) == Branch.A else self.b

    def is_eligible(self, day: int, relationship: float, story_flags: Mapping[StoryFlag, Branch]) -> bool:
        if self.day is not None and int(self.day) != int(day):
            return False
        if self.condition is not None and not self.condition.is_met(relationship, story_flags):
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "a": self.a.to_dict(),
            "b": self.b.to_dict(),
            "day": self.day,
            "condition": self.condition.to_dict() if self.condition else None,
            "flags": {r.flag.value: (r.when.value if r.when else "A_or_B") for r in self.flags},
            "character": self.character,
            "social": self.social,
        }


def validate_outcome(o: EventOutcome, where: str) -> None:
    if len((o.label or "").strip()) < 1:
        raise ValueError(f"{where}: label empty")
    if o.special is not None and o.special not in ALLOWED_SPECIALS:
        raise ValueError(f"{where}: unknown special {o.special!r}")


def validate_event_definition(ev: EventDefinition) -> None:
    if not ev.id or not ev.id.strip():
        raise ValueError("event id must be non-empty")
    if len((ev.title or "").strip()) < 2:
        raise ValueError(f"{ev.id}: title too short")
    if not (ev.description or "").strip():
        raise ValueError(f"{ev.id}: description empty")
    validate_outcome(ev.a, f"{ev.id}.a")
    validate_outcome(ev.b, f"{ev.id}.b")
    if ev.day is not None:
        if not isinstance(ev.day, int) or ev.day < 1:
            raise ValueError(f"{ev.id}: day must be int >= 1")
        if not is_workday(ev.day):
            raise ValueError(f"{ev.id}: day {ev.day} falls on a weekend")
    if ev.condition is not None:
        c = ev.condition
        if c.kind not in {CONDITION_RELATIONSHIP, CONDITION_FLAG}:
            raise ValueError(f"{ev.id}: unknown condition type {c.kind!r}")
        if c.kind == CONDITION_FLAG and (c.flag is None or c.value is None):
            raise ValueError(f"{ev.id}: flag condition needs flag and value")
    if ev.character not in ALLOWED_CHARACTERS:
        raise ValueError(f"{ev.id}: unknown character {ev.character!r}")

    seen = set()
    for rule in ev.flags:
        if rule.flag in seen:
            raise ValueError(f"{ev.id}: flag {rule.flag.value} declared twice")
        seen.add(rule.flag)


def validate_catalog(events: Iterable[EventDefinition]) -> None:
    ids = []
    for ev in events:
        validate_event_definition(ev)
        ids.append(ev.id)
    if len(set(ids)) != len(ids):
        raise ValueError("event ids must be unique")
