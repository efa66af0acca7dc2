"""engine.config

Engine configuration passed from UI.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from core.rules import RuleSpec, get_rules


@dataclass(frozen=True)
class EngineConfig:
    base_seed: int = 42
    rules_key: str = "standard"
    tick_ms: int = 1000

    @property
    def rules(self) -> RuleSpec:
        return get_rules(self.rules_key)

    @staticmethod
    def from_mapping(d: Mapping[str, Any]) -> "EngineConfig":
        return EngineConfig(
            base_seed=int(d.get("base_seed", 42)),
            rules_key=str(d.get("rules_key", "standard")),
            tick_ms=int(d.get("tick_ms", 1000)),
        )
