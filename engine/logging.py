"""engine.logging

Small helpers for exporting run logs.

A run log is JSON-serializable so the UI can offer it as a download.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from core.state import GameState, state_to_dict

EXPORT_VERSION = 1


def make_run_export(*, seed: int, config: Dict[str, Any], initial_state: GameState, logs: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "version": EXPORT_VERSION,
        "seed": int(seed),
        "config": dict(config),
        "initial_state": state_to_dict(initial_state),
        "logs": list(logs),
    }


def dumps_run_export(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)
