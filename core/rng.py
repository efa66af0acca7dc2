"""
core.rng
Deterministic RNG helpers that do NOT rely on Python's built-in hash().

Goal:
- Same (base_seed + inputs) => same Random stream across platforms & runs.
- Every game decision draws through `rng.random()` only, so a run is fully
  described by its seed (and tests can substitute a scripted stream).
"""

from __future__ import annotations

import hashlib
import json
import random
from typing import Any, Sequence, TypeVar

T = TypeVar("T")


def stable_int_seed(*parts: Any, salt: str = "office-slacker") -> int:
    """Return a stable 32-bit integer seed derived from arbitrary inputs.

    Uses SHA-256 over a canonical JSON representation of `parts`.
    Output is 0..2**32-1 (works with random.Random).
    """
    payload = json.dumps(parts, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
    h = hashlib.sha256((salt + "|" + payload).encode("utf-8")).digest()
    return int.from_bytes(h[:4], "big", signed=False)


def rng_from(*parts: Any, base_seed: int) -> random.Random:
    """Create a Random instance from (base_seed + parts)."""
    seed = stable_int_seed(base_seed, *parts)
    return random.Random(seed)


def pick(rng: random.Random, items: Sequence[T]) -> T:
    """Uniform pick driven by a single rng.random() draw."""
    if not items:
        raise ValueError("pick() needs at least one item")
    idx = min(int(rng.random() * len(items)), len(items) - 1)
    return items[idx]
