import random

import pytest

from engine.config import EngineConfig
from engine.sim_runner import RecordingPresenter
from engine.simulation import Simulation


class FixedRandom(random.Random):
    """Every draw returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


class ScriptedRandom(random.Random):
    """Returns the queued draws in order, then `default`."""

    def __init__(self, draws, default: float = 0.99) -> None:
        super().__init__(0)
        self.draws = list(draws)
        self.default = default
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.draws:
            return self.draws.pop(0)
        return self.default


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def scripted_random():
    return ScriptedRandom


@pytest.fixture
def make_sim():
    """Started simulation + recording presenter. The default RNG never opens a prompt."""

    def _make(rng=None, rules_key="standard", **kwargs):
        presenter = RecordingPresenter()
        sim = Simulation(
            EngineConfig(rules_key=rules_key),
            presenter,
            rng=rng if rng is not None else FixedRandom(0.99),
            **kwargs,
        )
        sim.start()
        return sim, presenter

    return _make
