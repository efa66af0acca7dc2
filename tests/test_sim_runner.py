from core.selfcheck import run_week_smoke
from engine.sim_runner import run_headless_sim


def test_headless_week_runs_to_the_weekend():
    out = run_headless_sim(days=5, base_seed=123)
    assert out["days"] == 5
    assert out["ending"] is None
    presenter = out["presenter"]
    assert len(presenter.daily) == 5
    assert len(presenter.weekly) == 1
    assert presenter.transitions[-1] == (5, 8)
    assert out["final"].day == 8
    assert out["final"].daily_caught == 0


def test_headless_run_is_deterministic():
    a = run_headless_sim(days=3, base_seed=7)
    b = run_headless_sim(days=3, base_seed=7)
    assert a["logs"] == b["logs"]


def test_core_smoke(capsys):
    run_week_smoke()
    assert "OK: one-week core smoke test passed." in capsys.readouterr().out
