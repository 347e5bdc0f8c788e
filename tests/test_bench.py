"""Tests for the evaluation CLI."""

from bench.evaluate import evaluate_policies, format_comparison, main
from flapsim.runner import idle_policy


def test_evaluate_policies():
    results = evaluate_policies({"idle": idle_policy}, n_episodes=2, seed=0, max_steps=100)
    assert list(results) == ["idle"]
    assert results["idle"]["avg_steps"] == 34


def test_format_comparison():
    results = evaluate_policies({"idle": idle_policy}, n_episodes=1, seed=0, max_steps=100)
    lines = format_comparison(results)
    assert lines[1] == "POLICY COMPARISON"
    assert lines[-1] == "Best policy by score: idle"


def test_main(capsys):
    results = main(["--episodes", "1", "--policy", "idle", "--policy", "random", "--max-steps", "50"])
    assert set(results) == {"idle", "random"}
    out = capsys.readouterr().out
    assert "POLICY COMPARISON" in out
