"""Tests for the Gym-like environment and its gymnasium wrapper."""

import numpy as np
import pytest

from flapsim.env import GapRunnerEnv, GapRunnerGymEnv, render_text, CRASH_PENALTY, ALIVE_REWARD
from flapsim.session import END_BOUNDARY
from flapsim.state import Body, Obstacle, Session, PHASE_RUNNING, PHASE_OVER, create_session
from autopilot.policy_heuristic import find_target
from autopilot.schema import ACTION_JUMP, ACTION_NOOP, get_observation_size


def test_step_before_reset():
    env = GapRunnerEnv(seed=0)
    with pytest.raises(RuntimeError):
        env.step(ACTION_NOOP)
    assert env.render_text() == "Environment not reset"


def test_reset_starts_running():
    env = GapRunnerEnv(seed=0)
    obs, info = env.reset()
    assert obs.shape == (get_observation_size(),)
    assert obs.dtype == np.float32
    assert info["phase"] == PHASE_RUNNING
    assert info["score"] == 0


def test_jump_action():
    env = GapRunnerEnv(seed=0)
    env.reset()
    _, reward, done, truncated, info = env.step(ACTION_JUMP)
    assert env.session.body.y == 293
    assert env.session.body.velocity == -6.5
    assert reward == ALIVE_REWARD
    assert not done and not truncated
    assert info["jumps"] == 1


def test_invalid_action():
    env = GapRunnerEnv(seed=0)
    env.reset()
    with pytest.raises(ValueError):
        env.step(5)


def test_falling_ends_episode():
    env = GapRunnerEnv(seed=0)
    env.reset()
    done = False
    steps = 0
    while not done:
        _, reward, done, _, info = env.step(ACTION_NOOP)
        steps += 1
    assert steps == 34
    assert info["end_reason"] == END_BOUNDARY
    assert info["phase"] == PHASE_OVER
    assert reward == pytest.approx(ALIVE_REWARD + CRASH_PENALTY)

    with pytest.raises(RuntimeError):
        env.step(ACTION_NOOP)


def test_truncation():
    env = GapRunnerEnv(seed=0, max_steps=5)
    env.reset()
    results = [env.step(ACTION_NOOP) for _ in range(5)]
    assert [r[3] for r in results] == [False, False, False, False, True]


def test_same_seed_same_obstacles():
    a = GapRunnerEnv(seed=9)
    b = GapRunnerEnv(seed=9)
    a.reset()
    b.reset()
    for _ in range(20):
        a.step(ACTION_NOOP)
        b.step(ACTION_NOOP)
    assert a.session.obstacles == b.session.obstacles


def test_gym_wrapper():
    env = GapRunnerGymEnv(seed=1)
    obs, info = env.reset(seed=1)
    assert env.observation_space.contains(obs)
    assert env.action_space.n == 2

    obs, reward, done, truncated, info = env.step(np.int64(ACTION_JUMP))
    assert env.observation_space.contains(obs)
    assert "=== Tick 1" in env.render()


def test_render_text_marks_target():
    env = GapRunnerEnv(seed=0)
    env.reset()
    env.step(ACTION_NOOP)
    text = render_text(env.session)
    assert "Score: 0" in text
    assert "<--" in text
    assert "(none)" in render_text(create_session())


def test_render_text_marks_autopilot_target():
    session = Session(
        body=Body(x=100, y=300),
        obstacles=(
            Obstacle(x=35, gap_top=50, gap_bottom=220, passed=True),
            Obstacle(x=235, gap_top=200, gap_bottom=370),
        ),
    )
    marked = [line for line in render_text(session).splitlines() if "<--" in line]
    assert len(marked) == 1
    assert "x= 235.0" in marked[0]
    assert find_target(session.body, session.obstacles) == session.obstacles[1]
