"""Tests for physics stepping, collision and scoring."""

import pytest

from flapsim.config import SimConfig, DEFAULT_CONFIG
from flapsim.mechanics import step_body, apply_impulse, evaluate, is_collision, overlaps_horizontally
from flapsim.state import Body, Obstacle


# ---------------------------------------------------------------------------
# Physics
# ---------------------------------------------------------------------------


def test_gravity_increases_velocity_every_tick():
    body = Body(x=100, y=300, velocity=0.0)
    for _ in range(10):
        outcome = step_body(body)
        assert not outcome.boundary_violation
        assert outcome.body.velocity == pytest.approx(body.velocity + DEFAULT_CONFIG.gravity)
        assert outcome.body.y == pytest.approx(body.y + body.velocity)
        assert outcome.body.x == body.x
        body = outcome.body


def test_impulse_overrides_velocity():
    for velocity in (-3.0, 0.0, 4.5, 12.0):
        body = apply_impulse(Body(x=100, y=300, velocity=velocity))
        assert body.velocity == DEFAULT_CONFIG.jump_force


def test_step_past_floor_is_boundary_violation():
    body = Body(x=100, y=569, velocity=2.0)
    outcome = step_body(body)
    assert outcome.boundary_violation
    assert outcome.body == body


def test_step_above_ceiling_is_boundary_violation():
    body = Body(x=100, y=1, velocity=-2.0)
    outcome = step_body(body)
    assert outcome.boundary_violation
    assert outcome.body == body


def test_step_onto_floor_edge_is_allowed():
    outcome = step_body(Body(x=100, y=568, velocity=2.0))
    assert not outcome.boundary_violation
    assert outcome.body.y == 570


# ---------------------------------------------------------------------------
# Collision
# ---------------------------------------------------------------------------

SMALL_FIELD = SimConfig(field_width=400, field_height=600, body_size=25, pipe_width=60, pipe_gap=130)


def test_collision_above_gap():
    obstacle = Obstacle(x=100, gap_top=200, gap_bottom=330)
    body = Body(x=100, y=100)
    assert is_collision(body, obstacle, SMALL_FIELD)
    assert evaluate(body, [obstacle], SMALL_FIELD).collided


def test_no_collision_inside_gap():
    obstacle = Obstacle(x=100, gap_top=200, gap_bottom=330)
    body = Body(x=100, y=250)
    assert not is_collision(body, obstacle, SMALL_FIELD)
    assert not evaluate(body, [obstacle], SMALL_FIELD).collided


def test_collision_below_gap():
    obstacle = Obstacle(x=100, gap_top=200, gap_bottom=330)
    assert is_collision(Body(x=100, y=310), obstacle, SMALL_FIELD)


def test_touching_edges_do_not_overlap():
    body = Body(x=100, y=0)
    assert not overlaps_horizontally(body, Obstacle(x=130, gap_top=200, gap_bottom=370))
    assert not overlaps_horizontally(body, Obstacle(x=40, gap_top=200, gap_bottom=370))
    assert overlaps_horizontally(body, Obstacle(x=41, gap_top=200, gap_bottom=370))


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def test_scoring_fires_once():
    body = Body(x=100, y=300)
    obstacles = (Obstacle(x=39, gap_top=200, gap_bottom=370),)

    first = evaluate(body, obstacles)
    assert first.scored == 1
    assert first.obstacles[0].passed

    second = evaluate(body, first.obstacles)
    assert second.scored == 0
    assert second.obstacles[0].passed


def test_scoring_on_first_tick_past_trailing_edge():
    body = Body(x=100, y=300)
    obstacle = Obstacle(x=45, gap_top=200, gap_bottom=370)
    events = []

    for tick in range(5):
        result = evaluate(body, (obstacle,))
        events.append(result.scored)
        obstacle = Obstacle(
            x=result.obstacles[0].x - 3,
            gap_top=obstacle.gap_top,
            gap_bottom=obstacle.gap_bottom,
            passed=result.obstacles[0].passed,
        )

    # trailing edges: 105, 102, 99, 96, 93
    assert events == [0, 0, 1, 0, 0]


def test_evaluate_does_not_mutate_input():
    obstacles = [Obstacle(x=0, gap_top=200, gap_bottom=370)]
    result = evaluate(Body(x=100, y=300), obstacles)
    assert result.scored == 1
    assert obstacles[0].passed is False
    assert isinstance(result.obstacles, tuple)


def test_evaluate_keeps_storage_order():
    obstacles = (
        Obstacle(x=300, gap_top=100, gap_bottom=270),
        Obstacle(x=0, gap_top=200, gap_bottom=370),
    )
    result = evaluate(Body(x=100, y=300), obstacles)
    assert [o.x for o in result.obstacles] == [300, 0]
    assert [o.passed for o in result.obstacles] == [False, True]
