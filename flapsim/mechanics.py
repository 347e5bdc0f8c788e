"""
Deterministic Tick Mechanics.

Physics stepping for the body and the collision/scoring pass over the
tracked obstacles. Every function here is pure: inputs are never mutated.
"""

from dataclasses import dataclass, replace
from typing import Tuple, Sequence

from flapsim.config import SimConfig, DEFAULT_CONFIG
from flapsim.state import Body, Obstacle


@dataclass(frozen=True)
class StepOutcome:
    """Result of one physics step."""
    body: Body
    boundary_violation: bool = False


@dataclass(frozen=True)
class Evaluation:
    """Result of the collision and scoring pass."""
    obstacles: Tuple[Obstacle, ...]
    scored: int = 0
    collided: bool = False


# =============================================================================
# PHYSICS
# =============================================================================

def step_body(body: Body, config: SimConfig = DEFAULT_CONFIG) -> StepOutcome:
    """
    Advance the body by one tick.

    Position moves by the current velocity, then gravity is added to the
    velocity. A step that would leave [0, field_height - body_size] is
    reported as a boundary violation and the body is returned unchanged.
    """
    new_y = body.y + body.velocity
    new_velocity = body.velocity + config.gravity

    if new_y < 0 or new_y > config.max_body_y:
        return StepOutcome(body=body, boundary_violation=True)

    return StepOutcome(body=replace(body, y=new_y, velocity=new_velocity))


def apply_impulse(body: Body, config: SimConfig = DEFAULT_CONFIG) -> Body:
    """Override the vertical velocity with the jump force."""
    return replace(body, velocity=config.jump_force)


# =============================================================================
# COLLISION & SCORING
# =============================================================================

def overlaps_horizontally(body: Body, obstacle: Obstacle, config: SimConfig = DEFAULT_CONFIG) -> bool:
    """Check if the body's horizontal extent overlaps the obstacle's."""
    return (
        body.x + config.body_size > obstacle.x
        and body.x < obstacle.x + config.pipe_width
    )


def is_collision(body: Body, obstacle: Obstacle, config: SimConfig = DEFAULT_CONFIG) -> bool:
    """Check if the body touches either barrier of the obstacle."""
    if not overlaps_horizontally(body, obstacle, config):
        return False
    return body.y < obstacle.gap_top or body.y + config.body_size > obstacle.gap_bottom


def has_passed(body: Body, obstacle: Obstacle, config: SimConfig = DEFAULT_CONFIG) -> bool:
    """Check if the body is fully past the obstacle's trailing edge."""
    return body.x > obstacle.x + config.pipe_width


def evaluate(
    body: Body,
    obstacles: Sequence[Obstacle],
    config: SimConfig = DEFAULT_CONFIG
) -> Evaluation:
    """
    Run scoring then collision for every obstacle, in ascending x.

    Returns a new obstacle tuple in the original order; obstacles that were
    passed for the first time this tick carry passed=True.
    """
    order = sorted(range(len(obstacles)), key=lambda i: obstacles[i].x)
    updated = list(obstacles)
    scored = 0
    collided = False

    for idx in order:
        obstacle = updated[idx]

        if not obstacle.passed and has_passed(body, obstacle, config):
            obstacle = replace(obstacle, passed=True)
            updated[idx] = obstacle
            scored += 1

        if is_collision(body, obstacle, config):
            collided = True

    return Evaluation(obstacles=tuple(updated), scored=scored, collided=collided)
