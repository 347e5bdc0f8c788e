"""
Heuristic Autopilot Policy.

Rule-based jump/no-jump policy. It reads the body and obstacle state and
never mutates it; the caller applies the impulse. This policy is also the
baseline the runner compares other policies against.
"""

import math
from dataclasses import dataclass, asdict, fields
from typing import Dict, Optional, Sequence

import numpy as np

from flapsim.config import SimConfig, DEFAULT_CONFIG
from flapsim.state import Body, Obstacle, Session, nearest_obstacle_ahead
from autopilot.schema import ACTION_NOOP, ACTION_JUMP


@dataclass(frozen=True)
class PilotConfig:
    """Thresholds for the decision rules, in field units and ticks."""
    ground_margin: float = 100.0          # jump unconditionally below field_height - this
    ceiling_margin: float = 30.0          # never jump above this y
    safe_altitude_fraction: float = 0.6   # cruise altitude with no target, fraction of height
    target_lookbehind: float = 30.0       # keep a target while the body crosses it; capped at body_size
    proximity_threshold: float = 120.0    # horizontal distance that starts the precision phase
    approach_lift: float = 15.0           # aim this far above the gap center while approaching
    approach_band: float = 40.0           # tolerated distance below the aim point while approaching
    projection_horizon: int = 4           # max ticks projected forward
    safety_margin: float = 15.0           # clearance kept from either barrier in the projection
    hysteresis_band: float = 20.0         # dead zone around the gap center

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict) -> "PilotConfig":
        kwargs = {}
        for f in fields(cls):
            if f.name in d:
                kwargs[f.name] = int(d[f.name]) if f.name == "projection_horizon" else float(d[f.name])
        return cls(**kwargs)


DEFAULT_PILOT = PilotConfig()


def find_target(
    body: Body,
    obstacles: Sequence[Obstacle],
    config: SimConfig = DEFAULT_CONFIG,
    pilot: PilotConfig = DEFAULT_PILOT
) -> Optional[Obstacle]:
    """
    Nearest obstacle whose trailing edge is still ahead of the body.

    The obstacle being crossed stays the target until the body has cleared
    it; see nearest_obstacle_ahead.
    """
    return nearest_obstacle_ahead(body, obstacles, config, pilot.target_lookbehind)


def project_y(body: Body, ticks: int, config: SimConfig = DEFAULT_CONFIG) -> float:
    """Body y after `ticks` steps with no impulse, ignoring boundaries."""
    y = body.y
    velocity = body.velocity
    for _ in range(ticks):
        y += velocity
        velocity += config.gravity
    return y


def ticks_until(distance: float, config: SimConfig = DEFAULT_CONFIG, horizon: int = 4) -> int:
    """
    Ticks until an obstacle reaches the body, clamped to [1, horizon].

    `distance` is measured from the body's leading edge to the obstacle's x.
    """
    if config.pipe_speed <= 0:
        return max(1, horizon)
    return int(min(horizon, max(1, math.ceil(distance / config.pipe_speed))))


def decide(
    body: Body,
    obstacles: Sequence[Obstacle],
    config: SimConfig = DEFAULT_CONFIG,
    pilot: PilotConfig = DEFAULT_PILOT
) -> bool:
    """
    Decide whether to jump this decision tick.

    Rules, first match wins:
      1. near the floor: jump
      2. near the ceiling: don't jump
      3. no target: hold the cruise altitude
      4. far from the target: drift toward a point just above the gap center
      5. close to the target: project a few ticks forward and avoid either
         barrier, with a dead zone around the gap center; never jump while
         clearly above it
    Anything undecided resolves to not jumping.
    """
    # ==========================================================================
    # EMERGENCIES
    # ==========================================================================
    if body.y > config.field_height - pilot.ground_margin:
        return True

    if body.y < pilot.ceiling_margin:
        return False

    # ==========================================================================
    # NO TARGET: cruise altitude
    # ==========================================================================
    target = find_target(body, obstacles, config, pilot)
    if target is None:
        return body.y > config.field_height * pilot.safe_altitude_fraction

    distance = target.x - body.x
    gap_center = target.gap_top + config.pipe_gap / 2
    body_center = body.y + config.body_size / 2

    # ==========================================================================
    # APPROACH PHASE
    # ==========================================================================
    if distance > pilot.proximity_threshold:
        aim = gap_center - pilot.approach_lift
        return body_center - aim > pilot.approach_band and body.velocity >= 0

    # ==========================================================================
    # PRECISION PHASE
    # ==========================================================================
    leading_edge = body.x + config.body_size
    ticks = ticks_until(target.x - leading_edge, config, pilot.projection_horizon)
    future_y = project_y(body, ticks, config)
    clearly_above = body_center < gap_center - pilot.hysteresis_band

    if not clearly_above and future_y + config.body_size > target.gap_bottom - pilot.safety_margin:
        return True

    if future_y < target.gap_top + pilot.safety_margin:
        return False

    if body_center > gap_center + pilot.hysteresis_band and body.velocity > 0:
        return True

    return False


def autopilot_select_action(
    session: Session,
    config: SimConfig = DEFAULT_CONFIG,
    pilot: PilotConfig = DEFAULT_PILOT
) -> int:
    """Map the decision onto the discrete action space."""
    if decide(session.body, session.obstacles, config, pilot):
        return ACTION_JUMP
    return ACTION_NOOP


def autopilot_policy_wrapper(
    session: Session,
    config: SimConfig,
    rng: np.random.Generator
) -> int:
    """Wrapper for the autopilot that matches the policy_fn signature."""
    return autopilot_select_action(session, config)
