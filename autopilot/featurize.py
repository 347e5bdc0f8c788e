"""
Featurization: Convert session state to a fixed-size numeric observation vector.

This module is completely independent of any presentation layer.
"""

import numpy as np

from flapsim.config import SimConfig, DEFAULT_CONFIG
from flapsim.state import Session
from autopilot.schema import ObservationSpec, MAX_VELOCITY
from autopilot.policy_heuristic import PilotConfig, DEFAULT_PILOT, find_target


def clamp(value: float, min_val: float = -1.0, max_val: float = 1.0) -> float:
    """Clamp value to range."""
    return max(min_val, min(max_val, value))


def ratio(value: float, denominator: float) -> float:
    """Divide and clamp to [-1, 1]; zero denominators give 0."""
    if denominator == 0:
        return 0.0
    return clamp(value / denominator)


def featurize_session(
    session: Session,
    config: SimConfig = DEFAULT_CONFIG,
    pilot: PilotConfig = DEFAULT_PILOT
) -> np.ndarray:
    """
    Convert a session to an observation vector.

    The target obstacle is chosen the same way the autopilot chooses it, so a
    learned policy and the heuristic look at the same obstacle.

    Returns:
        float32 array of shape (ObservationSpec.TOTAL_SIZE,), values in [-1, 1]
    """
    obs = np.zeros(ObservationSpec.TOTAL_SIZE, dtype=np.float32)
    body = session.body

    i = ObservationSpec.BODY_START
    obs[i] = ratio(body.y, config.field_height)
    obs[i + 1] = ratio(body.velocity, MAX_VELOCITY)

    target = find_target(body, session.obstacles, config, pilot)
    if target is None:
        return obs

    i = ObservationSpec.TARGET_START
    body_center = body.y + config.body_size / 2
    obs[i] = 1.0
    obs[i + 1] = ratio(target.x - body.x, config.field_width)
    obs[i + 2] = ratio(target.gap_top, config.field_height)
    obs[i + 3] = ratio(target.gap_bottom, config.field_height)
    obs[i + 4] = ratio(body_center - target.gap_center(), config.field_height)

    following = [o for o in session.obstacles if o.x > target.x]
    if following:
        upcoming = min(following, key=lambda o: o.x)
        obs[ObservationSpec.LOOKAHEAD_START] = ratio(
            upcoming.gap_top - target.gap_top, config.field_height
        )

    return obs
