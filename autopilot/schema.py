"""
Observation and Action Schema for the Gap Runner Environment.

Defines the fixed-size numeric observation vector and the two-action
discrete action space.
"""

from dataclasses import dataclass

# =============================================================================
# ACTION SPACE CONSTANTS
# =============================================================================

ACTION_NOOP = 0
ACTION_JUMP = 1

TOTAL_ACTIONS = 2

ACTION_NAMES = {
    ACTION_NOOP: "noop",
    ACTION_JUMP: "jump",
}


# =============================================================================
# OBSERVATION SCHEMA
# =============================================================================

OBSERVATION_FEATURES = [
    "body_y",            # top edge / field height
    "body_velocity",     # velocity / MAX_VELOCITY
    "has_target",        # 1.0 if an obstacle is ahead
    "target_distance",   # (target.x - body.x) / field width
    "target_gap_top",    # gap top / field height
    "target_gap_bottom", # gap bottom / field height
    "center_offset",     # (body center - gap center) / field height
    "next_gap_delta",    # (second gap top - first gap top) / field height
]


@dataclass
class ObservationSpec:
    """Defines the observation vector structure."""

    # A) Body state (2 values)
    BODY_START = 0
    BODY_SIZE = 2

    # B) Target obstacle (5 values)
    TARGET_START = BODY_START + BODY_SIZE
    TARGET_SIZE = 5

    # C) Lookahead to the obstacle after the target (1 value)
    LOOKAHEAD_START = TARGET_START + TARGET_SIZE
    LOOKAHEAD_SIZE = 1

    # Total observation size
    TOTAL_SIZE = LOOKAHEAD_START + LOOKAHEAD_SIZE


# Scaling constant for normalization
MAX_VELOCITY = 15.0


def get_observation_size() -> int:
    """Return total observation vector size."""
    return ObservationSpec.TOTAL_SIZE

