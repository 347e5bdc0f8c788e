"""
Simulation Configuration.

Field geometry and physics constants. Every value is a fixed scalar for the
lifetime of a session; change them by building a new config.
"""

from dataclasses import dataclass, asdict, fields
from typing import Dict, List, Optional
import json
import logging
import math

logger = logging.getLogger(__name__)


# =============================================================================
# DEFAULTS
# =============================================================================

FIELD_WIDTH = 400
FIELD_HEIGHT = 600
BODY_SIZE = 30
PIPE_WIDTH = 60
PIPE_GAP = 170
GRAVITY = 0.5
JUMP_FORCE = -7.0
PIPE_SPEED = 3.0
HORIZONTAL_SPACING = 200
MIN_MARGIN = 50

BODY_X = 100
BODY_START_Y = 300

TICK_RATE = 60    # physics ticks per second
PILOT_RATE = 20   # autopilot decisions per second


@dataclass(frozen=True)
class SimConfig:
    """Constants used by the physics, obstacle and collision formulas."""
    field_width: float = FIELD_WIDTH
    field_height: float = FIELD_HEIGHT
    body_size: float = BODY_SIZE
    pipe_width: float = PIPE_WIDTH
    pipe_gap: float = PIPE_GAP
    gravity: float = GRAVITY
    jump_force: float = JUMP_FORCE
    pipe_speed: float = PIPE_SPEED
    horizontal_spacing: float = HORIZONTAL_SPACING
    min_margin: float = MIN_MARGIN
    # None disables the clamp against the previous obstacle's gap top
    max_consecutive_difference: Optional[float] = None
    body_x: float = BODY_X
    body_start_y: float = BODY_START_Y
    tick_rate: float = TICK_RATE
    pilot_rate: float = PILOT_RATE

    @property
    def max_body_y(self) -> float:
        """Largest valid body y (top edge) before touching the floor."""
        return self.field_height - self.body_size

    @property
    def gap_top_range(self) -> tuple:
        """Unclamped [min, max] range for a new obstacle's gap top."""
        return (self.min_margin, self.field_height - self.pipe_gap - self.min_margin)

    @property
    def decision_interval(self) -> int:
        """Physics ticks between two autopilot decisions."""
        if self.pilot_rate <= 0:
            return 1
        return max(1, int(round(self.tick_rate / self.pilot_rate)))

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict) -> "SimConfig":
        """Build a config from a dict, ignoring unknown keys."""
        kwargs = {}
        for f in fields(cls):
            if f.name not in d:
                continue
            value = d[f.name]
            if value is None and f.name == "max_consecutive_difference":
                kwargs[f.name] = None
                continue
            try:
                kwargs[f.name] = float(value)
            except (TypeError, ValueError):
                raise ValueError(f"Config value for '{f.name}' is not numeric: {value!r}")
        return cls(**kwargs)


def config_warnings(config: SimConfig) -> List[str]:
    """List misconfigurations that the engine will work around at runtime."""
    problems = []

    lo, hi = config.gap_top_range
    if not lo < hi:
        problems.append(
            f"gap top range collapsed ({lo} >= {hi}); spawns will be clamped"
        )

    if config.max_consecutive_difference is not None and config.max_consecutive_difference < 0:
        problems.append("max_consecutive_difference is negative")

    if config.jump_force >= 0:
        problems.append(f"jump_force should be negative, got {config.jump_force}")

    if config.pipe_gap <= config.body_size:
        problems.append("pipe_gap is not larger than body_size; no gap is passable")

    # Two obstacles overlapping the body at once would make evaluation order matter
    if config.horizontal_spacing < config.pipe_width + config.body_size:
        problems.append("horizontal_spacing allows two obstacles to overlap the body")

    for f in fields(config):
        value = getattr(config, f.name)
        if value is not None and not math.isfinite(value):
            problems.append(f"{f.name} is not finite")

    return problems


def load_config(path: str) -> SimConfig:
    """Load a SimConfig from a JSON file."""
    with open(path, "r") as f:
        data = json.load(f)

    config = SimConfig.from_dict(data)
    for problem in config_warnings(config):
        logger.warning("Config %s: %s", path, problem)
    return config


DEFAULT_CONFIG = SimConfig()
