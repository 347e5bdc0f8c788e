"""
Obstacle Generation.

Scrolls, prunes and spawns obstacles. Gap positions are drawn from an
injectable numpy generator so runs are reproducible from a seed.
"""

import logging
import math
from dataclasses import replace
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from flapsim.config import SimConfig, DEFAULT_CONFIG
from flapsim.state import Obstacle

logger = logging.getLogger(__name__)


class GapRoller:
    """Deterministic gap-top generator with injectable RNG."""

    def __init__(
        self,
        seed: Union[int, np.random.Generator, None] = None,
        config: SimConfig = DEFAULT_CONFIG
    ):
        if isinstance(seed, np.random.Generator):
            self.rng = seed
        else:
            self.rng = np.random.default_rng(seed)
        self.config = config

    def gap_top_bounds(self, previous: Optional[float] = None) -> Tuple[float, float]:
        """
        Range a new gap top may be drawn from.

        The base range keeps min_margin clear above and below the gap. When
        max_consecutive_difference is set, the range is narrowed to within
        that distance of the previous obstacle's gap top.
        """
        lo, hi = self.config.gap_top_range
        limit = self.config.max_consecutive_difference

        if previous is not None and limit is not None:
            lo = max(lo, previous - limit)
            hi = min(hi, previous + limit)

        return lo, hi

    def midpoint(self) -> float:
        """Fallback gap top that centres the gap in the field."""
        return (self.config.field_height - self.config.pipe_gap) / 2

    def next_gap_top(self, previous: Optional[float] = None) -> float:
        """Draw the gap top for the next obstacle."""
        lo, hi = self.gap_top_bounds(previous)

        if lo >= hi:
            logger.warning("Degenerate gap top range [%s, %s]; clamping", lo, hi)
            value = self._clamp_to_field(lo)
        else:
            value = float(self.rng.uniform(lo, hi))

        if not math.isfinite(value):
            logger.warning("Non-finite gap top draw %r; using midpoint", value)
            value = self.midpoint()

        return value

    def _clamp_to_field(self, value: float) -> float:
        upper = max(0.0, self.config.field_height - self.config.pipe_gap)
        return min(max(value, 0.0), upper)


def spawn_obstacle(
    roller: GapRoller,
    previous: Optional[Obstacle] = None,
    config: SimConfig = DEFAULT_CONFIG
) -> Obstacle:
    """Create an obstacle at the right edge of the field."""
    gap_top = roller.next_gap_top(previous.gap_top if previous is not None else None)
    return Obstacle(
        x=float(config.field_width),
        gap_top=gap_top,
        gap_bottom=gap_top + config.pipe_gap,
        passed=False,
    )


def should_spawn(obstacles: Sequence[Obstacle], config: SimConfig = DEFAULT_CONFIG) -> bool:
    """Spawn when nothing is tracked or the newest obstacle has moved far enough."""
    if not obstacles:
        return True
    return obstacles[-1].x < config.field_width - config.horizontal_spacing


def advance_obstacles(
    obstacles: Sequence[Obstacle],
    roller: GapRoller,
    config: SimConfig = DEFAULT_CONFIG
) -> Tuple[Obstacle, ...]:
    """Scroll every obstacle left, drop the ones fully off-field, spawn if due."""
    moved = [
        replace(o, x=o.x - config.pipe_speed) for o in obstacles
    ]
    kept = [o for o in moved if o.x > -config.pipe_width]

    if should_spawn(kept, config):
        previous = kept[-1] if kept else None
        kept.append(spawn_obstacle(roller, previous, config))

    return tuple(kept)
