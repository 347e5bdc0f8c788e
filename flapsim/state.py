"""
Pure Python Game State Container.

This module defines the state structures used by the simulation,
independent of any presentation layer. All containers are immutable;
the mechanics produce new instances on every tick.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Sequence, Tuple

from flapsim.config import SimConfig, DEFAULT_CONFIG


# Modes
MODE_MANUAL = "manual"
MODE_AUTOPILOT = "autopilot"
MODES = (MODE_MANUAL, MODE_AUTOPILOT)

# Phases
PHASE_IDLE = "idle"
PHASE_RUNNING = "running"
PHASE_OVER = "over"


@dataclass(frozen=True)
class Body:
    """The controlled body. x never changes after creation."""
    x: float = 100.0
    y: float = 300.0
    velocity: float = 0.0

    def to_dict(self) -> Dict:
        return {"x": self.x, "y": self.y, "velocity": self.velocity}

    @classmethod
    def from_dict(cls, d: Dict) -> "Body":
        return cls(
            x=float(d.get("x", 100.0)),
            y=float(d.get("y", 300.0)),
            velocity=float(d.get("velocity", 0.0)),
        )


@dataclass(frozen=True)
class Obstacle:
    """A pair of barriers with a passable gap between gap_top and gap_bottom."""
    x: float
    gap_top: float
    gap_bottom: float
    passed: bool = False

    def gap_center(self) -> float:
        return (self.gap_top + self.gap_bottom) / 2

    def trailing_edge(self, pipe_width: float) -> float:
        return self.x + pipe_width

    def to_dict(self) -> Dict:
        return {
            "x": self.x,
            "gap_top": self.gap_top,
            "gap_bottom": self.gap_bottom,
            "passed": self.passed,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "Obstacle":
        return cls(
            x=float(d["x"]),
            gap_top=float(d["gap_top"]),
            gap_bottom=float(d["gap_bottom"]),
            passed=bool(d.get("passed", False)),
        )


@dataclass(frozen=True)
class Session:
    """Complete session state: one body, the tracked obstacles, and the score."""
    body: Body = field(default_factory=Body)
    obstacles: Tuple[Obstacle, ...] = ()
    mode: str = MODE_MANUAL
    phase: str = PHASE_IDLE
    score: int = 0
    tick: int = 0
    jumps: int = 0

    def with_changes(self, **changes) -> "Session":
        return replace(self, **changes)

    def to_dict(self) -> Dict:
        return {
            "body": self.body.to_dict(),
            "obstacles": [o.to_dict() for o in self.obstacles],
            "mode": self.mode,
            "phase": self.phase,
            "score": self.score,
            "tick": self.tick,
            "jumps": self.jumps,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "Session":
        return cls(
            body=Body.from_dict(d.get("body", {})),
            obstacles=tuple(Obstacle.from_dict(o) for o in d.get("obstacles", [])),
            mode=d.get("mode", MODE_MANUAL),
            phase=d.get("phase", PHASE_IDLE),
            score=int(d.get("score", 0)),
            tick=int(d.get("tick", 0)),
            jumps=int(d.get("jumps", 0)),
        )


def initial_body(config: SimConfig = DEFAULT_CONFIG) -> Body:
    """Body at its starting position, at rest."""
    return Body(x=float(config.body_x), y=float(config.body_start_y), velocity=0.0)


def create_session(
    config: SimConfig = DEFAULT_CONFIG,
    mode: str = MODE_MANUAL
) -> Session:
    """Create an idle session with the body at its start position."""
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode!r}")
    return Session(body=initial_body(config), mode=mode)


def snapshot(session: Session) -> Dict:
    """Read-only view handed to renderers and policies."""
    return {
        "body": session.body.to_dict(),
        "obstacles": [o.to_dict() for o in session.obstacles],
        "score": session.score,
        "phase": session.phase,
        "mode": session.mode,
        "tick": session.tick,
    }


def nearest_obstacle_ahead(
    body: Body,
    obstacles: Sequence[Obstacle],
    config: SimConfig = DEFAULT_CONFIG,
    lookbehind: float = 0.0
) -> Optional[Obstacle]:
    """
    Nearest obstacle whose trailing edge is still ahead of the body's leading edge.

    `lookbehind` extends the body's reach backwards so an obstacle the body
    is still crossing can stay selected. It is capped at the body size, so an
    obstacle the body has fully cleared is never returned. Obstacles are
    scanned in ascending x regardless of storage order.
    """
    reach = body.x + config.body_size - min(max(lookbehind, 0.0), config.body_size)
    for obstacle in sorted(obstacles, key=lambda o: o.x):
        if obstacle.trailing_edge(config.pipe_width) > reach:
            return obstacle
    return None
