"""
Session State Machine.

idle -> running (first control input) -> over (boundary or collision)
-> idle (reset). Mode (manual/autopilot) is orthogonal to phase.

Each transition is a pure function Session -> Session. SessionController
holds the current session and is the only object that replaces it.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

import numpy as np

from flapsim.config import SimConfig, DEFAULT_CONFIG, config_warnings
from flapsim.state import (
    Session, create_session, snapshot,
    MODE_MANUAL, MODE_AUTOPILOT, MODES,
    PHASE_IDLE, PHASE_RUNNING, PHASE_OVER,
)
from flapsim.mechanics import step_body, apply_impulse, evaluate
from flapsim.obstacles import GapRoller, advance_obstacles
from autopilot.policy_heuristic import PilotConfig, DEFAULT_PILOT, decide

logger = logging.getLogger(__name__)


# End reasons
END_BOUNDARY = "boundary"
END_COLLISION = "collision"


@dataclass(frozen=True)
class TickResult:
    """Session after one physics tick plus what happened during it."""
    session: Session
    scored: int = 0
    end_reason: Optional[str] = None


# =============================================================================
# TRANSITIONS
# =============================================================================

def advance(
    session: Session,
    config: SimConfig,
    roller: GapRoller
) -> TickResult:
    """
    Run one physics tick: body, then obstacles, then collision and scoring.

    Does nothing unless the session is running. A boundary violation ends
    the run before obstacles move, leaving body and obstacles as they were.
    """
    if session.phase != PHASE_RUNNING:
        return TickResult(session=session)

    outcome = step_body(session.body, config)
    if outcome.boundary_violation:
        return TickResult(
            session=session.with_changes(phase=PHASE_OVER),
            end_reason=END_BOUNDARY,
        )

    body = outcome.body
    obstacles = advance_obstacles(session.obstacles, roller, config)
    result = evaluate(body, obstacles, config)

    next_session = session.with_changes(
        body=body,
        obstacles=result.obstacles,
        score=session.score + result.scored,
        tick=session.tick + 1,
    )

    if result.collided:
        return TickResult(
            session=next_session.with_changes(phase=PHASE_OVER),
            scored=result.scored,
            end_reason=END_COLLISION,
        )

    return TickResult(session=next_session, scored=result.scored)


def impulse(session: Session, config: SimConfig = DEFAULT_CONFIG) -> Session:
    """Apply one jump impulse and count it."""
    return session.with_changes(
        body=apply_impulse(session.body, config),
        jumps=session.jumps + 1,
    )


def reset_session(session: Session, config: SimConfig = DEFAULT_CONFIG) -> Session:
    """Fresh idle session keeping the current mode."""
    return create_session(config, mode=session.mode)


def apply_jump(session: Session, config: SimConfig = DEFAULT_CONFIG) -> Session:
    """
    Handle a discrete jump input.

    In manual mode a jump starts an idle run, lifts a running body, and
    resets a finished run. In autopilot mode it only starts an idle run;
    the autopilot owns impulses while running.
    """
    if session.phase == PHASE_OVER:
        return reset_session(session, config)

    if session.mode == MODE_AUTOPILOT:
        if session.phase == PHASE_IDLE:
            return session.with_changes(phase=PHASE_RUNNING)
        return session

    if session.phase == PHASE_IDLE:
        session = session.with_changes(phase=PHASE_RUNNING)
    return impulse(session, config)


def switch_mode(session: Session, mode: str, config: SimConfig = DEFAULT_CONFIG) -> Session:
    """
    Change control mode.

    Entering autopilot from a finished run resets and starts a new one;
    from idle it starts the run. Entering manual from idle starts the run
    with one jump.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode!r}")

    switched = session.with_changes(mode=mode)

    if mode == MODE_AUTOPILOT:
        if session.phase == PHASE_OVER:
            switched = reset_session(switched, config)
        if switched.phase == PHASE_IDLE:
            switched = switched.with_changes(phase=PHASE_RUNNING)
        return switched

    if session.phase == PHASE_IDLE:
        return apply_jump(switched, config)
    return switched


def autopilot_step(
    session: Session,
    config: SimConfig = DEFAULT_CONFIG,
    pilot: PilotConfig = DEFAULT_PILOT
) -> Session:
    """Ask the policy for a decision and apply an impulse if it says jump."""
    if session.mode != MODE_AUTOPILOT or session.phase != PHASE_RUNNING:
        return session
    if decide(session.body, session.obstacles, config, pilot):
        return impulse(session, config)
    return session


# =============================================================================
# CONTROLLER
# =============================================================================

class SessionController:
    """
    Owns the authoritative session and feeds it through the transitions.

    Control inputs (jump, reset, mode switch) and the two scheduled ticks
    are the only things that replace the session.
    """

    def __init__(
        self,
        config: SimConfig = DEFAULT_CONFIG,
        seed: Union[int, np.random.Generator, None] = None,
        pilot: PilotConfig = DEFAULT_PILOT,
        mode: str = MODE_MANUAL
    ):
        self.config = config
        self.pilot = pilot
        self.roller = GapRoller(seed, config)
        self.session = create_session(config, mode=mode)

        for problem in config_warnings(config):
            logger.warning("Config: %s", problem)

    @property
    def phase(self) -> str:
        return self.session.phase

    @property
    def mode(self) -> str:
        return self.session.mode

    def _replace(self, session: Session, reason: str = None) -> Session:
        previous = self.session
        self.session = session
        if previous.phase != session.phase:
            if session.phase == PHASE_OVER:
                logger.info(
                    "Run over (%s) at tick %d, score %d",
                    reason, session.tick, session.score,
                )
            else:
                logger.info("Phase %s -> %s (%s mode)", previous.phase, session.phase, session.mode)
        if previous.mode != session.mode:
            logger.info("Mode %s -> %s", previous.mode, session.mode)
        return session

    def jump(self) -> Session:
        return self._replace(apply_jump(self.session, self.config))

    def reset(self) -> Session:
        return self._replace(reset_session(self.session, self.config))

    def set_mode(self, mode: str) -> Session:
        return self._replace(switch_mode(self.session, mode, self.config))

    def toggle_mode(self) -> Session:
        mode = MODE_MANUAL if self.session.mode == MODE_AUTOPILOT else MODE_AUTOPILOT
        return self.set_mode(mode)

    def tick(self) -> TickResult:
        """Run one physics tick."""
        result = advance(self.session, self.config, self.roller)
        self._replace(result.session, result.end_reason)
        if result.scored:
            logger.debug("Scored at tick %d, total %d", result.session.tick, result.session.score)
        return result

    def autopilot_tick(self) -> bool:
        """Run one autopilot decision. Returns True if an impulse was applied."""
        before = self.session
        after = self._replace(autopilot_step(before, self.config, self.pilot))
        return after.jumps > before.jumps

    def snapshot(self) -> Dict:
        return snapshot(self.session)

