"""
Gym-like Gap Runner Environment.

Provides a standard RL interface over the simulation core. Each step is one
physics tick preceded by the chosen action (jump or not).
"""

from typing import Dict, Tuple, Optional

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from flapsim.config import SimConfig, DEFAULT_CONFIG
from flapsim.obstacles import GapRoller
from flapsim.session import advance, impulse
from flapsim.state import Session, create_session, PHASE_RUNNING, MODE_AUTOPILOT
from autopilot.schema import ACTION_JUMP, TOTAL_ACTIONS, get_observation_size
from autopilot.featurize import featurize_session
from autopilot.policy_heuristic import PilotConfig, DEFAULT_PILOT, find_target

# Reward shaping
ALIVE_REWARD = 0.1
PASS_REWARD = 1.0
CRASH_PENALTY = -1.0


class GapRunnerEnv:
    """
    Gym-like environment for the gap runner.

    The session is started on reset, so every step is a running tick.
    """

    def __init__(
        self,
        seed: int = None,
        config: SimConfig = DEFAULT_CONFIG,
        max_steps: int = 5000,
        pilot: PilotConfig = DEFAULT_PILOT
    ):
        """
        Initialize environment.

        Args:
            seed: Random seed for obstacle generation
            config: Field and physics constants
            max_steps: Ticks before truncation
            pilot: Autopilot thresholds, used to pick the observed target
        """
        self.seed_value = seed
        self.config = config
        self.max_steps = max_steps
        self.pilot = pilot

        self.session: Optional[Session] = None
        self.roller: Optional[GapRoller] = None
        self.step_count = 0

        self.observation_size = get_observation_size()
        self.action_size = TOTAL_ACTIONS

    def reset(self, seed: int = None) -> Tuple[np.ndarray, Dict]:
        """
        Reset environment to a fresh running session.

        Returns:
            (observation, info)
        """
        if seed is not None:
            self.seed_value = seed

        self.roller = GapRoller(self.seed_value, self.config)
        self.step_count = 0
        self.session = create_session(self.config, mode=MODE_AUTOPILOT).with_changes(phase=PHASE_RUNNING)

        return self._get_observation(), self._get_info()

    def step(self, action_index: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        """
        Apply the action, then run one tick.

        Returns:
            (observation, reward, done, truncated, info)
        """
        if self.session is None:
            raise RuntimeError("Environment not reset")
        if not 0 <= int(action_index) < self.action_size:
            raise ValueError(f"Invalid action index: {action_index}")
        if self.session.phase != PHASE_RUNNING:
            raise RuntimeError("Episode is over; call reset()")

        self.step_count += 1

        session = self.session
        if int(action_index) == ACTION_JUMP:
            session = impulse(session, self.config)

        result = advance(session, self.config, self.roller)
        self.session = result.session

        done = result.end_reason is not None
        reward = ALIVE_REWARD + PASS_REWARD * result.scored
        if done:
            reward += CRASH_PENALTY

        truncated = not done and self.step_count >= self.max_steps

        info = self._get_info()
        info["scored"] = result.scored
        info["end_reason"] = result.end_reason

        return self._get_observation(), reward, done, truncated, info

    def _get_observation(self) -> np.ndarray:
        """Get current observation vector."""
        if self.session is None:
            return np.zeros(self.observation_size, dtype=np.float32)
        return featurize_session(self.session, self.config, self.pilot)

    def _get_info(self) -> Dict:
        if self.session is None:
            return {}
        return {
            "score": self.session.score,
            "phase": self.session.phase,
            "tick": self.session.tick,
            "jumps": self.session.jumps,
            "step_count": self.step_count,
        }

    def render_text(self) -> str:
        """Render current state as text for debugging."""
        if self.session is None:
            return "Environment not reset"
        return render_text(self.session, self.config, self.pilot)


def render_text(
    session: Session,
    config: SimConfig = DEFAULT_CONFIG,
    pilot: PilotConfig = DEFAULT_PILOT
) -> str:
    """Plain-text view of a session. The autopilot target is marked with <--."""
    body = session.body
    lines = []
    lines.append(f"=== Tick {session.tick} | {session.mode} | {session.phase} ===")
    lines.append(f"Score: {session.score}  Jumps: {session.jumps}")
    lines.append(f"Body: y={body.y:.1f} v={body.velocity:+.2f} (floor at {config.max_body_y:.0f})")

    ahead = find_target(body, session.obstacles, config, pilot)
    lines.append("")
    lines.append("Obstacles:")
    if not session.obstacles:
        lines.append("  (none)")
    for o in session.obstacles:
        marker = " <--" if o is ahead else ""
        status = "PASSED" if o.passed else "AHEAD"
        lines.append(f"  x={o.x:6.1f} gap {o.gap_top:5.1f}..{o.gap_bottom:5.1f} [{status}]{marker}")

    return "\n".join(lines)


class GapRunnerGymEnv(gym.Env):
    """Gymnasium-compatible wrapper for GapRunnerEnv."""

    metadata = {"render_modes": ["ansi"]}

    def __init__(
        self,
        seed: int = None,
        config: SimConfig = DEFAULT_CONFIG,
        max_steps: int = 5000,
        render_mode: str = None
    ):
        super().__init__()

        self.env = GapRunnerEnv(seed=seed, config=config, max_steps=max_steps)
        self.render_mode = render_mode

        self.observation_space = spaces.Box(
            low=-1.0,
            high=1.0,
            shape=(self.env.observation_size,),
            dtype=np.float32
        )
        self.action_space = spaces.Discrete(self.env.action_size)

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)
        return self.env.reset(seed=seed)

    def step(self, action):
        return self.env.step(int(action))

    def render(self):
        return self.env.render_text()
