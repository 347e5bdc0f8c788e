"""
JSONL Rollout Logger.

Logs obs -> action -> reward -> next_obs -> done transitions, one JSON
object per line, plus an episode summary line.
"""

import json
import logging
import os
from datetime import datetime
from typing import Dict, Any, Optional

import numpy as np

logger = logging.getLogger(__name__)


def convert_numpy(obj: Any) -> Any:
    """Convert numpy types to Python native types for JSON serialization."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, dict):
        return {k: convert_numpy(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy(v) for v in obj]
    return obj


class RolloutLogger:
    """
    Logger for rollouts in JSONL format.
    """

    def __init__(self, log_dir: str = None, enabled: bool = True):
        """
        Initialize rollout logger.

        Args:
            log_dir: Directory to write logs. Defaults to data/rollout_logs/
            enabled: Whether logging is active
        """
        self.enabled = enabled

        if log_dir is None:
            base_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
            log_dir = os.path.join(base_path, "data", "rollout_logs")

        self.log_dir = log_dir
        self.current_file: Optional[str] = None
        self.current_episode_id: Optional[str] = None
        self.step_idx = 0
        self.seed = None

        if self.enabled:
            os.makedirs(self.log_dir, exist_ok=True)

    def start_episode(self, seed: int = None, episode_id: str = None):
        """Start a new episode."""
        if not self.enabled:
            return

        self.seed = seed
        self.step_idx = 0

        if episode_id is None:
            episode_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        self.current_episode_id = episode_id

        if self.current_file is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.current_file = os.path.join(self.log_dir, f"rollout_{timestamp}.jsonl")

    def log_step(
        self,
        obs: np.ndarray,
        action_index: int,
        reward: float,
        done: bool,
        truncated: bool,
        info: Dict,
        next_obs: np.ndarray = None
    ):
        """
        Log a single tick.

        Args:
            obs: Observation vector before the action
            action_index: Action taken
            reward: Total reward
            done: Run ended (collision or boundary)
            truncated: Tick limit reached
            info: Step info from the environment
            next_obs: Observation after the tick (optional)
        """
        if not self.enabled or self.current_file is None:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "seed": convert_numpy(self.seed),
            "episode_id": self.current_episode_id,
            "step_idx": self.step_idx,
            "obs": convert_numpy(obs),
            "action_index": int(action_index),
            "reward": float(reward),
            "done": bool(done),
            "truncated": bool(truncated),
            "info": {
                "score": info.get("score"),
                "scored": info.get("scored"),
                "phase": info.get("phase"),
                "end_reason": info.get("end_reason"),
            },
        }

        if next_obs is not None:
            entry["next_obs"] = convert_numpy(next_obs)

        self._write(entry)
        self.step_idx += 1

    def end_episode(self, final_info: Dict = None):
        """End current episode."""
        if not self.enabled:
            return

        if final_info and self.current_file:
            entry = {
                "timestamp": datetime.now().isoformat(),
                "episode_id": self.current_episode_id,
                "type": "episode_end",
                "total_steps": self.step_idx,
                "final_info": convert_numpy(final_info),
            }
            self._write(entry)

        self.current_episode_id = None
        self.step_idx = 0

    def _write(self, entry: Dict):
        try:
            with open(self.current_file, "a") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.warning("Failed to write rollout entry to %s: %s", self.current_file, e)
