"""
Headless Episode Runner.

Run episodes without any presentation layer for evaluation and data
collection. Policies are consulted on the autopilot cadence
(config.decision_interval ticks apart) and idle in between.
"""

import logging
import time
from typing import Dict, Callable

import numpy as np

from flapsim.config import SimConfig
from flapsim.env import GapRunnerEnv
from flapsim.state import Session
from autopilot.logger import RolloutLogger
from autopilot.policy_heuristic import autopilot_policy_wrapper
from autopilot.schema import ACTION_NOOP, ACTION_JUMP, ACTION_NAMES

logger = logging.getLogger(__name__)

PolicyFn = Callable[[Session, SimConfig, np.random.Generator], int]


def run_episode(
    env: GapRunnerEnv,
    policy_fn: PolicyFn,
    seed: int = None,
    rollout_logger: RolloutLogger = None,
    decision_interval: int = None,
    verbose: bool = False
) -> Dict:
    """
    Run a single episode.

    Args:
        env: Gap runner environment
        policy_fn: Function that takes (session, config, rng) and returns an action index
        seed: Random seed for obstacles and the policy's rng
        rollout_logger: Optional rollout logger
        decision_interval: Ticks between policy calls; defaults to the config's cadence
        verbose: Print step details

    Returns:
        Episode statistics dict
    """
    obs, info = env.reset(seed=seed)
    policy_rng = np.random.default_rng(seed)
    interval = decision_interval or env.config.decision_interval

    if rollout_logger:
        rollout_logger.start_episode(seed=seed)

    total_reward = 0.0
    steps = 0
    decisions = 0
    done = False
    truncated = False
    step_info = info

    while not done and not truncated:
        action_idx = ACTION_NOOP
        if steps % interval == 0:
            action_idx = policy_fn(env.session, env.config, policy_rng)
            decisions += 1

        if verbose and action_idx == ACTION_JUMP:
            print(f"Tick {steps}: {ACTION_NAMES[action_idx]} at y={env.session.body.y:.1f}")

        next_obs, reward, done, truncated, step_info = env.step(action_idx)

        if rollout_logger:
            rollout_logger.log_step(
                obs=obs,
                action_index=action_idx,
                reward=reward,
                done=done,
                truncated=truncated,
                info=step_info,
                next_obs=next_obs
            )

        total_reward += reward
        steps += 1
        obs = next_obs

    if verbose:
        print(f"Episode ended: done={done}, truncated={truncated}")
        print(env.render_text())

    result = {
        "total_reward": total_reward,
        "steps": steps,
        "score": env.session.score,
        "jumps": env.session.jumps,
        "decisions": decisions,
        "end_reason": step_info.get("end_reason"),
        "done": done,
        "truncated": truncated,
    }

    if rollout_logger:
        rollout_logger.end_episode({
            "total_reward": total_reward,
            "steps": steps,
            "score": result["score"],
            "end_reason": result["end_reason"],
        })

    logger.debug("Episode seed=%s finished: score %d in %d ticks", seed, result["score"], steps)
    return result


def run_n_episodes(
    env: GapRunnerEnv,
    policy_fn: PolicyFn,
    n_episodes: int = 10,
    base_seed: int = None,
    rollout_logger: RolloutLogger = None,
    decision_interval: int = None,
    verbose: bool = False
) -> Dict:
    """
    Run multiple episodes and aggregate statistics.

    Returns:
        Aggregated statistics dict
    """
    all_results = []

    for i in range(n_episodes):
        seed = base_seed + i if base_seed is not None else None

        if verbose:
            print(f"\n=== Episode {i+1}/{n_episodes} (seed={seed}) ===")

        result = run_episode(
            env=env,
            policy_fn=policy_fn,
            seed=seed,
            rollout_logger=rollout_logger,
            decision_interval=decision_interval,
            verbose=verbose
        )
        all_results.append(result)

    scores = [r["score"] for r in all_results]
    rewards = [r["total_reward"] for r in all_results]
    steps_list = [r["steps"] for r in all_results]
    jumps_list = [r["jumps"] for r in all_results]

    crashes = sum(1 for r in all_results if r["end_reason"] is not None)

    return {
        "n_episodes": n_episodes,
        "avg_score": float(np.mean(scores)),
        "std_score": float(np.std(scores)),
        "max_score": int(np.max(scores)),
        "avg_reward": float(np.mean(rewards)),
        "avg_steps": float(np.mean(steps_list)),
        "avg_jumps": float(np.mean(jumps_list)),
        "crash_rate": crashes / n_episodes,
        "all_results": all_results,
    }


def random_policy(session: Session, config: SimConfig, rng: np.random.Generator) -> int:
    """Jump with probability 1/2 at every decision."""
    return int(rng.integers(0, 2))


def idle_policy(session: Session, config: SimConfig, rng: np.random.Generator) -> int:
    """Never jump."""
    return ACTION_NOOP


POLICIES: Dict[str, PolicyFn] = {
    "autopilot": autopilot_policy_wrapper,
    "random": random_policy,
    "idle": idle_policy,
}


def main():
    """Run the autopilot for a few episodes and print the results."""
    from flapsim.logging_config import setup_logging

    setup_logging()

    print("=" * 60)
    print("Gap Runner Simulation")
    print("=" * 60)

    env = GapRunnerEnv(seed=42, max_steps=3000)

    print("\nRunning 10 episodes with the autopilot...")
    start_time = time.time()

    results = run_n_episodes(
        env=env,
        policy_fn=autopilot_policy_wrapper,
        n_episodes=10,
        base_seed=42,
        rollout_logger=RolloutLogger(enabled=False),
    )

    elapsed = time.time() - start_time

    print(f"\nResults ({elapsed:.2f}s):")
    print(f"  Average Score: {results['avg_score']:.2f} ± {results['std_score']:.2f}")
    print(f"  Best Score: {results['max_score']}")
    print(f"  Average Ticks: {results['avg_steps']:.1f}")
    print(f"  Average Jumps: {results['avg_jumps']:.1f}")
    print(f"  Crash Rate: {results['crash_rate']*100:.1f}%")

    print("\n" + "=" * 60)
    print("Done!")


if __name__ == "__main__":
    main()
