"""
Evaluation Script for Gap Runner Policies.

Compares the autopilot against the random and idle baselines over the same
seeded obstacle courses.
"""

import argparse
import logging
from typing import Dict, List

from flapsim.config import SimConfig, DEFAULT_CONFIG, load_config
from flapsim.env import GapRunnerEnv
from flapsim.logging_config import setup_logging
from flapsim.runner import run_n_episodes, POLICIES, PolicyFn
from autopilot.logger import RolloutLogger

logger = logging.getLogger(__name__)


def evaluate_policies(
    policies: Dict[str, PolicyFn],
    n_episodes: int = 50,
    seed: int = 42,
    config: SimConfig = DEFAULT_CONFIG,
    max_steps: int = 5000,
    rollout_logger: RolloutLogger = None,
    verbose: bool = False
) -> Dict[str, Dict]:
    """
    Evaluate multiple policies.

    Args:
        policies: Dict of policy_name -> policy_fn
        n_episodes: Episodes per policy
        seed: Base random seed, shared by every policy
        config: Field and physics constants
        max_steps: Tick limit per episode
        rollout_logger: Optional JSONL logger for every episode
        verbose: Print per-episode details

    Returns:
        Dict of policy_name -> results
    """
    results = {}

    for name, policy_fn in policies.items():
        logger.info("Evaluating %s over %d episodes", name, n_episodes)

        env = GapRunnerEnv(seed=seed, config=config, max_steps=max_steps)

        results[name] = run_n_episodes(
            env=env,
            policy_fn=policy_fn,
            n_episodes=n_episodes,
            base_seed=seed,
            rollout_logger=rollout_logger,
            verbose=verbose
        )

    return results


def format_comparison(results: Dict[str, Dict]) -> List[str]:
    """Build the comparison table as lines of text."""
    lines = []
    lines.append("=" * 72)
    lines.append("POLICY COMPARISON")
    lines.append("=" * 72)
    lines.append(f"{'Policy':<14} {'Score':>14} {'Best':>6} {'Ticks':>10} {'Jumps':>8} {'Crash':>8}")
    lines.append("-" * 72)

    for name, r in results.items():
        score = f"{r['avg_score']:.2f}±{r['std_score']:.2f}"
        lines.append(
            f"{name:<14} {score:>14} {r['max_score']:>6} "
            f"{r['avg_steps']:>10.1f} {r['avg_jumps']:>8.1f} {r['crash_rate']*100:>7.1f}%"
        )

    lines.append("=" * 72)

    if results:
        best_name = max(results.keys(), key=lambda k: results[k]["avg_score"])
        lines.append(f"Best policy by score: {best_name}")

    return lines


def main(argv=None):
    """Main evaluation entry point."""
    parser = argparse.ArgumentParser(description="Evaluate gap runner policies")
    parser.add_argument("--episodes", type=int, default=20, help="Episodes per policy")
    parser.add_argument("--seed", type=int, default=42, help="Base random seed")
    parser.add_argument("--max-steps", type=int, default=5000, help="Tick limit per episode")
    parser.add_argument("--config", type=str, default=None, help="JSON file with SimConfig values")
    parser.add_argument(
        "--policy", action="append", choices=sorted(POLICIES), default=None,
        help="Policy to evaluate (repeatable); defaults to all"
    )
    parser.add_argument("--log-rollouts", type=str, default=None, help="Directory for JSONL rollouts")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    config = load_config(args.config) if args.config else DEFAULT_CONFIG
    names = args.policy or list(POLICIES)
    policies = {name: POLICIES[name] for name in names}

    rollout_logger = None
    if args.log_rollouts:
        rollout_logger = RolloutLogger(log_dir=args.log_rollouts, enabled=True)

    results = evaluate_policies(
        policies=policies,
        n_episodes=args.episodes,
        seed=args.seed,
        config=config,
        max_steps=args.max_steps,
        rollout_logger=rollout_logger,
        verbose=args.verbose
    )

    print("\n".join(format_comparison(results)))
    return results


if __name__ == "__main__":
    main()
