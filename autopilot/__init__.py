# Autopilot module for the gap runner
# This module provides:
# - schema.py: action ids and observation layout
# - featurize.py: session to numeric vector conversion
# - policy_heuristic.py: rule-based jump/no-jump policy
# - logger.py: JSONL rollout logging

__version__ = "0.1.0"
