# Simulation core for the gap runner
# This module provides:
# - config.py: field/physics constants as a frozen dataclass
# - state.py: immutable body, obstacle and session containers
# - mechanics.py: physics stepping, collision and scoring
# - obstacles.py: seeded obstacle generation
# - session.py: session state machine and controller
# - scheduler.py: asyncio fixed-rate tick loops
# - env.py: Gym-like environment wrapper
# - runner.py: headless episode runner

__version__ = "0.1.0"
