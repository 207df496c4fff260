"""Cadence - behavioral pattern and adaptive scheduling engine

Philosophy:
    Learn rhythms from what the user already does. Completions, energy
    check-ins, mood logs and focus sessions are the only inputs; every
    derived value is recomputed from the snapshot handed in.

Packages:
    history/: Typed history records, ingestion boundary, HistoryStore adapters
    learning/: Peak hours, weekly trend, correlations, mood patterns, insights
    suggestions/: Situational context and task scoring
    engagement/: Proactive check-ins, nudge timing, notification throttle
    focus/: Cancellable focus timer
    dashboard/: FastAPI status surface

Configuration: args/cadence.yaml
"""

from pathlib import Path


__version__ = "0.1.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_PATH = ARGS_DIR / "cadence.yaml"
