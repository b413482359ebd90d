"""Color-discrimination testing configuration loaded from environment variables."""

import logging
import os
import sys

from pythonjsonlogger import jsonlogger

# ---------------------------------------------------------------------------
# Snapshot persistence
# ---------------------------------------------------------------------------
STATE_DIR = os.environ.get("CVDLAB_STATE_DIR", os.path.expanduser("~/.cvdlab"))
SNAPSHOT_EVERY = 5               # Save model snapshot every N observations

# ---------------------------------------------------------------------------
# Prior from colorblind simulation
# ---------------------------------------------------------------------------
PRIOR_STRENGTH = 2.0             # Pseudo-observations backing the simulated prior

# ---------------------------------------------------------------------------
# Evidence weighting (sigmoid over perceptual distance)
# ---------------------------------------------------------------------------
EVIDENCE_WEIGHT_MIN = 0.5        # Near-identical colors (rendering noise)
EVIDENCE_WEIGHT_MAX = 1.5
EVIDENCE_CENTER = 10.0           # Delta E at the sigmoid midpoint
EVIDENCE_STEEPNESS = 0.1
EVIDENCE_CAP_DISTANCE = 30.0     # Above this Delta E the weight is capped
EVIDENCE_CAP_WEIGHT = 1.0

# ---------------------------------------------------------------------------
# Confusion metrics
# ---------------------------------------------------------------------------
CONFUSION_THRESHOLD = 0.7
HOTSPOT_MIN_OBSERVATIONS = 3
SUGGESTION_COUNT = 5

# ---------------------------------------------------------------------------
# Severity estimation
# ---------------------------------------------------------------------------
SEVERITY_MIN_HISTORY = 50        # Below this the estimate is unavailable
SEVERITY_MIN_PAIR_OBSERVATIONS = 3
SEVERITY_BASE = 0.6              # Medium severity
SEVERITY_DEVIATION_SCALE = 2.0

# ---------------------------------------------------------------------------
# Adaptive selection
# ---------------------------------------------------------------------------
DEFAULT_DIFFICULTY = 5           # 1 (easy) - 10 (hard)
EXPLOIT_PROBABILITY = 0.7        # Balanced mode: share of exploitation trials
EXPLOIT_SAMPLE_SIZE = 10         # Priority colors scored per exploitation trial
MODE_MIN_OBSERVATIONS = 20
MODE_UNCERTAINTY_THRESHOLD = 0.7
MODE_COVERAGE_THRESHOLD = 0.6

# ---------------------------------------------------------------------------
# Stimulus generation
# ---------------------------------------------------------------------------
SIMULATION_DISTANCE_DECAY = 0.1  # p = exp(-k * simulated RGB distance)
STIMULUS_MAX_ATTEMPTS = 200
STIMULUS_MIN_ACTUAL_DISTANCE = 10.0
TRIAL_BATCH_SIZE = 10
REGION_TRIAL_COUNT = 5
REGION_ADJACENT_STEP = 20        # RGB step to the neighbors of a region's base color
GRADIENT_STEPS = 5
GRADIENT_DIFFICULTY = 7
CONFUSABLE_SET_SIZE = 5

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def setup_logging() -> None:
    """Configure structured JSON logging."""
    handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(LOG_LEVEL)
