"""Bayesian belief engine for adaptive color-discrimination testing.

Uses a colorblind simulation as a weak Beta prior per color pair, then
updates with the user's responses weighted by perceptual distance.
"""

from .belief import Belief, PriorInitializer
from .evidence import EvidenceWeighting
from .engine import BayesianUpdateEngine
from .metrics import MetricsEngine, TestedPair
from .model import ColorVisionModel
from .state import BeliefRecord, HistoryEntry, ModelSnapshot, SnapshotStore
from .calibration import (
    CalibrationStage,
    SeverityCalibrator,
    StageResult,
    calculate_overall_severity,
)

__all__ = [
    "Belief",
    "PriorInitializer",
    "EvidenceWeighting",
    "BayesianUpdateEngine",
    "MetricsEngine",
    "TestedPair",
    "ColorVisionModel",
    "BeliefRecord",
    "HistoryEntry",
    "ModelSnapshot",
    "SnapshotStore",
    "CalibrationStage",
    "SeverityCalibrator",
    "StageResult",
    "calculate_overall_severity",
]
