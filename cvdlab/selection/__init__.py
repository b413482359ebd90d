from .selector import AdaptiveSelector, SelectorStats
from .stimulus import SimulatedStimulusGenerator, TransformConfusionSimulator

__all__ = [
    "AdaptiveSelector",
    "SelectorStats",
    "SimulatedStimulusGenerator",
    "TransformConfusionSimulator",
]
