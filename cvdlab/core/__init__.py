from .exceptions import InvalidInput, InvalidTrial
from .types import (
    ColorTransform,
    ColorPairKey,
    ConfusionSimulator,
    CvdType,
    PriorityColorProvider,
    Response,
    SelectionMode,
    StimulusGenerator,
    Trial,
)
from .profiles import priority_colors, testing_profile

__all__ = [
    "InvalidInput",
    "InvalidTrial",
    "ColorPairKey",
    "ColorTransform",
    "ConfusionSimulator",
    "CvdType",
    "PriorityColorProvider",
    "Response",
    "SelectionMode",
    "StimulusGenerator",
    "Trial",
    "priority_colors",
    "testing_profile",
]
