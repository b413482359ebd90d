"""Evidence weighting: convert perceptual distance into update strength.

weight(dE) = w_min + (w_max - w_min) * sigmoid(k * (dE - center))

Confusing near-identical colors is weak evidence (could be screen or
lighting noise). Confusing clearly different colors is strong evidence, up
to the cap distance; beyond it the weight never exceeds a normal update
since the outcome becomes obvious.
"""

from __future__ import annotations

import logging
import math

from cvdlab.config import (
    EVIDENCE_CAP_DISTANCE,
    EVIDENCE_CAP_WEIGHT,
    EVIDENCE_CENTER,
    EVIDENCE_STEEPNESS,
    EVIDENCE_WEIGHT_MAX,
    EVIDENCE_WEIGHT_MIN,
)
from cvdlab.core.exceptions import InvalidInput

logger = logging.getLogger(__name__)


class EvidenceWeighting:
    """Sigmoid weighting over Delta E, capped for very distant pairs."""

    def __init__(
        self,
        min_weight: float = EVIDENCE_WEIGHT_MIN,
        max_weight: float = EVIDENCE_WEIGHT_MAX,
        center: float = EVIDENCE_CENTER,
        steepness: float = EVIDENCE_STEEPNESS,
        cap_distance: float = EVIDENCE_CAP_DISTANCE,
        cap_weight: float = EVIDENCE_CAP_WEIGHT,
    ) -> None:
        if not 0 < min_weight <= max_weight:
            raise InvalidInput("Require 0 < min_weight <= max_weight")
        self.min_weight = min_weight
        self.max_weight = max_weight
        self.center = center
        self.steepness = steepness
        self.cap_distance = cap_distance
        self.cap_weight = cap_weight

    def weight(self, delta_e: float) -> float:
        if math.isnan(delta_e) or delta_e < 0:
            raise InvalidInput(f"Perceptual distance must be >= 0, got {delta_e}")

        sigmoid = 1.0 / (1.0 + math.exp(-self.steepness * (delta_e - self.center)))
        w = self.min_weight + (self.max_weight - self.min_weight) * sigmoid

        if delta_e > self.cap_distance:
            w = min(w, self.cap_weight)
        return w

    __call__ = weight
