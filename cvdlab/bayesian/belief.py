"""Beta beliefs over "this color pair is distinguishable".

alpha accumulates evidence that the user told the colors apart, beta
evidence that they confused them. Both start from a unit prior plus a weak
simulation-based offset (see PriorInitializer).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from scipy.stats import beta as beta_dist

from cvdlab.config import PRIOR_STRENGTH
from cvdlab.core.exceptions import InvalidInput

logger = logging.getLogger(__name__)


def binary_entropy(p: float) -> float:
    """Entropy in bits of a Bernoulli(p) outcome."""
    if p <= 0.0 or p >= 1.0:
        return 0.0
    return -(p * math.log2(p) + (1.0 - p) * math.log2(1.0 - p))


@dataclass
class Belief:
    """Beta(alpha, beta) distribution for a single color pair."""

    alpha: float = 1.0
    beta: float = 1.0

    def __post_init__(self) -> None:
        if not (self.alpha > 0 and self.beta > 0):
            raise InvalidInput(
                f"Belief parameters must be > 0, got alpha={self.alpha}, beta={self.beta}"
            )

    @property
    def mean(self) -> float:
        return self.alpha / (self.alpha + self.beta)

    @property
    def variance(self) -> float:
        s = self.alpha + self.beta
        return (self.alpha * self.beta) / (s * s * (s + 1))

    @property
    def std_dev(self) -> float:
        return math.sqrt(self.variance)

    @property
    def entropy(self) -> float:
        return binary_entropy(self.mean)

    @property
    def observation_count(self) -> float:
        """Weighted observations beyond the unit priors (may be fractional)."""
        return self.alpha + self.beta - 2

    def update(self, success: bool, weight: float = 1.0) -> None:
        """Add ``weight`` to alpha if the user distinguished the pair, else to beta."""
        if not weight > 0:
            raise InvalidInput(f"Update weight must be > 0, got {weight}")
        if success:
            self.alpha += weight
        else:
            self.beta += weight

    def credible_interval(self, level: float = 0.95) -> tuple[float, float]:
        """Equal-tailed credible interval using Beta quantiles."""
        tail = (1 - level) / 2
        lo = beta_dist.ppf(tail, self.alpha, self.beta)
        hi = beta_dist.ppf(1 - tail, self.alpha, self.beta)
        return (float(lo), float(hi))

    def copy(self) -> "Belief":
        return Belief(alpha=self.alpha, beta=self.beta)


class PriorInitializer:
    """Turn a simulated confusion probability into a weak Beta prior.

    Beta(s * (1 - p) + 1, s * p + 1): higher simulated confusion leans the
    prior toward "not distinguishable", but with only ``s`` pseudo-observations
    a few real responses overturn it.
    """

    def __init__(self, strength: float = PRIOR_STRENGTH) -> None:
        if strength < 0:
            raise InvalidInput("strength must be >= 0")
        self.strength = strength

    def from_simulated(self, simulated_prob: float) -> Belief:
        if math.isnan(simulated_prob):
            raise InvalidInput("Simulated confusion probability is NaN")
        p = max(0.0, min(1.0, simulated_prob))
        return Belief(
            alpha=self.strength * (1.0 - p) + 1.0,
            beta=self.strength * p + 1.0,
        )
