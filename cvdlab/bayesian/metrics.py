"""Read-only metrics derived from the pair beliefs and response history.

Queries on pairs that were never updated evaluate the simulated prior on
the fly; they never add a belief to the store, so "tested pairs" are
exactly the pairs that received at least one response (or were imported).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from cvdlab.config import (
    CONFUSION_THRESHOLD,
    HOTSPOT_MIN_OBSERVATIONS,
    SEVERITY_BASE,
    SEVERITY_DEVIATION_SCALE,
    SEVERITY_MIN_HISTORY,
    SEVERITY_MIN_PAIR_OBSERVATIONS,
    SUGGESTION_COUNT,
)
from cvdlab.core.colorspace import normalize_hex
from cvdlab.core.types import ColorPairKey

from .belief import binary_entropy
from .engine import BayesianUpdateEngine

logger = logging.getLogger(__name__)


@dataclass
class TestedPair:
    """Summary of one pair with a stored belief."""
    __test__ = False  # not a pytest class

    color1: str
    color2: str
    confusion_prob: float
    uncertainty: float
    n_observations: float


class MetricsEngine:
    """Confusion, uncertainty, information gain, hotspots and severity."""

    def __init__(
        self,
        engine: BayesianUpdateEngine,
        min_severity_history: int = SEVERITY_MIN_HISTORY,
        min_pair_observations: float = SEVERITY_MIN_PAIR_OBSERVATIONS,
        base_severity: float = SEVERITY_BASE,
        deviation_scale: float = SEVERITY_DEVIATION_SCALE,
    ) -> None:
        self.engine = engine
        self.min_severity_history = min_severity_history
        self.min_pair_observations = min_pair_observations
        self.base_severity = base_severity
        self.deviation_scale = deviation_scale

    # ------------------------------------------------------------------
    # Per-pair queries
    # ------------------------------------------------------------------

    def confusion_probability(self, color_a: str, color_b: str) -> float:
        """P(colors are confusable) = 1 - P(distinguishable)."""
        return 1.0 - self.engine.peek(ColorPairKey.of(color_a, color_b)).mean

    def are_confusable(
        self, color_a: str, color_b: str, threshold: float = CONFUSION_THRESHOLD
    ) -> bool:
        return self.confusion_probability(color_a, color_b) >= threshold

    def uncertainty(self, color_a: str, color_b: str) -> float:
        return self.engine.peek(ColorPairKey.of(color_a, color_b)).entropy

    def information_gain(self, color_a: str, color_b: str) -> float:
        """Expected entropy reduction from one more unit-weight observation.

        IG = H(now) - [p * H(alpha+1, beta) + (1-p) * H(alpha, beta+1)]
        with p = P(distinguish). Non-negative since entropy is concave and
        the posterior mean is a martingale.
        """
        belief = self.engine.peek(ColorPairKey.of(color_a, color_b))
        a, b = belief.alpha, belief.beta
        p = belief.mean

        h_if_distinguish = binary_entropy((a + 1) / (a + b + 1))
        h_if_confuse = binary_entropy(a / (a + b + 1))
        expected_after = p * h_if_distinguish + (1.0 - p) * h_if_confuse

        # Floating error can leave a tiny negative residue
        return max(0.0, belief.entropy - expected_after)

    # ------------------------------------------------------------------
    # Collection queries
    # ------------------------------------------------------------------

    def tested_pairs(self) -> list[TestedPair]:
        return [
            TestedPair(
                color1=key.first,
                color2=key.second,
                confusion_prob=1.0 - belief.mean,
                uncertainty=belief.entropy,
                n_observations=belief.observation_count,
            )
            for key, belief in self.engine.beliefs.items()
        ]

    def confused_pairs(self, threshold: float = CONFUSION_THRESHOLD) -> list[TestedPair]:
        return [p for p in self.tested_pairs() if p.confusion_prob >= threshold]

    def confusion_hotspots(
        self,
        threshold: float = CONFUSION_THRESHOLD,
        min_observations: float = HOTSPOT_MIN_OBSERVATIONS,
    ) -> list[str]:
        """Colors appearing in confirmed-confusable pairs, first-seen order."""
        hotspots: dict[str, None] = {}
        for pair in self.tested_pairs():
            if pair.confusion_prob >= threshold and pair.n_observations >= min_observations:
                hotspots.setdefault(pair.color1)
                hotspots.setdefault(pair.color2)
        return list(hotspots)

    def tested_colors(self) -> set[str]:
        return {c for key in self.engine.beliefs for c in key.colors}

    def suggest_next_colors(self, pool: list[str], count: int = SUGGESTION_COUNT) -> list[str]:
        """Untested pool colors first; else colors from the most uncertain pairs."""
        tested = self.tested_colors()
        untested = [c for c in (normalize_hex(c) for c in pool) if c not in tested]

        if len(untested) < count:
            uncertain = sorted(self.tested_pairs(), key=lambda p: p.uncertainty, reverse=True)
            return [p.color1 for p in uncertain[:count]]

        return untested[:count]

    # ------------------------------------------------------------------
    # Severity
    # ------------------------------------------------------------------

    def estimate_severity(self) -> Optional[float]:
        """Estimate CVD severity (0 = normal, 1 = complete) from observed confusion.

        Returns None when fewer than ``min_severity_history`` responses have
        been recorded. Otherwise compares observed confusion with the
        simulated expectation over well-observed pairs: confusing more than
        simulated pushes severity up, less pushes it down.
        """
        n_history = len(self.engine.history)
        if n_history < self.min_severity_history:
            logger.info(
                "Insufficient data for severity estimation (%d/%d responses)",
                n_history, self.min_severity_history,
            )
            return None

        deviations = []
        for key, belief in self.engine.beliefs.items():
            if belief.observation_count < self.min_pair_observations:
                continue
            expected = self.engine.simulated_probability(key)
            observed = 1.0 - belief.mean
            deviations.append(observed - expected)

        if not deviations:
            logger.info("No qualifying pairs for severity estimation, using default")
            return self.base_severity

        avg_deviation = sum(deviations) / len(deviations)
        estimated = max(0.0, min(1.0, self.base_severity + avg_deviation * self.deviation_scale))
        logger.info(
            "Severity estimated from %d pairs: %.0f%%", len(deviations), estimated * 100
        )
        return estimated
