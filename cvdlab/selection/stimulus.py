"""Simulation-backed confusion probabilities and trial generation.

The colorblind simulation itself is injected as a ColorTransform; this
module only measures how close two colors land after the transform and
searches for comparison colors that should be confusable.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from cvdlab.config import (
    CONFUSABLE_SET_SIZE,
    DEFAULT_DIFFICULTY,
    GRADIENT_DIFFICULTY,
    GRADIENT_STEPS,
    REGION_ADJACENT_STEP,
    REGION_TRIAL_COUNT,
    SIMULATION_DISTANCE_DECAY,
    STIMULUS_MAX_ATTEMPTS,
    STIMULUS_MIN_ACTUAL_DISTANCE,
    TRIAL_BATCH_SIZE,
)
from cvdlab.core.colorspace import (
    adjacent_colors,
    hex_to_rgb,
    interpolate,
    normalize_hex,
    random_variant,
    rgb_distance,
    rgb_to_hex,
)
from cvdlab.core.exceptions import InvalidInput
from cvdlab.core.profiles import priority_colors
from cvdlab.core.types import ColorTransform, CvdType, PriorityColorProvider, Response, Trial

logger = logging.getLogger(__name__)


def validate_difficulty(difficulty: int) -> int:
    if isinstance(difficulty, bool) or not isinstance(difficulty, (int, np.integer)):
        raise InvalidInput(f"difficulty must be an integer, got {difficulty!r}")
    if not 1 <= difficulty <= 10:
        raise InvalidInput(f"difficulty must be in 1-10, got {difficulty}")
    return int(difficulty)


def _validate_count(count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise InvalidInput(f"count must be a non-negative integer, got {count!r}")


class TransformConfusionSimulator:
    """Confusion probability from the distance between simulated colors.

    p = exp(-k * d), d = RGB distance after simulation: identical
    simulations give 1.0, distances of 50+ give roughly 0. Normal vision
    only confuses identical colors.
    """

    def __init__(
        self, transform: ColorTransform, decay: float = SIMULATION_DISTANCE_DECAY
    ) -> None:
        self.transform = transform
        self.decay = decay

    def simulate(self, hex_color: str, cvd_type: CvdType) -> str:
        cvd_type = CvdType.parse(cvd_type)
        if cvd_type == CvdType.NORMAL:
            return normalize_hex(hex_color)
        return normalize_hex(self.transform(normalize_hex(hex_color), cvd_type))

    def simulated_confusion_probability(
        self, color_a: str, color_b: str, cvd_type: CvdType
    ) -> float:
        cvd_type = CvdType.parse(cvd_type)
        if cvd_type == CvdType.NORMAL:
            return 1.0 if normalize_hex(color_a) == normalize_hex(color_b) else 0.0

        distance = rgb_distance(
            hex_to_rgb(self.simulate(color_a, cvd_type)),
            hex_to_rgb(self.simulate(color_b, cvd_type)),
        )
        return math.exp(-self.decay * distance)

    def confusion_matrix(
        self, colors: list[str], cvd_type: CvdType
    ) -> dict[str, dict[str, float]]:
        """Simulated confusion probability for every ordered pair of ``colors``."""
        cvd_type = CvdType.parse(cvd_type)
        normalized = [normalize_hex(c) for c in colors]
        return {
            a: {b: self.simulated_confusion_probability(a, b, cvd_type) for b in normalized}
            for a in normalized
        }


class SimulatedStimulusGenerator:
    """Builds discrimination trials from colors that simulate alike.

    Difficulty tightens the search: radius 60 - 3d, similarity threshold
    5 + 1.5d. If no candidate qualifies the search is relaxed twice, then
    a random nearby color is used.
    """

    def __init__(
        self,
        simulator: TransformConfusionSimulator,
        rng: Optional[np.random.Generator] = None,
        max_attempts: int = STIMULUS_MAX_ATTEMPTS,
        min_actual_distance: float = STIMULUS_MIN_ACTUAL_DISTANCE,
    ) -> None:
        self.simulator = simulator
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_attempts = max_attempts
        self.min_actual_distance = min_actual_distance

    def find_confusable_color(
        self,
        reference: str,
        cvd_type: CvdType,
        search_radius: float = 40.0,
        similarity_threshold: float = 15.0,
    ) -> Optional[str]:
        """Color that is actually different but simulates close to ``reference``."""
        cvd_type = CvdType.parse(cvd_type)
        if cvd_type == CvdType.NORMAL:
            return None

        reference = normalize_hex(reference)
        ref_rgb = hex_to_rgb(reference)
        ref_sim_rgb = hex_to_rgb(self.simulator.simulate(reference, cvd_type))

        best: Optional[str] = None
        best_distance = math.inf
        for _ in range(self.max_attempts):
            candidate = random_variant(reference, search_radius, self.rng)
            if candidate == reference:
                continue

            sim_distance = rgb_distance(
                ref_sim_rgb, hex_to_rgb(self.simulator.simulate(candidate, cvd_type))
            )
            if sim_distance >= similarity_threshold or sim_distance >= best_distance:
                continue
            if rgb_distance(ref_rgb, hex_to_rgb(candidate)) > self.min_actual_distance:
                best = candidate
                best_distance = sim_distance

        return best

    def find_multiple_confusable_colors(
        self, reference: str, cvd_type: CvdType, count: int = CONFUSABLE_SET_SIZE
    ) -> list[str]:
        """Up to ``count`` distinct confusable colors from varied searches."""
        found: dict[str, None] = {}
        for _ in range(count * 10):
            if len(found) >= count:
                break
            search_radius = 30 + self.rng.random() * 40
            similarity_threshold = 10 + self.rng.random() * 10
            candidate = self.find_confusable_color(
                reference, cvd_type, search_radius, similarity_threshold
            )
            if candidate is not None:
                found.setdefault(candidate)
        return list(found)

    def generate_trial(
        self,
        reference_color: str,
        cvd_type: CvdType,
        difficulty: int = DEFAULT_DIFFICULTY,
    ) -> Trial:
        difficulty = validate_difficulty(difficulty)
        cvd_type = CvdType.parse(cvd_type)
        reference = normalize_hex(reference_color)

        radius = 60 - difficulty * 3
        threshold = 5 + difficulty * 1.5
        searches = [
            (radius, threshold),
            (radius * 1.5, threshold * 1.3),
            (100.0, 50.0),
        ]

        comparison = None
        for search_radius, similarity in searches:
            comparison = self.find_confusable_color(reference, cvd_type, search_radius, similarity)
            if comparison is not None:
                break
            logger.debug(
                "No confusable color for %s (radius=%.0f, threshold=%.1f)",
                reference, search_radius, similarity,
            )

        if comparison is None:
            if cvd_type != CvdType.NORMAL:
                logger.warning("No confusable pair found for %s, using random fallback", reference)
            comparison = self._fallback_color(reference, difficulty)

        reference_on_left = self.rng.random() > 0.5
        return Trial(
            reference=reference,
            color1=reference if reference_on_left else comparison,
            color2=comparison if reference_on_left else reference,
            reference_position=Response.COLOR1 if reference_on_left else Response.COLOR2,
            expected_confusion_prob=self.simulator.simulated_confusion_probability(
                reference, comparison, cvd_type
            ),
            difficulty=difficulty,
        )

    # ------------------------------------------------------------------
    # Trial sets
    # ------------------------------------------------------------------

    def generate_trial_batch(
        self,
        cvd_type: CvdType,
        count: int = TRIAL_BATCH_SIZE,
        difficulty: int = DEFAULT_DIFFICULTY,
        priority_provider: PriorityColorProvider = priority_colors,
    ) -> list[Trial]:
        """Trials around priority colors drawn at random (with replacement)."""
        _validate_count(count)
        cvd_type = CvdType.parse(cvd_type)
        colors = priority_provider(cvd_type)
        if not colors:
            raise InvalidInput(f"No priority colors for {cvd_type.value}")
        return [
            self.generate_trial(colors[int(self.rng.integers(len(colors)))], cvd_type, difficulty)
            for _ in range(count)
        ]

    def generate_region_trials(
        self,
        base_color: str,
        count: int = REGION_TRIAL_COUNT,
        difficulty: int = DEFAULT_DIFFICULTY,
        cvd_type: CvdType = CvdType.NORMAL,
    ) -> list[Trial]:
        """Trials for a color region: the base color first, then its neighbors."""
        _validate_count(count)
        neighbors = adjacent_colors(base_color, REGION_ADJACENT_STEP)
        return [
            self.generate_trial(
                base_color if i == 0 else neighbors[i % len(neighbors)], cvd_type, difficulty
            )
            for i in range(count)
        ]

    def generate_gradient_trials(
        self,
        color1: str,
        color2: str,
        steps: int = GRADIENT_STEPS,
        difficulty: int = GRADIENT_DIFFICULTY,
        cvd_type: CvdType = CvdType.NORMAL,
    ) -> list[Trial]:
        """Trials at ``steps + 1`` evenly spaced points from color1 to color2."""
        if isinstance(steps, bool) or not isinstance(steps, int) or steps < 1:
            raise InvalidInput(f"steps must be a positive integer, got {steps!r}")
        return [
            self.generate_trial(interpolate(color1, color2, i / steps), cvd_type, difficulty)
            for i in range(steps + 1)
        ]

    def _fallback_color(self, reference: str, difficulty: int) -> str:
        step = 60 - difficulty * 4
        for _ in range(self.max_attempts):
            candidate = random_variant(reference, step, self.rng)
            if candidate != reference:
                return candidate

        # Deterministic nudge so the pair never collapses to one color
        rgb = hex_to_rgb(reference)
        rgb[0] = rgb[0] + step if rgb[0] < 128 else rgb[0] - step
        return rgb_to_hex(rgb)
