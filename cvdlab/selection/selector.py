"""Adaptive trial selection: explore untested regions or exploit uncertainty.

Modes:
  - EXPLORE:  least-tested color from priority colors, hotspots and
              coverage suggestions
  - EXPLOIT:  sample priority colors, score a candidate trial for each, keep the
              reference whose pair has the highest information gain
  - BALANCED: exploit 70% of the time, explore otherwise
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Optional

import numpy as np

from cvdlab.bayesian.model import ColorVisionModel
from cvdlab.config import (
    CONFUSION_THRESHOLD,
    DEFAULT_DIFFICULTY,
    EXPLOIT_PROBABILITY,
    EXPLOIT_SAMPLE_SIZE,
    HOTSPOT_MIN_OBSERVATIONS,
    MODE_COVERAGE_THRESHOLD,
    MODE_MIN_OBSERVATIONS,
    MODE_UNCERTAINTY_THRESHOLD,
    SUGGESTION_COUNT,
)
from cvdlab.core.colorspace import normalize_hex
from cvdlab.core.exceptions import InvalidInput
from cvdlab.core.profiles import priority_colors
from cvdlab.core.types import PriorityColorProvider, SelectionMode, StimulusGenerator, Trial

from .stimulus import validate_difficulty

logger = logging.getLogger(__name__)


@dataclass
class SelectorStats:
    """Progress summary for one testing session."""
    total_tests: int
    unique_pairs_tested: int
    unique_colors_tested: int
    confirmed_confusions: int
    average_uncertainty: float
    mode: SelectionMode


class AdaptiveSelector:
    """Chooses the next reference color for a session's model.

    Attributes:
        model: The session's ColorVisionModel (read only from here).
        generator: Builds a trial around a reference color.
        mode: Current SelectionMode; only changed through set_mode().
    """

    def __init__(
        self,
        model: ColorVisionModel,
        generator: StimulusGenerator,
        priority_provider: PriorityColorProvider = priority_colors,
        rng: Optional[np.random.Generator] = None,
        mode: SelectionMode | str = SelectionMode.BALANCED,
        exploit_probability: float = EXPLOIT_PROBABILITY,
        sample_size: int = EXPLOIT_SAMPLE_SIZE,
    ) -> None:
        self.model = model
        self.generator = generator
        self.priority_provider = priority_provider
        self.rng = rng if rng is not None else np.random.default_rng()
        self.mode = SelectionMode.parse(mode)
        self.exploit_probability = exploit_probability
        self.sample_size = sample_size

    def priority_colors(self) -> list[str]:
        colors = [normalize_hex(c) for c in self.priority_provider(self.model.cvd_type)]
        if not colors:
            raise InvalidInput(f"No priority colors for {self.model.cvd_type.value}")
        return colors

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_next_trial(self, difficulty: int = DEFAULT_DIFFICULTY) -> Trial:
        difficulty = validate_difficulty(difficulty)

        if self.mode == SelectionMode.EXPLORE:
            return self.select_exploration(difficulty)
        if self.mode == SelectionMode.EXPLOIT:
            return self.select_exploitation(difficulty)
        return self.select_balanced(difficulty)

    def select_exploration(self, difficulty: int = DEFAULT_DIFFICULTY) -> Trial:
        """Trial for the least-tested color in the expanded priority pool."""
        priority = self.priority_colors()
        hotspots = self.model.get_confusion_hotspots(CONFUSION_THRESHOLD, HOTSPOT_MIN_OBSERVATIONS)
        suggested = self.model.suggest_next_colors(priority, SUGGESTION_COUNT)
        pool = self.exploration_pool(priority, hotspots, suggested)

        counts = self.color_test_counts()
        # min() keeps the first of equally-tested colors, i.e. pool order
        color = min(pool, key=lambda c: counts.get(c, 0))

        logger.debug(
            "Explore: %s (tested in %d pairs, pool of %d)", color, counts.get(color, 0), len(pool)
        )
        return self.generator.generate_trial(color, self.model.cvd_type, difficulty)

    def select_exploitation(self, difficulty: int = DEFAULT_DIFFICULTY) -> Trial:
        """Trial for the sampled priority color with the highest information gain.

        The winning reference gets a freshly generated trial; since
        generation is randomized it can differ from the candidate that scored it.
        """
        priority = self.priority_colors()
        cvd_type = self.model.cvd_type

        best_color: Optional[str] = None
        max_gain = -1.0
        for _ in range(min(self.sample_size, len(priority))):
            color = priority[int(self.rng.integers(len(priority)))]
            candidate = self.generator.generate_trial(color, cvd_type, difficulty)
            gain = self.model.calculate_information_gain(candidate.color1, candidate.color2)
            if gain > max_gain:
                max_gain = gain
                best_color = color

        best_color = best_color or priority[0]
        logger.debug("Exploit: %s (information gain %.4f)", best_color, max_gain)
        return self.generator.generate_trial(best_color, cvd_type, difficulty)

    def select_balanced(self, difficulty: int = DEFAULT_DIFFICULTY) -> Trial:
        if self.rng.random() < self.exploit_probability:
            return self.select_exploitation(difficulty)
        return self.select_exploration(difficulty)

    @staticmethod
    def exploration_pool(*groups: list[str]) -> list[str]:
        """Concatenate color groups, dropping repeats but keeping first-seen order."""
        return list(dict.fromkeys(c for group in groups for c in group))

    def color_test_counts(self) -> Counter:
        """Number of tested pairs each color appears in."""
        counts: Counter = Counter()
        for pair in self.model.get_tested_pairs():
            counts[pair.color1] += 1
            counts[pair.color2] += 1
        return counts

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------

    def set_mode(self, mode: SelectionMode | str) -> None:
        """Switch mode; unknown values are ignored and the mode is kept."""
        try:
            self.mode = SelectionMode.parse(mode)
        except InvalidInput:
            logger.debug("Ignoring unknown selection mode %r (keeping %s)", mode, self.mode.value)

    def get_stats(self) -> SelectorStats:
        tested = self.model.get_tested_pairs()
        confused = self.model.get_confused_pairs(CONFUSION_THRESHOLD)

        avg_uncertainty = (
            sum(p.uncertainty for p in tested) / len(tested) if tested else 1.0
        )
        unique_colors = {c for p in tested for c in (p.color1, p.color2)}

        return SelectorStats(
            total_tests=len(self.model.history),
            unique_pairs_tested=len(tested),
            unique_colors_tested=len(unique_colors),
            confirmed_confusions=len(confused),
            average_uncertainty=avg_uncertainty,
            mode=self.mode,
        )

    def suggest_mode(self) -> SelectionMode:
        """Recommended mode for the session's current progress."""
        stats = self.get_stats()

        if stats.total_tests < MODE_MIN_OBSERVATIONS:
            return SelectionMode.EXPLORE

        if stats.average_uncertainty > MODE_UNCERTAINTY_THRESHOLD:
            return SelectionMode.EXPLOIT

        coverage = stats.unique_colors_tested / len(self.priority_colors())
        if coverage < MODE_COVERAGE_THRESHOLD:
            return SelectionMode.EXPLORE

        return SelectionMode.BALANCED
