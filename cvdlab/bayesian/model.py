"""Per-session color vision model: the query/command surface of the core.

Workflow:
  1. Start from simulation-based priors for each pair
  2. Present pairs predicted to be confusable
  3. Update beliefs from the user's responses
  4. Read back a personalized confusion map

One instance per user session; nothing here is shared or global.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError

from cvdlab.config import CONFUSION_THRESHOLD, HOTSPOT_MIN_OBSERVATIONS, SUGGESTION_COUNT
from cvdlab.core.colorspace import delta_e, normalize_hex
from cvdlab.core.exceptions import InvalidInput, InvalidTrial
from cvdlab.core.types import ColorPairKey, ConfusionSimulator, CvdType, Response, Trial

from .belief import Belief, PriorInitializer
from .engine import BayesianUpdateEngine
from .evidence import EvidenceWeighting
from .metrics import MetricsEngine, TestedPair
from .state import BeliefRecord, HistoryEntry, ModelSnapshot

logger = logging.getLogger(__name__)


class ColorVisionModel:
    """Bayesian model of which color pairs one user can distinguish."""

    def __init__(
        self,
        cvd_type: CvdType | str,
        simulator: ConfusionSimulator,
        distance: Callable[[str, str], float] = delta_e,
        prior: Optional[PriorInitializer] = None,
        weighting: Optional[EvidenceWeighting] = None,
    ) -> None:
        self.engine = BayesianUpdateEngine(
            CvdType.parse(cvd_type), simulator, prior=prior, weighting=weighting
        )
        self.metrics = MetricsEngine(self.engine)
        self.distance = distance

    @property
    def cvd_type(self) -> CvdType:
        return self.engine.cvd_type

    @property
    def history(self) -> list[HistoryEntry]:
        return self.engine.history

    @property
    def beliefs(self) -> dict[ColorPairKey, Belief]:
        return self.engine.beliefs

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def update_from_response(self, trial: Trial, response: Response | str) -> HistoryEntry:
        """Update the pair belief from a user response to ``trial``.

        Raises InvalidTrial for malformed or identical trial colors and
        InvalidInput for an unknown response.
        """
        try:
            key = ColorPairKey.of(trial.color1, trial.color2)
            reference = normalize_hex(trial.reference) if trial.reference else None
        except InvalidInput as e:
            raise InvalidTrial(str(e)) from e
        if key.first == key.second:
            raise InvalidTrial(f"Trial colors must differ: {key}")

        return self.engine.update(
            key,
            response,
            self.distance(key.first, key.second),
            reference=reference,
            reference_position=trial.reference_position,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_confusion_probability(self, color1: str, color2: str) -> float:
        return self.metrics.confusion_probability(color1, color2)

    def are_colors_confusable(
        self, color1: str, color2: str, threshold: float = CONFUSION_THRESHOLD
    ) -> bool:
        return self.metrics.are_confusable(color1, color2, threshold)

    def get_uncertainty(self, color1: str, color2: str) -> float:
        return self.metrics.uncertainty(color1, color2)

    def calculate_information_gain(self, color1: str, color2: str) -> float:
        return self.metrics.information_gain(color1, color2)

    def get_tested_pairs(self) -> list[TestedPair]:
        return self.metrics.tested_pairs()

    def get_confused_pairs(self, threshold: float = CONFUSION_THRESHOLD) -> list[TestedPair]:
        return self.metrics.confused_pairs(threshold)

    def get_confusion_hotspots(
        self,
        threshold: float = CONFUSION_THRESHOLD,
        min_observations: float = HOTSPOT_MIN_OBSERVATIONS,
    ) -> list[str]:
        return self.metrics.confusion_hotspots(threshold, min_observations)

    def suggest_next_colors(self, pool: list[str], count: int = SUGGESTION_COUNT) -> list[str]:
        return self.metrics.suggest_next_colors(pool, count)

    def estimate_severity(self) -> Optional[float]:
        """Severity in [0, 1], or None while there is too little data."""
        return self.metrics.estimate_severity()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_state(self) -> ModelSnapshot:
        return ModelSnapshot(
            cvd_type=self.cvd_type,
            beliefs=[
                BeliefRecord(key=str(key), alpha=b.alpha, beta=b.beta)
                for key, b in self.engine.beliefs.items()
            ],
            history=[h.model_copy() for h in self.engine.history],
        )

    def import_state(self, snapshot: ModelSnapshot | dict[str, Any]) -> None:
        """Replace cvd type, history and every belief with the snapshot's."""
        if not isinstance(snapshot, ModelSnapshot):
            try:
                snapshot = ModelSnapshot.model_validate(snapshot)
            except ValidationError as e:
                raise InvalidInput(f"Malformed model snapshot: {e}") from e

        beliefs: dict[ColorPairKey, Belief] = {}
        for rec in snapshot.beliefs:
            key = ColorPairKey.parse(rec.key)
            if key in beliefs:
                raise InvalidInput(f"Duplicate belief for pair {key} in snapshot")
            beliefs[key] = Belief(alpha=rec.alpha, beta=rec.beta)

        self.engine.replace(
            snapshot.cvd_type,
            beliefs,
            [h.model_copy() for h in snapshot.history],
        )
        logger.info(
            "Imported model state: %s, %d beliefs, %d history entries",
            self.cvd_type.value, len(beliefs), len(self.engine.history),
        )
