"""Bayesian update engine: apply one trial outcome to a pair belief.

Owns the belief store and the append-only response history for one
session. Beliefs are created from the simulated prior on the first update
of a pair and are never removed.
"""

from __future__ import annotations

import logging
from typing import Optional

from cvdlab.core.exceptions import InvalidInput, InvalidTrial
from cvdlab.core.types import ColorPairKey, ConfusionSimulator, CvdType, Response

from .belief import Belief, PriorInitializer
from .evidence import EvidenceWeighting
from .state import HistoryEntry

logger = logging.getLogger(__name__)


class BayesianUpdateEngine:
    """Conjugate Beta updates with distance-weighted evidence.

    Flow per response:
      1. Resolve or create the pair's Belief from the simulated prior
      2. success = response != "same"
      3. weight = EvidenceWeighting(perceptual distance)
      4. Belief update
      5. Append a HistoryEntry
    """

    def __init__(
        self,
        cvd_type: CvdType,
        simulator: ConfusionSimulator,
        prior: Optional[PriorInitializer] = None,
        weighting: Optional[EvidenceWeighting] = None,
    ) -> None:
        self.cvd_type = CvdType.parse(cvd_type)
        self.simulator = simulator
        self.prior = prior or PriorInitializer()
        self.weighting = weighting or EvidenceWeighting()
        self.beliefs: dict[ColorPairKey, Belief] = {}
        self.history: list[HistoryEntry] = []

    # ------------------------------------------------------------------
    # Belief store
    # ------------------------------------------------------------------

    def simulated_probability(self, key: ColorPairKey) -> float:
        return self.simulator.simulated_confusion_probability(
            key.first, key.second, self.cvd_type
        )

    def prior_for(self, key: ColorPairKey) -> Belief:
        return self.prior.from_simulated(self.simulated_probability(key))

    def get(self, key: ColorPairKey) -> Optional[Belief]:
        return self.beliefs.get(key)

    def peek(self, key: ColorPairKey) -> Belief:
        """Stored belief, or the prior it would start from (not stored)."""
        belief = self.beliefs.get(key)
        return belief if belief is not None else self.prior_for(key)

    def belief_for(self, key: ColorPairKey) -> Belief:
        belief = self.beliefs.get(key)
        if belief is None:
            belief = self.prior_for(key)
            self.beliefs[key] = belief
        return belief

    def replace(
        self,
        cvd_type: CvdType,
        beliefs: dict[ColorPairKey, Belief],
        history: list[HistoryEntry],
    ) -> None:
        """Swap in a whole new state (snapshot import)."""
        self.cvd_type = CvdType.parse(cvd_type)
        self.beliefs = dict(beliefs)
        self.history = list(history)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(
        self,
        pair_key: ColorPairKey,
        response: Response | str,
        perceptual_distance: float,
        reference: Optional[str] = None,
        reference_position: Optional[Response] = None,
    ) -> HistoryEntry:
        """Apply one response to the pair's belief and record it."""
        key = _validated_key(pair_key)
        response = Response.parse(response)
        if reference_position is not None:
            reference_position = Response.parse(reference_position)
            if reference_position == Response.SAME:
                raise InvalidTrial("reference_position must be color1 or color2")

        success = response != Response.SAME
        weight = self.weighting.weight(perceptual_distance)

        belief = self.belief_for(key)
        belief.update(success, weight)

        entry = HistoryEntry(
            color1=key.first,
            color2=key.second,
            reference=reference,
            response=response,
            distinguished=success,
            identified_correctly=success and response == reference_position,
            delta_e=perceptual_distance,
            weight=weight,
            belief_after=belief.mean,
        )
        self.history.append(entry)

        logger.debug(
            "Bayesian update %s: dE=%.2f weight=%.3f %s -> confusion=%.3f",
            key, perceptual_distance, weight,
            "distinguished" if success else "confused",
            1.0 - belief.mean,
        )
        return entry


def _validated_key(pair_key: ColorPairKey) -> ColorPairKey:
    if not isinstance(pair_key, ColorPairKey):
        raise InvalidTrial(f"Expected a ColorPairKey, got {type(pair_key).__name__}")
    try:
        key = ColorPairKey.of(pair_key.first, pair_key.second)
    except InvalidInput as e:
        raise InvalidTrial(str(e)) from e
    if key.first == key.second:
        raise InvalidTrial(f"Pair colors must differ: {key}")
    return key
