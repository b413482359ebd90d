"""Test session: one user's model, selector and snapshot cadence.

Replaces a global store with an explicit object per session. Responses
update the model first; snapshots are saved afterwards and a failed save
never rolls back the update.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import numpy as np

from cvdlab.bayesian.model import ColorVisionModel
from cvdlab.bayesian.state import HistoryEntry, SnapshotStore
from cvdlab.config import DEFAULT_DIFFICULTY, SNAPSHOT_EVERY
from cvdlab.core.exceptions import InvalidInput
from cvdlab.core.types import ConfusionSimulator, CvdType, Response, SelectionMode, StimulusGenerator, Trial
from cvdlab.selection.selector import AdaptiveSelector, SelectorStats
from cvdlab.selection.stimulus import validate_difficulty

logger = logging.getLogger(__name__)


@dataclass
class TrialRecord:
    """A completed trial as seen by the session."""
    trial: Trial
    response: Response
    response_time_ms: float
    entry: HistoryEntry


class TestSession:
    """Runs adaptive trials for one user and keeps their model persisted."""
    __test__ = False  # not a pytest class

    def __init__(
        self,
        cvd_type: CvdType | str,
        simulator: ConfusionSimulator,
        generator: StimulusGenerator,
        store: Optional[SnapshotStore] = None,
        user_id: str = "local",
        difficulty: int = DEFAULT_DIFFICULTY,
        snapshot_every: int = SNAPSHOT_EVERY,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if snapshot_every < 1:
            raise InvalidInput("snapshot_every must be >= 1")
        self.user_id = user_id
        self.difficulty = validate_difficulty(difficulty)
        self.store = store
        self.snapshot_every = snapshot_every
        self.model = ColorVisionModel(cvd_type, simulator)
        self.selector = AdaptiveSelector(self.model, generator, rng=rng)
        self.current_trial: Optional[Trial] = None
        self.trial_history: list[TrialRecord] = []
        self.started_at: Optional[datetime] = None
        self.is_active = False

    def start(self) -> None:
        """Begin the session, resuming from the stored snapshot if any."""
        if self.store is not None:
            snapshot = self.store.load(self.user_id, self.model.cvd_type)
            if snapshot is not None:
                self.model.import_state(snapshot)

        self.started_at = datetime.now(timezone.utc)
        self.is_active = True
        logger.info(
            "Session started for %s (%s, difficulty %d, %d prior responses)",
            self.user_id, self.model.cvd_type.value, self.difficulty, len(self.model.history),
        )

    def next_trial(self) -> Trial:
        trial = self.selector.select_next_trial(self.difficulty)
        trial.start_time = datetime.now(timezone.utc)
        self.current_trial = trial
        return trial

    def record_response(self, response: Response | str) -> Optional[TrialRecord]:
        """Apply the response to the current trial; None if no trial is pending."""
        trial = self.current_trial
        if trial is None:
            logger.warning("Response %r with no pending trial", response)
            return None

        now = datetime.now(timezone.utc)
        start = trial.start_time or now
        entry = self.model.update_from_response(trial, response)

        record = TrialRecord(
            trial=trial,
            response=entry.response,
            response_time_ms=(now - start).total_seconds() * 1000.0,
            entry=entry,
        )
        self.trial_history.append(record)
        self.current_trial = None

        if len(self.model.history) % self.snapshot_every == 0:
            self.save()
        return record

    def save(self) -> bool:
        if self.store is None:
            return False
        return self.store.save(self.user_id, self.model.export_state())

    def end(self) -> None:
        """Save the final snapshot and close the session."""
        self.save()
        self.is_active = False
        self.current_trial = None
        logger.info(
            "Session ended for %s: %d trials this session", self.user_id, len(self.trial_history)
        )

    # ------------------------------------------------------------------
    # Mode and progress
    # ------------------------------------------------------------------

    @property
    def mode(self) -> SelectionMode:
        return self.selector.mode

    def set_mode(self, mode: SelectionMode | str) -> None:
        self.selector.set_mode(mode)

    def stats(self) -> SelectorStats:
        return self.selector.get_stats()

    def suggested_mode(self) -> SelectionMode:
        return self.selector.suggest_mode()
