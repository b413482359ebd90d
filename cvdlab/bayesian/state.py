"""Model snapshots and their JSON-file persistence.

A snapshot is the only unit of persistence: cvd type, every pair belief
and the full response history. Importing one replaces the in-memory model
wholesale, so saving is whole-state rather than incremental.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from cvdlab.config import STATE_DIR
from cvdlab.core.exceptions import InvalidInput
from cvdlab.core.types import ColorPairKey, CvdType, Response

logger = logging.getLogger(__name__)

_USER_ID_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class HistoryEntry(BaseModel):
    """One recorded response and the belief it produced."""

    color1: str = Field(..., description="First color of the pair.")
    color2: str = Field(..., description="Second color of the pair.")
    reference: Optional[str] = Field(default=None, description="Reference color of the trial.")
    response: Response
    distinguished: bool = Field(..., description="User reported the colors as different.")
    identified_correctly: bool = Field(
        default=False, description="User picked the reference side."
    )
    delta_e: float = Field(..., ge=0, description="Perceptual distance of the pair.")
    weight: float = Field(..., gt=0, description="Evidence weight applied.")
    belief_after: float = Field(..., ge=0, le=1, description="Belief mean after the update.")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BeliefRecord(BaseModel):
    """Serialized Beta belief for one pair."""

    key: str = Field(..., description="Canonical pair key 'A|B'.")
    alpha: float = Field(..., gt=0)
    beta: float = Field(..., gt=0)

    @field_validator("key")
    @classmethod
    def _canonical_key(cls, v: str) -> str:
        return str(ColorPairKey.parse(v))


class ModelSnapshot(BaseModel):
    """Whole-model state: the unit of export and import."""

    cvd_type: CvdType
    beliefs: list[BeliefRecord] = Field(default_factory=list)
    history: list[HistoryEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SnapshotStore:
    """Persists one model snapshot per (user, cvd type) as a JSON file.

    Models for different CVD types never share a file, so testing a user
    under a new type cannot overwrite what was learned under another.
    """

    def __init__(self, directory: str | Path = STATE_DIR) -> None:
        self._dir = Path(directory)

    def path_for(self, user_id: str, cvd_type: CvdType | str) -> Path:
        if not isinstance(user_id, str) or not _USER_ID_RE.match(user_id):
            raise InvalidInput(f"Invalid user id: {user_id!r}")
        return self._dir / f"{user_id}.{CvdType.parse(cvd_type).value}.json"

    def load(self, user_id: str, cvd_type: CvdType | str) -> Optional[ModelSnapshot]:
        """Load the latest snapshot, or None if absent, unreadable or mismatched."""
        cvd_type = CvdType.parse(cvd_type)
        path = self.path_for(user_id, cvd_type)
        if not path.exists():
            return None
        try:
            snapshot = ModelSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Failed to load snapshot for %s: %s", user_id, e)
            return None
        if snapshot.cvd_type != cvd_type:
            logger.warning(
                "Snapshot %s holds a %s model, expected %s; ignoring it",
                path.name, snapshot.cvd_type.value, cvd_type.value,
            )
            return None
        logger.info(
            "Loaded snapshot for %s (%s): %d beliefs, %d history entries",
            user_id, cvd_type.value, len(snapshot.beliefs), len(snapshot.history),
        )
        return snapshot

    def save(self, user_id: str, snapshot: ModelSnapshot) -> bool:
        """Write the snapshot atomically. Returns False on failure."""
        path = self.path_for(user_id, snapshot.cvd_type)
        tmp = path.with_suffix(".tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(snapshot.model_dump_json(), encoding="utf-8")
            tmp.replace(path)
        except OSError:
            logger.error("Failed to save snapshot for %s", user_id, exc_info=True)
            return False
        logger.info(
            "Saved snapshot for %s (%s, %d history entries)",
            user_id, snapshot.cvd_type.value, len(snapshot.history),
        )
        return True
