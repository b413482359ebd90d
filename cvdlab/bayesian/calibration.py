"""Severity calibration: graded comparisons for every priority range.

Each profile range becomes a stage. A stage shows the reference color next
to blends toward its fully simulated appearance at increasing severity; the
first level the user reports as "same" is that stage's severity threshold.
Overall severity is the mean over stages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from cvdlab.config import SEVERITY_BASE
from cvdlab.core.colorspace import hex_to_rgb, interpolate
from cvdlab.core.exceptions import InvalidInput
from cvdlab.core.profiles import testing_profile
from cvdlab.core.types import ColorTransform, CvdType

logger = logging.getLogger(__name__)

DEFAULT_LEVELS = (0.2, 0.4, 0.6, 0.8, 1.0)


@dataclass
class CalibrationStage:
    """One calibration stage derived from a profile priority range."""
    stage_name: str
    reference_color: str
    fully_simulated: str
    label: str

    def comparison_at(self, severity: float) -> str:
        """Reference blended toward its simulated appearance by ``severity``."""
        if not 0.0 <= severity <= 1.0:
            raise InvalidInput(f"severity must be in [0, 1], got {severity}")
        return interpolate(self.reference_color, self.fully_simulated, severity)


@dataclass
class GradedResponse:
    """User answer at one blend level."""
    severity: float
    said_same: bool


@dataclass
class StageResult:
    stage_name: str
    severity: float


def color_label(hex_color: str) -> str:
    """Rough human-readable name for a hex color."""
    r, g, b = (int(v) for v in hex_to_rgb(hex_color))

    if r > 200 and g < 100 and b < 100:
        return "Red"
    if g > 200 and r < 100 and b < 100:
        return "Green"
    if b > 200 and r < 100 and g < 100:
        return "Blue"
    if r > 200 and g > 200 and b < 100:
        return "Yellow"
    if r > 200 and b > 200 and g < 100:
        return "Magenta"
    if g > 200 and b > 200 and r < 100:
        return "Cyan"
    if r > 200 and 100 < g < 200 and b < 100:
        return "Orange"
    if r > 100 and g < 100 and b > 100:
        return "Purple"
    if r > 100 and 50 < g < 100 and b < 50:
        return "Brown"
    if r < 50 and g < 50 and b < 50:
        return "Black"
    if r > 200 and g > 200 and b > 200:
        return "White"
    if abs(r - g) < 30 and abs(g - b) < 30:
        return "Gray"
    return "Color"


def generate_calibration_stages(
    cvd_type: CvdType | str, transform: Optional[ColorTransform] = None
) -> list[CalibrationStage]:
    """One stage per priority range, using the range's first color as reference.

    Without a transform (or for normal vision) the range's second color
    stands in for the simulated appearance.
    """
    cvd_type = CvdType.parse(cvd_type)
    stages = []
    for priority_range in testing_profile(cvd_type).priority_ranges:
        reference = priority_range.colors[0]
        if transform is not None and cvd_type != CvdType.NORMAL:
            simulated = transform(reference, cvd_type)
        else:
            simulated = priority_range.colors[1]
        stages.append(CalibrationStage(
            stage_name=priority_range.name,
            reference_color=reference,
            fully_simulated=simulated,
            label=color_label(reference),
        ))
    return stages


def estimate_threshold_severity(responses: list[GradedResponse]) -> float:
    """Severity from graded responses: the first level reported as "same".

    No "same" at any level means very mild CVD (0.1); "same" already at
    the lowest level (<= 0.2) means very severe (0.9).
    """
    ordered = sorted(responses, key=lambda r: r.severity)
    threshold = next((r for r in ordered if r.said_same), None)

    if threshold is None:
        return 0.1
    if threshold.severity <= 0.2:
        return 0.9
    return threshold.severity


def calculate_overall_severity(results: list[StageResult]) -> float:
    """Mean stage severity, or the medium default with no stages."""
    if not results:
        return SEVERITY_BASE
    return sum(r.severity for r in results) / len(results)


class SeverityCalibrator:
    """Collects graded responses per stage and turns them into severities."""

    def __init__(
        self,
        cvd_type: CvdType | str,
        transform: Optional[ColorTransform] = None,
        levels: tuple[float, ...] = DEFAULT_LEVELS,
    ) -> None:
        self.cvd_type = CvdType.parse(cvd_type)
        self.levels = levels
        self.stages = generate_calibration_stages(self.cvd_type, transform)
        self._responses: dict[str, list[GradedResponse]] = {
            s.stage_name: [] for s in self.stages
        }

    def trials(self, stage_name: str) -> list[tuple[float, str]]:
        """(severity, comparison color) for every level of a stage."""
        stage = self._stage(stage_name)
        return [(level, stage.comparison_at(level)) for level in self.levels]

    def record(self, stage_name: str, severity: float, said_same: bool) -> None:
        self._stage(stage_name)
        self._responses[stage_name].append(GradedResponse(severity, said_same))

    def stage_severity(self, stage_name: str) -> Optional[float]:
        responses = self._responses.get(stage_name)
        if not responses:
            return None
        return estimate_threshold_severity(responses)

    def results(self) -> list[StageResult]:
        results = []
        for stage in self.stages:
            sev = self.stage_severity(stage.stage_name)
            if sev is not None:
                results.append(StageResult(stage.stage_name, sev))
        return results

    def overall_severity(self) -> float:
        results = self.results()
        overall = calculate_overall_severity(results)
        logger.info(
            "Calibrated %s severity %.2f from %d/%d stages",
            self.cvd_type.value, overall, len(results), len(self.stages),
        )
        return overall

    def _stage(self, stage_name: str) -> CalibrationStage:
        for stage in self.stages:
            if stage.stage_name == stage_name:
                return stage
        raise InvalidInput(f"Unknown calibration stage: {stage_name!r}")
