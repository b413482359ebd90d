"""Data classes, enums and collaborator interfaces for color-discrimination testing."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Protocol

from .colorspace import normalize_hex
from .exceptions import InvalidInput


class _ParseableEnum(str, Enum):
    """String enum that rejects unknown values with InvalidInput."""

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidInput(f"Unknown {cls.__name__}: {value!r}") from None


class CvdType(_ParseableEnum):
    """Color vision condition being tested."""
    DEUTERANOMALY = "deuteranomaly"
    PROTANOMALY = "protanomaly"
    TRITANOMALY = "tritanomaly"
    DEUTERANOPIA = "deuteranopia"
    PROTANOPIA = "protanopia"
    TRITANOPIA = "tritanopia"
    ACHROMATOPSIA = "achromatopsia"
    ACHROMATOMALY = "achromatomaly"
    NORMAL = "normal"


class SelectionMode(_ParseableEnum):
    """Trial selection policy."""
    EXPLORE = "explore"
    EXPLOIT = "exploit"
    BALANCED = "balanced"


class Response(_ParseableEnum):
    """User answer to a discrimination trial."""
    SAME = "same"
    COLOR1 = "color1"
    COLOR2 = "color2"


@dataclass(frozen=True)
class ColorPairKey:
    """Unordered color pair; ``of(a, b) == of(b, a)``."""
    first: str
    second: str

    @classmethod
    def of(cls, color_a: str, color_b: str) -> "ColorPairKey":
        a, b = sorted((normalize_hex(color_a), normalize_hex(color_b)))
        return cls(a, b)

    @classmethod
    def parse(cls, key: str) -> "ColorPairKey":
        parts = key.split("|") if isinstance(key, str) else []
        if len(parts) != 2:
            raise InvalidInput(f"Malformed pair key: {key!r}")
        return cls.of(parts[0], parts[1])

    @property
    def colors(self) -> tuple[str, str]:
        return (self.first, self.second)

    def __str__(self) -> str:
        return f"{self.first}|{self.second}"


@dataclass
class Trial:
    """A single discrimination trial shown to the user."""
    reference: str
    color1: str
    color2: str
    reference_position: Response           # COLOR1 or COLOR2
    expected_confusion_prob: float = 0.0   # simulated prior
    difficulty: int = 5                    # 1-10
    start_time: Optional[datetime] = None

    @property
    def pair_key(self) -> ColorPairKey:
        return ColorPairKey.of(self.color1, self.color2)


# ---------------------------------------------------------------------------
# External collaborators
# ---------------------------------------------------------------------------


class ConfusionSimulator(Protocol):
    def simulated_confusion_probability(
        self, color_a: str, color_b: str, cvd_type: CvdType
    ) -> float:
        ...


class StimulusGenerator(Protocol):
    def generate_trial(
        self, reference_color: str, cvd_type: CvdType, difficulty: int
    ) -> Trial:
        ...


PriorityColorProvider = Callable[[CvdType], list[str]]

# Colorblind simulation: hex color as seen with the given CVD type
ColorTransform = Callable[[str, CvdType], str]
