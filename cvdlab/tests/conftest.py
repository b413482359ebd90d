"""Shared fakes for the color-testing tests."""

import pathlib
import sys

import pytest

# Add project root to path
sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent.parent))

from cvdlab.core.colorspace import hex_to_rgb, normalize_hex, rgb_to_hex
from cvdlab.core.types import ColorPairKey, CvdType, Response, Trial


class TableSimulator:
    """Simulated confusion probabilities looked up per pair."""

    def __init__(self, table=None, default=0.5):
        self.table = {ColorPairKey.of(a, b): p for (a, b), p in (table or {}).items()}
        self.default = default

    def simulated_confusion_probability(self, color_a, color_b, cvd_type):
        return self.table.get(ColorPairKey.of(color_a, color_b), self.default)


def inverted(hex_color):
    return rgb_to_hex(255 - hex_to_rgb(hex_color))


class PartnerGenerator:
    """Deterministic stimulus generator: reference on the left, fixed partner."""

    def __init__(self, partners=None):
        self.partners = {normalize_hex(k): normalize_hex(v) for k, v in (partners or {}).items()}
        self.calls = []

    def generate_trial(self, reference_color, cvd_type, difficulty):
        ref = normalize_hex(reference_color)
        self.calls.append(ref)
        return Trial(
            reference=ref,
            color1=ref,
            color2=self.partners.get(ref, inverted(ref)),
            reference_position=Response.COLOR1,
            expected_confusion_prob=0.5,
            difficulty=difficulty,
        )


class ScriptedRng:
    """Stands in for numpy's Generator with scripted draws."""

    def __init__(self, ints=(), floats=()):
        self._ints = iter(ints)
        self._floats = iter(floats)

    def integers(self, high):
        value = next(self._ints)
        assert 0 <= value < high
        return value

    def random(self):
        return next(self._floats)


def grayscale(hex_color, cvd_type):
    """Luminance-only appearance, a stand-in for total color blindness."""
    r, g, b = hex_to_rgb(hex_color)
    y = 0.299 * r + 0.587 * g + 0.114 * b
    return rgb_to_hex([y, y, y])


def make_trial(color1, color2, reference_position=Response.COLOR1):
    reference = color1 if reference_position == Response.COLOR1 else color2
    return Trial(
        reference=reference,
        color1=color1,
        color2=color2,
        reference_position=reference_position,
    )


@pytest.fixture
def simulator():
    return TableSimulator()


@pytest.fixture
def generator():
    return PartnerGenerator()


@pytest.fixture
def cvd_type():
    return CvdType.DEUTERANOMALY
