"""Testing profiles: which color regions matter most for each CVD type."""

from __future__ import annotations

from dataclasses import dataclass, field

from .types import CvdType


@dataclass
class PriorityRange:
    """A named group of reference colors worth testing."""
    name: str
    colors: list[str] = field(default_factory=list)


@dataclass
class TestingProfile:
    """Priority ranges for one CVD type."""
    __test__ = False  # not a pytest class

    name: str
    description: str
    priority_ranges: list[PriorityRange] = field(default_factory=list)

    @property
    def priority_colors(self) -> list[str]:
        # Flattened in range order; duplicates across ranges are kept
        return [c for r in self.priority_ranges for c in r.colors]


TESTING_PROFILES: dict[CvdType, TestingProfile] = {
    CvdType.DEUTERANOMALY: TestingProfile("Deuteranomaly", "Green-weak color vision", [
        PriorityRange("Mid-reds and greens", ["#FF0000", "#00FF00", "#808000", "#FF6600"]),
        PriorityRange("Blue-greens and grays", ["#008080", "#808080", "#00FFFF", "#666666"]),
        PriorityRange("Pinks and light grays", ["#FFC0CB", "#FFB6C1", "#D3D3D3", "#C0C0C0"]),
        PriorityRange("Purples and blues", ["#800080", "#0000FF", "#4B0082", "#8A2BE2"]),
        PriorityRange("Browns, oranges, greens", ["#A52A2A", "#FF8C00", "#228B22", "#8B4513"]),
    ]),
    CvdType.PROTANOMALY: TestingProfile("Protanomaly", "Red-weak color vision", [
        PriorityRange("Reds and dark greens", ["#FF0000", "#8B0000", "#006400", "#228B22"]),
        PriorityRange("Orange and brown", ["#FF8C00", "#FFA500", "#A52A2A", "#8B4513"]),
        PriorityRange("Red-purple and blue", ["#C71585", "#8B008B", "#0000FF", "#4169E1"]),
        PriorityRange("Pink and light gray", ["#FFC0CB", "#FFB6C1", "#D3D3D3", "#DCDCDC"]),
        PriorityRange("Yellow-green and cyan", ["#9ACD32", "#ADFF2F", "#00FFFF", "#00CED1"]),
    ]),
    CvdType.TRITANOMALY: TestingProfile("Tritanomaly", "Blue-weak color vision", [
        PriorityRange("Blues and greens", ["#0000FF", "#00FF00", "#008080", "#00FFFF"]),
        PriorityRange("Yellow and violet", ["#FFFF00", "#FFD700", "#8A2BE2", "#9400D3"]),
        PriorityRange("Blue-green and gray", ["#20B2AA", "#48D1CC", "#808080", "#A9A9A9"]),
        PriorityRange("Orange and pink", ["#FF8C00", "#FFA500", "#FFC0CB", "#FF69B4"]),
        PriorityRange("Light blue and white", ["#87CEEB", "#ADD8E6", "#F0F0F0", "#FFFFFF"]),
    ]),
    CvdType.DEUTERANOPIA: TestingProfile("Deuteranopia", "No green perception", [
        PriorityRange("All reds and greens", ["#FF0000", "#00FF00", "#FFFF00", "#FF6600"]),
        PriorityRange("Browns and greens", ["#A52A2A", "#8B4513", "#228B22", "#006400"]),
        PriorityRange("Purples and blues", ["#800080", "#0000FF", "#8A2BE2", "#4169E1"]),
        PriorityRange("Gray spectrum", ["#404040", "#808080", "#C0C0C0", "#E0E0E0"]),
    ]),
    CvdType.PROTANOPIA: TestingProfile("Protanopia", "No red perception", [
        PriorityRange("All reds", ["#FF0000", "#8B0000", "#DC143C", "#B22222"]),
        PriorityRange("Reds and greens", ["#FF0000", "#00FF00", "#808000", "#FF8C00"]),
        PriorityRange("Orange and yellow", ["#FF8C00", "#FFA500", "#FFFF00", "#FFD700"]),
        PriorityRange("Pink and gray", ["#FFC0CB", "#FFB6C1", "#D3D3D3", "#DCDCDC"]),
    ]),
    CvdType.TRITANOPIA: TestingProfile("Tritanopia", "No blue perception", [
        PriorityRange("All blues", ["#0000FF", "#0000CD", "#4169E1", "#1E90FF"]),
        PriorityRange("Blues and yellows", ["#0000FF", "#FFFF00", "#00FFFF", "#FFD700"]),
        PriorityRange("Violets and greens", ["#8A2BE2", "#9400D3", "#00FF00", "#32CD32"]),
        PriorityRange("Cyan and pink", ["#00FFFF", "#00CED1", "#FFC0CB", "#FF69B4"]),
    ]),
    CvdType.ACHROMATOPSIA: TestingProfile("Achromatopsia", "No color perception", [
        PriorityRange("Full grayscale", ["#000000", "#404040", "#808080", "#C0C0C0", "#FFFFFF"]),
        PriorityRange("Brightness levels", ["#1A1A1A", "#333333", "#666666", "#999999", "#CCCCCC"]),
    ]),
    CvdType.ACHROMATOMALY: TestingProfile(
        "Achromatomaly", "Partial monochromacy - reduced color perception", [
            PriorityRange("Saturated vs desaturated reds", ["#FF0000", "#8B0000", "#CD5C5C", "#F08080"]),
            PriorityRange("Saturated vs desaturated greens", ["#00FF00", "#228B22", "#90EE90", "#98FB98"]),
            PriorityRange("Saturated vs desaturated blues", ["#0000FF", "#00008B", "#87CEEB", "#ADD8E6"]),
            PriorityRange("High vs medium saturation", ["#FF1493", "#DB7093", "#FFA500", "#FFDAB9"]),
            PriorityRange("Brightness levels", ["#000000", "#404040", "#808080", "#C0C0C0", "#FFFFFF"]),
        ],
    ),
    CvdType.NORMAL: TestingProfile("Normal Vision", "Full color perception", [
        PriorityRange("Primary colors", ["#FF0000", "#00FF00", "#0000FF"]),
        PriorityRange("Secondary colors", ["#FFFF00", "#FF00FF", "#00FFFF"]),
        PriorityRange("Earth tones", ["#A52A2A", "#8B4513", "#D2691E", "#CD853F"]),
        PriorityRange("Pastels", ["#FFB6C1", "#E0BBE4", "#B4E7CE", "#FFF4E6"]),
    ]),
}


def testing_profile(cvd_type) -> TestingProfile:
    return TESTING_PROFILES[CvdType.parse(cvd_type)]


def priority_colors(cvd_type) -> list[str]:
    """Flattened priority colors for a CVD type, in profile order."""
    return testing_profile(cvd_type).priority_colors
