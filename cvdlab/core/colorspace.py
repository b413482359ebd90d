"""Hex/RGB conversions and color distances.

Colors travel through the system as normalized hex strings (``#RRGGBB``,
upper case). RGB values are float arrays in 0-255.
"""

from __future__ import annotations

import re

import numpy as np

from .exceptions import InvalidInput

_HEX_RE = re.compile(r"^#?[0-9A-Fa-f]{6}$")


def is_valid_hex(value: object) -> bool:
    return isinstance(value, str) and bool(_HEX_RE.match(value))


def normalize_hex(value: object) -> str:
    """Return ``#RRGGBB`` in upper case, or raise InvalidInput."""
    if not is_valid_hex(value):
        raise InvalidInput(f"Malformed color identifier: {value!r}")
    return "#" + value.lstrip("#").upper()


def hex_to_rgb(hex_color: str) -> np.ndarray:
    h = normalize_hex(hex_color)[1:]
    return np.array([int(h[i:i + 2], 16) for i in (0, 2, 4)], dtype=float)


def rgb_to_hex(rgb) -> str:
    # Round half up, then clamp into the displayable range
    values = np.clip(np.floor(np.asarray(rgb, dtype=float) + 0.5), 0, 255).astype(int)
    return "#{:02X}{:02X}{:02X}".format(*values)


def rgb_distance(rgb1, rgb2) -> float:
    """Euclidean distance in RGB space."""
    return float(np.linalg.norm(np.asarray(rgb1, dtype=float) - np.asarray(rgb2, dtype=float)))


def delta_e(hex1: str, hex2: str) -> float:
    """Perceptual distance between two colors.

    Approximated by RGB Euclidean distance; callers that need CIEDE2000 can
    inject their own distance function into the model.
    """
    return rgb_distance(hex_to_rgb(hex1), hex_to_rgb(hex2))


def interpolate(hex1: str, hex2: str, ratio: float) -> str:
    """Color at ``ratio`` along the RGB segment (0 = hex1, 1 = hex2)."""
    rgb1 = hex_to_rgb(hex1)
    rgb2 = hex_to_rgb(hex2)
    return rgb_to_hex(rgb1 + (rgb2 - rgb1) * ratio)


def random_variant(hex_color: str, radius: float, rng: np.random.Generator) -> str:
    """Uniform random color within +/- radius per channel, clamped to 0-255."""
    rgb = hex_to_rgb(hex_color)
    offset = (rng.random(3) - 0.5) * radius * 2
    return rgb_to_hex(rgb + offset)


# ---------------------------------------------------------------------------
# Neighboring colors
# ---------------------------------------------------------------------------


def adjacent_colors(hex_color: str, step: float = 10) -> list[str]:
    """Nine single- and two-channel steps around a color, clamped to 0-255.

    Order: +R, -R, +G, -G, +B, -B, +RG, +RB, +GB. Clamping at the gamut
    edge can repeat colors (or the input itself); they are kept.
    """
    rgb = hex_to_rgb(hex_color)
    offsets = [
        (step, 0, 0), (-step, 0, 0),
        (0, step, 0), (0, -step, 0),
        (0, 0, step), (0, 0, -step),
        (step, step, 0), (step, 0, step), (0, step, step),
    ]
    return [rgb_to_hex(rgb + np.array(offset, dtype=float)) for offset in offsets]


def adjacent_color_grid(hex_color: str, grid_size: int = 5, step: float = 15) -> list[str]:
    """Colors on a cubic RGB grid centered on ``hex_color``.

    The center is left out, as is anything clamping collapses onto it;
    repeats from clamping are dropped, keeping grid order.
    """
    center = normalize_hex(hex_color)
    rgb = hex_to_rgb(center)
    half = grid_size // 2
    span = range(-half, half + 1)

    grid: dict[str, None] = {}
    for dr in span:
        for dg in span:
            for db in span:
                color = rgb_to_hex(rgb + np.array([dr, dg, db], dtype=float) * step)
                if color != center:
                    grid.setdefault(color)
    return list(grid)


def nearest_colors(hex_color: str, count: int = 10, max_step: float = 30) -> list[str]:
    """``count`` grid neighbors closest to ``hex_color`` in RGB distance."""
    rgb = hex_to_rgb(hex_color)
    grid = adjacent_color_grid(hex_color, 5, max_step / 2)
    # sorted() is stable, so equal distances keep grid order
    return sorted(grid, key=lambda c: rgb_distance(rgb, hex_to_rgb(c)))[:count]


def axis_colors(hex_color: str, steps: int = 5, step_size: float = 10) -> dict[str, list[str]]:
    """Colors stepping along each RGB axis, keyed "r", "g", "b"."""
    rgb = hex_to_rgb(hex_color)
    axes = {}
    for channel, name in enumerate("rgb"):
        colors = []
        for i in range(-steps, steps + 1):
            if i == 0:
                continue
            shifted = rgb.copy()
            shifted[channel] += i * step_size
            colors.append(rgb_to_hex(shifted))
        axes[name] = colors
    return axes


def similar_colors(
    hex_color: str,
    rng: np.random.Generator,
    count: int = 20,
    threshold: float = 20,
) -> list[str]:
    """Up to ``count`` distinct random colors within ``threshold`` RGB distance."""
    reference = normalize_hex(hex_color)
    rgb = hex_to_rgb(reference)

    similar: dict[str, None] = {}
    for _ in range(count * 50):
        if len(similar) >= count:
            break
        candidate = np.clip(rgb + (rng.random(3) - 0.5) * threshold * 2, 0, 255)
        distance = rgb_distance(rgb, candidate)
        if 0 < distance <= threshold:
            color = rgb_to_hex(candidate)
            if color != reference:
                similar.setdefault(color)
    return list(similar)
