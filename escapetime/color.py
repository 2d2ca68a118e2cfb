"""Coloring policies for escape-time results."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np
from matplotlib import colors as mcolors

from .errors import InvalidConfiguration
from .evaluator import Bounded, Escaped, EscapeResult, GridResult
from .view import ComplexPoint

HSV = tuple[float, float, float]
OutputColor = tuple[float, float, float, float]

_HUE_OFFSETS = np.array([1.0, 2.0 / 3.0, 1.0 / 3.0], dtype=np.float64)


class ColorMode(str, Enum):
    GRAYSCALE = "grayscale"
    GRADIENT = "gradient"


@dataclass(frozen=True)
class ColorParameters:
    """Gradient endpoints, both HSV triples with components in [0, 1]."""

    start_color: HSV = (1.0, 0.0, 1.0)
    end_color: HSV = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        _check_hsv("start_color", self.start_color)
        _check_hsv("end_color", self.end_color)


def _check_hsv(name: str, color) -> None:
    try:
        value = np.asarray(color, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"{name} must be numeric, got {color!r}.") from exc
    if value.shape != (3,):
        raise InvalidConfiguration(f"{name} must have three components, got {color!r}.")
    if not np.all(np.isfinite(value)) or np.any(value < 0.0) or np.any(value > 1.0):
        raise InvalidConfiguration(f"{name} components must lie in [0, 1], got {color!r}.")


def hsv_to_rgb(hsv) -> np.ndarray:
    """Convert HSV to RGB along the last axis without branching on the hue sector.

    Hue is taken modulo 1, so the conversion is continuous across the wraparound.
    """

    hsv = np.asarray(hsv, dtype=np.float64)
    h = hsv[..., 0:1]
    s = hsv[..., 1:2]
    v = hsv[..., 2:3]
    p = np.abs(np.mod(h + _HUE_OFFSETS, 1.0) * 6.0 - 3.0)
    k = np.clip(p - 1.0, 0.0, 1.0)
    return v * ((1.0 - s) + k * s)


def _gradient(t, colors: ColorParameters) -> np.ndarray:
    t = np.asarray(t, dtype=np.float64)[..., np.newaxis]
    start = np.asarray(colors.start_color, dtype=np.float64)
    end = np.asarray(colors.end_color, dtype=np.float64)
    rgb = hsv_to_rgb(start * (1.0 - t) + end * t)
    alpha = np.ones(rgb.shape[:-1] + (1,), dtype=np.float64)
    return np.concatenate((rgb, alpha), axis=-1)


def get_color(t: float, colors: ColorParameters) -> OutputColor:
    """Interpolate the endpoints in HSV by ``t`` and return an opaque RGBA color."""

    r, g, b, a = _gradient(t, colors)
    return float(r), float(g), float(b), float(a)


def escape_fraction(iteration: int, cycles: int) -> float:
    return iteration / cycles


def interior_angle(final_iterate: ComplexPoint) -> float:
    """Angle of the final iterate normalized into [0, 1]."""

    return math.atan2(final_iterate.y, final_iterate.x) / (2.0 * math.pi) + 0.5


class GrayscaleMapper:
    """Escape fraction as a gray level; bounded points are black."""

    mode = ColorMode.GRAYSCALE

    def __call__(self, result: EscapeResult, cycles: int) -> OutputColor:
        if isinstance(result, Escaped):
            t = escape_fraction(result.iteration, cycles)
            return t, t, t, 1.0
        if isinstance(result, Bounded):
            return 0.0, 0.0, 0.0, 1.0
        raise TypeError(f"expected an escape result, got {type(result).__name__}")

    def map_grid(self, grid: GridResult, cycles: int) -> np.ndarray:
        t = np.where(grid.escaped, grid.iterations / cycles, 0.0)
        rgba = np.empty(t.shape + (4,), dtype=np.float64)
        rgba[..., 0] = t
        rgba[..., 1] = t
        rgba[..., 2] = t
        rgba[..., 3] = 1.0
        return rgba


class GradientMapper:
    """HSV gradient by escape fraction, and by final-iterate angle inside the set."""

    mode = ColorMode.GRADIENT

    def __init__(self, colors: Optional[ColorParameters] = None):
        self.colors = colors if colors is not None else ColorParameters()

    def __call__(self, result: EscapeResult, cycles: int) -> OutputColor:
        if isinstance(result, Escaped):
            return get_color(escape_fraction(result.iteration, cycles), self.colors)
        if isinstance(result, Bounded):
            return get_color(interior_angle(result.final_iterate), self.colors)
        raise TypeError(f"expected an escape result, got {type(result).__name__}")

    def map_grid(self, grid: GridResult, cycles: int) -> np.ndarray:
        angle = np.arctan2(grid.final_y, grid.final_x) / (2.0 * np.pi) + 0.5
        t = np.where(grid.escaped, grid.iterations / cycles, angle)
        return _gradient(t, self.colors)


ColorMapper = Union[GrayscaleMapper, GradientMapper]


def color_mapper(mode: Union[ColorMode, str], colors: Optional[ColorParameters] = None) -> ColorMapper:
    """Select the coloring policy for a frame."""

    try:
        mode = ColorMode(mode)
    except ValueError as exc:
        valid = ", ".join(m.value for m in ColorMode)
        raise InvalidConfiguration(f"Unknown color mode {mode!r}. Valid choices: {valid}.") from exc

    if mode is ColorMode.GRAYSCALE:
        return GrayscaleMapper()
    return GradientMapper(colors)


def parse_color(text: str) -> HSV:
    """Parse ``"h,s,v"`` or any matplotlib color (``"#ff8800"``, ``"tab:blue"``) into HSV."""

    parts = [part.strip() for part in text.split(",")]
    if len(parts) == 3:
        try:
            h, s, v = (float(part) for part in parts)
        except ValueError as exc:
            raise InvalidConfiguration(f"Invalid HSV triple '{text}'.") from exc
        _check_hsv("color", (h, s, v))
        return h, s, v

    try:
        rgb = mcolors.to_rgb(text)
    except ValueError as exc:
        raise InvalidConfiguration(f"Invalid color '{text}'.") from exc
    h, s, v = mcolors.rgb_to_hsv(np.array(rgb, dtype=np.float64))
    return float(h), float(s), float(v)
