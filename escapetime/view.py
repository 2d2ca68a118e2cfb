"""Mapping from framebuffer pixels to points in the complex plane.

Pixel coordinates use a top-left origin with ``y`` growing downward, the
convention of image buffers and window systems. The parameter space has
``y`` growing upward, so the vertical axis is inverted during the mapping.
Pan (``center``) is applied before dividing by ``zoom``, so it is expressed
in un-zoomed units: the buffer center shows ``center / zoom``.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import InvalidConfiguration

Vec2 = tuple[float, float]

# Iteration counters run as int32 tensors on the frame path.
MAX_CYCLES = int(np.iinfo(np.int32).max)


@dataclass(frozen=True)
class ComplexPoint:
    """A point of the complex plane, used both as ``c`` and as the iterate ``z``."""

    x: float
    y: float

    def __complex__(self) -> complex:
        return complex(self.x, self.y)


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _check_pair(name: str, value) -> None:
    try:
        pair = len(value) == 2
    except TypeError:
        pair = False
    if not pair or not all(_is_real(component) for component in value):
        raise InvalidConfiguration(f"{name} must be a pair of numbers, got {value!r}.")


def check_cycles(cycles: int) -> None:
    """Reject iteration budgets that are not integers in [1, MAX_CYCLES]."""

    if isinstance(cycles, bool) or not isinstance(cycles, (int, np.integer)):
        raise InvalidConfiguration(f"cycles must be an integer, got {cycles!r}.")
    if cycles < 1:
        raise InvalidConfiguration(f"cycles must be at least 1, got {cycles}.")
    if cycles > MAX_CYCLES:
        raise InvalidConfiguration(f"cycles must be at most {MAX_CYCLES}, got {cycles}.")


@dataclass(frozen=True)
class ViewParameters:
    """Per-frame view of the fractal, immutable while a frame is evaluated."""

    resolution: Vec2
    center: Vec2 = (0.0, 0.0)
    zoom: float = 0.2
    window_offset: Vec2 = (0.0, 0.0)
    cycles: int = 100
    julia_constant: Optional[Vec2] = None

    def __post_init__(self) -> None:
        for name in ("resolution", "center", "window_offset"):
            _check_pair(name, getattr(self, name))
        if self.julia_constant is not None:
            _check_pair("julia_constant", self.julia_constant)

        if not _is_real(self.zoom):
            raise InvalidConfiguration(f"zoom must be a number, got {self.zoom!r}.")
        if not np.isfinite(self.zoom) or self.zoom <= 0:
            raise InvalidConfiguration(f"zoom must be a positive finite number, got {self.zoom!r}.")

        res_x, res_y = self.resolution
        if not (np.isfinite(res_x) and np.isfinite(res_y)) or res_x <= 0 or res_y <= 0:
            raise InvalidConfiguration(f"resolution must be positive in both axes, got {self.resolution!r}.")

        check_cycles(self.cycles)

    @property
    def aspect(self) -> float:
        """Height over width of the render target."""

        return float(self.resolution[1]) / float(self.resolution[0])

    @property
    def frame_size(self) -> tuple[int, int]:
        """Integer ``(width, height)`` of the pixel buffer covering ``resolution``."""

        width = int(self.resolution[0])
        height = int(self.resolution[1])
        if width < 1 or height < 1:
            raise InvalidConfiguration(f"resolution {self.resolution!r} does not cover a single pixel.")
        return width, height


def screen_uv(pixel: Vec2, view: ViewParameters) -> tuple[float, float]:
    """Centered screen coordinate of ``pixel``, nominally in [-0.5, 0.5], y up."""

    u = (float(pixel[0]) - view.window_offset[0]) / view.resolution[0] - 0.5
    v = (float(pixel[1]) - view.window_offset[1]) / view.resolution[1] - 0.5
    return u, -v


def map_pixel(pixel: Vec2, view: ViewParameters) -> ComplexPoint:
    """Map a framebuffer pixel to the complex plane."""

    u, v = screen_uv(pixel, view)
    x = (u + view.center[0]) / view.zoom
    y = (v + view.center[1]) / view.zoom
    return ComplexPoint(x, y * view.aspect)


def _canvas_axes(view: ViewParameters, rows: Optional[tuple[int, int]]) -> tuple[np.ndarray, np.ndarray]:
    width, height = view.frame_size
    row_start, row_end = rows if rows is not None else (0, height)
    if not 0 <= row_start <= row_end <= height:
        raise InvalidConfiguration(f"row band {rows!r} lies outside a frame of height {height}.")

    px = np.arange(width, dtype=np.float64) + np.float64(view.window_offset[0])
    py = np.arange(row_start, row_end, dtype=np.float64) + np.float64(view.window_offset[1])
    return px, py


def map_grid(view: ViewParameters, rows: Optional[tuple[int, int]] = None) -> tuple[np.ndarray, np.ndarray]:
    """Map every pixel of the frame (or a half-open band of rows) at once.

    Returns ``(xs, ys)`` arrays of shape ``(rows, width)``. Element values are
    identical to calling :func:`map_pixel` on ``window_offset + (col, row)``.
    """

    off_x = np.float64(view.window_offset[0])
    off_y = np.float64(view.window_offset[1])
    px, py = _canvas_axes(view, rows)

    u = (px - off_x) / np.float64(view.resolution[0]) - 0.5
    v = -((py - off_y) / np.float64(view.resolution[1]) - 0.5)

    xs = (u + np.float64(view.center[0])) / np.float64(view.zoom)
    ys = (v + np.float64(view.center[1])) / np.float64(view.zoom) * np.float64(view.aspect)
    return np.meshgrid(xs, ys)


def canvas_pixels(view: ViewParameters, rows: Optional[tuple[int, int]] = None) -> tuple[np.ndarray, np.ndarray]:
    """Canvas coordinates ``window_offset + (col, row)`` of the pixels :func:`map_grid` maps."""

    return np.meshgrid(*_canvas_axes(view, rows))
