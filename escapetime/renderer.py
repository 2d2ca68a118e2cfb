"""Per-pixel and whole-frame rendering entry points."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .color import ColorMapper, ColorMode, ColorParameters, OutputColor, color_mapper
from .errors import InvalidConfiguration
from .evaluator import evaluate, evaluate_grid
from .view import ViewParameters, Vec2, map_grid, map_pixel


@dataclass(frozen=True)
class RenderResult:
    """Container for a rendered frame."""

    rgba: np.ndarray
    iterations: np.ndarray
    escaped: np.ndarray
    view: ViewParameters


def _select_mapper(colors: Optional[ColorParameters], mode: Union[ColorMode, str, None]) -> ColorMapper:
    if mode is None:
        mode = ColorMode.GRADIENT if colors is not None else ColorMode.GRAYSCALE
    return color_mapper(mode, colors)


def render_pixel(
    pixel: Vec2,
    view: ViewParameters,
    colors: Optional[ColorParameters] = None,
    mode: Union[ColorMode, str, None] = None,
) -> OutputColor:
    """Color of a single framebuffer pixel.

    ``mode`` defaults to the gradient policy when ``colors`` is given and to
    grayscale otherwise.
    """

    mapper = _select_mapper(colors, mode)
    point = map_pixel(pixel, view)
    result = evaluate(point, view.cycles, view.julia_constant)
    return mapper(result, view.cycles)


def row_bands(height: int, tile_rows: Optional[int]) -> list[tuple[int, int]]:
    """Split ``height`` rows into half-open bands of at most ``tile_rows`` rows."""

    if tile_rows is None:
        return [(0, height)]
    if tile_rows < 1:
        raise InvalidConfiguration(f"tile_rows must be at least 1, got {tile_rows}.")
    return [(start, min(start + tile_rows, height)) for start in range(0, height, tile_rows)]


def render_frame(
    view: ViewParameters,
    colors: Optional[ColorParameters] = None,
    mode: Union[ColorMode, str, None] = None,
    *,
    device: Optional[str] = None,
    tile_rows: Optional[int] = None,
    workers: Optional[int] = None,
) -> RenderResult:
    """Render every pixel of ``view``, optionally as concurrent row bands.

    Each band writes only its own rows of the output buffers.
    """

    mapper = _select_mapper(colors, mode)
    width, height = view.frame_size
    bands = row_bands(height, tile_rows)
    if workers is not None and workers < 1:
        raise InvalidConfiguration(f"workers must be at least 1, got {workers}.")

    rgba = np.empty((height, width, 4), dtype=np.float64)
    iterations = np.empty((height, width), dtype=np.int32)
    escaped = np.empty((height, width), dtype=bool)

    def render_band(band: tuple[int, int]) -> None:
        start, stop = band
        xs, ys = map_grid(view, band)
        grid = evaluate_grid(xs, ys, view.cycles, view.julia_constant, device=device)
        rgba[start:stop] = mapper.map_grid(grid, view.cycles)
        iterations[start:stop] = grid.iterations
        escaped[start:stop] = grid.escaped

    if len(bands) == 1:
        render_band(bands[0])
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(render_band, band) for band in bands]
            for future in as_completed(futures):
                future.result()

    return RenderResult(rgba=rgba, iterations=iterations, escaped=escaped, view=view)


def to_uint8(rgba: np.ndarray) -> np.ndarray:
    """Quantize float channels in [0, 1] to 8-bit."""

    return np.uint8(np.clip(np.rint(rgba * 255), 0, 255))
