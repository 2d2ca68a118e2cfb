"""Pan, zoom and zoom-sequence planning for a fractal view."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional, Union

import numpy as np

from .errors import InvalidConfiguration
from .view import ViewParameters, Vec2, screen_uv

EASINGS = ("linear", "ease")


def pan(view: ViewParameters, drag: Vec2) -> ViewParameters:
    """Move the view so the image follows a pointer dragged by ``drag`` pixels."""

    dx, dy = drag
    center_x = view.center[0] - float(dx) / view.resolution[0]
    center_y = view.center[1] + float(dy) / view.resolution[1]
    return replace(view, center=(center_x, center_y))


def zoom_at(view: ViewParameters, pixel: Vec2, factor: float) -> ViewParameters:
    """Multiply the magnification by ``factor`` keeping the point under ``pixel`` in place."""

    if not np.isfinite(factor) or factor <= 0:
        raise InvalidConfiguration(f"zoom factor must be a positive finite number, got {factor!r}.")

    u, v = screen_uv(pixel, view)
    center_x = view.center[0] + (u + view.center[0]) * (factor - 1.0)
    center_y = view.center[1] + (v + view.center[1]) * (factor - 1.0)
    return replace(view, center=(center_x, center_y), zoom=view.zoom * factor)


def parse_aspect(ratio: Union[str, float]) -> float:
    """Width over height from ``"16:9"`` style presets or a plain number."""

    if isinstance(ratio, str):
        text = ratio.strip()
        try:
            if ":" in text:
                width, height = (float(part) for part in text.split(":", 1))
                value = width / height
            else:
                value = float(text)
        except (ValueError, ZeroDivisionError) as exc:
            raise InvalidConfiguration(f"Invalid aspect ratio '{ratio}'.") from exc
    else:
        value = float(ratio)

    if not np.isfinite(value) or value <= 0:
        raise InvalidConfiguration(f"aspect ratio must be positive, got {ratio!r}.")
    return value


def fit_aspect(width: int, ratio: Union[str, float]) -> int:
    """Height of a render target of ``width`` pixels locked to ``ratio``."""

    return max(1, int(round(width / parse_aspect(ratio))))


def compute_zoom_factors(frames: int, zoom_factor: float, *, final_zoom: Optional[float], easing: str) -> np.ndarray:
    """Compute per-frame magnification multipliers for a zoom animation.

    The first factor is always 1 so the sequence starts at the given view.
    With ``final_zoom`` the cumulative magnification follows the easing curve
    in log space and reaches ``final_zoom`` on the last frame.
    """

    if frames <= 0:
        return np.array([], dtype=np.float64)

    if final_zoom is not None:
        if not np.isfinite(final_zoom) or final_zoom <= 0:
            raise InvalidConfiguration(f"final_zoom must be positive, got {final_zoom!r}.")
        easing_mode = easing.lower()
        if easing_mode not in EASINGS:
            raise InvalidConfiguration(f"Unknown easing '{easing}'. Valid choices: {', '.join(EASINGS)}.")

        def ease_in_out(t: float) -> float:
            return 3 * t ** 2 - 2 * t ** 3

        ease = (lambda u: u) if easing_mode == "linear" else ease_in_out
        if frames == 1:
            alphas = np.array([1.0], dtype=np.float64)
        else:
            alphas = np.array([ease(i / (frames - 1)) for i in range(frames)], dtype=np.float64)
        alphas = np.clip(alphas, 0.0, 1.0)
        increments = np.diff(np.concatenate(([0.0], alphas)))
        return np.exp(increments * np.log(final_zoom))

    if not np.isfinite(zoom_factor) or zoom_factor <= 0:
        raise InvalidConfiguration(f"zoom_factor must be positive, got {zoom_factor!r}.")
    factors = np.full(frames, np.float64(zoom_factor), dtype=np.float64)
    factors[0] = 1.0
    return factors


@dataclass(frozen=True)
class ZoomPlanner:
    """Produce the views of a zoom sequence toward a fixed focus pixel."""

    focus: Optional[Vec2] = None

    def focus_pixel(self, view: ViewParameters) -> Vec2:
        if self.focus is not None:
            return self.focus
        return (
            view.window_offset[0] + view.resolution[0] / 2.0,
            view.window_offset[1] + view.resolution[1] / 2.0,
        )

    def views(self, view: ViewParameters, factors: Iterable[float]) -> Iterator[ViewParameters]:
        """Yield one view per factor, each zoomed from the previous one."""

        focus = self.focus_pixel(view)
        for factor in factors:
            view = zoom_at(view, focus, float(factor))
            yield view
