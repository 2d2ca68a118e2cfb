"""Public API for escape-time fractal rendering."""

from .errors import InvalidConfiguration
from .view import ComplexPoint, ViewParameters, map_grid, map_pixel, screen_uv
from .evaluator import Bounded, Escaped, EscapeResult, GridResult, evaluate, evaluate_grid
from .color import (
    ColorMode,
    ColorParameters,
    GradientMapper,
    GrayscaleMapper,
    color_mapper,
    get_color,
    hsv_to_rgb,
    interior_angle,
    parse_color,
)
from .renderer import RenderResult, render_frame, render_pixel, to_uint8
from .navigation import ZoomPlanner, compute_zoom_factors, fit_aspect, pan, zoom_at

__all__ = [
    "Bounded",
    "ColorMode",
    "ColorParameters",
    "ComplexPoint",
    "EscapeResult",
    "Escaped",
    "GradientMapper",
    "GrayscaleMapper",
    "GridResult",
    "InvalidConfiguration",
    "RenderResult",
    "ViewParameters",
    "ZoomPlanner",
    "color_mapper",
    "compute_zoom_factors",
    "evaluate",
    "evaluate_grid",
    "fit_aspect",
    "get_color",
    "hsv_to_rgb",
    "interior_angle",
    "map_grid",
    "map_pixel",
    "pan",
    "parse_color",
    "render_frame",
    "render_pixel",
    "screen_uv",
    "to_uint8",
    "zoom_at",
]
