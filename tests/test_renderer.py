import numpy as np
import pytest

from escapetime import (
    Bounded,
    ColorParameters,
    ComplexPoint,
    Escaped,
    InvalidConfiguration,
    ViewParameters,
    evaluate,
    get_color,
    map_pixel,
    render_frame,
    render_pixel,
    to_uint8,
)
from escapetime.renderer import row_bands
from escapetime.view import canvas_pixels

COLORS = ColorParameters(start_color=(0.05, 0.8, 1.0), end_color=(0.6, 1.0, 0.5))


def reference(c, cycles):
    x, y = c.x, c.y
    for i in range(cycles):
        nx = x * x - y * y + c.x
        ny = 2.0 * x * y + c.y
        if nx * nx + ny * ny > 4.0:
            return Escaped(i)
        x, y = nx, ny
    return Bounded(ComplexPoint(x, y))


def test_end_to_end_small_view():
    view = ViewParameters(resolution=(4, 4), center=(0.0, 0.0), zoom=1.0, cycles=50)

    center = map_pixel((2, 2), view)
    assert center == ComplexPoint(0.0, 0.0)
    assert evaluate(center, view.cycles) == Bounded(ComplexPoint(0.0, 0.0))
    assert render_pixel((2, 2), view) == (0.0, 0.0, 0.0, 1.0)

    corner = map_pixel((0, 0), view)
    assert abs(complex(corner)) == pytest.approx(np.sqrt(0.5))
    assert evaluate(corner, view.cycles) == reference(corner, view.cycles)


def test_corner_escapes_when_zoomed_out():
    view = ViewParameters(resolution=(4, 4), zoom=0.25, cycles=50)
    assert map_pixel((0, 0), view) == ComplexPoint(-2.0, 2.0)
    assert evaluate(map_pixel((0, 0), view), view.cycles) == Escaped(0)
    assert render_pixel((0, 0), view, COLORS) == get_color(0.0, COLORS)


def test_mode_defaults_follow_colors():
    view = ViewParameters(resolution=(4, 4), zoom=1.0, cycles=50)
    gray = render_pixel((2, 2), view)
    colored = render_pixel((2, 2), view, COLORS)
    assert gray == (0.0, 0.0, 0.0, 1.0)
    assert colored == get_color(0.5, COLORS)
    assert render_pixel((2, 2), view, COLORS, mode="grayscale") == gray


@pytest.mark.parametrize("mode", ["grayscale", "gradient"])
def test_frame_matches_per_pixel_rendering(mode):
    view = ViewParameters(resolution=(8, 6), center=(-0.15, 0.05), zoom=0.35, window_offset=(5, 9), cycles=30)
    result = render_frame(view, COLORS, mode)
    px, py = canvas_pixels(view)

    assert result.rgba.shape == (6, 8, 4)
    assert result.view is view
    for row in range(6):
        for col in range(8):
            expected = render_pixel((px[row, col], py[row, col]), view, COLORS, mode)
            np.testing.assert_allclose(result.rgba[row, col], expected, atol=1e-12)


def test_frame_is_opaque_and_in_range():
    view = ViewParameters(resolution=(16, 12), zoom=0.3, cycles=64)
    rgba = render_frame(view, COLORS).rgba
    assert (rgba[..., 3] == 1.0).all()
    assert rgba.min() >= 0.0
    assert rgba.max() <= 1.0


def test_tiled_frame_equals_single_pass():
    view = ViewParameters(resolution=(10, 11), center=(-0.5, 0.0), zoom=0.3, cycles=40)
    whole = render_frame(view, COLORS)
    tiled = render_frame(view, COLORS, tile_rows=3, workers=4)
    np.testing.assert_array_equal(whole.rgba, tiled.rgba)
    np.testing.assert_array_equal(whole.iterations, tiled.iterations)
    np.testing.assert_array_equal(whole.escaped, tiled.escaped)


def test_integer_window_offset_does_not_change_the_frame():
    base = ViewParameters(resolution=(9, 7), zoom=0.4, cycles=25)
    shifted = ViewParameters(resolution=(9, 7), zoom=0.4, cycles=25, window_offset=(37, 11))
    np.testing.assert_array_equal(render_frame(base).rgba, render_frame(shifted).rgba)


def test_julia_frame():
    view = ViewParameters(resolution=(6, 6), zoom=0.4, cycles=60, julia_constant=(-0.8, 0.156))
    result = render_frame(view, mode="grayscale")
    px, py = canvas_pixels(view)
    for row in range(6):
        for col in range(6):
            outcome = evaluate(map_pixel((px[row, col], py[row, col]), view), 60, (-0.8, 0.156))
            assert result.escaped[row, col] == isinstance(outcome, Escaped)


def test_row_bands():
    assert row_bands(10, None) == [(0, 10)]
    assert row_bands(10, 4) == [(0, 4), (4, 8), (8, 10)]
    assert row_bands(3, 8) == [(0, 3)]
    with pytest.raises(InvalidConfiguration):
        row_bands(10, 0)


def test_invalid_render_settings():
    view = ViewParameters(resolution=(4, 4))
    with pytest.raises(InvalidConfiguration):
        render_frame(view, tile_rows=2, workers=0)
    with pytest.raises(InvalidConfiguration):
        render_frame(view, mode="sepia")


def test_to_uint8():
    rgba = np.array([[[0.0, 0.5, 1.0, 1.0]]])
    np.testing.assert_array_equal(to_uint8(rgba), [[[0, 128, 255, 255]]])
    assert to_uint8(rgba).dtype == np.uint8


def test_frame_and_pixel_share_the_budget_limit():
    # budgets beyond the int32 frame counters are rejected before any pixel is evaluated
    with pytest.raises(InvalidConfiguration):
        render_frame(ViewParameters(resolution=(2, 2), cycles=2 ** 32 + 5))
