import numpy as np
import pytest

from escapetime import InvalidConfiguration, ViewParameters, ZoomPlanner, compute_zoom_factors, fit_aspect, map_pixel, pan, zoom_at
from escapetime.navigation import parse_aspect

VIEW = ViewParameters(resolution=(320, 200), center=(-0.1, 0.05), zoom=0.5, window_offset=(12, 4), cycles=80)


def assert_same_point(a, b):
    assert a.x == pytest.approx(b.x, abs=1e-12)
    assert a.y == pytest.approx(b.y, abs=1e-12)


def test_pan_moves_image_with_pointer():
    drag = (25.0, -13.0)
    panned = pan(VIEW, drag)
    for pixel in [(12.0, 4.0), (100.0, 150.0), (300.0, 20.0)]:
        moved = (pixel[0] + drag[0], pixel[1] + drag[1])
        assert_same_point(map_pixel(pixel, VIEW), map_pixel(moved, panned))
    assert panned.zoom == VIEW.zoom


def test_pan_offsets_center_in_unzoomed_units():
    view = ViewParameters(resolution=(100, 100))
    assert pan(view, (10, 0)).center == pytest.approx((-0.1, 0.0))
    assert pan(view, (0, 10)).center == pytest.approx((0.0, 0.1))


@pytest.mark.parametrize("factor", [0.5, 1.1, 3.0, 100.0])
@pytest.mark.parametrize("pixel", [(12.0, 4.0), (172.0, 104.0), (50.5, 190.25)])
def test_zoom_keeps_point_under_pixel(factor, pixel):
    zoomed = zoom_at(VIEW, pixel, factor)
    assert zoomed.zoom == pytest.approx(VIEW.zoom * factor)
    assert_same_point(map_pixel(pixel, VIEW), map_pixel(pixel, zoomed))


def test_zoom_in_shrinks_the_visible_span():
    zoomed = zoom_at(VIEW, (172.0, 104.0), 4.0)
    span = map_pixel((332.0, 104.0), VIEW).x - map_pixel((12.0, 104.0), VIEW).x
    zoomed_span = map_pixel((332.0, 104.0), zoomed).x - map_pixel((12.0, 104.0), zoomed).x
    assert zoomed_span == pytest.approx(span / 4.0)


@pytest.mark.parametrize("factor", [0.0, -2.0, float("nan")])
def test_invalid_zoom_factor(factor):
    with pytest.raises(InvalidConfiguration):
        zoom_at(VIEW, (0, 0), factor)


def test_fit_aspect():
    assert fit_aspect(1920, "16:9") == 1080
    assert fit_aspect(800, "4:3") == 600
    assert fit_aspect(300, 1.5) == 200
    assert fit_aspect(1, "16:9") == 1
    assert parse_aspect("2") == 2.0


@pytest.mark.parametrize("ratio", ["abc", "16:0", "-4:3", 0.0])
def test_invalid_aspect(ratio):
    with pytest.raises(InvalidConfiguration):
        parse_aspect(ratio)


def test_constant_zoom_factors_start_at_the_given_view():
    np.testing.assert_allclose(compute_zoom_factors(4, 1.5, final_zoom=None, easing="ease"), [1.0, 1.5, 1.5, 1.5])
    assert compute_zoom_factors(0, 1.5, final_zoom=None, easing="ease").size == 0


@pytest.mark.parametrize("easing", ["linear", "ease"])
def test_final_zoom_is_reached(easing):
    factors = compute_zoom_factors(6, 1.5, final_zoom=1e4, easing=easing)
    assert factors[0] == pytest.approx(1.0)
    assert np.prod(factors) == pytest.approx(1e4)
    assert (factors >= 1.0).all()


def test_linear_final_zoom_is_geometric():
    factors = compute_zoom_factors(5, 1.0, final_zoom=16.0, easing="linear")
    np.testing.assert_allclose(factors, [1.0, 2.0, 2.0, 2.0, 2.0])


def test_single_frame_final_zoom():
    np.testing.assert_allclose(compute_zoom_factors(1, 1.0, final_zoom=8.0, easing="ease"), [8.0])


@pytest.mark.parametrize(
    "kwargs",
    [
        {"zoom_factor": 0.0, "final_zoom": None, "easing": "ease"},
        {"zoom_factor": 1.2, "final_zoom": -3.0, "easing": "ease"},
        {"zoom_factor": 1.2, "final_zoom": 10.0, "easing": "bounce"},
    ],
)
def test_invalid_zoom_plans(kwargs):
    with pytest.raises(InvalidConfiguration):
        compute_zoom_factors(3, **kwargs)


def test_planner_zooms_toward_focus():
    planner = ZoomPlanner(focus=(60.0, 30.0))
    factors = compute_zoom_factors(4, 2.0, final_zoom=None, easing="ease")
    views = list(planner.views(VIEW, factors))
    assert len(views) == 4
    assert views[0] == VIEW
    assert [v.zoom for v in views] == pytest.approx([0.5, 1.0, 2.0, 4.0])
    anchor = map_pixel((60.0, 30.0), VIEW)
    for view in views:
        assert_same_point(map_pixel((60.0, 30.0), view), anchor)


def test_planner_defaults_to_buffer_center():
    planner = ZoomPlanner()
    assert planner.focus_pixel(VIEW) == (172.0, 104.0)
    last = list(planner.views(VIEW, [1.0, 3.0]))[-1]
    assert_same_point(map_pixel((172.0, 104.0), last), map_pixel((172.0, 104.0), VIEW))
