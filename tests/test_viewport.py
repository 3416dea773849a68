import logging
import math
from dataclasses import replace

import numpy as np
import pytest

from mandelview import viewport
from mandelview.errors import PaletteError, ViewportError
from mandelview.palette import ColorScheme
from mandelview.viewport import ViewportConfig


def test_default_config():
    cfg = viewport.default_config()
    assert cfg.center == complex(-0.5, 0.0)
    assert cfg.zoom == 1.0
    assert cfg.max_iterations == 100
    assert cfg.color_scheme is ColorScheme.NEON
    assert viewport.reset() == cfg


def test_centre_pixel_maps_to_centre():
    cfg = ViewportConfig(center_re=0.25, center_im=-0.125, zoom=3.0)
    assert viewport.map_pixel_to_plane(50, 40, 100, 80, cfg) == complex(0.25, -0.125)


def test_top_left_pixel_of_wide_surface():
    cfg = viewport.default_config()
    c = viewport.map_pixel_to_plane(0, 0, 200, 100, cfg)
    # vertical span 3.0, horizontal span 6.0 for a 2:1 surface
    assert c.real == pytest.approx(-3.5)
    assert c.imag == pytest.approx(-1.5)


def test_mapping_is_scaled_by_zoom():
    cfg = ViewportConfig(center_re=0.0, center_im=0.0, zoom=10.0)
    c = viewport.map_pixel_to_plane(0, 0, 100, 100, cfg)
    assert c.real == pytest.approx(-0.15)
    assert c.imag == pytest.approx(-0.15)


def test_pixels_are_square():
    re_axis, im_axis = viewport.plane_axes(300, 100, viewport.default_config())
    assert re_axis[1] - re_axis[0] == pytest.approx(im_axis[1] - im_axis[0])
    assert re_axis[-1] - re_axis[0] == pytest.approx(3.0 * (299 / 300) * 3)


def test_plane_axes_agree_with_pointwise_mapping():
    cfg = ViewportConfig(center_re=-0.743, center_im=0.131, zoom=37.5)
    re_axis, im_axis = viewport.plane_axes(64, 48, cfg)
    for px, py in [(0, 0), (13, 7), (32, 24), (63, 47)]:
        c = viewport.map_pixel_to_plane(px, py, 64, 48, cfg)
        assert re_axis[px] == c.real
        assert im_axis[py] == c.imag


def test_mapping_rejects_zero_area():
    with pytest.raises(ViewportError):
        viewport.map_pixel_to_plane(0, 0, 0, 10, viewport.default_config())


@pytest.mark.parametrize("n", [1, 5, 20])
def test_repeated_zoom_in_is_geometric(n):
    cfg = viewport.default_config()
    for _ in range(n):
        cfg = viewport.apply_zoom(cfg, 1)
    assert cfg.zoom == pytest.approx(1.1 ** n)
    assert cfg.center == viewport.default_config().center


def test_zoom_in_then_out_round_trips():
    cfg = ViewportConfig(zoom=2.5)
    for _ in range(7):
        cfg = viewport.apply_zoom(cfg, 1)
    for _ in range(7):
        cfg = viewport.apply_zoom(cfg, -1)
    assert cfg.zoom == pytest.approx(2.5)


def test_zero_wheel_sign_is_noop():
    cfg = viewport.default_config()
    assert viewport.apply_zoom(cfg, 0) is cfg


def test_bad_zoom_factor_rejected():
    with pytest.raises(ViewportError):
        viewport.apply_zoom(viewport.default_config(), 1, factor=0.0)


def test_zoom_buttons_use_larger_step():
    cfg = viewport.zoom_in(viewport.default_config())
    assert cfg.zoom == pytest.approx(1.5)
    assert viewport.zoom_out(cfg).zoom == pytest.approx(1.0)


def test_zoom_is_clamped():
    tiny = ViewportConfig(zoom=2e-6)
    for _ in range(20):
        tiny = viewport.apply_zoom(tiny, -1)
    assert tiny.zoom == viewport.MIN_ZOOM


def test_zoom_above_precision_limit_is_clamped_with_warning(caplog):
    caplog.set_level(logging.WARNING, logger="mandelview")
    cfg = viewport.validate_config(ViewportConfig(zoom=1e15))
    assert cfg.zoom == viewport.MAX_ZOOM
    assert "double precision" in caplog.text


def test_pan_moves_against_drag():
    cfg = viewport.default_config()
    moved = viewport.apply_pan(cfg, 10, 0, 200, 100)
    # 10 px of a 100 px tall, 3.0-unit view is 0.3 units
    assert moved.center_re == pytest.approx(-0.8)
    assert moved.center_im == pytest.approx(0.0)
    moved = viewport.apply_pan(cfg, 0, -20, 200, 100)
    assert moved.center_im == pytest.approx(0.6)


@pytest.mark.parametrize("dx,dy,w,h,zoom", [
    (13, -7, 200, 100, 1.0),
    (-250, 400, 640, 480, 123.0),
    (0.5, 0.25, 37, 91, 1e6),
])
def test_pan_round_trip(dx, dy, w, h, zoom):
    cfg = ViewportConfig(center_re=-0.7436, center_im=0.1318, zoom=zoom)
    back = viewport.apply_pan(viewport.apply_pan(cfg, dx, dy, w, h), -dx, -dy, w, h)
    assert back.center_re == pytest.approx(cfg.center_re, abs=1e-12)
    assert back.center_im == pytest.approx(cfg.center_im, abs=1e-12)


def test_pan_on_degenerate_surface_is_noop():
    cfg = viewport.default_config()
    assert viewport.apply_pan(cfg, 10, 10, 0, 100) is cfg


@pytest.mark.parametrize("bad", [
    ViewportConfig(center_re=float("nan")),
    ViewportConfig(center_im=float("inf")),
    ViewportConfig(zoom=0.0),
    ViewportConfig(zoom=-2.0),
    ViewportConfig(zoom=float("nan")),
    ViewportConfig(max_iterations=0),
    ViewportConfig(max_iterations=-5),
])
def test_invalid_values_rejected(bad):
    with pytest.raises(ViewportError):
        viewport.validate_config(bad)


@pytest.mark.parametrize("value,expected", [(257, 260), (100, 100), (7, 50), (9999, 500), (52, 50)])
def test_iteration_slider_snaps_and_clamps(value, expected):
    cfg = viewport.with_max_iterations(viewport.default_config(), value)
    assert cfg.max_iterations == expected


def test_color_scheme_by_name():
    cfg = viewport.with_color_scheme(viewport.default_config(), "ICE")
    assert cfg.color_scheme is ColorScheme.ICE
    with pytest.raises(PaletteError):
        viewport.with_color_scheme(cfg, "purple")


def test_config_is_immutable_and_hashable():
    cfg = viewport.default_config()
    with pytest.raises(Exception):
        cfg.zoom = 2.0
    assert hash(cfg) == hash(replace(cfg))
    assert math.isfinite(viewport.plane_scale(cfg))
    assert isinstance(viewport.plane_axes(4, 4, cfg)[0], np.ndarray)
