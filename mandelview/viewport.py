from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Tuple, Union

import numpy as np

from mandelview.errors import ViewportError
from mandelview.palette import ColorScheme
from mandelview.util.logging_setup import get_logger

# Plane units spanned by the vertical axis at zoom 1.
BASE_SPAN = 3.0

MIN_ZOOM = 1e-6
# Beyond this the pixel step drops under double-precision resolution and
# escape times stop meaning anything. Known limitation, not worked around.
MAX_ZOOM = 1e12

WHEEL_ZOOM_FACTOR = 1.1
BUTTON_ZOOM_FACTOR = 1.5

MIN_ITERATIONS = 50
MAX_ITERATIONS = 500
ITERATION_STEP = 10

@dataclass(frozen=True)
class ViewportConfig:
    """Region of the complex plane on screen plus the render parameters."""

    center_re: float = -0.5
    center_im: float = 0.0
    zoom: float = 1.0
    max_iterations: int = 100
    color_scheme: ColorScheme = ColorScheme.NEON

    @property
    def center(self) -> complex:
        return complex(self.center_re, self.center_im)

def default_config() -> ViewportConfig:
    return ViewportConfig()

def reset() -> ViewportConfig:
    return default_config()

def validate_config(config: ViewportConfig) -> ViewportConfig:
    """
    Reject values that would poison the iteration kernel and clamp zoom into
    the usable range. Returns a config that is safe to hand to the renderer.
    """
    re, im, zoom = float(config.center_re), float(config.center_im), float(config.zoom)
    if not (math.isfinite(re) and math.isfinite(im)):
        raise ViewportError(f"center must be finite, got ({re}, {im})")
    if not math.isfinite(zoom) or zoom <= 0:
        raise ViewportError(f"zoom must be a positive finite number, got {zoom}")
    max_iterations = int(config.max_iterations)
    if max_iterations <= 0:
        raise ViewportError(f"max_iterations must be positive, got {max_iterations}")

    if zoom < MIN_ZOOM:
        zoom = MIN_ZOOM
    elif zoom > MAX_ZOOM:
        get_logger().warning("Zoom %s exceeds double precision limit, clamped to %s", zoom, MAX_ZOOM)
        zoom = MAX_ZOOM

    return ViewportConfig(
        center_re=re,
        center_im=im,
        zoom=zoom,
        max_iterations=max_iterations,
        color_scheme=ColorScheme.parse(config.color_scheme),
    )

def plane_scale(config: ViewportConfig) -> float:
    return BASE_SPAN / config.zoom

def _check_surface(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ViewportError(f"surface must have positive area, got {width}x{height}")

def map_pixel_to_plane(px: float, py: float, width: int, height: int, config: ViewportConfig) -> complex:
    """
    Affine pixel -> plane mapping. The vertical axis spans BASE_SPAN / zoom
    and the horizontal one is stretched by width / height so pixels stay
    square. Pixel (width / 2, height / 2) lands exactly on the centre.
    """
    _check_surface(width, height)
    scale = plane_scale(config)
    aspect = width / height
    x_min = config.center_re - scale * aspect / 2
    y_min = config.center_im - scale / 2
    x = x_min + (px / width) * scale * aspect
    y = y_min + (py / height) * scale
    return complex(x, y)

def plane_axes(width: int, height: int, config: ViewportConfig) -> Tuple[np.ndarray, np.ndarray]:
    # Same arithmetic as map_pixel_to_plane, vectorised per column and row.
    _check_surface(width, height)
    scale = plane_scale(config)
    aspect = width / height
    x_min = config.center_re - scale * aspect / 2
    y_min = config.center_im - scale / 2
    cols = np.arange(width, dtype=np.float64)
    rows = np.arange(height, dtype=np.float64)
    re_axis = x_min + (cols / width) * scale * aspect
    im_axis = y_min + (rows / height) * scale
    return re_axis, im_axis

def apply_zoom(config: ViewportConfig, wheel_delta_sign: float, factor: float = WHEEL_ZOOM_FACTOR) -> ViewportConfig:
    """
    Positive sign zooms in (multiply by factor), negative zooms out, zero
    leaves the view alone. Anchored on the current centre, not the cursor.
    """
    if not math.isfinite(factor) or factor <= 0:
        raise ViewportError(f"zoom factor must be positive, got {factor}")
    if wheel_delta_sign > 0:
        zoom = config.zoom * factor
    elif wheel_delta_sign < 0:
        zoom = config.zoom / factor
    else:
        return config
    return validate_config(replace(config, zoom=zoom))

def zoom_in(config: ViewportConfig) -> ViewportConfig:
    return apply_zoom(config, 1, BUTTON_ZOOM_FACTOR)

def zoom_out(config: ViewportConfig) -> ViewportConfig:
    return apply_zoom(config, -1, BUTTON_ZOOM_FACTOR)

def apply_pan(config: ViewportConfig, dx: float, dy: float, width: int, height: int) -> ViewportConfig:
    """
    Move the view by a pixel-space drag delta. The delta is subtracted, so
    dragging right moves the window left and the content follows the pointer.
    """
    if width <= 0 or height <= 0:
        return config
    scale = plane_scale(config)
    move_x = -(dx / width) * scale * (width / height)
    move_y = -(dy / height) * scale
    return validate_config(
        replace(config, center_re=config.center_re + move_x, center_im=config.center_im + move_y)
    )

def with_max_iterations(config: ViewportConfig, value: int) -> ViewportConfig:
    snapped = int(round(float(value) / ITERATION_STEP)) * ITERATION_STEP
    snapped = max(MIN_ITERATIONS, min(MAX_ITERATIONS, snapped))
    return replace(config, max_iterations=snapped)

def with_color_scheme(config: ViewportConfig, scheme: Union[str, ColorScheme]) -> ViewportConfig:
    return replace(config, color_scheme=ColorScheme.parse(scheme))
