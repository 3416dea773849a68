from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

import numpy as np
from numba import njit

from mandelview.buffer import PixelBuffer
from mandelview.palette import ColorScheme
from mandelview.util.logging_setup import get_logger
from mandelview.viewport import ViewportConfig, plane_axes

BAILOUT_SQUARED = 4.0

@njit(cache=True, nogil=True)
def _escape_band(re_axis, im_axis, max_iter, out):
    """
    Escape time for every (row, column) of the band. Squares are kept
    incrementally: x2 = x*x and y2 = y*y are refreshed after each step, so
    the bailout test x2 + y2 > 4 costs no extra multiplications.
    """
    rows = im_axis.shape[0]
    cols = re_axis.shape[0]
    for j in range(rows):
        ci = im_axis[j]
        for i in range(cols):
            cr = re_axis[i]
            x = 0.0
            y = 0.0
            x2 = 0.0
            y2 = 0.0
            n = 0
            while x2 + y2 <= BAILOUT_SQUARED and n < max_iter:
                y = 2.0 * x * y + ci
                x = x2 - y2 + cr
                x2 = x * x
                y2 = y * y
                n += 1
            out[j, i] = n

def escape_iterations(c: complex, max_iterations: int) -> int:
    """Escape time of a single point, same kernel as the full render."""
    out = np.zeros((1, 1), dtype=np.int32)
    _escape_band(
        np.array([c.real], dtype=np.float64),
        np.array([c.imag], dtype=np.float64),
        int(max_iterations),
        out,
    )
    return int(out[0, 0])

def _bands(height: int, band_height: int) -> List[Tuple[int, int]]:
    bands: List[Tuple[int, int]] = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands

def escape_counts(
    width: int,
    height: int,
    config: ViewportConfig,
    *,
    workers: int = 1,
    band_height: int = 32,
) -> np.ndarray:
    if width <= 0 or height <= 0:
        return np.zeros((0, 0), dtype=np.int32)

    re_axis, im_axis = plane_axes(width, height, config)
    max_iter = int(config.max_iterations)
    counts = np.empty((height, width), dtype=np.int32)

    if workers <= 1 or height <= band_height:
        _escape_band(re_axis, im_axis, max_iter, counts)
        return counts

    def _render_band(y0_y1: Tuple[int, int]):
        y0, y1 = y0_y1
        band = np.empty((y1 - y0, width), dtype=np.int32)
        _escape_band(re_axis, im_axis[y0:y1], max_iter, band)
        return y0, band

    # The kernel releases the GIL, so bands genuinely run in parallel.
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mandelview-band") as pool:
        for y0, band in pool.map(_render_band, _bands(height, max(1, band_height))):
            counts[y0:y0 + band.shape[0]] = band
    return counts

def shade(counts: np.ndarray, max_iterations: int, scheme: ColorScheme) -> np.ndarray:
    rgba = np.zeros(counts.shape + (4,), dtype=np.uint8)
    rgba[..., 3] = 255
    if max_iterations > 0:
        interior = counts >= max_iterations
        t = counts.astype(np.float64) / float(max_iterations)
    else:
        # Zero iterations performed: everything is exterior at t = 0.
        interior = np.zeros(counts.shape, dtype=bool)
        t = np.zeros(counts.shape, dtype=np.float64)
    rgba[..., :3] = scheme.colorize(t)
    rgba[interior, :3] = 0
    return rgba

def render(
    width: int,
    height: int,
    config: ViewportConfig,
    *,
    workers: int = 1,
    frame_id: str = "-",
) -> PixelBuffer:
    logger = get_logger()
    if width <= 0 or height <= 0:
        logger.debug("[Frame %s] Degenerate surface %sx%s, empty buffer", frame_id, width, height)
        return PixelBuffer.empty()

    start = time.perf_counter()
    logger.debug(
        "[Frame %s] CPU render start size=%sx%s center=%s zoom=%s iter=%s scheme=%s",
        frame_id, width, height, config.center, config.zoom, config.max_iterations, config.color_scheme.value,
    )
    counts = escape_counts(width, height, config, workers=workers)
    buf = PixelBuffer(shade(counts, int(config.max_iterations), config.color_scheme))
    logger.debug("[Frame %s] CPU render done in %.3fs", frame_id, time.perf_counter() - start)
    return buf
