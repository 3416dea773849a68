from __future__ import annotations

import enum
import math
from typing import Callable, Tuple, Union

import numpy as np

from mandelview.errors import PaletteError

RGB = Tuple[int, int, int]

def _fire(t: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    return 255.0 * t * 2.0, 128.0 * t, 50.0 * t

def _ice(t: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    return 50.0 * t, 150.0 * t, 255.0 * np.minimum(1.0, 1.5 * t)

def _neon(t: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    # Three sinusoids with phase offsets 0, 2 and 4 radians.
    phase = 2.0 * math.pi * t
    return (
        np.sin(phase) * 127.0 + 128.0,
        np.sin(phase + 2.0) * 127.0 + 128.0,
        np.sin(phase + 4.0) * 127.0 + 128.0,
    )

class ColorScheme(enum.Enum):
    """
    The fixed set of palettes. Each member maps a normalised iteration count
    t in [0, 1) to an RGB triple. Channels are clamped to [0, 255] and then
    floored, so out-of-range values saturate instead of wrapping.
    """

    FIRE = "fire"
    ICE = "ice"
    NEON = "neon"

    @property
    def channels(self) -> Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray, np.ndarray]]:
        return _CHANNELS[self]

    @classmethod
    def parse(cls, value: Union[str, "ColorScheme"]) -> "ColorScheme":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for scheme in cls:
                if scheme.value == key:
                    return scheme
        names = ", ".join(s.value for s in cls)
        raise PaletteError(f"Unknown color scheme {value!r} (expected one of: {names})")

    def colorize(self, t) -> np.ndarray:
        t = np.asarray(t, dtype=np.float64)
        r, g, b = self.channels(t)
        rgb = np.stack([r, g, b], axis=-1)
        # NaN would survive the clip and cast to an arbitrary byte
        rgb = np.nan_to_num(rgb, nan=0.0)
        return np.floor(np.clip(rgb, 0.0, 255.0)).astype(np.uint8)

    def color(self, t: float) -> RGB:
        r, g, b = self.colorize(t)
        return int(r), int(g), int(b)

_CHANNELS = {
    ColorScheme.FIRE: _fire,
    ColorScheme.ICE: _ice,
    ColorScheme.NEON: _neon,
}
