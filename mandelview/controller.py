from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from mandelview import viewport
from mandelview.errors import EventError
from mandelview.palette import ColorScheme
from mandelview.util.logging_setup import get_logger
from mandelview.viewport import ViewportConfig

@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float

@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float

@dataclass(frozen=True)
class PointerUp:
    pass

@dataclass(frozen=True)
class PointerLeave:
    pass

@dataclass(frozen=True)
class Wheel:
    # Browser convention: negative delta_y is a scroll up, i.e. zoom in.
    delta_y: float

@dataclass(frozen=True)
class ZoomButton:
    direction: int

@dataclass(frozen=True)
class SetIterations:
    value: int

@dataclass(frozen=True)
class SetColorScheme:
    scheme: Union[str, ColorScheme]

@dataclass(frozen=True)
class Reset:
    pass

@dataclass(frozen=True)
class Resize:
    width: int
    height: int

InputEvent = Union[
    PointerDown, PointerMove, PointerUp, PointerLeave, Wheel,
    ZoomButton, SetIterations, SetColorScheme, Reset, Resize,
]

@dataclass(frozen=True)
class ViewportSnapshot:
    """Everything a render needs, captured by value at one revision."""

    config: ViewportConfig
    width: int
    height: int
    revision: int

def _pointer_position(event: Union[PointerDown, PointerMove]) -> Tuple[float, float]:
    x, y = float(event.x), float(event.y)
    if not (math.isfinite(x) and math.isfinite(y)):
        raise EventError(f"pointer position must be finite, got ({x}, {y})")
    return x, y

class ViewportController:
    """
    Owns the live viewport and turns input events into new configurations.
    The config itself is immutable; each accepted change swaps in a new value
    and bumps ``revision``, so a renderer holding an older snapshot can never
    observe a half-applied update.
    """

    def __init__(self, width: int = 0, height: int = 0, config: Optional[ViewportConfig] = None):
        self._lock = threading.Lock()
        self._config = viewport.validate_config(config or viewport.default_config())
        self._width = int(width)
        self._height = int(height)
        self._revision = 0
        self._drag_anchor: Optional[Tuple[float, float]] = None
        self._logger = get_logger("controller")

    @property
    def config(self) -> ViewportConfig:
        return self._config

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def dragging(self) -> bool:
        return self._drag_anchor is not None

    def snapshot(self) -> ViewportSnapshot:
        with self._lock:
            return ViewportSnapshot(self._config, self._width, self._height, self._revision)

    def reset(self) -> ViewportSnapshot:
        return self.handle(Reset())

    def handle(self, event: InputEvent) -> ViewportSnapshot:
        with self._lock:
            config, width, height = self._apply(event)
            if config != self._config or (width, height) != (self._width, self._height):
                self._config = config
                self._width, self._height = width, height
                self._revision += 1
                self._logger.debug("revision=%s after %r: %s", self._revision, event, config)
            return ViewportSnapshot(self._config, self._width, self._height, self._revision)

    def _apply(self, event: InputEvent) -> Tuple[ViewportConfig, int, int]:
        config, width, height = self._config, self._width, self._height

        if isinstance(event, PointerDown):
            self._drag_anchor = _pointer_position(event)
        elif isinstance(event, PointerMove):
            if self._drag_anchor is not None:
                x, y = _pointer_position(event)
                last_x, last_y = self._drag_anchor
                config = viewport.apply_pan(config, x - last_x, y - last_y, width, height)
                # only a pan that was accepted moves the anchor
                self._drag_anchor = (x, y)
        elif isinstance(event, (PointerUp, PointerLeave)):
            self._drag_anchor = None
        elif isinstance(event, Wheel):
            # scroll up (negative delta) zooms in
            sign = -1 if event.delta_y > 0 else (1 if event.delta_y < 0 else 0)
            config = viewport.apply_zoom(config, sign)
        elif isinstance(event, ZoomButton):
            if event.direction > 0:
                config = viewport.zoom_in(config)
            elif event.direction < 0:
                config = viewport.zoom_out(config)
        elif isinstance(event, SetIterations):
            config = viewport.with_max_iterations(config, event.value)
        elif isinstance(event, SetColorScheme):
            config = viewport.with_color_scheme(config, event.scheme)
        elif isinstance(event, Reset):
            self._drag_anchor = None
            config = viewport.reset()
        elif isinstance(event, Resize):
            width, height = max(0, int(event.width)), max(0, int(event.height))
        else:
            raise EventError(f"Unsupported input event: {event!r}")

        return config, width, height
