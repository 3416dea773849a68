from __future__ import annotations

import json
import math
from typing import Any, Dict, List, Optional

from mandelview.controller import (
    InputEvent, PointerDown, PointerLeave, PointerMove, PointerUp, Reset,
    Resize, SetColorScheme, SetIterations, Wheel, ZoomButton,
)
from mandelview.errors import EventError
from mandelview.palette import ColorScheme
from mandelview.viewport import ViewportConfig, validate_config

DEFAULTS: Dict[str, Any] = {
    "width": 800,
    "height": 600,
    "center": [-0.5, 0.0],
    "zoom": 1.0,
    "max_iterations": 100,
    "color_scheme": "neon",
    "workers": 1,
    "output": "mandelbrot.png",
    "frames_dir": "frames",
}

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return dict(DEFAULTS)
    with open(config_path, "r", encoding="utf-8") as f:
        cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise ValueError("Config JSON must be an object.")
    return cfg

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(DEFAULTS)
    out.update(cfg)

    width = int(out["width"])
    height = int(out["height"])
    if width <= 0 or height <= 0:
        raise ValueError("width/height must be positive.")

    center = out["center"]
    if not (isinstance(center, (list, tuple)) and len(center) == 2):
        raise ValueError("center must be [re, im].")

    max_iterations = int(out["max_iterations"])
    if max_iterations <= 0:
        raise ValueError("max_iterations must be positive.")

    workers = int(out["workers"])
    if workers <= 0:
        raise ValueError("workers must be positive.")

    out["width"] = width
    out["height"] = height
    out["center"] = [float(center[0]), float(center[1])]
    out["zoom"] = float(out["zoom"])
    out["max_iterations"] = max_iterations
    out["color_scheme"] = ColorScheme.parse(out["color_scheme"]).value
    out["workers"] = workers
    out["output"] = str(out["output"])
    out["frames_dir"] = str(out["frames_dir"])
    return out

def config_to_viewport(cfg: Dict[str, Any]) -> ViewportConfig:
    return validate_config(ViewportConfig(
        center_re=float(cfg["center"][0]),
        center_im=float(cfg["center"][1]),
        zoom=float(cfg["zoom"]),
        max_iterations=int(cfg["max_iterations"]),
        color_scheme=ColorScheme.parse(cfg["color_scheme"]),
    ))

def _number(value: Any) -> float:
    # bools are ints to Python but never a coordinate
    if isinstance(value, bool):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)

def _integer(value: Any) -> int:
    number = _number(value)
    if not math.isfinite(number):
        raise ValueError(f"expected an integer, got {value!r}")
    return int(number)

_EVENT_TYPES = {
    "pointer_down": (PointerDown, (("x", _number), ("y", _number))),
    "pointer_move": (PointerMove, (("x", _number), ("y", _number))),
    "pointer_up": (PointerUp, ()),
    "pointer_leave": (PointerLeave, ()),
    "wheel": (Wheel, (("delta_y", _number),)),
    "zoom_button": (ZoomButton, (("direction", _integer),)),
    "set_iterations": (SetIterations, (("value", _integer),)),
    "set_color_scheme": (SetColorScheme, (("scheme", str),)),
    "reset": (Reset, ()),
    "resize": (Resize, (("width", _integer), ("height", _integer))),
}

def parse_event(raw: Any) -> InputEvent:
    if not isinstance(raw, dict) or "type" not in raw:
        raise EventError(f"Event must be an object with a 'type' field: {raw!r}")
    kind = str(raw["type"]).lower()
    if kind not in _EVENT_TYPES:
        raise EventError(f"Unknown event type: {kind}")
    cls, fields = _EVENT_TYPES[kind]
    missing = [name for name, _ in fields if name not in raw]
    if missing:
        raise EventError(f"Event {kind} missing field(s): {', '.join(missing)}")
    args = []
    for name, convert in fields:
        try:
            args.append(convert(raw[name]))
        except (TypeError, ValueError) as e:
            raise EventError(f"Event {kind} has invalid {name}: {raw[name]!r}") from e
    return cls(*args)

def load_events(events_path: str) -> List[InputEvent]:
    with open(events_path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise EventError("Event script JSON must be a list.")
    return [parse_event(item) for item in raw]
