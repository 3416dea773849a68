from __future__ import annotations

import argparse
import logging
import os
from typing import Optional, Tuple

from mandelview.config import config_to_viewport, load_config, load_events, normalise_config
from mandelview.controller import ViewportController
from mandelview.errors import MandelviewError
from mandelview.palette import ColorScheme
from mandelview.pipeline import Frame, FrameRenderer, replay, save_frame
from mandelview.util.logging_setup import configure_root_logging, get_logger, parse_level

def _parse_size(value: str) -> Tuple[int, int]:
    try:
        w, h = value.lower().split("x", 1)
        return int(w), int(h)
    except ValueError:
        raise argparse.ArgumentTypeError(f"size must look like WIDTHxHEIGHT, got {value!r}")

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mandelview", description="Interactive Mandelbrot viewport renderer.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. Defaults are used if omitted.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="", help="Rotating log file path. Empty disables file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render one frame to a PNG.")
    r.add_argument("--size", type=_parse_size, default=None, help="Surface size as WIDTHxHEIGHT.")
    r.add_argument("--center", type=float, nargs=2, metavar=("RE", "IM"), default=None, help="Centre of the view.")
    r.add_argument("--zoom", type=float, default=None, help="Zoom factor (1 = default view).")
    r.add_argument("--iterations", type=int, default=None, help="Iteration cap.")
    r.add_argument("--scheme", type=str, default=None, choices=[s.value for s in ColorScheme], help="Color scheme.")
    r.add_argument("--workers", type=int, default=None, help="Render threads (row bands).")
    r.add_argument("--output", type=str, default=None, help="Output PNG path.")

    e = sub.add_parser("replay", help="Replay a JSON input event script, one PNG per changed frame.")
    e.add_argument("events", type=str, help="Path to the event script JSON.")
    e.add_argument("--size", type=_parse_size, default=None, help="Initial surface size as WIDTHxHEIGHT.")
    e.add_argument("--frames-dir", type=str, default=None, help="Override frames_dir from config.")
    e.add_argument("--final-only", action="store_true", help="Only render and save the final state.")
    e.add_argument("--workers", type=int, default=None, help="Render threads (row bands).")

    return p

def _apply_overrides(cfg: dict, args: argparse.Namespace) -> dict:
    if getattr(args, "size", None):
        cfg["width"], cfg["height"] = args.size
    if getattr(args, "center", None):
        cfg["center"] = list(args.center)
    for attr, key in (("zoom", "zoom"), ("iterations", "max_iterations"), ("scheme", "color_scheme"),
                      ("workers", "workers"), ("output", "output"), ("frames_dir", "frames_dir")):
        value = getattr(args, attr, None)
        if value is not None:
            cfg[key] = value
    return normalise_config(cfg)

def _cmd_render(cfg: dict) -> int:
    logger = get_logger()
    controller = ViewportController(cfg["width"], cfg["height"], config_to_viewport(cfg))
    frame = FrameRenderer(workers=cfg["workers"], cache_size=0).render(controller.snapshot())
    path = frame.buffer.save(cfg["output"])
    logger.info("Saved %sx%s frame -> %s (%.3fs)", frame.buffer.width, frame.buffer.height, path, frame.elapsed)
    return 0

def _cmd_replay(cfg: dict, events_path: str, final_only: bool, show_progress: bool) -> int:
    logger = get_logger()
    events = load_events(events_path)
    controller = ViewportController(cfg["width"], cfg["height"], config_to_viewport(cfg))
    renderer = FrameRenderer(workers=cfg["workers"])
    frames_dir = cfg["frames_dir"]

    def _on_frame(index: int, frame: Frame) -> None:
        if frame.buffer.is_empty():
            logger.warning("Frame %s (revision %s) has an empty surface, not saved", index, frame.revision)
            return
        path = save_frame(frame.buffer, frames_dir, index)
        logger.info("Saved frame %s -> %s (revision=%s cached=%s)", index, path, frame.revision, frame.cached)

    frames = replay(events, controller, renderer, on_frame=_on_frame, final_only=final_only, progress=show_progress)
    logger.info("Replay wrote %s frame(s) to %s (cache hits=%s)", len(frames), os.path.abspath(frames_dir), renderer.hits)
    return 0

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = parse_level(args.log_level)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    configure_root_logging(level=log_level, console=True, log_file=log_file)
    logger = get_logger()

    try:
        cfg = _apply_overrides(load_config(args.config), args)

        if args.cmd == "render":
            return _cmd_render(cfg)
        if args.cmd == "replay":
            return _cmd_replay(cfg, args.events, args.final_only, show_progress=log_level <= logging.INFO)

        raise RuntimeError("Unknown command.")
    except (MandelviewError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 2

if __name__ == "__main__":
    raise SystemExit(main())
