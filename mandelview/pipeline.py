from __future__ import annotations

import os
import threading
import time
from collections import OrderedDict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from tqdm import tqdm

from mandelview.buffer import PixelBuffer
from mandelview.controller import InputEvent, ViewportController, ViewportSnapshot
from mandelview.renderers.cpu import render as render_cpu
from mandelview.util.logging_setup import get_logger
from mandelview.viewport import ViewportConfig

@dataclass(frozen=True)
class Frame:
    snapshot: ViewportSnapshot
    buffer: PixelBuffer
    elapsed: float
    cached: bool = False

    @property
    def revision(self) -> int:
        return self.snapshot.revision

class FrameRenderer:
    """
    Renders snapshots, remembering the last few frames. Rendering is a pure
    function of (width, height, config), so a hit is always exact.
    """

    def __init__(self, *, workers: int = 1, cache_size: int = 16):
        self.workers = workers
        self.cache_size = max(0, cache_size)
        self._cache: "OrderedDict[Tuple[int, int, ViewportConfig], PixelBuffer]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def render(self, snapshot: ViewportSnapshot) -> Frame:
        key = (snapshot.width, snapshot.height, snapshot.config)
        with self._lock:
            buf = self._cache.get(key)
            if buf is not None:
                self._cache.move_to_end(key)
                self.hits += 1
                return Frame(snapshot=snapshot, buffer=buf, elapsed=0.0, cached=True)
            self.misses += 1

        start = time.perf_counter()
        buf = render_cpu(
            snapshot.width, snapshot.height, snapshot.config,
            workers=self.workers, frame_id=str(snapshot.revision),
        )
        elapsed = time.perf_counter() - start

        if self.cache_size:
            with self._lock:
                self._cache[key] = buf
                self._cache.move_to_end(key)
                while len(self._cache) > self.cache_size:
                    self._cache.popitem(last=False)
        return Frame(snapshot=snapshot, buffer=buf, elapsed=elapsed)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

class LatestFrameScheduler:
    """
    Runs renders on one background thread and keeps only the newest result.
    A request that is superseded before it starts is skipped; one that
    finishes after a newer request was made is dropped. ``latest()`` never
    goes back in revision.
    """

    def __init__(self, renderer: FrameRenderer):
        self._renderer = renderer
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mandelview-render")
        self._lock = threading.Lock()
        self._requested = -1
        self._latest: Optional[Frame] = None
        self.dropped = 0
        self._logger = get_logger("scheduler")

    def submit(self, snapshot: ViewportSnapshot) -> "Future[Optional[Frame]]":
        with self._lock:
            self._requested = max(self._requested, snapshot.revision)
        return self._executor.submit(self._run, snapshot)

    def _is_stale(self, revision: int) -> bool:
        if revision < self._requested:
            return True
        return self._latest is not None and revision < self._latest.revision

    def _run(self, snapshot: ViewportSnapshot) -> Optional[Frame]:
        with self._lock:
            if self._is_stale(snapshot.revision):
                self.dropped += 1
                self._logger.debug("Skipping superseded render revision=%s", snapshot.revision)
                return None
        frame = self._renderer.render(snapshot)
        with self._lock:
            if self._is_stale(frame.revision):
                self.dropped += 1
                self._logger.debug("Dropping stale frame revision=%s (requested=%s)", frame.revision, self._requested)
                return None
            self._latest = frame
        return frame

    def latest(self) -> Optional[Frame]:
        with self._lock:
            return self._latest

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "LatestFrameScheduler":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

def save_frame(buffer: PixelBuffer, frames_dir: str, frame_index: int) -> str:
    os.makedirs(frames_dir, exist_ok=True)
    path = os.path.join(frames_dir, f"frame_{frame_index:06d}.png")
    return buffer.save(path)

def replay(
    events: Iterable[InputEvent],
    controller: ViewportController,
    renderer: FrameRenderer,
    *,
    on_frame: Optional[Callable[[int, Frame], None]] = None,
    final_only: bool = False,
    progress: bool = True,
) -> List[Frame]:
    """
    Drive the controller with a scripted event sequence. The initial view and
    every event that changes the revision produce a frame; with
    ``final_only`` just the end state is rendered.
    """
    logger = get_logger()
    events = list(events)
    frames: List[Frame] = []

    def _emit(snapshot: ViewportSnapshot) -> None:
        frame = renderer.render(snapshot)
        if on_frame is not None:
            on_frame(len(frames), frame)
        frames.append(frame)

    logger.info("Replay start events=%s final_only=%s", len(events), final_only)
    last = controller.snapshot()
    if not final_only:
        _emit(last)

    for event in tqdm(events, desc="replay", unit="event", disable=not progress):
        snapshot = controller.handle(event)
        if snapshot.revision == last.revision:
            continue
        last = snapshot
        if not final_only:
            _emit(snapshot)

    if final_only:
        _emit(controller.snapshot())

    logger.info("Replay complete frames=%s revision=%s", len(frames), controller.revision)
    return frames
