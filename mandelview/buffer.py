from __future__ import annotations

import os
from typing import Tuple

import numpy as np
from PIL import Image

RGBA = Tuple[int, int, int, int]

class PixelBuffer:
    """
    Row-major RGBA frame, ``pixels[y, x] == (r, g, b, a)``. The array is
    copied on construction and frozen, so a buffer handed to a display can
    never be touched by a later render.
    """

    __slots__ = ("_pixels",)

    def __init__(self, pixels: np.ndarray):
        arr = np.array(pixels, dtype=np.uint8, copy=True)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"pixels must have shape (height, width, 4), got {arr.shape}")
        arr.setflags(write=False)
        self._pixels = arr

    @classmethod
    def empty(cls) -> "PixelBuffer":
        return cls(np.zeros((0, 0, 4), dtype=np.uint8))

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def is_empty(self) -> bool:
        return self._pixels.size == 0

    def pixel(self, x: int, y: int) -> RGBA:
        r, g, b, a = self._pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def tobytes(self) -> bytes:
        return self._pixels.tobytes()

    def to_image(self) -> Image.Image:
        if self.is_empty():
            raise ValueError("Cannot build an image from an empty buffer")
        # (h, w, 4) uint8 is inferred as RGBA
        return Image.fromarray(self._pixels)

    def save(self, path: str) -> str:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self.to_image().save(path, format="PNG", optimize=True)
        return path

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and self.tobytes() == other.tobytes()

    def __hash__(self) -> int:
        return hash((self._pixels.shape, self.tobytes()))

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"
