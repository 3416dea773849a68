import numpy as np
import pytest

from mandelview.buffer import PixelBuffer


def _checker(w=4, h=3):
    arr = np.zeros((h, w, 4), dtype=np.uint8)
    arr[..., 3] = 255
    arr[::2, ::2, 0] = 200
    return arr


def test_dimensions_and_pixels():
    buf = PixelBuffer(_checker())
    assert buf.size == (4, 3)
    assert buf.pixel(0, 0) == (200, 0, 0, 255)
    assert buf.pixel(1, 0) == (0, 0, 0, 255)
    assert len(buf.tobytes()) == 4 * 3 * 4


def test_buffer_owns_a_frozen_copy():
    src = _checker()
    buf = PixelBuffer(src)
    src[0, 0, 0] = 1
    assert buf.pixel(0, 0)[0] == 200
    with pytest.raises(ValueError):
        buf.pixels[0, 0, 0] = 5


def test_equality_by_content():
    assert PixelBuffer(_checker()) == PixelBuffer(_checker())
    assert PixelBuffer(_checker()) != PixelBuffer(_checker(w=3))
    assert hash(PixelBuffer(_checker())) == hash(PixelBuffer(_checker()))


def test_rejects_wrong_shape():
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((3, 4, 3), dtype=np.uint8))


def test_empty_buffer():
    buf = PixelBuffer.empty()
    assert buf.is_empty()
    assert buf.size == (0, 0)
    with pytest.raises(ValueError):
        buf.to_image()


def test_to_image_and_save(tmp_path):
    buf = PixelBuffer(_checker())
    img = buf.to_image()
    assert img.mode == "RGBA"
    assert img.size == (4, 3)
    path = buf.save(str(tmp_path / "out" / "x.png"))
    assert (tmp_path / "out" / "x.png").exists()
    assert path.endswith("x.png")
