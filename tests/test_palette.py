import numpy as np
import pytest

from mandelview.errors import PaletteError
from mandelview.palette import ColorScheme


@pytest.mark.parametrize("scheme", list(ColorScheme))
def test_channels_stay_in_byte_range(scheme):
    t = np.linspace(0.0, 1.0, 2001, endpoint=False)
    rgb = scheme.colorize(t)
    assert rgb.dtype == np.uint8
    assert rgb.shape == (2001, 3)
    for value in (0.0, 0.3, 0.51, 0.999):
        r, g, b = scheme.color(value)
        assert all(isinstance(c, int) and 0 <= c <= 255 for c in (r, g, b))


def test_fire_saturates_instead_of_wrapping():
    # 255 * 2 * 0.9 = 459 would wrap to 203 in a uint8 cast
    assert ColorScheme.FIRE.color(0.9)[0] == 255
    assert ColorScheme.FIRE.color(0.5) == (255, 64, 25)
    assert ColorScheme.FIRE.color(0.0) == (0, 0, 0)


def test_ice_blue_caps_at_full():
    assert ColorScheme.ICE.color(0.5) == (25, 75, 191)
    assert ColorScheme.ICE.color(0.8)[2] == 255


def test_neon_phases():
    assert ColorScheme.NEON.color(0.0) == (128, 243, 31)
    assert ColorScheme.NEON.color(0.25) == (255, 75, 44)


def test_colorize_keeps_array_shape():
    t = np.zeros((2, 3))
    assert ColorScheme.NEON.colorize(t).shape == (2, 3, 3)


@pytest.mark.parametrize("name,expected", [
    ("fire", ColorScheme.FIRE),
    ("Ice", ColorScheme.ICE),
    (" NEON ", ColorScheme.NEON),
    (ColorScheme.ICE, ColorScheme.ICE),
])
def test_parse(name, expected):
    assert ColorScheme.parse(name) is expected


def test_parse_unknown():
    with pytest.raises(PaletteError) as exc:
        ColorScheme.parse("rainbow")
    assert isinstance(exc.value, ValueError)
    assert "fire" in str(exc.value)
