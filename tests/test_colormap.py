"""Tests for palette interpolation and 8-bit quantization.

Verifies:
    - Endpoints map exactly to the first and last stops
    - Integer positions k/32 hit stop k exactly; midpoints average neighbours
    - Interpolation is continuous (bounded step between close inputs)
    - Truncating quantization (x * 255 cast down)
    - Injected palettes are honoured and read-only

Run: pytest tests/test_colormap.py -v
"""
import numpy as np
import pytest

from src.saliency_map.colormap import (
    COOLWARM_33,
    NUM_STOPS,
    Colormap,
    colorize,
    interpolate_colormap,
    quantize_channels,
)


@pytest.fixture
def cmap():
    return Colormap.default()


@pytest.fixture
def gray_cmap():
    """Linear gray ramp: stop i = i / 32 on every channel."""
    ramp = np.arange(NUM_STOPS, dtype=np.float32) / (NUM_STOPS - 1)
    return Colormap.from_stops(np.repeat(ramp[:, None], 3, axis=1), name="gray")


# ============================================================================
# PALETTE
# ============================================================================

def test_default_palette(cmap):
    assert cmap.name == "coolwarm"
    assert len(cmap) == 33
    assert cmap.stops.shape == (33, 3)
    assert cmap.stops.dtype == np.float32
    np.testing.assert_allclose(cmap.stops, np.asarray(COOLWARM_33), rtol=1e-6)


def test_palette_is_read_only(cmap):
    with pytest.raises(ValueError):
        cmap.stops[0, 0] = 1.0


def test_source_array_not_aliased():
    """Mutating the array a palette was built from does not change it."""
    stops = np.asarray(COOLWARM_33, dtype=np.float32).copy()
    palette = Colormap.from_stops(stops)
    stops[:] = 0.0
    assert palette.stops[32, 0] == pytest.approx(0.705673158)


@pytest.mark.parametrize("stops,match", [
    (np.zeros((32, 3)), "shape"),
    (np.zeros((33, 4)), "shape"),
    (np.full((33, 3), 1.5), r"\[0, 1\]"),
    (np.full((33, 3), np.nan), r"\[0, 1\]"),
])
def test_invalid_palette(stops, match):
    with pytest.raises(ValueError, match=match):
        Colormap.from_stops(stops)


# ============================================================================
# INTERPOLATION
# ============================================================================

def test_endpoints_exact(cmap):
    out = interpolate_colormap(np.array([0.0, 1.0], dtype=np.float32), cmap)

    assert out.shape == (2, 3)
    assert np.array_equal(out[0], cmap.stops[0])
    assert np.array_equal(out[1], cmap.stops[32])


def test_integer_positions_hit_stops(cmap):
    values = np.arange(NUM_STOPS, dtype=np.float32) / 32.0
    out = interpolate_colormap(values, cmap)
    assert np.array_equal(out, cmap.stops)


def test_midpoints_average_neighbours(cmap):
    values = (2 * np.arange(32, dtype=np.float32) + 1) / 64.0
    out = interpolate_colormap(values, cmap)
    expected = 0.5 * (cmap.stops[:-1] + cmap.stops[1:])
    np.testing.assert_allclose(out, expected, atol=1e-6)


def test_continuity(cmap):
    """Close inputs give close colors: |f(v + dv) - f(v)| <= 32 * max_step * dv."""
    values = np.linspace(0.0, 1.0, 10_001, dtype=np.float32)
    out = interpolate_colormap(values, cmap)

    max_step = np.abs(np.diff(cmap.stops, axis=0)).max()
    dv = np.diff(values).max()
    assert np.abs(np.diff(out, axis=0)).max() <= 32 * max_step * dv + 1e-5


def test_out_of_range_clipped(cmap):
    out = interpolate_colormap(np.array([-0.5, 2.0], dtype=np.float32), cmap)
    assert np.array_equal(out[0], cmap.stops[0])
    assert np.array_equal(out[1], cmap.stops[32])


def test_injected_palette_used(gray_cmap):
    values = np.linspace(0.0, 1.0, 257, dtype=np.float32)
    out = interpolate_colormap(values, gray_cmap)
    np.testing.assert_allclose(out, np.repeat(values[:, None], 3, axis=1), atol=1e-6)


# ============================================================================
# QUANTIZATION
# ============================================================================

@pytest.mark.parametrize("value,expected", [
    (0.0, 0),
    (0.5, 127),      # 127.5 truncated, not rounded
    (0.999, 254),    # 254.745 truncated
    (1.0, 255),
    (1.2, 255),      # saturates
])
def test_quantize_truncates(value, expected):
    assert quantize_channels(np.array([value]))[0] == expected


def test_colorize_shape_and_endpoints(cmap):
    normalized = np.array([[0.0, 1.0], [0.25, 0.75]], dtype=np.float32)

    out = colorize(normalized, cmap)

    assert out.shape == (2, 2, 3)
    assert out.dtype == np.uint8
    assert np.array_equal(out[0, 0], quantize_channels(cmap.stops[0]))
    assert np.array_equal(out[0, 1], quantize_channels(cmap.stops[32]))
    # coolwarm: low end is blue, high end is red
    assert out[0, 0, 2] > out[0, 0, 0]
    assert out[0, 1, 0] > out[0, 1, 2]


def test_colorize_bgr_is_reversed(cmap):
    rng = np.random.default_rng(5)
    normalized = rng.random((16, 16), dtype=np.float32)

    rgb = colorize(normalized, cmap, "rgb")
    bgr = colorize(normalized, cmap, "bgr")

    assert np.array_equal(bgr, rgb[..., ::-1])


def test_colorize_unknown_order(cmap):
    with pytest.raises(ValueError, match="channel order"):
        colorize(np.zeros((2, 2), dtype=np.float32), cmap, "hsv")
