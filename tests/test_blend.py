"""Tests for compositing the saliency map over a stimulus.

Run: pytest tests/test_blend.py -v
"""
import numpy as np
import pytest

from src.saliency_map.blend import BlendDimensionError, blend_with_stimulus


@pytest.fixture
def pair():
    rng = np.random.default_rng(0)
    colorized = rng.integers(0, 256, size=(12, 16, 3), dtype=np.uint8)
    stimulus = rng.integers(0, 256, size=(12, 16, 3), dtype=np.uint8)
    return colorized, stimulus


def test_ratio_one_is_map(pair):
    colorized, stimulus = pair
    assert np.array_equal(blend_with_stimulus(colorized, stimulus, 1.0), colorized)


def test_ratio_zero_is_stimulus(pair):
    colorized, stimulus = pair
    assert np.array_equal(blend_with_stimulus(colorized, stimulus, 0.0), stimulus)


def test_weighted_sum():
    colorized = np.full((2, 2, 3), 200, dtype=np.uint8)
    stimulus = np.full((2, 2, 3), 100, dtype=np.uint8)

    out = blend_with_stimulus(colorized, stimulus, 0.5)

    assert out.dtype == np.uint8
    assert np.all(out == 150)


def test_rounds_to_nearest():
    """0.25 * 200 + 0.75 * 101 = 125.75 → 126."""
    colorized = np.full((1, 1, 3), 200, dtype=np.uint8)
    stimulus = np.full((1, 1, 3), 101, dtype=np.uint8)

    out = blend_with_stimulus(colorized, stimulus, 0.25)

    assert np.all(out == 126)


def test_inputs_not_mutated(pair):
    colorized, stimulus = pair
    c0, s0 = colorized.copy(), stimulus.copy()

    out = blend_with_stimulus(colorized, stimulus, 0.3)

    assert out is not colorized and out is not stimulus
    assert np.array_equal(colorized, c0)
    assert np.array_equal(stimulus, s0)


@pytest.mark.parametrize("shape", [(12, 15, 3), (11, 16, 3), (12, 16)])
def test_dimension_mismatch(pair, shape):
    colorized, _ = pair
    stimulus = np.zeros(shape, dtype=np.uint8)

    with pytest.raises(BlendDimensionError, match="does not match"):
        blend_with_stimulus(colorized, stimulus, 0.5)


def test_dimension_error_is_value_error():
    assert issubclass(BlendDimensionError, ValueError)


@pytest.mark.parametrize("ratio", [-0.1, 1.5])
def test_invalid_ratio(pair, ratio):
    colorized, stimulus = pair
    with pytest.raises(ValueError, match="ratio"):
        blend_with_stimulus(colorized, stimulus, ratio)
