"""Global max normalization of smoothed density to [0, 1].

A single pass over the whole raster: one heavily revisited location sets the
scale for every other pixel. An all-zero raster (no accepted fixations)
normalizes to all zeros instead of dividing by zero.
"""

import numpy as np


def density_max(density: np.ndarray) -> float:
    """Largest cell value, floored at 0 (empty raster → 0)."""
    if density.size == 0:
        return 0.0
    return max(float(np.max(density)), 0.0)


def normalize_density(density: np.ndarray) -> np.ndarray:
    """Scale density by its global maximum.

    Parameters
    ----------
    density : np.ndarray
        Smoothed density, shape (H, W), non-negative

    Returns
    -------
    np.ndarray
        FP32 array in [0, 1], same shape; the maximum cell is exactly 1.0
        unless the input is all zero, in which case the output is all zero
    """
    peak = density_max(density)
    if peak <= 0.0:
        return np.zeros(density.shape, dtype=np.float32)
    return (density.astype(np.float32, copy=False) / np.float32(peak)).astype(np.float32, copy=False)
