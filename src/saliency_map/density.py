"""Fixation density accumulation.

Rasterizes integer gaze fixations into a single-channel FP32 count map:
    - One fixation adds exactly 1.0 to cell [y, x] (no weighting, no sub-pixel)
    - Duplicates accumulate independently
    - Points outside [0, W) × [0, H) are dropped without error

The accepted-point count is returned alongside the raster so callers can
report how many fixations actually contributed.
"""

import logging
from typing import Iterable, Tuple, Union

import numpy as np

from ..data_pipeline.fixations import FixationPoint  # noqa: F401 (re-export)

logger = logging.getLogger(__name__)


PointsLike = Union[np.ndarray, Iterable[Tuple[int, int]]]


def _as_point_array(points: PointsLike) -> np.ndarray:
    """Convert points to an (N, 2) int64 array of (x, y)."""
    arr = np.asarray(list(points) if not isinstance(points, np.ndarray) else points)
    if arr.size == 0:
        return np.empty((0, 2), dtype=np.int64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Points must have shape (N, 2), got {arr.shape}")
    if not np.issubdtype(arr.dtype, np.integer):
        raise TypeError(f"Fixation coordinates must be integers, got {arr.dtype}")
    return arr.astype(np.int64, copy=False)


def accumulate_fixations(
    points: PointsLike,
    width: int,
    height: int
) -> Tuple[np.ndarray, int]:
    """Build the fixation count map.

    Parameters
    ----------
    points : array-like
        Fixations as FixationPoint/(x, y) pairs or an (N, 2) integer array
    width : int
        Raster width W (px)
    height : int
        Raster height H (px)

    Returns
    -------
    density : np.ndarray
        Count map, shape (H, W), FP32; density[y, x] == number of points at (x, y)
    n_accepted : int
        Number of in-bounds points that were accumulated

    Raises
    ------
    ValueError
        If width or height is not positive, or points are not (N, 2)
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Raster size must be positive, got {width}x{height}")

    pts = _as_point_array(points)
    density = np.zeros((height, width), dtype=np.float32)

    xs, ys = pts[:, 0], pts[:, 1]
    in_bounds = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
    n_accepted = int(np.count_nonzero(in_bounds))

    # Unbuffered add so repeated coordinates each contribute 1.0
    np.add.at(density, (ys[in_bounds], xs[in_bounds]), np.float32(1.0))

    n_dropped = len(pts) - n_accepted
    if n_dropped:
        logger.debug(f"Dropped {n_dropped} out-of-bounds fixation(s) for {width}x{height} raster")

    return density, n_accepted
