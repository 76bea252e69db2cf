"""Alpha compositing of the colorized saliency map over a stimulus image.

    out = colorized * ratio + stimulus * (1 - ratio)

computed per channel by cv2.addWeighted, which rounds to the nearest 8-bit
value and saturates. Both rasters must share rows, columns and channel
count; a mismatch is a configuration error raised before any arithmetic.
Nothing is cropped or resized.
"""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class BlendDimensionError(ValueError):
    """Raised when the stimulus raster does not match the saliency map."""

    pass


def blend_with_stimulus(
    colorized: np.ndarray,
    stimulus: np.ndarray,
    ratio: float
) -> np.ndarray:
    """Composite the saliency map over the stimulus.

    Parameters
    ----------
    colorized : np.ndarray
        Saliency map, shape (H, W, 3), uint8
    stimulus : np.ndarray
        Stimulus image, shape (H, W, 3), uint8, same channel order
    ratio : float
        Saliency map weight in [0, 1]; 1.0 reproduces the map, 0.0 the stimulus

    Returns
    -------
    np.ndarray
        Blended image, shape (H, W, 3), uint8 (new array)

    Raises
    ------
    ValueError
        If ratio is outside [0, 1]
    BlendDimensionError
        If the two rasters differ in shape
    """
    if not 0.0 <= ratio <= 1.0:
        raise ValueError(f"Blend ratio must be within [0, 1], got {ratio}")
    if colorized.shape != stimulus.shape:
        raise BlendDimensionError(
            f"Stimulus shape {stimulus.shape} does not match saliency map shape "
            f"{colorized.shape}; resize the stimulus or set width/height to match"
        )

    logger.debug(f"Blending saliency map over stimulus (ratio={ratio})")
    return cv2.addWeighted(
        colorized.astype(np.uint8, copy=False), float(ratio),
        stimulus.astype(np.uint8, copy=False), 1.0 - float(ratio),
        0.0,
    )
