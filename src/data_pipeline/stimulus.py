"""Stimulus image loading.

Decodes the image the fixations were recorded on with OpenCV and returns it
as a 3-channel uint8 raster. OpenCV decodes to BGR; the pipeline works in
RGB, so the channels are reversed unless the caller asks for "bgr".

Grayscale and alpha images are coerced to 3 channels by IMREAD_COLOR.
The raster is not resized; matching the saliency map size is the caller's
responsibility (see blend.BlendDimensionError).
"""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def load_stimulus(path: Union[str, Path], channel_order: str = "rgb") -> np.ndarray:
    """Load a stimulus image.

    Parameters
    ----------
    path : Union[str, Path]
        Image file path (any format OpenCV can decode)
    channel_order : str
        "rgb" (default) or "bgr"

    Returns
    -------
    np.ndarray
        Shape (H, W, 3), uint8

    Raises
    ------
    FileNotFoundError
        If the file is missing or cannot be decoded
    ValueError
        If channel_order is unknown
    """
    if channel_order not in ("rgb", "bgr"):
        raise ValueError(f"Unknown channel order: {channel_order}. Use 'rgb' or 'bgr'.")

    path = Path(path)
    arr_bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if arr_bgr is None:
        raise FileNotFoundError(f"Stimulus image not found or unreadable: {path}")

    logger.debug(f"Loaded stimulus {path} ({arr_bgr.shape[1]}x{arr_bgr.shape[0]})")
    if channel_order == "bgr":
        return arr_bgr
    return cv2.cvtColor(arr_bgr, cv2.COLOR_BGR2RGB)
