"""Gaussian smoothing of fixation density in visual-angle units.

The smoothing width is specified in degrees of visual angle and converted to
pixels with the display's pixel-per-degree ratio:

    sigma_px = sigma_deg * px_per_deg
    ksize    = floor(sigma_px * 4 + 1), made odd, at least 1

The kernel is isotropic and separable. Pixels beyond the raster edge are
zero (cv2.BORDER_CONSTANT), so density close to the border is attenuated
relative to an infinite-domain convolution. That attenuation is kept as is.

Preconditions (not checked here, enforced by validators.SmoothingParams):
    sigma_deg > 0 and px_per_deg > 0
"""

import logging
import math

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def sigma_to_px(sigma_deg: float, px_per_deg: float) -> float:
    """Convert a visual-angle sigma (deg) to pixels."""
    return float(sigma_deg) * float(px_per_deg)


def kernel_support(sigma_px: float) -> int:
    """Kernel diameter in taps for a pixel-space sigma.

    Parameters
    ----------
    sigma_px : float
        Standard deviation in pixels

    Returns
    -------
    int
        floor(sigma_px * 4 + 1), bumped to the next odd value when even and
        never below 1 (OpenCV only accepts odd positive apertures)
    """
    ksize = max(int(math.floor(sigma_px * 4.0 + 1.0)), 1)
    if ksize % 2 == 0:
        ksize += 1
    return ksize


def gaussian_kernel_1d(ksize: int, sigma_px: float) -> np.ndarray:
    """Normalized 1-D Gaussian taps, identical to the ones GaussianBlur uses.

    Returns
    -------
    np.ndarray
        Shape (ksize,), FP32, sums to 1
    """
    return cv2.getGaussianKernel(ksize, sigma_px, cv2.CV_32F).reshape(-1)


def gaussian_smooth(
    density: np.ndarray,
    sigma_deg: float,
    px_per_deg: float
) -> np.ndarray:
    """Smooth a density raster with a zero-bordered Gaussian.

    Parameters
    ----------
    density : np.ndarray
        Fixation count map, shape (H, W), non-negative
    sigma_deg : float
        Gaussian sigma in degrees of visual angle
    px_per_deg : float
        Pixel-per-degree conversion factor

    Returns
    -------
    np.ndarray
        Smoothed density, shape (H, W), FP32, new array (input untouched).
        Values are not clipped and may exceed the input range.
    """
    sigma_px = sigma_to_px(sigma_deg, px_per_deg)
    ksize = kernel_support(sigma_px)
    logger.debug(f"Gaussian smoothing: sigma={sigma_px:.2f} px, kernel={ksize}x{ksize}")

    src = np.ascontiguousarray(density, dtype=np.float32)
    return cv2.GaussianBlur(
        src,
        (ksize, ksize),
        sigmaX=sigma_px,
        sigmaY=sigma_px,
        borderType=cv2.BORDER_CONSTANT,
    )
