"""Fixation density → colorized saliency map.

Modules:
    - density: Integer fixations → FP32 count raster (out-of-bounds dropped)
    - smoothing: Visual-angle Gaussian blur, zero border (OpenCV)
    - normalize: Global max normalization with all-zero guard
    - colormap: 33-stop coolwarm palette, linear interpolation, 8-bit truncation
    - blend: Alpha compositing over the stimulus image
    - torch_backend: Torch versions of smoothing and colorization
    - pipeline: Stage orchestration, I/O, run summary

Invariants:
    - Density rasters are (H, W) FP32 and non-negative
    - Color rasters are (H, W, 3) uint8 RGB unless "bgr" is requested
    - Every stage returns a new array and leaves its input untouched

Used by:
    - scripts/saliency_map.py: command-line entrypoint
"""

from .density import FixationPoint, accumulate_fixations
from .smoothing import gaussian_kernel_1d, gaussian_smooth, kernel_support, sigma_to_px
from .normalize import density_max, normalize_density
from .colormap import COOLWARM_33, Colormap, colorize, interpolate_colormap, quantize_channels
from .blend import BlendDimensionError, blend_with_stimulus
from .pipeline import SaliencyResult, render_saliency_map, run

__all__ = [
    'COOLWARM_33',
    'BlendDimensionError',
    'Colormap',
    'FixationPoint',
    'SaliencyResult',
    'accumulate_fixations',
    'blend_with_stimulus',
    'colorize',
    'density_max',
    'gaussian_kernel_1d',
    'gaussian_smooth',
    'interpolate_colormap',
    'kernel_support',
    'normalize_density',
    'quantize_channels',
    'render_saliency_map',
    'run',
    'sigma_to_px',
]
