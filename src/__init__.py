"""Saliency Map: fixation lists to colorized gaze-density heatmaps.

This package turns a recorded list of 2D gaze fixations into a smoothed
density surface, maps it through a fixed perceptual colormap, and optionally
composites it over the stimulus image the fixations were recorded on.

Architecture layers (strict one-way dependency):
    scripts/ → src/{saliency_map,data_pipeline}/ → src/utils/

Key invariants:
    - Rasters are (H, W) row-major; fixation (x, y) lands in cell [y, x]
    - Density rasters are FP32, colorized rasters are uint8 RGB (H, W, 3)
    - Smoothing width is given in degrees of visual angle, converted to px
    - Each pipeline stage returns a fresh array; inputs are never mutated
    - YAML-only configs
"""

__version__ = "1.0.0"
