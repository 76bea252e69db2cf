"""End-to-end saliency map rendering.

Stages (strictly sequential, each returns a fresh array):
    1. accumulate_fixations   points → FP32 count map (H, W)
    2. gaussian_smooth        count map → smoothed density
    3. normalize_density      density → [0, 1]
    4. colorize               [0, 1] → uint8 RGB via the 33-stop palette
    5. blend_with_stimulus    optional, over the stimulus image

Stages 2 and 4 run on OpenCV/numpy (reference) or torch, selected by
cfg.compute.backend.

run() adds the I/O around render_saliency_map(): fixation list and stimulus
loading up front (fatal errors abort before any stage runs), output image
writing and an optional YAML run summary afterwards. An output extension
without an encoder skips the write with a warning; the run still succeeds.
The per-run summary is logged at DEBUG only; format_summary() builds the
user-facing lines the CLI prints.

Usage:
    from src.saliency_map import pipeline
    from src.utils import validators

    cfg = validators.load_saliency_config("configs/saliency_map.v1.yaml")
    result = pipeline.run(cfg)
    print("\\n".join(pipeline.format_summary(result, cfg)))
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from ..data_pipeline.fixations import load_fixation_list
from ..data_pipeline.stimulus import load_stimulus
from ..utils import fs, profiler
from ..utils.validators import SaliencyConfigV1
from .blend import BlendDimensionError, blend_with_stimulus
from .colormap import Colormap, colorize
from .density import PointsLike, accumulate_fixations
from .normalize import normalize_density
from .smoothing import gaussian_smooth, kernel_support, sigma_to_px

logger = logging.getLogger(__name__)


@dataclass
class SaliencyResult:
    """Outcome of one pipeline run.

    Attributes
    ----------
    image : np.ndarray
        Final raster, shape (H, W, 3), uint8 RGB (blended if a stimulus was given)
    n_accepted : int
        Fixations inside the raster that contributed density
    n_rejected : int
        Fixations dropped for falling outside the raster
    blended : bool
        Whether the map was composited over a stimulus
    blend_ratio : float, optional
        Ratio used when blended, else None
    sigma_px : float
        Gaussian sigma in pixels
    kernel_size : int
        Gaussian kernel diameter in taps
    n_malformed : int
        Fixation records skipped by the reader (0 when points were passed in)
    output_path : Path, optional
        Written image path, None if not written
    timings : dict
        Stage name → wall-clock seconds
    """
    image: np.ndarray
    n_accepted: int
    n_rejected: int
    blended: bool
    blend_ratio: Optional[float]
    sigma_px: float
    kernel_size: int
    n_malformed: int = 0
    output_path: Optional[Path] = None
    timings: Dict[str, float] = field(default_factory=dict)


def _smooth(density: np.ndarray, cfg: SaliencyConfigV1) -> np.ndarray:
    sm = cfg.smoothing
    if cfg.compute.backend == "torch":
        from .torch_backend import gaussian_smooth_torch
        return gaussian_smooth_torch(density, sm.sigma_deg, sm.px_per_deg, cfg.compute.device)
    return gaussian_smooth(density, sm.sigma_deg, sm.px_per_deg)


def _colorize(normalized: np.ndarray, colormap: Colormap, cfg: SaliencyConfigV1) -> np.ndarray:
    if cfg.compute.backend == "torch":
        from .torch_backend import colorize_torch
        return colorize_torch(normalized, colormap, "rgb", cfg.compute.device)
    return colorize(normalized, colormap, "rgb")


def check_stimulus_shape(stimulus: np.ndarray, width: int, height: int) -> None:
    """Raise BlendDimensionError unless stimulus is (height, width, 3)."""
    expected = (height, width, 3)
    if stimulus.shape != expected:
        raise BlendDimensionError(
            f"Stimulus shape {stimulus.shape} does not match output raster {expected} "
            f"(width={width}, height={height})"
        )


def render_saliency_map(
    points: PointsLike,
    cfg: SaliencyConfigV1,
    stimulus: Optional[np.ndarray] = None,
    colormap: Optional[Colormap] = None
) -> SaliencyResult:
    """Run stages 1-5 on in-memory inputs.

    Parameters
    ----------
    points : array-like
        Fixations as (x, y) integer pairs
    cfg : SaliencyConfigV1
        Validated config (raster, smoothing, blend, compute sections are used)
    stimulus : np.ndarray, optional
        uint8 RGB image of shape (height, width, 3); blending is skipped if None
    colormap : Colormap, optional
        Palette; defaults to Colormap.default()

    Returns
    -------
    SaliencyResult
        Final image and counts; output_path is None

    Raises
    ------
    BlendDimensionError
        If stimulus shape differs from the configured raster (checked first)
    """
    width, height = cfg.raster.width, cfg.raster.height
    if stimulus is not None:
        check_stimulus_shape(stimulus, width, height)
    colormap = colormap or Colormap.default()

    points = points if isinstance(points, np.ndarray) else list(points)
    timings: Dict[str, float] = {}
    sync = cfg.compute.backend == "torch"

    with profiler.timer("accumulate", sink=timings.__setitem__):
        density, n_accepted = accumulate_fixations(points, width, height)

    with profiler.timer("smooth", sink=timings.__setitem__, sync_cuda=sync):
        smoothed = _smooth(density, cfg)

    with profiler.timer("normalize", sink=timings.__setitem__):
        normalized = normalize_density(smoothed)

    with profiler.timer("colorize", sink=timings.__setitem__, sync_cuda=sync):
        image = _colorize(normalized, colormap, cfg)

    blend_ratio = None
    if stimulus is not None:
        blend_ratio = cfg.blend.ratio
        with profiler.timer("blend", sink=timings.__setitem__):
            image = blend_with_stimulus(image, stimulus, blend_ratio)

    for name, elapsed in timings.items():
        logger.debug(f"Stage {name}: {elapsed:.3f} s")

    sigma_px = sigma_to_px(cfg.smoothing.sigma_deg, cfg.smoothing.px_per_deg)
    return SaliencyResult(
        image=image,
        n_accepted=n_accepted,
        n_rejected=len(points) - n_accepted,
        blended=stimulus is not None,
        blend_ratio=blend_ratio,
        sigma_px=sigma_px,
        kernel_size=kernel_support(sigma_px),
        timings=timings,
    )


def write_output(image: np.ndarray, output_path: str) -> Optional[Path]:
    """Write the final image if an encoder exists for its extension.

    Returns
    -------
    Path or None
        The written path, or None when the format is unsupported
    """
    path = Path(output_path)
    if not fs.has_image_writer(path):
        logger.warning(f"No image encoder for '{path.suffix or path.name}', output not written: {path}")
        return None
    fs.atomic_save_image(image, path)
    return path


def run(cfg: SaliencyConfigV1, colormap: Optional[Colormap] = None) -> SaliencyResult:
    """Load inputs, render, and write outputs for one configured run.

    Parameters
    ----------
    cfg : SaliencyConfigV1
        Validated config; cfg.io.fixlist_path is mandatory
    colormap : Colormap, optional
        Palette; defaults to Colormap.default()

    Returns
    -------
    SaliencyResult
        With output_path set when the image was written

    Raises
    ------
    ValueError
        If no fixation list path is configured
    FileNotFoundError
        If the fixation list or stimulus image is missing/unreadable
    BlendDimensionError
        If the stimulus does not match the configured raster size
    """
    io = cfg.io
    if not io.fixlist_path:
        raise ValueError("A path to a fixation list file must be provided")

    fixlist = load_fixation_list(io.fixlist_path)
    stimulus = load_stimulus(io.stimulus_path) if io.stimulus_path else None

    result = render_saliency_map(fixlist.points, cfg, stimulus=stimulus, colormap=colormap)
    result.n_malformed = fixlist.n_malformed

    logger.debug(f'Processed "{io.fixlist_path}": {result.n_accepted} fixation points')
    if result.blended:
        logger.debug(f'Blended saliency map with "{io.stimulus_path}" ({result.blend_ratio}).')

    result.output_path = write_output(result.image, io.output_path)
    if result.output_path is not None:
        logger.debug(f"Output: {result.output_path}")

    if io.summary_path:
        fs.atomic_yaml_dump(summary_dict(result, cfg), io.summary_path)
        logger.debug(f"Run summary written to {io.summary_path}")

    return result


def format_summary(result: SaliencyResult, cfg: SaliencyConfigV1) -> List[str]:
    """Human-readable summary lines for the console."""
    lines = [f'Processed "{cfg.io.fixlist_path}": {result.n_accepted} fixation points']
    if result.blended:
        lines.append(f'Blended saliency map with "{cfg.io.stimulus_path}" ({result.blend_ratio}).')
    if result.output_path is not None:
        lines.append(f"Output: {result.output_path}")
    return lines


def summary_dict(result: SaliencyResult, cfg: SaliencyConfigV1) -> Dict:
    """Plain-dict run summary (YAML-safe)."""
    return {
        'schema': 'saliency_summary.v1',
        'fixlist_path': cfg.io.fixlist_path,
        'stimulus_path': cfg.io.stimulus_path,
        'output_path': str(result.output_path) if result.output_path is not None else None,
        'raster': {'width': cfg.raster.width, 'height': cfg.raster.height},
        'fixations': {
            'accepted': result.n_accepted,
            'out_of_bounds': result.n_rejected,
            'malformed': result.n_malformed,
        },
        'smoothing': {
            'sigma_deg': cfg.smoothing.sigma_deg,
            'px_per_deg': cfg.smoothing.px_per_deg,
            'sigma_px': result.sigma_px,
            'kernel_size': result.kernel_size,
        },
        'blend_ratio': result.blend_ratio,
        'backend': cfg.compute.backend,
        'timings_s': {k: round(v, 6) for k, v in result.timings.items()},
    }
