#!/usr/bin/env python3
"""Generate a (blended) saliency map image from a list of 2D fixation points.

Pipeline:
    1. Read the fixation list (CSV: header line, then one X,Y pair per line)
    2. Accumulate fixations into a density raster (width x height)
    3. Gaussian smoothing with sigma given in degrees of visual angle
    4. Normalize, colorize with the 33-stop coolwarm palette
    5. Optionally blend over a stimulus image of the same size
    6. Write the output image (and optionally a YAML run summary)

Configuration precedence: CLI flags > --config YAML > built-in defaults.

Usage:
    python scripts/saliency_map.py explor_12.csv --img_path explor_12.jpg --sigma 1.5 --blend .7
    python scripts/saliency_map.py --config configs/saliency_map.v1.yaml fixations.csv
    python scripts/saliency_map.py fixations.csv --backend torch --device cuda -o out/salmap.png

Exit codes:
    0: Map computed (the image write may have been skipped for an
       unsupported extension; a warning is logged)
    1: Configuration or input error (missing fixation list, unreadable
       file, stimulus size mismatch, invalid values)
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.saliency_map import pipeline
from src.utils import validators
from src.utils.logging_config import install_excepthook, setup_logging, shutdown

logger = logging.getLogger("saliency_map")

_DEFAULTS = validators.SaliencyConfigV1()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a (blended) saliency map image from a list of 2d points.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Saliency map only, default 1920x1080 raster
  python scripts/saliency_map.py explor_12.csv

  # Blend 70/30 over the stimulus, narrower kernel
  python scripts/saliency_map.py explor_12.csv --img_path explor_12.jpg --sigma 1.5 --blend .7
""",
    )

    parser.add_argument(
        "fixlist_path",
        nargs="?",
        help="Fixation list is a csv file with a header and one X,Y value pair per line (Mandatory)",
    )
    parser.add_argument(
        "--img_path",
        help="Path to image to blend with saliency map (def: empty)",
    )
    parser.add_argument(
        "--sigma",
        type=float,
        help=f"Sigma (in degrees of field of view) for the Gaussian filter (def: {_DEFAULTS.smoothing.sigma_deg:g})",
    )
    parser.add_argument(
        "--px2deg",
        type=float,
        help=f"Pixel to degree ratio to apply (def: {_DEFAULTS.smoothing.px_per_deg:g})",
    )
    parser.add_argument(
        "--width",
        type=int,
        help=f"Width of output image in pixels (def: {_DEFAULTS.raster.width})",
    )
    parser.add_argument(
        "--height",
        type=int,
        help=f"Height of output image in pixels (def: {_DEFAULTS.raster.height})",
    )
    parser.add_argument(
        "--blend",
        type=float,
        help=f"Saliency map to stimulus blend ratio (def: {_DEFAULTS.blend.ratio:g})",
    )
    parser.add_argument(
        "-o", "--output",
        help=f"Output image path; the extension selects the format (def: {_DEFAULTS.io.output_path})",
    )
    parser.add_argument(
        "--summary",
        help="Write a YAML run summary to this path",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="saliency_map.v1 YAML config; CLI flags override its values",
    )
    parser.add_argument(
        "--backend",
        choices=["opencv", "torch"],
        help=f"Compute backend for smoothing and colorization (def: {_DEFAULTS.compute.backend})",
    )
    parser.add_argument(
        "--device",
        help=f"Torch device when --backend torch: auto, cpu, cuda, cuda:N (def: {_DEFAULTS.compute.device})",
    )

    # Logging
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", help="Also log to this file")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")

    return parser


def resolve_config(args: argparse.Namespace) -> validators.SaliencyConfigV1:
    """Merge --config YAML (or defaults) with CLI flags."""
    cfg = validators.load_saliency_config(args.config) if args.config else validators.SaliencyConfigV1()
    return validators.apply_overrides(cfg, {
        "io": {
            "fixlist_path": args.fixlist_path,
            "stimulus_path": args.img_path,
            "output_path": args.output,
            "summary_path": args.summary,
        },
        "raster": {"width": args.width, "height": args.height},
        "smoothing": {"sigma_deg": args.sigma, "px_per_deg": args.px2deg},
        "blend": {"ratio": args.blend},
        "compute": {"backend": args.backend, "device": args.device},
    })


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for saliency map generation."""
    args = build_parser().parse_args(argv)

    setup_logging(
        log_level="DEBUG" if args.verbose else "INFO",
        log_file=args.log_file,
        json=args.json_logs,
        quiet_libs=["PIL"],
        context={"app": "saliency_map"},
    )
    install_excepthook()
    try:
        return _run(args)
    finally:
        shutdown()


def _run(args: argparse.Namespace) -> int:
    try:
        cfg = resolve_config(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    if not cfg.io.fixlist_path:
        logger.error("A path to a fixation list file must be passed as an argument")
        return 1

    try:
        result = pipeline.run(cfg)
    except (OSError, RuntimeError, ValueError) as e:
        # FileNotFoundError is an OSError; BlendDimensionError is a ValueError;
        # RuntimeError covers failed writes and an unavailable torch device
        logger.error(str(e))
        return 1

    for line in pipeline.format_summary(result, cfg):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
