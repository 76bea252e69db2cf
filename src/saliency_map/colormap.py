"""Density → color mapping through a fixed 33-stop perceptual palette.

The palette is Matplotlib's diverging "coolwarm" sampled at 33 evenly spaced
stops (blue for low density, red for high). Lookup is piecewise linear:

    idx  = v * 32                  v in [0, 1] → idx in [0, 32]
    lo   = floor(idx), hi = ceil(idx), frac = idx - lo
    rgb  = palette[lo] * (1 - frac) + palette[hi] * frac

followed by quantization to 8 bits with truncation (x * 255 cast down, not
rounded). Truncation keeps pixel parity with previously generated maps.

The palette is injected as a read-only Colormap rather than read from a
module global, so different runs and tests can use distinct palettes.
Arithmetic is channel-order agnostic; colorize() handles the RGB/BGR
permutation for callers that hand the result to OpenCV.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

NUM_STOPS = 33

# Matplotlib "coolwarm", 33 stops, RGB in [0, 1]
COOLWARM_33 = (
    (0.2298057, 0.298717966, 0.753683153),
    (0.26623388, 0.353094838, 0.801466763),
    (0.30386891, 0.406535296, 0.84495867),
    (0.342804478, 0.458757618, 0.883725899),
    (0.38301334, 0.50941904, 0.917387822),
    (0.424369608, 0.558148092, 0.945619588),
    (0.46666708, 0.604562568, 0.968154911),
    (0.509635204, 0.648280772, 0.98478814),
    (0.552953156, 0.688929332, 0.995375608),
    (0.596262162, 0.726149107, 0.999836203),
    (0.639176211, 0.759599947, 0.998151185),
    (0.681291281, 0.788964712, 0.990363227),
    (0.722193294, 0.813952739, 0.976574709),
    (0.761464949, 0.834302879, 0.956945269),
    (0.798691636, 0.849786142, 0.931688648),
    (0.833466556, 0.860207984, 0.901068838),
    (0.865395197, 0.86541021, 0.865395561),
    (0.897787179, 0.848937047, 0.820880546),
    (0.924127593, 0.827384882, 0.774508472),
    (0.944468518, 0.800927443, 0.726736146),
    (0.958852946, 0.769767752, 0.678007945),
    (0.96732803, 0.734132809, 0.628751763),
    (0.969954137, 0.694266682, 0.579375448),
    (0.966811177, 0.650421156, 0.530263762),
    (0.958003065, 0.602842431, 0.481775914),
    (0.943660866, 0.551750968, 0.434243684),
    (0.923944917, 0.49730856, 0.387970225),
    (0.89904617, 0.439559467, 0.343229596),
    (0.869186849, 0.378313092, 0.300267182),
    (0.834620542, 0.312874446, 0.259301199),
    (0.795631745, 0.24128379, 0.220525627),
    (0.752534934, 0.157246067, 0.184115123),
    (0.705673158, 0.01555616, 0.150232812),
)

CHANNEL_ORDERS = ("rgb", "bgr")


@dataclass(frozen=True, eq=False)
class Colormap:
    """Immutable 33-stop RGB palette.

    Attributes
    ----------
    name : str
        Palette label for logs and summaries
    stops : np.ndarray
        Shape (33, 3), FP32 RGB in [0, 1], write-protected
    """
    name: str
    stops: np.ndarray

    def __post_init__(self):
        stops = np.array(self.stops, dtype=np.float32)
        if stops.shape != (NUM_STOPS, 3):
            raise ValueError(f"Colormap must have shape ({NUM_STOPS}, 3), got {stops.shape}")
        if not np.all(np.isfinite(stops)) or stops.min() < 0.0 or stops.max() > 1.0:
            raise ValueError("Colormap channels must be finite and within [0, 1]")
        stops.setflags(write=False)
        object.__setattr__(self, 'stops', stops)

    @classmethod
    def from_stops(cls, stops: Sequence[Sequence[float]], name: str = "custom") -> "Colormap":
        return cls(name=name, stops=np.asarray(stops, dtype=np.float32))

    @classmethod
    def default(cls) -> "Colormap":
        """The coolwarm palette used for all saliency maps."""
        return cls(name="coolwarm", stops=np.asarray(COOLWARM_33, dtype=np.float32))

    def __len__(self) -> int:
        return NUM_STOPS


def interpolate_colormap(values: np.ndarray, colormap: Colormap) -> np.ndarray:
    """Piecewise-linear palette lookup.

    Parameters
    ----------
    values : np.ndarray
        Normalized density, any shape, expected in [0, 1]; values outside
        are clipped so indices stay inside the palette
    colormap : Colormap
        Palette to interpolate

    Returns
    -------
    np.ndarray
        Shape values.shape + (3,), FP32 RGB in [0, 1]. v == 0 gives exactly
        stops[0] and v == 1 gives exactly stops[32].
    """
    v = np.clip(np.asarray(values, dtype=np.float32), 0.0, 1.0)
    idx = v * np.float32(NUM_STOPS - 1)
    lo = np.floor(idx)
    hi = np.ceil(idx)
    frac = (idx - lo)[..., None]

    stops = colormap.stops
    c_lo = stops[lo.astype(np.intp)]
    c_hi = stops[hi.astype(np.intp)]
    return (c_lo * (np.float32(1.0) - frac) + c_hi * frac).astype(np.float32, copy=False)


def quantize_channels(rgb: np.ndarray) -> np.ndarray:
    """Scale [0, 1] channels to 8 bits by truncation (no rounding)."""
    scaled = np.asarray(rgb, dtype=np.float32) * np.float32(255.0)
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


def colorize(
    normalized: np.ndarray,
    colormap: Colormap,
    channel_order: str = "rgb"
) -> np.ndarray:
    """Map a normalized density raster to an 8-bit color image.

    Parameters
    ----------
    normalized : np.ndarray
        Shape (H, W), values in [0, 1]
    colormap : Colormap
        Palette to apply
    channel_order : str
        "rgb" (default) or "bgr" for OpenCV-ordered rasters

    Returns
    -------
    np.ndarray
        Shape (H, W, 3), uint8
    """
    if channel_order not in CHANNEL_ORDERS:
        raise ValueError(f"Unknown channel order: {channel_order}. Use 'rgb' or 'bgr'.")

    colored = quantize_channels(interpolate_colormap(normalized, colormap))
    if channel_order == "bgr":
        colored = np.ascontiguousarray(colored[..., ::-1])
    return colored
