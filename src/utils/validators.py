"""YAML schema validation and config loading.

Provides centralized validation for run configuration using pydantic:
    - Saliency map schema (saliency_map.v1.yaml): input/output paths, raster
      size, visual-angle smoothing, blend ratio, compute backend

All entrypoints load configs through these validators for fail-fast error
detection with actionable messages (offending keys, expected ranges).

Units:
    - Raster size: pixels
    - Sigma: degrees of visual angle
    - Pixel-per-degree ratio: px/deg
    - Blend ratio: [0.0, 1.0], weight of the saliency map over the stimulus

Usage:
    from src.utils import validators

    cfg = validators.load_saliency_config("configs/saliency_map.v1.yaml")
    cfg = validators.apply_overrides(cfg, {"smoothing": {"sigma_deg": 1.5}})
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# SALIENCY MAP SCHEMA V1
# ============================================================================

class IOPaths(BaseModel):
    """Input and output locations."""
    model_config = ConfigDict(extra="forbid")

    fixlist_path: Optional[str] = Field(
        None, description="CSV fixation list (header + one X,Y pair per line); mandatory at run time"
    )
    stimulus_path: Optional[str] = Field(None, description="Image to blend under the saliency map")
    output_path: str = Field("./salmap.jpg", description="Output image path (extension selects encoder)")
    summary_path: Optional[str] = Field(None, description="Optional YAML run summary path")

    @field_validator('output_path')
    @classmethod
    def validate_output_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("output_path must be non-empty")
        return v


class RasterSize(BaseModel):
    """Output raster dimensions (px)."""
    model_config = ConfigDict(extra="forbid")

    width: int = Field(1920, gt=0, description="Output width (px)")
    height: int = Field(1080, gt=0, description="Output height (px)")


class SmoothingParams(BaseModel):
    """Gaussian smoothing in visual-angle units."""
    model_config = ConfigDict(extra="forbid")

    sigma_deg: float = Field(2.0, gt=0.0, description="Gaussian sigma (deg of visual angle)")
    px_per_deg: float = Field(60.0, gt=0.0, description="Pixel-per-degree conversion factor")


class BlendParams(BaseModel):
    """Compositing over the stimulus image."""
    model_config = ConfigDict(extra="forbid")

    ratio: float = Field(0.5, ge=0.0, le=1.0, description="Saliency map weight; stimulus gets 1 - ratio")


class ComputeParams(BaseModel):
    """Compute backend for the smoothing and colorization stages."""
    model_config = ConfigDict(extra="forbid")

    backend: str = Field("opencv", description="'opencv' (reference) or 'torch'")
    device: str = Field("auto", description="Torch device: 'auto', 'cpu', 'cuda' or 'cuda:N'")

    @field_validator('backend')
    @classmethod
    def validate_backend(cls, v: str) -> str:
        allowed = ["opencv", "torch"]
        if v not in allowed:
            raise ValueError(f"Backend must be one of {allowed}, got '{v}'")
        return v

    @field_validator('device')
    @classmethod
    def validate_device(cls, v: str) -> str:
        if v in ("auto", "cpu", "cuda"):
            return v
        if v.startswith("cuda:") and v[len("cuda:"):].isdigit():
            return v
        raise ValueError(f"Device must be 'auto', 'cpu', 'cuda' or 'cuda:N', got '{v}'")


class SaliencyConfigV1(BaseModel):
    """Saliency map run configuration (saliency_map.v1.yaml schema)."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    schema_version: str = Field("saliency_map.v1", alias="schema", description="Schema version")
    io: IOPaths = Field(default_factory=IOPaths)
    raster: RasterSize = Field(default_factory=RasterSize)
    smoothing: SmoothingParams = Field(default_factory=SmoothingParams)
    blend: BlendParams = Field(default_factory=BlendParams)
    compute: ComputeParams = Field(default_factory=ComputeParams)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "saliency_map.v1":
            raise ValueError(f"Expected schema 'saliency_map.v1', got '{v}'")
        return v


# ============================================================================
# PUBLIC API
# ============================================================================

def load_saliency_config(path: Union[str, Path]) -> SaliencyConfigV1:
    """Load and validate a saliency map config from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to saliency_map.v1.yaml file

    Returns
    -------
    SaliencyConfigV1
        Validated configuration

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Saliency config not found: {path}")

    data = fs.load_yaml(path)
    try:
        return SaliencyConfigV1(**data)
    except Exception as e:
        raise ValueError(f"Saliency config validation failed at {path}: {e}") from e


def apply_overrides(cfg: SaliencyConfigV1, overrides: Dict[str, Dict[str, Any]]) -> SaliencyConfigV1:
    """Return a new validated config with section values replaced.

    Parameters
    ----------
    cfg : SaliencyConfigV1
        Base configuration (not mutated)
    overrides : dict
        ``{section: {key: value}}``; None values are ignored so unset CLI
        flags fall through to the base config

    Raises
    ------
    ValueError
        If the merged config fails validation
    """
    data = cfg.model_dump(by_alias=True)
    for section, values in overrides.items():
        if section not in data or not isinstance(data[section], dict):
            raise ValueError(f"Unknown config section: '{section}'")
        for key, value in values.items():
            if value is not None:
                data[section][key] = value
    try:
        return SaliencyConfigV1(**data)
    except Exception as e:
        raise ValueError(f"Invalid configuration override: {e}") from e
