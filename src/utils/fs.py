"""Atomic filesystem operations for output images and YAML files.

Provides:
    - Atomic writes: tmp file → fsync → rename (no half-written outputs)
    - Encoder discovery: has_image_writer() for an output path's extension
    - Image save via PIL from uint8 numpy rasters
    - YAML load/save for configs and run summaries

All paths use pathlib.Path for cross-platform compatibility.

Usage:
    from src.utils import fs
    if fs.has_image_writer("salmap.jpg"):
        fs.atomic_save_image(rgb_u8, "salmap.jpg")
    fs.atomic_yaml_dump(summary, "outputs/salmap.yaml")
"""

import os
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
import yaml
from PIL import Image


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create directory (and parents) if missing, return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(
    path: Union[str, Path],
    data: bytes,
    tmp_suffix: str = ".tmp"
) -> None:
    """Write bytes to file atomically (tmp → fsync → rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path
    data : bytes
        Data to write
    tmp_suffix : str
        Temporary file suffix, default ".tmp"

    Raises
    ------
    RuntimeError
        If the write or rename fails; the tmp file is removed first
    """
    path = Path(path)
    ensure_dir(path.parent)
    tmp_path = path.with_suffix(path.suffix + tmp_suffix)

    try:
        with open(tmp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def has_image_writer(path: Union[str, Path]) -> bool:
    """Return True if PIL can encode an image to ``path``'s extension.

    Parameters
    ----------
    path : Union[str, Path]
        Output path; only the suffix is inspected (case-insensitive)

    Returns
    -------
    bool
        False for a missing or unknown extension, or a read-only format
    """
    suffix = Path(path).suffix.lower()
    if not suffix:
        return False
    Image.init()
    fmt = Image.registered_extensions().get(suffix)
    return fmt is not None and fmt in Image.SAVE


def atomic_save_image(img: np.ndarray, path: Union[str, Path]) -> None:
    """Save image atomically (prevents partial reads).

    Parameters
    ----------
    img : np.ndarray
        (H, W, 3) uint8 RGB or (H, W) uint8 grayscale
    path : Union[str, Path]
        Target file path (extension determines format)

    Raises
    ------
    ValueError
        If no encoder is registered for the extension
    RuntimeError
        If encoding or the final rename fails
    """
    path = Path(path)

    if not has_image_writer(path):
        raise ValueError(f"No image encoder available for '{path.suffix}': {path}")

    pil_img = Image.fromarray(np.ascontiguousarray(img))

    ensure_dir(path.parent)
    # Same extension on the tmp file so PIL picks the right encoder
    tmp_path = path.with_name(path.stem + ".tmp" + path.suffix)
    try:
        pil_img.save(tmp_path)
        tmp_path.replace(path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to save image {path} atomically: {e}") from e


def atomic_yaml_dump(obj: Any, path: Union[str, Path]) -> None:
    """Save a plain Python object (dict, list, primitives) as YAML atomically."""
    yaml_str = yaml.safe_dump(
        obj,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True
    )
    atomic_write_bytes(path, yaml_str.encode('utf-8'))


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Load YAML file safely.

    Parameters
    ----------
    path : Union[str, Path]
        YAML file path

    Returns
    -------
    Dict[str, Any]
        Parsed YAML content; an empty file yields an empty dict

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    yaml.YAMLError
        If YAML parsing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e
    return data if data is not None else {}
