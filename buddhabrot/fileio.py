"""
Reading and writing density images.

Raster formats go through Pillow as 8-bit RGB (any extension Pillow can
write). Floating-point data is stored as a (height, width, channels) float32
NumPy array in a `.npy` file so nothing is lost to quantisation.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image as PILImage

from buddhabrot.color import Rgb
from buddhabrot.image import Image

FLOAT_SUFFIXES = {".npy"}


def to_rgb8(image: Image) -> np.ndarray:
    """(height, width, 3) uint8 array; values are clipped to [0, 1] first."""
    arr = image.to_array()
    if image.color.channels == 1:
        arr = np.repeat(arr, 3, axis=2)
    else:
        # same as Color.to_triple: alpha is dropped
        arr = arr[:, :, :3]
    return (np.clip(arr, 0.0, 1.0) * 255).astype(np.uint8)


def save_raster(image: Image, path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    PILImage.fromarray(to_rgb8(image)).save(path)
    return path


def load_raster(path) -> Image:
    with PILImage.open(path) as im:
        arr = np.asarray(im.convert("RGB"), dtype=np.float32) / 255.0
    return Image.from_array(arr, Rgb)


def save_float(image: Image, path) -> Path:
    path = Path(path)
    if path.suffix.lower() not in FLOAT_SUFFIXES:
        raise ValueError(f"Unsupported float format: {path.suffix or path.name}")
    path.parent.mkdir(parents=True, exist_ok=True)
    np.save(path, image.to_array())
    return path


def load_float(path, color=None) -> Image:
    return Image.from_array(np.load(path), color)


def save(image: Image, path) -> Path:
    """Pick a codec from the file suffix."""
    if Path(path).suffix.lower() in FLOAT_SUFFIXES:
        return save_float(image, path)
    return save_raster(image, path)
