"""
Tone mapping and channel fusion for sampled density images.

Every filter takes an Image and returns a new Image of the same shape; the
input is left untouched.
"""

from __future__ import annotations

import numpy as np
from matplotlib import colormaps

from buddhabrot.color import Rgb, Scalar
from buddhabrot.image import Image


def _rebuild(image: Image, arr: np.ndarray) -> Image:
    return Image.from_array(arr, image.color)


def normalize(image: Image) -> Image:
    """Divide each channel by its peak so the brightest pixel is 1."""
    arr = image.to_array()
    peak = image.color.empty()
    if arr.size:
        peak = peak.max(image.color.from_tuple(arr.max(axis=(0, 1))))
    # an empty channel has nothing to scale; keep it at zero
    divisor = peak.map(lambda v: v if v > 0 else 1.0)
    return _rebuild(image, arr / divisor.as_array())


def map_pixels(image: Image, f) -> Image:
    """Apply a scalar function to every component of every pixel."""
    out = Image(image.size, image.width, image.color)
    for dst, src in zip(out.pixels_mut(), image.pixels()):
        dst.assign(src.map(f))
    return out


def exposure(image: Image, stops: float) -> Image:
    return _rebuild(image, image.to_array() * np.float32(2.0 ** stops))


def gamma(image: Image, g: float) -> Image:
    if g <= 0:
        raise ValueError(f"Gamma must be positive, got {g}")
    arr = np.clip(image.to_array(), 0.0, None)
    return _rebuild(image, arr ** (1.0 / g))


def black_point(image: Image, level: float) -> Image:
    """Map `level` to 0 and 1 to 1, clipping anything below the level."""
    if not 0.0 <= level < 1.0:
        raise ValueError(f"Black point must lie in [0, 1), got {level}")
    arr = (image.to_array() - level) / (1.0 - level)
    return _rebuild(image, np.clip(arr, 0.0, None))


def clamp(image: Image, low: float = 0.0, high: float = 1.0) -> Image:
    if low > high:
        raise ValueError(f"Clamp bounds are reversed: {low} > {high}")
    return _rebuild(image, np.clip(image.to_array(), low, high))


def colorize(image: Image, cmap: str = "magma") -> Image:
    """Map a Scalar image in [0, 1] through a matplotlib colormap into Rgb."""
    if image.color is not Scalar:
        raise ValueError(f"colorize needs a Scalar image, got {image.color.__name__}")
    mapper = colormaps[cmap]
    values = np.clip(image.to_array()[:, :, 0], 0.0, 1.0)
    rgb = mapper(values)[:, :, :3]
    return Image.from_array(rgb.astype(np.float32), Rgb)


def fuse_channels(red: Image, green: Image, blue: Image) -> Image:
    """
    Combine three single-channel histograms (one sampling pass each) into a
    single Rgb image.
    """
    for name, im in (("red", red), ("green", green), ("blue", blue)):
        if im.color is not Scalar:
            raise ValueError(f"{name} pass must be a Scalar image, got {im.color.__name__}")
        if im.shape != red.shape:
            raise ValueError(f"{name} pass is {im.width}x{im.height}, expected {red.width}x{red.height}")
    arr = np.concatenate([red.to_array(), green.to_array(), blue.to_array()], axis=2)
    return Image.from_array(arr, Rgb)


def apply_pipeline(image: Image, *, normalize_first=True, exposure_stops=0.0, gamma_value=1.0,
                   black=0.0, clamp_output=True, cmap=None) -> Image:
    """Run the usual tone-mapping chain in a fixed order."""
    if normalize_first:
        image = normalize(image)
    if exposure_stops:
        image = exposure(image, exposure_stops)
    if black:
        image = black_point(image, black)
    if gamma_value != 1.0:
        image = gamma(image, gamma_value)
    if clamp_output:
        image = clamp(image)
    if cmap:
        image = colorize(image, cmap)
    return image
