import math

import numpy as np
import pytest
from pathlib import Path
import sys

# Add repo root to path
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from buddhabrot.color import Rgb, Rgba, Scalar
from buddhabrot.image import Image
from buddhabrot.postprocess import (
    apply_pipeline,
    black_point,
    clamp,
    colorize,
    exposure,
    fuse_channels,
    gamma,
    map_pixels,
    normalize,
)


def _mono(values, width):
    arr = np.asarray(values, dtype=np.float32).reshape(-1, width)
    return Image.from_array(arr, Scalar)


def test_normalize_scales_each_channel_to_one():
    im = Image(4, 2, Rgb)
    im.set((0, 0), Rgb(2.0, 8.0, 0.0))
    im.set((1, 1), Rgb(4.0, 2.0, 0.0))
    out = normalize(im)
    assert out.get((0, 0)) == Rgb(0.5, 1.0, 0.0)
    assert out.get((1, 1)) == Rgb(1.0, 0.25, 0.0)
    # input untouched
    assert im.get((0, 0)) == Rgb(2.0, 8.0, 0.0)


def test_normalize_empty_image():
    out = normalize(Image(4, 2))
    assert out.total() == Scalar(0.0)


def test_exposure_doubles_per_stop():
    out = exposure(_mono([0.25, 0.5], 2), 1.0)
    np.testing.assert_allclose(out.to_array().ravel(), [0.5, 1.0])


def test_gamma():
    out = gamma(_mono([0.25, 1.0, -1.0], 3), 2.0)
    np.testing.assert_allclose(out.to_array().ravel(), [0.5, 1.0, 0.0])
    with pytest.raises(ValueError):
        gamma(_mono([1.0], 1), 0.0)


def test_black_point():
    out = black_point(_mono([0.25, 0.75, 1.0], 3), 0.5)
    np.testing.assert_allclose(out.to_array().ravel(), [0.0, 0.5, 1.0])
    with pytest.raises(ValueError):
        black_point(_mono([1.0], 1), 1.0)


def test_clamp():
    out = clamp(_mono([-1.0, 0.5, 3.0], 3))
    np.testing.assert_allclose(out.to_array().ravel(), [0.0, 0.5, 1.0])


def test_map_pixels():
    im = Image(2, 2, Rgba)
    im.set((1, 0), Rgba(4.0, 9.0, 16.0, 25.0))
    out = map_pixels(im, math.sqrt)
    assert out.get((1, 0)) == Rgba(2.0, 3.0, 4.0, 5.0)


def test_colorize():
    out = colorize(_mono([0.0, 0.5, 1.0, 2.0], 2), "magma")
    assert out.color is Rgb
    assert out.shape == (2, 2)
    arr = out.to_array()
    assert arr.min() >= 0.0 and arr.max() <= 1.0
    # values above 1 are clipped onto the top of the map
    np.testing.assert_allclose(arr[1, 0], arr[1, 1])

    with pytest.raises(ValueError):
        colorize(Image(4, 2, Rgb))


def test_fuse_channels():
    r = _mono([1.0, 0.0], 2)
    g = _mono([2.0, 0.0], 2)
    b = _mono([3.0, 4.0], 2)
    out = fuse_channels(r, g, b)
    assert out.color is Rgb
    assert out.get((0, 0)) == Rgb(1.0, 2.0, 3.0)
    assert out.get((1, 0)) == Rgb(0.0, 0.0, 4.0)


def test_fuse_channels_rejects_bad_passes():
    with pytest.raises(ValueError):
        fuse_channels(Image(4, 2), Image(4, 2), Image(6, 2))
    with pytest.raises(ValueError):
        fuse_channels(Image(4, 2), Image(4, 2, Rgb), Image(4, 2))


def test_pipeline_output_in_unit_range():
    im = _mono([0.0, 10.0, 100.0, 1000.0], 2)
    out = apply_pipeline(im, gamma_value=2.2, exposure_stops=1.0)
    arr = out.to_array()
    assert arr.min() >= 0.0
    assert arr.max() == 1.0
