import numpy as np
import pytest
from pathlib import Path
import sys

# Add repo root to path
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from buddhabrot.complex import Complex


def test_field_operations():
    a = Complex(1.0, 2.0)
    b = Complex(3.0, 4.0)

    assert a + b == Complex(4.0, 6.0)
    assert b - a == Complex(2.0, 2.0)
    assert a * b == Complex(-5.0, 10.0)
    assert (a * b) / b == a


def test_real_scalar_operations():
    z = Complex(1.0, 2.0)

    assert z * 0.25 + 0.5 == Complex(0.75, 1.0)
    assert z - 1.0 == Complex(0.0, 1.0)
    assert z / 2.0 == Complex(0.5, 1.0)


def test_abs_uses_hypot():
    assert Complex(3.0, 4.0).abs() == 5.0
    # naive sqrt(re^2 + im^2) would overflow to inf here
    big = Complex(1e200, 1e200).abs()
    assert np.isfinite(big)
    np.testing.assert_allclose(big, np.sqrt(2.0) * 1e200)


def test_matches_builtin_complex():
    rng = np.random.default_rng(0)
    for re1, im1, re2, im2 in rng.uniform(-3, 3, size=(20, 4)):
        a, b = Complex(re1, im1), Complex(re2, im2)
        expected = complex(re1, im1) * complex(re2, im2) + complex(re1, im1)
        np.testing.assert_allclose(complex(a * b + a), expected, rtol=1e-12)


def test_map_zip_and_tuples():
    z = Complex.from_tuple((1.5, -2.5))
    assert z.as_tuple() == (1.5, -2.5)
    assert z.map(abs) == Complex(1.5, 2.5)
    assert z.zip(Complex(0.0, 1.0)) == Complex((1.5, 0.0), (-2.5, 1.0))


def test_array_components_are_elementwise():
    z = Complex(np.array([1.0, 0.0]), np.array([0.0, 1.0]))
    sq = z * z
    np.testing.assert_array_equal(sq.re, [1.0, -1.0])
    np.testing.assert_array_equal(sq.im, [0.0, 0.0])
    np.testing.assert_array_equal(z.abs(), [1.0, 1.0])


def test_nan_propagates():
    z = Complex(float("nan"), 0.0) * Complex(1.0, 1.0)
    assert np.isnan(z.re)
