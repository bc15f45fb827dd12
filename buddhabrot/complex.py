from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np


@dataclass(frozen=True)
class Complex:
    """
    A (re, im) pair closed under the field operations used by z^2 + c.

    Components can be Python floats, NumPy scalars (float32/float64), or
    NumPy arrays of equal shape; every operation is element-wise, so the
    same type drives both the scalar trajectory and the batched kernel.
    """

    re: Any
    im: Any

    @classmethod
    def from_tuple(cls, value) -> "Complex":
        return cls(value[0], value[1])

    def as_tuple(self) -> tuple:
        return (self.re, self.im)

    def map(self, f: Callable) -> "Complex":
        """Apply f to the real and imaginary parts."""
        return Complex(f(self.re), f(self.im))

    def zip(self, rhs: "Complex") -> "Complex":
        return Complex((self.re, rhs.re), (self.im, rhs.im))

    def abs(self):
        # hypot instead of sqrt(re^2 + im^2): no intermediate overflow
        return np.hypot(self.re, self.im)

    def __add__(self, rhs):
        if isinstance(rhs, Complex):
            return Complex(self.re + rhs.re, self.im + rhs.im)
        return Complex(self.re + rhs, self.im + rhs)

    def __sub__(self, rhs):
        if isinstance(rhs, Complex):
            return Complex(self.re - rhs.re, self.im - rhs.im)
        return Complex(self.re - rhs, self.im - rhs)

    def __mul__(self, rhs):
        if isinstance(rhs, Complex):
            return Complex(
                self.re * rhs.re - self.im * rhs.im,
                self.re * rhs.im + self.im * rhs.re,
            )
        return Complex(self.re * rhs, self.im * rhs)

    def __truediv__(self, rhs):
        if isinstance(rhs, Complex):
            denom = rhs.re * rhs.re + rhs.im * rhs.im
            return Complex(
                (self.re * rhs.re + self.im * rhs.im) / denom,
                (self.im * rhs.re - self.re * rhs.im) / denom,
            )
        return Complex(self.re / rhs, self.im / rhs)

    def __complex__(self) -> complex:
        return complex(float(self.re), float(self.im))
