"""
Pixel value types for density images.

Three variants share one interface:
    Scalar -> single intensity, used for per-channel histograms
    Rgb    -> red, green, blue
    Rgba   -> red, green, blue, alpha

Components live in a small float32 vector. A value built with `_view`
shares that vector with an Image row, so in-place operations write through.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

DTYPE = np.float32


class ColorChannel(Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    ALPHA = "alpha"


class Color:
    channels = 0
    names: tuple = ()
    # channel -> component index; a missing key means the variant lacks it
    _index: dict = {}

    __slots__ = ("_data",)

    def __init__(self, *components):
        if len(components) != self.channels:
            raise ValueError(
                f"{type(self).__name__} takes {self.channels} components, got {len(components)}"
            )
        self._data = np.array(components, dtype=DTYPE)

    @classmethod
    def _view(cls, data: np.ndarray) -> "Color":
        obj = cls.__new__(cls)
        obj._data = data
        return obj

    @classmethod
    def empty(cls) -> "Color":
        return cls._view(np.zeros(cls.channels, dtype=DTYPE))

    @classmethod
    def one(cls, channel: ColorChannel) -> "Color":
        """Unit contribution along `channel`."""
        if channel not in cls._index:
            raise ValueError(f"{cls.__name__} has no {channel.value} channel")
        data = np.zeros(cls.channels, dtype=DTYPE)
        data[cls._index[channel]] = 1.0
        return cls._view(data)

    @classmethod
    def from_tuple(cls, value) -> "Color":
        if len(value) != cls.channels:
            raise ValueError(f"{cls.__name__} takes {cls.channels} components, got {len(value)}")
        return cls(*value)

    def as_tuple(self) -> tuple:
        return tuple(float(v) for v in self._data)

    def as_array(self) -> np.ndarray:
        return self._data.copy()

    def copy(self) -> "Color":
        return type(self)._view(self._data.copy())

    def add(self, rhs: "Color") -> "Color":
        self._data += rhs._data
        return self

    def assign(self, rhs: "Color") -> "Color":
        self._data[...] = rhs._data
        return self

    def max(self, rhs: "Color") -> "Color":
        return type(self)._view(np.maximum(self._data, rhs._data))

    def map(self, f) -> "Color":
        return type(self)._view(np.array([f(v) for v in self._data], dtype=DTYPE))

    def cdiv_assign(self, rhs: "Color") -> "Color":
        self._data /= rhs._data
        return self

    def to_triple(self) -> tuple:
        return tuple(float(v) for v in self._data[:3])

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self):
        parts = ", ".join(f"{n}={float(v):g}" for n, v in zip(self.names, self._data))
        return f"{type(self).__name__}({parts})"


class Scalar(Color):
    channels = 1
    names = ("value",)
    # a monochrome histogram takes a unit hit from any channel
    _index = {ch: 0 for ch in ColorChannel}

    __slots__ = ()

    def __init__(self, value: float = 0.0):
        super().__init__(value)

    @property
    def value(self) -> float:
        return float(self._data[0])

    def to_triple(self) -> tuple:
        v = self.value
        return (v, v, v)


class Rgb(Color):
    channels = 3
    names = ("r", "g", "b")
    _index = {ColorChannel.RED: 0, ColorChannel.GREEN: 1, ColorChannel.BLUE: 2}

    __slots__ = ()

    def __init__(self, r: float = 0.0, g: float = 0.0, b: float = 0.0):
        super().__init__(r, g, b)

    r = property(lambda self: float(self._data[0]))
    g = property(lambda self: float(self._data[1]))
    b = property(lambda self: float(self._data[2]))


class Rgba(Color):
    channels = 4
    names = ("r", "g", "b", "a")
    _index = {
        ColorChannel.RED: 0,
        ColorChannel.GREEN: 1,
        ColorChannel.BLUE: 2,
        ColorChannel.ALPHA: 3,
    }

    __slots__ = ()

    def __init__(self, r: float = 0.0, g: float = 0.0, b: float = 0.0, a: float = 0.0):
        super().__init__(r, g, b, a)

    r = property(lambda self: float(self._data[0]))
    g = property(lambda self: float(self._data[1]))
    b = property(lambda self: float(self._data[2]))
    a = property(lambda self: float(self._data[3]))


VARIANTS = {"scalar": Scalar, "rgb": Rgb, "rgba": Rgba}
