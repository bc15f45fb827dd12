"""
Dense row-major pixel buffer holding one Color variant.

Pixel (x, y) lives at index y*width + x. Coordinates passed to get/set/add
are not bounds-checked beyond what NumPy indexing does; callers that may
produce out-of-window coordinates use `is_inside` first.
"""

from __future__ import annotations

from typing import Iterator, Tuple, Type

import numpy as np

from buddhabrot.color import DTYPE, VARIANTS, Color, Scalar

Pixel = Tuple[int, int]


class Image:
    def __init__(self, size: int, width: int, color: Type[Color] = Scalar):
        if width <= 0:
            raise ValueError(f"Image width must be positive, got {width}")
        if size < 0 or size % width != 0:
            raise ValueError(f"Image size {size} is not a multiple of width {width}")
        self.size = int(size)
        self.width = int(width)
        self.height = self.size // self.width
        self.color = color
        self._data = np.zeros((self.size, color.channels), dtype=DTYPE)

    @classmethod
    def with_shape(cls, width: int, height: int, color: Type[Color] = Scalar) -> "Image":
        return cls(width * height, width, color)

    @classmethod
    def from_array(cls, arr: np.ndarray, color: Type[Color] = None) -> "Image":
        """
        Build an image from a (height, width) or (height, width, channels)
        array. The Color variant is inferred from the channel count when not
        given.
        """
        arr = np.asarray(arr)
        if arr.ndim == 2:
            arr = arr[:, :, None]
        if arr.ndim != 3:
            raise ValueError(f"Expected a 2-D or 3-D array, got shape {arr.shape}")
        height, width, channels = arr.shape
        if color is None:
            by_channels = {c.channels: c for c in VARIANTS.values()}
            if channels not in by_channels:
                raise ValueError(f"No color variant has {channels} channels")
            color = by_channels[channels]
        if channels != color.channels:
            raise ValueError(f"{color.__name__} needs {color.channels} channels, array has {channels}")
        im = cls(width * height, width, color)
        im._data[...] = arr.reshape(width * height, channels)
        return im

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    def _index(self, px: Pixel) -> int:
        return px[1] * self.width + px[0]

    def get(self, px: Pixel) -> Color:
        return self.color._view(self._data[self._index(px)].copy())

    def set(self, px: Pixel, col: Color):
        self._data[self._index(px)] = col._data

    def add(self, px: Pixel, col: Color):
        self.color._view(self._data[self._index(px)]).add(col)

    def swap(self, p1: Pixel, p2: Pixel):
        i, j = self._index(p1), self._index(p2)
        self._data[[i, j]] = self._data[[j, i]]

    def is_inside(self, px: Pixel) -> bool:
        return 0 <= px[0] < self.width and 0 <= px[1] < self.height

    def add_indices(self, flat: np.ndarray, col: Color):
        """Add `col` once for every occurrence of each flat index."""
        counts = np.bincount(np.asarray(flat, dtype=np.int64), minlength=self.size)
        self._data += counts[:, None].astype(DTYPE) * col._data

    def merge(self, other: "Image"):
        """Pixel-wise add of an identically shaped image."""
        if other.color is not self.color:
            raise ValueError(f"Cannot merge {other.color.__name__} image into {self.color.__name__} image")
        if (other.size, other.width) != (self.size, self.width):
            raise ValueError(
                f"Cannot merge {other.width}x{other.height} image into {self.width}x{self.height} image"
            )
        self._data += other._data

    def total(self) -> Color:
        """Sum over every pixel, per channel."""
        return self.color._view(self._data.sum(axis=0, dtype=np.float64).astype(DTYPE))

    def to_array(self) -> np.ndarray:
        return self._data.reshape(self.height, self.width, self.color.channels).copy()

    def pixels(self) -> Iterator[Color]:
        for row in self._data:
            yield self.color._view(row.copy())

    def pixels_mut(self) -> Iterator[Color]:
        for row in self._data:
            yield self.color._view(row)

    def enumerate_pixels(self) -> Iterator[Tuple[int, int, Color]]:
        for i, row in enumerate(self._data):
            yield i % self.width, i // self.width, self.color._view(row.copy())

    def enumerate_pixels_mut(self) -> Iterator[Tuple[int, int, Color]]:
        for i, row in enumerate(self._data):
            yield i % self.width, i // self.width, self.color._view(row)

    def into_pixels(self) -> Iterator[Tuple[int, int, Color]]:
        """
        Consuming iteration: the buffer is handed to the generator and the
        image is left empty-handed, so it can only be walked once.
        """
        data, self._data = self._data, None
        width = self.width

        def gen():
            for i, row in enumerate(data):
                yield i % width, i // width, self.color._view(row)

        return gen()

    def __repr__(self):
        return f"Image({self.width}x{self.height}, {self.color.__name__})"
