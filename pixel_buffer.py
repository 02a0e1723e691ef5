from __future__ import annotations

"""
Output pixel storage.

A frame lives in a linear buffer whose rows may be padded (the stride, in
pixels, can exceed the width). Pixel (x, y) is element ``x + y * stride``.
"""

from typing import Optional, Tuple

import numpy as np
from numpy.lib.stride_tricks import as_strided

# Byte order of one pixel in memory: a little-endian ARGB8888 word.
PIXEL_DTYPE = np.dtype([("b", np.uint8), ("g", np.uint8), ("r", np.uint8), ("a", np.uint8)])


class PixelBuffer:
    """Bounds-checked 2-D view over a strided linear pixel buffer."""

    def __init__(self, data, width: int, height: int, stride: Optional[int] = None) -> None:
        if width < 1 or height < 1:
            raise ValueError("buffer must be at least 1x1")
        stride = width if stride is None else stride
        if stride < width:
            raise ValueError(f"stride {stride} is smaller than width {width}")

        if isinstance(data, (bytearray, memoryview)):
            data = np.frombuffer(data, dtype=np.uint8)
        data = np.asarray(data)
        if not data.flags.c_contiguous:
            raise ValueError("pixel data must be contiguous")
        if data.dtype != PIXEL_DTYPE:
            if data.dtype != np.uint8:
                raise TypeError(f"pixel data must be uint8 or PIXEL_DTYPE, got {data.dtype}")
            data = data.reshape(-1)
            if data.size % PIXEL_DTYPE.itemsize:
                raise ValueError("byte buffer length is not a whole number of pixels")
            data = data.view(PIXEL_DTYPE)
        data = data.reshape(-1)

        needed = (height - 1) * stride + width
        if data.size < needed:
            raise ValueError(f"buffer holds {data.size} pixels, {needed} needed")

        self.data = data
        self.width = width
        self.height = height
        self.stride = stride

    @classmethod
    def allocate(cls, width: int, height: int, stride: Optional[int] = None) -> "PixelBuffer":
        stride = width if stride is None else stride
        return cls(np.zeros(stride * height, dtype=PIXEL_DTYPE), width, height, stride)

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    def address(self, x: int, y: int) -> int:
        """Linear index of pixel (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} buffer")
        return x + y * self.stride

    def __getitem__(self, xy: Tuple[int, int]):
        return self.data[self.address(*xy)]

    def __setitem__(self, xy: Tuple[int, int], value) -> None:
        self.data[self.address(*xy)] = value

    def view(self) -> np.ndarray:
        """Writable (height, width) view; padding pixels are not part of it."""
        itemsize = PIXEL_DTYPE.itemsize
        return as_strided(self.data, shape=(self.height, self.width),
                          strides=(self.stride * itemsize, itemsize))

    def write_rows(self, y_start: int, rows: np.ndarray) -> None:
        """Copy a (rows, width) band starting at row ``y_start``."""
        rows = np.asarray(rows, dtype=PIXEL_DTYPE)
        if rows.ndim != 2 or rows.shape[1] != self.width or not 0 <= y_start <= self.height - rows.shape[0]:
            raise IndexError(f"band of shape {rows.shape} at row {y_start} does not fit the buffer")
        self.view()[y_start:y_start + rows.shape[0]] = rows

    def to_rgb(self) -> np.ndarray:
        """(height, width, 3) uint8 copy in RGB order."""
        pixels = self.view()
        return np.stack([pixels["r"], pixels["g"], pixels["b"]], axis=-1)

    def tobytes(self) -> bytes:
        return self.data.tobytes()
