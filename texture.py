from __future__ import annotations

"""
Read-only RGBA textures sampled like an OpenCL image with a
normalized / repeat / linear sampler.
"""

from typing import Sequence

import numpy as np

from utilities import ImageUtils, MathUtils


class Texture:
    """2-D RGBA image with wrap-around bilinear sampling.

    Texels are kept as float32 on the 0..255 scale, so an image loaded from
    bytes reproduces its byte values exactly wherever neighbouring texels agree.
    """

    def __init__(self, texels) -> None:
        data = np.asarray(texels)
        if data.ndim != 3 or data.shape[2] not in (3, 4) or data.shape[0] < 1 or data.shape[1] < 1:
            raise TypeError(f"texture must be an (H, W, 3|4) array, got shape {data.shape}")

        if np.issubdtype(data.dtype, np.floating):
            # Normalized [0, 1] input
            data = data.astype(np.float32) * np.float32(255.0)
        else:
            data = data.astype(np.float32)

        if data.shape[2] == 3:
            alpha = np.full(data.shape[:2] + (1,), 255.0, dtype=np.float32)
            data = np.concatenate([data, alpha], axis=2)

        data.flags.writeable = False
        self._texels = data

    @classmethod
    def from_file(cls, filepath: str) -> "Texture":
        return cls(ImageUtils.load_rgba(filepath))

    @classmethod
    def solid(cls, rgba: Sequence[int]) -> "Texture":
        """1x1 texture of a single byte colour."""
        return cls(np.array(rgba, dtype=np.uint8).reshape(1, 1, 4))

    @classmethod
    def black(cls) -> "Texture":
        return cls.solid((0, 0, 0, 0))

    @property
    def width(self) -> int:
        return self._texels.shape[1]

    @property
    def height(self) -> int:
        return self._texels.shape[0]

    @staticmethod
    def _wrap(coord, size: int):
        """Texel indices and blend weight along one axis, repeat addressing."""
        coord = np.nan_to_num(np.asarray(coord, dtype=np.float32), nan=0.0)
        s = (coord - np.floor(coord)) * np.float32(size) - np.float32(0.5)
        base = np.floor(s)
        weight = s - base
        i0 = np.mod(base.astype(np.int64), size)
        i1 = np.mod(i0 + 1, size)
        return i0, i1, weight[..., None]

    def sample(self, u, v) -> np.ndarray:
        """Bilinear sample at normalized coordinates; returns uint8 ``(..., 4)``
        in (alpha, red, green, blue) order."""
        i0, i1, a = self._wrap(u, self.width)
        j0, j1, b = self._wrap(v, self.height)
        tex = self._texels

        top = tex[j0, i0] + a * (tex[j0, i1] - tex[j0, i0])
        bottom = tex[j1, i0] + a * (tex[j1, i1] - tex[j1, i0])
        rgba = MathUtils.clamp_to_byte(top + b * (bottom - top))
        return rgba[..., [3, 0, 1, 2]]
