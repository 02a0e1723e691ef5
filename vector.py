from __future__ import annotations

"""
Vector classes for 2D and 3D operations.

Components may be plain floats or numpy arrays of equal shape, in which case
every operation applies lane-wise. The renderer relies on this to transform a
whole band of pixels with the same code path as a single direction.
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class Vec2:
    """Lightweight 2D vector with lane-wise numeric operations."""

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    def length(self) -> float:
        return np.sqrt(self.x * self.x + self.y * self.y)

    def angle(self) -> float:
        """Return angle in radians from positive x-axis."""
        return np.arctan2(self.y, self.x)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __truediv__(self, scalar: float) -> "Vec2":
        return Vec2(self.x / scalar, self.y / scalar)


@dataclass
class Vec3:
    """Lightweight 3D vector with lane-wise rotations.

    The three plane rotations share one convention: for angle ``a`` the first
    axis becomes ``cos(a) * u + sin(a) * v`` and the second
    ``-sin(a) * u + cos(a) * v``.
    """

    x: float
    y: float
    z: float

    @classmethod
    def in_plane(cls, angle: float) -> "Vec3":
        """Unit vector at ``angle`` inside the xy-plane."""
        return cls(np.cos(angle), np.sin(angle), np.zeros_like(angle))

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def length(self) -> float:
        return np.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def rotate_xz(self, angle: float) -> "Vec3":
        """Rotate within the xz-plane (about the y axis)."""
        c, s = np.cos(angle), np.sin(angle)
        return Vec3(c * self.x + s * self.z, self.y, -s * self.x + c * self.z)

    def rotate_yz(self, angle: float) -> "Vec3":
        """Rotate within the yz-plane (about the x axis)."""
        c, s = np.cos(angle), np.sin(angle)
        return Vec3(self.x, c * self.y + s * self.z, -s * self.y + c * self.z)

    def rotate_xy(self, angle: float) -> "Vec3":
        """Rotate within the xy-plane (about the z axis)."""
        c, s = np.cos(angle), np.sin(angle)
        return Vec3(c * self.x + s * self.y, -s * self.x + c * self.y, self.z)

    def to_equirectangular(self) -> tuple[float, float]:
        """Map a unit vector to normalized (longitude, latitude) texture coordinates.

        Longitude is ``(atan2(y, x) + pi) / 2pi`` and latitude ``acos(z) / pi``;
        z is clipped to [-1, 1] so rounding never yields NaN.
        """
        z = np.clip(self.z, -1.0, 1.0)
        phi = np.arccos(z) / np.pi
        theta = (np.arctan2(self.y, self.x) + np.pi) / (2.0 * np.pi)
        return theta, phi
