from __future__ import annotations

"""
Per-pixel lensing renderer.

Every pixel is treated as a ray leaving the camera at an angle proportional
to its distance from the screen centre. The outcome table says where that
ray ends up; the result is turned into a 3-D direction, oriented by the
camera, and used to sample either the skybox or the event horizon texture.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from lensing_config import DEFAULT_CONFIG, LensingConfig
from outcome_table import Outcome, OutcomeTable
from pixel_buffer import PIXEL_DTYPE, PixelBuffer
from texture import Texture
from utilities import ParallelUtils
from vector import Vec2, Vec3

logger = logging.getLogger("lensing.renderer")

ROWS_PER_BAND = 32


@dataclass(frozen=True)
class Camera:
    """Camera orientation, fixed for one render call."""

    yaw: float
    pitch: float

    @classmethod
    def from_cursor(cls, cx: float, cy: float, config: LensingConfig = DEFAULT_CONFIG) -> "Camera":
        """Cursor position (pixels) to yaw/pitch (radians)."""
        return cls(
            yaw=cx / config.camera_scale,
            pitch=(cy - config.pitch_offset) / config.camera_scale,
        )


def view_direction(angle_out, pixel_angle, camera: Camera) -> Vec3:
    """Direction a deflected ray came from, in world space.

    The xy-plane goes through the equator; x is the screen's x and z the
    screen's y. Start from the deflection angle inside the ray's orbital plane,
    turn that plane to the pixel's azimuth, then apply pitch and yaw.
    """
    return (Vec3.in_plane(angle_out)
            .rotate_xz(pixel_angle)
            .rotate_yz(np.float32(camera.pitch))
            .rotate_xy(np.float32(camera.yaw)))


def render_rows(y_start: int, y_stop: int, width: int, height: int, camera: Camera,
                table: OutcomeTable, sky: Texture, sphere: Texture, aa: int,
                config: LensingConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Shade rows ``[y_start, y_stop)`` of a ``width`` x ``height`` frame.

    Returns a (rows, width) PIXEL_DTYPE array. Reads its inputs only.
    """
    shape = (y_stop - y_start, width)
    xs = np.arange(width, dtype=np.float32)[None, :]
    ys = np.arange(y_start, y_stop, dtype=np.float32)[:, None]

    center = Vec2(np.float32(width) / np.float32(2.0), np.float32(height) / np.float32(2.0))
    # Both axes use the x resolution so pixels stay square
    half_width = np.float32(width // 2)
    radius_scale = np.float32(config.pixel_radius_scale)
    index_scale = np.float32(table.num) / np.float32(config.max_r)
    subpixels = np.arange(aa, dtype=np.float32) / np.float32(aa)

    totals = np.zeros(shape + (3,), dtype=np.int32)
    sample = np.empty(shape + (4,), dtype=np.uint8)

    for aa_x in range(aa):
        for aa_y in range(aa):
            p = (Vec2(xs + subpixels[aa_x], ys + subpixels[aa_y]) - center) / half_width

            r = p.length() * radius_scale
            angle_out, outcome = table.lookup(r * index_scale)

            direction = view_direction(angle_out, p.angle(), camera)
            theta, phi = direction.to_equirectangular()

            captured = outcome == Outcome.CAPTURED
            escaped = ~captured
            sample[captured] = sphere.sample(theta[captured], phi[captured])
            # We see the front of the event horizon but the back of the skybox
            sample[escaped] = sky.sample(-theta[escaped], phi[escaped])

            totals += sample[..., 1:]

    totals //= aa * aa

    rows = np.zeros(shape, dtype=PIXEL_DTYPE)
    rows["r"] = totals[..., 0]
    rows["g"] = totals[..., 1]
    rows["b"] = totals[..., 2]
    return rows


def render(buffer: PixelBuffer, cx: float, cy: float, sky: Texture, sphere: Texture,
           aa: int, table: OutcomeTable, config: LensingConfig = DEFAULT_CONFIG) -> None:
    """Render one frame into ``buffer``, writing every visible pixel once.

    ``table`` must be complete before this is called; it is only read.
    """
    if aa < 1:
        raise ValueError("aa must be at least 1")
    if buffer.width < 2:
        raise ValueError("frame must be at least 2 pixels wide")

    camera = Camera.from_cursor(cx, cy, config)
    bands = ParallelUtils.chunk_ranges(buffer.height, -(-buffer.height // ROWS_PER_BAND))

    def run_band(bounds: Tuple[int, int]) -> np.ndarray:
        y_start, y_stop = bounds
        return render_rows(y_start, y_stop, buffer.width, buffer.height, camera,
                           table, sky, sphere, aa, config)

    results = ParallelUtils.parallel_map(run_band, bands, config.workers)
    for (y_start, _), rows in zip(bands, results):
        buffer.write_rows(y_start, rows)
