from __future__ import annotations

"""
A renderable scene: the outcome table for one ray fan plus the two textures.

The table is the expensive part. It is built once and reused for every frame
until the ray parameters change.
"""

import logging
import time
from typing import Optional, Tuple

from geodesics import compute_outcomes
from lens_renderer import render
from lensing_config import DEFAULT_CONFIG, LensingConfig, ViewerConfig
from outcome_table import OutcomeTable
from pixel_buffer import PixelBuffer
from texture import Texture
from utilities import ImageUtils

logger = logging.getLogger("lensing.scene")


class LensingScene:
    """Outcome table, sky and event horizon textures, and antialiasing factor."""

    def __init__(self, sky: Texture, sphere: Optional[Texture] = None, aa: int = 1,
                 num_outcomes: int = 8192, ray_min: float = 0.0, ray_max: float = 5.0,
                 start_r: float = 100.0, config: LensingConfig = DEFAULT_CONFIG) -> None:
        if aa < 1:
            raise ValueError("aa must be at least 1")
        self.sky = sky
        self.sphere = sphere if sphere is not None else Texture.black()
        self.aa = aa
        self.config = config
        self._table: Optional[OutcomeTable] = None
        self._table_key: Optional[Tuple[float, float, int, float]] = None
        self.set_ray_parameters(ray_min, ray_max, num_outcomes, start_r)

    @classmethod
    def from_viewer_config(cls, viewer: ViewerConfig,
                           config: LensingConfig = DEFAULT_CONFIG) -> "LensingScene":
        logger.info("Loading textures...")
        sky = Texture.from_file(viewer.sky_file)
        sphere = Texture.from_file(viewer.surface_file) if viewer.surface_file else None
        logger.info("Sky texture %dx%d from %s", sky.width, sky.height, viewer.sky_file)
        return cls(sky, sphere, aa=viewer.antialias, num_outcomes=viewer.num_outcomes,
                   ray_min=viewer.ray_min, ray_max=viewer.ray_max,
                   start_r=viewer.start_r, config=config)

    @property
    def table(self) -> OutcomeTable:
        return self._table

    def set_ray_parameters(self, ray_min: float, ray_max: float, num_outcomes: int,
                           start_r: float) -> bool:
        """Rebuild the outcome table if the fan changed. Returns True when rebuilt."""
        key = (float(ray_min), float(ray_max), int(num_outcomes), float(start_r))
        if key == self._table_key:
            return False

        logger.info("Generating %d outcomes over [%g, %g] from r=%g...",
                    num_outcomes, ray_min, ray_max, start_r)
        started = time.perf_counter()
        self._table = compute_outcomes(ray_min, ray_max, num_outcomes, start_r, self.config)
        self._table_key = key
        logger.info("Done in %.2fs", time.perf_counter() - started)
        return True

    def render(self, buffer: PixelBuffer, cx: float, cy: float) -> None:
        render(buffer, cx, cy, self.sky, self.sphere, self.aa, self._table, self.config)

    def render_frame(self, width: int, height: int, cx: float, cy: float) -> PixelBuffer:
        buffer = PixelBuffer.allocate(width, height)
        self.render(buffer, cx, cy)
        return buffer

    def snapshot(self, filepath: str, width: int, height: int, cx: float, cy: float) -> PixelBuffer:
        """Render one frame and save it as an RGB image."""
        buffer = self.render_frame(width, height, cx, cy)
        ImageUtils.save_rgb(filepath, buffer.to_rgb())
        logger.info("Saved %dx%d frame to %s", width, height, filepath)
        return buffer
