from __future__ import annotations

"""
Configuration for the Schwarzschild lensing renderer.

LensingConfig holds the numerical and projection constants shared by the
geodesic integrator and the renderer. ViewerConfig holds what the host
application chooses: window size, antialiasing, the ray fan and the texture
assets.
"""

import argparse
import logging
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class LensingConfig:
    """Tuning constants for both kernels (geometric units, GM = 10)."""

    gm: float = 10.0                  # Mass parameter
    horizon_margin: float = 0.0001    # Keeps Euler steps off the 1/(r - 2GM) pole
    num_iter: int = 1_000_000         # Step budget per ray
    time_step: float = 0.01           # Affine parameter step
    escape_r: float = 500.0           # Past this radius a ray counts as escaped

    # Screen-space calibration. Hand-tuned, intentionally not derived from each other.
    max_r: float = 5.0                # Table index scale
    pixel_radius_scale: float = 3.0   # Screen radius scale
    camera_scale: float = 200.0       # Cursor pixels per radian
    pitch_offset: float = 600.0       # Cursor y that maps to zero pitch

    workers: Optional[int] = None     # Thread pool size, None = executor default

    def __post_init__(self) -> None:
        if self.gm <= 0:
            raise ValueError("gm must be positive")
        if self.horizon_margin < 0:
            raise ValueError("horizon_margin must be non-negative")
        if self.num_iter < 1:
            raise ValueError("num_iter must be at least 1")
        if self.time_step <= 0:
            raise ValueError("time_step must be positive")
        if self.escape_r <= self.min_r:
            raise ValueError("escape_r must lie outside the horizon")
        if self.max_r <= 0 or self.pixel_radius_scale <= 0 or self.camera_scale == 0:
            raise ValueError("projection scales must be positive")
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")

    @property
    def min_r(self) -> float:
        """Radius at which a ray is considered captured."""
        return 2.0 * self.gm + self.horizon_margin


DEFAULT_CONFIG = LensingConfig()


@dataclass(frozen=True)
class ViewerConfig:
    """Host-side parameters for the interactive viewer."""

    sky_file: str
    surface_file: Optional[str] = None

    # Window dimensions in pixels
    width: int = 1600
    height: int = 1200

    # Rays per pixel is antialias squared
    antialias: int = 4

    # Ray fan used to build the outcome table
    num_outcomes: int = 8192
    ray_min: float = 0.0
    ray_max: float = 5.0
    start_r: float = 100.0

    # Fraction of the way the effective cursor moves toward the real one each frame
    mouse_smoothing: float = 0.25

    show_fps: bool = False
    fps_interval: int = 100

    # Render a single frame to this file instead of opening a window
    output: Optional[str] = None
    log_level: int = logging.INFO

    def __post_init__(self) -> None:
        if self.width < 2 or self.height < 1:
            raise ValueError("window must be at least 2x1 pixels")
        if self.antialias < 1:
            raise ValueError("antialias must be at least 1")
        if self.num_outcomes < 2:
            raise ValueError("num_outcomes must be at least 2")
        if not 0.0 < self.mouse_smoothing <= 1.0:
            raise ValueError("mouse_smoothing must be in (0, 1]")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blackhole-lensing",
        description="Visualizes Schwarzschild black holes",
    )
    parser.add_argument("--width", type=int, default=1600,
                        help="Width of the image to create")
    parser.add_argument("--height", type=int, default=1200,
                        help="Height of the image to create")
    parser.add_argument("--antialias", "--aa", dest="antialias", type=int, default=4,
                        help="Antialiasing factor. Number of rays per pixel will be the square of this number.")
    parser.add_argument("--sky-file", dest="sky_file", metavar="FILENAME", required=True,
                        help="Filename for the skybox")
    parser.add_argument("--surface-file", dest="surface_file", metavar="FILENAME",
                        help="Filename for the event horizon texture (defaults to solid black)")
    parser.add_argument("--outcomes", dest="num_outcomes", type=int, default=8192,
                        help="Number of entries in the precomputed outcome table")
    parser.add_argument("--fps", dest="show_fps", action="store_true",
                        help="Periodically print frame rate")
    parser.add_argument("--output", metavar="FILENAME",
                        help="Render one frame to this image file and exit")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> ViewerConfig:
    """Build a ViewerConfig from command line arguments."""
    args = build_arg_parser().parse_args(argv)
    return ViewerConfig(
        sky_file=args.sky_file,
        surface_file=args.surface_file,
        width=args.width,
        height=args.height,
        antialias=args.antialias,
        num_outcomes=args.num_outcomes,
        show_fps=args.show_fps,
        output=args.output,
        log_level=logging.DEBUG if args.verbose else logging.INFO,
    )
