from __future__ import annotations

"""
Null geodesics in the equatorial plane of a Schwarzschild black hole.

Rays are marched backwards from the camera (reversing a ray outside the
horizon retraces the same path), using plain fixed-step Euler integration in
single precision. Each ray is a lane; lanes never interact, so a whole fan is
integrated as numpy arrays and split into chunks for the worker pool.
"""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from lensing_config import DEFAULT_CONFIG, LensingConfig
from outcome_table import Outcome, OutcomeTable
from utilities import MathUtils, ParallelUtils

logger = logging.getLogger("lensing.geodesics")

LANES_PER_CHUNK = 512


def d2t(r, dt, dr, gm):
    """Second derivative of t. Not integrated: null_dt is recomputed each step
    instead, which keeps the path exactly null."""
    return -2.0 * gm / (r * (r - 2.0 * gm)) * dr * dt


def d2r(r, dt, dr, dtheta, gm):
    """Second derivative of r."""
    return (-gm / (r * r * r) * (r - 2.0 * gm) * dt * dt
            + gm / (r * (r - 2.0 * gm)) * dr * dr
            + (r - 2.0 * gm) * dtheta * dtheta)


def d2theta(r, dr, dtheta):
    """Second derivative of theta."""
    return -2.0 / r * dtheta * dr


def null_dt(r, dr, dtheta, gm):
    """dt that makes (r, dr, dtheta) a null path.

    Either root works since dt only appears squared in d2r and not at all in
    d2theta; the non-negative one is returned.
    """
    q = 1.0 - 2.0 * gm / r
    return np.sqrt(dr * dr / (q * q) + r * r * dtheta * dtheta / q)


def impact_parameter(ray_amt: float, start_r: float, gm: float) -> float:
    """Conserved L/E of the ray launched with offset ``ray_amt`` from ``start_r``.

    At launch dr = -1 and dtheta = -ray_amt / start_r, so L = start_r * |ray_amt|
    and E = q * dt = sqrt(1 + q * ray_amt**2) with q = 1 - 2GM/start_r.
    """
    q = 1.0 - 2.0 * gm / start_r
    return start_r * abs(ray_amt) / math.sqrt(1.0 + q * ray_amt * ray_amt)


def critical_impact_parameter(gm: float) -> float:
    """Rays coming in from infinity closer than 3*sqrt(3)*GM fall in."""
    return 3.0 * math.sqrt(3.0) * gm


@dataclass
class RayState:
    """Position and velocity of a batch of rays, one array element per lane."""

    r: np.ndarray       # Radial distance
    theta: np.ndarray   # Angular position
    dr: np.ndarray      # dr/dλ
    dtheta: np.ndarray  # dθ/dλ

    @classmethod
    def launch(cls, ray_amts, start_r: float) -> "RayState":
        """Rays leaving r = start_r on the negative z axis toward the hole.

        Ray i starts along the rectangular direction (dx, dz) = (ray_amts[i], 1).
        """
        dx = np.asarray(ray_amts, dtype=np.float32).reshape(-1)
        dz = np.ones_like(dx)
        start_r = np.float32(start_r)

        r = np.full_like(dx, start_r)
        theta = np.full_like(dx, np.float32(math.pi))  # We assume we're starting at x=0

        # Rectangular direction to Schwarzschild coordinate velocities
        dr = -start_r * dz / r
        dtheta = -start_r * dx / (r * r)
        return cls(r, theta, dr, dtheta)

    def __len__(self) -> int:
        return int(self.r.size)

    def dt(self, gm) -> np.ndarray:
        return null_dt(self.r, self.dr, self.dtheta, gm)

    def step(self, ts, gm) -> None:
        """One Euler step: velocities first, then positions from the new velocities."""
        dt = self.dt(gm)
        ddr = d2r(self.r, dt, self.dr, self.dtheta, gm)
        ddtheta = d2theta(self.r, self.dr, self.dtheta)

        self.dr += ts * ddr
        self.dtheta += ts * ddtheta

        self.r += ts * self.dr
        self.theta += ts * self.dtheta

    def select(self, mask: np.ndarray) -> "RayState":
        return RayState(self.r[mask], self.theta[mask], self.dr[mask], self.dtheta[mask])

    def capture_angle(self) -> np.ndarray:
        """Angle of the point where the ray crosses the horizon."""
        return np.float32(math.pi / 2.0) - self.theta

    def escape_angle(self) -> np.ndarray:
        """Angle of the ray's direction, projected back to rectangular coordinates."""
        cos_t = np.cos(self.theta)
        sin_t = np.sin(self.theta)
        dx = self.r * cos_t * self.dtheta + sin_t * self.dr
        dz = -self.r * sin_t * self.dtheta + cos_t * self.dr
        return np.arctan2(dz, dx)


def integrate_lanes(ray_amts, start_r: float,
                    config: LensingConfig = DEFAULT_CONFIG) -> Tuple[np.ndarray, np.ndarray]:
    """Integrate a batch of rays until each is captured, escapes, or runs out of steps.

    Returns ``(angles, outcomes)`` in the order of ``ray_amts``. Pure: nothing
    outside the returned arrays is touched.
    """
    state = RayState.launch(ray_amts, start_r)
    count = len(state)
    angles = np.zeros(count, dtype=np.float32)
    outcomes = np.full(count, Outcome.ESCAPED, dtype=np.uint8)

    ts = np.float32(config.time_step)
    gm = np.float32(config.gm)
    min_r = np.float32(config.min_r)
    escape_r = np.float32(config.escape_r)

    lanes = np.arange(count)
    diverged_total = 0

    for _ in range(config.num_iter):
        if lanes.size == 0:
            break
        state.step(ts, gm)

        captured = state.r <= min_r
        escaped = state.r > escape_r
        # NaN compares false against both thresholds; treat it as having fallen in
        diverged = np.isnan(state.r)
        finished = captured | escaped | diverged
        if not finished.any():
            continue

        fell = captured | diverged
        done = lanes[fell]
        angles[done] = state.capture_angle()[fell]
        outcomes[done] = Outcome.CAPTURED
        done = lanes[escaped]
        angles[done] = state.escape_angle()[escaped]
        outcomes[done] = Outcome.ESCAPED
        diverged_total += int(diverged.sum())

        keep = ~finished
        state = state.select(keep)
        lanes = lanes[keep]

    if lanes.size:
        # Step budget exhausted: the last direction is as good as it gets
        logger.debug("%d of %d rays hit the step limit; treating them as escaped",
                     lanes.size, count)
        angles[lanes] = state.escape_angle()
        outcomes[lanes] = Outcome.ESCAPED

    if diverged_total:
        logger.warning("%d rays diverged near the horizon; recorded as captured",
                       diverged_total)
    np.nan_to_num(angles, copy=False, nan=0.0, posinf=0.0, neginf=0.0)
    return angles, outcomes


def compute_outcomes(ray_min: float, ray_max: float, num: int, start_r: float,
                     config: LensingConfig = DEFAULT_CONFIG) -> OutcomeTable:
    """Build the outcome table for ``num`` rays whose offsets span [ray_min, ray_max]."""
    if num < 2:
        raise ValueError("num must be at least 2 for the table to be interpolable")

    slots = np.arange(num, dtype=np.float32)
    frac = slots / np.float32(num - 1)
    ray_amts = MathUtils.lerp(np.float32(ray_min), np.float32(ray_max), frac).astype(np.float32)

    workers = config.workers or ParallelUtils.default_workers()
    # Small batches are dominated by per-step overhead, so don't split below this
    chunks = ParallelUtils.chunk_ranges(num, min(workers, max(1, num // LANES_PER_CHUNK)))
    logger.debug("Integrating %d rays in %d chunks (start_r=%g)", num, len(chunks), start_r)
    logger.debug("Impact parameters %.3f..%.3f, capture below %.3f",
                 impact_parameter(ray_min, start_r, config.gm),
                 impact_parameter(ray_max, start_r, config.gm),
                 critical_impact_parameter(config.gm))

    def run_chunk(bounds: Tuple[int, int]) -> Tuple[np.ndarray, np.ndarray]:
        lo, hi = bounds
        return integrate_lanes(ray_amts[lo:hi], start_r, config)

    results = ParallelUtils.parallel_map(run_chunk, chunks, workers)
    angles = np.concatenate([a for a, _ in results])
    outcomes = np.concatenate([o for _, o in results])

    captured = int(np.count_nonzero(outcomes == Outcome.CAPTURED))
    logger.info("Outcome table ready: %d captured, %d escaped", captured, num - captured)
    return OutcomeTable(angles, outcomes)
