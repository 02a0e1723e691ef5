from __future__ import annotations

"""
Precomputed fate of every ray in the deflection fan.

A Schwarzschild hole is spherically symmetric, so a ray's fate depends only on
its angle to the line joining camera and hole. Slot ``i`` of the table stores,
for the i-th ray of the fan, whether it was captured (and where it crossed the
horizon) or escaped (and in which direction).
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple, Union

import numpy as np


class Outcome(IntEnum):
    CAPTURED = 0
    ESCAPED = 1


@dataclass(frozen=True, eq=False)
class OutcomeTable:
    """Immutable table of ``(angle, outcome)`` pairs, queried by fractional slot."""

    angles: np.ndarray    # float32[num]
    outcomes: np.ndarray  # uint8[num], values of Outcome

    def __post_init__(self) -> None:
        angles = np.array(self.angles, dtype=np.float32).reshape(-1)
        outcomes = np.array(self.outcomes, dtype=np.uint8).reshape(-1)
        if angles.shape != outcomes.shape:
            raise ValueError(
                f"angles and outcomes differ in length ({angles.size} != {outcomes.size})"
            )
        if angles.size < 2:
            raise ValueError("an outcome table needs at least 2 entries")
        if np.any(outcomes > Outcome.ESCAPED):
            raise ValueError("outcomes must be 0 (captured) or 1 (escaped)")
        angles.flags.writeable = False
        outcomes.flags.writeable = False
        # Frozen dataclass: bypass __setattr__ to store the normalized copies
        object.__setattr__(self, "angles", angles)
        object.__setattr__(self, "outcomes", outcomes)

    @classmethod
    def uniform(cls, num: int, angle: float, outcome: Outcome) -> "OutcomeTable":
        """Table where every slot holds the same entry."""
        return cls(np.full(num, angle, dtype=np.float32), np.full(num, int(outcome), dtype=np.uint8))

    @property
    def num(self) -> int:
        return int(self.angles.size)

    def __len__(self) -> int:
        return self.num

    def lookup(self, pos: Union[float, np.ndarray]) -> Tuple:
        """Interpolate the table at fractional slot ``pos``.

        Neighbouring slots with the same outcome are blended linearly. Across a
        capture/escape boundary the lower slot is returned as is, since blending
        angles from different fates is meaningless.

        Positions outside ``[0, num - 2]`` are clamped into it and NaN maps to
        slot 0. Scalars give ``(float, Outcome)``; arrays give arrays.
        """
        scalar = np.ndim(pos) == 0
        pos = np.asarray(pos, dtype=np.float32)
        pos = np.clip(np.nan_to_num(pos, nan=0.0), 0, self.num - 2)

        base = np.floor(pos)
        frac = pos - base
        posi = base.astype(np.intp)

        outcome = self.outcomes[posi]
        lower = self.angles[posi]
        upper = self.angles[posi + 1]
        blended = (np.float32(1.0) - frac) * lower + frac * upper
        angle = np.where(outcome != self.outcomes[posi + 1], lower, blended).astype(np.float32)

        if scalar:
            return float(angle), Outcome(int(outcome))
        return angle, outcome
