import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
import OpenGL  # Only used for package version metadata
import PIL
from PIL import Image

"""
Comprehensive utility functions for the lensing renderer.
Organized into logical sections for different functionality areas.
"""

T = TypeVar("T")
R = TypeVar("R")

# =============================================================================
# MATHEMATICAL UTILITIES
# =============================================================================

class MathUtils:
    """Mathematical utility functions."""

    @staticmethod
    def lerp(start, end, t):
        """Linear interpolation, written as ``end * t + start * (1 - t)``."""
        return end * t + start * (1 - t)

    @staticmethod
    def clamp_to_byte(values) -> np.ndarray:
        """Clamp to [0, 255] then truncate toward zero into uint8.

        Filtered texture values can land slightly outside the nominal range,
        and a plain cast would wrap them. NaN becomes 0.
        """
        values = np.nan_to_num(np.asarray(values, dtype=np.float32), nan=0.0)
        return np.clip(values, 0.0, 255.0).astype(np.uint8)

# =============================================================================
# PARALLEL UTILITIES
# =============================================================================

class ParallelUtils:
    """Data-parallel dispatch over independent lanes."""

    @staticmethod
    def default_workers() -> int:
        return os.cpu_count() or 1

    @staticmethod
    def chunk_ranges(count: int, chunks: int) -> List[Tuple[int, int]]:
        """Split ``range(count)`` into at most ``chunks`` contiguous, non-empty ranges."""
        if count <= 0:
            return []
        chunks = max(1, min(chunks, count))
        bounds = np.linspace(0, count, chunks + 1).astype(int)
        return [(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:]) if b > a]

    @staticmethod
    def parallel_map(func: Callable[[T], R], items: Sequence[T],
                     workers: Optional[int] = None) -> List[R]:
        """Apply ``func`` to every item, possibly concurrently, keeping input order.

        ``func`` must be free of side effects on shared state; the call returns
        only once every item has completed, which is the barrier between phases.
        """
        items = list(items)
        if workers is None:
            workers = ParallelUtils.default_workers()
        if workers <= 1 or len(items) <= 1:
            return [func(item) for item in items]
        with ThreadPoolExecutor(max_workers=min(workers, len(items))) as executor:
            return list(executor.map(func, items))

# =============================================================================
# IMAGE UTILITIES
# =============================================================================

class ImageUtils:
    """Loading and saving image files with Pillow."""

    @staticmethod
    def load_rgba(filepath: str) -> np.ndarray:
        """Load an image file as an (H, W, 4) uint8 RGBA array."""
        try:
            with Image.open(filepath) as img:
                return np.asarray(img.convert("RGBA"), dtype=np.uint8).copy()
        except (OSError, ValueError) as exc:
            raise RuntimeError(f"Cannot open {filepath}: {exc}") from exc

    @staticmethod
    def save_rgb(filepath: str, pixels: np.ndarray) -> None:
        """Save an (H, W, 3) uint8 array."""
        Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(filepath)

# =============================================================================
# SYSTEM UTILITIES
# =============================================================================

class SystemUtils:
    """System and environment utilities."""

    @staticmethod
    def get_dependency_versions() -> Dict[str, str]:
        """Return versions of key runtime dependencies."""
        return {
            "numpy": np.__version__,
            "Pillow": getattr(PIL, "__version__", "unknown"),
            "OpenGL": getattr(OpenGL, "__version__", "unknown"),
        }

    @staticmethod
    def configure_logging(level: int = logging.INFO) -> None:
        """Configure root logger for the application."""
        logging.basicConfig(
            level=level,
            format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )
