"""
Utility functions for foveated transcoding.

Provides helper functions for timing, frame validation and panel
construction.
"""

import numpy as np
from typing import Tuple, Callable, Sequence
from functools import wraps
import time
import logging

logger = logging.getLogger(__name__)

# Pixel types cv2.resize accepts
SUPPORTED_DTYPES = frozenset(
    np.dtype(t) for t in (np.uint8, np.uint16, np.int16, np.float32, np.float64)
)


class Timer:
    """Context manager for timing code blocks."""

    def __init__(self, name: str = "Operation", log: bool = True):
        """
        Initialize timer.

        Args:
            name: Name of the operation being timed.
            log: Whether to log the result.
        """
        self.name = name
        self.log = log
        self.elapsed: float = 0.0

    def __enter__(self) -> 'Timer':
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self.elapsed = time.perf_counter() - self.start_time
        if self.log:
            logger.debug(f"{self.name}: {self.elapsed * 1000:.2f} ms")


def timed(func: Callable) -> Callable:
    """
    Decorator to time function execution.

    Args:
        func: Function to wrap.

    Returns:
        Wrapped function that logs execution time.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        with Timer(func.__name__):
            return func(*args, **kwargs)
    return wrapper


def clamp(value: float, min_val: float, max_val: float) -> float:
    """
    Clamp a value to a range.

    Args:
        value: Value to clamp.
        min_val: Minimum allowed value.
        max_val: Maximum allowed value.

    Returns:
        Clamped value.
    """
    return max(min_val, min(value, max_val))


def validate_image_array(array: np.ndarray) -> bool:
    """
    Validate that an array is a usable pixel buffer.

    Args:
        array: Array to validate.

    Returns:
        True if valid, False otherwise.
    """
    if not isinstance(array, np.ndarray):
        return False

    if array.dtype not in SUPPORTED_DTYPES:
        return False

    if array.ndim == 2:
        # Grayscale
        return array.size > 0

    if array.ndim == 3:
        return array.size > 0 and array.shape[2] >= 1

    return False


def image_nbytes(image: np.ndarray) -> int:
    """Size of a pixel buffer in bytes."""
    return int(image.size * image.itemsize)


def shrunk_size(width: int, height: int, factor: int) -> Tuple[int, int]:
    """
    Target (width, height) of a panel shrunk by a linear factor.

    Never returns a zero dimension, so a narrow strip still survives as a
    single pixel.
    """
    return max(1, width // factor), max(1, height // factor)


def create_panel(rows: int, cols: int, like: np.ndarray,
                 color: Sequence[int]) -> np.ndarray:
    """
    Create a solid panel with the dtype and channel count of another image.

    Args:
        rows: Panel height.
        cols: Panel width.
        like: Image whose dtype and channels are copied.
        color: Fill color; truncated or zero-padded to the channel count.

    Returns:
        New panel array.
    """
    panel = np.zeros((rows, cols) + like.shape[2:], dtype=like.dtype)
    if like.ndim == 2:
        if color:
            panel[:] = color[0]
        return panel

    channels = like.shape[2]
    fill = list(color[:channels]) + [0] * max(0, channels - len(color))
    panel[:] = fill
    return panel
