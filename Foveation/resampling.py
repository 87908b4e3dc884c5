"""
Peripheral strip resampling.

Shrinks strips for transport and restores them to their recorded size.
"""

from typing import Tuple

import cv2
import numpy as np

from .errors import InvalidFrameError
from .optimized_image import Size
from .utils import shrunk_size


def panel_size(panel: np.ndarray) -> Size:
    """Size of a panel in (width, height) order."""
    return Size(panel.shape[1], panel.shape[0])


def downsample(panel: np.ndarray, factor: int,
               interpolation: int = cv2.INTER_AREA) -> Tuple[np.ndarray, Size]:
    """
    Shrink a strip by a linear factor on both axes.

    Args:
        panel: Strip to shrink.
        factor: Linear shrink factor.
        interpolation: OpenCV interpolation flag.

    Returns:
        Tuple of (shrunk strip, original size).
    """
    original = panel_size(panel)
    if factor == 1:
        return panel.copy(), original

    target = shrunk_size(original.width, original.height, factor)
    return _resize(panel, target, interpolation), original


def upsample(panel: np.ndarray, size: Size,
             interpolation: int = cv2.INTER_LINEAR) -> np.ndarray:
    """Restore a shrunk strip to its recorded size."""
    if panel_size(panel) == size:
        return panel.copy()
    return _resize(panel, (size.width, size.height), interpolation)


def _resize(panel: np.ndarray, dsize: Tuple[int, int],
            interpolation: int) -> np.ndarray:
    # cv2.resize needs contiguous input and drops a singleton channel axis
    try:
        resized = cv2.resize(np.ascontiguousarray(panel), dsize,
                             interpolation=interpolation)
    except cv2.error as e:
        raise InvalidFrameError(
            f"Cannot resize {panel.dtype} panel of shape {panel.shape}: {e}"
        ) from e
    if panel.ndim == 3 and resized.ndim == 2:
        resized = resized[:, :, np.newaxis]
    return resized
