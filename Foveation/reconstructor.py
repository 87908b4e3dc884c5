"""
Frame reconstruction from an OptimizedImage.

Restores the peripheral strips, reassembles the crop and re-anchors it on a
canvas the size of the original frame.
"""

from typing import Sequence

import cv2
import numpy as np

from .errors import check, ensure
from .optimized_image import OptimizedImage
from .resampling import panel_size, upsample
from .utils import Timer, create_panel


def reassemble_crop(opt_image: OptimizedImage,
                    interpolation: int = cv2.INTER_LINEAR) -> np.ndarray:
    """
    Rebuild the viewport crop from the five panels.

    Args:
        opt_image: Encoded record.
        interpolation: OpenCV flag used to restore the strips.

    Returns:
        Crop with full-resolution focus and blurry periphery.
    """
    left_size, right_size = opt_image.orig_h_size
    top_size, bottom_size = opt_image.orig_v_size

    with Timer("Resizing (H)"):
        left = upsample(opt_image.blurred_left, left_size, interpolation)
        right = upsample(opt_image.blurred_right, right_size, interpolation)

    with Timer("Resizing (V)"):
        top = upsample(opt_image.blurred_top, top_size, interpolation)
        bottom = upsample(opt_image.blurred_bottom, bottom_size, interpolation)

    with Timer("Reconstructing"):
        middle = np.vstack((top, opt_image.focused, bottom))
        cropped = np.hstack((left, middle, right))

    return cropped


def place_on_canvas(cropped: np.ndarray, opt_image: OptimizedImage,
                    background_color: Sequence[int] = (0, 0, 0)) -> np.ndarray:
    """
    Put a reassembled crop back where it was cut from.

    Args:
        cropped: Crop returned by `reassemble_crop`.
        opt_image: Record holding the frame size and crop offset.
        background_color: Fill for the columns outside the crop.

    Returns:
        Frame the size of the original.
    """
    full_width = opt_image.full_size.width
    left_buffer = opt_image.left_buffer
    rows, crop_width = cropped.shape[:2]

    if crop_width + left_buffer >= full_width:
        # The crop wraps around the seam. Its first columns belong at the
        # right end of the frame and the rest at the left end.
        trailing_cols = full_width - left_buffer
        check(0 <= trailing_cols <= crop_width,
              f"trailing part of {trailing_cols} columns outside crop of {crop_width}")
        trailing = cropped[:, :trailing_cols]
        leading = cropped[:, trailing_cols:]

        gap_cols = full_width - trailing.shape[1] - leading.shape[1]
        check(gap_cols >= 0, f"negative gap of {gap_cols} columns")
        gap = create_panel(rows, gap_cols, cropped, background_color)

        pieces = (leading, gap, trailing)
    else:
        # Crop fully contained
        right_cols = full_width - left_buffer - crop_width
        check(right_cols >= 0, f"negative right padding of {right_cols} columns")
        pieces = (
            create_panel(rows, left_buffer, cropped, background_color),
            cropped,
            create_panel(rows, right_cols, cropped, background_color),
        )

    with Timer("Full image"):
        full_image = np.hstack(pieces)

    ensure(panel_size(full_image) == opt_image.full_size,
           f"reconstructed size {panel_size(full_image)} != {opt_image.full_size}")
    return full_image