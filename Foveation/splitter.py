"""
Focus splitting.

Partitions a viewport crop into a full-resolution focus patch and four
peripheral strips using two orthogonal cuts: first a vertical band centered
in the crop, then a horizontal band inside it centered on the elevation.
"""

from dataclasses import dataclass
from typing import Tuple
import logging

import numpy as np

from .angles import AngleMapper, Number
from .config import PolePolicy, TranscoderConfig
from .errors import ElevationOutOfRangeError, InvalidFrameError, check
from .utils import clamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HorizontalSplit:
    """Crop split into left strip, focus band and right strip."""
    left: np.ndarray
    middle: np.ndarray
    right: np.ndarray


@dataclass(frozen=True)
class VerticalSplit:
    """Focus band split into top strip, focused patch and bottom strip."""
    top: np.ndarray
    focused: np.ndarray
    bottom: np.ndarray


def split_horizontal(cropped: np.ndarray, config: TranscoderConfig,
                     mapper: AngleMapper) -> HorizontalSplit:
    """
    Cut a focus band of `h_focus_angle` degrees out of the crop's center.

    The left and right strips always have the same width, so one of them
    never needs to be stretched on reconstruction.

    Raises:
        InvalidFrameError: If either strip or the band would be empty.
    """
    crop_width = cropped.shape[1]
    focus_width = mapper.columns_for(config.h_focus_angle)
    side_width = (crop_width - focus_width) // 2

    if focus_width <= 0 or side_width <= 0:
        raise InvalidFrameError(
            f"Crop of {crop_width} columns cannot hold a {focus_width} column "
            f"focus band with non-empty side strips"
        )

    focus_left_col = side_width
    focus_right_col = crop_width - side_width
    check(0 < focus_left_col < focus_right_col < crop_width,
          f"focus columns {focus_left_col}..{focus_right_col} outside crop")

    return HorizontalSplit(
        left=cropped[:, :focus_left_col],
        middle=cropped[:, focus_left_col:focus_right_col],
        right=cropped[:, focus_right_col:]
    )


def focus_rows(v_angle: Number, height: int, config: TranscoderConfig,
               mapper: AngleMapper) -> Tuple[int, int]:
    """
    Row range [top, bottom) of the focused patch.

    Both peripheral strips keep at least one row. Under PolePolicy.CLAMP a
    band that would cross a pole is slid back inside the frame; under
    PolePolicy.REJECT it raises instead.

    Raises:
        InvalidFrameError: If the frame is too short for the vertical focus.
        ElevationOutOfRangeError: If rejected by the pole policy.
    """
    focus_height = mapper.rows_for(config.v_focus_angle)
    if focus_height <= 0 or focus_height > height - 2:
        raise InvalidFrameError(
            f"Frame height {height} cannot hold a {focus_height} row focus "
            f"with non-empty top and bottom strips"
        )

    middle_row = mapper.row(v_angle)
    top_row = middle_row - focus_height // 2
    min_top, max_top = 1, height - 1 - focus_height

    if not min_top <= top_row <= max_top:
        if config.pole_policy is PolePolicy.REJECT:
            raise ElevationOutOfRangeError(
                f"Elevation {v_angle} puts the focus at rows "
                f"{top_row}..{top_row + focus_height}, outside [1, {height - 1})"
            )
        clamped = clamp(top_row, min_top, max_top)
        logger.debug(f"Elevation {v_angle} clamped: top row {top_row} -> {clamped}")
        top_row = clamped

    return top_row, top_row + focus_height


def split_vertical(middle: np.ndarray, v_angle: Number,
                   config: TranscoderConfig,
                   mapper: AngleMapper) -> VerticalSplit:
    """Cut the focused patch out of the focus band around the elevation."""
    top_row, bottom_row = focus_rows(v_angle, middle.shape[0], config, mapper)
    return VerticalSplit(
        top=middle[:top_row],
        focused=middle[top_row:bottom_row],
        bottom=middle[bottom_row:]
    )
