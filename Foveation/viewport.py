"""
Viewport extraction around a viewing azimuth.

Cuts a fixed angular window out of an equirectangular frame, stitching the
two halves together when the window straddles the 0/360 degree seam.
"""

from dataclasses import dataclass
import logging

import numpy as np

from .angles import AngleMapper, Number, constrain_angle
from .config import TranscoderConfig
from .errors import InvalidFrameError, check, require

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Viewport:
    """
    A horizontal crop of the source frame.

    Attributes:
        pixels: Cropped pixels, full frame height.
        left_col: Source column of the crop's left edge.
        right_col: Source column just past the crop's right edge, modulo width.
        wraps: Whether the crop straddles the seam.
    """
    pixels: np.ndarray
    left_col: int
    right_col: int
    wraps: bool

    @property
    def width(self) -> int:
        return self.pixels.shape[1]


def extract_viewport(image: np.ndarray, angle: Number,
                     config: TranscoderConfig,
                     mapper: AngleMapper) -> Viewport:
    """
    Crop `config.crop_angle` degrees of the frame centered on `angle`.

    Args:
        image: Equirectangular source frame (H, W) or (H, W, C).
        angle: Viewing azimuth in degrees, any value.
        config: Foveation policy.
        mapper: Angle mapper for the frame size.

    Returns:
        Viewport whose width is the same whether or not it wraps.

    Raises:
        InvalidFrameError: If the frame is too narrow for the crop.
    """
    require(config.h_focus_angle < config.crop_angle,
            "horizontal focus must be narrower than the crop")

    width = image.shape[1]
    angle = constrain_angle(angle)
    left_angle = constrain_angle(angle - config.crop_angle / 2)

    crop_width = mapper.columns_for(config.crop_angle)
    if crop_width <= 0:
        raise InvalidFrameError(
            f"Frame width {width} is too small for a {config.crop_angle} degree crop"
        )

    left_col = mapper.column(left_angle)
    right_col = (left_col + crop_width) % width
    check(0 <= left_col < width, f"left column {left_col} outside [0, {width})")
    check(0 <= right_col < width, f"right column {right_col} outside [0, {width})")

    if left_col < right_col:
        # Cropped window doesn't wrap around, simple case.
        pixels = image[:, left_col:right_col]
        wraps = False
    else:
        # The window wraps: the part before the seam sits at the right end
        # of the frame and the part after it at the left end.
        pixels = np.hstack((image[:, left_col:width], image[:, 0:right_col]))
        wraps = True

    check(pixels.shape[1] == crop_width,
          f"crop width {pixels.shape[1]} != expected {crop_width}")
    logger.debug(
        f"Viewport at {angle} deg: columns {left_col}..{right_col} "
        f"({'wrapped' if wraps else 'contiguous'})"
    )
    return Viewport(pixels=pixels, left_col=left_col, right_col=right_col, wraps=wraps)
