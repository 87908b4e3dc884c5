"""
Configuration module for foveated panorama transcoding.

Defines the angular foveation policy shared by the encoder and the decoder.
"""

from dataclasses import dataclass
from typing import Tuple
from enum import Enum, auto

import cv2

from .errors import require


class PolePolicy(Enum):
    """What to do when the vertical focus band reaches a pole."""
    CLAMP = auto()      # Slide the band back inside the frame
    REJECT = auto()     # Raise ElevationOutOfRangeError


@dataclass(frozen=True)
class TranscoderConfig:
    """
    Complete configuration for foveated transcoding.

    Attributes:
        crop_angle: Horizontal angular width of the viewport crop, in degrees.
        h_focus_angle: Horizontal angular width of the full-resolution band.
        v_focus_angle: Vertical angular height of the full-resolution patch.
        shrink_factor: Linear downsampling factor for peripheral strips.
        pole_policy: Handling of elevations that push the focus past a pole.
        background_color: Fill color for the parts of the frame outside the crop.
        downsample_interpolation: OpenCV interpolation flag used when shrinking.
        upsample_interpolation: OpenCV interpolation flag used when restoring.
    """
    crop_angle: float = 120
    h_focus_angle: float = 20
    v_focus_angle: float = 20
    shrink_factor: int = 5
    pole_policy: PolePolicy = PolePolicy.CLAMP
    background_color: Tuple[int, ...] = (0, 0, 0)
    downsample_interpolation: int = cv2.INTER_AREA
    upsample_interpolation: int = cv2.INTER_LINEAR

    def __post_init__(self):
        require(0 < self.crop_angle < 360,
                f"crop_angle must be in (0, 360), got {self.crop_angle}")
        require(0 < self.h_focus_angle < self.crop_angle,
                f"h_focus_angle ({self.h_focus_angle}) must be positive and "
                f"smaller than crop_angle ({self.crop_angle})")
        require(0 < self.v_focus_angle < 180,
                f"v_focus_angle must be in (0, 180), got {self.v_focus_angle}")
        require(isinstance(self.shrink_factor, int) and self.shrink_factor >= 1,
                f"shrink_factor must be an integer >= 1, got {self.shrink_factor}")
        require(isinstance(self.pole_policy, PolePolicy),
                f"pole_policy must be a PolePolicy, got {self.pole_policy!r}")


def create_default_config() -> TranscoderConfig:
    """Factory function to create a default transcoder configuration."""
    return TranscoderConfig()


def create_config_for_field_of_view(fov: float,
                                    shrink_factor: int = 5) -> TranscoderConfig:
    """
    Factory function to create a configuration for a display's field of view.

    The crop covers the whole field of view and the focus covers a sixth of
    it in both directions, which reproduces the defaults for a 120 degree
    headset.

    Args:
        fov: Horizontal field of view of the display in degrees.
        shrink_factor: Peripheral downsampling factor.

    Returns:
        TranscoderConfig for the given field of view.
    """
    focus = max(fov / 6, 1)
    return TranscoderConfig(
        crop_angle=fov,
        h_focus_angle=focus,
        v_focus_angle=min(focus, 179),
        shrink_factor=shrink_factor
    )
