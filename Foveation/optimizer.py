"""
Core foveated transcoding engine.

Encodes an equirectangular frame into an OptimizedImage that keeps full
resolution only around the viewing direction, and decodes such a record
back into a full-size frame.
"""

from typing import Optional
import logging

import numpy as np

from .angles import AngleMapper, Number, constrain_angle
from .config import TranscoderConfig, create_default_config
from .errors import InvalidFrameError, ensure, require
from .optimized_image import OptimizedImage
from .reconstructor import place_on_canvas, reassemble_crop
from .resampling import downsample
from .splitter import split_horizontal, split_vertical
from .utils import Timer, image_nbytes, validate_image_array
from .viewport import extract_viewport

logger = logging.getLogger(__name__)


class Optimizer:
    """
    Foveated panorama transcoder.

    Holds only an immutable configuration, so one instance can serve any
    number of frames and threads.
    """

    def __init__(self, config: Optional[TranscoderConfig] = None):
        """
        Initialize the optimizer.

        Args:
            config: Foveation policy (uses defaults if None).
        """
        self.config = config or create_default_config()
        require(self.config.h_focus_angle < self.config.crop_angle,
                "horizontal focus must be narrower than the crop")
        logger.debug(
            f"Optimizer initialized: crop {self.config.crop_angle} deg, "
            f"focus {self.config.h_focus_angle}x{self.config.v_focus_angle} deg, "
            f"shrink x{self.config.shrink_factor}"
        )

    def optimize_image(self, image: np.ndarray, angle: Number,
                       v_angle: Number) -> OptimizedImage:
        """
        Encode a frame for a viewing direction.

        Args:
            image: Equirectangular frame, (H, W) or (H, W, C).
            angle: Viewing azimuth in degrees, any value.
            v_angle: Viewing elevation in degrees, 0 at the top of the frame.

        Returns:
            OptimizedImage for the frame.

        Raises:
            InvalidFrameError: If the frame is not a usable pixel buffer or is
                too small for the configured angles.
            ElevationOutOfRangeError: If the elevation is rejected by the
                pole policy.
        """
        if not validate_image_array(image):
            raise InvalidFrameError(
                f"Expected a non-empty (H, W) or (H, W, C) array of uint8, uint16, "
                f"int16, float32 or float64, got "
                f"{getattr(image, 'dtype', type(image).__name__)} "
                f"{getattr(image, 'shape', '')}"
            )

        config = self.config
        height, width = image.shape[:2]
        mapper = AngleMapper(width, height)
        angle = constrain_angle(angle)

        with Timer("Cropping"):
            viewport = extract_viewport(image, angle, config, mapper)

        with Timer("Splitting (H)"):
            h_split = split_horizontal(viewport.pixels, config, mapper)

        with Timer("Blurring (H)"):
            blurred_left, left_size = downsample(
                h_split.left, config.shrink_factor, config.downsample_interpolation)
            blurred_right, right_size = downsample(
                h_split.right, config.shrink_factor, config.downsample_interpolation)

        with Timer("Splitting (V)"):
            v_split = split_vertical(h_split.middle, v_angle, config, mapper)

        with Timer("Blurring (V)"):
            blurred_top, top_size = downsample(
                v_split.top, config.shrink_factor, config.downsample_interpolation)
            blurred_bottom, bottom_size = downsample(
                v_split.bottom, config.shrink_factor, config.downsample_interpolation)

        opt_image = OptimizedImage(
            focused=v_split.focused,
            blurred_left=blurred_left,
            blurred_right=blurred_right,
            blurred_top=blurred_top,
            blurred_bottom=blurred_bottom,
            orig_h_size=(left_size, right_size),
            orig_v_size=(top_size, bottom_size),
            full_size=(width, height),
            left_buffer=viewport.left_col
        )

        logger.debug(
            f"Encoded {width}x{height} frame at ({angle}, {v_angle}): "
            f"{image_nbytes(image)} -> {opt_image.nbytes} bytes"
        )
        return opt_image

    def extract_image(self, opt_image: OptimizedImage) -> np.ndarray:
        """
        Decode a record into a frame the size of the original.

        The focused patch is restored bit for bit; the periphery is
        upsampled and therefore blurry; columns outside the crop are filled
        with the background color.

        Args:
            opt_image: Record produced by `optimize_image`.

        Returns:
            Reconstructed frame.
        """
        cropped = reassemble_crop(opt_image, self.config.upsample_interpolation)
        full_image = place_on_canvas(cropped, opt_image, self.config.background_color)

        ensure(full_image.dtype == opt_image.focused.dtype
               and full_image.shape[2:] == opt_image.focused.shape[2:],
               "reconstructed pixel format differs from the focused panel")
        return full_image

    def get_transcoding_stats(self, image: np.ndarray,
                              opt_image: OptimizedImage) -> dict:
        """
        Get statistics comparing a frame with its encoded record.

        Returns:
            Dictionary with byte counts and the compression ratio.
        """
        frame_bytes = image_nbytes(image)
        return {
            'frame_bytes': frame_bytes,
            'optimized_bytes': opt_image.nbytes,
            'compression_ratio': opt_image.compression_ratio(frame_bytes),
            'focus_size': (opt_image.focused.shape[1], opt_image.focused.shape[0]),
            'left_buffer': opt_image.left_buffer,
            'wraps': opt_image.crop_width + opt_image.left_buffer >= opt_image.full_size.width,
        }


def optimize_image(image: np.ndarray, angle: Number, v_angle: Number,
                   config: Optional[TranscoderConfig] = None) -> OptimizedImage:
    """Encode a frame with a one-off Optimizer."""
    return Optimizer(config).optimize_image(image, angle, v_angle)


def extract_image(opt_image: OptimizedImage,
                  config: Optional[TranscoderConfig] = None) -> np.ndarray:
    """Decode a record with a one-off Optimizer."""
    return Optimizer(config).extract_image(opt_image)
