"""
Foveated Panorama Transcoding Package

Encodes equirectangular frames so that only the region around the viewing
direction keeps full resolution, and reconstructs full-size frames from the
reduced representation.
"""

from .angles import AngleMapper, constrain_angle
from .config import (
    PolePolicy,
    TranscoderConfig,
    create_config_for_field_of_view,
    create_default_config,
)
from .errors import (
    ContractViolation,
    ElevationOutOfRangeError,
    InvalidFrameError,
    InvalidRecordError,
    SerializationError,
    TranscoderError,
)
from .optimized_image import FORMAT_VERSION, OptimizedImage, Size
from .optimizer import Optimizer, extract_image, optimize_image

__all__ = [
    'AngleMapper',
    'constrain_angle',
    'PolePolicy',
    'TranscoderConfig',
    'create_config_for_field_of_view',
    'create_default_config',
    'ContractViolation',
    'ElevationOutOfRangeError',
    'InvalidFrameError',
    'InvalidRecordError',
    'SerializationError',
    'TranscoderError',
    'FORMAT_VERSION',
    'OptimizedImage',
    'Size',
    'Optimizer',
    'extract_image',
    'optimize_image',
]

__version__ = '1.0.0'
