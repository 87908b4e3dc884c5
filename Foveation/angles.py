"""
Angle normalization and equirectangular angle to pixel mapping.

Azimuth spans 360 degrees across the frame width and wraps at the seam;
elevation spans 180 degrees across the frame height and does not wrap.
"""

import math
from dataclasses import dataclass
from typing import Union

from .errors import ensure

Number = Union[int, float]


def constrain_angle(x: Number) -> Number:
    """
    Normalize an angle into [0, 360).

    Integers stay integers and floats stay floats.

    Args:
        x: Angle in degrees, any sign or magnitude.

    Returns:
        Equivalent angle in [0, 360).
    """
    if isinstance(x, int):
        x %= 360
    else:
        x = math.fmod(x, 360.0)
        if x < 0:
            x += 360.0
        # fmod of a tiny negative value can round up to exactly 360
        if x >= 360.0:
            x = 0.0
    ensure(0 <= x < 360, f"constrained angle {x} outside [0, 360)")
    return x


@dataclass(frozen=True)
class AngleMapper:
    """Converts angles to pixel columns and rows for one frame size."""
    width: int
    height: int

    @property
    def angle_to_width(self) -> float:
        return self.width / 360.0

    @property
    def angle_to_height(self) -> float:
        return self.height / 180.0

    def column(self, azimuth: Number) -> int:
        """Pixel column of an azimuth, after wrapping it into [0, 360)."""
        return int(constrain_angle(azimuth) * self.angle_to_width)

    def row(self, elevation: Number) -> int:
        """Pixel row of an elevation. Elevation is not wrapped."""
        return int(elevation * self.angle_to_height)

    def columns_for(self, span: Number) -> int:
        """Number of columns covered by a horizontal angular span."""
        return int(span * self.angle_to_width)

    def rows_for(self, span: Number) -> int:
        """Number of rows covered by a vertical angular span."""
        return int(span * self.angle_to_height)
