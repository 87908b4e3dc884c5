"""
The OptimizedImage record.

Carries the five panels produced by the encoder together with everything
the decoder needs to rebuild a full frame, and knows how to persist itself
as a NumPy .npz container.
"""

import io
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, NamedTuple, Tuple, Union

import numpy as np

from .errors import InvalidRecordError, SerializationError
from .utils import image_nbytes

FORMAT_VERSION = 1

PANEL_NAMES = ('focused', 'blurred_left', 'blurred_right',
               'blurred_top', 'blurred_bottom')


class Size(NamedTuple):
    """Pixel dimensions in (width, height) order, as OpenCV expects."""
    width: int
    height: int


def _readonly_copy(panel: np.ndarray) -> np.ndarray:
    copy = np.array(panel, copy=True)
    copy.setflags(write=False)
    return copy


@dataclass(frozen=True, eq=False)
class OptimizedImage:
    """
    Foveated representation of one panoramic frame.

    Attributes:
        focused: Full-resolution patch around the gaze point.
        blurred_left: Downsampled strip left of the focus band.
        blurred_right: Downsampled strip right of the focus band.
        blurred_top: Downsampled strip above the focused patch.
        blurred_bottom: Downsampled strip below the focused patch.
        orig_h_size: Sizes of the (left, right) strips before downsampling.
        orig_v_size: Sizes of the (top, bottom) strips before downsampling.
        full_size: Size of the source frame.
        left_buffer: Source column of the crop window's left edge.
        version: Record format version.
    """
    focused: np.ndarray
    blurred_left: np.ndarray
    blurred_right: np.ndarray
    blurred_top: np.ndarray
    blurred_bottom: np.ndarray
    orig_h_size: Tuple[Size, Size]
    orig_v_size: Tuple[Size, Size]
    full_size: Size
    left_buffer: int
    version: int = field(default=FORMAT_VERSION)

    def __post_init__(self):
        if self.version != FORMAT_VERSION:
            raise InvalidRecordError(
                f"Unsupported record version {self.version}, expected {FORMAT_VERSION}"
            )

        # Normalize metadata so records loaded from disk compare equal to
        # freshly encoded ones.
        object.__setattr__(self, 'orig_h_size', tuple(Size(*map(int, s)) for s in self.orig_h_size))
        object.__setattr__(self, 'orig_v_size', tuple(Size(*map(int, s)) for s in self.orig_v_size))
        object.__setattr__(self, 'full_size', Size(*map(int, self.full_size)))
        object.__setattr__(self, 'left_buffer', int(self.left_buffer))

        for name in PANEL_NAMES:
            panel = getattr(self, name)
            if not isinstance(panel, np.ndarray) or panel.ndim not in (2, 3):
                raise InvalidRecordError(f"{name} must be a 2D or 3D array")
            if panel.size == 0:
                raise InvalidRecordError(f"{name} is empty")
            object.__setattr__(self, name, _readonly_copy(panel))

        self._validate_metadata()

    def _validate_metadata(self) -> None:
        pixel_format = (self.focused.dtype, self.focused.shape[2:])
        for name in PANEL_NAMES[1:]:
            panel = getattr(self, name)
            if (panel.dtype, panel.shape[2:]) != pixel_format:
                raise InvalidRecordError(
                    f"{name} has format {panel.dtype}{panel.shape[2:]}, "
                    f"expected {pixel_format[0]}{pixel_format[1]}"
                )

        if len(self.orig_h_size) != 2 or len(self.orig_v_size) != 2:
            raise InvalidRecordError("orig_h_size and orig_v_size must each hold two sizes")
        for size in self.orig_h_size + self.orig_v_size + (self.full_size,):
            if size.width <= 0 or size.height <= 0:
                raise InvalidRecordError(f"Sizes must be strictly positive, got {size}")

        full_width, full_height = self.full_size
        if not 0 <= self.left_buffer < full_width:
            raise InvalidRecordError(
                f"left_buffer {self.left_buffer} outside [0, {full_width})"
            )

        # The panels must tile a crop of full height that fits in the frame.
        focus_height, focus_width = self.focused.shape[:2]
        top, bottom = self.orig_v_size
        left, right = self.orig_h_size
        if top.width != focus_width or bottom.width != focus_width:
            raise InvalidRecordError("Vertical strips must be as wide as the focused patch")
        if top.height + focus_height + bottom.height != full_height:
            raise InvalidRecordError("Vertical strips and focus do not span the frame height")
        if left.height != full_height or right.height != full_height:
            raise InvalidRecordError("Horizontal strips must span the frame height")
        if left.width + focus_width + right.width > full_width:
            raise InvalidRecordError("Crop is wider than the frame")

    @property
    def nbytes(self) -> int:
        """Total byte size of the five panels."""
        return sum(image_nbytes(getattr(self, name)) for name in PANEL_NAMES)

    @property
    def crop_width(self) -> int:
        return self.orig_h_size[0].width + self.focused.shape[1] + self.orig_h_size[1].width

    @property
    def focus_origin(self) -> Tuple[int, int]:
        """(row, column) of the focused patch's top-left pixel in the source frame."""
        column = (self.left_buffer + self.orig_h_size[0].width) % self.full_size.width
        return self.orig_v_size[0].height, column

    def compression_ratio(self, frame_nbytes: int) -> float:
        """Ratio of the source frame's byte size to the record's byte size."""
        return frame_nbytes / self.nbytes

    def metadata(self) -> dict:
        """Scalar fields as plain Python values."""
        return {
            'version': self.version,
            'orig_h_size': [list(s) for s in self.orig_h_size],
            'orig_v_size': [list(s) for s in self.orig_v_size],
            'full_size': list(self.full_size),
            'left_buffer': self.left_buffer,
        }

    def save(self, file: Union[str, Path, BinaryIO]) -> None:
        """
        Write the record as a compressed .npz container.

        Args:
            file: Destination path or writable binary file object.
        """
        arrays = {name: getattr(self, name) for name in PANEL_NAMES}
        np.savez_compressed(
            file,
            version=np.array(self.version),
            orig_h_size=np.array(self.orig_h_size, dtype=np.int64),
            orig_v_size=np.array(self.orig_v_size, dtype=np.int64),
            full_size=np.array(self.full_size, dtype=np.int64),
            left_buffer=np.array(self.left_buffer, dtype=np.int64),
            **arrays
        )

    @classmethod
    def load(cls, file: Union[str, Path, BinaryIO]) -> 'OptimizedImage':
        """
        Read a record written by `save`.

        Raises:
            FileNotFoundError: If the path doesn't exist.
            SerializationError: If the container is unreadable, incomplete,
                or of another format version.
        """
        try:
            with np.load(file, allow_pickle=False) as data:
                version = int(data['version'])
                if version != FORMAT_VERSION:
                    raise SerializationError(
                        f"Unsupported record version {version}, expected {FORMAT_VERSION}"
                    )
                panels = {name: data[name] for name in PANEL_NAMES}
                return cls(
                    orig_h_size=tuple(data['orig_h_size'].tolist()),
                    orig_v_size=tuple(data['orig_v_size'].tolist()),
                    full_size=tuple(data['full_size'].tolist()),
                    left_buffer=int(data['left_buffer']),
                    version=version,
                    **panels
                )
        except SerializationError:
            raise
        except InvalidRecordError as e:
            raise SerializationError(f"Stored record is inconsistent: {e}") from e
        except (KeyError, ValueError, TypeError, EOFError, zipfile.BadZipFile) as e:
            raise SerializationError(f"Failed to read record: {e}") from e

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.save(buffer)
        return buffer.getvalue()

    @classmethod
    def from_bytes(cls, payload: bytes) -> 'OptimizedImage':
        return cls.load(io.BytesIO(payload))
