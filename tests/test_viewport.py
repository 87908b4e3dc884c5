import numpy as np
import pytest

from Foveation.angles import AngleMapper
from Foveation.config import TranscoderConfig
from Foveation.errors import InvalidFrameError
from Foveation.viewport import extract_viewport


@pytest.fixture
def mapper(panorama):
    return AngleMapper(panorama.shape[1], panorama.shape[0])


def test_azimuth_zero_wraps_around_the_seam(panorama, config, mapper):
    viewport = extract_viewport(panorama, 0, config, mapper)

    assert viewport.wraps
    assert viewport.left_col == 300
    assert viewport.right_col == 60
    assert viewport.left_col > viewport.right_col
    expected = np.hstack((panorama[:, 300:], panorama[:, :60]))
    np.testing.assert_array_equal(viewport.pixels, expected)


def test_azimuth_180_is_contiguous(panorama, config, mapper):
    viewport = extract_viewport(panorama, 180, config, mapper)

    assert not viewport.wraps
    assert (viewport.left_col, viewport.right_col) == (120, 240)
    np.testing.assert_array_equal(viewport.pixels, panorama[:, 120:240])


@pytest.mark.parametrize("angle", [0, 1, 30, 59, 60, 61, 180, 299, 300, 301, 359, -45, 1080])
def test_crop_width_is_constant(panorama, config, mapper, angle):
    viewport = extract_viewport(panorama, angle, config, mapper)
    assert viewport.width == 120
    assert viewport.pixels.shape[0] == panorama.shape[0]


def test_equivalent_angles_give_identical_crops(panorama, config, mapper):
    a = extract_viewport(panorama, -30, config, mapper)
    b = extract_viewport(panorama, 330, config, mapper)
    np.testing.assert_array_equal(a.pixels, b.pixels)
    assert a.left_col == b.left_col


def test_wrapped_crop_is_continuous_across_the_seam(config):
    # Each column holds its own index, so continuity means +1 steps mod width.
    frame = np.tile(np.arange(360, dtype=np.uint16), (180, 1))
    viewport = extract_viewport(frame, 10, config, AngleMapper(360, 180))

    row = viewport.pixels[0].astype(int)
    np.testing.assert_array_equal(np.diff(row) % 360, np.ones(len(row) - 1))
    assert row[0] == 310


def test_crop_ending_exactly_at_the_seam(panorama, config, mapper):
    viewport = extract_viewport(panorama, 300, config, mapper)
    assert viewport.wraps
    assert viewport.right_col == 0
    np.testing.assert_array_equal(viewport.pixels, panorama[:, 240:])


def test_frame_too_narrow_for_crop(config):
    frame = np.zeros((10, 2, 3), dtype=np.uint8)
    with pytest.raises(InvalidFrameError):
        extract_viewport(frame, 0, config, AngleMapper(2, 10))


def test_custom_crop_angle(panorama, mapper):
    config = TranscoderConfig(crop_angle=90, h_focus_angle=10)
    viewport = extract_viewport(panorama, 90, config, mapper)
    assert (viewport.left_col, viewport.right_col) == (45, 135)
