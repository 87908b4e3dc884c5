import numpy as np
import pytest

from Foveation.angles import AngleMapper
from Foveation.config import PolePolicy, TranscoderConfig
from Foveation.errors import ElevationOutOfRangeError, InvalidFrameError
from Foveation.splitter import focus_rows, split_horizontal, split_vertical

MAPPER = AngleMapper(360, 180)


@pytest.fixture
def cropped(panorama):
    return panorama[:, 120:240]


def test_horizontal_split_is_centered(cropped, config):
    split = split_horizontal(cropped, config, MAPPER)

    assert split.left.shape[1] == 50
    assert split.middle.shape[1] == 20
    assert split.right.shape[1] == 50
    np.testing.assert_array_equal(
        np.hstack((split.left, split.middle, split.right)), cropped)


def test_horizontal_strips_match_for_odd_margins(panorama, config):
    # 121 columns leave an odd margin; the extra column joins the focus band.
    split = split_horizontal(panorama[:, :121], config, MAPPER)
    assert split.left.shape == split.right.shape
    assert split.middle.shape[1] == 21


def test_horizontal_split_needs_side_strips(panorama):
    config = TranscoderConfig(crop_angle=120, h_focus_angle=119.5)
    with pytest.raises(InvalidFrameError):
        split_horizontal(panorama[:, :120], config, MAPPER)


def test_vertical_split_centered_on_elevation(panorama, config):
    middle = panorama[:, 170:190]
    split = split_vertical(middle, 90, config, MAPPER)

    assert split.top.shape[0] == 80
    assert split.focused.shape[0] == 20
    assert split.bottom.shape[0] == 80
    np.testing.assert_array_equal(split.focused, middle[80:100])


def test_off_center_elevation_gives_unequal_strips(panorama, config):
    split = split_vertical(panorama[:, :20], 40, config, MAPPER)
    assert split.top.shape[0] == 30
    assert split.bottom.shape[0] == 130


@pytest.mark.parametrize("elevation, expected", [
    (0, (1, 21)),
    (-30, (1, 21)),
    (180, (159, 179)),
    (400, (159, 179)),
    (11, (1, 21)),
])
def test_clamp_policy_keeps_band_inside(config, elevation, expected):
    assert focus_rows(elevation, 180, config, MAPPER) == expected


@pytest.mark.parametrize("elevation", [0, 5, 10, 175, 180])
def test_reject_policy_raises_near_poles(elevation):
    config = TranscoderConfig(pole_policy=PolePolicy.REJECT)
    with pytest.raises(ElevationOutOfRangeError):
        focus_rows(elevation, 180, config, MAPPER)


def test_reject_policy_accepts_interior_elevation():
    config = TranscoderConfig(pole_policy=PolePolicy.REJECT)
    assert focus_rows(11, 180, config, MAPPER) == (1, 21)
    assert focus_rows(169, 180, config, MAPPER) == (159, 179)


def test_frame_too_short_for_vertical_focus(config):
    with pytest.raises(InvalidFrameError):
        focus_rows(90, 2, config, AngleMapper(360, 2))


def test_focus_leaving_no_room_for_strips():
    config = TranscoderConfig(v_focus_angle=179)
    with pytest.raises(InvalidFrameError):
        focus_rows(90, 180, config, MAPPER)
