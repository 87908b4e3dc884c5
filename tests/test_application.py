import logging

import cv2
import numpy as np
import pytest

from Foveation.application import ImageLoader, ViewDirection, main, transcode_file
from Foveation.config import PolePolicy, TranscoderConfig
from Foveation.optimizer import Optimizer
from Foveation.optimized_image import OptimizedImage


@pytest.fixture
def pattern():
    return ImageLoader.create_test_pattern(360, 180)


@pytest.fixture
def pano_file(tmp_path, pattern):
    path = tmp_path / "pano.png"
    ImageLoader.save_image(path, pattern)
    return path


def test_test_pattern(pattern):
    assert pattern.shape == (180, 360, 3)
    assert pattern.dtype == np.uint8
    # Seam is marked in red
    assert (pattern[:, 0] == [255, 0, 0]).all()


def test_load_image_round_trips_rgb(pano_file, pattern):
    loaded = ImageLoader.load_image(pano_file)
    np.testing.assert_array_equal(loaded, pattern)


def test_load_image_resizes(pano_file):
    assert ImageLoader.load_image(pano_file, (180, 90)).shape == (90, 180, 3)


def test_load_image_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        ImageLoader.load_image(tmp_path / "missing.png")


def test_load_image_not_an_image(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not a png")
    with pytest.raises(ValueError):
        ImageLoader.load_image(path)


def test_view_direction_wraps_azimuth_and_clamps_elevation():
    view = ViewDirection(350, 90)
    view.turn(20, -100)
    assert view.azimuth == pytest.approx(10)
    assert view.elevation == 0


def test_transcode_file_writes_outputs(tmp_path, pano_file):
    output = tmp_path / "restored.png"
    record_path = tmp_path / "record.npz"

    stats = transcode_file(pano_file, output, 350, 80,
                           config=TranscoderConfig(), optimized_path=record_path)

    assert stats['wraps']
    assert stats['compression_ratio'] > 1
    assert cv2.imread(str(output)).shape == (180, 360, 3)
    record = OptimizedImage.load(str(record_path))
    assert record.full_size == (360, 180)


def test_transcode_file_with_loaded_source(pattern):
    stats = transcode_file(None, None, 180, 90, source=pattern)
    assert not stats['wraps']
    assert stats['frame_bytes'] == pattern.nbytes


def test_main_headless(tmp_path, pano_file):
    output = tmp_path / "out.png"
    record_path = tmp_path / "out.npz"
    status = main([
        '--headless', '--image', str(pano_file),
        '-a', '10', '-e', '90', '-s', '4',
        '-o', str(output), '--save-optimized', str(record_path),
    ])

    assert status == 0
    assert output.exists()
    assert OptimizedImage.load(str(record_path)).left_buffer == 310


def test_main_missing_image(tmp_path):
    assert main(['--headless', '--image', str(tmp_path / "missing.png")]) == 1


def test_main_rejects_bad_configuration(pano_file):
    assert main(['--headless', '--image', str(pano_file), '--h-focus-angle', '130']) == 1


def test_main_rejects_pole_elevation(pano_file):
    status = main(['--headless', '--image', str(pano_file),
                   '-e', '0', '--pole-policy', 'reject'])
    assert status == 1


def test_transcode_file_logs_its_duration(caplog, pattern):
    with caplog.at_level(logging.DEBUG, logger="Foveation.utils"):
        transcode_file(None, None, 180, 90, source=pattern)
    assert any(r.getMessage().startswith("transcode_file: ") for r in caplog.records)


def test_viewer_keeps_previous_frame_when_elevation_is_rejected(pattern):
    pytest.importorskip("pygame")
    from Foveation.application import PanoramaViewerApp

    config = TranscoderConfig(pole_policy=PolePolicy.REJECT)
    app = PanoramaViewerApp(config=config)
    app._source_image = pattern
    app._optimizer = Optimizer(config)

    assert app._transcode_view().shape == pattern.shape
    record = app._last_record

    app.view.turn(0, -90)
    assert app.view.elevation == 0
    assert app._transcode_view() is None
    assert app._last_record is record
    assert app.stats.frame_count == 1
