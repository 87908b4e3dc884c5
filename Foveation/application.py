"""
Viewer and command line front end for the foveated transcoder.

Provides a pygame-based interactive window in which the mouse and arrow
keys steer the viewing direction, and a headless mode that transcodes a
single panorama to files.
"""

import sys
import logging
from pathlib import Path
from typing import List, Optional, Union
from dataclasses import dataclass
from enum import Enum, auto

import cv2
import numpy as np

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from .angles import constrain_angle
from .config import PolePolicy, TranscoderConfig, create_default_config
from .errors import ElevationOutOfRangeError, TranscoderError
from .optimized_image import OptimizedImage
from .optimizer import Optimizer
from .utils import Timer, clamp, image_nbytes, timed

logger = logging.getLogger(__name__)

ANGLE_STEP = 5
DRAG_DEGREES_PER_PIXEL = 0.25


class AppState(Enum):
    """Application state enumeration."""
    INITIALIZING = auto()
    RUNNING = auto()
    STOPPED = auto()


@dataclass
class AppStats:
    """Runtime statistics for the application."""
    frame_count: int = 0
    last_encode_time: float = 0.0
    last_decode_time: float = 0.0
    last_ratio: float = 0.0

    def update(self, encode_time: float, decode_time: float, ratio: float) -> None:
        """Update statistics with new frame data."""
        self.frame_count += 1
        self.last_encode_time = encode_time
        self.last_decode_time = decode_time
        self.last_ratio = ratio


@dataclass
class ViewDirection:
    """Current viewing direction in degrees."""
    azimuth: float = 0.0
    elevation: float = 90.0

    def turn(self, d_azimuth: float, d_elevation: float) -> None:
        self.azimuth = constrain_angle(float(self.azimuth + d_azimuth))
        self.elevation = clamp(self.elevation + d_elevation, 0.0, 180.0)


class ImageLoader:
    """Handles loading and preparing panoramas for transcoding."""

    @staticmethod
    def load_image(path: Union[str, Path],
                   target_size: Optional[tuple] = None) -> np.ndarray:
        """
        Load a panorama, optionally resizing it.

        Args:
            path: Path to the image file.
            target_size: Optional target (width, height) tuple.

        Returns:
            Numpy array of the image in RGB format.

        Raises:
            FileNotFoundError: If image file doesn't exist.
            ValueError: If image cannot be loaded.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")

        image = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if image is None:
            raise ValueError(f"Failed to load image: {path}")

        if target_size is not None:
            image = cv2.resize(image, target_size, interpolation=cv2.INTER_AREA)

        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    @staticmethod
    def save_image(path: Union[str, Path], image: np.ndarray) -> None:
        """
        Write an RGB frame to disk.

        Raises:
            ValueError: If OpenCV cannot encode the file.
        """
        if image.ndim == 3 and image.shape[2] == 3:
            image = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
        if not cv2.imwrite(str(path), image):
            raise ValueError(f"Failed to write image: {path}")

    @staticmethod
    def create_test_pattern(width: int, height: int) -> np.ndarray:
        """
        Create an equirectangular test panorama.

        Hue follows the azimuth and brightness the elevation, with grid
        lines every 10 degrees and a thicker line on the seam and the
        equator so wraparound errors are easy to spot.

        Args:
            width: Image width.
            height: Image height.

        Returns:
            Numpy array with test pattern.
        """
        y_coords, x_coords = np.ogrid[:height, :width]

        hsv = np.zeros((height, width, 3), dtype=np.uint8)
        hsv[:, :, 0] = (x_coords * 180 // width).astype(np.uint8)
        hsv[:, :, 1] = 200
        hsv[:, :, 2] = (80 + y_coords * 150 // height).astype(np.uint8)
        image = cv2.cvtColor(hsv, cv2.COLOR_HSV2RGB)

        # Meridians and parallels every 10 degrees
        col_step = max(1, width // 36)
        row_step = max(1, height // 18)
        image[::row_step, :] = [255, 255, 255]
        image[:, ::col_step] = [255, 255, 255]

        # Equator, then the seam on top of it
        image[height // 2 - 1:height // 2 + 2, :] = [255, 255, 0]
        image[:, :3] = [255, 0, 0]

        return image


@timed
def transcode_file(image_path: Union[str, Path],
                   output_path: Optional[Union[str, Path]],
                   azimuth: int,
                   elevation: int,
                   config: Optional[TranscoderConfig] = None,
                   optimized_path: Optional[Union[str, Path]] = None,
                   source: Optional[np.ndarray] = None) -> dict:
    """
    Encode and decode one panorama, writing the results to disk.

    Args:
        image_path: Panorama to read; ignored when `source` is given.
        output_path: Where to write the reconstructed frame, if anywhere.
        azimuth: Viewing azimuth in degrees.
        elevation: Viewing elevation in degrees.
        config: Foveation policy.
        optimized_path: Where to write the .npz record, if anywhere.
        source: Already loaded frame.

    Returns:
        Transcoding statistics.
    """
    if source is None:
        source = ImageLoader.load_image(image_path)

    optimizer = Optimizer(config)
    with Timer("Encode") as encode_timer:
        opt_image = optimizer.optimize_image(source, azimuth, elevation)
    with Timer("Decode") as decode_timer:
        restored = optimizer.extract_image(opt_image)

    if optimized_path is not None:
        opt_image.save(str(optimized_path))
        logger.info(f"Wrote optimized record: {optimized_path}")
    if output_path is not None:
        ImageLoader.save_image(output_path, restored)
        logger.info(f"Wrote reconstructed frame: {output_path}")

    stats = optimizer.get_transcoding_stats(source, opt_image)
    stats['encode_ms'] = encode_timer.elapsed * 1000
    stats['decode_ms'] = decode_timer.elapsed * 1000
    logger.info(
        f"{stats['frame_bytes']} -> {stats['optimized_bytes']} bytes "
        f"(x{stats['compression_ratio']:.1f}), encode {stats['encode_ms']:.1f} ms, "
        f"decode {stats['decode_ms']:.1f} ms"
    )
    return stats


class PanoramaViewerApp:
    """
    Interactive viewer for foveated panoramas.

    Every change of viewing direction re-encodes the source panorama and
    shows the decoded frame, so what is on screen is exactly what a remote
    viewer would receive.
    """

    def __init__(self,
                 config: Optional[TranscoderConfig] = None,
                 image_path: Optional[Union[str, Path]] = None,
                 window_size: tuple = (1280, 640),
                 pano_size: tuple = (3600, 1800)):
        """
        Initialize the viewer.

        Args:
            config: Transcoder configuration (uses defaults if None).
            image_path: Optional path to an equirectangular panorama.
            window_size: Window (width, height) in pixels.
            pano_size: Size of the generated test panorama.
        """
        if not PYGAME_AVAILABLE:
            raise RuntimeError(
                "pygame is required for the viewer. "
                "Install with: pip install pygame"
            )

        self.config = config or create_default_config()
        self.image_path = image_path
        self.window_size = window_size
        self.pano_size = pano_size
        self.state = AppState.INITIALIZING
        self.stats = AppStats()
        self.view = ViewDirection()

        self._screen: Optional[pygame.Surface] = None
        self._clock: Optional[pygame.time.Clock] = None
        self._source_image: Optional[np.ndarray] = None
        self._optimizer: Optional[Optimizer] = None
        self._last_record: Optional[OptimizedImage] = None
        self._rendered_surface: Optional[pygame.Surface] = None

        self._dirty = True
        self._dragging = False
        self._show_debug = False

        logger.info("PanoramaViewerApp initialized")

    def _init_pygame(self) -> None:
        """Initialize pygame and create the window."""
        pygame.init()
        pygame.display.set_caption("Foveated panorama - drag or use arrows to look around")
        self._screen = pygame.display.set_mode(self.window_size)
        self._clock = pygame.time.Clock()
        logger.info(f"Pygame initialized: {self.window_size[0]}x{self.window_size[1]}")

    def _load_source_image(self) -> None:
        """Load or generate the source panorama."""
        if self.image_path:
            try:
                self._source_image = ImageLoader.load_image(self.image_path)
                logger.info(f"Loaded panorama: {self.image_path}")
                return
            except (FileNotFoundError, ValueError) as e:
                logger.warning(f"Failed to load panorama: {e}. Using test pattern.")
        else:
            logger.info("Using generated test pattern")
        self._source_image = ImageLoader.create_test_pattern(*self.pano_size)

    def _numpy_to_surface(self, array: np.ndarray) -> 'pygame.Surface':
        """Convert an (H, W, C) frame, scaled to the window, to a surface."""
        scaled = cv2.resize(array, self.window_size, interpolation=cv2.INTER_AREA)
        if scaled.ndim == 2:
            scaled = np.stack((scaled,) * 3, axis=-1)
        # pygame expects (W, H, C)
        return pygame.surfarray.make_surface(np.transpose(scaled[:, :, :3], (1, 0, 2)))

    def _transcode_view(self) -> Optional[np.ndarray]:
        """
        Encode and decode the panorama for the current view.

        Returns:
            Decoded frame, or None if the pole policy rejects the elevation,
            in which case the previous record is kept.
        """
        try:
            with Timer("Encode", log=False) as encode_timer:
                record = self._optimizer.optimize_image(
                    self._source_image, self.view.azimuth, self.view.elevation)
        except ElevationOutOfRangeError as e:
            logger.warning(f"Keeping previous frame: {e}")
            return None

        with Timer("Decode", log=False) as decode_timer:
            restored = self._optimizer.extract_image(record)

        self._last_record = record
        self.stats.update(
            encode_timer.elapsed, decode_timer.elapsed,
            record.compression_ratio(image_nbytes(self._source_image))
        )
        return restored

    def _render_frame(self) -> None:
        """Refresh the displayed frame if the view changed."""
        if not self._dirty or self._optimizer is None or self._source_image is None:
            return

        restored = self._transcode_view()
        if restored is not None:
            self._rendered_surface = self._numpy_to_surface(restored)
        self._dirty = False

    def _draw_debug_overlay(self) -> None:
        """Draw debug information overlay."""
        if not self._show_debug or self._screen is None:
            return

        font = pygame.font.Font(None, 24)
        lines = [
            f"Azimuth: {self.view.azimuth:.0f}  Elevation: {self.view.elevation:.0f}",
            f"Encode: {self.stats.last_encode_time * 1000:.1f}ms",
            f"Decode: {self.stats.last_decode_time * 1000:.1f}ms",
            f"Compression: x{self.stats.last_ratio:.1f}",
            "",
            "Controls:",
            "Drag / arrows - Look around",
            "S - Save optimized record",
            "D - Toggle debug overlay",
            "ESC - Quit"
        ]

        overlay_height = len(lines) * 22 + 10
        overlay_surface = pygame.Surface((280, overlay_height))
        overlay_surface.set_alpha(180)
        overlay_surface.fill((0, 0, 0))
        self._screen.blit(overlay_surface, (10, 10))

        y_offset = 15
        for line in lines:
            text_surface = font.render(line, True, (255, 255, 255))
            self._screen.blit(text_surface, (15, y_offset))
            y_offset += 22

    def _turn(self, d_azimuth: float, d_elevation: float) -> None:
        self.view.turn(d_azimuth, d_elevation)
        self._dirty = True

    def _save_record(self) -> None:
        if self._last_record is None:
            return
        path = Path(f"optimized_{self.view.azimuth:.0f}_{self.view.elevation:.0f}.npz")
        self._last_record.save(str(path))
        logger.info(f"Saved optimized record: {path}")

    def _handle_events(self) -> bool:
        """
        Handle pygame events.

        Returns:
            False if application should quit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                elif event.key == pygame.K_LEFT:
                    self._turn(-ANGLE_STEP, 0)
                elif event.key == pygame.K_RIGHT:
                    self._turn(ANGLE_STEP, 0)
                elif event.key == pygame.K_UP:
                    self._turn(0, -ANGLE_STEP)
                elif event.key == pygame.K_DOWN:
                    self._turn(0, ANGLE_STEP)
                elif event.key == pygame.K_d:
                    self._show_debug = not self._show_debug
                elif event.key == pygame.K_s:
                    self._save_record()

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._dragging = True
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self._dragging = False
            elif event.type == pygame.MOUSEMOTION and self._dragging:
                dx, dy = event.rel
                # Dragging pulls the scene, so the view turns the other way
                self._turn(-dx * DRAG_DEGREES_PER_PIXEL, -dy * DRAG_DEGREES_PER_PIXEL)

        return True

    def run(self) -> None:
        """
        Run the main application loop.

        This method blocks until the application is closed.
        """
        try:
            self._init_pygame()
            self._load_source_image()
            self._optimizer = Optimizer(self.config)

            self.state = AppState.RUNNING
            logger.info("Application started")

            running = True
            while running:
                running = self._handle_events()
                self._render_frame()

                if self._rendered_surface and self._screen:
                    self._screen.blit(self._rendered_surface, (0, 0))
                    self._draw_debug_overlay()
                    pygame.display.flip()

                self._clock.tick(60)

        except Exception as e:
            logger.error(f"Application error: {e}", exc_info=True)
            raise

        finally:
            self.state = AppState.STOPPED
            pygame.quit()
            logger.info("Application stopped")


def build_parser():
    import argparse
    parser = argparse.ArgumentParser(
        description='Foveated panorama transcoder'
    )
    parser.add_argument('--image', '-i', type=str,
                        help='Path to an equirectangular panorama')
    parser.add_argument('--azimuth', '-a', type=int, default=0,
                        help='Viewing azimuth in degrees (default: 0)')
    parser.add_argument('--elevation', '-e', type=int, default=90,
                        help='Viewing elevation in degrees, 0 = top (default: 90)')
    parser.add_argument('--crop-angle', type=float, default=120,
                        help='Viewport width in degrees (default: 120)')
    parser.add_argument('--h-focus-angle', type=float, default=20,
                        help='Horizontal focus width in degrees (default: 20)')
    parser.add_argument('--v-focus-angle', type=float, default=20,
                        help='Vertical focus height in degrees (default: 20)')
    parser.add_argument('--shrink-factor', '-s', type=int, default=5,
                        help='Peripheral downsampling factor (default: 5)')
    parser.add_argument('--pole-policy', choices=[p.name.lower() for p in PolePolicy],
                        default='clamp',
                        help='Handling of elevations near the poles (default: clamp)')
    parser.add_argument('--headless', action='store_true',
                        help='Transcode once and exit instead of opening a window')
    parser.add_argument('--output', '-o', type=str,
                        help='Write the reconstructed frame here (headless)')
    parser.add_argument('--save-optimized', type=str,
                        help='Write the optimized .npz record here (headless)')
    parser.add_argument('--width', '-W', type=int, default=1280,
                        help='Window width (default: 1280)')
    parser.add_argument('--height', '-H', type=int, default=640,
                        help='Window height (default: 640)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log per-stage timings')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = TranscoderConfig(
            crop_angle=args.crop_angle,
            h_focus_angle=args.h_focus_angle,
            v_focus_angle=args.v_focus_angle,
            shrink_factor=args.shrink_factor,
            pole_policy=PolePolicy[args.pole_policy.upper()]
        )

        if args.headless:
            source = None if args.image else ImageLoader.create_test_pattern(3600, 1800)
            transcode_file(args.image, args.output, args.azimuth, args.elevation,
                           config=config, optimized_path=args.save_optimized,
                           source=source)
            return 0

        app = PanoramaViewerApp(config=config, image_path=args.image,
                                window_size=(args.width, args.height))
        app.view = ViewDirection(args.azimuth, args.elevation)
        app.run()
        return 0

    except (TranscoderError, FileNotFoundError, ValueError) as e:
        logger.error(f"{e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
