from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from museum_pipeline.coordinates import build_object_points
from museum_pipeline.facade import InteractionLoop, LoopSummary, MuseumSession
from museum_pipeline.factory import StrategyFactory
from museum_pipeline.services.calib import load_calib
from museum_pipeline.services.gallery import load_gallery
from museum_pipeline.services.markers import create_marker
from museum_pipeline.services.storage import ScreenshotStorage

from .config import MuseumConfig
from .logging_utils import add_file_handler, close_handler, setup_logger


@dataclass
class SessionSummary:
    frames_processed: int
    screenshots: list[str]
    overlay_failures: int
    avg_fps: float
    marker_path: Optional[str] = None


class MuseumApp:
    """Builds a museum session from a config and runs the interaction loop."""

    def __init__(self, config: MuseumConfig, logger=None):
        self.config = config
        self.logger = logger or setup_logger(config.camera_name)
        self.loop: Optional[InteractionLoop] = None
        self._stop_requested = False

    def stop(self) -> None:
        self._stop_requested = True
        if self.loop is not None:
            self.loop.stop()

    def build_session(self) -> MuseumSession:
        """Load calibration and paintings. Raises a FatalError on bad input."""
        cfg = self.config
        self.logger.info("calibration file: %s", cfg.calibration_path)
        intrinsics = load_calib(cfg.calibration_path, logger=self.logger)

        gallery = load_gallery(
            cfg.images_path,
            size=(cfg.overlay_width, cfg.overlay_height),
            logger=self.logger,
        )

        self.logger.info("coordinate system for marker length %s", cfg.marker_length)
        object_points = build_object_points(cfg.marker_length)
        return MuseumSession(intrinsics, object_points, gallery)

    def build_loop(self, session: MuseumSession) -> InteractionLoop:
        cfg = self.config
        cap, det, loc, driver, display = StrategyFactory.from_config(
            cfg, session.intrinsics, session.object_points, logger=self.logger
        )
        return InteractionLoop(
            session,
            cap,
            det,
            loc,
            driver,
            display,
            ScreenshotStorage(cfg.screenshot_dir),
            self.logger,
            keys=cfg.keys.bindings(),
            key_timeout_ms=cfg.key_timeout_ms,
            max_frames=cfg.max_frames,
        )

    def run(self) -> SessionSummary:
        file_handler = None
        if self.config.log_path:
            file_handler = add_file_handler(self.logger, self.config.camera_name, self.config.log_path)

        try:
            self.logger.info("welcome to the Augmented Museum")
            self.logger.info("config: %s", self.config.as_dict())

            marker_path = None
            if self.config.create_marker:
                marker_id = random.randint(1, 249)
                marker_path = str(create_marker(marker_id, self.config.aruco_dict))
                self.logger.info("ArUco marker %d saved as %s", marker_id, marker_path)

            session = self.build_session()
            self.loop = self.build_loop(session)
            if self._stop_requested:
                self.loop.stop()

            summary: LoopSummary = self.loop.run()
        finally:
            if file_handler is not None:
                close_handler(self.logger, file_handler)

        return SessionSummary(
            summary.frames,
            summary.screenshots,
            summary.overlay_failures,
            summary.avg_fps,
            marker_path,
        )
