import time, logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from .driver import MarkerOverlayDriver
from .errors import CaptureError
from .keys import Command, KeyBindings
from .mp_types import CameraIntrinsics, Frame
from .services.gallery import Direction, GalleryState
from .services.storage import ScreenshotStorage


@dataclass
class MuseumSession:
    """Everything the per-frame loop reads; built once at startup."""
    intrinsics: CameraIntrinsics
    object_points: np.ndarray
    gallery: GalleryState


@dataclass
class LoopSummary:
    frames: int
    screenshots: list[str] = field(default_factory=list)
    overlay_failures: int = 0
    avg_fps: float = 0.0


class LoopState(Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


class InteractionLoop:
    def __init__(
        self,
        session: MuseumSession,
        cap,
        det,
        loc,
        driver: MarkerOverlayDriver,
        display,
        screenshots: ScreenshotStorage,
        logger: logging.Logger,
        keys: Optional[KeyBindings] = None,
        key_timeout_ms: int = 10,
        max_frames: Optional[int] = None,
    ):
        self.session = session
        self.cap = cap
        self.det = det
        self.loc = loc
        self.driver = driver
        self.display = display
        self.screenshots = screenshots
        self.log = logger
        self.keys = keys or KeyBindings()
        self.key_timeout_ms = key_timeout_ms
        self.max_frames = max_frames

        self.state = LoopState.RUNNING
        self.frames = 0
        self.overlay_failures = 0
        self.saved: list[str] = []

    def stop(self) -> None:
        self.state = LoopState.TERMINATED

    def render_frame(self, f: Frame) -> np.ndarray:
        """Detect, localize and composite; returns a new frame, `f` is untouched."""
        dets = self.det.detect(f)
        markers = self.loc.locate(dets) if self.loc is not None else dets
        out = f.image.copy()
        if markers:
            self.driver.render(
                out,
                markers,
                self.session.gallery,
                self.session.object_points,
                self.session.intrinsics,
            )
            self.overlay_failures += sum(1 for o in self.driver.last_outcomes if not o.applied)
        return out

    def dispatch(self, key: Optional[int], composited: np.ndarray) -> Optional[Command]:
        cmd = self.keys.command_for(key)
        if cmd is Command.QUIT:
            self.log.info("user terminated program")
            self.state = LoopState.TERMINATED
        elif cmd is Command.SCREENSHOT:
            try:
                path = self.screenshots.save(composited)
            except OSError as e:
                self.log.warning("screenshot failed: %s", e)
            else:
                self.saved.append(path)
                self.log.info("screenshot saved: %s", path)
        elif cmd is Command.CYCLE_LEFT:
            idx = self.session.gallery.cycle(Direction.BACKWARD)
            self.log.info("overlay -> %d (%s)", idx, self.session.gallery.current().name)
        elif cmd is Command.CYCLE_RIGHT:
            idx = self.session.gallery.cycle(Direction.FORWARD)
            self.log.info("overlay -> %d (%s)", idx, self.session.gallery.current().name)
        return cmd

    def step(self) -> LoopState:
        f = self.cap.next_frame()
        if f is None:
            raise CaptureError("Failed to read frame from capture source")

        out = self.render_frame(f)
        self.display.show(out)
        self.frames += 1

        # commands apply from the next frame on
        self.dispatch(self.display.poll_key(self.key_timeout_ms), out)

        if self.max_frames and self.frames >= self.max_frames:
            self.state = LoopState.TERMINATED
        return self.state

    def run(self) -> LoopSummary:
        t0 = time.time()
        try:
            self.cap.start()
            self.display.open()
            try:
                while self.state is LoopState.RUNNING:
                    self.step()
            finally:
                try:
                    self.display.close()
                except Exception as e:
                    self.log.warning("display release failed: %s", e)
        finally:
            try:
                self.cap.stop()
            except Exception as e:
                self.log.warning("capture release failed: %s", e)

        avg = self.frames / max(1e-6, (time.time() - t0))
        self.log.info(
            "summary frames=%d avg_fps=%.2f screenshots=%d overlay_failures=%d",
            self.frames, avg, len(self.saved), self.overlay_failures,
        )
        return LoopSummary(self.frames, list(self.saved), self.overlay_failures, avg)
