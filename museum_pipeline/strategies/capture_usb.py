import time
import re
from abc import ABC, abstractmethod
from typing import Any

import cv2
import numpy as np

from ..errors import CaptureError
from ..mp_types import Frame


class BaseCapture(ABC):
    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def next_frame(self) -> Frame | None: ...

    @abstractmethod
    def stop(self) -> None: ...


class USBOpenCVCapture(BaseCapture):
    """Camera index, /dev/videoN path, video file or stream URL via cv2.VideoCapture."""

    def __init__(self, device: int | str, fps: int = 0, width: int = 0, height: int = 0):
        self.device = device
        self.fps = fps
        self.width = width
        self.height = height
        self.cap: Any = None
        self.idx = 0

    def start(self) -> None:
        if isinstance(self.device, int):
            self.cap = cv2.VideoCapture(self.device)
        else:
            dev_str = str(self.device)
            match = re.match(r"^/dev/video(\d+)$", dev_str)
            if match:
                self.cap = cv2.VideoCapture(int(match.group(1)), cv2.CAP_V4L2)
            else:
                self.cap = cv2.VideoCapture(dev_str)

        if self.width > 0:
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        if self.height > 0:
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        if self.fps > 0:
            self.cap.set(cv2.CAP_PROP_FPS, self.fps)

        if not self.cap.isOpened():
            raise CaptureError(f"Failed to open camera: {self.device}")
        self.idx = 0

    def next_frame(self) -> Frame | None:
        if self.cap is None:
            return None
        ok, img = self.cap.read()
        if not ok:
            return None
        self.idx += 1
        ts = time.strftime("%Y-%m-%dT%H:%M:%S")
        return Frame(self.idx, ts, img)

    def stop(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None


class SyntheticCapture(BaseCapture):
    """Blank frames at a fixed rate, for dry runs without a camera.

    A width or height of 0 (the "camera default" config value) becomes 640x480.
    """

    DEFAULT_SIZE = (640, 480)

    def __init__(self, fps: int, width: int = 0, height: int = 0):
        self.fps = fps
        self.width = width if width > 0 else self.DEFAULT_SIZE[0]
        self.height = height if height > 0 else self.DEFAULT_SIZE[1]
        self.idx = 0
        self._last = 0.0

    def start(self) -> None:
        self._last = time.time()

    def next_frame(self) -> Frame | None:
        now = time.time()
        if self.fps > 0:
            wait = max(0.0, (1.0 / self.fps) - (now - self._last))
            if wait > 0:
                time.sleep(wait)
        self._last = time.time()
        self.idx += 1
        img = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        ts = time.strftime("%Y-%m-%dT%H:%M:%S")
        return Frame(self.idx, ts, img)

    def stop(self) -> None:
        return None
