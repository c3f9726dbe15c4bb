"""Display targets. Showing a frame and polling the keyboard are separate
calls so the interaction loop can be driven without a window."""

from abc import ABC, abstractmethod
from typing import Optional

import cv2
import numpy as np


class Display(ABC):
    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def show(self, image: np.ndarray) -> None: ...

    @abstractmethod
    def poll_key(self, timeout_ms: int) -> Optional[int]:
        """Wait up to `timeout_ms` for a key; None if nothing was pressed."""

    @abstractmethod
    def close(self) -> None: ...


class OpenCVWindow(Display):
    def __init__(self, window_name: str = "Main Window"):
        self.window_name = window_name
        self._opened = False

    def open(self) -> None:
        cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
        self._opened = True

    def show(self, image: np.ndarray) -> None:
        cv2.imshow(self.window_name, image)

    def poll_key(self, timeout_ms: int) -> Optional[int]:
        key = cv2.waitKey(max(1, int(timeout_ms)))
        if key < 0:
            return None
        return key & 0xFF

    def close(self) -> None:
        if self._opened:
            cv2.destroyWindow(self.window_name)
            self._opened = False


class HeadlessDisplay(Display):
    """Discards frames and never reports a key."""

    def __init__(self):
        self.shown = 0

    def open(self) -> None:
        return None

    def show(self, image: np.ndarray) -> None:
        self.shown += 1

    def poll_key(self, timeout_ms: int) -> Optional[int]:
        return None

    def close(self) -> None:
        return None
