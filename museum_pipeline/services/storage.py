import time
from pathlib import Path

import cv2


class ScreenshotStorage:
    """Writes composited frames to <root>/YYYYmmdd_HHMMSS.png."""

    def __init__(self, root: str | Path = "img", ext: str = ".png"):
        self.root = Path(root)
        self.ext = ext
        self.last_path = None

    def _next_path(self) -> Path:
        stem = time.strftime('%Y%m%d_%H%M%S')
        p = self.root / f"{stem}{self.ext}"
        n = 1
        # several shots in the same second get a numeric suffix
        while p.exists():
            p = self.root / f"{stem}_{n}{self.ext}"
            n += 1
        return p

    def save(self, image) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        p = self._next_path()
        if not cv2.imwrite(str(p), image):
            raise OSError(f"Failed to write screenshot: {p}")
        self.last_path = str(p)
        return self.last_path
