import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import cv2

from ..errors import GalleryError
from ..mp_types import OverlayImage

# Display size every painting is resized to (width, height).
DEFAULT_OVERLAY_SIZE = (560, 720)


class Direction(Enum):
    FORWARD = 1
    BACKWARD = -1


@dataclass
class GalleryState:
    """Ordered overlay images plus the index of the selected one."""

    images: list[OverlayImage]
    current_index: int = 0

    def __post_init__(self):
        if not self.images:
            raise GalleryError("Gallery is empty; at least one overlay image is required")
        if not 0 <= self.current_index < len(self.images):
            raise GalleryError(
                f"current_index {self.current_index} out of range for {len(self.images)} images"
            )

    def __len__(self) -> int:
        return len(self.images)

    def current(self) -> OverlayImage:
        return self.images[self.current_index]

    def cycle(self, direction: Direction) -> int:
        self.current_index = (self.current_index + direction.value) % len(self.images)
        return self.current_index

    def for_marker(self, marker_id: int) -> OverlayImage:
        """Stable image-per-marker mapping: images[id mod N]."""
        return self.images[marker_id % len(self.images)]


def load_gallery(
    path: str | Path,
    size: tuple[int, int] = DEFAULT_OVERLAY_SIZE,
    logger: Optional[logging.Logger] = None,
) -> GalleryState:
    """
    Load every readable image in `path` into a GalleryState.

    Files are visited in sorted name order and resized to `size` (width, height).
    Unreadable files are skipped with a warning.

    Raises:
        GalleryError: if the directory is missing or no image could be loaded
    """
    log = logger or logging.getLogger("museum_pipeline")
    root = Path(path)
    if not root.is_dir():
        raise GalleryError(f"Image directory not found: {root}")

    log.info("loading images from %s", root)
    images: list[OverlayImage] = []
    for p in sorted(root.iterdir()):
        if not p.is_file():
            continue
        img = cv2.imread(str(p))
        if img is None:
            log.warning("failed to load image: %s", p)
            continue
        overlay = cv2.resize(img, size, interpolation=cv2.INTER_LINEAR)
        images.append(OverlayImage(p.name, overlay))
        log.info("loaded image: %s", p)

    if not images:
        raise GalleryError(f"Unable to load any images from {root}")

    log.info("number of images loaded: %d", len(images))
    return GalleryState(images)
