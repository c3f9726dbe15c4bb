import logging
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from .mp_types import CameraIntrinsics, Detection, OverlayImage, OverlayOutcome
from .services.gallery import GalleryState
from .strategies.overlay import OverlayStrategy


class OverlayPolicy(str, Enum):
    SINGLE = "single"  # every marker shows the selected painting
    MULTI = "multi"    # marker id picks images[id mod N]


class MarkerOverlayDriver:
    def __init__(
        self,
        strategy: OverlayStrategy,
        policy: OverlayPolicy | str = OverlayPolicy.SINGLE,
        logger: Optional[logging.Logger] = None,
    ):
        self.strategy = strategy
        self.policy = OverlayPolicy(policy)
        self.log = logger or logging.getLogger("museum_pipeline")
        self.last_outcomes: list[OverlayOutcome] = []

    def select_overlay(self, gallery: GalleryState, marker_id: int) -> OverlayImage:
        if self.policy is OverlayPolicy.MULTI:
            return gallery.for_marker(marker_id)
        return gallery.current()

    def render(
        self,
        dest: np.ndarray,
        markers: Sequence[Detection],
        gallery: GalleryState,
        object_points: np.ndarray,
        intrinsics: CameraIntrinsics,
    ) -> np.ndarray:
        """Composite an overlay into every marker's footprint; `dest` is modified in place."""
        outcomes = []
        for marker in markers:
            overlay = self.select_overlay(gallery, marker.marker_id)
            outcome = self.strategy.composite(
                dest, overlay.image, marker, object_points, intrinsics
            )
            if not outcome.applied:
                self.log.warning(
                    "marker %d: overlay '%s' skipped (%s)",
                    marker.marker_id, overlay.name, outcome.reason,
                )
            outcomes.append(outcome)
        self.last_outcomes = outcomes
        return dest
