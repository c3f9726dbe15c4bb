"""Marker-guided overlay compositing pipeline."""

from .driver import MarkerOverlayDriver, OverlayPolicy
from .facade import InteractionLoop, MuseumSession
from .services.gallery import Direction, GalleryState

__all__ = [
    "Direction",
    "GalleryState",
    "InteractionLoop",
    "MarkerOverlayDriver",
    "MuseumSession",
    "OverlayPolicy",
]
