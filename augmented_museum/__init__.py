"""Augmented Museum: virtual paintings hung on ArUco markers."""

from .app import MuseumApp
from .config import MuseumConfig

__all__ = ["MuseumApp", "MuseumConfig"]
