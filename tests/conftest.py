import cv2
import numpy as np
import pytest

from museum_pipeline.coordinates import build_object_points
from museum_pipeline.mp_types import CameraIntrinsics, Detection, OverlayImage
from museum_pipeline.services.gallery import GalleryState

MARKER_LENGTH = 200.0
# Marker facing the camera: object +Y maps to image up.
FACING_RVEC = np.array([np.pi, 0.0, 0.0])


@pytest.fixture
def intrinsics():
    K = np.array([[800.0, 0.0, 320.0], [0.0, 800.0, 240.0], [0.0, 0.0, 1.0]])
    return CameraIntrinsics(K, np.zeros((5, 1)))


@pytest.fixture
def object_points():
    return build_object_points(MARKER_LENGTH)


@pytest.fixture
def make_marker(intrinsics, object_points):
    """Build a Detection whose corners are the exact projection of the given pose."""

    def _make(marker_id=1, x=0.0, y=0.0, z=1000.0, rvec=FACING_RVEC):
        tvec = np.array([x, y, z], dtype=np.float64)
        corners, _ = cv2.projectPoints(
            object_points,
            np.asarray(rvec, dtype=np.float64),
            tvec,
            intrinsics.camera_matrix,
            intrinsics.dist_coeffs,
        )
        return Detection(marker_id, corners.reshape(4, 2), np.asarray(rvec, dtype=np.float64), tvec)

    return _make


def _solid(value: int, h: int = 72, w: int = 56) -> np.ndarray:
    return np.full((h, w, 3), value, dtype=np.uint8)


@pytest.fixture
def gallery3():
    return GalleryState(
        [
            OverlayImage("first.png", _solid(50)),
            OverlayImage("second.png", _solid(100)),
            OverlayImage("third.png", _solid(150)),
        ]
    )


@pytest.fixture
def blank_frame():
    return np.zeros((480, 640, 3), dtype=np.uint8)


@pytest.fixture
def solid_image():
    """Factory for single-colour BGR overlays, 56x72 by default."""
    return _solid
