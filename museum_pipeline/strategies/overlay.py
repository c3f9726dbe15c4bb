"""
Overlay strategies: warp a flat image into a marker's on-screen footprint.

Both strategies share the same compositing step (homography warp, convex
polygon mask, hard-cut copy into the destination frame). They differ in how
the four destination corners are obtained:

- PoseProjectedOverlay projects a plane sized to the marker through the
  estimated pose, so perspective stays correct while the marker tilts.
- CornerOverlay maps straight onto the detected 2D corners; usable when no
  pose is available.

A composite never raises for per-frame geometry problems. It returns an
OverlayOutcome and leaves the destination untouched when it cannot apply.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import cv2
import numpy as np

from ..coordinates import marker_length_of
from ..mp_types import CameraIntrinsics, Detection, OverlayOutcome

# Pixel coordinates beyond this are treated as a failed projection.
MAX_COORD = 1e6


def overlay_rect(overlay_shape) -> np.ndarray:
    """Corners of the overlay image itself, TL, TR, BR, BL."""
    h, w = overlay_shape[:2]
    return np.array([[0, 0], [w, 0], [w, h], [0, h]], dtype=np.float32)


def overlay_plane_points(overlay_shape, marker_length: float, scale: float = 1.0) -> np.ndarray:
    """
    Object-space corners of the plane the overlay is hung on.

    The plane is as tall as the marker (times `scale`), keeps the overlay's own
    aspect ratio, is centered on the marker and lies in its Z=0 plane.
    """
    h, w = overlay_shape[:2]
    plane_h = marker_length * scale
    plane_w = plane_h * w / h
    hx, hy = plane_w / 2.0, plane_h / 2.0
    return np.array(
        [[-hx, hy, 0.0], [hx, hy, 0.0], [hx, -hy, 0.0], [-hx, -hy, 0.0]],
        dtype=np.float32,
    )


def _as_vec3(v) -> np.ndarray:
    return np.asarray(v, dtype=np.float64).reshape(3, 1)


def plane_depths(plane_points: np.ndarray, rvec, tvec) -> np.ndarray:
    """Camera-frame Z of each plane point."""
    R, _ = cv2.Rodrigues(_as_vec3(rvec))
    cam = (R @ plane_points.astype(np.float64).T) + _as_vec3(tvec)
    return cam[2]


def project_overlay_corners(
    plane_points: np.ndarray, rvec, tvec, intrinsics: CameraIntrinsics
) -> np.ndarray:
    """Project plane corners to image space. Returns (4, 2) float64."""
    img_pts, _ = cv2.projectPoints(
        plane_points,
        _as_vec3(rvec),
        _as_vec3(tvec),
        intrinsics.camera_matrix,
        intrinsics.dist_coeffs,
    )
    return img_pts.reshape(-1, 2).astype(np.float64)


def overlay_homography(overlay_shape, image_points: np.ndarray) -> Optional[np.ndarray]:
    """Homography from the overlay rectangle to `image_points`, or None if degenerate."""
    src = overlay_rect(overlay_shape)
    dst = np.asarray(image_points, dtype=np.float32).reshape(-1, 2)
    H, _ = cv2.findHomography(src, dst)
    if H is None or not np.all(np.isfinite(H)):
        return None
    if abs(np.linalg.det(H)) < 1e-12:
        return None
    return H


def quad_problem(points, min_area: float = 1.0) -> Optional[str]:
    """Describe why a quadrilateral cannot be used as a footprint, or None if it can."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if pts.shape[0] != 4:
        return f"expected 4 corners, got {pts.shape[0]}"
    if not np.all(np.isfinite(pts)):
        return "non-finite corners"
    if np.abs(pts).max() > MAX_COORD:
        return "corners out of range"
    contour = pts.astype(np.float32).reshape(-1, 1, 2)
    if abs(cv2.contourArea(contour)) < min_area:
        return "zero-area quadrilateral"
    if not cv2.isContourConvex(contour):
        return "self-intersecting quadrilateral"
    return None


def _match_channels(src: np.ndarray, dest: np.ndarray) -> np.ndarray:
    src_ch = 1 if src.ndim == 2 else src.shape[2]
    dest_ch = 1 if dest.ndim == 2 else dest.shape[2]
    if src_ch == dest_ch:
        return src
    codes = {
        (3, 1): cv2.COLOR_BGR2GRAY,
        (4, 1): cv2.COLOR_BGRA2GRAY,
        (1, 3): cv2.COLOR_GRAY2BGR,
        (4, 3): cv2.COLOR_BGRA2BGR,
        (1, 4): cv2.COLOR_GRAY2BGRA,
        (3, 4): cv2.COLOR_BGR2BGRA,
    }
    return cv2.cvtColor(src, codes[(src_ch, dest_ch)])


def paste_warped(dest: np.ndarray, overlay: np.ndarray, H: np.ndarray, quad: np.ndarray) -> None:
    """Warp `overlay` by `H` and copy it into `dest` inside the convex `quad` only."""
    h, w = dest.shape[:2]
    warped = cv2.warpPerspective(_match_channels(overlay, dest), H, (w, h))

    mask = np.zeros((h, w), dtype=np.uint8)
    polygon = np.rint(np.asarray(quad).reshape(-1, 2)).astype(np.int32)
    cv2.fillConvexPoly(mask, polygon, 255)

    inside = mask > 0
    dest[inside] = warped[inside]


class OverlayStrategy(ABC):
    """Composite one overlay image into one marker's footprint."""

    def __init__(self, min_area: float = 1.0):
        self.min_area = min_area

    @abstractmethod
    def target_corners(
        self,
        overlay: np.ndarray,
        marker: Detection,
        object_points: np.ndarray,
        intrinsics: CameraIntrinsics,
    ) -> Tuple[Optional[np.ndarray], Optional[str]]:
        """Return (corners, None) or (None, reason)."""

    def composite(
        self,
        dest: np.ndarray,
        overlay: np.ndarray,
        marker: Detection,
        object_points: np.ndarray,
        intrinsics: CameraIntrinsics,
    ) -> OverlayOutcome:
        mid = marker.marker_id
        if overlay is None or overlay.ndim < 2 or overlay.shape[0] == 0 or overlay.shape[1] == 0:
            return OverlayOutcome.skipped(mid, "empty overlay image")

        if marker.corners is not None:
            problem = quad_problem(marker.corners, self.min_area)
            if problem:
                return OverlayOutcome.skipped(mid, f"detected corners: {problem}")

        try:
            quad, reason = self.target_corners(overlay, marker, object_points, intrinsics)
            if quad is None:
                return OverlayOutcome.skipped(mid, reason or "no target corners")

            problem = quad_problem(quad, self.min_area)
            if problem:
                return OverlayOutcome.skipped(mid, f"projected corners: {problem}")

            H = overlay_homography(overlay.shape, quad)
            if H is None:
                return OverlayOutcome.skipped(mid, "degenerate homography")

            paste_warped(dest, overlay, H, quad)
        except cv2.error as exc:
            return OverlayOutcome.skipped(mid, f"opencv error: {exc}")

        return OverlayOutcome.ok(mid)


class PoseProjectedOverlay(OverlayStrategy):
    """Hang the overlay on a plane sized to the marker, projected through its pose."""

    def __init__(self, overlay_scale: float = 1.0, min_area: float = 1.0):
        super().__init__(min_area)
        self.overlay_scale = overlay_scale

    def target_corners(self, overlay, marker, object_points, intrinsics):
        if not marker.has_pose:
            return None, "no pose estimate"
        plane = overlay_plane_points(
            overlay.shape, marker_length_of(object_points), self.overlay_scale
        )
        if np.any(plane_depths(plane, marker.rvec, marker.tvec) <= 0):
            return None, "overlay plane behind camera"
        return project_overlay_corners(plane, marker.rvec, marker.tvec, intrinsics), None


class CornerOverlay(OverlayStrategy):
    """Map the overlay straight onto the detected corners; ignores pose."""

    def target_corners(self, overlay, marker, object_points, intrinsics):
        if marker.corners is None:
            return None, "no detected corners"
        return np.asarray(marker.corners, dtype=np.float64).reshape(-1, 2), None
