import cv2, numpy as np
from typing import Optional
from ..mp_types import CameraIntrinsics, Detection, Pose

class PnPLocalize:
    """Per-marker pose from the detected corners and the marker object points."""

    def __init__(self, intrinsics: CameraIntrinsics, object_points: np.ndarray,
                 flags: int = cv2.SOLVEPNP_ITERATIVE):
        self.K, self.dist = intrinsics.camera_matrix, intrinsics.dist_coeffs
        self.object_points = np.asarray(object_points, dtype=np.float32).reshape(4, 3)
        self.flags = flags

    def estimate(self, detections: list[Detection]) -> list[Optional[Pose]]:
        """One entry per detection, None where solvePnP did not converge."""
        poses: list[Optional[Pose]] = []
        for det in detections:
            img_pts = np.asarray(det.corners, dtype=np.float32).reshape(4, 2)
            try:
                ok, rvec, tvec = cv2.solvePnP(
                    self.object_points, img_pts, self.K, self.dist, flags=self.flags
                )
            except cv2.error:
                ok = False
            poses.append(Pose(rvec, tvec) if ok else None)
        return poses

    def locate(self, detections: list[Detection]) -> list[Detection]:
        """Detections with rvec/tvec filled in where a pose was found."""
        poses = self.estimate(detections)
        out = []
        for i, det in enumerate(detections):
            pose = poses[i] if i < len(poses) else None
            if pose is None:
                out.append(det)
            else:
                out.append(Detection(det.marker_id, det.corners, pose.rvec, pose.tvec))
        return out
