import logging
from pathlib import Path
from typing import Optional

import cv2, numpy as np

from ..errors import CalibrationError
from ..mp_types import CameraIntrinsics


def _read_mat(fs, key: str) -> Optional[np.ndarray]:
    node = fs.getNode(key)
    if node.isNone() or node.empty():
        return None
    m = node.mat()
    if m is None or m.size == 0:
        return None
    return m


def _read_mat_seq(fs, key: str) -> tuple:
    node = fs.getNode(key)
    if node.isNone() or not node.isSeq():
        return ()
    mats = []
    for i in range(node.size()):
        m = node.at(i).mat()
        if m is not None:
            mats.append(m)
    return tuple(mats)


def load_calib(path: str | Path, logger: Optional[logging.Logger] = None) -> CameraIntrinsics:
    """
    Read camera intrinsics from an OpenCV FileStorage file (YAML or XML).

    Required nodes: camera_matrix (3x3), dist_coeffs.
    Optional sequences: rotation_vectors, translation_vectors.

    Raises:
        CalibrationError: file missing or unparseable, or a required node missing
    """
    log = logger or logging.getLogger("museum_pipeline")
    p = Path(path)
    if not p.is_file():
        raise CalibrationError(f"Calibration file not found: {p}")

    # OpenCV 5 surfaces parser failures as SystemError
    try:
        fs = cv2.FileStorage(str(p), cv2.FILE_STORAGE_READ)
    except (cv2.error, SystemError) as exc:
        raise CalibrationError(f"Failed to parse calibration file {p}: {exc}") from exc
    if not fs.isOpened():
        raise CalibrationError(f"Failed to open calibration file: {p}")

    try:
        K = _read_mat(fs, "camera_matrix")
        dist = _read_mat(fs, "dist_coeffs")
        rvecs = _read_mat_seq(fs, "rotation_vectors")
        tvecs = _read_mat_seq(fs, "translation_vectors")
    except (cv2.error, SystemError) as exc:
        raise CalibrationError(f"Error loading calibration file {p}: {exc}") from exc
    finally:
        fs.release()

    if K is None:
        raise CalibrationError(f"camera_matrix missing from {p}")
    if K.shape != (3, 3):
        raise CalibrationError(f"camera_matrix must be 3x3, got {K.shape}")
    if dist is None:
        raise CalibrationError(f"dist_coeffs missing from {p}")

    intrinsics = CameraIntrinsics(
        K.astype(np.float64),
        dist.astype(np.float64).reshape(-1, 1),
        rvecs,
        tvecs,
    )
    log.info("camera matrix: %s", intrinsics.camera_matrix.tolist())
    log.info("distortion coefficients: %s", intrinsics.dist_coeffs.ravel().tolist())
    log.info("rotation vectors: %d translation vectors: %d", len(rvecs), len(tvecs))
    return intrinsics
