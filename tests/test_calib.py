from unittest.mock import patch

import numpy as np
import pytest

from museum_pipeline.errors import CalibrationError, FatalError
from museum_pipeline.services import calib as calib_mod
from museum_pipeline.services.calib import load_calib

CAMERA_MATRIX = """camera_matrix: !!opencv-matrix
   rows: 3
   cols: 3
   dt: d
   data: [ 800., 0., 320., 0., 800., 240., 0., 0., 1. ]
"""

DIST_COEFFS = """dist_coeffs: !!opencv-matrix
   rows: 1
   cols: 5
   dt: d
   data: [ 0.1, -0.05, 0., 0., 0.01 ]
"""

ROTATION_VECTORS = """rotation_vectors:
   - !!opencv-matrix
      rows: 3
      cols: 1
      dt: d
      data: [ 0.1, 0.2, 0.3 ]
   - !!opencv-matrix
      rows: 3
      cols: 1
      dt: d
      data: [ 0.4, 0.5, 0.6 ]
"""


def _write_calib(tmp_path, *sections, name="calibration.yml"):
    path = tmp_path / name
    path.write_text("%YAML:1.0\n---\n" + "".join(sections))
    return path


def test_load_valid_calibration(tmp_path):
    path = _write_calib(tmp_path, CAMERA_MATRIX, DIST_COEFFS, ROTATION_VECTORS)

    intr = load_calib(path)

    assert intr.camera_matrix.shape == (3, 3)
    assert intr.camera_matrix[0, 0] == pytest.approx(800.0)
    assert intr.camera_matrix[1, 2] == pytest.approx(240.0)
    assert intr.dist_coeffs.shape == (5, 1)
    assert np.allclose(intr.dist_coeffs.ravel(), [0.1, -0.05, 0.0, 0.0, 0.01])
    assert len(intr.rotation_vectors) == 2
    assert np.allclose(intr.rotation_vectors[1].ravel(), [0.4, 0.5, 0.6])
    assert intr.translation_vectors == ()


def test_missing_dist_coeffs_is_fatal(tmp_path):
    path = _write_calib(tmp_path, CAMERA_MATRIX)
    with pytest.raises(CalibrationError, match="dist_coeffs"):
        load_calib(path)


def test_missing_camera_matrix(tmp_path):
    path = _write_calib(tmp_path, DIST_COEFFS)
    with pytest.raises(CalibrationError, match="camera_matrix"):
        load_calib(path)


def test_missing_file(tmp_path):
    with pytest.raises(CalibrationError):
        load_calib(tmp_path / "missing.xml")


def test_unparseable_file(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("%YAML:1.0\n---\ncamera_matrix: [ unclosed\n")
    with pytest.raises(CalibrationError):
        load_calib(path)


def test_camera_matrix_wrong_shape(tmp_path):
    bad = """camera_matrix: !!opencv-matrix
   rows: 2
   cols: 2
   dt: d
   data: [ 1., 0., 0., 1. ]
"""
    path = _write_calib(tmp_path, bad, DIST_COEFFS)
    with pytest.raises(CalibrationError, match="3x3"):
        load_calib(path)


def test_calibration_error_is_fatal(tmp_path):
    with pytest.raises(FatalError):
        load_calib(tmp_path / "missing.xml")


def test_parser_system_error_becomes_calibration_error(tmp_path):
    path = _write_calib(tmp_path, CAMERA_MATRIX, DIST_COEFFS)
    failure = SystemError("<class 'cv2.FileStorage'> returned a result with an exception set")
    with patch.object(calib_mod.cv2, "FileStorage", side_effect=failure):
        with pytest.raises(CalibrationError, match="Failed to parse"):
            load_calib(path)
