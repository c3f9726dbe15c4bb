from unittest.mock import patch

import cv2
import numpy as np
import pytest

from museum_pipeline.coordinates import build_object_points, marker_length_of
from museum_pipeline.mp_types import Detection
from museum_pipeline.strategies import overlay as overlay_mod
from museum_pipeline.strategies.overlay import (
    CornerOverlay,
    PoseProjectedOverlay,
    overlay_homography,
    overlay_plane_points,
    overlay_rect,
    project_overlay_corners,
    quad_problem,
)


def test_object_points_square_centered_at_origin():
    pts = build_object_points(200)
    assert pts.shape == (4, 3)
    assert np.allclose(pts[:, 2], 0.0)
    assert np.allclose(pts.mean(axis=0), 0.0)
    # TL, TR, BR, BL
    assert np.allclose(pts[0], [-100, 100, 0])
    assert np.allclose(pts[1], [100, 100, 0])
    assert np.allclose(pts[2], [100, -100, 0])
    assert np.allclose(pts[3], [-100, -100, 0])
    assert marker_length_of(pts) == pytest.approx(200.0)


def test_overlay_plane_keeps_aspect_ratio():
    plane = overlay_plane_points((720, 560, 3), 200.0)
    width = plane[1, 0] - plane[0, 0]
    height = plane[0, 1] - plane[3, 1]
    assert height == pytest.approx(200.0)
    assert width / height == pytest.approx(560 / 720)

    doubled = overlay_plane_points((720, 560, 3), 200.0, scale=2.0)
    assert doubled[0, 1] - doubled[3, 1] == pytest.approx(400.0)


@pytest.mark.parametrize(
    "rvec,tvec",
    [
        ([np.pi, 0.0, 0.0], [0.0, 0.0, 1000.0]),
        ([np.pi + 0.3, 0.2, 0.1], [30.0, -20.0, 1200.0]),
        ([np.pi - 0.4, -0.3, 0.5], [-80.0, 40.0, 900.0]),
    ],
)
def test_homography_maps_projected_corners_back_to_overlay(intrinsics, rvec, tvec):
    """Inverse homography sends the projected corners back to the overlay rectangle."""
    shape = (720, 560, 3)
    plane = overlay_plane_points(shape, 200.0)
    projected = project_overlay_corners(plane, rvec, tvec, intrinsics)

    H = overlay_homography(shape, projected)
    assert H is not None

    back = cv2.perspectiveTransform(
        projected.reshape(-1, 1, 2), np.linalg.inv(H)
    ).reshape(-1, 2)
    assert np.allclose(back, overlay_rect(shape), atol=1e-3)


def test_pose_overlay_paints_only_inside_footprint(
    blank_frame, solid_image, make_marker, object_points, intrinsics
):
    marker = make_marker()
    outcome = PoseProjectedOverlay().composite(
        blank_frame, solid_image(200), marker, object_points, intrinsics
    )

    assert outcome.applied is True
    assert outcome.reason is None
    # footprint spans x in [257.8, 382.2], y in [160, 320]
    assert (blank_frame[240, 320] == 200).all()
    assert (blank_frame[240, 300] == 200).all()
    assert (blank_frame[240, 250] == 0).all()
    assert (blank_frame[100, 320] == 0).all()
    assert (blank_frame[0, 0] == 0).all()


def test_pose_overlay_is_hard_cut_not_blend(make_marker, object_points, intrinsics, solid_image):
    frame = np.full((480, 640, 3), 90, dtype=np.uint8)
    PoseProjectedOverlay().composite(
        frame, solid_image(10), make_marker(), object_points, intrinsics
    )
    assert (frame[240, 320] == 10).all()
    assert (frame[5, 5] == 90).all()


def test_coincident_corners_leave_frame_untouched(
    blank_frame, solid_image, make_marker, object_points, intrinsics
):
    good = make_marker()
    marker = Detection(3, np.full((4, 2), 100.0), good.rvec, good.tvec)
    before = blank_frame.copy()

    outcome = PoseProjectedOverlay().composite(
        blank_frame, solid_image(200), marker, object_points, intrinsics
    )

    assert outcome.applied is False
    assert "zero-area" in outcome.reason
    assert np.array_equal(blank_frame, before)


def test_edge_on_pose_is_degenerate(blank_frame, solid_image, make_marker, object_points, intrinsics):
    """A plane seen edge-on projects to a line; nothing is drawn."""
    marker = make_marker()
    edge_on = Detection(1, marker.corners, np.array([0.0, np.pi / 2, 0.0]), marker.tvec)

    outcome = PoseProjectedOverlay().composite(
        blank_frame, solid_image(200), edge_on, object_points, intrinsics
    )

    assert outcome.applied is False
    assert outcome.reason.startswith("projected corners")
    assert not blank_frame.any()


def test_plane_behind_camera_is_skipped(blank_frame, solid_image, make_marker, object_points, intrinsics):
    marker = make_marker()
    behind = Detection(1, marker.corners, marker.rvec, np.array([0.0, 0.0, -1000.0]))

    outcome = PoseProjectedOverlay().composite(
        blank_frame, solid_image(200), behind, object_points, intrinsics
    )

    assert outcome.applied is False
    assert "behind camera" in outcome.reason
    assert not blank_frame.any()


def test_empty_overlay_is_skipped(blank_frame, make_marker, object_points, intrinsics):
    outcome = PoseProjectedOverlay().composite(
        blank_frame, np.zeros((0, 0, 3), dtype=np.uint8), make_marker(), object_points, intrinsics
    )
    assert outcome.applied is False
    assert not blank_frame.any()


def test_marker_without_pose_is_skipped(blank_frame, solid_image, make_marker, object_points, intrinsics):
    marker = make_marker()
    no_pose = Detection(1, marker.corners, None, None)

    outcome = PoseProjectedOverlay().composite(
        blank_frame, solid_image(200), no_pose, object_points, intrinsics
    )
    assert outcome.applied is False
    assert outcome.reason == "no pose estimate"


def test_corner_overlay_uses_detected_corners(blank_frame, solid_image, object_points, intrinsics):
    corners = np.array([[240, 160], [400, 160], [400, 320], [240, 320]], dtype=np.float32)
    marker = Detection(2, corners, None, None)

    outcome = CornerOverlay().composite(
        blank_frame, solid_image(200), marker, object_points, intrinsics
    )

    assert outcome.applied is True
    assert (blank_frame[240, 320] == 200).all()
    assert (blank_frame[240, 250] == 200).all()
    assert (blank_frame[240, 230] == 0).all()


def test_self_intersecting_corners_are_skipped(blank_frame, solid_image, object_points, intrinsics):
    bowtie = np.array([[240, 160], [400, 320], [400, 200], [240, 320]], dtype=np.float32)
    marker = Detection(2, bowtie, None, None)

    outcome = CornerOverlay().composite(
        blank_frame, solid_image(200), marker, object_points, intrinsics
    )

    assert outcome.applied is False
    assert "self-intersecting" in outcome.reason
    assert not blank_frame.any()


def test_color_overlay_on_grayscale_frame(solid_image, make_marker, object_points, intrinsics):
    gray = np.zeros((480, 640), dtype=np.uint8)
    outcome = PoseProjectedOverlay().composite(
        gray, solid_image(200), make_marker(), object_points, intrinsics
    )
    assert outcome.applied is True
    assert gray[240, 320] == 200


def test_opencv_failure_becomes_outcome(blank_frame, solid_image, make_marker, object_points, intrinsics):
    with patch.object(overlay_mod.cv2, "warpPerspective", side_effect=cv2.error("boom")):
        outcome = PoseProjectedOverlay().composite(
            blank_frame, solid_image(200), make_marker(), object_points, intrinsics
        )
    assert outcome.applied is False
    assert outcome.reason.startswith("opencv error")
    assert not blank_frame.any()


def test_quad_problem_reports():
    square = np.array([[0, 0], [10, 0], [10, 10], [0, 10]], dtype=np.float64)
    assert quad_problem(square) is None
    assert quad_problem(square[:3]) == "expected 4 corners, got 3"
    assert quad_problem(np.full((4, 2), np.nan)) == "non-finite corners"
    assert quad_problem(square * 1e7) == "corners out of range"
    crossed = np.array([[0, 0], [10, 10], [10, 3], [0, 10]], dtype=np.float64)
    assert quad_problem(crossed) == "self-intersecting quadrilateral"
