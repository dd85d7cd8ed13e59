"""
Tests for checkercal.calibration.homography.
"""

import numpy as np
import pytest

from checkercal.calibration.homography import (
    compute_homography,
    decompose_homography,
    intrinsic_from_homography,
)
from checkercal.geometry import project_points
from checkercal.types import CornerMatch, DetectionConfig


def matches_through(homography, points):
    projected = project_points(homography, points)
    roles = ["top_left", "top_right", "bottom_left", "bottom_right"]
    return [
        CornerMatch(role=role, ground_truth=gt, detected=src, quad_id=i)
        for i, (role, src, gt) in enumerate(zip(roles, points, projected))
    ]


class TestComputeHomography:
    def test_recovers_known_transform(self):
        truth = np.array([
            [0.9, 0.1, 15.0],
            [-0.05, 1.1, -8.0],
            [1e-4, -2e-4, 1.0],
        ])
        points = np.array([[10.0, 20.0], [400.0, 25.0], [15.0, 300.0], [390.0, 310.0]])

        homography = compute_homography(matches_through(truth, points))

        np.testing.assert_array_almost_equal(homography, truth, decimal=6)

    def test_normalised(self):
        points = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        homography = compute_homography(matches_through(3 * np.eye(3), points))
        assert homography[2, 2] == pytest.approx(1.0)

    def test_needs_four_matches(self):
        points = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        with pytest.raises(ValueError, match="at least 4"):
            compute_homography(matches_through(np.eye(3), points)[:3])


class TestIntrinsicFromHomography:
    def test_upper_triangular(self):
        h = np.array([
            [4.0, 7.0, -3.0],
            [2.0, 3.0, 5.0],
            [1.0, 1.0, 2.0],
        ])
        k = intrinsic_from_homography(h)
        np.testing.assert_array_almost_equal(np.tril(k, -1), np.zeros((3, 3)))
        assert k[2, 2] == pytest.approx(1.0)

    def test_diagonal(self):
        k = intrinsic_from_homography(np.diag([800.0, 600.0, 1.0]))
        np.testing.assert_array_almost_equal(
            k, np.diag([np.sqrt(800.0), np.sqrt(600.0), 1.0])
        )


class TestDecomposeHomography:
    def test_identity(self):
        result = decompose_homography(np.eye(3))
        assert result.success
        np.testing.assert_array_almost_equal(result.intrinsic, np.eye(3))
        np.testing.assert_array_almost_equal(result.extrinsic, np.eye(3))

    def test_scaling_homography(self):
        h = np.diag([800.0, 600.0, 1.0])
        result = decompose_homography(h)

        assert result.success
        np.testing.assert_array_almost_equal(result.intrinsic @ result.extrinsic, h)
        assert result.extrinsic[:, 0] @ result.extrinsic[:, 1] == pytest.approx(0.0)

    def test_fronto_parallel_camera(self):
        """K [r0 r1 t] with identity rotation and a principal point."""
        k = np.array([
            [800.0, 0.0, 320.0],
            [0.0, 800.0, 240.0],
            [0.0, 0.0, 1.0],
        ])
        result = decompose_homography(k)

        assert result.success
        np.testing.assert_array_almost_equal(
            result.intrinsic, np.diag([np.sqrt(800.0), np.sqrt(800.0), 1.0])
        )
        np.testing.assert_array_almost_equal(result.intrinsic @ result.extrinsic, k)

    def test_in_plane_rotation_rejected(self):
        """Rotating the board 0.2 rad about the optical axis breaks orthogonality."""
        k = np.array([
            [800.0, 0.0, 320.0],
            [0.0, 800.0, 240.0],
            [0.0, 0.0, 1.0],
        ])
        c, s = np.cos(0.2), np.sin(0.2)
        extrinsic = np.array([
            [c, -s, 0.0],
            [s, c, 0.0],
            [0.0, 0.0, 1.0],
        ])
        result = decompose_homography(k @ extrinsic)

        assert not result.success
        assert result.intrinsic is None
        assert result.extrinsic is None
        assert result.reason.startswith("Rotation vectors are not orthogonal")

    def test_non_rigid_homography_fails(self):
        h = np.array([
            [4.0, 7.0, -3.0],
            [2.0, 3.0, 5.0],
            [1.0, 1.0, 2.0],
        ])
        result = decompose_homography(h)

        assert not result.success
        assert result.intrinsic is None
        assert result.extrinsic is None
        assert "orthogonal" in result.reason

    def test_tolerance_is_configurable(self):
        h = np.array([
            [4.0, 7.0, -3.0],
            [2.0, 3.0, 5.0],
            [1.0, 1.0, 2.0],
        ])
        result = decompose_homography(h, DetectionConfig(orthogonality_tolerance=1.0))
        assert result.success

    def test_singular_fails(self):
        result = decompose_homography(np.zeros((3, 3)))
        assert not result.success
        assert result.intrinsic is None

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError, match="3x3"):
            decompose_homography(np.eye(4))

    def test_rejects_nan(self):
        h = np.eye(3)
        h[0, 1] = np.nan
        with pytest.raises(ValueError, match="non-finite"):
            decompose_homography(h)
