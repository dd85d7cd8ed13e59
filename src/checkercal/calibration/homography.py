"""
Homography estimation and decomposition into intrinsics and extrinsics.

Pure functions - no state.
"""

from __future__ import annotations

import logging
from typing import Sequence

import cv2
import numpy as np
from scipy.linalg import ldl

from ..types import CalibrationResult, CornerMatch, DetectionConfig

logger = logging.getLogger(__name__)


# ============================================================================
# Estimation
# ============================================================================


def compute_homography(matches: Sequence[CornerMatch]) -> np.ndarray:
    """
    Estimate the homography taking detected points onto the ground truth.

    Args:
        matches: At least four correspondences

    Returns:
        (3, 3) homography normalised so H[2, 2] == 1

    Raises:
        ValueError: If there are fewer than four matches or they are degenerate
    """
    if len(matches) < 4:
        raise ValueError(f"Need at least 4 correspondences, got {len(matches)}")

    src = np.array([m.detected for m in matches], dtype=np.float64)
    dst = np.array([m.ground_truth for m in matches], dtype=np.float64)

    homography, _ = cv2.findHomography(src, dst, 0)
    if homography is None or abs(homography[2, 2]) < 1e-12:
        raise ValueError("Correspondences are degenerate, no homography")

    return homography / homography[2, 2]


# ============================================================================
# Decomposition
# ============================================================================


def intrinsic_from_homography(homography: np.ndarray) -> np.ndarray | None:
    """
    Upper-triangular K from an LDL^T factorisation of H.

    H is made symmetric from its lower triangle. The factor L * sqrt(|D|)
    is scaled so its last diagonal entry is 1 and transposed.

    Returns:
        (3, 3) K, or None if the factorisation has 2x2 pivot blocks or a
        zero pivot
    """
    lower = np.tril(homography)
    symmetric = lower + np.tril(homography, -1).T

    lu, d, perm = ldl(symmetric, lower=True)
    if np.any(np.diag(d, -1) != 0):
        logger.debug("LDL factorisation needed a 2x2 pivot block")
        return None

    pivots = np.diag(d)
    if np.any(np.abs(pivots) < 1e-12):
        logger.debug("LDL factorisation hit a zero pivot")
        return None

    factor = lu[perm] * np.sqrt(np.abs(pivots))
    factor = factor / factor[2, 2]
    return factor.T


def decompose_homography(
    homography: np.ndarray,
    config: DetectionConfig | None = None,
) -> CalibrationResult:
    """
    Split a homography into intrinsic K and extrinsic T = K^-1 H.

    The first two columns of T are rotation vectors and have to be
    orthogonal, otherwise H is not a rigid planar transform and the
    decomposition is rejected.

    The factorisation only sees the lower triangle of H. A fronto-parallel
    view K[r0 r1 t] with an unrotated board decomposes exactly. Once the
    board is rotated the factor is no longer K and the check rejects it.

    Args:
        homography: (3, 3) matrix
        config: DetectionConfig (defaults used if None)

    Returns:
        CalibrationResult; intrinsic and extrinsic are None on failure

    Raises:
        ValueError: If homography is not 3x3 or not finite
    """
    config = config or DetectionConfig()

    h = np.asarray(homography, dtype=np.float64)
    if h.shape != (3, 3):
        raise ValueError(f"Homography must be 3x3, got {h.shape}")
    if not np.all(np.isfinite(h)):
        raise ValueError("Homography has non-finite entries")

    k = intrinsic_from_homography(h)
    if k is None:
        return CalibrationResult(success=False, reason="Homography has no LDL^T factorisation")

    t = np.linalg.solve(k, h)
    r0, r1 = t[:, 0], t[:, 1]
    norms = np.linalg.norm(r0) * np.linalg.norm(r1)
    if norms == 0:
        return CalibrationResult(success=False, reason="Rotation vector has zero length")

    cosine = abs(float(r0 @ r1)) / norms
    if cosine > config.orthogonality_tolerance:
        logger.warning("Rotation vectors are not orthogonal (|cos| = %.3g)", cosine)
        return CalibrationResult(
            success=False,
            reason=f"Rotation vectors are not orthogonal (|cos| = {cosine:.3g})",
        )

    return CalibrationResult(success=True, intrinsic=k, extrinsic=t)
