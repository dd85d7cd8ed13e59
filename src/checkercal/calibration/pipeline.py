"""
End-to-end checkerboard detection and calibration.

Chains extraction, linking, corner classification, numbering and
homography decomposition. Failures come back as results, not exceptions.
"""

from __future__ import annotations

import logging
from typing import Iterable

import numpy as np

from ..imaging import DebugTracer, ImageOps, NullTracer, OpenCVImageOps
from ..types import CalibrationResult, DetectionConfig, DetectionResult, Quad, QuadArena
from .extraction import extract_quads
from .homography import compute_homography, decompose_homography
from .linking import degree_histogram, link_corners
from .numbering import number_quads
from .topology import TopologyError, match_corners_for_homography

logger = logging.getLogger(__name__)


def binarize(
    image: np.ndarray,
    config: DetectionConfig | None = None,
    ops: ImageOps | None = None,
) -> np.ndarray | None:
    """
    Threshold a grayscale or BGR image so board squares are foreground.

    Returns:
        Binary image, or None if thresholding failed
    """
    config = config or DetectionConfig()
    ops = ops or OpenCVImageOps(config)
    return ops.threshold(image, config.threshold_block_size, config.threshold_constant)


def detect_quads(
    binary: np.ndarray,
    config: DetectionConfig | None = None,
    ops: ImageOps | None = None,
    tracer: DebugTracer | None = None,
    ground_truth: Iterable[Quad] | None = None,
) -> DetectionResult:
    """
    Extract and link quads from a binarized image, and number them when
    the canonical board is given.

    Args:
        binary: Thresholded image
        config: DetectionConfig (defaults used if None)
        ops: Pixel collaborator (OpenCV if None)
        tracer: Optional debug hooks
        ground_truth: Quads of the canonical board. If given, the linked
            quads go through number_detected

    Returns:
        DetectionResult; fails if fewer than min_quads quads were found or
        numbering was requested and failed
    """
    config = config or DetectionConfig()
    ops = ops or OpenCVImageOps(config)
    tracer = tracer or NullTracer()

    arena = extract_quads(binary, ops, config, tracer)
    link_corners(arena, config)
    logger.info(
        "Found %d quads, degrees %s", len(arena), sorted(degree_histogram(arena).items())
    )

    if len(arena) < config.min_quads:
        reason = f"Found {len(arena)} quads, need at least {config.min_quads}"
        logger.warning(reason)
        return DetectionResult(success=False, arena=arena, reason=reason)

    if ground_truth is not None:
        return number_detected(arena, ground_truth, config)
    return DetectionResult(success=True, arena=arena)


def detect_checkerboard(
    image: np.ndarray,
    ground_truth: Iterable[Quad],
    config: DetectionConfig | None = None,
    ops: ImageOps | None = None,
    tracer: DebugTracer | None = None,
) -> DetectionResult:
    """
    Threshold, detect, classify corners, estimate the homography and number
    every quad in the canonical row-major order.

    Args:
        image: Grayscale or BGR image of the board
        ground_truth: Quads of the canonical board (see ground_truth_quads)
        config: DetectionConfig (defaults used if None)
        ops: Pixel collaborator (OpenCV if None)
        tracer: Optional debug hooks

    Returns:
        DetectionResult with corner matches and homography on success
    """
    config = config or DetectionConfig()
    ops = ops or OpenCVImageOps(config)

    binary = binarize(image, config, ops)
    if binary is None:
        return DetectionResult(success=False, arena=QuadArena(), reason="Thresholding failed")

    return detect_quads(binary, config, ops, tracer, ground_truth)


def number_detected(
    arena: QuadArena,
    ground_truth: Iterable[Quad],
    config: DetectionConfig | None = None,
) -> DetectionResult:
    """
    Classify the grid corners of linked quads, build the homography onto
    the ground-truth plane and number the quads.
    """
    config = config or DetectionConfig()

    try:
        matches = match_corners_for_homography(ground_truth, arena, config)
        homography = compute_homography(matches)
    except TopologyError as e:
        logger.warning("Grid topology rejected: %s", e)
        return DetectionResult(success=False, arena=arena, reason=str(e))
    except ValueError as e:
        logger.warning("No homography: %s", e)
        return DetectionResult(success=False, arena=arena, reason=str(e))

    number_quads(homography, arena, config)

    return DetectionResult(
        success=True,
        arena=arena,
        corner_matches=matches,
        homography=homography,
    )


def calibrate_from_image(
    image: np.ndarray,
    ground_truth: Iterable[Quad],
    config: DetectionConfig | None = None,
    ops: ImageOps | None = None,
    tracer: DebugTracer | None = None,
) -> tuple[DetectionResult, CalibrationResult | None]:
    """
    Detect the board and decompose its homography.

    The homography used is the inverse of the detection homography, so it
    maps the board plane into the image.

    Returns:
        (detection, calibration); calibration is None if detection failed
    """
    detection = detect_checkerboard(image, ground_truth, config, ops, tracer)
    if not detection.success:
        return detection, None

    board_to_image = np.linalg.inv(detection.homography)
    board_to_image = board_to_image / board_to_image[2, 2]
    return detection, decompose_homography(board_to_image, config)
