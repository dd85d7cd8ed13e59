"""
Quad extraction by iterative erosion.

Each pass erodes the cumulative image a little more, so squares that touch
at their corners separate at some point and show up as their own contour.
Repeated sightings of the same square across passes are dropped.
"""

from __future__ import annotations

import logging
from itertools import cycle
from typing import Iterable

import numpy as np

from ..geometry import distance, longest_diagonal, quad_centre
from ..imaging import DebugTracer, ImageOps, KernelShape, NullTracer
from ..types import DetectionConfig, QuadArena

logger = logging.getLogger(__name__)

KERNEL_SEQUENCE: tuple[KernelShape, KernelShape] = ("rect", "cross")


def is_duplicate(
    arena: QuadArena,
    corners: np.ndarray,
    radius_fraction: float = 0.25,
) -> bool:
    """
    Whether a stored quad already covers this candidate.

    The match radius scales with each stored quad's own size, since
    squares shrink from one erosion pass to the next.
    """
    centre = quad_centre(corners)
    for stored in arena:
        radius = longest_diagonal(stored.corners) * radius_fraction
        if distance(centre, stored.centre) < radius:
            return True
    return False


def merge_quads(
    arena: QuadArena,
    candidates: Iterable[np.ndarray],
    config: DetectionConfig | None = None,
) -> int:
    """
    Add candidate quads that are not duplicates of stored ones.

    Candidates admitted earlier in the same call count as stored, so
    merging the same set twice leaves the arena unchanged the second time.

    Args:
        arena: Arena to extend in place
        candidates: (4, 2) corner arrays
        config: DetectionConfig (defaults used if None)

    Returns:
        Number of quads added
    """
    config = config or DetectionConfig()
    added = 0

    for corners in candidates:
        if is_duplicate(arena, corners, config.duplicate_radius_fraction):
            logger.debug("Discarding duplicate quad at %s", quad_centre(corners))
            continue
        arena.add(corners)
        added += 1

    return added


def extract_quads(
    binary: np.ndarray,
    ops: ImageOps,
    config: DetectionConfig | None = None,
    tracer: DebugTracer | None = None,
) -> QuadArena:
    """
    Run the erosion passes and collect deduplicated quads.

    A pass whose erosion or contour search fails is skipped; the image
    carries over unchanged to the next pass.

    Args:
        binary: Thresholded image, board squares as foreground
        ops: Pixel collaborator
        config: DetectionConfig (defaults used if None)
        tracer: Optional debug hooks

    Returns:
        QuadArena with unlinked quads
    """
    config = config or DetectionConfig()
    tracer = tracer or NullTracer()

    arena = QuadArena()
    image = binary.copy()
    kernels = cycle(KERNEL_SEQUENCE)

    for iteration in range(config.erode_iterations):
        kernel = next(kernels)

        eroded = ops.erode(image, kernel)
        if eroded is None:
            logger.debug("Erosion failed on pass %d, skipping", iteration)
            continue
        image = eroded
        tracer.show_image("erode", image)

        contours = ops.find_contours(image)
        if contours is None:
            logger.debug("Contour search failed on pass %d, skipping", iteration)
            continue
        tracer.draw_contours(image, contours)

        fitted = []
        for contour in contours:
            corners = ops.fit_quad(image, contour)
            if corners is not None:
                fitted.append(corners)

        added = merge_quads(arena, fitted, config)
        logger.debug(
            "Pass %d (%s): %d quads fitted, %d new, %d total",
            iteration,
            kernel,
            len(fitted),
            added,
            len(arena),
        )

    for quad in arena:
        tracer.draw_quad(binary, quad)

    return arena
