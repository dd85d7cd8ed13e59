"""
Row-major numbering of quads on the canonical plane.
"""

from __future__ import annotations

import logging

import numpy as np

from ..geometry import distance, project_points
from ..types import DetectionConfig, Quad, QuadArena

logger = logging.getLogger(__name__)


def number_quads(
    homography: np.ndarray,
    arena: QuadArena,
    config: DetectionConfig | None = None,
) -> list[Quad]:
    """
    Project quad centres onto the canonical plane and number them row by row.

    The topmost remaining quad anchors a row. Quads whose projected y is
    within half the anchor's centre-to-corner distance belong to the same
    row; the row is numbered left to right and removed.

    Each quad's centre is replaced by its projection. Numbering stops once
    max_numbered_quads numbers are assigned; anything left stays unnumbered.

    Args:
        homography: (3, 3) image -> canonical plane transform
        arena: Quads to number in place
        config: DetectionConfig (defaults used if None)

    Returns:
        The numbered quads, in number order
    """
    config = config or DetectionConfig()

    quads = list(arena)
    if not quads:
        return []

    centres = project_points(homography, np.array([q.centre for q in quads]))
    first_corners = project_points(homography, np.array([q.corners[0] for q in quads]))
    margins = {}
    for quad, centre, corner in zip(quads, centres, first_corners):
        quad.centre = centre
        quad.number = None
        margins[quad.id] = distance(centre, corner)

    remaining = quads
    number = 1

    while remaining and number <= config.max_numbered_quads:
        anchor = min(remaining, key=lambda q: q.centre[1])
        half_margin = margins[anchor.id] / 2.0

        row = [
            q for q in remaining
            if q is anchor or abs(q.centre[1] - anchor.centre[1]) < half_margin
        ]
        row.sort(key=lambda q: q.centre[0])

        for quad in row:
            if number > config.max_numbered_quads:
                break
            quad.number = number
            number += 1

        remaining = [q for q in remaining if q.number is None]

    if remaining:
        logger.warning(
            "Stopped numbering at %d quads, %d left unnumbered",
            config.max_numbered_quads,
            len(remaining),
        )

    numbered = arena.numbered()
    logger.debug("Numbered %d quads", len(numbered))
    return numbered
