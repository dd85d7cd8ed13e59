"""
Corner linking.

Two dark squares that touch share a corner, and that corner lies between
their centres. So a corner inside the axis-aligned rectangle spanned by the
two centres is taken to be the shared vertex.
"""

from __future__ import annotations

import logging
from itertools import combinations

from ..geometry import distance, longest_diagonal, within_centre_rect
from ..types import CornerLink, DetectionConfig, Quad, QuadArena

logger = logging.getLogger(__name__)


def _corners_between(quad: Quad, a: Quad, b: Quad) -> list[int]:
    """Indices of quad's corners inside the rectangle of a's and b's centres."""
    return [
        k
        for k, corner in enumerate(quad.corners)
        if within_centre_rect(corner, a.centre, b.centre)
    ]


def link_pair(q1: Quad, q2: Quad, search_factor: float = 1.5) -> bool:
    """
    Link two quads if they share exactly one corner.

    On success both corners are moved to their midpoint and the
    association slots are set on both quads.

    Returns:
        True if the pair was linked
    """
    if distance(q1.centre, q2.centre) > search_factor * longest_diagonal(q1.corners):
        return False

    shared1 = _corners_between(q1, q1, q2)
    if len(shared1) != 1:
        return False
    shared2 = _corners_between(q2, q1, q2)
    if len(shared2) != 1:
        return False

    k1, k2 = shared1[0], shared2[0]
    if q1.links[k1] is not None or q2.links[k2] is not None:
        logger.debug(
            "Corner already linked, not linking quads %d and %d", q1.id, q2.id
        )
        return False

    midpoint = (q1.corners[k1] + q2.corners[k2]) / 2.0
    q1.corners[k1] = midpoint
    q2.corners[k2] = midpoint
    q1.links[k1] = CornerLink(q2.id, k2)
    q2.links[k2] = CornerLink(q1.id, k1)
    return True


def link_corners(arena: QuadArena, config: DetectionConfig | None = None) -> int:
    """
    Link every pair of quads in the arena that shares a corner.

    Args:
        arena: Quads to link in place
        config: DetectionConfig (defaults used if None)

    Returns:
        Number of links made
    """
    config = config or DetectionConfig()
    links = 0

    for q1, q2 in combinations(list(arena), 2):
        if link_pair(q1, q2, config.link_search_factor):
            links += 1

    logger.debug("Linked %d corner pairs across %d quads", links, len(arena))
    return links


def degree_histogram(arena: QuadArena) -> dict[int, int]:
    """Count of quads per link degree."""
    counts: dict[int, int] = {}
    for quad in arena:
        counts[quad.degree] = counts.get(quad.degree, 0) + 1
    return counts
