"""
Grid topology: find the four board corners among the detected quads and
pair them with the ground-truth board corners.

Degree-1 quads are the board corners, degree-2 quads run along the board
edges and degree-4 quads fill the interior. Walking from one corner along
both edges tells which neighbouring corner is along the short side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from ..types import (
    CORNER_ROLES,
    CornerMatch,
    CornerRole,
    DetectionConfig,
    Quad,
    QuadArena,
)

logger = logging.getLogger(__name__)


class TopologyError(ValueError):
    """The link graph does not have the shape of a checkerboard."""


@dataclass(frozen=True, slots=True)
class WalkResult:
    corner_id: int
    steps: int


# ============================================================================
# Edge walking
# ============================================================================


def _next_along_edge(arena: QuadArena, current: Quad, previous_id: int) -> Quad:
    """
    Pick the next quad along a board edge.

    A linked corner quad ends the walk. Otherwise edge and interior quads
    alternate, and exactly one linked quad may continue the pattern.
    """
    neighbours = [arena[i] for i in current.linked_ids() if i != previous_id]

    corners = [q for q in neighbours if q.degree == 1]
    if corners:
        return corners[0]

    if current.degree == 4:
        wanted = 2
    elif current.degree == 2:
        wanted = 4
    else:
        raise TopologyError(f"Quad {current.id} has degree {current.degree} mid-edge")

    candidates = [q for q in neighbours if q.degree == wanted]
    if len(candidates) != 1:
        raise TopologyError(
            f"Quad {current.id}: {len(candidates)} candidates to continue the edge"
        )
    return candidates[0]


def walk_to_corner(
    arena: QuadArena,
    root: Quad,
    branch: Quad,
    max_steps: int = 256,
) -> WalkResult:
    """
    Follow a board edge from branch, away from root, to the next corner quad.

    Args:
        arena: Linked quads
        root: Quad the walk must not return to
        branch: First edge quad of the walk
        max_steps: Bound on the walk length

    Returns:
        WalkResult with the corner quad id and the number of quads visited

    Raises:
        TopologyError: If the edge breaks off or exceeds max_steps
    """
    previous, current = root, branch
    steps = 1

    while current.degree != 1:
        if steps > max_steps:
            raise TopologyError(f"No corner within {max_steps} steps of quad {branch.id}")
        nxt = _next_along_edge(arena, current, previous.id)
        previous, current = current, nxt
        steps += 1

    return WalkResult(corner_id=current.id, steps=steps)


# ============================================================================
# Corner classification
# ============================================================================


def find_grid_corners(
    arena: QuadArena,
    max_steps: int = 256,
) -> dict[CornerRole, Quad]:
    """
    Assign roles to the four degree-1 quads.

    The walk starts from the corner quad with the smallest x + y. The
    neighbouring corner reached in fewer steps is the close corner, along
    the short side of the board.

    Raises:
        TopologyError: If there are not exactly four corner quads or an
            edge walk fails
    """
    corners = sorted(arena.with_degree(1), key=lambda q: float(q.centre.sum()))
    if len(corners) != 4:
        raise TopologyError(f"Expected 4 corner quads, found {len(corners)}")

    start = corners[0]
    connected = arena[start.linked_ids()[0]]
    branches = [arena[i] for i in connected.linked_ids() if arena[i].degree == 2]
    if len(branches) != 2:
        raise TopologyError(
            f"Quad {connected.id} next to corner {start.id} has "
            f"{len(branches)} edge neighbours, expected 2"
        )

    walks = [walk_to_corner(arena, connected, b, max_steps) for b in branches]
    close, far = sorted(walks, key=lambda w: w.steps)
    if close.corner_id == far.corner_id:
        raise TopologyError(f"Both edges from quad {start.id} end at quad {close.corner_id}")
    logger.debug(
        "Corner %d: close corner %d in %d steps, far corner %d in %d steps",
        start.id,
        close.corner_id,
        close.steps,
        far.corner_id,
        far.steps,
    )

    close_quad = arena[close.corner_id]
    far_quad = arena[far.corner_id]
    fourth = next(q for q in corners[1:] if q.id not in (close.corner_id, far.corner_id))

    if start.centre[1] < close_quad.centre[1]:
        return {
            "top_left": start,
            "bottom_left": close_quad,
            "top_right": far_quad,
            "bottom_right": fourth,
        }
    return {
        "bottom_right": start,
        "top_right": close_quad,
        "bottom_left": far_quad,
        "top_left": fourth,
    }


def _beats(
    candidate: np.ndarray,
    extreme: np.ndarray,
    signs: tuple[int, int],
    margin: float,
) -> bool:
    """
    Whether candidate is more extreme than the running extreme.

    It has to be strictly more extreme on one axis while not losing on the
    other axis by more than the multiplicative margin. signs is -1 on an
    axis where smaller is more extreme.
    """
    for axis in (0, 1):
        other = 1 - axis
        c, e = candidate[axis], extreme[axis]
        wins = c < e if signs[axis] < 0 else c > e
        if not wins:
            continue

        c, e = candidate[other], extreme[other]
        if signs[other] < 0:
            holds = c <= e * (1.0 + margin)
        else:
            holds = c >= e * (1.0 - margin)
        if holds:
            return True
    return False


ROLE_SIGNS: dict[CornerRole, tuple[int, int]] = {
    "top_left": (-1, -1),
    "top_right": (1, -1),
    "bottom_left": (-1, 1),
    "bottom_right": (1, 1),
}


def ground_truth_corners(
    ground_truth: Iterable[Quad],
    margin: float = 0.1,
) -> dict[CornerRole, Quad]:
    """
    Find the extreme quads of the ground-truth board by scanning centres.

    Centres are taken relative to the bounding-box origin of all centres,
    so the multiplicative margin does not depend on where the board sits.

    Raises:
        ValueError: If ground_truth is empty
    """
    quads = list(ground_truth)
    if not quads:
        raise ValueError("Ground truth has no quads")

    origin = np.min([q.centre for q in quads], axis=0)
    extremes: dict[CornerRole, Quad] = {role: quads[0] for role in CORNER_ROLES}

    for quad in quads[1:]:
        for role in CORNER_ROLES:
            candidate = quad.centre - origin
            extreme = extremes[role].centre - origin
            if _beats(candidate, extreme, ROLE_SIGNS[role], margin):
                extremes[role] = quad

    return extremes


def match_corners_for_homography(
    ground_truth: Iterable[Quad],
    arena: QuadArena,
    config: DetectionConfig | None = None,
) -> tuple[CornerMatch, ...]:
    """
    Pair the four detected grid corners with the ground-truth corners.

    Args:
        ground_truth: Quads of the canonical board
        arena: Linked detected quads
        config: DetectionConfig (defaults used if None)

    Returns:
        Four CornerMatch records, one per role

    Raises:
        TopologyError: If the detected grid corners cannot be classified
    """
    config = config or DetectionConfig()
    truth = ground_truth_corners(ground_truth, config.extreme_margin)
    detected = find_grid_corners(arena, config.max_walk_steps)

    return tuple(
        CornerMatch(
            role=role,
            ground_truth=truth[role].centre.copy(),
            detected=detected[role].centre.copy(),
            quad_id=detected[role].id,
        )
        for role in CORNER_ROLES
    )
