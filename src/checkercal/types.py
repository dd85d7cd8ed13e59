"""
Core data structures for checkercal.

Configuration and results are frozen dataclasses. Quads are the one mutable
record: the detection stages update them in place, and they reference each
other only through integer ids held by a QuadArena.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Literal, NamedTuple

import numpy as np

from .geometry import order_corners, quad_centre


# ============================================================================
# Configuration
# ============================================================================


@dataclass(frozen=True, slots=True)
class DetectionConfig:
    """
    Tunables for the detection and calibration pipeline.
    Corresponds to the TOML [detection] section.
    """

    threshold_block_size: int = 11  # Adaptive threshold neighbourhood (odd)
    threshold_constant: float = 2.0
    erode_iterations: int = 6
    min_quads: int = 24
    duplicate_radius_fraction: float = 0.25  # Of the stored quad's longest diagonal
    link_search_factor: float = 1.5  # Of the first quad's longest diagonal
    max_walk_steps: int = 256
    extreme_margin: float = 0.1  # Multiplicative margin for ground-truth corners
    max_numbered_quads: int = 200
    orthogonality_tolerance: float = 1e-6  # Max |cos| between rotation columns
    min_quad_area: float = 25.0  # Pixels^2
    approx_epsilon: float = 0.05  # Fraction of contour perimeter


@dataclass(frozen=True)  # No slots - need properties
class BoardConfig:
    """
    Canonical checkerboard layout.

    The board has rows x columns squares. Dark squares are those whose
    (row + column) is even, so the top-left square is always dark. With an
    odd number of rows and columns all four board corners are dark, which is
    what corner classification relies on.
    """

    rows: int = 7
    columns: int = 9
    square_size: float = 50.0  # Ground-truth plane units per square
    origin: tuple[float, float] = (50.0, 50.0)  # Top-left of the board

    @property
    def quad_count(self) -> int:
        """Number of dark squares."""
        return (self.rows * self.columns + 1) // 2

    @property
    def width(self) -> float:
        return self.columns * self.square_size

    @property
    def height(self) -> float:
        return self.rows * self.square_size


# ============================================================================
# Quadrilaterals
# ============================================================================


class CornerLink(NamedTuple):
    """Association slot value: the neighbouring quad and its shared corner."""

    quad_id: int
    corner: int


@dataclass(slots=True, eq=False)
class Quad:
    """
    A detected (or ground-truth) quadrilateral.

    corners are kept in clockwise image order. links[k] names the quad that
    shares corner k, if any.
    """

    id: int
    corners: np.ndarray  # (4, 2) float64
    centre: np.ndarray  # (2,) float64
    number: int | None = None
    links: list[CornerLink | None] = field(default_factory=lambda: [None] * 4)

    @classmethod
    def from_corners(cls, quad_id: int, corners: np.ndarray) -> Quad:
        ordered = order_corners(corners)
        return cls(id=quad_id, corners=ordered, centre=quad_centre(ordered))

    @property
    def degree(self) -> int:
        """Link degree: number of occupied association slots."""
        return sum(link is not None for link in self.links)

    def linked_ids(self) -> list[int]:
        return [link.quad_id for link in self.links if link is not None]


class QuadArena:
    """
    Owns the quads of one detection run and hands out their ids.

    Ids are never reused, so links stay valid for the arena's lifetime.
    """

    def __init__(self) -> None:
        self._quads: dict[int, Quad] = {}
        self._next_id = 0

    def add(self, corners: np.ndarray) -> Quad:
        quad = Quad.from_corners(self._next_id, corners)
        self._quads[quad.id] = quad
        self._next_id += 1
        return quad

    def __getitem__(self, quad_id: int) -> Quad:
        return self._quads[quad_id]

    def __contains__(self, quad_id: object) -> bool:
        return quad_id in self._quads

    def __iter__(self) -> Iterator[Quad]:
        return iter(self._quads.values())

    def __len__(self) -> int:
        return len(self._quads)

    def with_degree(self, degree: int) -> list[Quad]:
        return [q for q in self if q.degree == degree]

    def numbered(self) -> list[Quad]:
        """Quads that have a grid number, in number order."""
        return sorted(
            (q for q in self if q.number is not None),
            key=lambda q: q.number,
        )


# ============================================================================
# Results
# ============================================================================

CornerRole = Literal["top_left", "top_right", "bottom_left", "bottom_right"]

CORNER_ROLES: tuple[CornerRole, ...] = (
    "top_left",
    "top_right",
    "bottom_left",
    "bottom_right",
)


@dataclass(frozen=True, slots=True)
class CornerMatch:
    """
    One ground-truth <-> detected correspondence for homography estimation.
    """

    role: CornerRole
    ground_truth: np.ndarray  # (2,) centre on the canonical plane
    detected: np.ndarray  # (2,) centre in the image
    quad_id: int  # Detected quad


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """
    Outcome of quad detection.

    On failure arena may still hold what was found, for inspection, but
    callers must not treat it as a valid grid.
    """

    success: bool
    arena: QuadArena
    reason: str | None = None
    corner_matches: tuple[CornerMatch, ...] = ()
    homography: np.ndarray | None = None  # (3, 3) image -> canonical plane


@dataclass(frozen=True, slots=True)
class CalibrationResult:
    """
    Outcome of homography decomposition.
    intrinsic and extrinsic are both None unless success is True.
    """

    success: bool
    intrinsic: np.ndarray | None = None  # (3, 3) upper-triangular K
    extrinsic: np.ndarray | None = None  # (3, 3) [r0 | r1 | t]
    reason: str | None = None
