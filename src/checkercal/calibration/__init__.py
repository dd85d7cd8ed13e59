"""
Checkerboard detection and calibration for checkercal.

Stages operate on a QuadArena passed from one to the next. No threading,
no global state. Caller owns the arena.
"""

from .board import (
    corner_numbers,
    dark_squares,
    generate_board_image,
    ground_truth_quads,
)

from .extraction import (
    extract_quads,
    merge_quads,
)

from .linking import (
    degree_histogram,
    link_corners,
)

from .topology import (
    TopologyError,
    find_grid_corners,
    ground_truth_corners,
    match_corners_for_homography,
)

from .numbering import number_quads

from .homography import (
    compute_homography,
    decompose_homography,
)

from .pipeline import (
    binarize,
    calibrate_from_image,
    detect_checkerboard,
    detect_quads,
    number_detected,
)

__all__ = [
    # Board
    "corner_numbers",
    "dark_squares",
    "generate_board_image",
    "ground_truth_quads",
    # Extraction
    "extract_quads",
    "merge_quads",
    # Linking
    "degree_histogram",
    "link_corners",
    # Topology
    "TopologyError",
    "find_grid_corners",
    "ground_truth_corners",
    "match_corners_for_homography",
    # Numbering
    "number_quads",
    # Homography
    "compute_homography",
    "decompose_homography",
    # Pipeline
    "binarize",
    "calibrate_from_image",
    "detect_checkerboard",
    "detect_quads",
    "number_detected",
]
