"""
Canonical checkerboard model.

Pure functions - no classes, no state.
"""

from __future__ import annotations

import cv2
import numpy as np

from ..types import BoardConfig, CornerRole, QuadArena


# ============================================================================
# Ground truth
# ============================================================================


def dark_squares(board: BoardConfig) -> list[tuple[int, int]]:
    """
    (row, column) of every dark square, row-major.
    """
    return [
        (r, c)
        for r in range(board.rows)
        for c in range(board.columns)
        if (r + c) % 2 == 0
    ]


def ground_truth_quads(board: BoardConfig) -> QuadArena:
    """
    Quads of the canonical board, numbered 1..N in row-major order.

    Args:
        board: BoardConfig with layout and scale

    Returns:
        QuadArena whose ids and numbers follow the same order
    """
    arena = QuadArena()
    s = board.square_size
    ox, oy = board.origin

    for number, (r, c) in enumerate(dark_squares(board), start=1):
        x0, y0 = ox + c * s, oy + r * s
        corners = np.array(
            [[x0, y0], [x0 + s, y0], [x0 + s, y0 + s], [x0, y0 + s]],
            dtype=np.float64,
        )
        arena.add(corners).number = number

    return arena


def corner_numbers(board: BoardConfig) -> dict[CornerRole, int]:
    """
    Grid numbers of the four board-corner quads.

    Raises:
        ValueError: If a board corner square is not dark (even rows or columns)
    """
    if board.rows % 2 == 0 or board.columns % 2 == 0:
        raise ValueError(
            f"Board {board.rows}x{board.columns} needs odd rows and columns "
            "for all four corner squares to be dark"
        )

    top_row = (board.columns + 1) // 2
    total = board.quad_count
    return {
        "top_left": 1,
        "top_right": top_row,
        "bottom_left": total - top_row + 1,
        "bottom_right": total,
    }


# ============================================================================
# Rendering
# ============================================================================


def generate_board_image(
    board: BoardConfig,
    width: int = 640,
    height: int = 480,
    homography: np.ndarray | None = None,
) -> np.ndarray:
    """
    Render the board as a grayscale image: dark squares on white.

    Args:
        board: BoardConfig; origin and square_size are in canonical units
        width: Image width in pixels
        height: Image height in pixels
        homography: Optional canonical -> image transform. Identity if None

    Returns:
        (height, width) uint8 image
    """
    img = np.full((height, width), 255, dtype=np.uint8)
    h = np.eye(3) if homography is None else np.asarray(homography, dtype=np.float64)

    for quad in ground_truth_quads(board):
        corners = quad.corners.reshape(-1, 1, 2)
        projected = cv2.perspectiveTransform(corners, h)
        cv2.fillConvexPoly(img, np.round(projected).astype(np.int32).reshape(-1, 2), 0)

    return img
