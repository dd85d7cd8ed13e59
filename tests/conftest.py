"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after test."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


def _square(x0, y0, size):
    return np.array(
        [[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size]],
        dtype=np.float64,
    )


@pytest.fixture
def grid_squares():
    """
    Factory for a rows x columns grid of touching squares, row-major.
    Diagonal neighbours share exactly one corner.
    """
    def make(rows, columns, size=40.0, origin=(100.0, 100.0)):
        ox, oy = origin
        return [
            _square(ox + c * size, oy + r * size, size)
            for r in range(rows)
            for c in range(columns)
        ]
    return make


@pytest.fixture
def grid_arena(grid_squares):
    """Factory for a QuadArena filled from grid_squares, unlinked."""
    from checkercal.types import QuadArena

    def make(rows, columns, size=40.0, origin=(100.0, 100.0)):
        arena = QuadArena()
        for corners in grid_squares(rows, columns, size, origin):
            arena.add(corners)
        return arena
    return make


@pytest.fixture
def board_config():
    """Standard 7x9 board: 32 dark squares, all four corners dark."""
    from checkercal.types import BoardConfig
    return BoardConfig(rows=7, columns=9, square_size=50.0, origin=(50.0, 50.0))


@pytest.fixture
def board_to_image():
    """Mild perspective from the canonical plane into the image."""
    return np.array([
        [1.10, 0.06, 40.0],
        [-0.04, 1.05, 30.0],
        [1e-5, 2e-5, 1.0],
    ], dtype=np.float64)


@pytest.fixture
def imaged_board_quads(board_config, board_to_image):
    """Dark-square corners of the board as seen through board_to_image."""
    import cv2
    from checkercal.calibration.board import ground_truth_quads

    quads = []
    for quad in ground_truth_quads(board_config):
        projected = cv2.perspectiveTransform(quad.corners.reshape(-1, 1, 2), board_to_image)
        quads.append(projected.reshape(4, 2))
    return quads


class FakeImageOps:
    """
    Canned ImageOps: every pass "finds" the given quads as contours.

    erode_failures / contour_failures list pass indices that fail.
    """

    def __init__(self, passes, erode_failures=(), contour_failures=()):
        self.passes = passes
        self.erode_failures = set(erode_failures)
        self.contour_failures = set(contour_failures)
        self.kernels = []
        self._pass = -1

    def threshold(self, image, block_size, constant):
        return image

    def erode(self, image, kernel):
        self._pass += 1
        self.kernels.append(kernel)
        if self._pass in self.erode_failures:
            return None
        return image

    def find_contours(self, image):
        if self._pass in self.contour_failures:
            return None
        return list(self.passes[self._pass % len(self.passes)])

    def fit_quad(self, image, contour):
        if len(contour) != 4:
            return None
        return np.asarray(contour, dtype=np.float64)


@pytest.fixture
def fake_ops():
    """Factory for FakeImageOps."""
    return FakeImageOps


@pytest.fixture
def blank_image():
    return np.zeros((480, 640), dtype=np.uint8)
