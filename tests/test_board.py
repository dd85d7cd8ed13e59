"""
Tests for checkercal.calibration.board.
"""

import numpy as np
import pytest

from checkercal.calibration.board import (
    corner_numbers,
    dark_squares,
    generate_board_image,
    ground_truth_quads,
)
from checkercal.types import BoardConfig


class TestDarkSquares:
    def test_top_left_is_dark(self, board_config):
        assert dark_squares(board_config)[0] == (0, 0)

    def test_count_matches_config(self, board_config):
        assert len(dark_squares(board_config)) == board_config.quad_count

    def test_row_major(self):
        squares = dark_squares(BoardConfig(rows=3, columns=3))
        assert squares == [(0, 0), (0, 2), (1, 1), (2, 0), (2, 2)]


class TestGroundTruthQuads:
    def test_numbered_in_order(self, board_config):
        arena = ground_truth_quads(board_config)
        assert [q.number for q in arena] == list(range(1, 33))

    def test_square_geometry(self, board_config):
        first = next(iter(ground_truth_quads(board_config)))
        np.testing.assert_array_almost_equal(first.centre, [75.0, 75.0])
        np.testing.assert_array_almost_equal(first.corners[0], [50.0, 50.0])


class TestCornerNumbers:
    def test_standard_board(self, board_config):
        assert corner_numbers(board_config) == {
            "top_left": 1,
            "top_right": 5,
            "bottom_left": 28,
            "bottom_right": 32,
        }

    def test_even_board_rejected(self):
        with pytest.raises(ValueError, match="odd"):
            corner_numbers(BoardConfig(rows=8, columns=8))


class TestGenerateBoardImage:
    def test_shape_and_values(self, board_config):
        img = generate_board_image(board_config, width=600, height=450)
        assert img.shape == (450, 600)
        assert img.dtype == np.uint8
        assert set(np.unique(img)) == {0, 255}

    def test_dark_and_light_squares(self, board_config):
        img = generate_board_image(board_config, width=600, height=450)
        assert img[75, 75] == 0  # Centre of square (0, 0)
        assert img[75, 125] == 255  # Centre of square (0, 1)
        assert img[10, 10] == 255  # Margin

    def test_homography_moves_board(self, board_config):
        shift = np.array([[1.0, 0.0, 20.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
        img = generate_board_image(board_config, width=600, height=450, homography=shift)
        assert img[75, 95] == 0
        assert img[75, 60] == 255
