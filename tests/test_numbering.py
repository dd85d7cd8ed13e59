"""
Tests for checkercal.calibration.numbering.
"""

import numpy as np
import pytest

from checkercal.calibration.board import ground_truth_quads
from checkercal.calibration.homography import compute_homography
from checkercal.calibration.linking import link_corners
from checkercal.calibration.numbering import number_quads
from checkercal.calibration.topology import match_corners_for_homography
from checkercal.types import DetectionConfig, QuadArena


class TestIdentityHomography:
    @pytest.mark.parametrize("rows,columns", [(4, 8), (3, 5), (1, 6)])
    def test_row_major(self, grid_arena, rows, columns):
        arena = grid_arena(rows, columns)
        number_quads(np.eye(3), arena)

        for r in range(rows):
            for c in range(columns):
                assert arena[r * columns + c].number == r * columns + c + 1

    def test_input_order_does_not_matter(self, grid_squares):
        squares = grid_squares(4, 8)
        order = np.random.default_rng(3).permutation(len(squares))
        arena = QuadArena()
        for i in order:
            arena.add(squares[i])

        number_quads(np.eye(3), arena)

        for quad in arena:
            r = int((quad.centre[1] - 100) // 40)
            c = int((quad.centre[0] - 100) // 40)
            assert quad.number == r * 8 + c + 1

    def test_returns_quads_in_number_order(self, grid_arena):
        ordered = number_quads(np.eye(3), grid_arena(2, 3))
        assert [q.number for q in ordered] == [1, 2, 3, 4, 5, 6]

    def test_numbers_contiguous(self, grid_arena):
        arena = grid_arena(4, 8)
        number_quads(np.eye(3), arena)
        assert sorted(q.number for q in arena) == list(range(1, 33))


class TestProjection:
    def test_centres_replaced_by_projection(self, grid_arena):
        arena = grid_arena(1, 2)
        number_quads(np.diag([2.0, 2.0, 1.0]), arena)
        np.testing.assert_array_almost_equal(arena[0].centre, [240.0, 240.0])

    def test_slight_tilt_keeps_rows(self, grid_arena):
        arena = grid_arena(4, 8)
        tilt = np.array([
            [1.0, 0.0, 0.0],
            [0.02, 1.0, 0.0],
            [0.0, 0.0, 1.0],
        ])
        number_quads(tilt, arena)
        for i, quad in enumerate(sorted(arena, key=lambda q: q.id)):
            assert quad.number == i + 1

    def test_imaged_board(self, board_config, imaged_board_quads):
        arena = QuadArena()
        for corners in imaged_board_quads:
            arena.add(corners)
        link_corners(arena)
        truth = ground_truth_quads(board_config)
        homography = compute_homography(match_corners_for_homography(truth, arena))

        number_quads(homography, arena)

        for detected, expected in zip(arena, truth):
            assert detected.number == expected.number


class TestNumberingCap:
    def test_stops_at_cap(self, grid_arena):
        arena = grid_arena(4, 8)
        ordered = number_quads(np.eye(3), arena, DetectionConfig(max_numbered_quads=10))

        assert [q.number for q in ordered] == list(range(1, 11))
        assert sum(q.number is None for q in arena) == 22

    def test_empty_arena(self):
        assert number_quads(np.eye(3), QuadArena()) == []
