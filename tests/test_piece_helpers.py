import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from board_helpers import NUM_DATE_CELLS, NUM_PIECES, NUM_SQUARES, PUZZLE_HEIGHT, PUZZLE_WIDTH, iter_coordinates
from piece_helpers import (
    ORIENTATIONS,
    PIECES,
    Orientation,
    Placement,
    flip_grid,
    iter_covering_placements,
    mask_for_piece,
    parse_grid,
    piece,
    rotate_grid,
    transform_grid,
)


class GridTransformTests(unittest.TestCase):
    def test_parse_grid(self) -> None:
        self.assertEqual(parse_grid(["#.", ".#"]), ((True, False), (False, True)))
        with self.assertRaises(ValueError):
            parse_grid(["#.", "#"])

    def test_rotate_quarter_turn(self) -> None:
        grid = parse_grid(["##", "#.", "#."])
        # out[r][c] = in[c][W - 1 - r]
        self.assertEqual(rotate_grid(grid), parse_grid(["#..", "###"]))

    def test_four_rotations_restore_the_shape(self) -> None:
        for index, current in enumerate(PIECES):
            grid = current.shape
            for _ in range(4):
                grid = rotate_grid(grid)
            self.assertEqual(grid, current.shape, f"piece {index}")
            self.assertEqual(flip_grid(flip_grid(current.shape)), current.shape)

    def test_flip_is_applied_before_rotation(self) -> None:
        grid = parse_grid(["##.", ".##"])
        expected = rotate_grid(flip_grid(grid))
        self.assertEqual(transform_grid(grid, Orientation(1, True)), expected)


class OrientationTests(unittest.TestCase):
    def test_orientation_codes_follow_tuple_order(self) -> None:
        self.assertEqual(len(ORIENTATIONS), 8)
        self.assertEqual([o.code for o in ORIENTATIONS], list(range(8)))
        self.assertEqual(ORIENTATIONS[1], Orientation(0, True))
        self.assertEqual(ORIENTATIONS[2], Orientation(1, False))

    def test_placement_code(self) -> None:
        self.assertEqual(Placement(0, 0).code(), 0)
        self.assertEqual(Placement(1, 2, 3, True).code(), (2 * PUZZLE_WIDTH + 1) << 3 | 7)
        self.assertIsNone(Placement(-1, 0).code())
        self.assertIsNone(Placement(0, PUZZLE_HEIGHT).code())


class PieceCatalogTests(unittest.TestCase):
    def test_catalog_sizes(self) -> None:
        self.assertEqual(len(PIECES), NUM_PIECES)
        counts = [p.cell_count for p in PIECES]
        self.assertTrue(all(5 <= count <= 6 for count in counts), counts)
        self.assertEqual(sum(counts), NUM_SQUARES - NUM_DATE_CELLS)

    def test_every_orientation_keeps_cell_count(self) -> None:
        for index, current in enumerate(PIECES):
            self.assertEqual(len(current.grids), 8)
            for orientation in ORIENTATIONS:
                offsets = current.relative_offsets(orientation)
                self.assertEqual(len(offsets), current.cell_count, f"piece {index} {orientation}")
                self.assertEqual(current.masks[orientation.code].count(), current.cell_count)

    def test_size_swaps_on_odd_rotations(self) -> None:
        current = piece(1)
        self.assertEqual(current.size(0), (3, 4))
        self.assertEqual(current.size(1), (4, 3))
        self.assertEqual(current.size(2), (3, 4))
        for index, item in enumerate(PIECES):
            for orientation in ORIENTATIONS:
                grid = item.grids[orientation.code]
                self.assertEqual(
                    item.size(orientation.rotation), (len(grid[0]), len(grid)), f"piece {index}"
                )

    def test_piece_rejects_unknown_index(self) -> None:
        with self.assertRaises(IndexError):
            piece(NUM_PIECES)
        with self.assertRaises(IndexError):
            piece(-1)

    def test_mask_for_piece(self) -> None:
        mask = mask_for_piece(7, Placement(0, 0))
        self.assertEqual(sorted(mask.iter_covered()), sorted([(1, 0), (0, 1), (1, 1), (0, 2), (1, 2)]))
        shifted = mask_for_piece(7, Placement(2, 3))
        self.assertEqual(shifted, mask.shifted(2, 3))
        self.assertIsNone(mask_for_piece(7, Placement(PUZZLE_WIDTH - 1, 0)))
        self.assertIsNone(mask_for_piece(7, Placement(0, -1)))


class CoveringPlacementTests(unittest.TestCase):
    def brute_force(self, piece_index, x, y):
        return [
            placement
            for placement in Placement.linear_iter(piece_index)
            if mask_for_piece(piece_index, placement).is_covered(x, y)
        ]

    def test_linear_iter_stays_on_board(self) -> None:
        for piece_index in range(NUM_PIECES):
            for placement in Placement.linear_iter(piece_index):
                self.assertIsNotNone(mask_for_piece(piece_index, placement))

    def test_every_candidate_covers_the_cell(self) -> None:
        for piece_index in range(NUM_PIECES):
            for x, y in iter_coordinates():
                for placement in iter_covering_placements(piece_index, x, y):
                    mask = mask_for_piece(piece_index, placement)
                    self.assertIsNotNone(mask, f"piece {piece_index} {placement}")
                    self.assertTrue(mask.is_covered(x, y))

    def test_matches_brute_force(self) -> None:
        for piece_index in range(NUM_PIECES):
            for x, y in iter_coordinates():
                candidates = list(iter_covering_placements(piece_index, x, y))
                self.assertEqual(len(candidates), len(set(candidates)))
                self.assertCountEqual(candidates, self.brute_force(piece_index, x, y))

    def test_orientation_order_and_restartable(self) -> None:
        first = list(iter_covering_placements(3, 2, 4))
        second = list(iter_covering_placements(3, 2, 4))
        self.assertEqual(first, second)
        codes = [placement.orientation.code for placement in first]
        self.assertEqual(codes, sorted(codes))

    def test_corner_has_fewer_candidates(self) -> None:
        corner = list(iter_covering_placements(0, 0, 0))
        middle = list(iter_covering_placements(0, 2, 4))
        self.assertTrue(corner)
        self.assertLess(len(corner), len(middle))
        self.assertTrue(all(p.x == 0 and p.y == 0 for p in corner))


if __name__ == "__main__":
    unittest.main()
