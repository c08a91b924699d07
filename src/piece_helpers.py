"""Polyomino catalog, orientations and placement candidates for the calendar puzzle."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterator, NamedTuple, Optional, Sequence, Tuple

from board_helpers import (
    NUM_PIECES,
    NUM_DATE_CELLS,
    NUM_SQUARES,
    PUZZLE_HEIGHT,
    PUZZLE_WIDTH,
    BoardMask,
)

Grid = Tuple[Tuple[bool, ...], ...]

# =========================
# Orientations
# =========================
class Orientation(NamedTuple):
    """A quarter-turn count (0-3) combined with an optional column mirror."""

    rotation: int
    flipped: bool

    @property
    def code(self) -> int:
        return (self.rotation % 4) * 2 + (1 if self.flipped else 0)


# (rotation 0..3) x (flipped False, True); position in this tuple equals Orientation.code
ORIENTATIONS: Tuple[Orientation, ...] = tuple(
    Orientation(rotation, flipped) for rotation in range(4) for flipped in (False, True)
)


class Placement(NamedTuple):
    """Anchor (top-left of the bounding box) plus orientation of one piece."""

    x: int
    y: int
    rotation: int = 0
    flipped: bool = False

    @property
    def orientation(self) -> Orientation:
        return Orientation(self.rotation % 4, self.flipped)

    def code(self) -> Optional[int]:
        """Pack the placement into a single int, or None if the anchor is off the board."""
        if not (0 <= self.x < PUZZLE_WIDTH and 0 <= self.y < PUZZLE_HEIGHT):
            return None
        pos_code = self.y * PUZZLE_WIDTH + self.x
        return pos_code << 3 | self.orientation.code

    @staticmethod
    def linear_iter(piece_index: int) -> Iterator["Placement"]:
        """Yield every on-board placement of a piece, rotation first, then y, x, flip."""
        for rotation in range(4):
            width, height = piece(piece_index).size(rotation)
            for y in range(PUZZLE_HEIGHT - height + 1):
                for x in range(PUZZLE_WIDTH - width + 1):
                    for flipped in (False, True):
                        yield Placement(x, y, rotation, flipped)

# =========================
# Grid transforms
# =========================
def parse_grid(rows: Sequence[str]) -> Grid:
    """Convert rows like '##.' into a boolean grid ('#' = filled)."""
    widths = {len(row) for row in rows}
    if len(widths) != 1:
        raise ValueError(f"ragged piece grid: {rows}")
    return tuple(tuple(ch == "#" for ch in row) for row in rows)


def flip_grid(grid: Grid) -> Grid:
    """Mirror the grid's columns."""
    return tuple(tuple(reversed(row)) for row in grid)


def rotate_grid(grid: Grid) -> Grid:
    """Rotate a grid one quarter turn (transpose, then reverse the row order)."""
    return tuple(reversed(tuple(zip(*grid))))


def transform_grid(grid: Grid, orientation: Orientation) -> Grid:
    """Apply the mirror (if any) and then the quarter turns of orientation."""
    if orientation.flipped:
        grid = flip_grid(grid)
    for _ in range(orientation.rotation % 4):
        grid = rotate_grid(grid)
    return grid


def grid_offsets(grid: Grid) -> Tuple[Tuple[int, int], ...]:
    """Return the (dx, dy) of filled cells in ascending board-bit order."""
    return tuple((dx, dy) for dy, row in enumerate(grid) for dx, filled in enumerate(row) if filled)

# =========================
# Pieces
# =========================
#   0        1        2        3       4       5       6       7       8
#  ##.      #..      ###      .#      #.      .#      .#      .#      ##..
#  .#.      #..      #..      ##      ##      .#      .#      ##      .###
#  ###      ###      #..      .#      .#      .#      .#      ##      .#..
#           #..      #..      .#      .#      .#      ##
#                             .#              ##
PIECE_SHAPES: Tuple[Tuple[str, ...], ...] = (
    ("##.", ".#.", "###"),
    ("#..", "#..", "###", "#.."),
    ("###", "#..", "#..", "#.."),
    (".#", "##", ".#", ".#", ".#"),
    ("#.", "##", ".#", ".#"),
    (".#", ".#", ".#", ".#", "##"),
    (".#", ".#", ".#", "##"),
    (".#", "##", "##"),
    ("##..", ".###", ".#.."),
)


class Piece:
    """One polyomino with all 8 orientations precomputed.

    Per-orientation tables are indexed by Orientation.code.
    """

    __slots__ = ("shape", "width", "height", "grids", "offsets", "masks")

    def __init__(self, shape: Grid) -> None:
        self.shape = shape
        self.height = len(shape)
        self.width = len(shape[0])
        self.grids: Tuple[Grid, ...] = tuple(transform_grid(shape, o) for o in ORIENTATIONS)
        self.offsets: Tuple[Tuple[Tuple[int, int], ...], ...] = tuple(
            grid_offsets(grid) for grid in self.grids
        )
        # Anchored at the board origin
        self.masks: Tuple[BoardMask, ...] = tuple(
            BoardMask.from_cells(offsets) for offsets in self.offsets
        )

    @property
    def cell_count(self) -> int:
        return len(self.offsets[0])

    def size(self, rotation: int) -> Tuple[int, int]:
        """Return (width, height) of the bounding box after rotation quarter turns."""
        if rotation % 2 == 1:
            return self.height, self.width
        return self.width, self.height

    def fits(self, placement: Placement) -> bool:
        if placement.x < 0 or placement.y < 0:
            return False
        width, height = self.size(placement.rotation)
        return placement.x + width <= PUZZLE_WIDTH and placement.y + height <= PUZZLE_HEIGHT

    def mask(self, placement: Placement) -> Optional[BoardMask]:
        """Return the cells covered by this piece at placement, or None if off the board."""
        if not self.fits(placement):
            return None
        return self.masks[placement.orientation.code].shifted(placement.x, placement.y)

    def relative_offsets(self, orientation: Orientation) -> Tuple[Tuple[int, int], ...]:
        return self.offsets[orientation.code]


@lru_cache(maxsize=1)
def build_piece_catalog() -> Tuple[Piece, ...]:
    """Build the 9 pieces and their orientation tables."""
    pieces = tuple(Piece(parse_grid(rows)) for rows in PIECE_SHAPES)
    if len(pieces) != NUM_PIECES:
        raise RuntimeError(f"expected {NUM_PIECES} pieces, got {len(pieces)}")
    total_cells = sum(p.cell_count for p in pieces)
    if total_cells != NUM_SQUARES - NUM_DATE_CELLS:
        raise RuntimeError(f"pieces cover {total_cells} cells, board needs {NUM_SQUARES - NUM_DATE_CELLS}")
    return pieces


PIECES = build_piece_catalog()


def piece(piece_index: int) -> Piece:
    """Return the catalog piece. Raises IndexError for an unknown index."""
    if not 0 <= piece_index < NUM_PIECES:
        raise IndexError(f"no piece with index {piece_index}")
    return PIECES[piece_index]


def mask_for_piece(piece_index: int, placement: Placement) -> Optional[BoardMask]:
    return piece(piece_index).mask(placement)

# =========================
# Placement candidates
# =========================
def iter_covering_placements(piece_index: int, cover_x: int, cover_y: int) -> Iterator[Placement]:
    """Yield every on-board placement of a piece that covers (cover_x, cover_y).

    Orientations come in ORIENTATIONS order; within one orientation the anchors follow
    the piece's relative offsets in ascending bit order.
    """
    current = piece(piece_index)
    for orientation in ORIENTATIONS:
        width, height = current.size(orientation.rotation)
        for dx, dy in current.offsets[orientation.code]:
            x = cover_x - dx
            y = cover_y - dy
            if x < 0 or y < 0 or x + width > PUZZLE_WIDTH or y + height > PUZZLE_HEIGHT:
                continue
            yield Placement(x, y, orientation.rotation, orientation.flipped)
