"""Immutable game state: which pieces sit where, plus the covered-cell union."""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from board_helpers import (
    NUM_PIECES,
    PUZZLE_HEIGHT,
    PUZZLE_WIDTH,
    OPEN_TAG,
    TARGET_TAG,
    BoardMask,
    CellTag,
    TagKind,
    TaggedMask,
    iter_coordinates,
)
from piece_helpers import Placement, mask_for_piece

Placements = Tuple[Optional[Placement], ...]


class GameState:
    """Snapshot of placed pieces.

    Invariant: ``mask`` is the OR of every placed piece's coverage and no two placed
    pieces overlap. Transitions return new states; nothing mutates a state in place.
    Building a state from placements alone checks them through ``compute_mask``.
    """

    __slots__ = ("_placements", "_mask")

    def __init__(
        self,
        placements: Optional[Placements] = None,
        mask: Optional[BoardMask] = None,
    ) -> None:
        if placements is None:
            placements = (None,) * NUM_PIECES
        if len(placements) != NUM_PIECES:
            raise ValueError(f"expected {NUM_PIECES} placements, got {len(placements)}")
        self._placements: Placements = tuple(placements)
        self._mask = mask if mask is not None else compute_mask(self._placements)

    @property
    def placements(self) -> Placements:
        return self._placements

    @property
    def mask(self) -> BoardMask:
        return self._mask

    def placement(self, piece_index: int) -> Optional[Placement]:
        return self._placements[piece_index]

    def with_piece_placed(
        self,
        piece_index: int,
        placement: Placement,
        winning_mask: BoardMask,
    ) -> Optional["GameState"]:
        """Return a new state with the piece placed, or None if the move is illegal.

        Illegal means off the board, overlapping a placed piece, or covering a cell
        outside winning_mask. Placing a piece that is already on the board is a caller
        bug and raises ValueError.
        """
        if not 0 <= piece_index < NUM_PIECES:
            raise IndexError(f"no piece with index {piece_index}")
        if self._placements[piece_index] is not None:
            raise ValueError(f"piece {piece_index} is already placed")

        piece_mask = mask_for_piece(piece_index, placement)
        if piece_mask is None:
            return None
        if piece_mask.conflicts_with(self._mask) or piece_mask.covers_winning_mask(winning_mask):
            return None

        placements = list(self._placements)
        placements[piece_index] = placement
        return GameState(tuple(placements), self._mask.apply(piece_mask))

    def available_piece_indexes(self) -> Iterator[int]:
        """Yield indexes of pieces not yet placed, ascending."""
        for piece_index, placement in enumerate(self._placements):
            if placement is None:
                yield piece_index

    def placed_pieces(self) -> Iterator[Tuple[int, Placement]]:
        for piece_index, placement in enumerate(self._placements):
            if placement is not None:
                yield piece_index, placement

    def is_complete(self, winning_mask: BoardMask) -> bool:
        return self._mask == winning_mask

    def next_to_cover(self, winning_mask: BoardMask) -> Optional[Tuple[int, int]]:
        return self._mask.next_to_cover(winning_mask)

    def open_positions(self, winning_mask: BoardMask) -> Iterator[Tuple[int, int]]:
        """Yield required cells that no piece covers yet, in row-major order."""
        return BoardMask(winning_mask.bits & ~self._mask.bits).iter_covered()

    def can_any_piece_cover_position(self, winning_mask: BoardMask, x: int, y: int) -> bool:
        """Return True if some unplaced piece still has a legal placement over (x, y)."""
        for piece_index in self.available_piece_indexes():
            for placement in Placement.linear_iter(piece_index):
                piece_mask = mask_for_piece(piece_index, placement)
                if (
                    piece_mask is not None
                    and piece_mask.is_covered(x, y)
                    and not piece_mask.conflicts_with(self._mask)
                    and not piece_mask.covers_winning_mask(winning_mask)
                ):
                    return True
        return False

    def contains_no_islands(self, winning_mask: BoardMask) -> bool:
        """Return False if some open required cell can no longer be covered by any piece."""
        return all(
            self.can_any_piece_cover_position(winning_mask, x, y)
            for x, y in self.open_positions(winning_mask)
        )

    def tagged_mask(self, winning_mask: BoardMask) -> TaggedMask:
        """Tag every cell as covered by piece N, a date cell, or still open."""
        cells: List[List[CellTag]] = [[OPEN_TAG] * PUZZLE_WIDTH for _ in range(PUZZLE_HEIGHT)]
        for x, y in iter_coordinates():
            if not winning_mask.is_covered(x, y):
                cells[y][x] = TARGET_TAG
        for piece_index, placement in self.placed_pieces():
            piece_mask = mask_for_piece(piece_index, placement)
            if piece_mask is None:
                continue
            tag = CellTag(TagKind.COVERED, piece_index)
            for x, y in piece_mask.iter_covered():
                cells[y][x] = tag
        return TaggedMask(cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameState):
            return NotImplemented
        return self._placements == other._placements

    def __hash__(self) -> int:
        return hash(self._placements)

    def __repr__(self) -> str:
        placed = ", ".join(f"{index}: {placement}" for index, placement in self.placed_pieces())
        return f"GameState({{{placed}}})"


def compute_mask(placements: Placements) -> BoardMask:
    """Return the union mask of all placed pieces.

    Raises ValueError if a placement leaves the board or two pieces overlap.
    """
    mask = BoardMask()
    for piece_index, placement in enumerate(placements):
        if placement is None:
            continue
        piece_mask = mask_for_piece(piece_index, placement)
        if piece_mask is None:
            raise ValueError(f"piece {piece_index} placed off board: {placement}")
        if piece_mask.conflicts_with(mask):
            raise ValueError(f"piece {piece_index} overlaps another piece at {placement}")
        mask = mask.apply(piece_mask)
    return mask
