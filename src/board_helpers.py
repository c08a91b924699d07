"""Core board helpers for the 6x9 calendar tiling puzzle."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Iterator, NamedTuple, Optional, Tuple

# =========================
# Board configuration
# =========================
PUZZLE_WIDTH = 6
PUZZLE_HEIGHT = 9
NUM_SQUARES = PUZZLE_WIDTH * PUZZLE_HEIGHT  # 54
NUM_PIECES = 9
NUM_DATE_CELLS = 3

# =========================
# Index / coord helpers
# =========================
def index_to_xy(index: int) -> Tuple[int, int]:
    """Convert a row-major bit index into (x, y)."""
    y, x = divmod(index, PUZZLE_WIDTH)
    return x, y


def xy_to_index(x: int, y: int) -> int:
    """Convert (x, y) into a row-major bit index."""
    return y * PUZZLE_WIDTH + x


def iter_coordinates() -> Iterator[Tuple[int, int]]:
    """Yield every board (x, y) in row-major order."""
    for y in range(PUZZLE_HEIGHT):
        for x in range(PUZZLE_WIDTH):
            yield x, y


def on_board(x: int, y: int) -> bool:
    """Return True if (x, y) is a board cell."""
    return 0 <= x < PUZZLE_WIDTH and 0 <= y < PUZZLE_HEIGHT

# =========================
# Bit helpers
# =========================
FULL_BITS = (1 << NUM_SQUARES) - 1


def count_set_bits(value: int) -> int:
    """Return the number of set bits in value."""
    return bin(value).count("1")


def iter_set_bits(bits: int) -> Iterator[int]:
    """Yield set bit positions from a bitmask, lowest first."""
    while bits:
        least_significant_bit = bits & -bits
        yield least_significant_bit.bit_length() - 1
        bits ^= least_significant_bit


def _column_mask_for_x_shift(dx: int) -> int:
    """Return the full-board mask minus the columns a shift of dx would smear into."""
    mask = FULL_BITS
    magnitude = abs(dx)
    single_row_bits = (1 << magnitude) - 1
    if dx < 0:
        # The stale bits land on the right side of each row
        single_row_bits <<= PUZZLE_WIDTH - magnitude
    for row in range(PUZZLE_HEIGHT):
        mask &= ~(single_row_bits << (row * PUZZLE_WIDTH))
    return mask


# Indexed by dx + PUZZLE_WIDTH - 1, for dx in -(PUZZLE_WIDTH - 1)..(PUZZLE_WIDTH - 1)
COLUMN_SHIFT_MASKS: Tuple[int, ...] = tuple(
    _column_mask_for_x_shift(dx) for dx in range(-(PUZZLE_WIDTH - 1), PUZZLE_WIDTH)
)

# =========================
# Board mask
# =========================
class BoardMask:
    """Immutable bit-per-cell set over the puzzle board.

    Bit ``y * PUZZLE_WIDTH + x`` is set when cell (x, y) is covered. Bits past the
    last board cell are always zero.
    """

    __slots__ = ("_bits",)

    def __init__(self, bits: int = 0) -> None:
        object.__setattr__(self, "_bits", bits & FULL_BITS)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("BoardMask is immutable")

    @classmethod
    def empty(cls) -> "BoardMask":
        return cls(0)

    @classmethod
    def filled(cls) -> "BoardMask":
        """Return a mask with every board cell set."""
        return cls(FULL_BITS)

    @classmethod
    def from_cells(cls, cells: Iterable[Tuple[int, int]]) -> "BoardMask":
        """Build a mask from (x, y) cells. Raises ValueError for off-board cells."""
        bits = 0
        for x, y in cells:
            if not on_board(x, y):
                raise ValueError(f"cell off board: ({x}, {y})")
            bits |= 1 << xy_to_index(x, y)
        return cls(bits)

    @property
    def bits(self) -> int:
        return self._bits

    def is_covered(self, x: int, y: int) -> bool:
        return (self._bits >> xy_to_index(x, y)) & 1 == 1

    def with_covered(self, x: int, y: int, value: bool = True) -> "BoardMask":
        """Return a copy with cell (x, y) set or cleared."""
        bit = 1 << xy_to_index(x, y)
        if value:
            return BoardMask(self._bits | bit)
        return BoardMask(self._bits & ~bit)

    def apply(self, other: "BoardMask") -> "BoardMask":
        """Return the union of both masks."""
        return BoardMask(self._bits | other._bits)

    def conflicts_with(self, other: "BoardMask") -> bool:
        """Return True if any cell is set in both masks."""
        return self._bits & other._bits != 0

    def covers_winning_mask(self, winning_mask: "BoardMask") -> bool:
        """Return True if this mask sets any cell outside the winning mask."""
        return self._bits & ~winning_mask._bits != 0

    def inverted(self) -> "BoardMask":
        return BoardMask(~self._bits)

    def shifted(self, dx: int, dy: int) -> "BoardMask":
        """Return this mask moved by (dx, dy) cells.

        Cells moved past any edge are dropped; nothing wraps from one row into the next.
        """
        if not (-PUZZLE_WIDTH < dx < PUZZLE_WIDTH and -PUZZLE_HEIGHT < dy < PUZZLE_HEIGHT):
            return BoardMask()
        shift = dy * PUZZLE_WIDTH + dx
        bits = self._bits << shift if shift > 0 else self._bits >> -shift
        return BoardMask(bits & COLUMN_SHIFT_MASKS[dx + PUZZLE_WIDTH - 1])

    def next_to_cover(self, winning_mask: "BoardMask") -> Optional[Tuple[int, int]]:
        """Return the lowest-index cell required by winning_mask but not yet covered."""
        to_cover = winning_mask._bits & ~self._bits
        if not to_cover:
            return None
        return index_to_xy((to_cover & -to_cover).bit_length() - 1)

    def iter_covered(self) -> Iterator[Tuple[int, int]]:
        """Yield (x, y) for every set cell in ascending bit-index order."""
        bits = self._bits
        while bits:
            least_significant_bit = bits & -bits
            yield index_to_xy(least_significant_bit.bit_length() - 1)
            bits ^= least_significant_bit

    def count(self) -> int:
        return count_set_bits(self._bits)

    def __bool__(self) -> bool:
        return self._bits != 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoardMask):
            return NotImplemented
        return self._bits == other._bits

    def __hash__(self) -> int:
        return hash(self._bits)

    def __repr__(self) -> str:
        return f"BoardMask({self._bits:#x})"

    def __str__(self) -> str:
        return render_grid(lambda x, y: "*" if self.is_covered(x, y) else " ")

# =========================
# Tagged (display) mask
# =========================
class TagKind(Enum):
    COVERED = "covered"
    TARGET = "target"
    OPEN = "open"


class CellTag(NamedTuple):
    """Display tag for one cell: covered by a piece, a date cell, or still open."""

    kind: TagKind
    piece_index: Optional[int] = None


TARGET_TAG = CellTag(TagKind.TARGET)
OPEN_TAG = CellTag(TagKind.OPEN)


class TaggedMask:
    """Read-only per-cell tag grid, rows indexed by y."""

    __slots__ = ("_rows",)

    def __init__(self, rows: Iterable[Iterable[CellTag]]) -> None:
        self._rows = tuple(tuple(row) for row in rows)
        if len(self._rows) != PUZZLE_HEIGHT or any(len(row) != PUZZLE_WIDTH for row in self._rows):
            raise ValueError("tagged mask must be PUZZLE_HEIGHT rows of PUZZLE_WIDTH cells")

    def get(self, x: int, y: int) -> CellTag:
        return self._rows[y][x]

    @property
    def rows(self) -> Tuple[Tuple[CellTag, ...], ...]:
        return self._rows

    def to_board_mask(self) -> BoardMask:
        """Return the mask of cells tagged as covered by a piece."""
        return BoardMask.from_cells(
            (x, y) for x, y in iter_coordinates() if self.get(x, y).kind is TagKind.COVERED
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaggedMask):
            return NotImplemented
        return self._rows == other._rows

    def __hash__(self) -> int:
        return hash(self._rows)

    def __str__(self) -> str:
        def symbol(x: int, y: int) -> str:
            tag = self.get(x, y)
            if tag.kind is TagKind.COVERED:
                return str(tag.piece_index)
            if tag.kind is TagKind.TARGET:
                return "*"
            return " "

        return render_grid(symbol)

    __repr__ = __str__


def render_grid(symbol: Callable[[int, int], str]) -> str:
    """Render the board as rows of ``[c]`` cells using symbol(x, y) -> str."""
    return "\n".join(
        "".join(f"[{symbol(x, y)}]" for x in range(PUZZLE_WIDTH)) for y in range(PUZZLE_HEIGHT)
    )
