"""Resumable backtracking solver for the calendar puzzle.

The search runs on an explicit stack of frames instead of recursion. Each call to
``next()`` performs one observable step and returns a message: ``Unsolved`` while
searching, then exactly one terminal ``Solved`` or ``Impossible``, after which the
iterator is exhausted.
"""

from __future__ import annotations

import logging
import time
from typing import Iterator, List, NamedTuple, Optional, Tuple, Union

from board_helpers import BoardMask, TaggedMask
from piece_helpers import Placement, iter_covering_placements
from state_helpers import GameState
from target_helpers import TargetDate

LOGGER = logging.getLogger(__name__)

# =========================
# Step messages
# =========================
class Unsolved(NamedTuple):
    state: GameState
    winning_mask: BoardMask

    @property
    def mask(self) -> TaggedMask:
        """Tagged board for display, derived from the state on demand."""
        return self.state.tagged_mask(self.winning_mask)

    def __str__(self) -> str:
        return f"UNSOLVED\n{self.mask}\n"


class Solved(NamedTuple):
    state: GameState
    mask: TaggedMask
    steps: int
    elapsed: float = 0.0

    def __str__(self) -> str:
        return f"SOLVED in {self.steps} steps\n{self.mask}\n"


class Impossible(NamedTuple):
    steps: int = 0

    def __str__(self) -> str:
        return "IMPOSSIBLE!!"


SolverMsg = Union[Unsolved, Solved, Impossible]

# =========================
# Search frames
# =========================
def iter_frame_candidates(
    state: GameState, cell: Optional[Tuple[int, int]]
) -> Iterator[Tuple[int, Placement]]:
    """Yield (piece_index, placement) for every unplaced piece covering cell."""
    if cell is None:
        return
    cover_x, cover_y = cell
    for piece_index in state.available_piece_indexes():
        for placement in iter_covering_placements(piece_index, cover_x, cover_y):
            yield piece_index, placement


class SolveFrame:
    """One level of the search: a state, the cell it must cover, and untried moves."""

    __slots__ = ("state", "cell", "candidates")

    def __init__(self, state: GameState, winning_mask: BoardMask) -> None:
        self.state = state
        # Any completion has to fill the lowest open cell, so only moves covering it are tried
        self.cell = state.next_to_cover(winning_mask)
        self.candidates = iter_frame_candidates(state, self.cell)

# =========================
# Solver
# =========================
class Solver:
    """Pull-driven depth-first search over GameState transitions for one winning mask."""

    def __init__(self, winning_mask: BoardMask, prune_islands: bool = False) -> None:
        self.winning_mask = winning_mask
        self.prune_islands = prune_islands
        self.steps = 0
        self._started_at: Optional[float] = None
        # At most one frame per placed piece, plus the empty board
        self._frames: Optional[List[SolveFrame]] = []

    @property
    def finished(self) -> bool:
        return self._frames is None

    @property
    def depth(self) -> int:
        return len(self._frames) if self._frames is not None else 0

    def __iter__(self) -> "Solver":
        return self

    def __next__(self) -> SolverMsg:
        frames = self._frames
        if frames is None:
            raise StopIteration

        if not frames:
            self._started_at = time.perf_counter()
            LOGGER.debug("Starting search, %d cells to cover", self.winning_mask.count())
            next_state: Optional[GameState] = GameState()
        else:
            next_state = self._advance(frames)

        if next_state is None:
            self._frames = None
            LOGGER.debug("Search exhausted after %d steps", self.steps)
            return Impossible(self.steps)

        if next_state.mask == self.winning_mask:
            self._frames = None
            elapsed = time.perf_counter() - (self._started_at or time.perf_counter())
            LOGGER.debug("Solved in %d steps (%.3fs)", self.steps, elapsed)
            return Solved(next_state, next_state.tagged_mask(self.winning_mask), self.steps, elapsed)

        # A state with every piece placed gets a frame with no candidates and is popped next step
        frames.append(SolveFrame(next_state, self.winning_mask))
        self.steps += 1
        return Unsolved(next_state, self.winning_mask)

    def _advance(self, frames: List[SolveFrame]) -> Optional[GameState]:
        """Return the next legal state, backtracking as needed; None once every frame is spent."""
        while frames:
            frame = frames[-1]
            for piece_index, placement in frame.candidates:
                candidate = frame.state.with_piece_placed(piece_index, placement, self.winning_mask)
                if candidate is None:
                    continue
                if self.prune_islands and not candidate.contains_no_islands(self.winning_mask):
                    continue
                return candidate
            frames.pop()
        return None


def solve(target: TargetDate, prune_islands: bool = False) -> Iterator[SolverMsg]:
    """Return the step sequence for target, or an empty one if the date has no board cells."""
    winning_mask = target.winning_mask()
    if winning_mask is None:
        LOGGER.debug("No winning mask for %s", target)
        return iter(())
    return Solver(winning_mask, prune_islands=prune_islands)

# =========================
# Drain helpers
# =========================
class SolveResult(NamedTuple):
    target: TargetDate
    outcome: str
    steps: int
    elapsed_seconds: float
    final: Optional[SolverMsg] = None


OUTCOME_SOLVED = "solved"
OUTCOME_IMPOSSIBLE = "impossible"
OUTCOME_INVALID = "invalid"
OUTCOME_CANCELLED = "cancelled"


def run_solver(
    target: TargetDate,
    max_steps: Optional[int] = None,
    prune_islands: bool = False,
) -> SolveResult:
    """Pull steps until the search ends, or stop early after max_steps Unsolved steps."""
    start_time = time.perf_counter()
    last: Optional[SolverMsg] = None
    unsolved_steps = 0
    cancelled = False
    for message in solve(target, prune_islands=prune_islands):
        last = message
        if isinstance(message, Unsolved):
            unsolved_steps += 1
            if max_steps is not None and unsolved_steps >= max_steps:
                cancelled = True
                break
    elapsed = time.perf_counter() - start_time

    if last is None:
        return SolveResult(target, OUTCOME_INVALID, 0, elapsed)
    if cancelled:
        return SolveResult(target, OUTCOME_CANCELLED, unsolved_steps, elapsed, last)
    if isinstance(last, Solved):
        return SolveResult(target, OUTCOME_SOLVED, last.steps, elapsed, last)
    return SolveResult(target, OUTCOME_IMPOSSIBLE, unsolved_steps, elapsed, last)
