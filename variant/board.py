"""
Board state: an 8x8 grid whose playable area grows during the game.

Only the central 4x4 block is active at the start. Every applied half-move
calls expand_board(), which activates one random inactive cell inside the next
expansion stage. Once the active region's bounds line up with that stage, the
board advances to it and the next stage becomes the target. After the full
8x8 stage is reached, expansion stops.

The board knows nothing about turns or move legality. It only answers "what
is on this cell" and "grow by one cell", which keeps it easy to drive from
the game loop and from tests.
"""

import logging
import random
from dataclasses import dataclass
from typing import Iterator, Protocol, Sequence, TypeVar

import chess

from variant.constants import BOARD_SIZE, EXPANSION_STAGES

_log = logging.getLogger(__name__)

_T = TypeVar("_T")


class RandomSource(Protocol):
    """Anything that can pick one element of a sequence, e.g. random.Random."""

    def choice(self, seq: Sequence[_T]) -> _T: ...


@dataclass
class Region:
    """
    Inclusive rectangle of board coordinates.

    Used both for the fixed expansion stages and for the live active region.
    Two regions compare equal when all four bounds match, which is how the
    board detects that it has snapped to a stage.
    """

    min_row: int
    max_row: int
    min_col: int
    max_col: int

    def contains(self, row: int, col: int) -> bool:
        return self.min_row <= row <= self.max_row and self.min_col <= col <= self.max_col

    def include(self, row: int, col: int) -> None:
        """Widen the bounds so that (row, col) lies inside. Never shrinks."""
        self.min_row = min(self.min_row, row)
        self.max_row = max(self.max_row, row)
        self.min_col = min(self.min_col, col)
        self.max_col = max(self.max_col, col)

    def coordinates(self) -> Iterator[tuple[int, int]]:
        """Yield every (row, col) inside the region in row-major order."""
        for row in range(self.min_row, self.max_row + 1):
            for col in range(self.min_col, self.max_col + 1):
                yield row, col

    def copy(self) -> "Region":
        return Region(self.min_row, self.max_row, self.min_col, self.max_col)


@dataclass
class Cell:
    """
    One square of the grid.

    Attributes:
        row, col: Fixed grid position.
        active:   Whether the square is currently playable.
        piece:    The occupying piece, or None for an empty square.
    """

    row: int
    col: int
    active: bool = False
    piece: chess.Piece | None = None

    @property
    def symbol(self) -> str:
        """Unicode glyph of the occupying piece, or an empty string."""
        return self.piece.unicode_symbol() if self.piece is not None else ""


class Board:
    """
    The 8x8 grid plus the expansion bookkeeping.

    Attributes:
        grid:                Rows of Cell objects, indexed grid[row][col].
        active_region:       Bounding rectangle of all activated cells.
        expansion_stages:    The fixed nested targets, smallest first.
        current_stage_index: Index of the last stage the region has snapped to.
        rng:                 Source of randomness; see RandomSource.
    """

    def __init__(self, rng: RandomSource | None = None) -> None:
        self.size = BOARD_SIZE
        self.rng = rng if rng is not None else random.Random()
        self.expansion_stages: list[Region] = [Region(*bounds) for bounds in EXPANSION_STAGES]
        self.current_stage_index = 0
        self.active_region = self.expansion_stages[0].copy()

        initial = self.expansion_stages[0]
        self.grid: list[list[Cell]] = [
            [Cell(row, col, active=initial.contains(row, col)) for col in range(self.size)]
            for row in range(self.size)
        ]

    # -----------------------------------------------------------------------
    # Lookup
    # -----------------------------------------------------------------------

    def get_cell(self, row: int, col: int) -> Cell | None:
        """Return the cell at (row, col), or None when off the grid."""
        if row < 0 or row >= self.size or col < 0 or col >= self.size:
            return None
        return self.grid[row][col]

    def cells(self) -> Iterator[Cell]:
        """Yield all 64 cells in row-major order (for full redraws)."""
        for row in self.grid:
            yield from row

    def active_cell_count(self) -> int:
        return sum(1 for cell in self.cells() if cell.active)

    @property
    def is_fully_expanded(self) -> bool:
        return self.current_stage_index == len(self.expansion_stages) - 1

    # -----------------------------------------------------------------------
    # Expansion
    # -----------------------------------------------------------------------

    def expand_board(self) -> Cell | None:
        """
        Activate one random cell of the next stage and advance if it is complete.

        Candidates are the inactive cells inside the next stage's rectangle,
        collected in row-major order; one is drawn with rng.choice(). After the
        draw, the stage index advances by exactly one if the active region now
        matches the next stage. A call performs at most one activation and at
        most one stage advance; at the final stage it does nothing.

        Returns:
            The newly activated cell, or None when nothing was activated.
        """
        if self.is_fully_expanded:
            return None

        next_stage = self.expansion_stages[self.current_stage_index + 1]
        candidates = [
            self.grid[row][col]
            for row, col in next_stage.coordinates()
            if not self.grid[row][col].active
        ]

        activated = None
        if candidates:
            activated = self.rng.choice(candidates)
            activated.active = True
            self.active_region.include(activated.row, activated.col)

        if self.active_region == next_stage:
            self.current_stage_index += 1
            _log.debug("board: advanced to expansion stage %d", self.current_stage_index)

        return activated
