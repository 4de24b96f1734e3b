"""
Game loop: piece setup, move application, the delayed AI reply, and undo.

Game owns one Board, the move history and the side to move. Presentation
layers (the web app and the console) construct a Game explicitly and call its
two input entry points, process_player_move() and undo_last_moves(). They read
the position back through game.board.cells() or game.snapshot().

Threading model:
    After an accepted player move the AI reply is not played immediately. It
    is handed to a scheduler as a continuation that fires after reply_delay
    seconds; the default scheduler uses a daemon threading.Timer. Because the
    continuation runs on the timer's thread, every public method takes the
    game's re-entrant lock. At most one reply is pending at any time: asking
    for another while one is queued does nothing. A pending reply cannot be
    cancelled.

Invalid input never raises. A rejected move or an undo with too little
history simply leaves the game untouched.
"""

import logging
import random
import threading
from dataclasses import dataclass
from typing import Any, Callable

import chess

from variant.ai import Move, compute_best_move
from variant.board import Board, RandomSource
from variant.constants import (
    AI_COLOR,
    AI_REPLY_DELAY_S,
    BACK_RANK_OPTIONS,
    BACK_RANK_WIDTH,
    HUMAN_COLOR,
    KING_SLOTS,
    PAWN_DIRECTION,
)

_log = logging.getLogger(__name__)

# scheduler(delay_seconds, callback) -> None
Scheduler = Callable[[float, Callable[[], None]], None]


def timer_scheduler(delay: float, callback: Callable[[], None]) -> None:
    """Run `callback` once on a daemon timer thread after `delay` seconds."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()


@dataclass(frozen=True)
class CellSnapshot:
    """The contents of one square just before a move touched it."""

    row: int
    col: int
    piece: chess.Piece | None


@dataclass(frozen=True)
class MoveRecord:
    """
    Enough information to take back one applied move.

    Attributes:
        source: The square the piece left, with the piece that stood there.
        target: The destination square, with whatever stood there before
                (None for a quiet move, the captured piece otherwise).
    """

    source: CellSnapshot
    target: CellSnapshot

    def restore(self, board: Board) -> None:
        """Put both squares back exactly as they were before the move."""
        for snapshot in (self.source, self.target):
            board.grid[snapshot.row][snapshot.col].piece = snapshot.piece


class Game:
    """
    One game of expanding-board chess between a human (White) and the AI.

    Attributes:
        board:        The board being played on.
        move_history: Applied moves, oldest first.
        current_turn: chess.WHITE or chess.BLACK.
        rng:          Randomness shared by setup, expansion and the AI.
        scheduler:    Runs the delayed AI reply; see timer_scheduler().
        reply_delay:  Seconds between a player move and the AI reply.
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        scheduler: Scheduler | None = None,
        reply_delay: float = AI_REPLY_DELAY_S,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.scheduler = scheduler if scheduler is not None else timer_scheduler
        self.reply_delay = reply_delay
        self.board = Board(self.rng)
        self.move_history: list[MoveRecord] = []
        self.current_turn: chess.Color = HUMAN_COLOR
        self.pending_reply = False
        self._lock = threading.RLock()
        self.init_pieces()

    @property
    def lock(self) -> threading.RLock:
        """The lock serializing every change to this game; re-entrant."""
        return self._lock

    # -----------------------------------------------------------------------
    # Setup
    # -----------------------------------------------------------------------

    def init_pieces(self) -> None:
        """
        Place four back-rank pieces and four pawns for each side.

        Both sides use the active region's columns min_col, min_col+1,
        min_col+2 and max_col. The king takes one of the two middle slots at
        random; each remaining slot gets an independent random draw from
        queen, rook, bishop and knight. White's back rank is the region's
        bottom row and Black's the top row, with pawns one row inward.
        """
        region = self.board.active_region
        columns = [region.min_col, region.min_col + 1, region.min_col + 2, region.max_col]

        for color in (chess.WHITE, chess.BLACK):
            back_row = region.max_row if color == chess.WHITE else region.min_row
            pawn_row = back_row + PAWN_DIRECTION[color]

            king_slot = self.rng.choice(KING_SLOTS)
            back_rank = [
                chess.KING if slot == king_slot else self.rng.choice(BACK_RANK_OPTIONS)
                for slot in range(BACK_RANK_WIDTH)
            ]

            for col, piece_type in zip(columns, back_rank):
                cell = self.board.get_cell(back_row, col)
                if cell is not None:
                    cell.piece = chess.Piece(piece_type, color)
            for col in columns:
                cell = self.board.get_cell(pawn_row, col)
                if cell is not None:
                    cell.piece = chess.Piece(chess.PAWN, color)

    # -----------------------------------------------------------------------
    # Input entry points
    # -----------------------------------------------------------------------

    def process_player_move(self, from_row: int, from_col: int, to_row: int, to_col: int) -> None:
        """
        Apply a human (White) move and queue the AI reply.

        The move is ignored when either square is off the board, the
        destination is inactive, the source does not hold a White piece, or
        the destination holds a White piece. Nothing else is checked: the
        piece type and the distance travelled do not matter.
        """
        with self._lock:
            from_cell = self.board.get_cell(from_row, from_col)
            to_cell = self.board.get_cell(to_row, to_col)
            if from_cell is None or to_cell is None or not to_cell.active:
                return
            if from_cell.piece is None or from_cell.piece.color != HUMAN_COLOR:
                return
            if to_cell.piece is not None and to_cell.piece.color == HUMAN_COLOR:
                return

            self._apply_move(Move(from_row, from_col, to_row, to_col))
            self.board.expand_board()
            self.current_turn = AI_COLOR
            self._schedule_reply()

    def process_ai_move(self) -> None:
        """
        Play the AI's move for Black, then expand the board and hand over.

        When Black has no candidate move the turn still passes to White and
        the board still expands, but nothing is recorded.
        """
        with self._lock:
            move = compute_best_move(self.board, AI_COLOR, self.rng)
            if move is not None:
                self._apply_move(move)
            self.board.expand_board()
            self.current_turn = HUMAN_COLOR

    def undo_last_moves(self) -> None:
        """
        Take back the last AI move and the player move before it.

        Only pieces are restored; cells activated by expansion stay active and
        the stage index is not rolled back. If it is White's turn afterwards,
        the turn goes to Black and a fresh AI reply is queued.
        """
        with self._lock:
            if len(self.move_history) < 2:
                return
            last_ai_move = self.move_history.pop()
            last_player_move = self.move_history.pop()
            last_ai_move.restore(self.board)
            last_player_move.restore(self.board)
            _log.debug("game: undid two moves, %d remain", len(self.move_history))

            if self.current_turn == HUMAN_COLOR:
                self.current_turn = AI_COLOR
                self._schedule_reply()

    # -----------------------------------------------------------------------
    # Read accessors
    # -----------------------------------------------------------------------

    @property
    def ply_count(self) -> int:
        return len(self.move_history)

    def snapshot(self) -> dict[str, Any]:
        """
        Plain-data view of the game for presentation layers.

        Cells are listed in row-major order. Pieces are reported by their
        letter (upper case for White) and their Unicode glyph.
        """
        with self._lock:
            region = self.board.active_region
            return {
                "turn": "white" if self.current_turn == chess.WHITE else "black",
                "stage": self.board.current_stage_index,
                "active_region": {
                    "min_row": region.min_row,
                    "max_row": region.max_row,
                    "min_col": region.min_col,
                    "max_col": region.max_col,
                },
                "history_length": len(self.move_history),
                "pending_reply": self.pending_reply,
                "cells": [
                    {
                        "row": cell.row,
                        "col": cell.col,
                        "active": cell.active,
                        "piece": cell.piece.symbol() if cell.piece is not None else None,
                        "symbol": cell.symbol,
                    }
                    for cell in self.board.cells()
                ],
            }

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _apply_move(self, move: Move) -> None:
        """Record the move, then move the piece, overwriting any capture."""
        from_cell = self.board.grid[move.from_row][move.from_col]
        to_cell = self.board.grid[move.to_row][move.to_col]
        self.move_history.append(
            MoveRecord(
                source=CellSnapshot(move.from_row, move.from_col, from_cell.piece),
                target=CellSnapshot(move.to_row, move.to_col, to_cell.piece),
            )
        )
        to_cell.piece = from_cell.piece
        from_cell.piece = None
        _log.debug(
            "game: %s (%d,%d)->(%d,%d)",
            to_cell.piece.symbol() if to_cell.piece is not None else "?",
            move.from_row,
            move.from_col,
            move.to_row,
            move.to_col,
        )

    def _schedule_reply(self) -> None:
        """Queue one AI reply unless one is already waiting."""
        if self.pending_reply:
            return
        self.pending_reply = True
        self.scheduler(self.reply_delay, self._run_scheduled_reply)

    def _run_scheduled_reply(self) -> None:
        with self._lock:
            self.pending_reply = False
            self.process_ai_move()
