"""
Move selection for the computer-controlled side.

This module defines the stable interface the game loop depends on:
compute_best_move(board, color) returns one move or None. Only the internals
are expected to evolve.

Current behaviour: a uniformly random choice among one-step candidate moves.
There is no evaluation and no search; the "best move" name is kept so that a
real minimax search can later replace the body without touching callers.

Move generation is a deliberately reduced rule set:
    - Pawn:  one square straight ahead, only onto an active, empty square.
             No captures, no double step, no en passant, no promotion.
    - Other: any of the 8 adjacent squares that is active and not occupied
             by a piece of the same colour (capturing is allowed). Queens,
             rooks, bishops and knights all step exactly like the king.
"""

import random
from dataclasses import dataclass

import chess

from variant.board import Board, Cell, RandomSource
from variant.constants import PAWN_DIRECTION

# The eight king-step offsets, in scan order (row-major around the origin).
_NEIGHBOUR_OFFSETS: tuple[tuple[int, int], ...] = tuple(
    (d_row, d_col)
    for d_row in (-1, 0, 1)
    for d_col in (-1, 0, 1)
    if (d_row, d_col) != (0, 0)
)

_default_rng = random.Random()


@dataclass(frozen=True)
class Move:
    """A single step from one square to another, in grid coordinates."""

    from_row: int
    from_col: int
    to_row: int
    to_col: int


def get_piece_moves(board: Board, cell: Cell, piece: chess.Piece) -> list[Move]:
    """
    Candidate moves for one piece standing on `cell`.

    Args:
        board: The board to read. Not modified.
        cell:  The square the piece stands on.
        piece: The piece to generate moves for.

    Returns:
        Moves onto active squares only, never onto a same-colour piece.
    """
    moves: list[Move] = []

    if piece.piece_type == chess.PAWN:
        to_row = cell.row + PAWN_DIRECTION[piece.color]
        target = board.get_cell(to_row, cell.col)
        if target is not None and target.active and target.piece is None:
            moves.append(Move(cell.row, cell.col, to_row, cell.col))
        return moves

    for d_row, d_col in _NEIGHBOUR_OFFSETS:
        target = board.get_cell(cell.row + d_row, cell.col + d_col)
        if target is None or not target.active:
            continue
        if target.piece is not None and target.piece.color == piece.color:
            continue
        moves.append(Move(cell.row, cell.col, target.row, target.col))

    return moves


def generate_valid_moves(board: Board, color: chess.Color) -> list[Move]:
    """All candidate moves for `color`, scanning the board in row-major order."""
    moves: list[Move] = []
    for cell in board.cells():
        if cell.active and cell.piece is not None and cell.piece.color == color:
            moves.extend(get_piece_moves(board, cell, cell.piece))
    return moves


def compute_best_move(
    board: Board,
    color: chess.Color,
    rng: RandomSource | None = None,
) -> Move | None:
    """
    Pick the move `color` plays on `board`.

    Args:
        board: The current position. Not modified.
        color: chess.WHITE or chess.BLACK.
        rng:   Randomness source exposing choice(seq). Defaults to a
               module-level random.Random instance.

    Returns:
        One candidate chosen uniformly at random, or None when `color` has
        no candidate moves.
    """
    moves = generate_valid_moves(board, color)
    if not moves:
        return None
    if rng is None:
        rng = _default_rng
    return rng.choice(moves)
