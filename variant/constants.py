"""
Game constants: grid size, expansion stages, setup options, and timing.

All numeric constants used throughout the game are defined here so that the
board, the game loop, and the presentation layers never introduce their own
magic numbers.

Coordinates are (row, col) with row 0 at the top of the screen. White sits at
the bottom of the active region and moves towards row 0.
"""

import chess

# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------

BOARD_SIZE: int = 8

# ---------------------------------------------------------------------------
# Expansion stages
# ---------------------------------------------------------------------------
# Inclusive (min_row, max_row, min_col, max_col) rectangles, strictly nested:
# 4x4 -> 6x6 -> 8x8. Stage 0 is the initially active block; the last stage is
# the full board.

EXPANSION_STAGES: tuple[tuple[int, int, int, int], ...] = (
    (2, 5, 2, 5),
    (1, 6, 1, 6),
    (0, 7, 0, 7),
)

# ---------------------------------------------------------------------------
# Initial setup
# ---------------------------------------------------------------------------
# Each side gets a four-wide back rank. The king always lands on one of the
# two middle slots; the other slots are drawn independently from these types,
# so duplicates are possible.

BACK_RANK_WIDTH: int = 4
KING_SLOTS: tuple[int, ...] = (1, 2)
BACK_RANK_OPTIONS: tuple[int, ...] = (
    chess.QUEEN,
    chess.ROOK,
    chess.BISHOP,
    chess.KNIGHT,
)

# Forward direction in rows for each colour's pawns.
PAWN_DIRECTION: dict[bool, int] = {
    chess.WHITE: -1,
    chess.BLACK: 1,
}

# The human always plays White.
HUMAN_COLOR: bool = chess.WHITE
AI_COLOR: bool = chess.BLACK

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------
# Delay between an accepted player move and the AI's reply, in seconds.
# Gives the presentation layer time to show the player's move first.
AI_REPLY_DELAY_S: float = 0.5
