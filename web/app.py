"""
FastAPI web application for expanding-board chess.

Exposes a small REST API over one Game instance and serves the drag-and-drop
frontend via static files. The browser sends the player's moves and undo
clicks, then polls GET /api/board to pick up the AI reply once its delay has
elapsed.

Architecture notes:
- The Game is built by create_app() and stored on app.state; there is no
  module-global game. POST /api/new swaps in a fresh one.
- Sync endpoints (not async): FastAPI runs them in a thread pool. The Game
  serializes access with its own lock, which also covers the timer thread
  that delivers the AI reply.
- Invalid moves are not errors: the game ignores them and the endpoint
  returns the unchanged board. Only malformed bodies are rejected (422).
- Static files mounted LAST: route registration is first-match, so API routes
  must be registered before the StaticFiles catch-all.
"""

import logging
from pathlib import Path
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from variant.game import Game

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

# Absolute path resolved at import time; immune to working-directory changes.
_STATIC_DIR = Path(__file__).parent / "static"


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class MoveRequest(BaseModel):
    """
    A player move dragged from one square to another.

    Coordinates are not range-checked here: off-board squares are a normal,
    silently ignored input for the game.
    """

    from_row: int
    from_col: int
    to_row: int
    to_col: int


class RegionView(BaseModel):
    min_row: int
    max_row: int
    min_col: int
    max_col: int


class CellView(BaseModel):
    """
    One square as the frontend draws it.

    Fields:
        piece:  Piece letter (upper case = White), or None when empty.
        symbol: Unicode glyph of the piece, or "" when empty.
    """

    row: int
    col: int
    active: bool
    piece: str | None
    symbol: str


class BoardView(BaseModel):
    """
    Full redraw payload.

    Fields:
        turn:           "white" or "black".
        stage:          Index of the expansion stage reached (0, 1 or 2).
        active_region:  Bounds of the playable area.
        history_length: Number of applied half-moves.
        pending_reply:  True while the AI reply is waiting on its timer.
        cells:          All 64 squares in row-major order.
    """

    turn: str
    stage: int
    active_region: RegionView
    history_length: int
    pending_reply: bool
    cells: list[CellView]


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(game_factory: Callable[[], Game] = Game) -> FastAPI:
    """
    Build the web app around a freshly constructed game.

    Args:
        game_factory: Zero-argument callable returning a new Game. Used at
                      startup and by POST /api/new. Tests pass a factory
                      with a seeded rng and a manual scheduler.

    Returns:
        The configured FastAPI application.
    """
    app = FastAPI(title="Expanding Chess", version="1.0.0")
    app.state.game_factory = game_factory
    app.state.game = game_factory()

    def _view(request: Request) -> BoardView:
        return BoardView(**request.app.state.game.snapshot())

    # -----------------------------------------------------------------------
    # API routes (registered BEFORE StaticFiles mount)
    # -----------------------------------------------------------------------

    @app.get("/api/board", response_model=BoardView)
    def api_board(request: Request) -> BoardView:
        """Return the current board for a full redraw."""
        return _view(request)

    @app.post("/api/move", response_model=BoardView)
    def api_move(move: MoveRequest, request: Request) -> BoardView:
        """
        Submit a player move.

        Returns the board right after the player's move. The AI reply lands
        later; the client polls /api/board while pending_reply is true.
        """
        game: Game = request.app.state.game
        # No AI reply may land between the two reads.
        with game.lock:
            before = game.ply_count
            game.process_player_move(move.from_row, move.from_col, move.to_row, move.to_col)
            applied = game.ply_count > before
        if applied:
            _log.info(
                "Move (%d,%d)->(%d,%d) stage=%d",
                move.from_row,
                move.from_col,
                move.to_row,
                move.to_col,
                game.board.current_stage_index,
            )
        return _view(request)

    @app.post("/api/undo", response_model=BoardView)
    def api_undo(request: Request) -> BoardView:
        """Take back the last AI move and the player move before it."""
        game: Game = request.app.state.game
        with game.lock:
            before = game.ply_count
            game.undo_last_moves()
            undone = game.ply_count < before
        if undone:
            _log.info("Undo: %d half-moves remain", game.ply_count)
        return _view(request)

    @app.post("/api/new", response_model=BoardView)
    def api_new(request: Request) -> BoardView:
        """Discard the current game and start a new one."""
        request.app.state.game = request.app.state.game_factory()
        _log.info("New game started")
        return _view(request)

    @app.get("/", include_in_schema=False)
    def serve_root() -> FileResponse:
        """Serve the main board UI."""
        return FileResponse(_STATIC_DIR / "index.html")

    # -----------------------------------------------------------------------
    # Static file mount: MUST be last (catch-all for /static/* assets)
    # -----------------------------------------------------------------------

    app.mount("/static", StaticFiles(directory=_STATIC_DIR), name="static")

    return app


app = create_app()
