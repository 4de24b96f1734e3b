"""
Console front end: play expanding-board chess over stdin/stdout.

A line-based command protocol in the spirit of UCI, meant for terminals and
for scripting the game from other programs. Each line is one command:

    new                         start a new game
    board                       print the board and a status line
    move <fr> <fc> <tr> <tc>    move a White piece from (fr, fc) to (tr, tc)
    undo                        take back the last AI move and player move
    quit                        exit

Rows and columns are 0-7, row 0 at the top. In the printed grid "·" marks an
inactive square and "." an empty active square.

Threading model:
    The AI reply arrives after a short delay on a timer thread. When it
    lands, the board is printed again from that thread. The main thread keeps
    reading stdin in the meantime.

Critical rule: stdout carries only protocol output (boards and status lines).
Diagnostics go to stderr.
"""

import sys
import os
import threading
from typing import Callable

# ---------------------------------------------------------------------------
# Path setup: make 'variant' importable when this script is run directly.
# When run as `python interface/console.py` from the repo root, sys.path may
# not include the repo root, so `import variant` would fail.
# ---------------------------------------------------------------------------
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

import chess
from variant.board import Board, RandomSource
from variant.constants import AI_REPLY_DELAY_S
from variant.game import Game, Scheduler, timer_scheduler

_INACTIVE = "·"
_EMPTY = "."


def _send(line: str) -> None:
    """Write a protocol line to stdout and flush immediately."""
    print(line, flush=True)


def _log(message: str) -> None:
    """Write a diagnostic message to stderr."""
    print(message, file=sys.stderr, flush=True)


def render_board(board: Board) -> list[str]:
    """
    Draw the board as text, one string per row, with column and row labels.

    Args:
        board: The board to draw. Not modified.

    Returns:
        Nine lines: a header of column indices, then one line per row.
    """
    lines = ["  " + " ".join(str(col) for col in range(board.size))]
    for row in range(board.size):
        squares = []
        for col in range(board.size):
            cell = board.grid[row][col]
            if not cell.active:
                squares.append(_INACTIVE)
            elif cell.piece is None:
                squares.append(_EMPTY)
            else:
                squares.append(cell.symbol)
        lines.append(f"{row} " + " ".join(squares))
    return lines


class ConsoleHandler:
    """
    Stateful handler for the console protocol.

    Holds the current game and prints it after every state change. The main
    loop creates one instance and dispatches commands to it.

    Attributes:
        game:        The game in progress, replaced by the "new" command.
        rng:         Randomness handed to every new game (None = fresh).
        scheduler:   Underlying scheduler for the AI reply. The handler wraps
                     it so the board is printed after the reply lands.
        reply_delay: Seconds the AI waits before replying.
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        scheduler: Scheduler | None = None,
        reply_delay: float = AI_REPLY_DELAY_S,
    ) -> None:
        self.rng = rng
        self.scheduler = scheduler if scheduler is not None else timer_scheduler
        self.reply_delay = reply_delay
        self._output_lock = threading.Lock()
        self.game = self._new_game()

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def handle_new(self) -> None:
        """Start a new game and print its opening position."""
        self.game = self._new_game()
        self.handle_board()

    def handle_board(self) -> None:
        """Print the grid followed by a one-line status summary."""
        with self._output_lock:
            game = self.game
            for line in render_board(game.board):
                _send(line)
            turn = "white" if game.current_turn == chess.WHITE else "black"
            _send(
                f"turn {turn} stage {game.board.current_stage_index} "
                f"moves {game.ply_count}"
            )

    def handle_move(self, tokens: list[str]) -> None:
        """
        Parse and apply a "move" command.

        Exactly four integer tokens are expected. Malformed commands are
        logged to stderr; well-formed but illegal moves are ignored by the
        game without comment, and the board is printed either way.

        Args:
            tokens: The command tokens with "move" already stripped.
        """
        if len(tokens) != 4:
            _log(f"console: move needs 4 coordinates, got {len(tokens)}")
            return
        try:
            from_row, from_col, to_row, to_col = (int(token) for token in tokens)
        except ValueError:
            _log(f"console: bad coordinates in move: {' '.join(tokens)}")
            return
        self.game.process_player_move(from_row, from_col, to_row, to_col)
        self.handle_board()

    def handle_undo(self) -> None:
        """Take back the last pair of moves and print the board."""
        self.game.undo_last_moves()
        self.handle_board()

    def handle_quit(self) -> None:
        """Exit the process. No reply is sent."""
        sys.exit(0)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _new_game(self) -> Game:
        return Game(rng=self.rng, scheduler=self._schedule_reply, reply_delay=self.reply_delay)

    def _schedule_reply(self, delay: float, callback: Callable[[], None]) -> None:
        """
        Schedule the game's AI reply and print the board once it lands.

        The board is printed only if the game that queued the reply is still
        the current one; a reply landing in a game replaced by "new" is silent.
        """
        owner = self.game

        def reply_and_show() -> None:
            try:
                callback()
                if self.game is owner:
                    self.handle_board()
            except Exception as e:
                _log(f"console: AI reply failed: {e}")

        self.scheduler(delay, reply_and_show)


def run_console_loop(stream=None, handler: ConsoleHandler | None = None) -> None:
    """
    Main console loop.

    Reads lines from `stream` (stdin by default) and dispatches each command
    to the handler until "quit" is received or the stream is closed.

    Error handling:
        Each command is wrapped in a try/except so that a bug in one handler
        does not end the session. Errors are logged to stderr and the loop
        continues.
    """
    if stream is None:
        stream = sys.stdin
    if handler is None:
        handler = ConsoleHandler()
    handler.handle_board()

    for raw_line in stream:
        line = raw_line.strip()
        if not line:
            continue

        tokens = line.split()
        command = tokens[0]
        args = tokens[1:]

        try:
            if command == "new":
                handler.handle_new()
            elif command == "board":
                handler.handle_board()
            elif command == "move":
                handler.handle_move(args)
            elif command == "undo":
                handler.handle_undo()
            elif command == "quit":
                handler.handle_quit()
            else:
                _log(f"console: ignoring unknown command: {command!r}")

        except Exception as e:
            _log(f"console: unhandled error for command {command!r}: {e}")


if __name__ == "__main__":
    run_console_loop()
