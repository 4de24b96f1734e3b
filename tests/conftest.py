"""
Shared pytest fixtures for the expanding-chess tests.

Game fixtures are function-scoped so every test starts from a fresh board.
Randomness is always injected: either a seeded random.Random or one of the
small stub sources below, so that expansion, setup and AI choices are
reproducible.
"""

import random

import pytest

from variant.board import Board
from variant.game import Game


class ManualScheduler:
    """Collects scheduled callbacks instead of running them on a timer."""

    def __init__(self):
        self.calls = []

    def __call__(self, delay, callback):
        self.calls.append((delay, callback))

    def run_pending(self):
        """Run every queued callback once, in the order they were scheduled."""
        queued, self.calls = self.calls, []
        for _, callback in queued:
            callback()
        return len(queued)


class FirstChoice:
    """Randomness stub that always picks the first element."""

    def choice(self, seq):
        return seq[0]


class LastChoice:
    """Randomness stub that always picks the last element."""

    def choice(self, seq):
        return seq[-1]


def immediate_scheduler(delay, callback):
    callback()


def activate_all(board):
    """Make every square playable without going through expand_board()."""
    for cell in board.cells():
        cell.active = True


def piece_layout(board):
    """Map (row, col) -> piece object for identity comparisons."""
    return {(cell.row, cell.col): cell.piece for cell in board.cells()}


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def board(rng):
    return Board(rng)


@pytest.fixture
def open_board(rng):
    """An empty board with all 64 squares active."""
    board = Board(rng)
    activate_all(board)
    return board


@pytest.fixture
def game(rng, scheduler):
    return Game(rng=rng, scheduler=scheduler)
