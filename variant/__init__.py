"""
Expanding-board chess package.

A chess variant on an 8x8 grid where only the central 4x4 block is playable
at first. The playable area grows by one random cell after every half-move,
snapping through 6x6 to the full board. White is played by a human; Black
by a placeholder AI that picks random one-step moves.

Modules:
    constants — Grid size, expansion stages, setup options, reply delay
    board     — Cells, regions and the expanding Board
    ai        — Candidate move generation and random move selection
    game      — Piece setup, move application, delayed AI reply, undo
"""
