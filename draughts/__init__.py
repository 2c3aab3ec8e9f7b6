"""
International Draughts (10x10) engine package.

This package implements a classical draughts engine using negamax search with
alpha-beta pruning, quiescence search over captures, a transposition table,
and a hand-crafted evaluation function.

Modules:
    constants     — Board geometry, piece codes, evaluation weights, difficulty tables
    board         — Immutable Position and Move values, dark-square predicate
    movegen       — Legal moves with mandatory and maximum capture, game result
    evaluate      — Static position evaluation and position complexity
    transposition — Bounded FIFO transposition table with retention time
    difficulty    — Difficulty levels and opening-book move selection
    search        — Negamax, quiescence, iterative deepening, the Engine
    opening_book  — Opening-book source protocol and JSON-backed book
    notation      — Square numbers, move notation, FEN strings
"""
