"""
Legal move generation for International Draughts.

Two rules shape every move list:

1. Mandatory capture: if any capture is available, only captures are legal.
2. Maximum capture: among captures, only the sequences that take the most
   pieces are legal.

Capture search is a recursive jump search that passes immutable tuples down
the call stack instead of mutating and restoring a shared board. Jumped
pieces are NOT lifted off the board until the move is applied: they still
block landing squares, and the captured-square tuple stops the same piece
from being jumped twice. The visited tuple forbids landing twice on the same
square within one sequence.
"""

from typing import Iterator, Sequence

from draughts.board import Move, Position, Square, color_of, is_dark_square, is_king, opponent
from draughts.constants import (
    BLACK_KING,
    BLACK_MAN,
    BLACK_MAN_DIRECTIONS,
    BLACK_WIN,
    DRAW,
    EMPTY,
    KING_DIRECTIONS,
    ONGOING,
    REPETITION_COUNT,
    REPETITION_WINDOW,
    WHITE,
    WHITE_KING,
    WHITE_MAN,
    WHITE_MAN_DIRECTIONS,
    WHITE_WIN,
)


def _directions(piece: int) -> tuple[tuple[int, int], ...]:
    if is_king(piece):
        return KING_DIRECTIONS
    return WHITE_MAN_DIRECTIONS if piece == WHITE_MAN else BLACK_MAN_DIRECTIONS


def _jump_sequences(
    position: Position,
    piece: int,
    start: Square,
    current: Square,
    captured: tuple[Square, ...],
    visited: tuple[Square, ...],
) -> Iterator[Move]:
    """
    Yield every complete capture sequence that continues from `current`.

    Args:
        position: The position before the move; never modified.
        piece:    Code of the moving piece (men do not crown mid-sequence).
        start:    Square the piece started from.
        current:  Square the piece currently stands on.
        captured: Opponent squares jumped so far, in order.
        visited:  Squares the piece has stood on so far, `start` included.
    """
    enemy = opponent(color_of(piece))
    row, col = current
    extended = False

    for d_row, d_col in _directions(piece):
        over = (row + d_row, col + d_col)
        land = (row + 2 * d_row, col + 2 * d_col)

        if not is_dark_square(*land) or land in visited:
            continue
        if over in captured or color_of(position.piece_at(*over)) != enemy:
            continue
        if position.piece_at(*land) != EMPTY:
            continue

        extended = True
        yield from _jump_sequences(
            position, piece, start, land, captured + (over,), visited + (land,)
        )

    if not extended and captured:
        yield Move(start, current, captured)


def _all_captures(position: Position) -> list[Move]:
    captures: list[Move] = []
    for square, piece in position.pieces(position.turn):
        captures.extend(_jump_sequences(position, piece, square, square, (), (square,)))
    return captures


def capture_moves(position: Position, max_capture: bool = True) -> list[Move]:
    """
    Return the legal capture moves for the side to move.

    With `max_capture` (the default, as the rules require) only sequences of
    the greatest length are returned. An empty list means no capture exists.
    """
    captures = _all_captures(position)
    if not captures or not max_capture:
        return captures
    longest = max(len(move.captures) for move in captures)
    return [move for move in captures if len(move.captures) == longest]


def _simple_moves(position: Position) -> list[Move]:
    moves: list[Move] = []
    for (row, col), piece in position.pieces(position.turn):
        for d_row, d_col in _directions(piece):
            to_row, to_col = row + d_row, col + d_col
            if is_dark_square(to_row, to_col) and position.piece_at(to_row, to_col) == EMPTY:
                moves.append(Move((row, col), (to_row, to_col)))
    return moves


def legal_moves(position: Position, max_capture: bool = True) -> list[Move]:
    """
    Return every legal move for the side to move.

    Captures are mandatory: when any exist, simple moves are excluded. An
    empty list means the side to move has lost.

    Args:
        position:    The position to generate moves for.
        max_capture: Apply the maximum-capture rule (default True). When
                     False, every complete capture sequence is legal, but
                     capturing is still mandatory.
    """
    captures = capture_moves(position, max_capture)
    if captures:
        return captures
    return _simple_moves(position)


def has_legal_move(position: Position) -> bool:
    """Cheap terminal test: True if the side to move has any move at all."""
    for (row, col), piece in position.pieces(position.turn):
        for d_row, d_col in _directions(piece):
            to_row, to_col = row + d_row, col + d_col
            if is_dark_square(to_row, to_col) and position.piece_at(to_row, to_col) == EMPTY:
                return True
    # Every neighbour is blocked; a capture is the only way out.
    return bool(_all_captures(position))


def _is_material_draw(position: Position) -> bool:
    counts = {WHITE_MAN: 0, BLACK_MAN: 0, WHITE_KING: 0, BLACK_KING: 0}
    for _, piece in position.pieces():
        counts[piece] += 1
    if counts[WHITE_MAN] or counts[BLACK_MAN]:
        return False
    kings = (counts[WHITE_KING], counts[BLACK_KING])
    return kings in ((1, 1), (2, 1), (1, 2))


def _is_repetition_draw(position: Position, history: Sequence[Position]) -> bool:
    recent = history[-REPETITION_WINDOW:]
    seen = 1 + sum(1 for earlier in recent if earlier.key == position.key)
    return seen >= REPETITION_COUNT


def game_result(position: Position, history: Sequence[Position] = ()) -> str:
    """
    Classify a position as ONGOING, WHITE_WIN, BLACK_WIN or DRAW.

    The side to move loses when it has no legal move. A bare-kings ending of
    1v1, 2v1 or 1v2 is a draw by insufficient material.

    Args:
        position: The position to classify.
        history:  Earlier positions of the game, oldest first. When given,
                  a position reached for the third time within the last
                  REPETITION_WINDOW plies is a draw.
    """
    if not has_legal_move(position):
        return BLACK_WIN if position.turn == WHITE else WHITE_WIN
    if _is_material_draw(position) or _is_repetition_draw(position, history):
        return DRAW
    return ONGOING
