"""
Standard square numbering, move notation and FEN strings.

Dark squares are numbered 1-50 from Black's side: square 1 is row 0,
column 1, square 6 is row 1, column 0, square 50 is row 9, column 8.

Moves are written "32-28" (simple) or "28x19" (capture). FEN strings follow
the form "W:W31,32,...:B1,2,..." where the leading letter is the side to
move and kings carry a "K" (accepted before or after the number). Ranges
such as "31-50" are accepted on input.
"""

from draughts.board import IllegalMoveError, MalformedPositionError, Move, Position, Square, is_dark_square
from draughts.constants import (
    BLACK,
    BLACK_KING,
    BLACK_MAN,
    BOARD_SIZE,
    PLAYABLE_SQUARES,
    WHITE,
    WHITE_KING,
    WHITE_MAN,
)
from draughts.movegen import legal_moves

_PER_ROW = BOARD_SIZE // 2


def square_number(row: int, col: int) -> int:
    """1-50 number of a dark square."""
    if not is_dark_square(row, col):
        raise ValueError(f"{(row, col)} is not a playable square")
    return row * _PER_ROW + col // 2 + 1


def square_coords(number: int) -> Square:
    """(row, col) of square `number`."""
    if not 1 <= number <= PLAYABLE_SQUARES:
        raise ValueError(f"square number out of range: {number}")
    row, offset = divmod(number - 1, _PER_ROW)
    col = offset * 2 + (1 if row % 2 == 0 else 0)
    return row, col


def move_to_notation(move: Move) -> str:
    sep = "x" if move.captures else "-"
    return f"{square_number(*move.start)}{sep}{square_number(*move.end)}"


def parse_move(position: Position, text: str, max_capture: bool = True) -> Move:
    """
    Resolve notation like "32-28" or "28x19" against the legal moves.

    Only start and end squares are compared; when several capture routes share
    both, the first generated one is returned.

    Raises:
        IllegalMoveError: malformed notation or no matching legal move.
    """
    cleaned = text.strip().replace("x", "-")
    try:
        start_text, end_text = cleaned.split("-")
        start = square_coords(int(start_text))
        end = square_coords(int(end_text))
    except ValueError as exc:
        raise IllegalMoveError(f"malformed move notation: {text!r}") from exc

    for move in legal_moves(position, max_capture):
        if move.start == start and move.end == end:
            return move
    raise IllegalMoveError(f"illegal move in this position: {text!r}")


# ---------------------------------------------------------------------------
# FEN
# ---------------------------------------------------------------------------


def _piece_tokens(position: Position, color: int) -> list[str]:
    tokens = []
    for (row, col), piece in sorted(
        position.pieces(color), key=lambda item: square_number(*item[0])
    ):
        number = str(square_number(row, col))
        tokens.append(number + "K" if piece in (WHITE_KING, BLACK_KING) else number)
    return tokens


def position_to_fen(position: Position) -> str:
    side = "W" if position.turn == WHITE else "B"
    white = ",".join(_piece_tokens(position, WHITE))
    black = ",".join(_piece_tokens(position, BLACK))
    return f"{side}:W{white}:B{black}"


def _parse_squares(field: str, man: int, king: int, pieces: dict[Square, int]) -> None:
    for token in filter(None, (t.strip() for t in field.split(","))):
        is_king = "K" in token
        body = token.replace("K", "")
        if "-" in body:
            first, last = (int(part) for part in body.split("-"))
            if first > last:
                raise ValueError(f"reversed square range {token!r}")
            numbers = range(first, last + 1)
        else:
            numbers = range(int(body), int(body) + 1)
        for number in numbers:
            square = square_coords(number)
            if square in pieces:
                raise ValueError(f"square {number} listed twice")
            pieces[square] = king if is_king else man


def position_from_fen(fen: str) -> Position:
    """
    Parse a FEN string such as "W:W31-50:B1-20".

    Raises:
        MalformedPositionError: the string is not a valid position.
    """
    try:
        side, *fields = fen.strip().rstrip(".").split(":")
        if side not in ("W", "B") or len(fields) != 2:
            raise ValueError("expected '<side>:W<squares>:B<squares>'")

        pieces: dict[Square, int] = {}
        for field in fields:
            color, squares = field[:1], field[1:]
            if color == "W":
                _parse_squares(squares, WHITE_MAN, WHITE_KING, pieces)
            elif color == "B":
                _parse_squares(squares, BLACK_MAN, BLACK_KING, pieces)
            else:
                raise ValueError(f"unknown colour field {field!r}")
    except ValueError as exc:
        raise MalformedPositionError(f"invalid FEN {fen!r}: {exc}") from exc

    return Position.from_pieces(pieces, WHITE if side == "W" else BLACK)
