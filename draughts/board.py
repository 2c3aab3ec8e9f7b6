"""
Board and position model.

A Position is an immutable value: 100 cells stored row-major in a tuple plus
the side to move. Generating a successor always builds a new Position, so a
position can be handed to the transposition table, an opening book, or
another search branch without any risk of aliasing.

Coordinates are (row, col) tuples with row 0 at Black's back row. Only dark
squares (row + col odd) ever hold a piece.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Iterator, Sequence

from draughts.constants import (
    BLACK,
    BLACK_KING,
    BLACK_MAN,
    BLACK_START_ROWS,
    BOARD_SIZE,
    EMPTY,
    PIECE_CODES,
    PROMOTION_ROW,
    TOTAL_SQUARES,
    WHITE,
    WHITE_KING,
    WHITE_MAN,
    WHITE_START_ROWS,
)

Square = tuple[int, int]


class MalformedPositionError(ValueError):
    """Raised when a grid or FEN string does not describe a valid position."""


class IllegalMoveError(ValueError):
    """Raised when a move cannot be applied to, or parsed against, a position."""


def on_board(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def is_dark_square(row: int, col: int) -> bool:
    """Return True if (row, col) is a playable square. Off-board is never dark."""
    return on_board(row, col) and (row + col) % 2 == 1


def color_of(piece: int) -> int | None:
    """Return WHITE/BLACK for a piece code, or None for an empty cell."""
    if piece in (WHITE_MAN, WHITE_KING):
        return WHITE
    if piece in (BLACK_MAN, BLACK_KING):
        return BLACK
    return None


def is_king(piece: int) -> bool:
    return piece in (WHITE_KING, BLACK_KING)


def opponent(color: int) -> int:
    return BLACK if color == WHITE else WHITE


@dataclass(frozen=True)
class Move:
    """
    A complete move: start square, final square, and the captured squares in
    the order they were jumped. Simple moves have an empty capture tuple.
    """

    start: Square
    end: Square
    captures: tuple[Square, ...] = ()

    @property
    def is_capture(self) -> bool:
        return bool(self.captures)

    def __str__(self) -> str:
        sep = "x" if self.captures else "-"
        return f"{self.start}{sep}{self.end}"


@dataclass(frozen=True)
class Position:
    """
    Immutable piece placement plus side to move.

    Attributes:
        cells: 100 piece codes, row-major (index = row * 10 + col).
        turn:  WHITE or BLACK, the side to move.
    """

    cells: tuple[int, ...]
    turn: int = WHITE

    # -----------------------------------------------------------------------
    # Construction
    # -----------------------------------------------------------------------

    @classmethod
    def initial(cls) -> "Position":
        """Standard setup: 20 black men on rows 0-3, 20 white men on rows 6-9."""
        cells = [EMPTY] * TOTAL_SQUARES
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                if not is_dark_square(row, col):
                    continue
                if row in BLACK_START_ROWS:
                    cells[row * BOARD_SIZE + col] = BLACK_MAN
                elif row in WHITE_START_ROWS:
                    cells[row * BOARD_SIZE + col] = WHITE_MAN
        return cls(tuple(cells), WHITE)

    @classmethod
    def empty(cls, turn: int = WHITE) -> "Position":
        return cls((EMPTY,) * TOTAL_SQUARES, turn)

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[int]], turn: int = WHITE) -> "Position":
        """
        Build a position from the exchange format: 10 rows of 10 piece codes.

        Raises:
            MalformedPositionError: wrong dimensions, unknown piece codes,
                a piece on a light square, or an invalid side to move.
        """
        if turn not in (WHITE, BLACK):
            raise MalformedPositionError(f"invalid side to move: {turn!r}")
        if len(grid) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in grid):
            raise MalformedPositionError(f"grid must be {BOARD_SIZE}x{BOARD_SIZE}")

        cells: list[int] = []
        for row, line in enumerate(grid):
            for col, piece in enumerate(line):
                if piece not in PIECE_CODES:
                    raise MalformedPositionError(f"unknown piece code {piece!r} at {(row, col)}")
                if piece != EMPTY and not is_dark_square(row, col):
                    raise MalformedPositionError(f"piece on light square {(row, col)}")
                cells.append(int(piece))
        return cls(tuple(cells), turn)

    @classmethod
    def from_pieces(cls, pieces: dict[Square, int], turn: int = WHITE) -> "Position":
        """Build a position from a {(row, col): piece} mapping. Validated like from_grid."""
        grid = [[EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        for (row, col), piece in pieces.items():
            if not on_board(row, col):
                raise MalformedPositionError(f"square off the board: {(row, col)}")
            grid[row][col] = piece
        return cls.from_grid(grid, turn)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    @cached_property
    def key(self) -> bytes:
        """Byte encoding of (cells, turn); the transposition and book key."""
        return bytes(self.cells) + bytes((self.turn,))

    def piece_at(self, row: int, col: int) -> int:
        """Piece code at (row, col). Off-board coordinates read as EMPTY."""
        if not on_board(row, col):
            return EMPTY
        return self.cells[row * BOARD_SIZE + col]

    def pieces(self, color: int | None = None) -> Iterator[tuple[Square, int]]:
        """Yield ((row, col), piece) for every occupied cell, optionally of one color."""
        for index, piece in enumerate(self.cells):
            if piece == EMPTY:
                continue
            if color is not None and color_of(piece) != color:
                continue
            yield divmod(index, BOARD_SIZE), piece

    def count(self, color: int | None = None) -> int:
        return sum(1 for _ in self.pieces(color))

    def to_grid(self) -> list[list[int]]:
        return [
            list(self.cells[row * BOARD_SIZE:(row + 1) * BOARD_SIZE])
            for row in range(BOARD_SIZE)
        ]

    def with_turn(self, turn: int) -> "Position":
        """Same placement, different side to move."""
        return Position(self.cells, turn)

    # -----------------------------------------------------------------------
    # Successors
    # -----------------------------------------------------------------------

    def apply_move(self, move: Move) -> "Position":
        """
        Return the position after `move`; this position is left untouched.

        The moving piece is relocated, every captured cell is cleared, a man
        that ends on its promotion row is crowned, and the side to move flips.

        Raises:
            IllegalMoveError: the start square is off the board or does not
                hold a piece of the side to move, or the end square is not a
                dark square.
        """
        (from_row, from_col), (to_row, to_col) = move.start, move.end
        piece = self.piece_at(from_row, from_col)
        if color_of(piece) != self.turn:
            raise IllegalMoveError(f"no piece of the side to move on {move.start}")
        if not is_dark_square(to_row, to_col):
            raise IllegalMoveError(f"destination {move.end} is not a playable square")

        cells = list(self.cells)
        cells[from_row * BOARD_SIZE + from_col] = EMPTY
        for row, col in move.captures:
            if on_board(row, col):
                cells[row * BOARD_SIZE + col] = EMPTY

        if not is_king(piece) and to_row == PROMOTION_ROW[self.turn]:
            piece = WHITE_KING if piece == WHITE_MAN else BLACK_KING
        cells[to_row * BOARD_SIZE + to_col] = piece

        return Position(tuple(cells), opponent(self.turn))

    def __str__(self) -> str:
        symbols = {EMPTY: ".", WHITE_MAN: "w", BLACK_MAN: "b", WHITE_KING: "W", BLACK_KING: "B"}
        rows = [
            " ".join(symbols[p] for p in self.cells[r * BOARD_SIZE:(r + 1) * BOARD_SIZE])
            for r in range(BOARD_SIZE)
        ]
        side = "white" if self.turn == WHITE else "black"
        return "\n".join(rows) + f"\n{side} to move"


def apply_move(position: Position, move: Move) -> Position:
    """Functional alias for Position.apply_move."""
    return position.apply_move(move)
