"""
Static evaluation: material plus simple positional terms.

Each piece contributes its material value and a handful of square bonuses,
signed for its owner (positive for White, negative for Black):

- centre occupancy (rows 3-6, cols 3-6) is rewarded, pieces on the rim are
  penalised;
- a man still standing on its own back row is rewarded, since it blocks the
  opponent's promotion square;
- a man within three rows of its promotion row is rewarded.

The score is always returned from the perspective of the side to move. This is
the negamax convention: the search always maximizes, and a positive score
means the current side is ahead. Evaluating the same placement with the other
side to move returns exactly the negated score.
"""

from draughts.board import Position, color_of, is_king
from draughts.constants import (
    BACK_ROW_BONUS,
    BOARD_SIZE,
    CENTER_BONUS,
    CENTER_RANGE,
    COMPLEX_CAPTURE_COUNT,
    COMPLEX_MOVE_COUNT,
    COMPLEXITY_BASE,
    COMPLEXITY_CAP,
    COMPLEXITY_CAPTURE_BOOST,
    COMPLEXITY_ENDGAME_BOOST,
    COMPLEXITY_MOBILITY_BOOST,
    EDGE_PENALTY,
    ENDGAME_PIECE_COUNT,
    PIECE_VALUES,
    PROMOTION_ROW,
    PROMOTION_ZONE_BONUS,
    PROMOTION_ZONE_DEPTH,
    WHITE,
)
from draughts.movegen import legal_moves

_LAST = BOARD_SIZE - 1


def _square_bonus(piece: int, color: int, row: int, col: int) -> int:
    bonus = 0
    if row in CENTER_RANGE and col in CENTER_RANGE:
        bonus += CENTER_BONUS
    if row in (0, _LAST) or col in (0, _LAST):
        bonus += EDGE_PENALTY

    if not is_king(piece):
        promotion_row = PROMOTION_ROW[color]
        back_row = _LAST - promotion_row
        if row == back_row:
            bonus += BACK_ROW_BONUS
        if abs(row - promotion_row) < PROMOTION_ZONE_DEPTH:
            bonus += PROMOTION_ZONE_BONUS
    return bonus


def evaluate(position: Position) -> int:
    """
    Score `position` from the side-to-move's perspective.

    Args:
        position: The position to score. Not modified.

    Returns:
        Integer score in man units (a man is worth 100). Positive means the
        side to move is ahead.

    Example:
        >>> evaluate(Position.initial())
        0
    """
    score = 0
    for (row, col), piece in position.pieces():
        color = color_of(piece)
        value = PIECE_VALUES[piece] + _square_bonus(piece, color, row, col)
        score += value if color == WHITE else -value

    return score if position.turn == WHITE else -score


def complexity(position: Position, max_capture: bool = True) -> float:
    """
    Time-management multiplier in [1.0, 1.5].

    `max_capture` must match the rule the search runs under, so the move
    count reflects the moves that will actually be searched.

    Tactical positions (several captures on offer), endgames (few pieces left)
    and high-mobility positions each earn a boost; boosts are summed and
    capped.
    """
    moves = legal_moves(position, max_capture)
    captures = sum(1 for move in moves if move.is_capture)

    factor = COMPLEXITY_BASE
    if captures > COMPLEX_CAPTURE_COUNT:
        factor += COMPLEXITY_CAPTURE_BOOST
    if position.count() < ENDGAME_PIECE_COUNT:
        factor += COMPLEXITY_ENDGAME_BOOST
    if len(moves) > COMPLEX_MOVE_COUNT:
        factor += COMPLEXITY_MOBILITY_BOOST
    return min(COMPLEXITY_CAP, factor)
