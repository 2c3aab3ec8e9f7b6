"""
Engine constants: board geometry, piece codes, evaluation weights, difficulty
tables, and cache/search parameters.

All numeric constants used throughout the engine are defined here so that
the other modules never need to introduce new magic numbers. Centralizing
constants makes tuning the difficulty levels a one-file job.

Scores are integers in "man units" (1 man = 100). The only floats are the
time-management multipliers and the opening-book randomization
probabilities.
"""

# ---------------------------------------------------------------------------
# Board geometry
# ---------------------------------------------------------------------------
# Row 0 is Black's back row (top of the board), row 9 is White's back row.
# Dark (playable) squares are those where row + col is odd, which puts
# square 1 of the standard numbering on row 0, column 1.

BOARD_SIZE: int = 10
TOTAL_SQUARES: int = BOARD_SIZE * BOARD_SIZE
PLAYABLE_SQUARES: int = 50
PIECES_PER_SIDE: int = 20

# Rows filled with men in the standard starting position.
BLACK_START_ROWS: range = range(0, 4)
WHITE_START_ROWS: range = range(6, 10)

# ---------------------------------------------------------------------------
# Sides and piece codes
# ---------------------------------------------------------------------------
# The piece codes double as the position exchange format: a position is a
# 10x10 grid of these integers plus a side-to-move flag.

WHITE: int = 0
BLACK: int = 1

EMPTY: int = 0
WHITE_MAN: int = 1
BLACK_MAN: int = 2
WHITE_KING: int = 3
BLACK_KING: int = 4

PIECE_CODES: frozenset[int] = frozenset({EMPTY, WHITE_MAN, BLACK_MAN, WHITE_KING, BLACK_KING})

# Row a man must reach to be crowned.
PROMOTION_ROW: dict[int, int] = {
    WHITE: 0,
    BLACK: BOARD_SIZE - 1,
}

# ---------------------------------------------------------------------------
# Movement directions as (d_row, d_col)
# ---------------------------------------------------------------------------
# White men move up the board (decreasing row), black men move down.
# Kings step one square in any of the four diagonals.

WHITE_MAN_DIRECTIONS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1))
BLACK_MAN_DIRECTIONS: tuple[tuple[int, int], ...] = ((1, -1), (1, 1))
KING_DIRECTIONS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))

# ---------------------------------------------------------------------------
# Evaluation weights
# ---------------------------------------------------------------------------

MAN_VALUE: int = 100
KING_VALUE: int = 300

PIECE_VALUES: dict[int, int] = {
    WHITE_MAN:  MAN_VALUE,
    BLACK_MAN:  MAN_VALUE,
    WHITE_KING: KING_VALUE,
    BLACK_KING: KING_VALUE,
}

CENTER_BONUS: int = 10           # rows 3-6 and cols 3-6
EDGE_PENALTY: int = -5           # first/last row or column
BACK_ROW_BONUS: int = 5          # man still guarding its own back row
PROMOTION_ZONE_BONUS: int = 15   # man within three rows of crowning

CENTER_RANGE: range = range(3, 7)
PROMOTION_ZONE_DEPTH: int = 3

# ---------------------------------------------------------------------------
# Special scores
# ---------------------------------------------------------------------------
# WIN_SCORE is returned (negated, minus ply) when the side to move has no
# legal move. INFINITY_SCORE bounds the root window and is never returned.

WIN_SCORE: int = 99_999
INFINITY_SCORE: int = 1_000_000
DRAW_SCORE: int = 0

# Scores at or beyond this magnitude are wins or losses at a known distance.
# The transposition table stores them relative to the node, not the root.
WIN_THRESHOLD: int = WIN_SCORE - 1_000

# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------

# The search generator yields control to the host every this many nodes.
YIELD_INTERVAL_NODES: int = 1_000

# Iterative deepening only starts a new depth while elapsed time is below
# this fraction of the budget; the remainder is headroom for the deadline.
TIME_USAGE_FRACTION: float = 0.9

# Complexity boosts for time management, summed and capped.
COMPLEXITY_BASE: float = 1.0
COMPLEXITY_CAPTURE_BOOST: float = 0.2    # more than COMPLEX_CAPTURE_COUNT captures
COMPLEXITY_ENDGAME_BOOST: float = 0.3    # fewer than ENDGAME_PIECE_COUNT pieces
COMPLEXITY_MOBILITY_BOOST: float = 0.2   # more than COMPLEX_MOVE_COUNT legal moves
COMPLEXITY_CAP: float = 1.5

COMPLEX_CAPTURE_COUNT: int = 2
ENDGAME_PIECE_COUNT: int = 10
COMPLEX_MOVE_COUNT: int = 15

# ---------------------------------------------------------------------------
# Transposition table
# ---------------------------------------------------------------------------
# A single large cap shared by every difficulty. Entries are evicted
# first-in-first-out once the table is full.

TT_MAX_SIZE: int = 10_000_000

# Bound types stored with every entry.
EXACT: int = 0
LOWER_BOUND: int = 1   # beta cutoff, true value may be higher
UPPER_BOUND: int = 2   # failed low, true value may be lower

# ---------------------------------------------------------------------------
# Difficulty levels
# ---------------------------------------------------------------------------
# 1 = beginner ... 6 = grandmaster. Every table is strictly ordered from
# shallow/fast/random to deep/slow/deterministic.

MIN_LEVEL: int = 1
MAX_LEVEL: int = 6

LEVEL_NAMES: dict[int, str] = {
    1: "beginner",
    2: "easy",
    3: "intermediate",
    4: "advanced",
    5: "expert",
    6: "grandmaster",
}

MAX_DEPTH: dict[int, int] = {1: 2, 2: 4, 3: 6, 4: 8, 5: 10, 6: 12}

QUIESCENCE_DEPTH: dict[int, int] = {1: 0, 2: 1, 3: 3, 4: 5, 5: 6, 6: 8}

# Milliseconds a cached entry stays valid. Zero disables caching.
CACHE_RETENTION_MS: dict[int, int] = {
    1: 0,
    2: 0,
    3: 60_000,
    4: 900_000,
    5: 1_800_000,
    6: 3_600_000,
}

# Base thinking time in milliseconds.
TIME_ALLOCATION_MS: dict[int, int] = {
    1: 500,
    2: 1_000,
    3: 2_000,
    4: 15_000,
    5: 20_000,
    6: 30_000,
}

COMPLEX_POSITION_MULTIPLIER: dict[int, float] = {
    1: 1.0,
    2: 1.0,
    3: 1.5,
    4: 2.5,
    5: 2.8,
    6: 3.0,
}

# How many book moves the engine plays per game before it always searches.
BOOK_MAX_MOVES: dict[int, int] = {1: 4, 2: 6, 3: 8, 4: 12, 5: 14, 6: 15}

# Probability of picking a random book candidate instead of the first one.
BOOK_RANDOMIZATION: dict[int, float] = {
    1: 0.8,
    2: 0.6,
    3: 0.4,
    4: 0.15,
    5: 0.08,
    6: 0.05,
}

# ---------------------------------------------------------------------------
# Game results
# ---------------------------------------------------------------------------

ONGOING: str = "ongoing"
WHITE_WIN: str = "white_win"
BLACK_WIN: str = "black_win"
DRAW: str = "draw"

# A position seen this many times within the last REPETITION_WINDOW plies is
# drawn.
REPETITION_COUNT: int = 3
REPETITION_WINDOW: int = 20
