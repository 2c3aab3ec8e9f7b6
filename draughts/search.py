"""
Search entry point: negamax with alpha-beta pruning, quiescence search,
transposition table, and iterative deepening with time management.

The search is written as a chain of generators. Every function that visits
nodes (`search_root`, `negamax`, `quiescence`) is a generator that yields
nothing but control: once every YIELD_INTERVAL_NODES nodes it suspends so the
host can do other work, and it delivers its score as the generator's return
value (`score = -(yield from negamax(...))`). This keeps cooperative yielding
explicit without threads:

- `Engine.get_move()` is a coroutine. It drives the generator and awaits
  `asyncio.sleep(0)` at every yield, so an event loop serving a UI is never
  starved for long.
- `Engine.search()` drives the same generator synchronously and returns the
  full SearchResult.

Cancellation is time-based only. The deadline is polled at every node; when
it passes, `SearchState.timed_out` is raised, every frame unwinds without
touching the transposition table, and the iterative-deepening loop discards
the interrupted depth and keeps the last completed one. Depth 1 always runs
without a deadline so a legal move is returned whenever one exists.
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Generator

from draughts.board import Move, Position, is_king
from draughts.constants import (
    DRAW_SCORE,
    EXACT,
    INFINITY_SCORE,
    LOWER_BOUND,
    PROMOTION_ROW,
    TIME_USAGE_FRACTION,
    TT_MAX_SIZE,
    UPPER_BOUND,
    WIN_SCORE,
    YIELD_INTERVAL_NODES,
)
from draughts.difficulty import DifficultySettings, choose_book_move, settings_for
from draughts.evaluate import complexity, evaluate
from draughts.movegen import capture_moves, has_legal_move, legal_moves
from draughts.opening_book import OpeningBookError, OpeningBookSource
from draughts.transposition import TranspositionTable

_log = logging.getLogger(__name__)

# A search generator yields bare control and returns a score.
SearchGen = Generator[None, None, int]


@dataclass
class SearchState:
    """
    Mutable state for one top-level search.

    Attributes:
        table:            Transposition table owned by the engine.
        deadline:         Clock value (seconds) after which the search stops.
        quiescence_depth: Capture plies searched past the nominal depth.
        max_capture:      Apply the maximum-capture rule when generating moves.
        enforce_deadline: False while depth 1 runs, so it always completes.
        node_count:       Nodes visited (negamax and quiescence).
        timed_out:        Set once the deadline passes. Scores computed after
                          that point are meaningless and must be discarded.
        clock:            Monotonic clock in seconds.
    """

    table: TranspositionTable
    deadline: float = float("inf")
    quiescence_depth: int = 0
    max_capture: bool = True
    enforce_deadline: bool = True
    node_count: int = 0
    timed_out: bool = False
    clock: Callable[[], float] = field(default=time.monotonic)

    def enter_node(self) -> bool:
        """Count a node; return True when the caller should yield control."""
        self.node_count += 1
        return self.node_count % YIELD_INTERVAL_NODES == 0

    def out_of_time(self) -> bool:
        if not self.timed_out and self.enforce_deadline and self.clock() >= self.deadline:
            self.timed_out = True
        return self.timed_out


@dataclass(frozen=True)
class SearchResult:
    """
    Outcome of one move request.

    Attributes:
        move:       Chosen move, or None when the side to move has no move.
        score:      Score from the side-to-move's perspective.
        nodes:      Nodes visited.
        elapsed_ms: Wall-clock time spent.
        depth:      Deepest fully completed iteration (0 for book moves).
        from_book:  The move came from the opening book.
        timed_out:  The last iteration was cut short by the deadline.
    """

    move: Move | None
    score: int
    nodes: int
    elapsed_ms: float
    depth: int
    from_book: bool = False
    timed_out: bool = False


def _order_moves(position: Position, moves: list[Move], hash_move: Move | None = None) -> list[Move]:
    """
    Order moves for better alpha-beta pruning.

    The hash move (best move of a previous search of this position) goes
    first, then longer capture sequences, then promotions, then everything
    else in generation order. Under the maximum-capture rule all captures in
    a list have the same length, so the capture term only matters when the
    rule is switched off.
    """
    promotion_row = PROMOTION_ROW[position.turn]

    def _priority(move: Move) -> int:
        score = 0
        if move == hash_move:
            score += 1_000_000
        score += 1_000 * len(move.captures)
        if move.end[0] == promotion_row and not is_king(position.piece_at(*move.start)):
            score += 500
        return score

    return sorted(moves, key=_priority, reverse=True)


def quiescence(
    position: Position,
    alpha: int,
    beta: int,
    depth: int,
    ply: int,
    state: SearchState,
) -> SearchGen:
    """
    Quiescence search: resolve pending captures before trusting the evaluation.

    Stand-pat: the static evaluation is taken as a lower bound. If it already
    reaches beta the opponent would avoid this line, so we cut off. Otherwise
    only capture moves are searched, one ply of quiescence budget each, until
    the budget is spent, time runs out, or no capture remains.

    Args:
        position: Position to resolve.
        alpha:    Lower bound of the window.
        beta:     Upper bound of the window.
        depth:    Remaining quiescence plies.
        ply:      Distance from the root, for loss-distance scoring.
        state:    Shared search state.

    Returns (as the generator's value):
        Fail-hard score in [alpha, beta] from the side-to-move's perspective.
    """
    if state.enter_node():
        yield
    if state.out_of_time():
        return DRAW_SCORE

    captures = capture_moves(position, state.max_capture)
    if not captures and not has_legal_move(position):
        return -(WIN_SCORE - ply)

    stand_pat = evaluate(position)
    if stand_pat >= beta:
        return beta
    if stand_pat > alpha:
        alpha = stand_pat

    if depth <= 0:
        return alpha

    for move in _order_moves(position, captures):
        score = -(yield from quiescence(position.apply_move(move), -beta, -alpha, depth - 1, ply + 1, state))
        if state.timed_out:
            return DRAW_SCORE

        if score >= beta:
            return beta
        if score > alpha:
            alpha = score

    return alpha


def negamax(
    position: Position,
    depth: int,
    alpha: int,
    beta: int,
    ply: int,
    state: SearchState,
) -> SearchGen:
    """
    Negamax search with alpha-beta pruning and quiescence search at the leaves.

    Negamax exploits the zero-sum property of the game: one side's gain is
    exactly the other's loss, so a single maximizing function is enough as
    long as each recursive score is negated and the window is swapped.

    Args:
        position: Current position. Never modified; children are new objects.
        depth:    Remaining depth in plies. At 0 the search hands off to
                  quiescence instead of returning the static evaluation.
        alpha:    Lower bound of the window (best score we can guarantee).
        beta:     Upper bound of the window (best score the opponent allows).
        ply:      Distance from the root. A side with no moves scores
                  -(WIN_SCORE - ply), so quicker wins rank higher.
        state:    Shared search state.

    Returns (as the generator's value):
        Score from the side-to-move's perspective. After a timeout the value
        is meaningless; callers check `state.timed_out`.
    """
    if state.enter_node():
        yield
    if state.out_of_time():
        return DRAW_SCORE

    key = position.key
    cached = state.table.lookup(key, depth, alpha, beta, ply)
    if cached is not None:
        return cached.score

    if depth <= 0:
        return (yield from quiescence(position, alpha, beta, state.quiescence_depth, ply, state))

    moves = legal_moves(position, state.max_capture)
    if not moves:
        return -(WIN_SCORE - ply)

    original_alpha = alpha
    best_score = -INFINITY_SCORE
    best_move: Move | None = None

    for move in _order_moves(position, moves, state.table.best_move(key)):
        score = -(yield from negamax(position.apply_move(move), depth - 1, -beta, -alpha, ply + 1, state))
        if state.timed_out:
            return DRAW_SCORE

        if score > best_score:
            best_score = score
            best_move = move
        if best_score > alpha:
            alpha = best_score
        if alpha >= beta:
            break

    if best_score <= original_alpha:
        bound = UPPER_BOUND
    elif best_score >= beta:
        bound = LOWER_BOUND
    else:
        bound = EXACT
    state.table.store(key, depth, best_score, bound, best_move, ply)

    return best_score


def search_root(
    position: Position,
    depth: int,
    state: SearchState,
    previous_best: Move | None = None,
) -> Generator[None, None, tuple[Move | None, int]]:
    """
    Search every root move to `depth` with a full (-inf, +inf) window.

    The root never answers from the transposition table, so it always has a
    move to report; the previous iteration's best move is searched first.

    Returns (as the generator's value):
        (best_move, best_score). best_move is None if there are no legal
        moves or the deadline passed before any move was searched.
    """
    if state.enter_node():
        yield

    moves = legal_moves(position, state.max_capture)
    if not moves:
        return None, -WIN_SCORE

    key = position.key
    hint = previous_best if previous_best in moves else state.table.best_move(key)

    alpha, beta = -INFINITY_SCORE, INFINITY_SCORE
    best_score = -INFINITY_SCORE
    best_move: Move | None = None

    for move in _order_moves(position, moves, hint):
        score = -(yield from negamax(position.apply_move(move), depth - 1, -beta, -alpha, 1, state))
        if state.timed_out:
            return None, DRAW_SCORE

        if score > best_score:
            best_score = score
            best_move = move
        if best_score > alpha:
            alpha = best_score

    state.table.store(key, depth, best_score, EXACT, best_move)
    return best_move, best_score


class Engine:
    """
    Draughts engine: difficulty policy, opening book, and search.

    One engine runs one search at a time and exclusively owns its
    transposition table; it must not be called concurrently. The opening
    book, if any, is injected fully loaded.

    Args:
        level:        Difficulty 1 (beginner) to 6 (grandmaster); clamped.
        opening_book: Source of book moves, or None to always search.
        max_capture:  Enforce the maximum-capture rule (default True).
        cache_size:   Transposition table capacity.
        rng:          Random source for book-move selection.
        clock:        Monotonic clock in seconds.

    Attributes:
        book_moves_played: Book moves played this game, checked against the
                           level's ceiling. Reset by new_game(); a stateless
                           caller can set it from its own game record.
    """

    def __init__(
        self,
        level: int = 1,
        opening_book: OpeningBookSource | None = None,
        *,
        max_capture: bool = True,
        cache_size: int = TT_MAX_SIZE,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.opening_book = opening_book
        self.max_capture = max_capture
        self.settings: DifficultySettings = settings_for(level)
        self.table = TranspositionTable(cache_size, self.settings.cache_retention_ms, clock)
        self._rng = rng or random.Random()
        self._clock = clock
        self.book_moves_played = 0
        self._last_result: SearchResult | None = None

    # -----------------------------------------------------------------------
    # Move request API
    # -----------------------------------------------------------------------

    def set_difficulty(self, level: int) -> None:
        self.settings = settings_for(level)
        self.table.retention_ms = self.settings.cache_retention_ms

    def new_game(self) -> None:
        """Forget cached positions and reset the book-move counter."""
        self.table.clear()
        self.book_moves_played = 0
        self._last_result = None

    def get_last_evaluation(self) -> SearchResult | None:
        return self._last_result

    async def get_move(self, position: Position, time_limit_ms: float | None = None) -> Move | None:
        """
        Best move for `position`, yielding to the event loop while searching.

        Returns None only when the side to move has no legal move.
        """
        search = self._run(position, time_limit_ms)
        while True:
            try:
                next(search)
            except StopIteration as stop:
                return stop.value.move
            await asyncio.sleep(0)

    def search(self, position: Position, time_limit_ms: float | None = None) -> SearchResult:
        """Blocking variant of get_move that returns the full SearchResult."""
        search = self._run(position, time_limit_ms)
        while True:
            try:
                next(search)
            except StopIteration as stop:
                return stop.value

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _elapsed_ms(self, start: float) -> float:
        return (self._clock() - start) * 1000

    def _book_move(self, position: Position, legal: list[Move]) -> Move | None:
        if self.opening_book is None or self.book_moves_played >= self.settings.book_max_moves:
            return None
        try:
            candidates = self.opening_book.get_opening_moves(position)
        except OpeningBookError as exc:
            _log.warning("opening book unavailable, searching instead: %s", exc)
            return None

        playable = [move for move in candidates if move in legal]
        if len(playable) < len(candidates):
            _log.warning("ignoring %d illegal book move(s)", len(candidates) - len(playable))
        return choose_book_move(playable, self.settings, self._rng)

    def _finish(self, result: SearchResult) -> SearchResult:
        self._last_result = result
        return result

    def _run(self, position: Position, time_limit_ms: float | None) -> Generator[None, None, SearchResult]:
        """
        One full move request: sweep the cache, consult the book, then
        iterative deepening until max depth, the budget, or a forced move.
        """
        start = self._clock()
        self.table.sweep()

        moves = legal_moves(position, self.max_capture)
        if not moves:
            _log.info("no legal moves: side to move has lost")
            return self._finish(SearchResult(None, -WIN_SCORE, 0, self._elapsed_ms(start), 0))

        book_move = self._book_move(position, moves)
        if book_move is not None:
            self.book_moves_played += 1
            _log.info("book move %s (%d/%d)", book_move, self.book_moves_played, self.settings.book_max_moves)
            return self._finish(SearchResult(book_move, 0, 0, self._elapsed_ms(start), 0, from_book=True))

        if time_limit_ms is None:
            budget_ms = self.settings.time_budget_ms(complexity(position, self.max_capture))
        else:
            budget_ms = max(0.0, float(time_limit_ms))

        state = SearchState(
            table=self.table,
            deadline=start + budget_ms / 1000,
            quiescence_depth=self.settings.quiescence_depth,
            max_capture=self.max_capture,
            clock=self._clock,
        )

        best_move: Move | None = None
        best_score = DRAW_SCORE
        completed_depth = 0

        for depth in range(1, self.settings.max_depth + 1):
            state.enforce_deadline = completed_depth > 0
            move, score = yield from search_root(position, depth, state, best_move)

            if state.timed_out:
                _log.debug("depth %d interrupted after %.0f ms", depth, self._elapsed_ms(start))
                break

            best_move, best_score, completed_depth = move, score, depth
            _log.debug(
                "depth %d: best=%s score=%d nodes=%d", depth, best_move, best_score, state.node_count
            )

            if len(moves) == 1:
                break
            if self._elapsed_ms(start) >= budget_ms * TIME_USAGE_FRACTION:
                break

        result = SearchResult(
            move=best_move,
            score=best_score,
            nodes=state.node_count,
            elapsed_ms=self._elapsed_ms(start),
            depth=completed_depth,
            timed_out=state.timed_out,
        )
        _log.info(
            "move=%s score=%d depth=%d nodes=%d time=%.0fms level=%s",
            result.move,
            result.score,
            result.depth,
            result.nodes,
            result.elapsed_ms,
            self.settings.name,
        )
        return self._finish(result)
