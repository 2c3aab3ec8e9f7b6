"""
Difficulty policy: maps a level (1-6) to search parameters and decides
whether an opening-book move replaces the search.
"""

import random
from dataclasses import dataclass

from draughts.board import Move
from draughts.constants import (
    BOOK_MAX_MOVES,
    BOOK_RANDOMIZATION,
    CACHE_RETENTION_MS,
    COMPLEX_POSITION_MULTIPLIER,
    LEVEL_NAMES,
    MAX_DEPTH,
    MAX_LEVEL,
    MIN_LEVEL,
    QUIESCENCE_DEPTH,
    TIME_ALLOCATION_MS,
)


@dataclass(frozen=True)
class DifficultySettings:
    level: int
    name: str
    max_depth: int
    quiescence_depth: int
    cache_retention_ms: int
    base_time_ms: int
    complexity_multiplier: float
    book_max_moves: int
    book_randomization: float

    def time_budget_ms(self, complexity: float) -> float:
        """Thinking time for a position of the given complexity factor."""
        return self.base_time_ms * self.complexity_multiplier * complexity


def clamp_level(level: int) -> int:
    return min(max(MIN_LEVEL, int(level)), MAX_LEVEL)


def settings_for(level: int) -> DifficultySettings:
    """Search parameters for `level`; out-of-range levels are clamped to 1..6."""
    level = clamp_level(level)
    return DifficultySettings(
        level=level,
        name=LEVEL_NAMES[level],
        max_depth=MAX_DEPTH[level],
        quiescence_depth=QUIESCENCE_DEPTH[level],
        cache_retention_ms=CACHE_RETENTION_MS[level],
        base_time_ms=TIME_ALLOCATION_MS[level],
        complexity_multiplier=COMPLEX_POSITION_MULTIPLIER[level],
        book_max_moves=BOOK_MAX_MOVES[level],
        book_randomization=BOOK_RANDOMIZATION[level],
    )


def choose_book_move(
    candidates: list[Move],
    settings: DifficultySettings,
    rng: random.Random,
) -> Move | None:
    """
    Pick one book candidate.

    Candidates are assumed to be listed best first. With probability
    `book_randomization` a uniformly random candidate is played instead of
    the first one, so weaker levels vary their openings more.
    """
    if not candidates:
        return None
    if rng.random() < settings.book_randomization:
        return rng.choice(candidates)
    return candidates[0]
