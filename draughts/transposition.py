"""
Transposition table: a bounded position -> search result cache.

The same position is often reached through different move orders; caching
the result of a previous search lets the engine skip the whole subtree. Each
entry records how deep the subtree was searched and whether the stored score
is exact or only a bound, so a hit is only used when it is valid for the
caller's depth and alpha-beta window.

Eviction is deliberately simple:

- capacity pressure evicts the oldest *inserted* entry (FIFO, not LRU);
  Python dicts keep insertion order, so this is O(1);
- entries older than the retention time are treated as absent and dropped
  when touched, and `sweep()` drops all of them once per move request.

A retention time of zero disables the table entirely.

Win and loss scores count plies from the root. They are stored as plies from
the node instead, and converted back for the ply of the probing node, so a
hit reached by a shorter or longer path reports the right distance.
"""

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable

from draughts.board import Move
from draughts.constants import EXACT, LOWER_BOUND, TT_MAX_SIZE, UPPER_BOUND, WIN_THRESHOLD

_log = logging.getLogger(__name__)


def score_to_table(score: int, ply: int) -> int:
    if score >= WIN_THRESHOLD:
        return score + ply
    if score <= -WIN_THRESHOLD:
        return score - ply
    return score


def score_from_table(score: int, ply: int) -> int:
    if score >= WIN_THRESHOLD:
        return score - ply
    if score <= -WIN_THRESHOLD:
        return score + ply
    return score


@dataclass(frozen=True)
class TTEntry:
    depth: int
    score: int
    bound: int
    best_move: Move | None
    created_ms: float


class TranspositionTable:
    """
    FIFO-evicted transposition table with time-based retention.

    Attributes:
        max_size:     Maximum number of entries.
        retention_ms: Age in milliseconds after which an entry is stale.
                      Zero disables storing and lookups.
        hits/misses:  Diagnostic counters; they never affect results.
    """

    def __init__(
        self,
        max_size: int = TT_MAX_SIZE,
        retention_ms: float = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_size = max_size
        self.retention_ms = retention_ms
        self.hits = 0
        self.misses = 0
        self._clock = clock
        self._table: dict[bytes, TTEntry] = {}

    def __len__(self) -> int:
        return len(self._table)

    @property
    def enabled(self) -> bool:
        return self.retention_ms > 0 and self.max_size > 0

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _is_stale(self, entry: TTEntry, now_ms: float) -> bool:
        return now_ms - entry.created_ms > self.retention_ms

    def _fresh_entry(self, key: bytes) -> TTEntry | None:
        entry = self._table.get(key)
        if entry is None:
            return None
        if self._is_stale(entry, self._now_ms()):
            del self._table[key]
            return None
        return entry

    def lookup(self, key: bytes, depth: int, alpha: int, beta: int, ply: int = 0) -> TTEntry | None:
        """
        Return a cached entry usable at `depth` inside the (alpha, beta) window.

        An entry is usable when it was searched at least `depth` plies deep
        and either its score is exact, or it is a lower bound that already
        fails high (score >= beta), or an upper bound that already fails low
        (score <= alpha). Anything else, including a stale entry, is a miss.

        The returned entry carries its score as seen from `ply`.
        """
        if not self.enabled:
            return None

        entry = self._fresh_entry(key)
        if entry is None:
            self.misses += 1
            return None

        if entry.depth >= depth:
            entry = replace(entry, score=score_from_table(entry.score, ply))
            if entry.bound == EXACT:
                self.hits += 1
                return entry
            if entry.bound == LOWER_BOUND and entry.score >= beta:
                self.hits += 1
                return entry
            if entry.bound == UPPER_BOUND and entry.score <= alpha:
                self.hits += 1
                return entry

        self.misses += 1
        return None

    def best_move(self, key: bytes) -> Move | None:
        """Stored best move for move ordering, regardless of depth or bound."""
        if not self.enabled:
            return None
        entry = self._fresh_entry(key)
        return entry.best_move if entry is not None else None

    def store(
        self,
        key: bytes,
        depth: int,
        score: int,
        bound: int,
        best_move: Move | None = None,
        ply: int = 0,
    ) -> None:
        """
        Insert or overwrite the entry for `key`, evicting FIFO when full.

        `score` is relative to the root and `ply` is the node's distance from
        it; win and loss scores are rebased onto the node before storing.
        """
        if not self.enabled:
            return
        if key not in self._table and len(self._table) >= self.max_size:
            del self._table[next(iter(self._table))]
        self._table[key] = TTEntry(depth, score_to_table(score, ply), bound, best_move, self._now_ms())

    def sweep(self) -> int:
        """Drop every stale entry and return how many were removed."""
        if not self._table:
            return 0
        if not self.enabled:
            removed = len(self._table)
            self._table.clear()
            return removed

        now_ms = self._now_ms()
        stale = [key for key, entry in self._table.items() if self._is_stale(entry, now_ms)]
        for key in stale:
            del self._table[key]
        if stale:
            _log.debug("tt sweep removed %d stale entries (%d left)", len(stale), len(self._table))
        return len(stale)

    def clear(self) -> None:
        self._table.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict[str, float]:
        total = self.hits + self.misses
        return {
            "size": len(self._table),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / total if total else 0.0,
        }
