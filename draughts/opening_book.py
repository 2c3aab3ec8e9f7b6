"""
Opening-book sources.

The engine depends only on the `OpeningBookSource` protocol: anything with a
`get_opening_moves(position)` method returning a (possibly empty) list of
moves, best first. The book is injected when the engine is constructed and
must be fully loaded by then; there is no lazy loading on first use.

`OpeningBook` is the in-memory implementation, keyed by `Position.key`. It can
be populated programmatically or loaded from a JSON file of the form::

    {
      "openings": [
        {"fen": "W:W31-50:B1-20", "moves": ["32-28", "33-28"], "evaluation": 0.1}
      ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Protocol

from draughts.board import IllegalMoveError, MalformedPositionError, Move, Position
from draughts.notation import parse_move, position_from_fen

_log = logging.getLogger(__name__)


class OpeningBookError(Exception):
    """Raised when an opening book file cannot be read or parsed."""


class OpeningBookSource(Protocol):
    def get_opening_moves(self, position: Position) -> list[Move]:
        ...


class OpeningBook:
    """In-memory opening book mapping positions to candidate moves."""

    def __init__(self) -> None:
        self._moves: dict[bytes, list[Move]] = {}
        self._evaluations: dict[bytes, float] = {}

    def __len__(self) -> int:
        return len(self._moves)

    def add(self, position: Position, moves: Iterable[Move], evaluation: float | None = None) -> None:
        """Append candidate moves for `position`, keeping existing ones first."""
        entry = self._moves.setdefault(position.key, [])
        entry.extend(move for move in moves if move not in entry)
        if evaluation is not None:
            self._evaluations[position.key] = evaluation

    def get_opening_moves(self, position: Position) -> list[Move]:
        return list(self._moves.get(position.key, ()))

    def get_evaluation(self, position: Position) -> float | None:
        return self._evaluations.get(position.key)

    @classmethod
    def from_json(cls, path: str | Path) -> "OpeningBook":
        """
        Load a book from a JSON file.

        Moves are written in square notation and resolved against the legal
        moves of the entry's position, so an entry can never smuggle in an
        illegal move.

        Raises:
            OpeningBookError: the file is missing, is not valid JSON, or an
                entry has a bad FEN or an illegal move.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise OpeningBookError(f"opening book file not found: {path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise OpeningBookError(f"error reading opening book {path}: {exc}") from exc

        book = cls()
        openings = data.get("openings", []) if isinstance(data, dict) else data
        for index, opening in enumerate(openings):
            try:
                position = position_from_fen(opening["fen"])
                moves = [parse_move(position, text) for text in opening.get("moves", [])]
            except (KeyError, TypeError, MalformedPositionError, IllegalMoveError) as exc:
                raise OpeningBookError(f"opening #{index}: {exc}") from exc
            book.add(position, moves, opening.get("evaluation"))

        _log.info("loaded opening book %s with %d positions", path, len(book))
        return book
