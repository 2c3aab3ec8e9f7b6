"""
FastAPI web application for the draughts engine.

Exposes two REST endpoints:

- POST /api/move: accepts a position (FEN string or piece-code grid plus side
  to move) and a difficulty level, runs the engine, and returns the chosen
  move with score and search statistics.
- POST /api/legal-moves: returns the legal moves of a position, so a UI can
  validate drag-and-drop input without duplicating the rules.

Architecture notes:
- Sync endpoints (not async): FastAPI runs sync handlers in a thread pool,
  which is the correct pattern for CPU-bound blocking calls like a search.
- Stateless per request: the client sends the full position each time, plus
  the earlier positions of the game when it wants repetition draws detected.
  A fresh Engine is built per request, since an engine must never be shared
  by concurrent searches, so the client also reports how many book moves the
  engine has already played for the book ceiling to apply.
- The opening book is loaded once at import from DRAUGHTS_OPENING_BOOK (a
  JSON file path). A missing or broken book is logged and ignored.
"""

import logging
import os

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, field_validator, model_validator

from draughts.board import MalformedPositionError, Move, Position
from draughts.constants import BLACK, MAX_LEVEL, MIN_LEVEL, ONGOING, WHITE
from draughts.difficulty import clamp_level, settings_for
from draughts.movegen import game_result, legal_moves
from draughts.notation import move_to_notation, position_from_fen, position_to_fen
from draughts.opening_book import OpeningBook, OpeningBookError
from draughts.search import Engine

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

OPENING_BOOK_ENV = "DRAUGHTS_OPENING_BOOK"


def _load_opening_book() -> OpeningBook | None:
    path = os.environ.get(OPENING_BOOK_ENV)
    if not path:
        return None
    try:
        return OpeningBook.from_json(path)
    except OpeningBookError as exc:
        _log.warning("running without opening book: %s", exc)
        return None


_OPENING_BOOK = _load_opening_book()

app = FastAPI(title="Draughts AI", version="1.0.0")


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class PositionRequest(BaseModel):
    """
    A position in either exchange format.

    Fields:
        fen:  FEN string such as "W:W31-50:B1-20". Takes precedence.
        grid: 10x10 grid of piece codes (0 empty, 1 white man, 2 black man,
              3 white king, 4 black king).
        turn: Side to move for `grid`: 0 white, 1 black.
        max_capture: Enforce the maximum-capture rule.
        history: FEN strings of the earlier positions of the game, oldest
                 first. Used only to detect draws by repetition.
    """

    fen: str | None = None
    grid: list[list[int]] | None = None
    turn: int = WHITE
    max_capture: bool = True
    history: list[str] = []

    @model_validator(mode="after")
    def require_position(self) -> "PositionRequest":
        """At least one position source must be given."""
        if self.fen is None and self.grid is None:
            raise ValueError("either fen or grid is required")
        return self

    @field_validator("turn")
    @classmethod
    def check_turn(cls, v: int) -> int:
        if v not in (WHITE, BLACK):
            raise ValueError("turn must be 0 (white) or 1 (black)")
        return v

    def to_position(self) -> Position:
        if self.fen is not None:
            return position_from_fen(self.fen)
        return Position.from_grid(self.grid, self.turn)

    def to_history(self) -> list[Position]:
        return [position_from_fen(fen) for fen in self.history]


class MoveRequest(PositionRequest):
    """
    Client request to the engine.

    Fields:
        level: Difficulty 1-6, clamped.
        time_limit: Optional override of the level's thinking time, in
                    seconds (clamped to [0.1, 30.0]).
        book_moves_played: Book moves the engine has already played this
                           game (responses with from_book set). Once it
                           reaches the level's ceiling the engine searches.
    """

    level: int = 3
    time_limit: float | None = None
    book_moves_played: int = 0

    @field_validator("level")
    @classmethod
    def check_level(cls, v: int) -> int:
        """Clamp level to the supported range."""
        return clamp_level(v)

    @field_validator("time_limit")
    @classmethod
    def clamp_time_limit(cls, v: float | None) -> float | None:
        """Clamp time_limit to a safe operating range."""
        if v is None:
            return None
        return max(0.1, min(v, 30.0))

    @field_validator("book_moves_played")
    @classmethod
    def check_book_moves_played(cls, v: int) -> int:
        return max(0, v)


class MoveModel(BaseModel):
    notation: str
    start: tuple[int, int]
    end: tuple[int, int]
    captures: list[tuple[int, int]]

    @classmethod
    def from_move(cls, move: Move) -> "MoveModel":
        return cls(
            notation=move_to_notation(move),
            start=move.start,
            end=move.end,
            captures=list(move.captures),
        )


class MoveResponse(BaseModel):
    """
    Engine response after computing the best move.

    Fields:
        move: The chosen move.
        fen: Position FEN after the move is applied.
        score: Evaluation from the engine's perspective (positive = ahead).
        depth: Deepest completed iteration (0 for book moves).
        nodes: Nodes searched.
        elapsed_ms: Search time in milliseconds.
        from_book: The move came from the opening book.
    """

    move: MoveModel
    fen: str
    score: int
    depth: int
    nodes: int
    elapsed_ms: float
    from_book: bool


class LegalMovesResponse(BaseModel):
    fen: str
    result: str
    moves: list[MoveModel]


# ---------------------------------------------------------------------------
# API routes
# ---------------------------------------------------------------------------


def _parse_position(request: PositionRequest) -> Position:
    try:
        return request.to_position()
    except MalformedPositionError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid position: {exc}") from exc


def _game_result(request: PositionRequest, position: Position) -> str:
    try:
        history = request.to_history()
    except MalformedPositionError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid history: {exc}") from exc
    return game_result(position, history)


@app.post("/api/legal-moves", response_model=LegalMovesResponse)
def api_legal_moves(request: PositionRequest) -> LegalMovesResponse:
    """List the legal moves and the game result of a position."""
    position = _parse_position(request)
    return LegalMovesResponse(
        fen=position_to_fen(position),
        result=_game_result(request, position),
        moves=[MoveModel.from_move(m) for m in legal_moves(position, request.max_capture)],
    )


@app.post("/api/move", response_model=MoveResponse)
def api_move(request: MoveRequest) -> MoveResponse:
    """
    Compute the engine's best move for the given position.

    Raises:
        HTTPException 400: Malformed position or history, or game already
                           over.
        HTTPException 500: Engine failure or no move returned (should not
                           happen in non-terminal positions).
    """
    position = _parse_position(request)

    result = _game_result(request, position)
    if result != ONGOING:
        raise HTTPException(status_code=400, detail=f"Game is already over: {result}")

    engine = Engine(request.level, _OPENING_BOOK, max_capture=request.max_capture)
    engine.book_moves_played = request.book_moves_played
    time_limit_ms = None if request.time_limit is None else request.time_limit * 1000

    try:
        search = engine.search(position, time_limit_ms)
    except Exception as exc:
        _log.exception("Engine search failed for position=%s", position_to_fen(position))
        raise HTTPException(status_code=500, detail=f"Engine error: {exc}") from exc

    if search.move is None:
        raise HTTPException(status_code=500, detail="Engine returned no move")

    _log.info(
        "Move=%s score=%d depth=%d nodes=%d level=%d",
        move_to_notation(search.move),
        search.score,
        search.depth,
        search.nodes,
        request.level,
    )

    return MoveResponse(
        move=MoveModel.from_move(search.move),
        fen=position_to_fen(position.apply_move(search.move)),
        score=search.score,
        depth=search.depth,
        nodes=search.nodes,
        elapsed_ms=search.elapsed_ms,
        from_book=search.from_book,
    )


@app.get("/api/levels")
def api_levels() -> dict[int, str]:
    """Difficulty levels the engine accepts."""
    return {level: settings_for(level).name for level in range(MIN_LEVEL, MAX_LEVEL + 1)}
