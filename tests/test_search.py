#!/usr/bin/env python3

import asyncio
import os
import random
import sys
import unittest

# Add the parent directory to the path to import draughts
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from draughts.board import Move, Position
from draughts.constants import (
    BLACK_MAN,
    CACHE_RETENTION_MS,
    INFINITY_SCORE,
    WHITE,
    WHITE_MAN,
    WIN_SCORE,
    YIELD_INTERVAL_NODES,
)
from draughts.difficulty import choose_book_move, settings_for
from draughts.evaluate import evaluate
from draughts.movegen import legal_moves
from draughts.opening_book import OpeningBook, OpeningBookError
from draughts.search import Engine, SearchState, negamax
from draughts.transposition import TranspositionTable

BOOK_MOVE = Move((6, 3), (5, 4))


def drive(gen):
    """Run a search generator to completion; return (value, number of yields)."""
    yields = 0
    while True:
        try:
            next(gen)
        except StopIteration as stop:
            return stop.value, yields
        yields += 1


def terminal_position():
    """White's only man is boxed into the corner: no step, no jump."""
    return Position.from_pieces({(9, 0): WHITE_MAN, (8, 1): BLACK_MAN, (7, 2): BLACK_MAN}, WHITE)


class TestSearchFunctions(unittest.TestCase):
    """negamax driven directly as a generator"""

    def test_terminal_position_scores_as_loss(self):
        state = SearchState(table=TranspositionTable())
        score, _ = drive(negamax(terminal_position(), 3, -INFINITY_SCORE, INFINITY_SCORE, 0, state))
        self.assertEqual(score, -WIN_SCORE)

    def test_depth_zero_is_static_evaluation(self):
        position = Position.from_pieces({(2, 3): WHITE_MAN, (0, 1): BLACK_MAN})
        state = SearchState(table=TranspositionTable(), quiescence_depth=0)
        score, _ = drive(negamax(position, 0, -INFINITY_SCORE, INFINITY_SCORE, 0, state))
        self.assertEqual(score, evaluate(position))

    def test_yields_once_per_node_interval(self):
        state = SearchState(table=TranspositionTable(), quiescence_depth=1)
        _, yields = drive(negamax(Position.initial(), 4, -INFINITY_SCORE, INFINITY_SCORE, 0, state))
        self.assertEqual(yields, state.node_count // YIELD_INTERVAL_NODES)


class TestEngine(unittest.TestCase):
    """Move requests: tactics, time budget, cache and difficulty"""

    def setUp(self):
        self.initial = Position.initial()
        self.legal = legal_moves(self.initial)

    def test_no_move_when_side_to_move_has_lost(self):
        engine = Engine(3)
        result = engine.search(terminal_position())

        self.assertIsNone(result.move)
        self.assertEqual(result.score, -WIN_SCORE)
        self.assertIsNone(asyncio.run(engine.get_move(terminal_position())))

    def test_avoids_hanging_a_piece(self):
        # Stepping to (5, 4) walks into a capture; (5, 2) is safe.
        position = Position.from_pieces({(6, 3): WHITE_MAN, (4, 5): BLACK_MAN})
        result = Engine(1).search(position, time_limit_ms=5_000)

        self.assertEqual(result.move, Move((6, 3), (5, 2)))
        self.assertEqual(result.depth, 2)

    def test_zero_budget_still_returns_a_legal_move(self):
        engine = Engine(6)
        result = engine.search(self.initial, time_limit_ms=0)

        self.assertIn(result.move, self.legal)
        self.assertGreaterEqual(result.depth, 1)
        self.assertIn(asyncio.run(engine.get_move(self.initial, time_limit_ms=0)), self.legal)

    def test_forced_capture_is_played_after_one_iteration(self):
        position = Position.from_pieces({(5, 4): WHITE_MAN, (4, 5): BLACK_MAN, (0, 1): BLACK_MAN})
        result = Engine(4).search(position, time_limit_ms=5_000)

        self.assertEqual(result.move, Move((5, 4), (3, 6), ((4, 5),)))
        self.assertEqual(result.depth, 1)

    def test_get_move_lets_other_tasks_run(self):
        engine = Engine(3)

        async def play():
            ticks = 0
            done = False

            async def ticker():
                nonlocal ticks
                while not done:
                    ticks += 1
                    await asyncio.sleep(0)

            task = asyncio.create_task(ticker())
            move = await engine.get_move(self.initial, time_limit_ms=300)
            done = True
            await task
            return move, ticks

        move, ticks = asyncio.run(play())
        result = engine.get_last_evaluation()

        self.assertIn(move, self.legal)
        self.assertEqual(result.move, move)
        self.assertGreaterEqual(ticks, result.nodes // YIELD_INTERVAL_NODES)

    def test_last_evaluation(self):
        engine = Engine(1)
        self.assertIsNone(engine.get_last_evaluation())

        result = engine.search(self.initial, time_limit_ms=1_000)
        self.assertEqual(engine.get_last_evaluation(), result)
        self.assertGreater(result.nodes, 0)

        engine.new_game()
        self.assertIsNone(engine.get_last_evaluation())

    def test_transposition_table_follows_level(self):
        cached = Engine(3)
        cached.search(self.initial, time_limit_ms=300)
        self.assertGreater(len(cached.table), 0)

        uncached = Engine(1)
        uncached.search(self.initial, time_limit_ms=300)
        self.assertEqual(len(uncached.table), 0)

    def test_set_difficulty_clamps_and_updates_cache(self):
        engine = Engine(3)

        engine.set_difficulty(10)
        self.assertEqual(engine.settings.level, 6)
        self.assertEqual(engine.table.retention_ms, CACHE_RETENTION_MS[6])

        engine.set_difficulty(-3)
        self.assertEqual(engine.settings.level, 1)
        self.assertFalse(engine.table.enabled)


class BrokenBook:
    def get_opening_moves(self, position):
        raise OpeningBookError("book file went away")


class StubRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

    def choice(self, seq):
        return seq[-1]


class TestOpeningBookPolicy(unittest.TestCase):

    def setUp(self):
        self.initial = Position.initial()
        self.book = OpeningBook()
        self.book.add(self.initial, [BOOK_MOVE])

    def test_book_move_replaces_search(self):
        result = Engine(6, self.book, rng=random.Random(0)).search(self.initial)

        self.assertTrue(result.from_book)
        self.assertEqual(result.move, BOOK_MOVE)
        self.assertEqual(result.depth, 0)
        self.assertEqual(result.nodes, 0)

    def test_book_ceiling_is_per_game(self):
        engine = Engine(1, self.book)

        for _ in range(engine.settings.book_max_moves):
            self.assertTrue(engine.search(self.initial).from_book)
        self.assertFalse(engine.search(self.initial, time_limit_ms=500).from_book)

        engine.new_game()
        self.assertTrue(engine.search(self.initial).from_book)

    def test_illegal_book_moves_are_ignored(self):
        book = OpeningBook()
        book.add(self.initial, [Move((5, 0), (4, 1))])
        result = Engine(1, book).search(self.initial, time_limit_ms=500)

        self.assertFalse(result.from_book)
        self.assertIn(result.move, legal_moves(self.initial))

    def test_failing_book_falls_back_to_search(self):
        result = Engine(1, BrokenBook()).search(self.initial, time_limit_ms=500)

        self.assertFalse(result.from_book)
        self.assertIn(result.move, legal_moves(self.initial))

    def test_choose_book_move(self):
        first, second = Move((6, 1), (5, 0)), Move((6, 3), (5, 4))
        settings = settings_for(1)  # randomization 0.8

        self.assertEqual(choose_book_move([first, second], settings, StubRandom(0.9)), first)
        self.assertEqual(choose_book_move([first, second], settings, StubRandom(0.1)), second)
        self.assertIsNone(choose_book_move([], settings, StubRandom(0.1)))


if __name__ == "__main__":
    unittest.main()
