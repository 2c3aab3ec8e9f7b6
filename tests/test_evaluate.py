#!/usr/bin/env python3

import os
import random
import sys
import unittest

# Add the parent directory to the path to import draughts
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from draughts.board import Position
from draughts.constants import (
    BLACK,
    BLACK_KING,
    BLACK_MAN,
    COMPLEXITY_CAP,
    WHITE,
    WHITE_KING,
    WHITE_MAN,
)
from draughts.evaluate import complexity, evaluate
from draughts.movegen import legal_moves


class TestEvaluate(unittest.TestCase):

    def test_initial_position_is_balanced(self):
        initial = Position.initial()
        self.assertEqual(evaluate(initial), 0)
        self.assertEqual(evaluate(initial.with_turn(BLACK)), 0)

    def test_score_is_from_side_to_move(self):
        # man in the promotion zone: 100 material + 15
        position = Position.from_pieces({(2, 3): WHITE_MAN})
        self.assertEqual(evaluate(position), 115)
        self.assertEqual(evaluate(position.with_turn(BLACK)), -115)

    def test_black_bonuses_mirror_white(self):
        white = Position.from_pieces({(2, 3): WHITE_MAN})
        black = Position.from_pieces({(7, 6): BLACK_MAN}, BLACK)
        self.assertEqual(evaluate(white), evaluate(black))

    def test_king_outweighs_man(self):
        man = Position.from_pieces({(5, 4): WHITE_MAN, (0, 1): BLACK_MAN})
        king = Position.from_pieces({(5, 4): WHITE_KING, (0, 1): BLACK_MAN})
        self.assertGreater(evaluate(king), evaluate(man))
        self.assertGreater(evaluate(man), 0)

    def test_negation_symmetry_on_played_positions(self):
        rng = random.Random(7)
        position = Position.initial()
        for _ in range(40):
            moves = legal_moves(position)
            if not moves:
                break
            position = position.apply_move(rng.choice(moves))
            flipped = position.with_turn(WHITE if position.turn == BLACK else BLACK)
            self.assertEqual(evaluate(position), -evaluate(flipped))


class TestComplexity(unittest.TestCase):

    def test_quiet_opening(self):
        self.assertAlmostEqual(complexity(Position.initial()), 1.0)

    def test_endgame(self):
        position = Position.from_pieces({(5, 4): WHITE_KING, (0, 1): BLACK_KING})
        self.assertAlmostEqual(complexity(position), 1.3)

    def test_capped(self):
        # Three kings, each with a capture on offer, in a sparse endgame.
        position = Position.from_pieces(
            {
                (5, 4): WHITE_KING,
                (4, 5): BLACK_MAN,
                (5, 0): WHITE_KING,
                (4, 1): BLACK_MAN,
                (9, 6): WHITE_KING,
                (8, 7): BLACK_MAN,
            }
        )
        self.assertLessEqual(complexity(position), COMPLEXITY_CAP)
        self.assertAlmostEqual(complexity(position), 1.5)

    def test_follows_capture_rule(self):
        # One triple capture and two single captures. Under the maximum
        # capture rule only the triple is legal; without it all three count.
        position = Position.from_pieces(
            {
                (8, 1): WHITE_MAN,
                (7, 2): BLACK_MAN,
                (5, 4): BLACK_MAN,
                (3, 6): BLACK_MAN,
                (9, 8): WHITE_MAN,
                (8, 7): BLACK_MAN,
                (9, 4): WHITE_MAN,
                (8, 5): BLACK_MAN,
            }
        )
        self.assertAlmostEqual(complexity(position), 1.3)
        self.assertAlmostEqual(complexity(position, max_capture=True), 1.3)
        self.assertAlmostEqual(complexity(position, max_capture=False), 1.5)


if __name__ == "__main__":
    unittest.main()
