#!/usr/bin/env python3

import os
import sys
import unittest

# Add the parent directory to the path to import draughts
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from draughts.board import IllegalMoveError, MalformedPositionError, Move, Position, is_dark_square
from draughts.constants import BLACK, BLACK_KING, BLACK_MAN, WHITE, WHITE_KING, WHITE_MAN
from draughts.notation import (
    move_to_notation,
    parse_move,
    position_from_fen,
    position_to_fen,
    square_coords,
    square_number,
)


class TestSquareNumbers(unittest.TestCase):

    def test_landmarks(self):
        self.assertEqual(square_coords(1), (0, 1))
        self.assertEqual(square_coords(5), (0, 9))
        self.assertEqual(square_coords(6), (1, 0))
        self.assertEqual(square_coords(46), (9, 0))
        self.assertEqual(square_coords(50), (9, 8))
        self.assertEqual(square_number(6, 3), 32)

    def test_every_dark_square_is_numbered_once(self):
        squares = {square_coords(n) for n in range(1, 51)}
        self.assertEqual(len(squares), 50)
        self.assertTrue(all(is_dark_square(*sq) for sq in squares))
        self.assertTrue(all(square_number(*square_coords(n)) == n for n in range(1, 51)))

    def test_rejects_bad_input(self):
        with self.assertRaises(ValueError):
            square_number(0, 0)
        with self.assertRaises(ValueError):
            square_coords(51)


class TestMoveNotation(unittest.TestCase):

    def setUp(self):
        self.initial = Position.initial()

    def test_move_to_notation(self):
        self.assertEqual(move_to_notation(Move((6, 1), (5, 0))), "31-26")
        self.assertEqual(move_to_notation(Move((5, 4), (3, 6), ((4, 5),))), "28x19")

    def test_parse_move(self):
        self.assertEqual(parse_move(self.initial, "31-26"), Move((6, 1), (5, 0)))
        self.assertEqual(parse_move(self.initial, " 32-28 "), Move((6, 3), (5, 4)))

    def test_parse_capture(self):
        position = Position.from_pieces({(5, 4): WHITE_MAN, (4, 5): BLACK_MAN})
        self.assertEqual(parse_move(position, "28x19"), Move((5, 4), (3, 6), ((4, 5),)))

    def test_parse_rejects_illegal_or_malformed(self):
        for text in ["46-41", "31-22", "abc", "31", "0-5", "31-26-21"]:
            with self.subTest(text):
                with self.assertRaises(IllegalMoveError):
                    parse_move(self.initial, text)


class TestFen(unittest.TestCase):

    def test_initial_fen(self):
        initial = Position.initial()
        self.assertEqual(position_from_fen("W:W31-50:B1-20"), initial)
        self.assertEqual(position_from_fen(position_to_fen(initial)), initial)
        self.assertTrue(position_to_fen(initial).startswith("W:W31,32,"))

    def test_kings_and_side_to_move(self):
        position = position_from_fen("B:WK46,28:B5K,19.")

        self.assertEqual(position.turn, BLACK)
        self.assertEqual(position.piece_at(9, 0), WHITE_KING)
        self.assertEqual(position.piece_at(*square_coords(28)), WHITE_MAN)
        self.assertEqual(position.piece_at(0, 9), BLACK_KING)
        self.assertEqual(position.piece_at(*square_coords(19)), BLACK_MAN)
        self.assertEqual(position_to_fen(position), "B:W28,46K:B5K,19")

    def test_empty_side(self):
        position = position_from_fen("W:W28:B")
        self.assertEqual(position.count(WHITE), 1)
        self.assertEqual(position.count(BLACK), 0)
        self.assertEqual(position_to_fen(position), "W:W28:B")

    def test_bad_fen(self):
        cases = [
            "",
            "X:W1:B2",
            "W:W1",
            "W:W1:B2:B3",
            "W:Wx:B2",
            "W:W51:B1",
            "W:W1:Q2",
            "W:W31:B31",       # same square for both sides
            "W:W31,31:B1",     # same square twice for one side
            "W:W31-35,33:B1",  # square inside a range listed again
            "W:W50-31:B1",     # reversed range
        ]
        for fen in cases:
            with self.subTest(fen):
                with self.assertRaises(MalformedPositionError):
                    position_from_fen(fen)


if __name__ == "__main__":
    unittest.main()
