"""Tests for placing selected tiles on the board."""

import unittest

from tilemath.games.tile_puzzle.logic.placement import place_tile
from tilemath.games.tile_puzzle.logic.state import Paren, PuzzleState
from tilemath.games.tile_puzzle.logic.tiles import fresh_pool, pool_counts, select_tile


class TestPlaceTile(unittest.TestCase):

    def setUp(self) -> None:
        self.state = PuzzleState(cells=(3, 7, 2), pool=fresh_pool())

    def test_empty_selection_is_noop(self) -> None:
        self.assertIs(place_tile(self.state, 0), self.state)

    def test_operator_fills_gap(self) -> None:
        state = place_tile(select_tile(self.state, "X"), 1)
        self.assertEqual(dict(state.operators), {1: "X"})
        self.assertEqual(state.selection, ())

    def test_overwrite_discards_previous_tile(self) -> None:
        state = place_tile(select_tile(self.state, "X"), 0)
        state = place_tile(select_tile(state, "-"), 0)
        self.assertEqual(dict(state.operators), {0: "-"})
        counts = pool_counts(state.pool)
        self.assertEqual(counts["X"], 2)
        self.assertEqual(counts["-"], 2)

    def test_pool_drops_exactly_once_for_every_operator(self) -> None:
        for op in ("+", "-", "X", "%", "^", "½"):
            state = place_tile(select_tile(self.state, op), 0)
            self.assertEqual(pool_counts(state.pool)[op], 2, op)
            self.assertEqual(len(state.pool), 17, op)

    def test_parens_stack_on_one_cell(self) -> None:
        state = select_tile(select_tile(self.state, "("), "(")
        state = place_tile(state, 0)
        state = place_tile(state, 0)
        self.assertEqual(state.parens, (Paren(0, "("), Paren(0, "(")))
        self.assertEqual(state.parens_at(0, "("), 2)
        self.assertEqual(state.selection, ())

    def test_close_paren_on_last_cell(self) -> None:
        state = place_tile(select_tile(self.state, ")"), 2)
        self.assertEqual(state.parens, (Paren(2, ")"),))

    def test_head_of_queue_goes_first(self) -> None:
        state = select_tile(select_tile(self.state, "("), "X")
        state = place_tile(state, 1)
        self.assertEqual(state.parens, (Paren(1, "("),))
        self.assertEqual(state.selection, ("X",))
        self.assertEqual(dict(state.operators), {})

    def test_out_of_range_gap_is_ignored(self) -> None:
        picked = select_tile(self.state, "X")
        self.assertIs(place_tile(picked, 2), picked)
        self.assertIs(place_tile(picked, -1), picked)

    def test_out_of_range_cell_is_ignored(self) -> None:
        picked = select_tile(self.state, ")")
        self.assertIs(place_tile(picked, 3), picked)


if __name__ == "__main__":
    unittest.main()
