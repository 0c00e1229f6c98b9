"""Tests for round lifecycle, intent dispatch and the read model."""

import random
import unittest
from dataclasses import replace

from tilemath.games.tile_puzzle.logic import (
    INTENTS,
    Paren,
    PuzzleState,
    RoundRules,
    RoundStatus,
    RoundTimer,
    dispatch,
    fresh_pool,
    new_round,
    read_model,
)


class TestNewRound(unittest.TestCase):

    def test_fresh_round(self) -> None:
        state = new_round(rng=random.Random(3))
        self.assertTrue(4 <= len(state.cells) <= 6)
        self.assertEqual(len(state.pool), 18)
        self.assertEqual(state.selection, ())
        self.assertEqual(dict(state.operators), {})
        self.assertEqual(state.parens, ())
        self.assertIs(state.status, RoundStatus.IN_PROGRESS)
        self.assertEqual(state.timer, RoundTimer.started(60))
        self.assertEqual(state.round_no, 1)
        self.assertEqual(state.score, 0)

    def test_score_carries_everything_else_resets(self) -> None:
        played = PuzzleState(
            cells=(12, 3),
            pool=("+",),
            selection=("(",),
            operators={0: "X"},
            parens=(Paren(0, "("),),
            status=RoundStatus.SOLVED,
            score=13,
            timer=RoundTimer.started(40).stop(),
            round_no=4,
            last_result=36.0,
            last_award=13,
        )
        state = new_round(played, rng=random.Random(1))
        self.assertEqual(state.score, 13)
        self.assertEqual(state.round_no, 5)
        self.assertEqual(dict(state.operators), {})
        self.assertEqual(state.parens, ())
        self.assertEqual(state.selection, ())
        self.assertIs(state.status, RoundStatus.IN_PROGRESS)
        self.assertTrue(state.timer.running)
        self.assertEqual(state.timer.remaining, 60)
        self.assertIsNone(state.last_result)

    def test_rules_shape_the_round(self) -> None:
        rules = RoundRules(round_seconds=30, board_min=5, board_max=5, pool_copies=1)
        state = new_round(rules=rules, rng=random.Random(0))
        self.assertEqual(len(state.cells), 5)
        self.assertEqual(len(state.pool), 6)
        self.assertEqual(state.timer.remaining, 30)


class TestRoundRules(unittest.TestCase):

    def test_from_config(self) -> None:
        rules = RoundRules.from_config({"TILE_ROUND_SECONDS": 45, "TILE_BOARD_MIN": 5})
        self.assertEqual(rules.round_seconds, 45)
        self.assertEqual(rules.board_min, 5)
        self.assertEqual(rules.board_max, 6)

    def test_bad_board_range(self) -> None:
        with self.assertRaises(ValueError):
            RoundRules.from_config({"TILE_BOARD_MIN": 6, "TILE_BOARD_MAX": 4})

    def test_round_must_have_time(self) -> None:
        for seconds in (0, -5):
            with self.assertRaises(ValueError):
                RoundRules.from_config({"TILE_ROUND_SECONDS": seconds})

    def test_negative_pool_copies(self) -> None:
        with self.assertRaises(ValueError):
            RoundRules.from_config({"TILE_POOL_COPIES": -1})
        self.assertEqual(RoundRules.from_config({"TILE_POOL_COPIES": 0}).pool_copies, 0)


class TestPuzzleState(unittest.TestCase):

    def test_hashable(self) -> None:
        state = PuzzleState(cells=(3, 7, 2), operators={1: "X"})
        same = PuzzleState(cells=(3, 7, 2), operators={1: "X"})
        self.assertEqual(state, same)
        self.assertEqual(hash(state), hash(same))
        self.assertEqual(len({state, same}), 1)

    def test_operators_differ_in_equality(self) -> None:
        self.assertNotEqual(
            PuzzleState(cells=(3, 7, 2), operators={1: "X"}),
            PuzzleState(cells=(3, 7, 2), operators={1: "%"}),
        )

    def test_operators_are_read_only(self) -> None:
        source = {0: "+"}
        state = PuzzleState(cells=(3, 7, 2), pool=fresh_pool(), operators=source)
        source[1] = "X"
        self.assertEqual(dict(state.operators), {0: "+"})
        with self.assertRaises(TypeError):
            state.operators[0] = "X"

        placed = dispatch(dispatch(state, "select", tile="^"), "place", index=1)
        self.assertEqual(dict(placed.operators), {0: "+", 1: "^"})
        with self.assertRaises(TypeError):
            placed.operators[1] = "X"
        with self.assertRaises(TypeError):
            replace(placed, operators={}).operators[0] = "X"
        hash(placed)


class TestDispatch(unittest.TestCase):

    def setUp(self) -> None:
        self.state = PuzzleState(cells=(2, 3), pool=fresh_pool(), timer=RoundTimer.started())

    def test_known_intents(self) -> None:
        self.assertEqual(set(INTENTS), {"new_round", "select", "place", "merge", "validate", "tick"})

    def test_select_place_validate(self) -> None:
        state = dispatch(self.state, "select", tile="X")
        state = dispatch(state, "place", index=0)
        state = dispatch(state, "validate")
        self.assertIs(state.status, RoundStatus.SOLVED)
        self.assertEqual(state.last_result, 6.0)
        self.assertEqual(state.score, 2 + 12)

    def test_merge_then_validate(self) -> None:
        state = replace(self.state, cells=(3, 7, 2), operators={0: "X"}, parens=(Paren(1, ")"),))
        state = dispatch(state, "merge", gap=0)
        self.assertEqual(state.cells, (37, 2))
        state = dispatch(state, "validate")
        self.assertEqual(state.last_result, 39.0)

    def test_tick(self) -> None:
        self.assertEqual(dispatch(self.state, "tick").timer.remaining, 59)

    def test_new_round_keeps_score(self) -> None:
        state = dispatch(replace(self.state, score=9), "new_round", rng=random.Random(2))
        self.assertEqual(state.score, 9)
        self.assertEqual(state.round_no, 1)

    def test_unknown_intent(self) -> None:
        with self.assertRaises(KeyError):
            dispatch(self.state, "shuffle")

    def test_inputs_are_never_mutated(self) -> None:
        before = replace(self.state, operators={0: "-"})
        ops_before = dict(before.operators)
        dispatch(dispatch(before, "select", tile="X"), "place", index=0)
        dispatch(before, "merge", gap=0)
        self.assertEqual(dict(before.operators), ops_before)
        self.assertEqual(before.pool, fresh_pool())


class TestReadModel(unittest.TestCase):

    def test_view(self) -> None:
        state = PuzzleState(
            cells=(1, 2, 3),
            pool=("+", "X"),
            selection=(")",),
            operators={1: "½"},
            parens=(Paren(0, "("), Paren(0, "("), Paren(2, ")")),
            timer=RoundTimer.started(),
            round_no=2,
        )
        view = read_model(state)
        self.assertEqual(view["status"], "in-progress")
        self.assertEqual(view["round"], 2)
        self.assertEqual([c["value"] for c in view["cells"]], [1, 2, 3])
        self.assertEqual(view["cells"][0]["open"], 2)
        self.assertEqual(view["cells"][2]["close"], 1)
        self.assertEqual(view["gaps"][0], {"index": 0, "operator": "+", "display": "+", "placed": False})
        self.assertEqual(view["gaps"][1], {"index": 1, "operator": "½", "display": "1/2", "placed": True})
        self.assertEqual(view["pool"], ["+", "X"])
        self.assertEqual(view["pool_counts"]["X"], 1)
        self.assertEqual(view["pool_counts"]["^"], 0)
        self.assertEqual(view["selection"], [")"])
        self.assertEqual(view["expression"], "((1+2½3)")
        self.assertEqual(view["equation_score"], 4)
        self.assertEqual(view["time_remaining"], 60)
        self.assertEqual(view["timer"], "running")
        self.assertTrue(view["can_validate"])


if __name__ == "__main__":
    unittest.main()
