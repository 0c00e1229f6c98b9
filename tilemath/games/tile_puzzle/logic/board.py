# tilemath/games/tile_puzzle/logic/board.py
from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Optional, Tuple

from .state import Paren, PuzzleState

logger = logging.getLogger(__name__)


def deal_cells(rng: Optional[random.Random] = None, min_len: int = 4, max_len: int = 6) -> Tuple[int, ...]:
    """A fresh board: between min_len and max_len single digits 1..9."""
    rng = rng or random.Random()
    length = rng.randint(min_len, max_len)
    return tuple(rng.randint(1, 9) for _ in range(length))


def concat_digits(left: int, right: int) -> int:
    """3, 7 -> 37 ; 37, 2 -> 372"""
    return int(f"{int(left)}{int(right)}")


def merge_cells(state: PuzzleState, gap: int) -> PuzzleState:
    """
    Concatenate cell ``gap`` with cell ``gap + 1``.

    The operator sitting in the merged gap is discarded (it does not go back
    to the pool) and operators to the right move one gap left. Parentheses on
    the swallowed cell are dropped, those further right shift down by one.
    Out-of-range gaps leave the state untouched.
    """
    if not state.is_gap(gap):
        logger.debug("merge_cells ignored gap=%s (gaps=%s)", gap, state.gap_count)
        return state

    cells = list(state.cells)
    cells[gap] = concat_digits(cells[gap], cells[gap + 1])
    del cells[gap + 1]

    operators = {}
    for idx, op in state.operators.items():
        if idx < gap:
            operators[idx] = op
        elif idx > gap:
            operators[idx - 1] = op

    removed = gap + 1
    parens = tuple(
        Paren(p.index - 1 if p.index > removed else p.index, p.kind)
        for p in state.parens
        if p.index != removed
    )

    logger.debug("merge_cells gap=%s -> %s", gap, cells)
    return replace(state, cells=tuple(cells), operators=operators, parens=parens)
