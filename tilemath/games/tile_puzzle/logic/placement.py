# tilemath/games/tile_puzzle/logic/placement.py
from __future__ import annotations

import logging
from dataclasses import replace

from .state import Paren, PuzzleState, is_paren

logger = logging.getLogger(__name__)


def place_tile(state: PuzzleState, index: int) -> PuzzleState:
    """
    Put the head of the selection queue on the board.

    A parenthesis attaches to cell ``index`` and stacks with any already
    there. An operator takes gap ``index``; whatever was there is gone for
    good. The pool is not touched: tiles leave it once, when picked up.
    """
    if not state.selection:
        return state

    tile, rest = state.selection[0], state.selection[1:]

    if is_paren(tile):
        if not state.is_cell(index):
            logger.debug("place_tile ignored %r at cell %s", tile, index)
            return state
        return replace(state, parens=state.parens + (Paren(index, tile),), selection=rest)

    if not state.is_gap(index):
        logger.debug("place_tile ignored %r at gap %s", tile, index)
        return state

    operators = state.operators_dict()
    replaced = operators.get(index)
    operators[index] = tile
    if replaced:
        logger.debug("place_tile %r overwrote %r at gap %s", tile, replaced, index)
    return replace(state, operators=operators, selection=rest)
