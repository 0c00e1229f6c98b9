# tilemath/games/tile_puzzle/logic/tiles.py
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from typing import Dict, Tuple

from tilemath.games.core.expression_utils import OPERATORS
from .state import PuzzleState, is_operator, is_paren

logger = logging.getLogger(__name__)


def fresh_pool(copies: int = 3) -> Tuple[str, ...]:
    """``copies`` full operator sets, in tile-rack order."""
    return tuple(OPERATORS) * copies


def pool_counts(pool: Tuple[str, ...]) -> Dict[str, int]:
    counts = Counter(pool)
    return {op: counts.get(op, 0) for op in OPERATORS}


def select_tile(state: PuzzleState, symbol: str) -> PuzzleState:
    """
    Pick a tile up into the selection queue.

    Parentheses are unlimited. An operator is taken out of the pool right
    here, one copy, so a picked-up tile is reserved before it is placed.
    Operators no longer in the pool are ignored.
    """
    if is_paren(symbol):
        return replace(state, selection=state.selection + (symbol,))

    if not is_operator(symbol) or symbol not in state.pool:
        logger.debug("select_tile ignored %r (pool=%s)", symbol, pool_counts(state.pool))
        return state

    pool = list(state.pool)
    pool.remove(symbol)
    return replace(state, pool=tuple(pool), selection=state.selection + (symbol,))
