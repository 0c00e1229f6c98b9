# tilemath/games/tile_puzzle/logic/engine.py
"""
Round lifecycle and intent dispatch for the tile puzzle.

Every intent is a pure ``(PuzzleState, ...) -> PuzzleState`` transformer;
callers keep the returned state and render from it.
"""
from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from tilemath.games.core.expression_utils import DEFAULT_OPERATOR, tile_display
from .board import deal_cells, merge_cells
from .evaluator import build_expression, render_expression, validate
from .placement import place_tile
from .state import CLOSE, DEFAULT_RULES, OPEN, PuzzleState, RoundRules, RoundStatus
from .tiles import fresh_pool, pool_counts, select_tile
from .timer import RoundTimer

logger = logging.getLogger(__name__)


def new_round(
    previous: Optional[PuzzleState] = None,
    rules: RoundRules = DEFAULT_RULES,
    rng: Optional[random.Random] = None,
) -> PuzzleState:
    """Deal a fresh board; only the running score survives from ``previous``."""
    score = previous.score if previous else 0
    round_no = (previous.round_no if previous else 0) + 1
    cells = deal_cells(rng, rules.board_min, rules.board_max)
    logger.info("round %s dealt %s", round_no, cells)
    return PuzzleState(
        cells=cells,
        pool=fresh_pool(rules.pool_copies),
        status=RoundStatus.IN_PROGRESS,
        score=score,
        timer=RoundTimer.started(rules.round_seconds),
        round_no=round_no,
    )


def tick(state: PuzzleState) -> PuzzleState:
    """One second elapses. Expiry ends the round unless it was already solved."""
    timer = state.timer.tick()
    if timer is state.timer:
        return state
    if timer.expired and state.status is not RoundStatus.SOLVED:
        logger.info("round %s timed out", state.round_no)
        return replace(state, timer=timer, status=RoundStatus.TIMED_OUT)
    return replace(state, timer=timer)


# intent name -> handler(state, rules, payload)
_INTENTS: Dict[str, Callable[[PuzzleState, RoundRules, Dict[str, Any]], PuzzleState]] = {
    "new_round": lambda s, r, p: new_round(s, r, p.get("rng")),
    "select": lambda s, r, p: select_tile(s, p["tile"]),
    "place": lambda s, r, p: place_tile(s, int(p["index"])),
    "merge": lambda s, r, p: merge_cells(s, int(p["gap"])),
    "validate": lambda s, r, p: validate(s, r),
    "tick": lambda s, r, p: tick(s),
}

INTENTS = tuple(_INTENTS)


def dispatch(state: PuzzleState, intent: str, rules: RoundRules = DEFAULT_RULES, **payload: Any) -> PuzzleState:
    """Apply a named intent. Raises KeyError for an unknown intent name."""
    handler = _INTENTS[intent]
    return handler(state, rules, payload)


def read_model(state: PuzzleState) -> Dict[str, Any]:
    """Everything a front end needs to draw the board, as plain JSON types."""
    tokens, equation_score = build_expression(state.cells, state.operators, state.parens)
    gaps = []
    for idx in range(state.gap_count):
        placed = state.operators.get(idx)
        op = placed or DEFAULT_OPERATOR
        gaps.append({"index": idx, "operator": op, "display": tile_display(op), "placed": placed is not None})
    cells = [
        {
            "index": idx,
            "value": value,
            "open": state.parens_at(idx, OPEN),
            "close": state.parens_at(idx, CLOSE),
        }
        for idx, value in enumerate(state.cells)
    ]
    return {
        "round": state.round_no,
        "status": state.status.value,
        "cells": cells,
        "gaps": gaps,
        "pool": list(state.pool),
        "pool_counts": pool_counts(state.pool),
        "selection": list(state.selection),
        "score": state.score,
        "time_remaining": state.timer.remaining,
        "timer": state.timer.phase.value,
        "can_validate": state.timer.running,
        "expression": render_expression(tokens),
        "equation_score": equation_score,
        "last_result": state.last_result,
        "last_award": state.last_award,
    }
