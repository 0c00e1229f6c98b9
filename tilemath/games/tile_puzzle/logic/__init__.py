# tilemath/games/tile_puzzle/logic/__init__.py
from .board import deal_cells, merge_cells
from .engine import INTENTS, dispatch, new_round, read_model, tick
from .evaluator import ExpressionError, build_expression, evaluate_tokens, validate
from .placement import place_tile
from .state import Paren, PuzzleState, RoundRules, RoundStatus
from .tiles import fresh_pool, pool_counts, select_tile
from .timer import ROUND_TIME_LIMIT, RoundTimer, TimerPhase

__all__ = [
    "INTENTS",
    "ROUND_TIME_LIMIT",
    "ExpressionError",
    "Paren",
    "PuzzleState",
    "RoundRules",
    "RoundStatus",
    "RoundTimer",
    "TimerPhase",
    "build_expression",
    "deal_cells",
    "dispatch",
    "evaluate_tokens",
    "fresh_pool",
    "merge_cells",
    "new_round",
    "place_tile",
    "pool_counts",
    "read_model",
    "select_tile",
    "tick",
    "validate",
]
