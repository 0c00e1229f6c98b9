# tilemath/games/tile_puzzle/logic/state.py
"""
Immutable puzzle state shared by the board, tile, placement, evaluation and
timer transformers. Nothing in here mutates; transformers build new states
with ``dataclasses.replace``.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from tilemath.games.core.expression_utils import OPERATORS, PARENS
from .timer import ROUND_TIME_LIMIT, RoundTimer

OPEN = "("
CLOSE = ")"


class RoundStatus(enum.Enum):
    IN_PROGRESS = "in-progress"
    SOLVED = "solved"
    INVALID = "invalid"
    TIMED_OUT = "timed-out"


@dataclass(frozen=True)
class Paren:
    """A parenthesis glued to the left (open) or right (close) side of a cell."""

    index: int
    kind: str  # "(" or ")"


@dataclass(frozen=True)
class RoundRules:
    round_seconds: int = ROUND_TIME_LIMIT
    board_min: int = 4
    board_max: int = 6
    pool_copies: int = 3
    result_limit: float = 1000
    bonus_step: int = 5

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> RoundRules:
        """Build rules from a Flask config (or any mapping with TILE_* keys)."""
        dflt = cls()
        rules = cls(
            round_seconds=int(config.get("TILE_ROUND_SECONDS", dflt.round_seconds)),
            board_min=int(config.get("TILE_BOARD_MIN", dflt.board_min)),
            board_max=int(config.get("TILE_BOARD_MAX", dflt.board_max)),
            pool_copies=int(config.get("TILE_POOL_COPIES", dflt.pool_copies)),
            result_limit=float(config.get("TILE_RESULT_LIMIT", dflt.result_limit)),
            bonus_step=int(config.get("TILE_BONUS_STEP", dflt.bonus_step)),
        )
        if rules.board_min < 2 or rules.board_max < rules.board_min:
            raise ValueError(
                f"Bad board size range {rules.board_min}..{rules.board_max}"
            )
        if rules.bonus_step <= 0:
            raise ValueError("TILE_BONUS_STEP must be positive")
        if rules.round_seconds <= 0:
            raise ValueError("TILE_ROUND_SECONDS must be positive")
        if rules.pool_copies < 0:
            raise ValueError("TILE_POOL_COPIES must not be negative")
        return rules


DEFAULT_RULES = RoundRules()


@dataclass(frozen=True)
class PuzzleState:
    cells: Tuple[int, ...] = ()
    pool: Tuple[str, ...] = ()
    selection: Tuple[str, ...] = ()
    # sparse: a gap missing from the map reads as "+" at build time
    # read-only view; hash skips it, equality does not
    operators: Mapping[int, str] = field(default_factory=dict, hash=False)
    parens: Tuple[Paren, ...] = ()
    status: RoundStatus = RoundStatus.IN_PROGRESS
    score: int = 0
    timer: RoundTimer = field(default_factory=RoundTimer)
    round_no: int = 0
    last_result: Optional[float] = None
    last_award: int = 0

    def __post_init__(self):
        object.__setattr__(self, "operators", MappingProxyType(dict(self.operators)))

    @property
    def gap_count(self) -> int:
        return max(0, len(self.cells) - 1)

    def is_gap(self, index: int) -> bool:
        return 0 <= index < self.gap_count

    def is_cell(self, index: int) -> bool:
        return 0 <= index < len(self.cells)

    def parens_at(self, index: int, kind: str) -> int:
        return sum(1 for p in self.parens if p.index == index and p.kind == kind)

    def operators_dict(self) -> Dict[int, str]:
        return dict(self.operators)


def is_paren(symbol: str) -> bool:
    return symbol in PARENS


def is_operator(symbol: str) -> bool:
    return symbol in OPERATORS
