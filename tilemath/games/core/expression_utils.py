# tilemath/games/core/expression_utils.py
import re
from typing import Dict, Iterable, Optional

OPERATORS = ("+", "-", "X", "%", "^", "½")
PARENS = ("(", ")")

OPERATOR_SCORES: Dict[str, int] = {
    "+": 1,   # addition
    "-": 1,   # subtraction
    "X": 2,   # multiplication
    "%": 2,   # division
    "^": 3,   # power
    "½": 3,   # half
}

DEFAULT_OPERATOR = "+"

# what the player sees on a tile; only the half tile differs from its key
_DISPLAY = {"½": "1/2"}

# glyphs typed or sent by clients -> canonical tile key
_ALIASES = {
    "+": "+",
    "-": "-", "–": "-", "—": "-", "−": "-",
    "X": "X", "x": "X", "*": "X", "×": "X", "∗": "X", "·": "X",
    "%": "%", "/": "%", "÷": "%", "／": "%",
    "^": "^", "**": "^",
    "½": "½", "1/2": "½", "half": "½", "0.5": "½",
    "(": "(", ")": ")",
}


def normalize_tile(symbol: Optional[str]) -> Optional[str]:
    """Map a client glyph to its tile key, or None if it is not a tile."""
    if not isinstance(symbol, str):
        return None
    s = re.sub(r"\s+", "", symbol)
    return _ALIASES.get(s) or _ALIASES.get(s.lower())


def tile_display(symbol: str) -> str:
    return _DISPLAY.get(symbol, symbol)


def operator_score(symbol: str) -> int:
    """Parentheses and unknown glyphs weigh nothing."""
    return OPERATOR_SCORES.get(symbol, 0)


def score_expression_complexity(gap_operators: Iterable[str]) -> int:
    """
    Sum of operator weights along the gaps:
      +,- = 1; X,% = 2; ^,½ = 3; parentheses ignored.
    """
    return sum(operator_score(op) for op in gap_operators)
