# tilemath/games/tile_puzzle/logic/evaluator.py
"""
Expression building and evaluation for the tile board.

The board is serialized into a typed token stream (numbers, operators,
parentheses), parsed by a small recursive-descent parser into a whitelisted
``ast`` tree, and walked to a float. Nothing is ever handed to ``eval``.
"""
from __future__ import annotations

import ast
import logging
import math
import re
from dataclasses import dataclass, replace
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from tilemath.games.core.expression_utils import DEFAULT_OPERATOR, score_expression_complexity
from .state import CLOSE, DEFAULT_RULES, OPEN, Paren, PuzzleState, RoundRules, RoundStatus

logger = logging.getLogger(__name__)

NUM = "num"
OP = "op"
LPAREN = "lparen"
RPAREN = "rparen"

# tile -> arithmetic; the half tile is not an operator at all but a literal
_ARITH = {"+": "+", "-": "-", "X": "*", "%": "/", "^": "**"}
HALF = "½"
HALF_LITERAL = "0.5"

_DECIMAL_RE = re.compile(r"^\d+(\.\d+)?$")

_BINOPS = {"+": ast.Add, "-": ast.Sub, "*": ast.Mult, "/": ast.Div, "**": ast.Pow}

_ALLOWED_NODES = {
    ast.Expression,
    ast.BinOp,
    ast.Constant,
    ast.Add,
    ast.Sub,
    ast.Mult,
    ast.Div,
    ast.Pow,
}


class ExpressionError(ValueError):
    """The token stream does not form an arithmetic expression."""


@dataclass(frozen=True)
class Token:
    kind: str
    text: str      # arithmetic form: "37", "*", "**", "0.5", "("
    symbol: str    # board form: "37", "X", "^", "½", "("


def build_expression(
    cells: Sequence[int],
    operators: Mapping[int, str],
    parens: Iterable[Paren],
) -> Tuple[List[Token], int]:
    """
    Serialize the board left to right and total the operator weights.

    Unset gaps are filled with "+" here (and scored as "+"), so the placed
    operator map itself stays sparse.
    """
    parens = list(parens)
    tokens: List[Token] = []
    gap_ops: List[str] = []
    last = len(cells) - 1

    for idx, value in enumerate(cells):
        opens = sum(1 for p in parens if p.index == idx and p.kind == OPEN)
        tokens.extend(Token(LPAREN, OPEN, OPEN) for _ in range(opens))

        tokens.append(Token(NUM, str(int(value)), str(int(value))))

        closes = sum(1 for p in parens if p.index == idx and p.kind == CLOSE)
        tokens.extend(Token(RPAREN, CLOSE, CLOSE) for _ in range(closes))

        if idx < last:
            op = operators.get(idx) or DEFAULT_OPERATOR
            gap_ops.append(op)
            if op == HALF:
                tokens.append(Token(NUM, HALF_LITERAL, HALF))
            else:
                tokens.append(Token(OP, _ARITH[op], op))

    return tokens, score_expression_complexity(gap_ops)


def render_expression(tokens: Iterable[Token]) -> str:
    return "".join(t.symbol for t in tokens)


def paren_balance(tokens: Iterable[Token]) -> Tuple[int, int]:
    opens = closes = 0
    for t in tokens:
        if t.kind == LPAREN:
            opens += 1
        elif t.kind == RPAREN:
            closes += 1
    return opens, closes


def fuse_literals(tokens: Sequence[Token]) -> List[Token]:
    """
    Numeric literals that end up side by side read as one literal, digits
    joined: a half tile between 3 and 4 reads as 30.54. A joined literal
    with two decimal points is malformed.
    """
    out: List[Token] = []
    for t in tokens:
        if t.kind == NUM and out and out[-1].kind == NUM:
            prev = out.pop()
            t = Token(NUM, prev.text + t.text, prev.symbol + t.symbol)
        out.append(t)
    for t in out:
        if t.kind == NUM and not _DECIMAL_RE.match(t.text):
            raise ExpressionError(f"malformed number literal: {t.text}")
    return out


class _Parser:
    """
    expr  := term (("+" | "-") term)*
    term  := power (("*" | "/") power)*
    power := atom ("**" power)?
    atom  := NUM | "(" expr ")"
    """

    def __init__(self, tokens: Sequence[Token]):
        self.tokens = list(tokens)
        self.pos = 0

    def _peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> Token:
        tok = self._peek()
        if tok is None:
            raise ExpressionError("unexpected end of expression")
        self.pos += 1
        return tok

    def _at_op(self, *texts: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.kind == OP and tok.text in texts

    def parse(self) -> ast.Expression:
        body = self._expr()
        if self._peek() is not None:
            raise ExpressionError(f"unexpected token {self._peek().symbol!r}")
        return ast.Expression(body=body)

    def _binop(self, left: ast.expr, op_text: str, right: ast.expr) -> ast.BinOp:
        return ast.BinOp(left=left, op=_BINOPS[op_text](), right=right)

    def _expr(self) -> ast.expr:
        node = self._term()
        while self._at_op("+", "-"):
            op = self._next().text
            node = self._binop(node, op, self._term())
        return node

    def _term(self) -> ast.expr:
        node = self._power()
        while self._at_op("*", "/"):
            op = self._next().text
            node = self._binop(node, op, self._power())
        return node

    def _power(self) -> ast.expr:
        base = self._atom()
        if self._at_op("**"):
            self._next()
            return self._binop(base, "**", self._power())
        return base

    def _atom(self) -> ast.expr:
        tok = self._next()
        if tok.kind == NUM:
            return ast.Constant(value=float(tok.text))
        if tok.kind == LPAREN:
            node = self._expr()
            closing = self._next()
            if closing.kind != RPAREN:
                raise ExpressionError(f"expected ')' got {closing.symbol!r}")
            return node
        raise ExpressionError(f"unexpected token {tok.symbol!r}")


def parse_tokens(tokens: Sequence[Token]) -> ast.Expression:
    return _Parser(fuse_literals(tokens)).parse()


def evaluate_tree(tree: ast.AST) -> float:
    """Walk a whitelisted arithmetic tree with real-number semantics."""

    def _rec(n):
        if type(n) not in _ALLOWED_NODES:
            raise ExpressionError(f"disallowed: {type(n).__name__}")
        if isinstance(n, ast.Expression):
            return _rec(n.body)
        if isinstance(n, ast.Constant):
            if isinstance(n.value, (int, float)):
                return float(n.value)
            raise ExpressionError("constant must be number")
        if isinstance(n, ast.BinOp):
            a = _rec(n.left)
            b = _rec(n.right)
            if isinstance(n.op, ast.Add):
                return a + b
            if isinstance(n.op, ast.Sub):
                return a - b
            if isinstance(n.op, ast.Mult):
                return a * b
            if isinstance(n.op, ast.Div):
                return a / b  # ZeroDivisionError propagates
            if isinstance(n.op, ast.Pow):
                # math.pow stays real: negative base with a fractional
                # exponent raises ValueError instead of going complex
                return math.pow(a, b)
            raise ExpressionError("bad binop")
        raise ExpressionError("bad node")

    return _rec(tree)


def evaluate_tokens(tokens: Sequence[Token]) -> float:
    return evaluate_tree(parse_tokens(tokens))


def is_acceptable(result: float, limit: float = 1000) -> bool:
    return math.isfinite(result) and 0 < abs(result) < limit


def time_bonus(remaining: int, step: int = 5) -> int:
    return int(remaining) // int(step)


def _reject(state: PuzzleState, result: Optional[float]) -> PuzzleState:
    return replace(state, status=RoundStatus.INVALID, last_result=result, last_award=0)


def validate(state: PuzzleState, rules: RoundRules = DEFAULT_RULES) -> PuzzleState:
    """
    Check the board as it stands.

    Accepted: status solved, ``equation score + remaining // 5`` added to the
    running score, timer stopped. Rejected for any reason: status invalid,
    nothing awarded, timer keeps running so the player can try again.
    Does nothing once the timer is no longer running.
    """
    if not state.timer.running:
        logger.debug("validate ignored: timer %s", state.timer.phase.value)
        return state

    tokens, equation_score = build_expression(state.cells, state.operators, state.parens)
    expression = render_expression(tokens)

    opens, closes = paren_balance(tokens)
    if opens != closes:
        logger.debug("validate %s: unbalanced parentheses %s/%s", expression, opens, closes)
        return _reject(state, None)

    try:
        result = evaluate_tokens(tokens)
    except (ArithmeticError, ValueError) as exc:
        # ExpressionError is a ValueError; ZeroDivisionError/OverflowError are ArithmeticError
        logger.debug("validate %s: evaluation failed: %s", expression, exc)
        return _reject(state, None)

    if not is_acceptable(result, rules.result_limit):
        logger.debug("validate %s = %r: out of range", expression, result)
        return _reject(state, result)

    award = equation_score + time_bonus(state.timer.remaining, rules.bonus_step)
    logger.info("solved %s = %r, +%s points", expression, result, award)
    return replace(
        state,
        status=RoundStatus.SOLVED,
        score=state.score + award,
        timer=state.timer.stop(),
        last_result=result,
        last_award=award,
    )
