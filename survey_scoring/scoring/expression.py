"""
Expression Evaluator
survey_scoring/scoring/expression.py

Evaluates researcher-authored formulas and conditions such as

    "(sum - 10) / 2"
    "total_score >= 10 && anxiety_flag"

without handing the text to Python's eval/exec. The text is tokenized,
parsed by recursive descent into a small immutable AST, and the AST is
walked against a read-only name -> number mapping.

Grammar (lowest to highest precedence):
    expr     := or
    or       := and ( "||" and )*
    and      := equality ( "&&" equality )*
    equality := compare ( ("==" | "!=") compare )*
    compare  := additive ( ("<" | "<=" | ">" | ">=") additive )*
    additive := term ( ("+" | "-") term )*
    term     := unary ( ("*" | "/" | "%") unary )*
    unary    := ("-" | "+" | "!") unary | primary
    primary  := NUMBER | "true" | "false" | IDENT | IDENT "(" args ")" | "(" expr ")"

"===" and "!==" are read as "==" and "!=".
Flag scores (True/False) read as 1/0, so "anxiety_flag + panic_flag" counts flags.

Failure policy: tokenize/parse/evaluate problems raise ExpressionError.
evaluate_arithmetic() and evaluate_condition() catch it and return 0.0 /
False, recording a ScoringDiagnostic when a sink is passed.
"""

import math
import re
from collections import ChainMap
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import structlog

from survey_scoring.core.exceptions import (
    ExpressionError,
    ExpressionSyntaxError,
    UnknownIdentifierError,
)
from survey_scoring.models.enumerations import DiagnosticKind
from survey_scoring.models.scores import ScoringDiagnostic
from survey_scoring.scoring.utils import to_decimal

logger = structlog.get_logger(__name__)

Value = Union[float, bool]


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

NUMBER = "number"
IDENT = "ident"
BOOL = "bool"
OP = "op"
EOF = "eof"

_TOKEN_RE = re.compile(
    r"""
    (?P<number>\d+(?:\.\d*)?(?:[eE][-+]?\d+)?|\.\d+(?:[eE][-+]?\d+)?)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>===|!==|==|!=|>=|<=|&&|\|\||[-+*/%()<>!,])
    """,
    re.VERBOSE | re.ASCII,
)

_OP_ALIASES = {"===": "==", "!==": "!="}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int


def tokenize(expression: str) -> List[Token]:
    """Split an expression into tokens, ending with an EOF token."""
    tokens: List[Token] = []
    pos = 0
    length = len(expression)
    while pos < length:
        if expression[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(expression, pos)
        if match is None:
            raise ExpressionSyntaxError(
                expression, f"Unexpected character {expression[pos]!r}", pos
            )
        kind = match.lastgroup
        text = match.group()
        if kind == IDENT and text in ("true", "false"):
            kind = BOOL
        elif kind == OP:
            text = _OP_ALIASES.get(text, text)
        tokens.append(Token(kind, text, pos))
        pos = match.end()
    tokens.append(Token(EOF, "", length))
    return tokens


# ---------------------------------------------------------------------------
# AST
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Number:
    value: Value


@dataclass(frozen=True)
class Name:
    name: str


@dataclass(frozen=True)
class Unary:
    op: str
    operand: "Node"


@dataclass(frozen=True)
class Binary:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Call:
    func: str
    args: Tuple["Node", ...]


Node = Union[Number, Name, Unary, Binary, Call]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

# Binary precedence levels, lowest first
_LEVELS: Tuple[Tuple[str, ...], ...] = (
    ("||",),
    ("&&",),
    ("==", "!="),
    ("<", "<=", ">", ">="),
    ("+", "-"),
    ("*", "/", "%"),
)


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, expression: str, tokens: List[Token]):
        self.expression = expression
        self.tokens = tokens
        self.index = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != EOF:
            self.index += 1
        return token

    def _is_op(self, *ops: str) -> bool:
        return self.current.kind == OP and self.current.text in ops

    def _expect_op(self, op: str) -> None:
        if not self._is_op(op):
            self._fail(f"Expected '{op}'")
        self._advance()

    def _fail(self, message: str):
        token = self.current
        found = "end of expression" if token.kind == EOF else repr(token.text)
        raise ExpressionSyntaxError(
            self.expression, f"{message}, found {found}", token.position
        )

    def parse(self) -> Node:
        if self.current.kind == EOF:
            raise ExpressionSyntaxError(self.expression, "Empty expression", 0)
        node = self._binary(0)
        if self.current.kind != EOF:
            self._fail("Unexpected token")
        return node

    def _binary(self, level: int) -> Node:
        if level == len(_LEVELS):
            return self._unary()
        node = self._binary(level + 1)
        while self._is_op(*_LEVELS[level]):
            op = self._advance().text
            node = Binary(op, node, self._binary(level + 1))
        return node

    def _unary(self) -> Node:
        if self._is_op("-", "+", "!"):
            op = self._advance().text
            return Unary(op, self._unary())
        return self._primary()

    def _primary(self) -> Node:
        token = self.current
        if token.kind == NUMBER:
            self._advance()
            return Number(float(token.text))
        if token.kind == BOOL:
            self._advance()
            return Number(token.text == "true")
        if token.kind == IDENT:
            self._advance()
            if self._is_op("("):
                return Call(token.text, self._arguments())
            return Name(token.text)
        if self._is_op("("):
            self._advance()
            node = self._binary(0)
            self._expect_op(")")
            return node
        self._fail("Expected a number, name or '('")

    def _arguments(self) -> Tuple[Node, ...]:
        self._expect_op("(")
        args: List[Node] = []
        if not self._is_op(")"):
            args.append(self._binary(0))
            while self._is_op(","):
                self._advance()
                args.append(self._binary(0))
        self._expect_op(")")
        return tuple(args)


@lru_cache(maxsize=1024)
def parse_expression(expression: str) -> Node:
    """Parse expression text into an AST. Results are cached; nodes are immutable."""
    return _Parser(expression, tokenize(expression)).parse()


def expression_identifiers(expression: str) -> List[str]:
    """
    Names referenced by an expression, in first-appearance order.

    Works from the token stream, so it still answers for expressions that
    tokenize but do not parse. Function names in call position are skipped.
    Raises ExpressionSyntaxError if the text cannot be tokenized.
    """
    tokens = tokenize(expression)
    names: List[str] = []
    for i, token in enumerate(tokens):
        if token.kind != IDENT:
            continue
        following = tokens[i + 1]
        if following.kind == OP and following.text == "(" and token.text in FUNCTIONS:
            continue
        if token.text not in names:
            names.append(token.text)
    return names


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def _round(value: float, places: float = 0) -> float:
    # Half-up, like the rest of the scoring math
    return float(to_decimal(value, int(places)))


def _sqrt(value: float) -> float:
    if value < 0:
        raise ValueError("sqrt of a negative number")
    return math.sqrt(value)


# name -> (callable, min args, max args or None)
FUNCTIONS: Dict[str, Tuple[Callable[..., float], int, Optional[int]]] = {
    "min": (lambda *values: min(values), 1, None),
    "max": (lambda *values: max(values), 1, None),
    "abs": (abs, 1, 1),
    "round": (_round, 1, 2),
    "floor": (math.floor, 1, 1),
    "ceil": (math.ceil, 1, 1),
    "sqrt": (_sqrt, 1, 1),
}


def _number(value: Value) -> float:
    return float(value)


def _truthy(value: Value) -> bool:
    return value != 0


class _Evaluator:
    def __init__(self, expression: str, names: Mapping[str, Any]):
        self.expression = expression
        self.names = names

    def _error(self, message: str) -> ExpressionError:
        return ExpressionError(self.expression, message)

    def eval(self, node: Node) -> Value:
        if isinstance(node, Number):
            return node.value
        if isinstance(node, Name):
            return self._lookup(node.name)
        if isinstance(node, Unary):
            operand = self.eval(node.operand)
            if node.op == "!":
                return not _truthy(operand)
            number = _number(operand)
            return -number if node.op == "-" else number
        if isinstance(node, Binary):
            return self._binary(node)
        if isinstance(node, Call):
            return self._call(node)
        raise self._error(f"Unsupported node {type(node).__name__}")

    def _lookup(self, name: str) -> Value:
        value = self.names.get(name)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)) and not math.isnan(value):
            return float(value)
        raise UnknownIdentifierError(self.expression, name)

    def _binary(self, node: Binary) -> Value:
        op = node.op
        # Short-circuit like the JavaScript-style formulas authors write
        if op == "&&":
            return _truthy(self.eval(node.left)) and _truthy(self.eval(node.right))
        if op == "||":
            return _truthy(self.eval(node.left)) or _truthy(self.eval(node.right))

        left = _number(self.eval(node.left))
        right = _number(self.eval(node.right))
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            if right == 0:
                raise self._error("Division by zero")
            return left / right
        if op == "%":
            if right == 0:
                raise self._error("Modulo by zero")
            return math.fmod(left, right)
        if op == "==":
            return left == right
        if op == "!=":
            return left != right
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        if op == ">=":
            return left >= right
        raise self._error(f"Unknown operator '{op}'")

    def _call(self, node: Call) -> Value:
        spec = FUNCTIONS.get(node.func)
        if spec is None:
            raise self._error(f"Unknown function '{node.func}'")
        func, min_args, max_args = spec
        count = len(node.args)
        if count < min_args or (max_args is not None and count > max_args):
            raise self._error(f"Wrong number of arguments for '{node.func}'")
        args = [_number(self.eval(arg)) for arg in node.args]
        try:
            return float(func(*args))
        except (ValueError, ArithmeticError) as e:
            raise self._error(f"{node.func}(): {e}") from e


def evaluate(expression: str, names: Mapping[str, Any]) -> Value:
    """
    Parse and evaluate an expression against a name -> value mapping.

    Only int/float/bool values resolve; anything else (strings, None,
    missing) raises UnknownIdentifierError.

    Raises:
        ExpressionError: on any tokenize, parse or evaluation failure.
    """
    try:
        result = _Evaluator(expression, names).eval(parse_expression(expression))
    except RecursionError as e:
        raise ExpressionError(expression, "Expression is nested too deeply") from e
    except (ValueError, ArithmeticError) as e:
        raise ExpressionError(expression, f"Arithmetic error: {e}") from e
    if not isinstance(result, bool) and not math.isfinite(result):
        raise ExpressionError(expression, "Result is not a finite number")
    return result


def _report(
    error: ExpressionError,
    diagnostics: Optional[List[ScoringDiagnostic]],
    rule_name: Optional[str],
) -> None:
    logger.warning(
        "expression_failed",
        rule=rule_name,
        expression=error.expression,
        error=error.message,
    )
    if diagnostics is not None:
        diagnostics.append(
            ScoringDiagnostic(
                rule=rule_name,
                kind=DiagnosticKind.EXPRESSION_ERROR,
                message=error.message,
                expression=error.expression,
            )
        )


def _scope(scores: Mapping[str, Any], bindings: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    # Transient bindings shadow scores without touching the score map
    return ChainMap(dict(bindings), scores) if bindings else scores


def evaluate_arithmetic(
    expression: str,
    scores: Mapping[str, Any],
    bindings: Optional[Mapping[str, Any]] = None,
    diagnostics: Optional[List[ScoringDiagnostic]] = None,
    rule_name: Optional[str] = None,
) -> float:
    """Numeric result of a formula, or 0.0 if it cannot be evaluated. Never raises."""
    try:
        return float(evaluate(expression, _scope(scores, bindings)))
    except ExpressionError as e:
        _report(e, diagnostics, rule_name)
        return 0.0


def evaluate_condition(
    expression: str,
    scores: Mapping[str, Any],
    bindings: Optional[Mapping[str, Any]] = None,
    diagnostics: Optional[List[ScoringDiagnostic]] = None,
    rule_name: Optional[str] = None,
) -> bool:
    """Boolean result of a condition, or False if it cannot be evaluated. Never raises."""
    try:
        return _truthy(evaluate(expression, _scope(scores, bindings)))
    except ExpressionError as e:
        _report(e, diagnostics, rule_name)
        return False
