"""A small expression language used by object configuration files.

Expressions are parsed from text, printed back to text, and evaluated
against an environment mapping names to constants.  A constant is either
a number (a Python ``float``) or a string (a Python ``str``).
"""

from __future__ import annotations

import abc
import math
import re
import struct
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, TypeVar, Union

Const = Union[float, str]
Env = Mapping[str, Const]

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_I64_MAX = 2**63 - 1


class ExpressionError(ValueError):
    """Raised when an expression cannot be evaluated."""


class ExpressionSyntaxError(ExpressionError):
    """Raised when text is not a valid expression."""


class BinOp(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    EQ = "=="
    NE = "!="

    def __str__(self) -> str:
        return self.value


class UnOp(Enum):
    NEG = "-"
    EXISTS = "?"

    def __str__(self) -> str:
        return self.value


class BuiltinFunction(Enum):
    LOWER = "Lower"
    UPPER = "Upper"

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# constants


def constant(value: Union[bool, int, float, str]) -> Const:
    """Normalise a Python value into an expression constant."""
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return float(value)
    raise TypeError(f"cannot make a constant from {type(value).__name__}")


def const_from_attribute(value: Union[bool, int, float, str]) -> Const:
    """Turn a map attribute value into a constant; booleans become 1 or 0."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return value
    raise TypeError(f"unsupported attribute type {type(value).__name__}")


def type_name(value: Const) -> str:
    """Return ``"string"`` or ``"number"`` for a constant.

    Raises TypeError for values that are not constants.
    """
    if isinstance(value, str):
        return "string"
    if isinstance(value, (int, float)):
        return "number"
    raise TypeError(f"not an expression constant: {type(value).__name__}")


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_const(value: Const) -> str:
    """Render a constant the way it is written in expression source."""
    if isinstance(value, str):
        return f'"{value}"' if '"' not in value else f"'{value}'"
    return _format_number(value)


def as_number(value: Const) -> float:
    """Return the constant as a number or raise ExpressionError."""
    if isinstance(value, str):
        raise ExpressionError(f'Expected number, found string "{value}"')
    return float(value)


def as_string(value: Const) -> str:
    """Return the constant as a string; numbers are formatted."""
    if isinstance(value, str):
        return value
    return _format_number(value)


def to_int(value: float) -> int:
    """Truncate to a 32-bit integer, saturating; NaN becomes 0."""
    if math.isnan(value):
        return 0
    if value >= _I32_MAX:
        return _I32_MAX
    if value <= _I32_MIN:
        return _I32_MIN
    return int(value)


def to_float(value: float) -> float:
    """Round to single precision."""
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _const_equal(a: Const, b: Const) -> bool:
    a_str, b_str = isinstance(a, str), isinstance(b, str)
    if a_str or b_str:
        return a_str and b_str and a == b
    if math.isnan(a) and math.isnan(b):
        return True
    return a == b


def _const_key(value: Const) -> tuple:
    if isinstance(value, str):
        return ("s", value)
    if math.isnan(value):
        return ("nan",)
    return ("n", value)


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _remainder(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


# ---------------------------------------------------------------------------
# expression tree


class Expression(abc.ABC):
    """Base class of all expression nodes."""

    @abc.abstractmethod
    def evaluate(self, env: Env) -> Const:
        """Evaluate against ``env``; raises ExpressionError on failure."""


@dataclass(frozen=True, eq=False)
class Literal(Expression):
    value: Const

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", constant(self.value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return _const_equal(self.value, other.value)

    def __hash__(self) -> int:
        return hash(_const_key(self.value))

    def __str__(self) -> str:
        return format_const(self.value)

    def evaluate(self, env: Env) -> Const:
        return self.value


@dataclass(frozen=True)
class Atom(Expression):
    name: str

    def __str__(self) -> str:
        return self.name

    def evaluate(self, env: Env) -> Const:
        try:
            return env[self.name]
        except KeyError:
            raise ExpressionError(f'Name "{self.name}" undefined') from None


@dataclass(frozen=True)
class BinaryOp(Expression):
    op: BinOp
    left: Expression
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"

    def evaluate(self, env: Env) -> Const:
        lhs = self.left.evaluate(env)
        rhs = self.right.evaluate(env)
        op = self.op
        if op is BinOp.ADD:
            if not isinstance(lhs, str) and not isinstance(rhs, str):
                return lhs + rhs
            return as_string(lhs) + as_string(rhs)
        if op is BinOp.EQ:
            return 1.0 if _const_equal(lhs, rhs) else 0.0
        if op is BinOp.NE:
            return 0.0 if _const_equal(lhs, rhs) else 1.0
        a, b = as_number(lhs), as_number(rhs)
        if op is BinOp.SUB:
            return a - b
        if op is BinOp.MUL:
            return a * b
        if op is BinOp.DIV:
            return _divide(a, b)
        if op is BinOp.MOD:
            return _remainder(a, b)
        comparisons = {
            BinOp.LT: a < b,
            BinOp.GT: a > b,
            BinOp.LE: a <= b,
            BinOp.GE: a >= b,
        }
        return 1.0 if comparisons[op] else 0.0


@dataclass(frozen=True)
class UnaryOp(Expression):
    op: UnOp
    operand: Expression

    def __str__(self) -> str:
        return f"{self.op}{self.operand}"

    def evaluate(self, env: Env) -> Const:
        if self.op is UnOp.EXISTS:
            try:
                self.operand.evaluate(env)
            except ExpressionError:
                return 0.0
            return 1.0
        return -as_number(self.operand.evaluate(env))


@dataclass(frozen=True, eq=False)
class Match(Expression):
    test: Expression
    arms: tuple[tuple[Const, Expression], ...]
    default: Expression

    def _arm_map(self) -> dict:
        return {_const_key(case): expr for case, expr in self.arms}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Match):
            return NotImplemented
        return (
            self.test == other.test
            and self.default == other.default
            and self._arm_map() == other._arm_map()
        )

    def __hash__(self) -> int:
        return hash((self.test, self.default, frozenset(self._arm_map())))

    def __str__(self) -> str:
        arms = "".join(f"{format_const(case)} => {expr}, " for case, expr in self.arms)
        return f"match {self.test} {{ {arms}_ => {self.default} }}"

    def evaluate(self, env: Env) -> Const:
        value = self.test.evaluate(env)
        chosen = next(
            (expr for case, expr in self.arms if _const_equal(case, value)),
            self.default,
        )
        return chosen.evaluate(env)


@dataclass(frozen=True)
class Call(Expression):
    func: BuiltinFunction
    args: tuple[Expression, ...]

    def __str__(self) -> str:
        params = "".join(f"{arg}, " for arg in self.args)
        return f"{self.func}({params})"

    def evaluate(self, env: Env) -> Const:
        values = [arg.evaluate(env) for arg in self.args]
        name = self.func.value
        if len(values) != 1:
            raise ExpressionError(f"{name}: expected 1 argument, got {len(values)}")
        (arg,) = values
        if not isinstance(arg, str):
            raise ExpressionError(
                f"{name}: expected string argument, got {type_name(arg)}"
            )
        return arg.lower() if self.func is BuiltinFunction.LOWER else arg.upper()


# ---------------------------------------------------------------------------
# parser

_T = TypeVar("_T")
_Result = Optional[tuple[_T, int]]

_HEX_RE = re.compile(r"([+-]?)0[xX]([0-9a-fA-F]+)")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_IDENT_RE = re.compile(r"[_a-zA-Z][_a-zA-Z0-9]*")
_DEFAULT_CASE = object()

_LEVEL4 = (BinOp.GE, BinOp.LE, BinOp.GT, BinOp.LT, BinOp.EQ, BinOp.NE)
_LEVEL3 = (BinOp.ADD, BinOp.SUB)
_LEVEL2 = (BinOp.MUL, BinOp.DIV, BinOp.MOD)


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text

    def space0(self, pos: int) -> int:
        text = self.text
        while pos < len(text) and text[pos] in " \t":
            pos += 1
        return pos

    def tag(self, pos: int, word: str) -> Optional[int]:
        return pos + len(word) if self.text.startswith(word, pos) else None

    def padded_tag(self, pos: int, word: str) -> Optional[int]:
        end = self.tag(self.space0(pos), word)
        return None if end is None else self.space0(end)

    # literals

    def num_lit(self, pos: int) -> _Result[float]:
        match = _HEX_RE.match(self.text, pos)
        if match:
            magnitude = int(match.group(2), 16)
            if magnitude <= _I64_MAX:
                value = float(magnitude)
                return (-value if match.group(1) == "-" else value), match.end()
        match = _FLOAT_RE.match(self.text, pos)
        if match:
            return float(match.group()), match.end()
        # special values are accepted without a sign, in any case
        for word in ("nan", "inf"):
            if self.text[pos : pos + len(word)].lower() == word:
                return float(word), pos + len(word)
        return None

    def string_lit(self, pos: int) -> _Result[str]:
        if pos >= len(self.text) or self.text[pos] not in "\"'":
            return None
        end = self.text.find(self.text[pos], pos + 1)
        if end < 0:
            return None
        return self.text[pos + 1 : end], end + 1

    def string_const(self, pos: int) -> _Result[Const]:
        found = self.string_lit(self.space0(pos))
        return None if found is None else (found[0], self.space0(found[1]))

    def num_const(self, pos: int) -> _Result[Const]:
        found = self.num_lit(self.space0(pos))
        return None if found is None else (found[0], self.space0(found[1]))

    def any_const(self, pos: int) -> _Result[Const]:
        return self.string_const(pos) or self.num_const(pos)

    # primaries

    def const_expression(self, pos: int) -> _Result[Expression]:
        found = self.any_const(pos)
        return None if found is None else (Literal(found[0]), found[1])

    def atom(self, pos: int) -> _Result[Expression]:
        match = _IDENT_RE.match(self.text, self.space0(pos))
        if not match:
            return None
        return Atom(match.group()), self.space0(match.end())

    def parenthetical(self, pos: int) -> _Result[Expression]:
        pos = self.padded_tag(pos, "(")
        if pos is None:
            return None
        found = self.expression_4(pos)
        if found is None:
            return None
        expr, pos = found
        end = self.padded_tag(pos, ")")
        return None if end is None else (expr, end)

    def separated_list(
        self, pos: int, element: Callable[[int], _Result[_T]]
    ) -> tuple[list[_T], int]:
        items: list[_T] = []
        found = element(pos)
        while found is not None:
            item, pos = found
            items.append(item)
            after_sep = self.padded_tag(pos, ",")
            if after_sep is None:
                break
            found = element(after_sep)
        return items, pos

    def match_case(self, pos: int) -> _Result[object]:
        found = self.any_const(pos)
        if found is not None:
            return found
        end = self.padded_tag(pos, "_")
        return None if end is None else (_DEFAULT_CASE, end)

    def match_arm(self, pos: int) -> _Result[tuple[object, Expression]]:
        found = self.match_case(pos)
        if found is None:
            return None
        case, pos = found
        pos = self.padded_tag(pos, "=>")
        if pos is None:
            return None
        body = self.expression_4(pos)
        return None if body is None else ((case, body[0]), body[1])

    def match_expr(self, pos: int) -> _Result[Expression]:
        pos = self.tag(self.space0(pos), "match")
        if pos is None:
            return None
        found = self.expression_4(self.space0(pos))
        if found is None:
            return None
        test, pos = found
        pos = self.tag(self.space0(pos), "{")
        if pos is None:
            return None
        arm_list, pos = self.separated_list(self.space0(pos), self.match_arm)
        pos = self.tag(self.space0(pos), "}")
        if pos is None:
            return None
        built = _build_match(test, arm_list)
        return None if built is None else (built, pos)

    def call_expr(self, pos: int) -> _Result[Expression]:
        func = next(
            (f for f in BuiltinFunction if self.text.startswith(f.value, pos)), None
        )
        if func is None:
            return None
        pos = self.padded_tag(pos + len(func.value), "(")
        if pos is None:
            return None
        args, pos = self.separated_list(pos, self.expression_4)
        pos = self.padded_tag(pos, ")")
        return None if pos is None else (Call(func, tuple(args)), pos)

    # precedence levels

    def expression_0(self, pos: int) -> _Result[Expression]:
        # match goes first since it could also be read as an atom
        return (
            self.match_expr(pos)
            or self.call_expr(pos)
            or self.const_expression(pos)
            or self.atom(pos)
            or self.parenthetical(pos)
        )

    def expression_1(self, pos: int) -> _Result[Expression]:
        found = self.expression_0(pos)
        if found is not None:
            return found
        start = self.space0(pos)
        op = next((o for o in UnOp if self.text.startswith(o.value, start)), None)
        if op is None:
            return None
        operand = self.expression_1(self.space0(start + len(op.value)))
        return None if operand is None else (UnaryOp(op, operand[0]), operand[1])

    def binary(
        self,
        pos: int,
        operators: tuple[BinOp, ...],
        sub: Callable[[int], _Result[Expression]],
    ) -> _Result[Expression]:
        found = sub(pos)
        if found is None:
            return None
        acc, pos = found
        while True:
            start = self.space0(pos)
            op = next((o for o in operators if self.text.startswith(o.value, start)), None)
            if op is None:
                return acc, pos
            rhs = sub(self.space0(start + len(op.value)))
            if rhs is None:
                return acc, pos
            acc, pos = BinaryOp(op, acc, rhs[0]), rhs[1]

    def expression_2(self, pos: int) -> _Result[Expression]:
        return self.binary(pos, _LEVEL2, self.expression_1)

    def expression_3(self, pos: int) -> _Result[Expression]:
        return self.binary(pos, _LEVEL3, self.expression_2)

    def expression_4(self, pos: int) -> _Result[Expression]:
        return self.binary(pos, _LEVEL4, self.expression_3)


def _build_match(test: Expression, arm_list: list) -> Optional[Match]:
    seen: set = set()
    arms: list[tuple[Const, Expression]] = []
    default: Optional[Expression] = None
    for case, expr in arm_list:
        if case is _DEFAULT_CASE:
            if default is not None:
                return None
            default = expr
        else:
            key = _const_key(case)
            if key in seen:
                return None
            seen.add(key)
            arms.append((case, expr))
    if default is None:
        return None
    return Match(test, tuple(arms), default)


def parse_expression(text: str) -> Expression:
    """Parse a whole string as an expression."""
    found = _Parser(text).expression_4(0)
    if found is None or found[1] != len(text):
        position = 0 if found is None else found[1]
        raise ExpressionSyntaxError(f"invalid expression {text!r} at offset {position}")
    return found[0]