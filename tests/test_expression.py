import math

import pytest

from celestemods.expression import (
    Atom,
    BinaryOp,
    BinOp,
    BuiltinFunction,
    Call,
    ExpressionError,
    ExpressionSyntaxError,
    Literal,
    Match,
    UnaryOp,
    UnOp,
    as_number,
    as_string,
    const_from_attribute,
    constant,
    format_const,
    parse_expression,
    to_float,
    to_int,
    type_name,
)

EVAL_SOURCE = (
    "match x + 1 {"
    "1 => x / 0,"
    "2 => -x,"
    "3 => x * 2,"
    "4 => 1 + '2',"
    "5 => 1 - '2',"
    "_ => 'foo'"
    "}"
)


def test_expr2():
    assert parse_expression("-x * y") == BinaryOp(
        BinOp.MUL, UnaryOp(UnOp.NEG, Atom("x")), Atom("y")
    )


def test_expr3():
    assert parse_expression("-x + y") == BinaryOp(
        BinOp.ADD, UnaryOp(UnOp.NEG, Atom("x")), Atom("y")
    )


def test_match():
    expr = parse_expression("match 1 + 1 { 2 => 'yeah', _ => 'what' }")
    assert expr.evaluate({}) == "yeah"


def test_call():
    expr = parse_expression("Lower('A')")
    assert expr.evaluate({}) == "a"


def test_eval():
    expr = parse_expression(EVAL_SOURCE)
    assert math.isnan(expr.evaluate({"x": 0.0}))
    assert expr.evaluate({"x": 1.0}) == -1.0
    assert expr.evaluate({"x": 2.0}) == 4.0
    assert expr.evaluate({"x": 3.0}) == "12"
    with pytest.raises(ExpressionError):
        expr.evaluate({"x": 4.0})
    assert expr.evaluate({"x": 5.0}) == "foo"


def test_display():
    expr = parse_expression(EVAL_SOURCE)
    assert parse_expression(str(expr)) == expr


def test_exists():
    expr = parse_expression("?x")
    assert expr.evaluate({}) == 0.0
    assert expr.evaluate({"x": 0.0}) == 1.0


def test_empty_string():
    assert parse_expression("''").evaluate({}) == ""


def test_precedence_and_associativity():
    assert parse_expression("2 - 3 - 4").evaluate({}) == -5.0
    assert parse_expression("1 + 2 * 3").evaluate({}) == 7.0
    assert parse_expression("(1 + 2) * 3").evaluate({}) == 9.0
    assert parse_expression("1 + 2 < 4").evaluate({}) == 1.0


@pytest.mark.parametrize(
    "source, expected",
    [
        ("1 < 2", 1.0),
        ("2 < 1", 0.0),
        ("2 >= 2", 1.0),
        ("3 <= 2", 0.0),
        ("'a' == 'a'", 1.0),
        ("'a' != 'a'", 0.0),
        ("1 == '1'", 0.0),
        ("0x1A", 26.0),
        ("-0x10", -16.0),
        ("1.5e1", 15.0),
    ],
)
def test_evaluate_values(source, expected):
    assert parse_expression(source).evaluate({}) == expected


def test_division_and_modulo_follow_ieee():
    assert parse_expression("1 / 0").evaluate({}) == math.inf
    assert parse_expression("x % 3").evaluate({"x": -7.0}) == -1.0
    assert math.isnan(parse_expression("x % 0").evaluate({"x": 5.0}))


def test_nan_equals_nan():
    assert parse_expression("x == x").evaluate({"x": math.nan}) == 1.0
    assert Literal(math.nan) == Literal(math.nan)


def test_undefined_name_message():
    with pytest.raises(ExpressionError, match='Name "y" undefined'):
        parse_expression("y + 1").evaluate({})


def test_upper_and_argument_errors():
    assert parse_expression("Upper('abc')").evaluate({}) == "ABC"
    with pytest.raises(ExpressionError, match="expected 1 argument, got 2"):
        parse_expression("Lower('a', 'b')").evaluate({})
    with pytest.raises(ExpressionError, match="expected string argument, got number"):
        parse_expression("Lower(1)").evaluate({})


def test_call_structure():
    assert parse_expression("Lower( x )") == Call(BuiltinFunction.LOWER, (Atom("x"),))


@pytest.mark.parametrize(
    "source",
    [
        "",
        "1 +",
        "'unterminated",
        "match x { 1 => 2 }",
        "match x { 1 => 2, 1 => 3, _ => 4 }",
        "match x { _ => 2, _ => 3 }",
        "(1",
    ],
)
def test_syntax_errors(source):
    with pytest.raises(ExpressionSyntaxError):
        parse_expression(source)


def test_match_structure():
    expr = parse_expression("match k { 'a' => 1, _ => 2 }")
    assert expr == Match(Atom("k"), (("a", Literal(1)),), Literal(2))
    assert expr.evaluate({"k": "b"}) == 2.0


def test_display_forms():
    assert str(parse_expression("-x * y")) == "(-x * y)"
    assert str(parse_expression("'a'")) == '"a"'
    assert str(Literal('say "hi"')) == "'say \"hi\"'"


def test_format_const():
    assert format_const(1.0) == "1"
    assert format_const(1.5) == "1.5"
    assert format_const(1e20) == "100000000000000000000"
    assert format_const(math.nan) == "NaN"
    assert format_const(-math.inf) == "-inf"


def test_conversions():
    assert as_string(3.0) == "3"
    assert as_string("x") == "x"
    assert as_number(2.5) == 2.5
    with pytest.raises(ExpressionError, match='found string "s"'):
        as_number("s")
    assert type_name("s") == "string"
    assert type_name(1.0) == "number"


def test_to_int_saturates():
    assert to_int(math.nan) == 0
    assert to_int(1e12) == 2147483647
    assert to_int(-1e12) == -2147483648
    assert to_int(-2.7) == -2


def test_to_float_single_precision():
    assert to_float(0.1) == pytest.approx(0.10000000149011612, abs=0)
    assert to_float(1e300) == math.inf


def test_constant_helpers():
    assert constant(3) == 3.0
    assert constant("a") == "a"
    assert const_from_attribute(True) == 1.0
    assert const_from_attribute(False) == 0.0
    with pytest.raises(TypeError):
        constant([1])