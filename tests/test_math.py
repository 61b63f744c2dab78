"""Math block emitters."""

from __future__ import annotations

import pytest

from Blocktave.transpile.errors import MalformedBlockError, UnknownFieldValueError
from Blocktave.transpile.precedence import (
    ORDER_ATOMIC,
    ORDER_MULTIPLICATIVE,
    ORDER_NONE,
    ORDER_UNARY_SIGN,
)

from blockfactory import block, expr, get, num


def arithmetic(op, a=None, b=None):
    inputs = {}
    if a is not None:
        inputs["A"] = a
    if b is not None:
        inputs["B"] = b
    return block("math_arithmetic", {"OP": op}, inputs)


def single(op, value, kind="math_single"):
    return block(kind, {"OP": op}, {"NUM": value})


@pytest.mark.parametrize(
    "raw, expected",
    [
        (3, ("3", ORDER_ATOMIC)),
        ("2.5", ("2.5", ORDER_ATOMIC)),
        (-2, ("-2", ORDER_UNARY_SIGN)),
        ("Infinity", ("Inf", ORDER_ATOMIC)),
        ("-Infinity", ("-Inf", ORDER_UNARY_SIGN)),
        ("NaN", ("NaN", ORDER_ATOMIC)),
    ],
)
def test_number_literals(gen, raw, expected) -> None:
    assert gen.render(num(raw), ORDER_NONE) == expected


def test_number_rejects_garbage(gen) -> None:
    with pytest.raises(MalformedBlockError):
        gen.render(num("twelve"), ORDER_NONE)


def test_arithmetic_operators_and_parentheses(gen) -> None:
    assert expr(gen, arithmetic("POWER", num(-2), num(2))) == "(-2) ^ 2"
    nested = arithmetic("MINUS", num(1), arithmetic("MINUS", num(2), num(3)))
    assert expr(gen, nested) == "1 - (2 - 3)"
    assert expr(gen, arithmetic("ADD", num(1))) == "1 + 0"
    assert expr(gen, arithmetic("DIVIDE", get("a"), get("b"))) == "a / b"


def test_single_operand_functions(gen) -> None:
    assert expr(gen, single("NEG", num(-3))) == "-(-3)"
    assert expr(gen, single("ROOT", num(9))) == "sqrt(9)"
    assert expr(gen, single("POW10", num(2))) == "10 ^ 2"
    assert expr(gen, single("ROUNDUP", num(1.5), "math_round")) == "ceil(1.5)"
    assert expr(gen, single("SIN", num(30), "math_trig")) == "sind(30)"
    assert expr(gen, single("ATAN", get("x"), "math_trig")) == "atand(x)"


def test_single_unknown_operator(gen) -> None:
    with pytest.raises(UnknownFieldValueError) as excinfo:
        expr(gen, single("CUBE", num(2)))
    assert excinfo.value.field == "OP"
    assert excinfo.value.value == "CUBE"


def test_constants(gen) -> None:
    golden = block("math_constant", {"CONSTANT": "GOLDEN_RATIO"})
    assert gen.render(golden, ORDER_NONE) == ("(1 + sqrt(5)) / 2", ORDER_MULTIPLICATIVE)
    assert expr(gen, arithmetic("ADD", golden, num(1))) == "(1 + sqrt(5)) / 2 + 1"
    assert expr(gen, block("math_constant", {"CONSTANT": "E"})) == "exp(1)"
    assert expr(gen, block("math_constant", {"CONSTANT": "INFINITY"})) == "Inf"


def number_property(prop, number, divisor=None):
    inputs = {"NUMBER_TO_CHECK": number}
    if divisor is not None:
        inputs["DIVISOR"] = divisor
    return block("math_number_property", {"PROPERTY": prop}, inputs)


def test_number_properties(gen) -> None:
    assert expr(gen, number_property("EVEN", num(4))) == "mod(4, 2) == 0"
    assert expr(gen, number_property("ODD", get("n"))) == "mod(n, 2) == 1"
    assert expr(gen, number_property("WHOLE", num(2.5))) == "mod(2.5, 1) == 0"
    assert expr(gen, number_property("POSITIVE", num(5))) == "5 > 0"
    assert expr(gen, number_property("NEGATIVE", get("n"))) == "n < 0"
    assert expr(gen, number_property("DIVISIBLE_BY", num(9), num(3))) == "mod(9, 3) == 0"


def test_divisible_by_zero_or_missing_is_false(gen) -> None:
    assert gen.render(number_property("DIVISIBLE_BY", num(9)), ORDER_NONE) == ("false", ORDER_ATOMIC)
    assert expr(gen, number_property("DIVISIBLE_BY", num(9), num(0))) == "false"


def test_prime_uses_helper(gen) -> None:
    assert expr(gen, number_property("PRIME", num(7))) == "math_is_prime(7)"
    definition = next(gen.helpers.definitions())
    assert definition.startswith("function result = math_is_prime(n)")
    assert "for x = 6:6:sqrt(n) + 1" in definition


def test_change_treats_non_numbers_as_zero(gen, src) -> None:
    change = block("math_change", {"VAR": "x"}, {"DELTA": num(1)})
    assert gen.block_to_code(change) == src(
        """
        if ~isnumeric(x) || isempty(x)
          x = 0;
        end
        x = x + 1;
        """
    ) + "\n"


@pytest.mark.parametrize(
    "op, expected",
    [
        ("SUM", "sum(math_numbers(L))"),
        ("MIN", "min(math_numbers(L))"),
        ("AVERAGE", "mean(math_numbers(L))"),
        ("MEDIAN", "median(math_numbers(L))"),
        ("STD_DEV", "std(math_numbers(L), 1)"),
        ("MODE", "math_modes(L)"),
        ("RANDOM", "lists_random_item(L)"),
    ],
)
def test_on_list(gen, op, expected) -> None:
    assert expr(gen, block("math_on_list", {"OP": op}, {"LIST": get("L")})) == expected


def test_mode_helper_returns_all_tied_values(gen) -> None:
    expr(gen, block("math_on_list", {"OP": "MODE"}, {"LIST": get("L")}))
    definition = next(gen.helpers.definitions())
    assert "isequal(items{m}, myList{k})" in definition
    assert "result = items(counts == max(counts));" in definition


def test_misc_functions(gen) -> None:
    modulo = block("math_modulo", inputs={"DIVIDEND": num(7), "DIVISOR": num(3)})
    assert expr(gen, modulo) == "mod(7, 3)"
    constrain = block("math_constrain", inputs={"VALUE": get("x"), "LOW": num(0)})
    assert expr(gen, constrain) == "min(max(x, 0), Inf)"
    dice = block("math_random_int", inputs={"FROM": num(1), "TO": num(6)})
    assert expr(gen, dice) == "randi([1, 6])"
    assert expr(gen, block("math_random_float")) == "rand()"
    angle = block("math_atan2", inputs={"X": num(1), "Y": num(2)})
    assert gen.render(angle, ORDER_NONE) == ("atan2(2, 1) / pi * 180", ORDER_MULTIPLICATIVE)
