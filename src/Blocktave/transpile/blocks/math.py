"""Math blocks."""

from __future__ import annotations

import math

from ..ast import Block
from ..errors import MalformedBlockError, UnknownFieldValueError
from ..generator import Fragment, Generator
from ..helpers import FUNCTION_NAME_PLACEHOLDER as FN
from ..precedence import (
    ORDER_ADDITIVE,
    ORDER_ATOMIC,
    ORDER_EXPONENTIATION,
    ORDER_FUNCTION_CALL,
    ORDER_MULTIPLICATIVE,
    ORDER_NONE,
    ORDER_RELATIONAL,
    ORDER_UNARY_SIGN,
)
from .lists import provide_random_item

ARITHMETIC = {
    "ADD": (" + ", ORDER_ADDITIVE),
    "MINUS": (" - ", ORDER_ADDITIVE),
    "MULTIPLY": (" * ", ORDER_MULTIPLICATIVE),
    "DIVIDE": (" / ", ORDER_MULTIPLICATIVE),
    "POWER": (" ^ ", ORDER_EXPONENTIATION),
}

# Single-argument operators that map straight onto a MATLAB function.
FUNCTIONS = {
    "ABS": "abs",
    "ROOT": "sqrt",
    "LN": "log",
    "LOG10": "log10",
    "EXP": "exp",
    "ROUND": "round",
    "ROUNDUP": "ceil",
    "ROUNDDOWN": "floor",
    "SIN": "sind",
    "COS": "cosd",
    "TAN": "tand",
    "ASIN": "asind",
    "ACOS": "acosd",
    "ATAN": "atand",
}

CONSTANTS = {
    "PI": ("pi", ORDER_ATOMIC),
    "E": ("exp(1)", ORDER_FUNCTION_CALL),
    "GOLDEN_RATIO": ("(1 + sqrt(5)) / 2", ORDER_MULTIPLICATIVE),
    "SQRT2": ("sqrt(2)", ORDER_FUNCTION_CALL),
    "SQRT1_2": ("sqrt(1 / 2)", ORDER_FUNCTION_CALL),
    "INFINITY": ("Inf", ORDER_ATOMIC),
}

LIST_FUNCTIONS = {
    "SUM": "sum({})",
    "MIN": "min({})",
    "MAX": "max({})",
    "AVERAGE": "mean({})",
    "MEDIAN": "median({})",
    "STD_DEV": "std({}, 1)",
}


def math_number(gen: Generator, block: Block) -> Fragment:
    raw = block.field_value("NUM", 0)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise MalformedBlockError(block.kind, f"field 'NUM' is not a number: {raw!r}") from None
    if math.isnan(value):
        return "NaN", ORDER_ATOMIC
    if math.isinf(value):
        return ("Inf", ORDER_ATOMIC) if value > 0 else ("-Inf", ORDER_UNARY_SIGN)
    code = gen.format_number(value)
    return code, ORDER_UNARY_SIGN if value < 0 else ORDER_ATOMIC


def math_arithmetic(gen: Generator, block: Block) -> Fragment:
    op = block.choice("OP", ARITHMETIC)
    operator, order = ARITHMETIC[op]
    left = gen.value_to_code(block, "A", order) or "0"
    right = gen.value_to_code(block, "B", order) or "0"
    return f"{left}{operator}{right}", order


def math_single(gen: Generator, block: Block) -> Fragment:
    op = str(block.field_value("OP"))
    if op == "NEG":
        arg = gen.value_to_code(block, "NUM", ORDER_UNARY_SIGN) or "0"
        return f"-{arg}", ORDER_UNARY_SIGN
    if op == "POW10":
        arg = gen.value_to_code(block, "NUM", ORDER_EXPONENTIATION) or "0"
        return f"10 ^ {arg}", ORDER_EXPONENTIATION
    if op not in FUNCTIONS:
        raise UnknownFieldValueError(block.kind, "OP", op)
    arg = gen.value_to_code(block, "NUM", ORDER_NONE) or "0"
    return f"{FUNCTIONS[op]}({arg})", ORDER_FUNCTION_CALL


def math_constant(gen: Generator, block: Block) -> Fragment:
    return CONSTANTS[block.choice("CONSTANT", CONSTANTS)]


def _provide_is_prime(gen: Generator) -> str:
    return gen.provide_function(
        "math_is_prime",
        [
            f"function result = {FN}(n)",
            "  result = false;",
            "  if ~isnumeric(n) || ~isscalar(n) || n ~= fix(n)",
            "    return;",
            "  end",
            "  if n == 2 || n == 3",
            "    result = true;",
            "    return;",
            "  end",
            "  if n <= 1 || mod(n, 2) == 0 || mod(n, 3) == 0",
            "    return;",
            "  end",
            "  % Only candidates of the form 6k +/- 1 remain.",
            "  for x = 6:6:sqrt(n) + 1",
            "    if mod(n, x - 1) == 0 || mod(n, x + 1) == 0",
            "      return;",
            "    end",
            "  end",
            "  result = true;",
            "end",
        ],
    )


def math_number_property(gen: Generator, block: Block) -> Fragment:
    prop = block.choice(
        "PROPERTY", ("EVEN", "ODD", "PRIME", "WHOLE", "POSITIVE", "NEGATIVE", "DIVISIBLE_BY")
    )
    if prop == "PRIME":
        number = gen.value_to_code(block, "NUMBER_TO_CHECK", ORDER_NONE) or "0"
        return f"{_provide_is_prime(gen)}({number})", ORDER_FUNCTION_CALL
    if prop == "DIVISIBLE_BY":
        divisor = gen.value_to_code(block, "DIVISOR", ORDER_NONE)
        if not divisor or divisor == "0":
            return "false", ORDER_ATOMIC
        number = gen.value_to_code(block, "NUMBER_TO_CHECK", ORDER_NONE) or "0"
        return f"mod({number}, {divisor}) == 0", ORDER_RELATIONAL
    if prop in ("POSITIVE", "NEGATIVE"):
        number = gen.value_to_code(block, "NUMBER_TO_CHECK", ORDER_RELATIONAL) or "0"
        return f"{number} {'>' if prop == 'POSITIVE' else '<'} 0", ORDER_RELATIONAL
    number = gen.value_to_code(block, "NUMBER_TO_CHECK", ORDER_NONE) or "0"
    divisor, remainder = {"EVEN": ("2", "0"), "ODD": ("2", "1"), "WHOLE": ("1", "0")}[prop]
    return f"mod({number}, {divisor}) == {remainder}", ORDER_RELATIONAL


def math_change(gen: Generator, block: Block) -> Fragment:
    var = gen.variable_name(block.field_value("VAR"))
    delta = gen.value_to_code(block, "DELTA", ORDER_ADDITIVE) or "0"
    return (
        f"if ~isnumeric({var}) || isempty({var})\n"
        f"{gen.indent}{var} = 0;\n"
        "end\n"
        f"{var} = {var} + {delta};\n"
    )


def _provide_numbers(gen: Generator) -> str:
    return gen.provide_function(
        "math_numbers",
        [
            f"function result = {FN}(myList)",
            "  result = [];",
            "  for k = 1:numel(myList)",
            "    item = myList{k};",
            "    if isnumeric(item) && isscalar(item)",
            "      result(end + 1) = item;",
            "    end",
            "  end",
            "end",
        ],
    )


def _provide_modes(gen: Generator) -> str:
    return gen.provide_function(
        "math_modes",
        [
            f"function result = {FN}(myList)",
            "  items = {};",
            "  counts = [];",
            "  for k = 1:numel(myList)",
            "    found = false;",
            "    for m = 1:numel(items)",
            "      if isequal(items{m}, myList{k})",
            "        counts(m) = counts(m) + 1;",
            "        found = true;",
            "        break;",
            "      end",
            "    end",
            "    if ~found",
            "      items{end + 1} = myList{k};",
            "      counts(end + 1) = 1;",
            "    end",
            "  end",
            "  result = items(counts == max(counts));",
            "end",
        ],
    )


def math_on_list(gen: Generator, block: Block) -> Fragment:
    op = block.choice("OP", tuple(LIST_FUNCTIONS) + ("MODE", "RANDOM"))
    lst = gen.value_to_code(block, "LIST", ORDER_NONE) or "{}"
    if op == "MODE":
        return f"{_provide_modes(gen)}({lst})", ORDER_FUNCTION_CALL
    if op == "RANDOM":
        return f"{provide_random_item(gen)}({lst})", ORDER_FUNCTION_CALL
    numbers = f"{_provide_numbers(gen)}({lst})"
    return LIST_FUNCTIONS[op].format(numbers), ORDER_FUNCTION_CALL


def math_modulo(gen: Generator, block: Block) -> Fragment:
    dividend = gen.value_to_code(block, "DIVIDEND", ORDER_NONE) or "0"
    divisor = gen.value_to_code(block, "DIVISOR", ORDER_NONE) or "0"
    return f"mod({dividend}, {divisor})", ORDER_FUNCTION_CALL


def math_constrain(gen: Generator, block: Block) -> Fragment:
    value = gen.value_to_code(block, "VALUE", ORDER_NONE) or "0"
    low = gen.value_to_code(block, "LOW", ORDER_NONE) or "0"
    high = gen.value_to_code(block, "HIGH", ORDER_NONE) or "Inf"
    return f"min(max({value}, {low}), {high})", ORDER_FUNCTION_CALL


def math_random_int(gen: Generator, block: Block) -> Fragment:
    low = gen.value_to_code(block, "FROM", ORDER_NONE) or "0"
    high = gen.value_to_code(block, "TO", ORDER_NONE) or "0"
    return f"randi([{low}, {high}])", ORDER_FUNCTION_CALL


def math_random_float(gen: Generator, block: Block) -> Fragment:
    return "rand()", ORDER_FUNCTION_CALL


def math_atan2(gen: Generator, block: Block) -> Fragment:
    x = gen.value_to_code(block, "X", ORDER_NONE) or "0"
    y = gen.value_to_code(block, "Y", ORDER_NONE) or "0"
    return f"atan2({y}, {x}) / pi * 180", ORDER_MULTIPLICATIVE


EMITTERS = {
    "math_number": math_number,
    "math_arithmetic": math_arithmetic,
    "math_single": math_single,
    "math_round": math_single,
    "math_trig": math_single,
    "math_constant": math_constant,
    "math_number_property": math_number_property,
    "math_change": math_change,
    "math_on_list": math_on_list,
    "math_modulo": math_modulo,
    "math_constrain": math_constrain,
    "math_random_int": math_random_int,
    "math_random_float": math_random_float,
    "math_atan2": math_atan2,
}
