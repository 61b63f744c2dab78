"""Operator binding strengths and the parenthesisation rule.

Lower numbers bind tighter.  Values sharing an integer part belong to the
same class; the fractional part only distinguishes entries of the override
list.
"""

from __future__ import annotations

import math
from typing import FrozenSet, Tuple

ORDER_ATOMIC = 0  # literals, identifiers, [ ... ], { ... }
ORDER_COLLECTION = 1
ORDER_STRING_CONVERSION = 1
ORDER_MEMBER = 2.1  # x(1)  x{1}  s.f
ORDER_FUNCTION_CALL = 2.2  # f()
ORDER_EXPONENTIATION = 3  # ^
ORDER_UNARY_SIGN = 4  # + -
ORDER_BITWISE_NOT = 4
ORDER_LOGICAL_NOT = 4.1  # ~
ORDER_MULTIPLICATIVE = 5  # * /
ORDER_ADDITIVE = 6  # + -
ORDER_BITWISE_SHIFT = 7
ORDER_BITWISE_AND = 8
ORDER_BITWISE_XOR = 9
ORDER_BITWISE_OR = 10
ORDER_RELATIONAL = 11  # == ~= < <= > >=
ORDER_LOGICAL_AND = 13  # &&
ORDER_LOGICAL_OR = 14  # ||
ORDER_CONDITIONAL = 15
ORDER_LAMBDA = 16  # @(x) ...
ORDER_NONE = 99  # (...)


ORDER_OVERRIDES: FrozenSet[Tuple[float, float]] = frozenset(
    {
        # (foo()).bar -> foo().bar
        (ORDER_FUNCTION_CALL, ORDER_MEMBER),
        # (foo())() -> foo()()
        (ORDER_FUNCTION_CALL, ORDER_FUNCTION_CALL),
        # (foo.bar).baz -> foo.bar.baz
        (ORDER_MEMBER, ORDER_MEMBER),
        # (foo.bar)() -> foo.bar()
        (ORDER_MEMBER, ORDER_FUNCTION_CALL),
        # ~(~foo) -> ~~foo
        (ORDER_LOGICAL_NOT, ORDER_LOGICAL_NOT),
        # a && (b && c) -> a && b && c
        (ORDER_LOGICAL_AND, ORDER_LOGICAL_AND),
        # a || (b || c) -> a || b || c
        (ORDER_LOGICAL_OR, ORDER_LOGICAL_OR),
    }
)


def needs_parens(outer: float, inner: float) -> bool:
    """Whether code of order ``inner`` must be wrapped inside ``outer``."""

    outer_class = math.floor(outer)
    inner_class = math.floor(inner)
    if outer_class > inner_class:
        return False
    if outer_class == inner_class and outer_class in (ORDER_ATOMIC, ORDER_NONE):
        return False
    return (outer, inner) not in ORDER_OVERRIDES


def wrap(code: str, outer: float, inner: float) -> str:
    """Return ``code`` parenthesised when ``needs_parens`` says so."""

    if code and needs_parens(outer, inner):
        return f"({code})"
    return code
