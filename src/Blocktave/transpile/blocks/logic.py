"""Logic blocks: conditionals, comparisons and boolean operators."""

from __future__ import annotations

from ..ast import Block
from ..generator import Fragment, Generator
from ..helpers import FUNCTION_NAME_PLACEHOLDER as FN
from ..precedence import (
    ORDER_ATOMIC,
    ORDER_FUNCTION_CALL,
    ORDER_LOGICAL_AND,
    ORDER_LOGICAL_NOT,
    ORDER_LOGICAL_OR,
    ORDER_NONE,
    ORDER_RELATIONAL,
)

COMPARISONS = {
    "EQ": "==",
    "NEQ": "~=",
    "LT": "<",
    "LTE": "<=",
    "GT": ">",
    "GTE": ">=",
}


def _branch_count(block: Block) -> int:
    count = 1 + int(block.extra.get("elseIfCount", block.extra.get("elseif", 0)) or 0)
    return max(count, block.item_count("IF"), block.item_count("DO"))


def _has_else(block: Block) -> bool:
    if block.kind == "controls_ifelse" or "ELSE" in block.statements:
        return True
    return bool(int(block.extra.get("hasElse", block.extra.get("else", 0)) or 0))


def controls_if(gen: Generator, block: Block) -> Fragment:
    prefix = gen.options.statement_prefix
    suffix = gen.options.statement_suffix
    code = ""
    if prefix:
        code += gen.inject_id(prefix, block)

    for n in range(_branch_count(block)):
        condition = gen.value_to_code(block, f"IF{n}", ORDER_NONE) or "false"
        branch = gen.statement_to_code(block, f"DO{n}")
        if suffix:
            branch = gen.prefix_lines(gen.inject_id(suffix, block), gen.indent) + branch
        keyword = "if" if n == 0 else "elseif"
        code += f"{keyword} {condition}\n{branch or gen.pass_line}"

    if _has_else(block) or suffix:
        branch = gen.statement_to_code(block, "ELSE")
        if suffix:
            branch = gen.prefix_lines(gen.inject_id(suffix, block), gen.indent) + branch
        code += f"else\n{branch or gen.pass_line}"
    return code + "end\n"


def logic_compare(gen: Generator, block: Block) -> Fragment:
    operator = COMPARISONS[block.choice("OP", COMPARISONS)]
    left = gen.value_to_code(block, "A", ORDER_RELATIONAL) or "0"
    right = gen.value_to_code(block, "B", ORDER_RELATIONAL) or "0"
    return f"{left} {operator} {right}", ORDER_RELATIONAL


def logic_operation(gen: Generator, block: Block) -> Fragment:
    op = block.choice("OP", ("AND", "OR"))
    operator, order = ("&&", ORDER_LOGICAL_AND) if op == "AND" else ("||", ORDER_LOGICAL_OR)
    left = gen.value_to_code(block, "A", order)
    right = gen.value_to_code(block, "B", order)
    if not left and not right:
        left = right = "false"
    else:
        # A missing operand must not change the result.
        default = "true" if op == "AND" else "false"
        left = left or default
        right = right or default
    return f"{left} {operator} {right}", order


def logic_negate(gen: Generator, block: Block) -> Fragment:
    arg = gen.value_to_code(block, "BOOL", ORDER_LOGICAL_NOT) or "true"
    return f"~{arg}", ORDER_LOGICAL_NOT


def logic_boolean(gen: Generator, block: Block) -> Fragment:
    value = block.choice("BOOL", ("TRUE", "FALSE"))
    return ("true" if value == "TRUE" else "false"), ORDER_ATOMIC


def logic_null(gen: Generator, block: Block) -> Fragment:
    return "[]", ORDER_ATOMIC


def logic_ternary(gen: Generator, block: Block) -> Fragment:
    condition = gen.value_to_code(block, "IF", ORDER_NONE) or "false"
    when_true = gen.value_to_code(block, "THEN", ORDER_NONE) or "[]"
    when_false = gen.value_to_code(block, "ELSE", ORDER_NONE) or "[]"
    fn = gen.provide_function(
        "logic_ternary",
        [
            f"function result = {FN}(condition, ifTrue, ifFalse)",
            "  if condition",
            "    result = ifTrue;",
            "  else",
            "    result = ifFalse;",
            "  end",
            "end",
        ],
    )
    return f"{fn}({condition}, {when_true}, {when_false})", ORDER_FUNCTION_CALL


EMITTERS = {
    "controls_if": controls_if,
    "controls_ifelse": controls_if,
    "logic_compare": logic_compare,
    "logic_operation": logic_operation,
    "logic_negate": logic_negate,
    "logic_boolean": logic_boolean,
    "logic_null": logic_null,
    "logic_ternary": logic_ternary,
}
