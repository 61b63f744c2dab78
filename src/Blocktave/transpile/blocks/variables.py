"""Variable getters and setters."""

from __future__ import annotations

from ..ast import Block
from ..generator import Fragment, Generator
from ..precedence import ORDER_ATOMIC, ORDER_NONE


def variables_get(gen: Generator, block: Block) -> Fragment:
    return gen.variable_name(block.field_value("VAR")), ORDER_ATOMIC


def variables_set(gen: Generator, block: Block) -> Fragment:
    value = gen.value_to_code(block, "VALUE", ORDER_NONE) or "0"
    return f"{gen.variable_name(block.field_value('VAR'))} = {value};\n"


EMITTERS = {
    "variables_get": variables_get,
    "variables_set": variables_set,
    "variables_get_dynamic": variables_get,
    "variables_set_dynamic": variables_set,
}
