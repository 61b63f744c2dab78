"""Text blocks.  Text is a char row vector."""

from __future__ import annotations

import re
from typing import Tuple

from ..ast import Block
from ..generator import Fragment, Generator
from ..helpers import FUNCTION_NAME_PLACEHOLDER as FN
from ..precedence import ORDER_ATOMIC, ORDER_FUNCTION_CALL, ORDER_MEMBER, ORDER_NONE
from .lists import sublist

QUOTED_LITERAL = re.compile(r"^'(?:[^']|'')*'$")


def force_string(code: str) -> Tuple[str, float]:
    """Leave char literals alone and pass anything else through ``num2str``."""

    if QUOTED_LITERAL.match(code):
        return code, ORDER_ATOMIC
    return f"num2str({code})", ORDER_FUNCTION_CALL


def text(gen: Generator, block: Block) -> Fragment:
    value = str(block.field_value("TEXT", ""))
    if "\n" in value:
        return gen.multiline_quote(value), ORDER_ATOMIC
    return gen.quote(value), ORDER_ATOMIC


def text_multiline(gen: Generator, block: Block) -> Fragment:
    return gen.multiline_quote(str(block.field_value("TEXT", ""))), ORDER_ATOMIC


def text_join(gen: Generator, block: Block) -> Fragment:
    count = block.item_count("ADD")
    if count == 0:
        return "''", ORDER_ATOMIC
    if count == 1:
        element = gen.value_to_code(block, "ADD0", ORDER_NONE) or "''"
        return force_string(element)
    elements = [
        force_string(gen.value_to_code(block, f"ADD{i}", ORDER_NONE) or "''")[0]
        for i in range(count)
    ]
    return "[" + ", ".join(elements) + "]", ORDER_ATOMIC


def text_append(gen: Generator, block: Block) -> Fragment:
    var = gen.variable_name(block.field_value("VAR"))
    value = force_string(gen.value_to_code(block, "TEXT", ORDER_NONE) or "''")[0]
    return f"{var} = [num2str({var}), {value}];\n"


def text_length(gen: Generator, block: Block) -> Fragment:
    value = gen.value_to_code(block, "VALUE", ORDER_NONE) or "''"
    return f"numel({value})", ORDER_FUNCTION_CALL


def text_isEmpty(gen: Generator, block: Block) -> Fragment:
    value = gen.value_to_code(block, "VALUE", ORDER_NONE) or "''"
    return f"isempty({value})", ORDER_FUNCTION_CALL


def text_indexOf(gen: Generator, block: Block) -> Fragment:
    end = block.choice("END", ("FIRST", "LAST"))
    sub = gen.value_to_code(block, "FIND", ORDER_NONE) or "''"
    value = gen.value_to_code(block, "VALUE", ORDER_NONE) or "''"
    not_found = "0" if gen.one_based_index else "-1"
    pick = "positions(1)" if end == "FIRST" else "positions(end)"
    # An empty substring matches before the first or after the last char.
    empty = "1" if end == "FIRST" else "numel(text) + 1"
    if not gen.one_based_index:
        pick += " - 1"
        empty = "0" if end == "FIRST" else "numel(text)"
    fn = gen.provide_function(
        f"text_index_of_{end.lower()}",
        [
            f"function result = {FN}(text, sub)",
            "  if isempty(sub)",
            f"    result = {empty};",
            "    return;",
            "  end",
            "  positions = strfind(text, sub);",
            "  if isempty(positions)",
            f"    result = {not_found};",
            "  else",
            f"    result = {pick};",
            "  end",
            "end",
        ],
    )
    return f"{fn}({value}, {sub})", ORDER_FUNCTION_CALL


def text_charAt(gen: Generator, block: Block) -> Fragment:
    where = block.choice("WHERE", ("FIRST", "LAST", "FROM_START", "FROM_END", "RANDOM"), "FROM_START")
    value = gen.value_to_code(block, "VALUE", ORDER_NONE) or "''"
    if where == "RANDOM":
        fn = gen.provide_function(
            "text_random_letter",
            [
                f"function result = {FN}(text)",
                "  result = text(randi(numel(text)));",
                "end",
            ],
        )
        return f"{fn}({value})", ORDER_FUNCTION_CALL
    if gen.is_identifier(value):
        return f"{value}({gen.inline_index(block, where)})", ORDER_MEMBER
    fn = gen.provide_function(
        "text_char_at",
        [
            f"function result = {FN}(text, at)",
            "  if at <= 0",
            "    at = numel(text) + at;",
            "  end",
            "  result = text(at);",
            "end",
        ],
    )
    return f"{fn}({value}, {gen.position(block, where)})", ORDER_FUNCTION_CALL


def text_getSubstring(gen: Generator, block: Block) -> Fragment:
    return sublist(gen, block, "STRING", "''")


def text_changeCase(gen: Generator, block: Block) -> Fragment:
    case = block.choice("CASE", ("UPPERCASE", "LOWERCASE", "TITLECASE"))
    value = gen.value_to_code(block, "TEXT", ORDER_NONE) or "''"
    if case == "UPPERCASE":
        return f"upper({value})", ORDER_FUNCTION_CALL
    if case == "LOWERCASE":
        return f"lower({value})", ORDER_FUNCTION_CALL
    fn = gen.provide_function(
        "text_to_title_case",
        [
            f"function result = {FN}(text)",
            "  result = lower(text);",
            "  if isempty(result)",
            "    return;",
            "  end",
            "  starts = isletter(result) & ~[false, isletter(result(1:end - 1))];",
            "  result(starts) = upper(result(starts));",
            "end",
        ],
    )
    return f"{fn}({value})", ORDER_FUNCTION_CALL


def text_trim(gen: Generator, block: Block) -> Fragment:
    mode = block.choice("MODE", ("LEFT", "RIGHT", "BOTH"), "BOTH")
    value = gen.value_to_code(block, "TEXT", ORDER_NONE) or "''"
    if mode == "BOTH":
        return f"strtrim({value})", ORDER_FUNCTION_CALL
    if mode == "RIGHT":
        return f"deblank({value})", ORDER_FUNCTION_CALL
    return f"regexprep({value}, '^\\s+', '')", ORDER_FUNCTION_CALL


def text_print(gen: Generator, block: Block) -> Fragment:
    msg = gen.value_to_code(block, "TEXT", ORDER_NONE) or "''"
    return f"disp({msg});\n"


def text_prompt(gen: Generator, block: Block) -> Fragment:
    if block.kind == "text_prompt":
        msg = gen.quote(str(block.field_value("TEXT", "")))
    else:
        msg = gen.value_to_code(block, "TEXT", ORDER_NONE) or "''"
    code = f"input({msg}, 's')"
    if block.choice("TYPE", ("TEXT", "NUMBER"), "TEXT") == "NUMBER":
        code = f"str2double({code})"
    return code, ORDER_FUNCTION_CALL


def text_count(gen: Generator, block: Block) -> Fragment:
    haystack = gen.value_to_code(block, "TEXT", ORDER_NONE) or "''"
    needle = gen.value_to_code(block, "SUB", ORDER_NONE) or "''"
    fn = gen.provide_function(
        "text_count",
        [
            f"function result = {FN}(haystack, needle)",
            "  if isempty(needle)",
            "    result = numel(haystack) + 1;",
            "    return;",
            "  end",
            "  result = 0;",
            "  k = 1;",
            "  while k <= numel(haystack) - numel(needle) + 1",
            "    if strcmp(haystack(k:k + numel(needle) - 1), needle)",
            "      result = result + 1;",
            "      k = k + numel(needle);",
            "    else",
            "      k = k + 1;",
            "    end",
            "  end",
            "end",
        ],
    )
    return f"{fn}({haystack}, {needle})", ORDER_FUNCTION_CALL


def text_replace(gen: Generator, block: Block) -> Fragment:
    value = gen.value_to_code(block, "TEXT", ORDER_NONE) or "''"
    old = gen.value_to_code(block, "FROM", ORDER_NONE) or "''"
    new = gen.value_to_code(block, "TO", ORDER_NONE) or "''"
    return f"strrep({value}, {old}, {new})", ORDER_FUNCTION_CALL


def text_reverse(gen: Generator, block: Block) -> Fragment:
    value = gen.value_to_code(block, "TEXT", ORDER_NONE) or "''"
    return f"fliplr({value})", ORDER_FUNCTION_CALL


EMITTERS = {
    "text": text,
    "text_multiline": text_multiline,
    "text_join": text_join,
    "text_append": text_append,
    "text_length": text_length,
    "text_isEmpty": text_isEmpty,
    "text_indexOf": text_indexOf,
    "text_charAt": text_charAt,
    "text_getSubstring": text_getSubstring,
    "text_changeCase": text_changeCase,
    "text_trim": text_trim,
    "text_print": text_print,
    "text_prompt": text_prompt,
    "text_prompt_ext": text_prompt,
    "text_count": text_count,
    "text_replace": text_replace,
    "text_reverse": text_reverse,
}
