"""List blocks.  Lists are cell row vectors."""

from __future__ import annotations

from typing import List, Tuple

from ..ast import Block
from ..generator import Fragment, Generator
from ..helpers import FUNCTION_NAME_PLACEHOLDER as FN
from ..precedence import ORDER_ATOMIC, ORDER_FUNCTION_CALL, ORDER_MEMBER, ORDER_NONE

WHERE_ALL = ("FIRST", "LAST", "FROM_START", "FROM_END", "RANDOM")


def _wrap_position(name: str, var: str = "at") -> List[str]:
    return [
        f"  if {var} <= 0",
        f"    {var} = numel({name}) + {var};",
        "  end",
    ]


def provide_random_item(gen: Generator) -> str:
    return gen.provide_function(
        "lists_random_item",
        [
            f"function result = {FN}(myList)",
            "  result = myList{randi(numel(myList))};",
            "end",
        ],
    )


def provide_sub_sequence(gen: Generator) -> str:
    """Slice helper shared by lists and text; ``<= 0`` counts from the end."""

    return gen.provide_function(
        "sub_sequence",
        [f"function result = {FN}(sequence, first, last)"]
        + _wrap_position("sequence", "first")
        + _wrap_position("sequence", "last")
        + ["  result = sequence(first:last);", "end"],
    )


def sublist(gen: Generator, block: Block, slot: str, default: str) -> Tuple[str, float]:
    """Shared slice emitter for ``lists_getSublist`` and ``text_getSubstring``."""

    where1 = block.choice("WHERE1", ("FIRST", "FROM_START", "FROM_END"))
    where2 = block.choice("WHERE2", ("LAST", "FROM_START", "FROM_END"))
    code, order = gen.render(block.inputs.get(slot), ORDER_NONE, default)
    if where1 == "FIRST" and where2 == "LAST":
        return code, order
    if gen.is_identifier(code):
        first = gen.inline_index(block, where1, "AT1", "WHERE1")
        last = gen.inline_index(block, where2, "AT2", "WHERE2")
        return f"{code}({first}:{last})", ORDER_MEMBER
    first = gen.position(block, where1, "AT1", "WHERE1")
    last = gen.position(block, where2, "AT2", "WHERE2")
    fn = provide_sub_sequence(gen)
    return f"{fn}({code}, {first}, {last})", ORDER_FUNCTION_CALL


def lists_create_empty(gen: Generator, block: Block) -> Fragment:
    return "{}", ORDER_ATOMIC


def lists_create_with(gen: Generator, block: Block) -> Fragment:
    elements = [
        gen.value_to_code(block, f"ADD{i}", ORDER_NONE) or "[]"
        for i in range(block.item_count("ADD"))
    ]
    return "{" + ", ".join(elements) + "}", ORDER_ATOMIC


def lists_repeat(gen: Generator, block: Block) -> Fragment:
    item = gen.value_to_code(block, "ITEM", ORDER_NONE) or "[]"
    times = gen.value_to_code(block, "NUM", ORDER_NONE) or "0"
    return f"repmat({{{item}}}, 1, {times})", ORDER_FUNCTION_CALL


def lists_length(gen: Generator, block: Block) -> Fragment:
    lst = gen.value_to_code(block, "VALUE", ORDER_NONE) or "{}"
    return f"numel({lst})", ORDER_FUNCTION_CALL


def lists_isEmpty(gen: Generator, block: Block) -> Fragment:
    lst = gen.value_to_code(block, "VALUE", ORDER_NONE) or "{}"
    return f"isempty({lst})", ORDER_FUNCTION_CALL


def lists_indexOf(gen: Generator, block: Block) -> Fragment:
    end = block.choice("END", ("FIRST", "LAST"))
    item = gen.value_to_code(block, "FIND", ORDER_NONE) or "[]"
    lst = gen.value_to_code(block, "VALUE", ORDER_NONE) or "{}"
    not_found = "0" if gen.one_based_index else "-1"
    found = "k" if gen.one_based_index else "k - 1"
    loop = "1:numel(myList)" if end == "FIRST" else "numel(myList):-1:1"
    fn = gen.provide_function(
        f"lists_index_of_{end.lower()}",
        [
            f"function result = {FN}(myList, item)",
            f"  result = {not_found};",
            f"  for k = {loop}",
            "    if isequal(myList{k}, item)",
            f"      result = {found};",
            "      return;",
            "    end",
            "  end",
            "end",
        ],
    )
    return f"{fn}({lst}, {item})", ORDER_FUNCTION_CALL


def _provide_get_item(gen: Generator) -> str:
    return gen.provide_function(
        "lists_get_item",
        [f"function result = {FN}(myList, at)"]
        + _wrap_position("myList")
        + ["  result = myList{at};", "end"],
    )


def _write_back() -> List[str]:
    return [
        "  myList(at) = [];",
        "  if ~isempty(inputname(1))",
        "    assignin('caller', inputname(1), myList);",
        "  end",
    ]


def _provide_remove_item(gen: Generator) -> str:
    return gen.provide_function(
        "lists_remove_item",
        [f"function result = {FN}(myList, at)"]
        + _wrap_position("myList")
        + ["  result = myList{at};"]
        + _write_back()
        + ["end"],
    )


def _provide_remove_random_item(gen: Generator) -> str:
    return gen.provide_function(
        "lists_remove_random_item",
        [
            f"function result = {FN}(myList)",
            "  at = randi(numel(myList));",
            "  result = myList{at};",
        ]
        + _write_back()
        + ["end"],
    )


def lists_getIndex(gen: Generator, block: Block) -> Fragment:
    mode = block.choice("MODE", ("GET", "GET_REMOVE", "REMOVE"), "GET")
    where = block.choice("WHERE", WHERE_ALL, "FROM_START")
    lst = gen.value_to_code(block, "VALUE", ORDER_NONE) or "{}"

    if mode == "GET":
        if where == "RANDOM":
            return f"{provide_random_item(gen)}({lst})", ORDER_FUNCTION_CALL
        if gen.is_identifier(lst):
            return f"{lst}{{{gen.inline_index(block, where)}}}", ORDER_MEMBER
        fn = _provide_get_item(gen)
        return f"{fn}({lst}, {gen.position(block, where)})", ORDER_FUNCTION_CALL

    if mode == "GET_REMOVE":
        if where == "RANDOM":
            return f"{_provide_remove_random_item(gen)}({lst})", ORDER_FUNCTION_CALL
        fn = _provide_remove_item(gen)
        return f"{fn}({lst}, {gen.position(block, where)})", ORDER_FUNCTION_CALL

    if gen.is_identifier(lst):
        if where == "RANDOM":
            return f"{lst}(randi(numel({lst}))) = [];\n"
        return f"{lst}({gen.inline_index(block, where)}) = [];\n"
    if where == "RANDOM":
        return f"{_provide_remove_random_item(gen)}({lst});\n"
    return f"{_provide_remove_item(gen)}({lst}, {gen.position(block, where)});\n"


def lists_setIndex(gen: Generator, block: Block) -> Fragment:
    mode = block.choice("MODE", ("SET", "INSERT"), "SET")
    where = block.choice("WHERE", WHERE_ALL, "FROM_START")
    lst = gen.value_to_code(block, "LIST", ORDER_NONE) or "{}"
    value = gen.value_to_code(block, "TO", ORDER_NONE) or "[]"

    code = ""
    if not gen.is_identifier(lst):
        list_var = gen.distinct_variable("tmp_list")
        code += f"{list_var} = {lst};\n"
        lst = list_var

    if mode == "SET":
        if where == "RANDOM":
            x_var = gen.distinct_variable("tmp_x")
            code += f"{x_var} = randi(numel({lst}));\n"
            return code + f"{lst}{{{x_var}}} = {value};\n"
        return code + f"{lst}{{{gen.inline_index(block, where)}}} = {value};\n"

    if where == "FIRST":
        return code + f"{lst} = [{{{value}}}, {lst}];\n"
    if where == "LAST":
        return code + f"{lst}{{end + 1}} = {value};\n"
    fn = gen.provide_function(
        "lists_insert_item",
        [f"function result = {FN}(myList, at, item)"]
        + _wrap_position("myList")
        + ["  result = [myList(1:at - 1), {item}, myList(at:end)];", "end"],
    )
    if where == "RANDOM":
        x_var = gen.distinct_variable("tmp_x")
        code += f"{x_var} = randi(numel({lst}));\n"
        return code + f"{lst} = {fn}({lst}, {x_var}, {value});\n"
    return code + f"{lst} = {fn}({lst}, {gen.position(block, where)}, {value});\n"


def lists_getSublist(gen: Generator, block: Block) -> Fragment:
    return sublist(gen, block, "LIST", "{}")


def lists_sort(gen: Generator, block: Block) -> Fragment:
    lst = gen.value_to_code(block, "LIST", ORDER_NONE) or "{}"
    sort_type = block.choice("TYPE", ("NUMERIC", "TEXT", "IGNORE_CASE"), "NUMERIC")
    direction = block.choice("DIRECTION", ("1", "-1"), "1")
    fn = gen.provide_function(
        "lists_sort",
        [
            f"function result = {FN}(myList, type, ascending)",
            "  n = numel(myList);",
            "  if strcmp(type, 'NUMERIC')",
            "    keys = zeros(1, n);",
            "    for k = 1:n",
            "      item = myList{k};",
            "      if isnumeric(item) && isscalar(item)",
            "        keys(k) = item;",
            "      else",
            "        value = str2double(item);",
            "        if isnan(value)",
            "          value = 0;",
            "        end",
            "        keys(k) = value;",
            "      end",
            "    end",
            "  else",
            "    keys = cell(1, n);",
            "    for k = 1:n",
            "      keys{k} = num2str(myList{k});",
            "    end",
            "    if strcmp(type, 'IGNORE_CASE')",
            "      keys = lower(keys);",
            "    end",
            "  end",
            "  if ascending",
            "    [~, order] = sort(keys);",
            "  else",
            "    [~, order] = sort(keys, 'descend');",
            "  end",
            "  result = myList(order);",
            "end",
        ],
    )
    ascending = "true" if direction == "1" else "false"
    return f"{fn}({lst}, {gen.quote(sort_type)}, {ascending})", ORDER_FUNCTION_CALL


def lists_split(gen: Generator, block: Block) -> Fragment:
    mode = block.choice("MODE", ("SPLIT", "JOIN"), "SPLIT")
    delimiter = gen.value_to_code(block, "DELIM", ORDER_NONE)
    if mode == "SPLIT":
        text = gen.value_to_code(block, "INPUT", ORDER_NONE) or "''"
        if delimiter:
            return f"strsplit({text}, {delimiter})", ORDER_FUNCTION_CALL
        return f"strsplit({text})", ORDER_FUNCTION_CALL
    lst = gen.value_to_code(block, "INPUT", ORDER_NONE) or "{}"
    delimiter = delimiter or "''"
    return (
        f"strjoin(cellfun(@num2str, {lst}, 'UniformOutput', false), {delimiter})",
        ORDER_FUNCTION_CALL,
    )


def lists_reverse(gen: Generator, block: Block) -> Fragment:
    lst = gen.value_to_code(block, "LIST", ORDER_NONE) or "{}"
    return f"fliplr({lst})", ORDER_FUNCTION_CALL


EMITTERS = {
    "lists_create_empty": lists_create_empty,
    "lists_create_with": lists_create_with,
    "lists_repeat": lists_repeat,
    "lists_length": lists_length,
    "lists_isEmpty": lists_isEmpty,
    "lists_indexOf": lists_indexOf,
    "lists_getIndex": lists_getIndex,
    "lists_setIndex": lists_setIndex,
    "lists_getSublist": lists_getSublist,
    "lists_sort": lists_sort,
    "lists_split": lists_split,
    "lists_reverse": lists_reverse,
}
