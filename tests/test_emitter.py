"""Unit tests covering whole-script emission."""

from __future__ import annotations

import pytest

from Blocktave.transpile.ast import BLOCK_KINDS
from Blocktave.transpile.emitter import EMITTERS, emit, make_generator
from Blocktave.transpile.errors import UnknownBlockKindError

from blockfactory import assign, block, chain, get, items, num, program


def random_pick_program():
    pick = block("lists_getIndex", {"MODE": "GET", "WHERE": "RANDOM"}, {"VALUE": get("L")})
    return program(assign("x", pick))


def test_every_block_kind_has_an_emitter() -> None:
    assert set(EMITTERS) == set(BLOCK_KINDS)


def test_emit_running_total(src) -> None:
    loop = block(
        "controls_forEach",
        {"VAR": "x"},
        {"LIST": items(num(1), num(2), num(3))},
        {"DO": block("math_change", {"VAR": "total"}, {"DELTA": get("x")})},
    )
    show = block("text_print", inputs={"TEXT": get("total")})
    code = emit(program(chain(assign("total", num(0)), loop, show)))
    assert code == src(
        """
        total = [];
        x = [];


        total = 0;
        x_list = {1, 2, 3};
        for x_index = 1:numel(x_list)
          x = x_list{x_index};
          if ~isnumeric(total) || isempty(total)
            total = 0;
          end
          total = total + x;
        end
        disp(total);
        """
    ) + "\n"


def test_helpers_are_placed_before_the_body() -> None:
    code = emit(random_pick_program())
    assert code.index("function result = lists_random_item(myList)") < code.index(
        "x = lists_random_item(L);"
    )


def test_runs_are_independent() -> None:
    first = emit(random_pick_program())
    assert emit(random_pick_program()) == first
    assert "lists_random_item" not in emit(program(assign("x", num(1))))


def test_generator_is_reusable() -> None:
    generator = make_generator()
    first = generator.workspace_to_code(random_pick_program())
    assert not generator.initialised
    assert generator.workspace_to_code(random_pick_program()) == first


def test_unknown_block_kind() -> None:
    with pytest.raises(UnknownBlockKindError) as excinfo:
        emit(program(block("robot_dance")))
    assert excinfo.value.kind == "robot_dance"


def test_failed_run_leaves_generator_idle() -> None:
    generator = make_generator()
    with pytest.raises(UnknownBlockKindError):
        generator.workspace_to_code(program(block("robot_dance")))
    assert not generator.initialised


def statement_blocks():
    return [
        assign("x", num(1)),
        block("text_print", inputs={"TEXT": get("x")}),
        block("text_append", {"VAR": "s"}, {"TEXT": get("x")}),
        block("math_change", {"VAR": "x"}, {"DELTA": num(2)}),
        block("lists_setIndex", {"MODE": "SET", "WHERE": "RANDOM"}, {"LIST": get("L"), "TO": num(5)}),
        block("lists_getIndex", {"MODE": "REMOVE", "WHERE": "LAST"}, {"VALUE": get("L")}),
        block("controls_if", inputs={"IF0": get("x")}, statements={"DO0": assign("y", num(2))}),
        block("controls_repeat", {"TIMES": 2}),
        block("controls_forEach", {"VAR": "v"}, {"LIST": items(num(1))}),
        block("procedures_callnoreturn", {"NAME": "tick"}),
        block("procedures_ifreturn", inputs={"CONDITION": get("x")}),
    ]


def test_statement_fragments_end_in_one_newline(gen) -> None:
    for node in statement_blocks():
        fragment = gen.block_to_code(node, this_only=True)
        assert fragment.endswith("\n"), node.kind
        assert not fragment.endswith("\n\n"), node.kind


def test_statement_fragments_concatenate_like_a_chain() -> None:
    separate = make_generator()
    separate.init(program())
    pieces = [separate.block_to_code(node, this_only=True) for node in statement_blocks()]

    chained = make_generator()
    chained.init(program())
    assert chained.block_to_code(chain(*statement_blocks())) == "".join(pieces)
