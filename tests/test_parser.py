"""Unit tests for the Blockly JSON workspace reader."""

from __future__ import annotations

import json

import pytest

import Blocktave
from Blocktave.transpile.errors import WorkspaceFormatError
from Blocktave.transpile.parser import parse, parse_block


def counter_payload():
    return {
        "blocks": {
            "languageVersion": 0,
            "blocks": [
                {
                    "type": "variables_set",
                    "id": "set1",
                    "x": 10,
                    "y": 20,
                    "fields": {"VAR": {"id": "v1"}},
                    "inputs": {
                        "VALUE": {"block": {"type": "math_number", "fields": {"NUM": 5}}}
                    },
                    "next": {
                        "block": {
                            "type": "text_print",
                            "inputs": {
                                "TEXT": {"shadow": {"type": "text", "fields": {"TEXT": "hi"}}}
                            },
                        }
                    },
                }
            ],
        },
        "variables": [{"name": "count", "id": "v1"}],
    }


def test_parse_resolves_variables_and_chains() -> None:
    workspace = parse(json.dumps(counter_payload()))
    assert [model.name for model in workspace.variables] == ["count"]
    top = workspace.top_blocks[0]
    assert top.kind == "variables_set"
    assert top.fields["VAR"] == "count"
    assert top.inputs["VALUE"].fields["NUM"] == 5
    assert (top.x, top.y) == (10.0, 20.0)
    assert top.next.kind == "text_print"
    assert top.next.inputs["TEXT"].kind == "text"


def test_statement_inputs_are_separated() -> None:
    data = {
        "type": "controls_if",
        "inputs": {
            "IF0": {"block": {"type": "logic_boolean", "fields": {"BOOL": "TRUE"}}},
            "DO0": {"block": {"type": "text_print"}},
            "ELSE": {"block": {"type": "text_print"}},
        },
    }
    node = parse_block(data)
    assert set(node.inputs) == {"IF0"}
    assert set(node.statements) == {"DO0", "ELSE"}


def test_ternary_else_stays_a_value_input() -> None:
    def number(value):
        return {"block": {"type": "math_number", "fields": {"NUM": value}}}

    data = {
        "type": "logic_ternary",
        "inputs": {
            "IF": {"block": {"type": "logic_boolean", "fields": {"BOOL": "FALSE"}}},
            "THEN": number(1),
            "ELSE": number(2),
        },
    }
    node = parse_block(data)
    assert set(node.inputs) == {"IF", "THEN", "ELSE"}
    assert node.statements == {}

    assign = {"type": "variables_set", "fields": {"VAR": "x"}, "inputs": {"VALUE": {"block": data}}}
    assert "x = logic_ternary(false, 1, 2);\n" in Blocktave.generate([assign])


def test_loop_and_procedure_bodies_are_statements() -> None:
    loop = parse_block({"type": "controls_whileUntil", "inputs": {"DO": {"block": {"type": "text_print"}}}})
    assert set(loop.statements) == {"DO"}
    definition = parse_block(
        {"type": "procedures_defnoreturn", "inputs": {"STACK": {"block": {"type": "text_print"}}}}
    )
    assert set(definition.statements) == {"STACK"}


def test_legacy_mutation_string() -> None:
    node = parse_block({"type": "controls_if", "extraState": '<mutation elseif="1" else="1"></mutation>'})
    assert node.extra == {"elseif": "1", "else": "1"}


def test_procedure_extra_state() -> None:
    definition = parse_block(
        {
            "type": "procedures_defreturn",
            "fields": {"NAME": "twice"},
            "extraState": {"params": [{"name": "n", "id": "p1"}]},
        }
    )
    assert definition.param_names() == ["n"]
    call = parse_block(
        {"type": "procedures_callreturn", "extraState": {"name": "twice", "params": ["n"]}}
    )
    assert call.fields["NAME"] == "twice"
    assert call.param_names() == ["n"]


def test_comments_and_disabled_flags() -> None:
    node = parse_block(
        {"type": "text_print", "icons": {"comment": {"text": "say hi"}}, "enabled": False}
    )
    assert node.comment == "say hi"
    assert not node.enabled
    assert not parse_block({"type": "text_print", "disabled": True}).enabled
    assert parse_block({"type": "text_print", "comment": "legacy"}).comment == "legacy"


def test_accepts_lists_and_single_blocks() -> None:
    assert len(parse([{"type": "logic_null"}, {"type": "logic_null"}]).top_blocks) == 2
    assert parse({"type": "logic_null"}).top_blocks[0].kind == "logic_null"


def test_workspace_options() -> None:
    payload = {
        "blocks": {"blocks": []},
        "developerVariables": ["trace"],
        "reservedWords": ["plot"],
        "oneBasedIndex": False,
    }
    workspace = parse(payload)
    assert workspace.developer_variables == ["trace"]
    assert workspace.reserved_words == ["plot"]
    assert workspace.one_based_index is False
    assert parse(payload, one_based_index=True).one_based_index is True


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        42,
        {"blocks": {"blocks": {"type": "oops"}}},
        {"blocks": {"blocks": [{"fields": {}}]}},
        {"blocks": {"blocks": [{"type": "variables_get", "fields": {"VAR": {"id": "nope"}}}]}},
        {"variables": [{"id": "v1"}]},
        {"blocks": {"blocks": [{"type": "text_print", "inputs": {"TEXT": "hi"}}]}},
    ],
)
def test_malformed_payloads(payload) -> None:
    with pytest.raises(WorkspaceFormatError):
        parse(payload)


def test_generate_end_to_end() -> None:
    assert Blocktave.generate(counter_payload()) == "count = [];\n\n\ncount = 5;\ndisp('hi');\n"


def test_generate_file(tmp_path) -> None:
    path = tmp_path / "workspace.json"
    path.write_text(json.dumps(counter_payload()), encoding="utf-8")
    assert Blocktave.generate_file(path).endswith("disp('hi');\n")
