"""Command line behaviour."""

from __future__ import annotations

import json

import pytest

from Blocktave.__main__ import main


def write_workspace(tmp_path, payload) -> str:
    path = tmp_path / "workspace.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def indexing_payload():
    pick = {
        "type": "lists_getIndex",
        "fields": {"MODE": "GET", "WHERE": "FROM_START"},
        "inputs": {
            "VALUE": {"block": {"type": "variables_get", "fields": {"VAR": "L"}}},
            "AT": {"block": {"type": "math_number", "fields": {"NUM": 1}}},
        },
    }
    loop = {
        "type": "controls_repeat",
        "fields": {"TIMES": 2},
        "inputs": {
            "DO": {
                "block": {
                    "type": "variables_set",
                    "fields": {"VAR": "x"},
                    "inputs": {"VALUE": {"block": pick}},
                }
            }
        },
    }
    return {"blocks": {"blocks": [loop]}}


def test_writes_script_to_stdout(tmp_path, capsys) -> None:
    assert main([write_workspace(tmp_path, indexing_payload())]) == 0
    out = capsys.readouterr().out
    assert "for count = 1:2\n  x = L{1};\nend\n" in out


def test_writes_output_file(tmp_path) -> None:
    target = tmp_path / "out.m"
    assert main([write_workspace(tmp_path, indexing_payload()), "-o", str(target)]) == 0
    assert target.read_text(encoding="utf-8").endswith("end\n")


def test_zero_based_and_indent(tmp_path, capsys) -> None:
    path = write_workspace(tmp_path, indexing_payload())
    assert main([path, "--zero-based", "--indent", "4"]) == 0
    assert "for count = 1:2\n    x = L{2};\nend\n" in capsys.readouterr().out


def test_missing_file(tmp_path, capsys) -> None:
    assert main([str(tmp_path / "nope.json")]) == 1
    assert "cannot read" in capsys.readouterr().err


def test_invalid_json(tmp_path, capsys) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{oops", encoding="utf-8")
    assert main([str(path)]) == 1
    assert "not valid JSON" in capsys.readouterr().err


def test_negative_indent_is_rejected(tmp_path) -> None:
    with pytest.raises(SystemExit):
        main([write_workspace(tmp_path, indexing_payload()), "--indent", "-1"])
