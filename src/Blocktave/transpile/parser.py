"""Read Blockly's JSON workspace serialisation into a :class:`Workspace`."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Union

from .ast import Block, VariableModel, Workspace
from .errors import WorkspaceFormatError

logger = logging.getLogger(__name__)

# Statement slots per block kind; every other input holds a value.
_BRANCHES = re.compile(r"^(DO\d+|ELSE)$")
_LOOP_BODY = re.compile(r"^DO$")
_PROCEDURE_BODY = re.compile(r"^STACK$")
STATEMENT_INPUTS: Dict[str, re.Pattern] = {
    "controls_if": _BRANCHES,
    "controls_ifelse": _BRANCHES,
    "controls_repeat": _LOOP_BODY,
    "controls_repeat_ext": _LOOP_BODY,
    "controls_whileUntil": _LOOP_BODY,
    "controls_for": _LOOP_BODY,
    "controls_forEach": _LOOP_BODY,
    "procedures_defreturn": _PROCEDURE_BODY,
    "procedures_defnoreturn": _PROCEDURE_BODY,
}
MUTATION_ATTRIBUTE = re.compile(r'([A-Za-z_][\w-]*)\s*=\s*"([^"]*)"')

Source = Union[str, bytes, Mapping[str, Any], List[Any]]


def _mutation_to_dict(text: str) -> Dict[str, Any]:
    """Attributes of a legacy ``<mutation ...>`` string."""

    return {key: value for key, value in MUTATION_ATTRIBUTE.findall(text)}


def _comment_text(data: Mapping[str, Any]) -> Optional[str]:
    icons = data.get("icons")
    if isinstance(icons, Mapping):
        comment = icons.get("comment")
        if isinstance(comment, Mapping) and comment.get("text"):
            return str(comment["text"])
    comment = data.get("comment")
    if isinstance(comment, Mapping):
        comment = comment.get("text")
    return str(comment) if comment else None


def _resolve_variable(value: Any, variables: Mapping[str, str]) -> str:
    if isinstance(value, Mapping):
        if "id" in value and value["id"] in variables:
            return variables[value["id"]]
        if "name" in value:
            return str(value["name"])
        raise WorkspaceFormatError(f"unresolved variable reference {dict(value)!r}")
    if isinstance(value, str) and value in variables:
        return variables[value]
    return str(value)


def _connected_block(connection: Any, where: str) -> Optional[Mapping[str, Any]]:
    if connection is None:
        return None
    if not isinstance(connection, Mapping):
        raise WorkspaceFormatError(f"{where} must be an object, got {type(connection).__name__}")
    found = connection.get("block") or connection.get("shadow")
    if found is not None and not isinstance(found, Mapping):
        raise WorkspaceFormatError(f"{where} must hold a block object")
    return found


def parse_block(data: Any, variables: Optional[Mapping[str, str]] = None) -> Block:
    """Convert one serialised block (and everything below it) into a :class:`Block`.

    Parameters
    ----------
    data:
        The block object as produced by Blockly's JSON serialiser.
    variables:
        Mapping from variable id to name used to resolve ``VAR`` fields.
    """

    variables = variables or {}
    if not isinstance(data, Mapping):
        raise WorkspaceFormatError(f"block must be an object, got {type(data).__name__}")
    kind = data.get("type")
    if not isinstance(kind, str) or not kind:
        raise WorkspaceFormatError("block is missing its 'type'")

    extra = data.get("extraState", {})
    if isinstance(extra, str):
        extra = _mutation_to_dict(extra)
    elif not isinstance(extra, Mapping):
        raise WorkspaceFormatError(f"'{kind}' block has malformed extraState")
    extra = dict(extra)
    if isinstance(extra.get("params"), list):
        extra["params"] = [
            _resolve_variable(param, variables) if isinstance(param, Mapping) else str(param)
            for param in extra["params"]
        ]

    fields: Dict[str, Any] = {}
    raw_fields = data.get("fields", {})
    if not isinstance(raw_fields, Mapping):
        raise WorkspaceFormatError(f"'{kind}' block has malformed fields")
    for name, value in raw_fields.items():
        if name == "VAR" or isinstance(value, Mapping):
            value = _resolve_variable(value, variables)
        fields[name] = value
    if kind.startswith("procedures_call") and "NAME" not in fields and "name" in extra:
        fields["NAME"] = extra["name"]

    inputs: Dict[str, Block] = {}
    statements: Dict[str, Block] = {}
    raw_inputs = data.get("inputs", {})
    if not isinstance(raw_inputs, Mapping):
        raise WorkspaceFormatError(f"'{kind}' block has malformed inputs")
    for name, connection in raw_inputs.items():
        child = _connected_block(connection, f"input '{name}' of '{kind}'")
        if child is None:
            continue
        slots = STATEMENT_INPUTS.get(kind)
        target = statements if slots is not None and slots.match(name) else inputs
        target[name] = parse_block(child, variables)

    next_data = _connected_block(data.get("next"), f"next of '{kind}'")

    return Block(
        kind=kind,
        id=str(data.get("id", "")),
        fields=fields,
        inputs=inputs,
        statements=statements,
        next=parse_block(next_data, variables) if next_data is not None else None,
        comment=_comment_text(data),
        extra=extra,
        enabled=bool(data.get("enabled", True)) and not data.get("disabled", False),
        x=float(data.get("x", 0) or 0),
        y=float(data.get("y", 0) or 0),
    )


def _parse_variables(raw: Any) -> List[VariableModel]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise WorkspaceFormatError("'variables' must be a list")
    models: List[VariableModel] = []
    for entry in raw:
        if not isinstance(entry, Mapping) or "name" not in entry:
            raise WorkspaceFormatError(f"malformed variable entry {entry!r}")
        models.append(
            VariableModel(
                name=str(entry["name"]),
                id=str(entry.get("id", "")),
                type=str(entry.get("type", "") or ""),
            )
        )
    return models


def parse(source: Source, *, one_based_index: Optional[bool] = None) -> Workspace:
    """Parse a serialised workspace.

    ``source`` may be JSON text, the decoded workspace object, a list of
    top-level blocks, or a single block object.
    """

    data: Any = source
    if isinstance(source, (str, bytes)):
        try:
            data = json.loads(source)
        except json.JSONDecodeError as exc:
            raise WorkspaceFormatError(f"workspace is not valid JSON: {exc}") from exc

    variables: List[VariableModel] = []
    developer_variables: List[str] = []
    reserved_words: List[str] = []
    options: Dict[str, Any] = {}
    if isinstance(data, list):
        raw_blocks = data
    elif isinstance(data, Mapping) and "type" in data:
        raw_blocks = [data]
    elif isinstance(data, Mapping):
        variables = _parse_variables(data.get("variables"))
        developer_variables = [str(name) for name in data.get("developerVariables", [])]
        reserved_words = [str(word) for word in data.get("reservedWords", [])]
        if "oneBasedIndex" in data:
            options["one_based_index"] = bool(data["oneBasedIndex"])
        container = data.get("blocks", {})
        if isinstance(container, Mapping):
            raw_blocks = container.get("blocks", [])
        else:
            raw_blocks = container
    else:
        raise WorkspaceFormatError(f"unsupported workspace payload: {type(data).__name__}")

    if not isinstance(raw_blocks, list):
        raise WorkspaceFormatError("'blocks' must be a list")

    by_id = {model.id: model.name for model in variables if model.id}
    top_blocks = [parse_block(item, by_id) for item in raw_blocks]
    if one_based_index is not None:
        options["one_based_index"] = one_based_index

    logger.debug("parsed %d top blocks, %d variables", len(top_blocks), len(variables))
    return Workspace(
        top_blocks=top_blocks,
        variables=variables,
        developer_variables=developer_variables,
        reserved_words=reserved_words,
        **options,
    )
