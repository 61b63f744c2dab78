"""Block tree definitions shared by the parser and the generator."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from .errors import MalformedBlockError, UnknownFieldValueError

_MISSING = object()


@dataclass
class Block:
    """One block of the program tree.

    Parameters
    ----------
    kind:
        Block type tag such as ``"math_arithmetic"``.
    fields:
        Literal field values keyed by field name.  Variable fields hold the
        variable *name*, not its id.
    inputs:
        Value slots holding a child expression block.  Missing keys are
        unfilled slots.
    statements:
        Statement slots holding the first block of a nested sequence.
    next:
        The statement that follows this one.
    extra:
        Mutation state (item counts, procedure parameters, ...).
    """

    kind: str
    id: str = ""
    fields: Dict[str, Any] = field(default_factory=dict)
    inputs: Dict[str, "Block"] = field(default_factory=dict)
    statements: Dict[str, "Block"] = field(default_factory=dict)
    next: Optional["Block"] = None
    comment: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    enabled: bool = True
    x: float = 0
    y: float = 0

    def field_value(self, name: str, default: Any = _MISSING) -> Any:
        """Return field ``name`` or raise :class:`MalformedBlockError`."""

        if name in self.fields:
            return self.fields[name]
        if default is _MISSING:
            raise MalformedBlockError(self.kind, f"missing field '{name}'")
        return default

    def choice(
        self, name: str, choices: Sequence[str] | Mapping[str, Any], default: Any = _MISSING
    ) -> str:
        """Return an enumerated field value, rejecting anything unknown."""

        value = self.field_value(name, default)
        if value is None or value is _MISSING:
            raise MalformedBlockError(self.kind, f"missing field '{name}'")
        value = str(value)
        if value not in choices:
            raise UnknownFieldValueError(self.kind, name, value)
        return value

    def children(self) -> Iterator["Block"]:
        """Yield direct value children, then nested statement heads."""

        yield from self.inputs.values()
        yield from self.statements.values()

    def descendants(self) -> Iterator["Block"]:
        """Yield this block and everything below it, ``next`` chains included."""

        stack: List[Block] = [self]
        while stack:
            block = stack.pop()
            yield block
            if block.next is not None:
                stack.append(block.next)
            stack.extend(reversed(list(block.children())))

    def item_count(self, prefix: str) -> int:
        """Number of numbered inputs ``prefix0``, ``prefix1``, ... the block has.

        Uses the mutation's item count and grows it to cover any filled
        input with a higher number.
        """

        count = int(self.extra.get("itemCount", self.extra.get("items", 0)) or 0)
        pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
        for name in list(self.inputs) + list(self.statements):
            match = pattern.match(name)
            if match:
                count = max(count, int(match.group(1)) + 1)
        return count

    def param_names(self) -> List[str]:
        """Parameter names declared or passed by a procedure block."""

        params = self.extra.get("params", [])
        names: List[str] = []
        for param in params:
            if isinstance(param, Mapping):
                names.append(str(param.get("name", "")))
            else:
                names.append(str(param))
        return names


@dataclass
class VariableModel:
    """A workspace variable."""

    name: str
    id: str = ""
    type: str = ""


@dataclass
class Workspace:
    """Top-level container handed to the generator."""

    top_blocks: List[Block] = field(default_factory=list)
    variables: List[VariableModel] = field(default_factory=list)
    developer_variables: List[str] = field(default_factory=list)
    one_based_index: bool = True
    reserved_words: List[str] = field(default_factory=list)

    def ordered_top_blocks(self) -> List[Block]:
        """Top blocks sorted by position, top to bottom then left to right."""

        return sorted(self.top_blocks, key=lambda block: (block.y, block.x))

    def all_blocks(self) -> Iterator[Block]:
        for top in self.top_blocks:
            yield from top.descendants()

    def all_used_variables(self) -> List[str]:
        """Names of variables referenced by any block, in discovery order."""

        seen: List[str] = []
        for block in self.all_blocks():
            names: List[str] = []
            if block.kind in PROCEDURE_DEFINITION_KINDS:
                names.extend(block.param_names())
            elif "VAR" in block.fields:
                names.append(str(block.fields["VAR"]))
            for name in names:
                if name and name not in seen:
                    seen.append(name)
        return seen

    def procedure_names(self) -> List[str]:
        return [
            str(block.field_value("NAME"))
            for block in self.all_blocks()
            if block.kind in PROCEDURE_DEFINITION_KINDS
        ]

    def has_procedures(self) -> bool:
        return bool(self.procedure_names())


PROCEDURE_DEFINITION_KINDS = frozenset({"procedures_defreturn", "procedures_defnoreturn"})

BLOCK_KINDS = frozenset(
    {
        # colour
        "colour_picker",
        "colour_random",
        "colour_rgb",
        "colour_blend",
        # lists
        "lists_create_empty",
        "lists_create_with",
        "lists_repeat",
        "lists_length",
        "lists_isEmpty",
        "lists_indexOf",
        "lists_getIndex",
        "lists_setIndex",
        "lists_getSublist",
        "lists_sort",
        "lists_split",
        "lists_reverse",
        # logic
        "controls_if",
        "controls_ifelse",
        "logic_compare",
        "logic_operation",
        "logic_negate",
        "logic_boolean",
        "logic_null",
        "logic_ternary",
        # loops
        "controls_repeat",
        "controls_repeat_ext",
        "controls_whileUntil",
        "controls_for",
        "controls_forEach",
        "controls_flow_statements",
        # math
        "math_number",
        "math_arithmetic",
        "math_single",
        "math_round",
        "math_trig",
        "math_constant",
        "math_number_property",
        "math_change",
        "math_on_list",
        "math_modulo",
        "math_constrain",
        "math_random_int",
        "math_random_float",
        "math_atan2",
        # procedures
        "procedures_defreturn",
        "procedures_defnoreturn",
        "procedures_callreturn",
        "procedures_callnoreturn",
        "procedures_ifreturn",
        # text
        "text",
        "text_multiline",
        "text_join",
        "text_append",
        "text_length",
        "text_isEmpty",
        "text_indexOf",
        "text_charAt",
        "text_getSubstring",
        "text_changeCase",
        "text_trim",
        "text_print",
        "text_prompt",
        "text_prompt_ext",
        "text_count",
        "text_replace",
        "text_reverse",
        # variables
        "variables_get",
        "variables_set",
        "variables_get_dynamic",
        "variables_set_dynamic",
    }
)

# Blocks that inject statement prefix/suffix hooks themselves.
SUPPRESS_PREFIX_SUFFIX = frozenset(
    {"controls_if", "controls_ifelse", "controls_flow_statements", "procedures_ifreturn"}
)
