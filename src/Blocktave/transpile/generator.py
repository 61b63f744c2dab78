"""Core MATLAB code generator: rendering, scrubbing and the run lifecycle."""

from __future__ import annotations

import contextlib
import logging
import re
import textwrap
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .ast import SUPPRESS_PREFIX_SUFFIX, Block, Workspace
from .errors import MalformedBlockError, UnknownBlockKindError, UnknownFieldValueError
from .helpers import HelperRegistry
from .names import Names, NameType, matlab_reserved_words
from .precedence import (
    ORDER_ADDITIVE,
    ORDER_ATOMIC,
    ORDER_NONE,
    wrap,
)

logger = logging.getLogger(__name__)

Fragment = Union[str, Tuple[str, float], None]
Emitter = Callable[["Generator", Block], Fragment]

IMPORT_PATTERN = re.compile(r"^(import|pkg load)\s+\S+")
NUMBER_PATTERN = re.compile(r"^\s*-?\d+(\.\d+)?\s*$")
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z]\w*$")

# Declarations stored under this prefix are function definitions.
FUNCTION_KEY_PREFIX = "%"


@dataclass
class GeneratorOptions:
    """Knobs that shape the generated script.

    Parameters
    ----------
    indent:
        One indentation step.
    comment_wrap:
        Column at which block comments are wrapped.
    pass_statement:
        Placeholder written into empty branch bodies; empty disables it.
    statement_prefix, statement_suffix:
        Instrumentation code injected around each statement.  ``%1`` is
        replaced by the quoted block id.
    infinite_loop_trap:
        Code injected at the top of every loop body, ``%1`` as above.
    functions_last:
        Place procedure and helper definitions after the script body, as
        MATLAB local functions, instead of before it.
    reserved_words:
        Extra identifiers the generator must not hand out.
    """

    indent: str = "  "
    comment_wrap: int = 60
    pass_statement: str = "% pass"
    statement_prefix: Optional[str] = None
    statement_suffix: Optional[str] = None
    infinite_loop_trap: Optional[str] = None
    functions_last: bool = False
    reserved_words: List[str] = field(default_factory=list)


@dataclass
class RunState:
    """Everything one generation run accumulates."""

    workspace: Workspace
    names: Names
    helpers: HelperRegistry
    definitions: Dict[str, str] = field(default_factory=dict)
    loop_stack: List[Block] = field(default_factory=list)
    procedure_stack: List[Optional[str]] = field(default_factory=list)
    one_based_index: bool = True
    output_name: Optional[str] = None


class Generator:
    """Turns a :class:`Workspace` into MATLAB source.

    Emitters receive the generator and a block and return either a
    ``(code, order)`` pair for value blocks, a newline terminated string for
    statement blocks, or ``None`` when they stored their output as a
    definition themselves.
    """

    def __init__(
        self,
        emitters: Mapping[str, Emitter],
        options: Optional[GeneratorOptions] = None,
        names_factory: Optional[Callable[..., Names]] = None,
    ) -> None:
        self.emitters = emitters
        self.options = options or GeneratorOptions()
        self.names_factory = names_factory or Names
        self._state: Optional[RunState] = None

    # ------------------------------------------------------------------
    # Run state
    # ------------------------------------------------------------------
    @property
    def state(self) -> RunState:
        if self._state is None:
            raise RuntimeError("Generator.init() must be called before generating code")
        return self._state

    @property
    def initialised(self) -> bool:
        return self._state is not None

    @property
    def names(self) -> Names:
        return self.state.names

    @property
    def helpers(self) -> HelperRegistry:
        return self.state.helpers

    @property
    def definitions(self) -> Dict[str, str]:
        return self.state.definitions

    @property
    def loop_stack(self) -> List[Block]:
        return self.state.loop_stack

    @property
    def procedure_stack(self) -> List[Optional[str]]:
        return self.state.procedure_stack

    @property
    def one_based_index(self) -> bool:
        return self.state.one_based_index

    @property
    def indent(self) -> str:
        return self.options.indent

    @property
    def pass_line(self) -> str:
        if not self.options.pass_statement:
            return ""
        return self.options.indent + self.options.pass_statement + "\n"

    def init(self, workspace: Workspace) -> None:
        """Start a fresh run for ``workspace``."""

        reserved = matlab_reserved_words()
        reserved.update(workspace.reserved_words)
        reserved.update(self.options.reserved_words)
        names = self.names_factory()
        names.add_reserved(reserved)
        self._state = RunState(
            workspace=workspace,
            names=names,
            helpers=HelperRegistry(names, self.options.indent),
            one_based_index=workspace.one_based_index,
        )

        for variable in workspace.variables:
            names.get_name(variable.name, NameType.VARIABLE)
        for procedure in workspace.procedure_names():
            names.get_name(procedure, NameType.PROCEDURE)

        declared: List[str] = []
        for dev_name in workspace.developer_variables:
            declared.append(names.get_name(dev_name, NameType.DEVELOPER_VARIABLE))
        for used in workspace.all_used_variables():
            name = names.get_name(used, NameType.VARIABLE)
            if name not in declared:
                declared.append(name)

        if declared:
            lines: List[str] = []
            if workspace.has_procedures():
                lines.append("global " + " ".join(declared))
            lines.extend(f"{name} = [];" for name in declared)
            self.definitions["variables"] = "\n".join(lines)

        logger.debug(
            "initialised run: %d top blocks, %d variables, %s indexing",
            len(workspace.top_blocks),
            len(declared),
            "one-based" if workspace.one_based_index else "zero-based",
        )

    def finish(self, code: str) -> str:
        """Prepend declarations and helpers to ``code`` and end the run."""

        state = self.state
        imports: List[str] = []
        declarations: List[str] = []
        functions: List[str] = []
        for key, definition in state.definitions.items():
            if IMPORT_PATTERN.match(definition):
                imports.append(definition)
            elif key.startswith(FUNCTION_KEY_PREFIX):
                functions.append(definition)
            else:
                declarations.append(definition)
        functions.extend(state.helpers.definitions())

        if self.options.functions_last:
            preamble = "\n".join(imports) + "\n\n" + "\n\n".join(declarations)
            body = code
            if functions:
                body = body.rstrip("\n") + "\n\n\n" + "\n\n".join(functions) + "\n"
        else:
            preamble = "\n".join(imports) + "\n\n" + "\n\n".join(declarations + functions)
            body = code
        preamble = re.sub(r"\n\n+", "\n\n", preamble).rstrip("\n") + "\n\n\n"
        result = preamble + body
        if re.match(r"^\s*function\b", result):
            result = "1;\n\n" + result.lstrip("\n")

        logger.debug(
            "finished run: %d declarations, helpers: %s",
            len(state.definitions),
            ", ".join(state.helpers.keys()) or "none",
        )
        state.helpers.clear()
        state.names.reset()
        self._state = None
        return result

    def workspace_to_code(self, workspace: Workspace) -> str:
        """Generate the complete script for ``workspace``."""

        self.init(workspace)
        try:
            chunks: List[str] = []
            for block in workspace.ordered_top_blocks():
                line = self.block_to_code(block)
                if isinstance(line, tuple):
                    line = line[0]
                    if line:
                        line = self.scrub_naked_value(line)
                        if block.kind not in SUPPRESS_PREFIX_SUFFIX:
                            if self.options.statement_prefix:
                                line = self.inject_id(self.options.statement_prefix, block) + line
                            if self.options.statement_suffix:
                                line = line + self.inject_id(self.options.statement_suffix, block)
                if line:
                    chunks.append(line)
            code = self.finish("\n".join(chunks))
        finally:
            self._state = None

        code = re.sub(r"\A(?:[ \t]*\n)+", "", code)
        code = re.sub(r"[ \t]+$", "", code, flags=re.MULTILINE)
        return code.rstrip("\n") + "\n"

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _emit(self, block: Block) -> Fragment:
        emitter = self.emitters.get(block.kind)
        if emitter is None:
            raise UnknownBlockKindError(block.kind)
        return emitter(self, block)

    def block_to_code(
        self, block: Optional[Block], this_only: bool = False
    ) -> Union[str, Tuple[str, float]]:
        """Generate code for ``block`` and, unless ``this_only``, its successors."""

        if block is None:
            return ""
        if not block.enabled:
            return "" if this_only else self.block_to_code(block.next)

        code = self._emit(block)
        if code is None:
            return ""
        if isinstance(code, tuple):
            text, order = code
            return self.scrub(block, text, this_only), order
        if block.kind not in SUPPRESS_PREFIX_SUFFIX:
            if self.options.statement_prefix:
                code = self.inject_id(self.options.statement_prefix, block) + code
            if self.options.statement_suffix:
                code = code + self.inject_id(self.options.statement_suffix, block)
        return self.scrub(block, code, this_only)

    def render(
        self, block: Optional[Block], outer: float, default: str = ""
    ) -> Tuple[str, float]:
        """Render a value block for a slot that binds at ``outer``.

        Returns the code, parenthesised when the precedence rule asks for it,
        together with the order the caller should assume for it.
        """

        if block is None or not block.enabled:
            return default, ORDER_ATOMIC
        result = self._emit(block)
        if not isinstance(result, tuple):
            raise MalformedBlockError(block.kind, "statement block used where a value is expected")
        code, inner = result
        if not code:
            return default, ORDER_ATOMIC
        wrapped = wrap(code, outer, inner)
        if wrapped != code:
            return wrapped, ORDER_ATOMIC
        return code, inner

    def value_to_code(self, block: Block, name: str, outer: float) -> str:
        """Code for value slot ``name`` of ``block``; ``''`` when unfilled."""

        code, _ = self.render(block.inputs.get(name), outer)
        return code

    def statement_to_code(self, block: Block, name: str) -> str:
        """Indented code for statement slot ``name`` of ``block``."""

        code = self.block_to_code(block.statements.get(name))
        if not isinstance(code, str):
            raise MalformedBlockError(block.kind, f"value block in statement input '{name}'")
        if code:
            code = self.prefix_lines(code, self.options.indent)
        return code

    def scrub(self, block: Block, code: str, this_only: bool = False) -> str:
        """Attach comments to ``code`` and append the following statements."""

        comment_code = ""
        if block.comment:
            comment = self.wrap_comment(block.comment)
            comment_code += self.prefix_lines(comment + "\n", "% ")
        for child in block.inputs.values():
            nested = self.all_nested_comments(child)
            if nested:
                comment_code += self.prefix_lines(nested, "% ")
        next_code = "" if this_only else self.block_to_code(block.next)
        return comment_code + code + next_code

    def scrub_naked_value(self, line: str) -> str:
        return line + ";\n"

    def all_nested_comments(self, block: Block) -> str:
        comments = [b.comment for b in block.descendants() if b.comment]
        if comments:
            comments.append("")
        return "\n".join(comments)

    def wrap_comment(self, text: str) -> str:
        width = max(self.options.comment_wrap - 3, 1)
        return "\n".join(textwrap.fill(line, width) for line in text.split("\n"))

    # ------------------------------------------------------------------
    # Text utilities
    # ------------------------------------------------------------------
    @staticmethod
    def prefix_lines(text: str, prefix: str) -> str:
        """Prefix every line of ``text``; a trailing newline stays bare."""

        return prefix + re.sub(r"\n(?!\Z)", "\n" + prefix, text)

    @staticmethod
    def quote(text: str) -> str:
        """MATLAB char vector literal for ``text``."""

        return "'" + text.replace("'", "''") + "'"

    def multiline_quote(self, text: str) -> str:
        """Char vector spanning several lines, joined with ``char(10)``."""

        lines = text.split("\n")
        if len(lines) == 1:
            return self.quote(text)
        return "[" + ", char(10), ".join(self.quote(line) for line in lines) + "]"

    def inject_id(self, message: str, block: Block) -> str:
        return message.replace("%1", self.quote(block.id))

    def add_loop_trap(self, branch: str, block: Block) -> str:
        """Wrap a loop body with the loop trap and statement hooks."""

        indent = self.options.indent
        if self.options.infinite_loop_trap:
            branch = self.prefix_lines(self.inject_id(self.options.infinite_loop_trap, block), indent) + branch
        if block.kind not in SUPPRESS_PREFIX_SUFFIX:
            if self.options.statement_suffix:
                branch = self.prefix_lines(self.inject_id(self.options.statement_suffix, block), indent) + branch
            if self.options.statement_prefix:
                branch = branch + self.prefix_lines(self.inject_id(self.options.statement_prefix, block), indent)
        return branch

    @staticmethod
    def format_number(value: float) -> str:
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)

    @staticmethod
    def is_number(code: str) -> bool:
        return bool(NUMBER_PATTERN.match(code))

    @staticmethod
    def is_identifier(code: str) -> bool:
        return bool(IDENTIFIER_PATTERN.match(code))

    # ------------------------------------------------------------------
    # Names and scopes
    # ------------------------------------------------------------------
    def variable_name(self, name: str) -> str:
        return self.names.get_name(name, NameType.VARIABLE)

    def procedure_name(self, name: str) -> str:
        return self.names.get_name(name, NameType.PROCEDURE)

    def distinct_variable(self, name: str) -> str:
        return self.names.get_distinct_name(name, NameType.VARIABLE)

    def developer_variable(self, name: str) -> str:
        return self.names.get_name(name, NameType.DEVELOPER_VARIABLE)

    def output_variable(self) -> str:
        """Name of the output argument shared by all procedures that return."""

        if self.state.output_name is None:
            self.state.output_name = self.distinct_variable("result")
        return self.state.output_name

    def provide_function(self, key: str, lines) -> str:
        return self.helpers.provide(key, lines)

    @contextlib.contextmanager
    def in_loop(self, block: Block) -> Iterator[None]:
        self.loop_stack.append(block)
        try:
            yield
        finally:
            self.loop_stack.pop()

    @contextlib.contextmanager
    def in_procedure(self, output: Optional[str]) -> Iterator[None]:
        self.procedure_stack.append(output)
        try:
            yield
        finally:
            self.procedure_stack.pop()

    # ------------------------------------------------------------------
    # Index arithmetic
    # ------------------------------------------------------------------
    def get_adjusted_int(
        self, block: Block, name: str, delta: int = 0, negate: bool = False
    ) -> str:
        """Position from slot ``name`` shifted by ``delta``.

        Literal positions are folded; anything else is wrapped in ``fix`` so
        fractional positions truncate toward zero.  An unfilled slot means the
        first position of the active indexing mode.
        """

        default = "1" if self.one_based_index else "0"
        outer = ORDER_ADDITIVE if delta else ORDER_NONE
        at = self.value_to_code(block, name, outer) or default

        if self.is_number(at):
            value = int(float(at)) + delta
            if negate:
                value = -value
            return str(value)

        if delta > 0:
            at = f"fix({at} + {delta})"
        elif delta < 0:
            at = f"fix({at} - {-delta})"
        else:
            at = f"fix({at})"
        if negate:
            at = "-" + at
        return at

    def index_from_start(self, block: Block, name: str = "AT") -> str:
        """One-based MATLAB index for a FROM_START position."""

        return self.get_adjusted_int(block, name, 0 if self.one_based_index else 1)

    def offset_from_end(self, block: Block, name: str = "AT") -> str:
        """Non-positive offset for a FROM_END position; ``0`` is the last item."""

        return self.get_adjusted_int(block, name, -1 if self.one_based_index else 0, negate=True)

    @staticmethod
    def from_end(offset: str) -> str:
        """Turn an offset from :meth:`offset_from_end` into an ``end`` index."""

        if offset in ("0", "-0"):
            return "end"
        if Generator.is_number(offset):
            value = int(offset)
            if value < 0:
                return f"end - {-value}"
            return f"end + {value}"
        if offset.startswith("-"):
            return f"end - {offset[1:]}"
        return f"end + {offset}"

    def position(self, block: Block, where: str, name: str = "AT", field_name: str = "WHERE") -> str:
        """Position argument for a helper function.

        Values ``>= 1`` count from the start, values ``<= 0`` count back from
        the end with ``0`` meaning the last item.
        """

        if where == "FIRST":
            return "1"
        if where == "LAST":
            return "0"
        if where == "FROM_START":
            return self.index_from_start(block, name)
        if where == "FROM_END":
            return self.offset_from_end(block, name)
        raise UnknownFieldValueError(block.kind, field_name, where)

    def inline_index(self, block: Block, where: str, name: str = "AT", field_name: str = "WHERE") -> str:
        """Index expression usable directly inside ``x(...)`` or ``x{...}``."""

        if where == "FIRST":
            return "1"
        if where == "LAST":
            return "end"
        if where == "FROM_START":
            return self.index_from_start(block, name)
        if where == "FROM_END":
            return self.from_end(self.offset_from_end(block, name))
        raise UnknownFieldValueError(block.kind, field_name, where)


__all__ = [
    "Emitter",
    "Fragment",
    "Generator",
    "GeneratorOptions",
    "RunState",
]
