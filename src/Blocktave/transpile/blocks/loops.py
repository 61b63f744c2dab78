"""Loop blocks and break/continue."""

from __future__ import annotations

from ..ast import SUPPRESS_PREFIX_SUFFIX, Block
from ..generator import Fragment, Generator
from ..precedence import ORDER_LOGICAL_NOT, ORDER_NONE


def _loop_body(gen: Generator, block: Block, name: str = "DO") -> str:
    with gen.in_loop(block):
        branch = gen.statement_to_code(block, name)
    return gen.add_loop_trap(branch, block) or gen.pass_line


def controls_repeat(gen: Generator, block: Block) -> Fragment:
    if block.kind == "controls_repeat":
        repeats = str(block.field_value("TIMES"))
    else:
        repeats = gen.value_to_code(block, "TIMES", ORDER_NONE) or "0"
    if gen.is_number(repeats):
        repeats = str(int(float(repeats)))
    else:
        repeats = f"fix({repeats})"
    branch = _loop_body(gen, block)
    loop_var = gen.distinct_variable("count")
    return f"for {loop_var} = 1:{repeats}\n{branch}end\n"


def controls_whileUntil(gen: Generator, block: Block) -> Fragment:
    until = block.choice("MODE", ("WHILE", "UNTIL"), "WHILE") == "UNTIL"
    condition = gen.value_to_code(block, "BOOL", ORDER_LOGICAL_NOT if until else ORDER_NONE)
    condition = condition or "false"
    branch = _loop_body(gen, block)
    if until:
        condition = "~" + condition
    return f"while {condition}\n{branch}end\n"


def controls_for(gen: Generator, block: Block) -> Fragment:
    var = gen.variable_name(block.field_value("VAR"))
    start = gen.value_to_code(block, "FROM", ORDER_NONE) or "0"
    stop = gen.value_to_code(block, "TO", ORDER_NONE) or "0"
    step = gen.value_to_code(block, "BY", ORDER_NONE) or "1"
    branch = _loop_body(gen, block)

    if all(gen.is_number(code) for code in (start, stop, step)):
        first, last = float(start), float(stop)
        increment = abs(float(step))
        bounds = f"{gen.format_number(first)}:"
        if first > last:
            bounds += f"-{gen.format_number(increment)}:"
        elif increment != 1:
            bounds += f"{gen.format_number(increment)}:"
        bounds += gen.format_number(last)
        return f"for {var} = {bounds}\n{branch}end\n"

    code = ""
    if not gen.is_number(start) and not gen.is_identifier(start):
        start_var = gen.distinct_variable(f"{var}_start")
        code += f"{start_var} = {start};\n"
        start = start_var
    if not gen.is_number(stop) and not gen.is_identifier(stop):
        stop_var = gen.distinct_variable(f"{var}_end")
        code += f"{stop_var} = {stop};\n"
        stop = stop_var
    step_var = gen.distinct_variable(f"{var}_inc")
    if gen.is_number(step):
        code += f"{step_var} = {gen.format_number(abs(float(step)))};\n"
    else:
        code += f"{step_var} = abs({step});\n"
    code += f"if {start} > {stop}\n{gen.indent}{step_var} = -{step_var};\nend\n"
    return code + f"for {var} = {start}:{step_var}:{stop}\n{branch}end\n"


def controls_forEach(gen: Generator, block: Block) -> Fragment:
    var = gen.variable_name(block.field_value("VAR"))
    lst = gen.value_to_code(block, "LIST", ORDER_NONE) or "{}"
    branch = _loop_body(gen, block)
    code = ""
    if not gen.is_identifier(lst):
        list_var = gen.distinct_variable(f"{var}_list")
        code += f"{list_var} = {lst};\n"
        lst = list_var
    index_var = gen.distinct_variable(f"{var}_index")
    return (
        code
        + f"for {index_var} = 1:numel({lst})\n"
        + f"{gen.indent}{var} = {lst}{{{index_var}}};\n"
        + f"{branch}end\n"
    )


def controls_flow_statements(gen: Generator, block: Block) -> Fragment:
    flow = block.choice("FLOW", ("BREAK", "CONTINUE"))
    xfix = ""
    if gen.options.statement_suffix:
        xfix += gen.inject_id(gen.options.statement_suffix, block)
    if gen.options.statement_prefix and gen.loop_stack:
        loop = gen.loop_stack[-1]
        if loop.kind not in SUPPRESS_PREFIX_SUFFIX:
            xfix += gen.inject_id(gen.options.statement_prefix, loop)
    return xfix + ("break;\n" if flow == "BREAK" else "continue;\n")


EMITTERS = {
    "controls_repeat": controls_repeat,
    "controls_repeat_ext": controls_repeat,
    "controls_whileUntil": controls_whileUntil,
    "controls_for": controls_for,
    "controls_forEach": controls_forEach,
    "controls_flow_statements": controls_flow_statements,
}
