"""Procedure definitions, calls and early returns."""

from __future__ import annotations

from typing import List

from ..ast import Block
from ..errors import MalformedBlockError
from ..generator import Fragment, Generator
from ..precedence import ORDER_FUNCTION_CALL, ORDER_NONE


def procedure_definition(gen: Generator, block: Block) -> Fragment:
    """Store a ``function ... end`` definition; nothing goes in the body."""

    func_name = gen.procedure_name(block.field_value("NAME"))
    params = block.param_names()
    args = [gen.variable_name(param) for param in params]
    returns = block.kind == "procedures_defreturn"
    output = gen.output_variable() if returns else None

    workspace = gen.state.workspace
    globals_: List[str] = []
    for used in workspace.all_used_variables():
        if used not in params:
            globals_.append(gen.variable_name(used))
    for dev_name in workspace.developer_variables:
        name = gen.developer_variable(dev_name)
        if name not in globals_:
            globals_.append(name)
    indent = gen.indent
    global_line = f"{indent}global {' '.join(globals_)}\n" if globals_ else ""

    xfix1 = ""
    if gen.options.statement_prefix:
        xfix1 += gen.inject_id(gen.options.statement_prefix, block)
    if gen.options.statement_suffix:
        xfix1 += gen.inject_id(gen.options.statement_suffix, block)
    if xfix1:
        xfix1 = gen.prefix_lines(xfix1, indent)
    loop_trap = ""
    if gen.options.infinite_loop_trap:
        loop_trap = gen.prefix_lines(gen.inject_id(gen.options.infinite_loop_trap, block), indent)

    with gen.in_procedure(output):
        branch = gen.statement_to_code(block, "STACK")
        return_value = gen.value_to_code(block, "RETURN", ORDER_NONE) if returns else ""

    xfix2 = xfix1 if branch and return_value else ""
    if return_value:
        return_value = f"{indent}{output} = {return_value};\n"
    elif not branch:
        branch = gen.pass_line

    if returns:
        header = f"function {output} = {func_name}({', '.join(args)})\n"
        init = f"{indent}{output} = [];\n"
    else:
        header = f"function {func_name}({', '.join(args)})\n"
        init = ""
    code = header + global_line + init + xfix1 + loop_trap + branch + xfix2 + return_value + "end"
    gen.definitions["%" + func_name] = gen.scrub(block, code)
    return None


def _call_args(gen: Generator, block: Block) -> List[str]:
    count = max(len(block.param_names()), block.item_count("ARG"))
    return [gen.value_to_code(block, f"ARG{i}", ORDER_NONE) or "[]" for i in range(count)]


def procedures_callreturn(gen: Generator, block: Block) -> Fragment:
    func_name = gen.procedure_name(block.field_value("NAME"))
    return f"{func_name}({', '.join(_call_args(gen, block))})", ORDER_FUNCTION_CALL


def procedures_callnoreturn(gen: Generator, block: Block) -> Fragment:
    code, _ = procedures_callreturn(gen, block)
    return code + ";\n"


def _has_return_value(block: Block) -> bool:
    if "VALUE" in block.inputs:
        return True
    flag = block.extra.get("hasReturnValue", block.extra.get("value", False))
    if isinstance(flag, str):
        return flag.strip().lower() in ("1", "true")
    return bool(flag)


def procedures_ifreturn(gen: Generator, block: Block) -> Fragment:
    condition = gen.value_to_code(block, "CONDITION", ORDER_NONE) or "false"
    indent = gen.indent
    code = f"if {condition}\n"
    if gen.options.statement_suffix:
        code += gen.prefix_lines(gen.inject_id(gen.options.statement_suffix, block), indent)
    if _has_return_value(block):
        output = gen.procedure_stack[-1] if gen.procedure_stack else None
        if output is None:
            raise MalformedBlockError(block.kind, "return value outside a procedure that returns one")
        value = gen.value_to_code(block, "VALUE", ORDER_NONE) or "[]"
        code += f"{indent}{output} = {value};\n"
    code += f"{indent}return;\n"
    return code + "end\n"


EMITTERS = {
    "procedures_defreturn": procedure_definition,
    "procedures_defnoreturn": procedure_definition,
    "procedures_callreturn": procedures_callreturn,
    "procedures_callnoreturn": procedures_callnoreturn,
    "procedures_ifreturn": procedures_ifreturn,
}
