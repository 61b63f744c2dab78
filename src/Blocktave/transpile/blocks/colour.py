"""Colour blocks.  A colour is a 1x3 vector of RGB fractions in [0, 1]."""

from __future__ import annotations

import re

from ..ast import Block
from ..errors import MalformedBlockError
from ..generator import Fragment, Generator
from ..helpers import FUNCTION_NAME_PLACEHOLDER as FN
from ..precedence import ORDER_FUNCTION_CALL, ORDER_MULTIPLICATIVE, ORDER_NONE

HEX_COLOUR = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


def colour_picker(gen: Generator, block: Block) -> Fragment:
    raw = str(block.field_value("COLOUR", "#000000"))
    match = HEX_COLOUR.match(raw.strip())
    if not match:
        raise MalformedBlockError(block.kind, f"invalid colour {raw!r}")
    red, green, blue = (int(part, 16) for part in match.groups())
    return f"[{red}, {green}, {blue}] / 255", ORDER_MULTIPLICATIVE


def colour_random(gen: Generator, block: Block) -> Fragment:
    return "rand(1, 3)", ORDER_FUNCTION_CALL


def colour_rgb(gen: Generator, block: Block) -> Fragment:
    red = gen.value_to_code(block, "RED", ORDER_NONE) or "0"
    green = gen.value_to_code(block, "GREEN", ORDER_NONE) or "0"
    blue = gen.value_to_code(block, "BLUE", ORDER_NONE) or "0"
    fn = gen.provide_function(
        "colour_rgb",
        [
            f"function result = {FN}(r, g, b)",
            "  result = min(100, max(0, [r, g, b])) / 100;",
            "end",
        ],
    )
    return f"{fn}({red}, {green}, {blue})", ORDER_FUNCTION_CALL


def colour_blend(gen: Generator, block: Block) -> Fragment:
    colour1 = gen.value_to_code(block, "COLOUR1", ORDER_NONE) or "[0, 0, 0]"
    colour2 = gen.value_to_code(block, "COLOUR2", ORDER_NONE) or "[0, 0, 0]"
    ratio = gen.value_to_code(block, "RATIO", ORDER_NONE) or "0"
    fn = gen.provide_function(
        "colour_blend",
        [
            f"function result = {FN}(colour1, colour2, ratio)",
            "  ratio = min(max(ratio, 0), 1);",
            "  result = colour1 * (1 - ratio) + colour2 * ratio;",
            "end",
        ],
    )
    return f"{fn}({colour1}, {colour2}, {ratio})", ORDER_FUNCTION_CALL


EMITTERS = {
    "colour_picker": colour_picker,
    "colour_random": colour_random,
    "colour_rgb": colour_rgb,
    "colour_blend": colour_blend,
}
