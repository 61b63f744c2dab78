from __future__ import annotations

"""User-facing helpers for the Blocktave MATLAB generator."""

__all__ = ["generate", "generate_file", "GeneratorOptions"]
__version__ = "0.1.0"

import pathlib
from typing import Any, Union

from Blocktave.transpile.ast import Workspace
from Blocktave.transpile.emitter import emit
from Blocktave.transpile.generator import GeneratorOptions
from Blocktave.transpile.parser import parse


def generate(workspace: Union[Workspace, str, bytes, dict, list], **options: Any) -> str:
    """Generate a MATLAB/Octave script.

    Parameters
    ----------
    workspace:
        A :class:`~Blocktave.transpile.ast.Workspace` or anything
        :func:`~Blocktave.transpile.parser.parse` accepts.
    **options:
        ``zero_based=True`` switches the block program to zero-based
        positions; every other keyword is forwarded to
        :class:`GeneratorOptions`.
    """

    zero_based = options.pop("zero_based", None)
    if not isinstance(workspace, Workspace):
        workspace = parse(workspace)
    if zero_based is not None:
        workspace.one_based_index = not zero_based
    return emit(workspace, GeneratorOptions(**options))


def generate_file(path: Union[str, pathlib.Path], **options: Any) -> str:
    """Read a serialised workspace from ``path`` and generate its script."""

    source = pathlib.Path(path).read_text(encoding="utf-8")
    return generate(source, **options)
