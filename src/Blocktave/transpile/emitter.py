"""Translate Blocktave block trees into MATLAB/Octave scripts."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .ast import BLOCK_KINDS, Workspace
from .blocks import colour, lists, logic, loops, math, procedures, text, variables
from .generator import Emitter, Generator, GeneratorOptions

logger = logging.getLogger(__name__)

EMITTERS: Dict[str, Emitter] = {}
for _module in (colour, lists, logic, loops, math, procedures, text, variables):
    EMITTERS.update(_module.EMITTERS)

_missing = BLOCK_KINDS - set(EMITTERS)
if _missing:  # pragma: no cover - caught by the test suite
    raise ImportError(f"no emitter registered for block kinds: {sorted(_missing)}")


def make_generator(options: Optional[GeneratorOptions] = None) -> Generator:
    return Generator(EMITTERS, options)


def emit(workspace: Workspace, options: Optional[GeneratorOptions] = None) -> str:
    """Return the MATLAB script for ``workspace``.

    A fresh :class:`Generator` is built for every call so runs never share
    names, helpers or declarations.
    """

    logger.debug("emitting %d top blocks", len(workspace.top_blocks))
    return make_generator(options).workspace_to_code(workspace)
