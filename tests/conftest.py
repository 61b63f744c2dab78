"""Shared pytest fixtures and helpers."""

import textwrap

import pytest

from Blocktave.transpile.ast import Workspace
from Blocktave.transpile.emitter import make_generator
from Blocktave.transpile.generator import GeneratorOptions


def deindent(code: str) -> str:
    """Remove common indentation and leading/trailing blank lines."""

    return textwrap.dedent(code).strip("\n")


@pytest.fixture
def src():
    """Return a helper that normalises indentation in code snippets."""

    return deindent


def started_generator(one_based_index: bool = True, **options):
    generator = make_generator(GeneratorOptions(**options))
    generator.init(Workspace(one_based_index=one_based_index))
    return generator


@pytest.fixture
def gen():
    """A generator in the middle of a one-based run over an empty workspace."""

    return started_generator()


@pytest.fixture
def zgen():
    """Same as ``gen`` but with zero-based positions."""

    return started_generator(one_based_index=False)
