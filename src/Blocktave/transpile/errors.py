"""Exceptions raised while turning a block tree into MATLAB code."""

from __future__ import annotations


class GenerationError(ValueError):
    """Base class for every fatal generation error."""


class UnknownBlockKindError(GenerationError):
    """No emitter is registered for a block kind."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"MATLAB generator does not know how to generate code for block type '{kind}'")


class UnknownFieldValueError(GenerationError):
    """A field carries a value outside its enumeration."""

    def __init__(self, kind: str, field: str, value: object) -> None:
        self.kind = kind
        self.field = field
        self.value = value
        super().__init__(f"Unknown value {value!r} for field '{field}' of block '{kind}'")


class MalformedBlockError(GenerationError):
    """A block lacks structure that cannot be defaulted."""

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"Malformed '{kind}' block: {detail}")


class WorkspaceFormatError(GenerationError):
    """The serialised workspace does not have the expected shape."""
