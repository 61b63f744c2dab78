"""Registry of shared MATLAB helper functions emitted once per script."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterator, List, Sequence, Union

from .names import Names, NameType

logger = logging.getLogger(__name__)

FUNCTION_NAME_PLACEHOLDER = "{{function_name}}"

_TWO_SPACE_INDENT = re.compile(r"^((?:  )*)  ", re.MULTILINE)


class HelperRegistry:
    """Lazily materialised helper definitions keyed by purpose.

    The first :meth:`provide` call for a key allocates a top-level name and
    stores the definition; later calls only return that name.  Definitions
    come back out in the order their keys were first requested.
    """

    def __init__(self, names: Names, indent: str = "  ") -> None:
        self.names = names
        self.indent = indent
        self._names: Dict[str, str] = {}
        self._definitions: Dict[str, str] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def provide(self, key: str, lines: Union[str, Sequence[str]]) -> str:
        """Return the helper name for ``key``, registering ``lines`` on first use.

        ``lines`` is written with two-space indentation steps and uses
        :data:`FUNCTION_NAME_PLACEHOLDER` where the function name goes.
        """

        if key in self._names:
            return self._names[key]

        name = self.names.get_distinct_name(key, NameType.PROCEDURE)
        text = lines if isinstance(lines, str) else "\n".join(lines)
        text = text.strip().replace(FUNCTION_NAME_PLACEHOLDER, name)
        if self.indent != "  ":
            text = self._reindent(text)
        self._names[key] = name
        self._definitions[key] = text
        logger.debug("registered helper %s as %s", key, name)
        return name

    def _reindent(self, text: str) -> str:
        previous = None
        while previous != text:
            previous = text
            text = _TWO_SPACE_INDENT.sub(lambda m: m.group(1) + "\0", text)
        return text.replace("\0", self.indent)

    def definitions(self) -> Iterator[str]:
        yield from self._definitions.values()

    def keys(self) -> List[str]:
        return list(self._definitions)

    def clear(self) -> None:
        self._names.clear()
        self._definitions.clear()
