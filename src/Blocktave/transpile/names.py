"""Collision-free MATLAB identifiers for variables, procedures and helpers."""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Iterable, Optional, Set

# MATLAB truncates identifiers longer than ``namelengthmax``.
MAX_NAME_LENGTH = 63


class NameType(str, Enum):
    VARIABLE = "VARIABLE"
    DEVELOPER_VARIABLE = "DEVELOPER_VARIABLE"
    PROCEDURE = "PROCEDURE"


class Names:
    """Default name allocator.

    ``get_name`` is stable: the same ``(name, type)`` pair always maps to the
    same identifier within a run.  ``get_distinct_name`` always hands out an
    identifier nobody else holds.  All types share one reverse table so a
    variable never collides with a procedure or helper.
    """

    def __init__(self, reserved_words: Iterable[str] = (), variable_prefix: str = "") -> None:
        self.reserved: Set[str] = {word for word in reserved_words if word}
        self.variable_prefix = variable_prefix
        self._db: Dict[NameType, Dict[str, str]] = {}
        self._taken: Set[str] = set()

    def reset(self) -> None:
        self._db = {}
        self._taken = set()

    def add_reserved(self, words: Iterable[str]) -> None:
        self.reserved.update(word for word in words if word)

    def _prefix(self, type_: NameType) -> str:
        if type_ in (NameType.VARIABLE, NameType.DEVELOPER_VARIABLE):
            return self.variable_prefix
        return ""

    def get_name(self, name: str, type_: NameType) -> str:
        """Return the identifier bound to ``name``, allocating it on first use."""

        type_db = self._db.setdefault(NameType(type_), {})
        if name in type_db:
            return self._prefix(type_) + type_db[name]
        safe = self.get_distinct_name(name, type_)
        type_db[name] = safe[len(self._prefix(type_)):]
        return safe

    def get_distinct_name(self, name: str, type_: NameType) -> str:
        """Return a fresh identifier derived from ``name``."""

        prefix = self._prefix(type_)
        safe = self.safe_name(name)
        suffix: Optional[int] = None
        while True:
            tail = "" if suffix is None else str(suffix)
            # The numbered result must still fit in namelengthmax.
            candidate = safe[: MAX_NAME_LENGTH - len(prefix) - len(tail)] + tail
            if candidate not in self._taken and candidate not in self.reserved:
                break
            suffix = 2 if suffix is None else suffix + 1
        self._taken.add(candidate)
        return prefix + candidate

    @staticmethod
    def safe_name(name: str) -> str:
        """Turn arbitrary text into a legal MATLAB identifier."""

        if not name:
            return "unnamed"
        safe = re.sub(r"[^A-Za-z0-9_]", "_", name.replace(" ", "_"))
        if not safe[0].isalpha():
            safe = "my_" + safe
        return safe[:MAX_NAME_LENGTH]


MATLAB_KEYWORDS = (
    "break,case,catch,classdef,continue,else,elseif,end,for,function,global,"
    "if,otherwise,parfor,persistent,return,spmd,switch,try,unwind_protect,"
    "while,do,until,endfunction,endif,endfor,endwhile"
)

# Builtins the generated code calls, plus names with special meaning.
MATLAB_BUILTINS = (
    "abs,acosd,ans,asind,assignin,atan2,atand,ceil,cell,cellfun,char,cosd,deblank,"
    "disp,double,eps,exp,false,fix,fliplr,floor,Inf,input,inputname,"
    "isempty,isequal,ischar,iscell,isletter,islogical,isnan,isnumeric,isprime,"
    "isscalar,isspace,log,log10,lower,max,mean,median,min,mod,NaN,num2cell,"
    "num2str,numel,pi,rand,randi,regexprep,repmat,round,sind,sort,sqrt,std,"
    "str2double,strcmp,strfind,strjoin,strrep,strsplit,strtrim,sum,tand,true,upper,"
    "varargin,varargout,zeros"
)


def matlab_reserved_words() -> Set[str]:
    words: Set[str] = set()
    for group in (MATLAB_KEYWORDS, MATLAB_BUILTINS):
        words.update(group.split(","))
    return words
