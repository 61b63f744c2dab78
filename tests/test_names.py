"""Identifier allocation."""

from __future__ import annotations

from Blocktave.transpile.names import MAX_NAME_LENGTH, Names, NameType, matlab_reserved_words


def test_get_name_is_stable_per_type() -> None:
    names = Names()
    assert names.get_name("foo", NameType.VARIABLE) == "foo"
    assert names.get_name("foo", NameType.VARIABLE) == "foo"


def test_types_share_one_namespace() -> None:
    names = Names()
    assert names.get_name("x", NameType.VARIABLE) == "x"
    assert names.get_name("x", NameType.PROCEDURE) == "x2"


def test_distinct_names_never_repeat() -> None:
    names = Names()
    assert names.get_distinct_name("count", NameType.VARIABLE) == "count"
    assert names.get_distinct_name("count", NameType.VARIABLE) == "count2"
    assert names.get_distinct_name("count", NameType.VARIABLE) == "count3"


def test_reserved_words_are_avoided() -> None:
    names = Names(matlab_reserved_words())
    assert names.get_name("end", NameType.VARIABLE) == "end2"
    assert names.get_name("disp", NameType.PROCEDURE) == "disp2"
    assert names.get_name("i", NameType.VARIABLE) == "i"


def test_safe_name_produces_legal_identifiers() -> None:
    assert Names.safe_name("my var!") == "my_var_"
    assert Names.safe_name("2fast") == "my_2fast"
    assert Names.safe_name("") == "unnamed"
    assert len(Names.safe_name("a" * 100)) == MAX_NAME_LENGTH


def test_reset_forgets_allocations() -> None:
    names = Names()
    names.get_distinct_name("tmp", NameType.VARIABLE)
    names.reset()
    assert names.get_distinct_name("tmp", NameType.VARIABLE) == "tmp"


def test_variable_prefix_applies_to_variables_only() -> None:
    names = Names(variable_prefix="v_")
    assert names.get_name("a", NameType.VARIABLE) == "v_a"
    assert names.get_name("a", NameType.VARIABLE) == "v_a"
    assert names.get_name("run", NameType.PROCEDURE) == "run"


def test_add_reserved_affects_later_allocations() -> None:
    names = Names()
    names.add_reserved(["plot"])
    assert names.get_name("plot", NameType.VARIABLE) == "plot2"


def test_numbered_long_names_stay_within_limit() -> None:
    names = Names()
    first = names.get_distinct_name("a" * 100, NameType.VARIABLE)
    second = names.get_distinct_name("a" * 100, NameType.VARIABLE)
    assert len(first) == len(second) == MAX_NAME_LENGTH
    assert second == "a" * (MAX_NAME_LENGTH - 1) + "2"
    prefixed = Names(variable_prefix="v_").get_distinct_name("b" * 100, NameType.VARIABLE)
    assert len(prefixed) == MAX_NAME_LENGTH
