from dataclasses import dataclass

import pytest

from novalang.context import Context
from novalang.errors import ErrorLevel


@dataclass
class Info:
    line: int


@dataclass
class Node:
    scope_path: str
    scope_depth: int


def test_add_and_lookup_global_var():
    ctx = Context()
    info = Info(line=3)
    assert ctx.add_global_var("x", info) is True
    assert ctx.lookup_global_var("x", 5) is info
    assert ctx.lookup_global_var("x", 3) is info


def test_lookup_before_definition_line_fails():
    ctx = Context()
    ctx.add_global_var("x", Info(line=10))
    assert ctx.lookup_global_var("x", 4) is None


def test_lookup_any_line():
    ctx = Context()
    info = Info(line=10)
    ctx.add_global_var("x", info)
    assert ctx.lookup_global_var("x", -1) is info
    assert ctx.lookup_global_var("x", None) is info


def test_lookup_unknown_var():
    ctx = Context()
    assert ctx.lookup_global_var("missing", -1) is None


def test_redefinition_on_later_line_rejected():
    ctx = Context()
    first = Info(line=2)
    ctx.add_global_var("x", first)
    assert ctx.add_global_var("x", Info(line=7)) is False
    assert ctx.add_global_var("x", Info(line=2)) is False
    assert ctx.lookup_global_var("x", -1) is first


def test_redefinition_on_earlier_line_replaces():
    ctx = Context()
    ctx.add_global_var("x", Info(line=9))
    earlier = Info(line=1)
    assert ctx.add_global_var("x", earlier) is True
    assert ctx.lookup_global_var("x", -1) is earlier


def test_add_global_var_none_raises():
    ctx = Context()
    with pytest.raises(ValueError):
        ctx.add_global_var("x", None)


def test_functions():
    ctx = Context()
    func = object()
    assert ctx.add_global_func("f", func) is True
    assert ctx.add_global_func("f", object()) is False
    assert ctx.lookup_global_func("f") is func
    assert ctx.lookup_global_func("g") is None
    assert ctx.lookup_global_func("") is None


def test_structs():
    ctx = Context()
    cls = object()
    assert ctx.add_global_struct("Point", cls) is True
    assert ctx.add_global_struct("Point", object()) is False
    assert ctx.lookup_global_struct("Point") is cls
    assert ctx.lookup_global_struct("Other") is None
    assert ctx.lookup_global_struct("") is None


def test_ast_nodes_keep_order():
    ctx = Context()
    nodes = [object(), object(), object()]
    for node in nodes:
        ctx.add_ast_node(node)
    assert ctx.ast == nodes


def test_errors_delegate():
    ctx = Context()
    assert ctx.has_errors() is False
    ctx.add_error(ErrorLevel.SYNTAX, "second", 2, "a/b.cpp", 20)
    ctx.add_error_front(ErrorLevel.LEXICAL, "first", 1, "a/b.cpp", 10)
    assert ctx.has_errors() is True
    assert [e.message for e in ctx.errors.errors] == ["first", "second"]


def test_print_errors_matches_error_string(capsys):
    ctx = Context()
    ctx.add_error(ErrorLevel.TYPE, "bad", 4, "x.cpp", 1)
    ctx.print_errors()
    assert capsys.readouterr().out == ctx.errors.get_error_string()


def test_print_error_records_and_prints(capsys):
    ctx = Context()
    ctx.print_error(ErrorLevel.RUNTIME, "boom", 6, "dir/f.cpp", 12)
    out = capsys.readouterr().out
    assert "boom" in out
    assert "f.cpp:12" in out
    assert ctx.has_errors()


def test_generate_local_var_name():
    ctx = Context()
    assert ctx.generate_local_var_name("x", Node(scope_path="15_23", scope_depth=2)) == "x_2_15_23"


def test_generate_local_var_name_without_node():
    ctx = Context()
    assert ctx.generate_local_var_name("y", None) == "y"


def test_generate_local_var_name_distinguishes_scopes():
    ctx = Context()
    a = ctx.generate_local_var_name("v", Node(scope_path="1", scope_depth=1))
    b = ctx.generate_local_var_name("v", Node(scope_path="2", scope_depth=1))
    assert a != b
    assert a.startswith("v_1_") and b.startswith("v_1_")